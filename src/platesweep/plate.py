"""Closed solids extruded from a :class:`~platesweep.outline.Plate`.

Every outline becomes a bottom ring at ``plate.bottom`` and a top ring at
``plate.bottom + plate.height``.  Holes are bridged into their parents
separately for the bottom and top sets, each ring is ear clipped into a
cap, and the side walls are stitched between matching bottom and top
vertices.  Vertices are laid out Y-up: outline point ``(x, y)`` lands at
``(x, elevation, y)``.
"""

from __future__ import annotations

import logging
from typing import List, Sequence

from platesweep.errors import (
    DEGENERATE_OUTLINE,
    PARTIAL_SOLID,
    BuildResult,
    Diagnostic,
    Severity,
)
from platesweep.mesh import GREEN, Color, single_group_mesh
from platesweep.nesting import Ring, merge_holes
from platesweep.outline import Plate
from platesweep.triangulator import triangulate
from platesweep.vecmath import Vec2, dist2

logger = logging.getLogger(__name__)

BOTTOM_ORDER = -1
TOP_ORDER = 1
MATCH_TOL = 1e-12


def _find_match(points: Sequence[Vec2], ring: Sequence[int], target: Vec2) -> int:
    for idx in ring:
        if dist2(target, points[idx]) < MATCH_TOL:
            return idx
    return -1


def _partial(outline: int, message: str) -> Diagnostic:
    diag = Diagnostic(PARTIAL_SOLID, message, Severity.WARNING, outline=outline)
    logger.warning(diag.format())
    return diag


def _caps(points: Sequence[Vec2], rings: Sequence[Ring], order: int,
          authored: Sequence[int], indices: List[int],
          diagnostics: List[Diagnostic]) -> None:
    for slot, ring in enumerate(rings):
        if not ring:
            continue
        outline = authored[slot]
        tri = triangulate(points, ring, order)
        for face in tri.faces:
            indices.extend(face.indices())
        if tri.dropped:
            side = "bottom" if order == BOTTOM_ORDER else "top"
            diag = Diagnostic(
                DEGENERATE_OUTLINE,
                f"{side} cap dropped {len(tri.dropped)} of {len(ring)} ring vertices",
                Severity.ERROR,
                outline=outline,
                dropped=list(tri.dropped),
            )
            logger.warning(diag.format())
            diagnostics.append(diag)


def _side_walls(points: Sequence[Vec2], bottoms: Sequence[Ring], tops: Sequence[Ring],
                authored: Sequence[int], indices: List[int],
                diagnostics: List[Diagnostic]) -> None:
    for slot, (bottom, top) in enumerate(zip(bottoms, tops)):
        outline = authored[slot]
        if len(bottom) != len(top):
            diagnostics.append(_partial(
                outline,
                f"bottom ring has {len(bottom)} vertices but top ring has "
                f"{len(top)}; side walls skipped"))
            continue
        count = len(bottom)
        unmatched = 0
        for ib in range(count):
            ix1 = bottom[ib]
            ix0 = bottom[(ib + 1) % count]
            ix2 = _find_match(points, top, points[ix1])
            ix3 = _find_match(points, top, points[ix0])
            if ix2 < 0 or ix3 < 0:
                unmatched += 1
                continue
            indices.extend((ix0, ix1, ix2))
            indices.extend((ix0, ix2, ix3))
        if unmatched:
            diagnostics.append(_partial(
                outline, f"{unmatched} wall quads had no matching top vertex"))


def build_plate(plate: Plate, name: str = "", color: Color = GREEN) -> BuildResult:
    """Build the closed solid for ``plate``.

    Outlines with fewer than three points are skipped.  Problems that only
    affect one outline are returned as diagnostics next to the mesh.
    """

    vertices: List[float] = []
    points: List[Vec2] = []
    bottoms: List[Ring] = []
    tops: List[Ring] = []
    authored: List[int] = []
    bottom = plate.bottom
    top_y = plate.bottom + plate.height

    for i, line in enumerate(plate.outlines):
        count = len(line)
        if count < 3:
            logger.debug("skipping outline %d with %d points", i, count)
            continue
        authored.append(i)
        ofs = len(points)
        for x, y in line:
            points.append((x, y))
            vertices.extend((x, bottom, y))
        bottoms.append(list(range(ofs, ofs + count)))

        ofs = len(points)
        for x, y in line:
            points.append((x, y))
            vertices.extend((x, top_y, y))
        tops.append([ofs + count - j - 1 for j in range(count)])

    merge_holes(points, bottoms, BOTTOM_ORDER)
    merge_holes(points, tops, TOP_ORDER)

    indices: List[int] = []
    diagnostics: List[Diagnostic] = []
    _caps(points, bottoms, BOTTOM_ORDER, authored, indices, diagnostics)
    _caps(points, tops, TOP_ORDER, authored, indices, diagnostics)
    _side_walls(points, bottoms, tops, authored, indices, diagnostics)

    mesh = single_group_mesh(name, vertices, indices, color)
    logger.debug("plate '%s': %d outlines, %d vertices, %d triangles",
                 name, len(bottoms), mesh.vertex_count, mesh.triangle_count)
    return BuildResult(mesh, diagnostics)


__all__ = ["BOTTOM_ORDER", "TOP_ORDER", "build_plate"]
