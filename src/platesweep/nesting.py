"""Hole detection and bridging for sets of outline rings.

All rings of one set (every bottom ring, or every top ring) are compared
pairwise.  A ring nested inside an odd number of others is a hole; each
hole is spliced into its parent through a zero width bridge so the parent
can be ear clipped as a single polygon.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Dict, List, MutableSequence, Optional, Sequence

from platesweep.triangulator import FAR, Triangulation, polygon_contains, triangulate
from platesweep.vecmath import dist2

logger = logging.getLogger(__name__)

Ring = List[int]


@dataclass
class NestInfo:
    parent: Optional[int] = None
    depth: int = 0

    @property
    def is_hole(self) -> bool:
        return self.depth % 2 == 1


def resolve_nesting(points: Sequence[Sequence[float]], rings: MutableSequence[Ring],
                    order: int) -> List[NestInfo]:
    """Return parent and depth for every ring in ``rings``.

    Rings with fewer than three entries are emptied in place; nothing else
    is modified.
    """

    for i, ring in enumerate(rings):
        if len(ring) < 3:
            rings[i] = []

    nest = [NestInfo() for _ in rings]
    cache: Dict[int, Triangulation] = {}

    def _tri(i: int) -> Triangulation:
        if i not in cache:
            cache[i] = triangulate(points, rings[i], order)
        return cache[i]

    for outer in range(len(rings)):
        if not rings[outer]:
            continue
        for inner in range(len(rings)):
            if inner == outer or not rings[inner]:
                continue
            if nest[outer].depth < nest[inner].depth:
                continue
            outer_tri = _tri(outer)
            inner_tri = _tri(inner)
            if (inner_tri.area < outer_tri.area
                    and polygon_contains(outer_tri.faces, inner_tri.faces, points)):
                nest[inner].parent = outer
                nest[inner].depth += 1
                logger.debug("ring %d nested in ring %d (depth %d)",
                             inner, outer, nest[inner].depth)
    return nest


def closest_pair(points: Sequence[Sequence[float]], hole: Sequence[int],
                 parent: Sequence[int]) -> tuple[int, int]:
    """Positions ``(hole_at, parent_at)`` of the closest vertex pair."""

    best = math.inf
    hole_at = 0
    parent_at = 0
    for ih, h in enumerate(hole):
        ph = points[h]
        for ip, p in enumerate(parent):
            d = dist2(ph, points[p])
            if d < best:
                best = d
                hole_at = ih
                parent_at = ip
    return hole_at, parent_at


def splice_hole(parent: Sequence[int], hole: Sequence[int],
                parent_at: int, hole_at: int) -> Ring:
    """Bridge ``hole`` into ``parent`` between the two given positions.

    The hole is walked backwards from ``hole_at`` so its winding is opposed
    to the parent's.  Both bridge end points appear twice in the result.
    """

    spliced: Ring = list(parent[:parent_at + 1])
    size = len(hole)
    for i in range(size):
        spliced.append(hole[(size + hole_at - i) % size])
    if hole:
        spliced.append(hole[hole_at])
    spliced.extend(parent[parent_at:])
    return spliced


def _next_hole(points: Sequence[Sequence[float]], rings: Sequence[Ring],
               nest: Sequence[NestInfo], order: int) -> Optional[int]:
    # merge order only; nearest first vertex to a far corner goes first
    corner = (FAR, FAR) if order < 0 else (-FAR, -FAR)
    best = math.inf
    chosen = None
    for i, info in enumerate(nest):
        if not info.is_hole or info.parent == i or len(rings[i]) < 3:
            continue
        d = dist2(points[rings[i][0]], corner)
        if d < best:
            best = d
            chosen = i
    return chosen


def merge_holes(points: Sequence[Sequence[float]], rings: MutableSequence[Ring],
                order: int) -> List[NestInfo]:
    """Merge every hole ring into its parent, in place.

    Nesting is measured for the whole set before the first splice.  After
    the call each ring is either empty (an absorbed hole) or a single
    polygon ready for :func:`~platesweep.triangulator.triangulate`.
    """

    nest = resolve_nesting(points, rings, order)

    while True:
        hole = _next_hole(points, rings, nest, order)
        if hole is None:
            break
        parent = nest[hole].parent
        hole_at, parent_at = closest_pair(points, rings[hole], rings[parent])
        rings[parent] = splice_hole(rings[parent], rings[hole], parent_at, hole_at)
        rings[hole] = []
        logger.debug("merged hole ring %d into ring %d (%d entries)",
                     hole, parent, len(rings[parent]))
    return nest


__all__ = [
    "NestInfo",
    "Ring",
    "resolve_nesting",
    "closest_pair",
    "splice_hole",
    "merge_holes",
]
