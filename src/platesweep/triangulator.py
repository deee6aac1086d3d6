"""Ear clipping triangulation for simple closed polygons.

The polygon is given as a shared point buffer plus a ring of indices into
it, so the faces produced here index straight into the mesh vertex
buffer.  ``order`` selects the winding that counts as front facing:
``+1`` accepts ears whose ``(a - o) x (b - o)`` is positive, ``-1`` the
opposite.

The apex candidate is always the active vertex farthest from a fixed
point far outside any real outline, which makes the result depend only
on the input and never on iteration history.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from platesweep.errors import DegenerateInputError
from platesweep.vecmath import Vec2, cross2, dist2, sub2

logger = logging.getLogger(__name__)

FAR = 1e10
FAR_ORIGIN: Vec2 = (-FAR, -FAR)


@dataclass(frozen=True)
class Face:
    """Triangle ``(a, o, b)``; ``o`` is the ear apex it was clipped at."""

    a: int
    o: int
    b: int

    def indices(self) -> tuple[int, int, int]:
        return self.a, self.o, self.b


@dataclass
class Triangulation:
    faces: List[Face] = field(default_factory=list)
    area: float = 0.0
    dropped: List[int] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.dropped


def point_in_triangle(a: Sequence[float], o: Sequence[float],
                      b: Sequence[float], p: Sequence[float]) -> bool:
    """Return ``True`` if ``p`` lies inside triangle ``(a, o, b)``.

    Either orientation of the triangle is accepted.  A point exactly on one
    edge counts as inside when the other two edge signs agree; a point on
    two edges (a corner) does not.
    """

    oap = cross2(sub2(o, a), sub2(p, a))
    bop = cross2(sub2(b, o), sub2(p, o))
    abp = cross2(sub2(a, b), sub2(p, b))

    if oap > 0 and bop > 0 and abp > 0:
        return True
    if oap < 0 and bop < 0 and abp < 0:
        return True
    if oap == 0 and ((bop > 0 and abp > 0) or (bop < 0 and abp < 0)):
        return True
    if bop == 0 and ((abp > 0 and oap > 0) or (abp < 0 and oap < 0)):
        return True
    if abp == 0 and ((oap > 0 and bop > 0) or (oap < 0 and bop < 0)):
        return True
    return False


def polygon_contains(outer_faces: Iterable[Face], inner_faces: Sequence[Face],
                     points: Sequence[Sequence[float]]) -> bool:
    """Return ``True`` if any corner of ``inner_faces`` lies in ``outer_faces``."""

    for outer in outer_faces:
        pa = points[outer.a]
        po = points[outer.o]
        pb = points[outer.b]
        for inner in inner_faces:
            for idx in (inner.a, inner.o, inner.b):
                if point_in_triangle(pa, po, pb, points[idx]):
                    return True
    return False


def signed_area(points: Sequence[Sequence[float]], ring: Sequence[int]) -> float:
    """Shoelace area of the ring; positive for counter-clockwise loops."""
    total = 0.0
    n = len(ring)
    for i in range(n):
        x0, y0 = points[ring[i]][0], points[ring[i]][1]
        x1, y1 = points[ring[(i + 1) % n]][0], points[ring[(i + 1) % n]][1]
        total += x0 * y1 - x1 * y0
    return total / 2.0


def _neighbour(active: Sequence[bool], pos: int, step: int) -> int:
    n = len(active)
    nxt = (pos + step) % n
    for _ in range(n):
        if active[nxt]:
            break
        nxt = (nxt + step) % n
    return nxt


def triangulate(points: Sequence[Sequence[float]], ring: Sequence[int], order: int,
                *, strict: bool = False, outline: Optional[int] = None) -> Triangulation:
    """Ear clip the polygon ``ring`` and return its faces and area.

    ``points`` holds XY pairs and ``ring`` the polygon's indices into it.
    Vertices for which no valid ear exists after a full walk around the
    remaining polygon are deactivated and reported in
    ``Triangulation.dropped`` (as ring positions).  With ``strict=True`` a
    :class:`DegenerateInputError` is raised instead.
    """

    result = Triangulation()
    count = len(ring)
    if count < 3:
        return result

    step = 1 if order > 0 else -1
    distance = [dist2(FAR_ORIGIN, points[idx]) for idx in ring]
    active = [True] * count
    remaining = count

    while remaining >= 3:
        apex = -1
        farthest = 0.0
        for i in range(count):
            if active[i] and farthest < distance[i]:
                farthest = distance[i]
                apex = i
        if apex < 0:
            apex = active.index(True)

        attempts = 0
        while True:
            prev = _neighbour(active, apex, -1)
            nxt = _neighbour(active, apex, 1)
            va = points[ring[prev]]
            vo = points[ring[apex]]
            vb = points[ring[nxt]]
            normal = cross2(sub2(va, vo), sub2(vb, vo)) * order

            is_ear = normal >= 0
            if is_ear:
                for i in range(count):
                    if i in (prev, apex, nxt) or not active[i]:
                        continue
                    if point_in_triangle(va, vo, vb, points[ring[i]]):
                        is_ear = False
                        break

            if is_ear:
                result.faces.append(Face(ring[prev], ring[apex], ring[nxt]))
                result.area += abs(normal) / 2.0
                active[apex] = False
                remaining -= 1
                break

            attempts += 1
            if attempts > count:
                logger.debug("no ear found, dropping ring position %d", apex)
                active[apex] = False
                remaining -= 1
                result.dropped.append(apex)
                break
            apex = _neighbour(active, apex, step)

    if result.dropped and strict:
        raise DegenerateInputError(outline, result.dropped)
    return result


__all__ = [
    "FAR",
    "FAR_ORIGIN",
    "Face",
    "Triangulation",
    "point_in_triangle",
    "polygon_contains",
    "signed_area",
    "triangulate",
]
