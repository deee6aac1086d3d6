"""Validation helpers for built meshes."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import List

from platesweep.geometry_utils import triangle_normal
from platesweep.mesh import Mesh


def is_closed_outline(points, tol: float = 1e-12) -> bool:
    """Return ``True`` if an outline has at least three distinct points."""

    distinct = []
    for p in points:
        if all(abs(p[0] - q[0]) > tol or abs(p[1] - q[1]) > tol for q in distinct):
            distinct.append(p)
            if len(distinct) >= 3:
                return True
    return False


def mesh_watertight(mesh: Mesh) -> "CheckResult":
    """Every undirected edge must be shared by exactly two triangles."""

    edges = Counter()
    for a, b, c in mesh.triangles():
        edges[_edge_key(a, b)] += 1
        edges[_edge_key(b, c)] += 1
        edges[_edge_key(c, a)] += 1

    boundary = [edge for edge, count in edges.items() if count == 1]
    invalid = [edge for edge, count in edges.items() if count > 2]

    warnings: List[str] = []
    ok = True
    if boundary:
        ok = False
        warnings.append(f'{len(boundary)} boundary edges detected')
    if invalid:
        ok = False
        warnings.append(f'edges with multiplicity >2: {invalid}')

    return CheckResult(ok, warnings)


def faces_oriented(mesh: Mesh) -> "CheckResult":
    """Neighbouring triangles must traverse their shared edge in opposite directions."""

    directed = Counter()
    for a, b, c in mesh.triangles():
        directed[(a, b)] += 1
        directed[(b, c)] += 1
        directed[(c, a)] += 1

    repeated = [edge for edge, count in directed.items() if count > 1]
    if repeated:
        return CheckResult(False, [f'{len(repeated)} directed edges used more than once'])
    return CheckResult(True, [])


def degenerate_faces(mesh: Mesh) -> List[int]:
    """Indices of triangles with (near) zero area."""

    bad = []
    for idx, (a, b, c) in enumerate(mesh.triangles()):
        if triangle_normal(mesh.vertex(a), mesh.vertex(b), mesh.vertex(c)) is None:
            bad.append(idx)
    return bad


def _edge_key(a: int, b: int) -> tuple[int, int]:
    return (a, b) if a < b else (b, a)


@dataclass
class CheckResult:
    ok: bool
    warnings: List[str]

    def __bool__(self) -> bool:
        return self.ok


__all__ = [
    'CheckResult',
    'is_closed_outline',
    'mesh_watertight',
    'faces_oriented',
    'degenerate_faces',
]
