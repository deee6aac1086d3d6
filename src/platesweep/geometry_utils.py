"""Common geometric helpers shared across exporters and validators."""

from __future__ import annotations

import math
from typing import Iterable, Tuple, TYPE_CHECKING

import numpy as np

from platesweep.vecmath import Vec3

if TYPE_CHECKING:  # pragma: no cover
    from platesweep.mesh import Mesh

epsilon = 1e-12


def _cross(a: Vec3, b: Vec3) -> Vec3:
    return (a[1] * b[2] - a[2] * b[1],
            a[2] * b[0] - a[0] * b[2],
            a[0] * b[1] - a[1] * b[0])


def triangle_normal(v0: Vec3, v1: Vec3, v2: Vec3) -> Vec3 | None:
    """Return the unit normal of a triangle or ``None`` if degenerate."""

    a = (v1[0] - v0[0], v1[1] - v0[1], v1[2] - v0[2])
    b = (v2[0] - v0[0], v2[1] - v0[1], v2[2] - v0[2])
    n = _cross(a, b)
    length = math.sqrt(n[0] * n[0] + n[1] * n[1] + n[2] * n[2])
    if length <= epsilon:
        return None
    return (n[0] / length, n[1] / length, n[2] / length)


def facet_normals(vertices: np.ndarray, faces: np.ndarray) -> np.ndarray:
    """Unit normals for ``faces`` (``(m, 3)`` indices into ``vertices``).

    Degenerate faces get a zero normal.
    """

    if len(faces) == 0:
        return np.zeros((0, 3), dtype=np.float64)
    tri = vertices[faces]
    n = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
    length = np.linalg.norm(n, axis=1)
    out = np.zeros_like(n)
    ok = length > epsilon
    out[ok] = n[ok] / length[ok, None]
    return out


def mesh_area(mesh: "Mesh") -> float:
    """Total surface area of every triangle in ``mesh``."""

    verts = mesh.vertex_array()
    faces = mesh.index_array()
    if len(faces) == 0:
        return 0.0
    tri = verts[faces]
    n = np.cross(tri[:, 1] - tri[:, 0], tri[:, 2] - tri[:, 0])
    return float(0.5 * np.linalg.norm(n, axis=1).sum())


def facet_arrays(mesh: "Mesh", *, z_up: bool = False) -> Tuple[np.ndarray, np.ndarray]:
    """Corner coordinates ``(m, 3, 3)`` and unit normals ``(m, 3)`` of ``mesh``.

    With ``z_up`` the Y and Z axes are exchanged, turning the builders'
    Y-up frame into the Z-up frame slicers expect.  The swap is a mirror,
    so triangle winding is reversed to keep faces pointing outward.
    """

    verts = mesh.vertex_array()
    faces = mesh.index_array()
    if z_up:
        verts = verts[:, [0, 2, 1]]
        faces = faces[:, [0, 2, 1]]
    return verts[faces], facet_normals(verts, faces)


def bounding_box(points: Iterable[Vec3]) -> Tuple[Vec3, Vec3]:
    """Axis aligned ``(min, max)`` corners of ``points``."""

    arr = np.asarray(list(points), dtype=np.float64).reshape(-1, 3)
    if len(arr) == 0:
        raise ValueError("bounding_box needs at least one point")
    lo = arr.min(axis=0)
    hi = arr.max(axis=0)
    return (float(lo[0]), float(lo[1]), float(lo[2])), (float(hi[0]), float(hi[1]), float(hi[2]))


__all__ = [
    "epsilon",
    "triangle_normal",
    "facet_normals",
    "mesh_area",
    "facet_arrays",
    "bounding_box",
]
