"""Small vector and quaternion helpers shared by the builders.

Points and vectors are plain float tuples.  Quaternions are immutable
``(w, x, y, z)`` dataclasses.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence, Tuple

Vec2 = Tuple[float, float]
Vec3 = Tuple[float, float, float]


def sub2(a: Sequence[float], b: Sequence[float]) -> Vec2:
    return a[0] - b[0], a[1] - b[1]


def cross2(a: Sequence[float], b: Sequence[float]) -> float:
    """Z component of the cross product of two 2D vectors."""
    return a[0] * b[1] - a[1] * b[0]


def dist2(a: Sequence[float], b: Sequence[float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def rotate2(p: Sequence[float], angle: float, tx: float = 0.0, ty: float = 0.0) -> Vec2:
    """Rotate ``p`` about the origin by ``angle`` radians, then translate."""
    c = math.cos(angle)
    s = math.sin(angle)
    return p[0] * c - p[1] * s + tx, p[0] * s + p[1] * c + ty


def add3(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return a[0] + b[0], a[1] + b[1], a[2] + b[2]


def scale3(a: Sequence[float], k: float) -> Vec3:
    return a[0] * k, a[1] * k, a[2] * k


def hadamard3(a: Sequence[float], b: Sequence[float]) -> Vec3:
    return a[0] * b[0], a[1] * b[1], a[2] * b[2]


def lerp3(a: Sequence[float], b: Sequence[float], t: float) -> Vec3:
    return add3(scale3(a, 1.0 - t), scale3(b, t))


@dataclass(frozen=True)
class Quaternion:
    """Unit quaternion used for cross-section orientation."""

    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    @classmethod
    def identity(cls) -> "Quaternion":
        return cls(1.0, 0.0, 0.0, 0.0)

    @classmethod
    def from_axis_angle(cls, axis: Sequence[float], angle: float) -> "Quaternion":
        """Rotation of ``angle`` radians about ``axis`` (need not be unit)."""
        ax, ay, az = float(axis[0]), float(axis[1]), float(axis[2])
        n = math.sqrt(ax * ax + ay * ay + az * az)
        if n == 0.0:
            raise ValueError("rotation axis must be non-zero")
        s = math.sin(angle * 0.5)
        return cls(math.cos(angle * 0.5), ax / n * s, ay / n * s, az / n * s)

    def __mul__(self, other: "Quaternion") -> "Quaternion":
        aw, ax, ay, az = self.w, self.x, self.y, self.z
        bw, bx, by, bz = other.w, other.x, other.y, other.z
        return Quaternion(
            aw * bw - ax * bx - ay * by - az * bz,
            ax * bw + aw * bx - az * by + ay * bz,
            ay * bw + az * bx + aw * by - ax * bz,
            az * bw - ay * bx + ax * by + aw * bz,
        )

    def dot(self, other: "Quaternion") -> float:
        return self.w * other.w + self.x * other.x + self.y * other.y + self.z * other.z

    def normalized(self) -> "Quaternion":
        n = math.sqrt(self.dot(self))
        if n == 0.0:
            raise ValueError("cannot normalize a zero quaternion")
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def rotate(self, v: Sequence[float]) -> Vec3:
        """Apply the rotation to ``v`` as ``conj(q) * v * q``.

        Composition reads left to right: ``(a * b).rotate(v)`` rotates by
        ``a`` first, then by ``b``.
        """
        qw, qx, qy, qz = self.w, self.x, self.y, self.z
        vx, vy, vz = v[0], v[1], v[2]
        tx = 2.0 * (qy * vz - qz * vy)
        ty = 2.0 * (qz * vx - qx * vz)
        tz = 2.0 * (qx * vy - qy * vx)
        return (
            vx - qw * tx + (qy * tz - qz * ty),
            vy - qw * ty + (qz * tx - qx * tz),
            vz - qw * tz + (qx * ty - qy * tx),
        )

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return self.w, self.x, self.y, self.z


def slerp(a: Quaternion, b: Quaternion, t: float) -> Quaternion:
    """Spherical linear interpolation along the shorter arc."""
    d = a.dot(b)
    idot = 1.0 - d * d
    if idot < 1e-4:
        return a
    if d < 0.0:
        th0 = math.acos(-d)
        th1 = -th0 * t
        th0 += th1
    else:
        th0 = math.acos(d)
        th1 = th0 * t
        th0 -= th1
    r = 1.0 / math.sqrt(idot)
    t0 = r * math.sin(th0)
    t1 = r * math.sin(th1)
    return Quaternion(
        a.w * t0 + b.w * t1,
        a.x * t0 + b.x * t1,
        a.y * t0 + b.y * t1,
        a.z * t0 + b.z * t1,
    )


__all__ = [
    "Vec2",
    "Vec3",
    "sub2",
    "cross2",
    "dist2",
    "rotate2",
    "add3",
    "scale3",
    "hadamard3",
    "lerp3",
    "Quaternion",
    "slerp",
]
