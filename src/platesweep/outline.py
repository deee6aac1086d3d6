"""Outline builder for extruded plates.

A :class:`Plate` collects closed 2D loops and a single extrusion request.
Outlines that end up nested inside another become holes when the plate
is built (see :mod:`platesweep.plate`).
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List, Sequence

from platesweep.triangulator import signed_area
from platesweep.vecmath import Vec2, rotate2

Outline = List[Vec2]


def rectangle_outline(x: float, y: float, w: float, h: float, angle: float = 0.0) -> Outline:
    """Counter-clockwise ``w`` by ``h`` rectangle centred on ``(x, y)``."""
    hw = w * 0.5
    hh = h * 0.5
    corners = [(-hw, -hh), (hw, -hh), (hw, hh), (-hw, hh)]
    return [rotate2(p, angle, x, y) for p in corners]


def circle_outline(x: float, y: float, d: float, div: int) -> Outline:
    """``div`` points evenly spaced on a circle of diameter ``d``."""
    r = d / 2.0
    line = []
    for i in range(div):
        th = 2 * math.pi * i / div
        line.append((r * math.cos(th) + x, r * math.sin(th) + y))
    return line


def capsule_outline(x: float, y: float, w: float, length: float,
                    angle: float = 0.0, div: int = 24) -> Outline:
    """Stadium of width ``w`` and overall ``length`` along the rotated X axis.

    Each rounded end gets ``div`` points, so the outline has ``2 * div``.
    """
    half = math.pi / 2
    r = w / 2.0
    ofs = 0.0 if length < w else (length - w) / 2.0
    line = []
    for i in range(div):
        th = math.pi * i / div - half
        line.append((r * math.cos(th) + ofs, r * math.sin(th)))
    for i in range(div):
        th = math.pi * i / div + half
        line.append((r * math.cos(th) - ofs, r * math.sin(th)))
    return [rotate2(p, angle, x, y) for p in line]


@dataclass
class Plate:
    """Outlines to extrude from ``bottom`` up by ``height``."""

    outlines: List[Outline] = field(default_factory=list)
    bottom: float = 0.0
    height: float = 1.0

    def add_outline(self, points: Sequence[Sequence[float]], *, normalize: bool = True) -> Outline:
        """Add a closed loop; clockwise loops are reversed unless ``normalize`` is off."""
        line = [(float(p[0]), float(p[1])) for p in points]
        if normalize and len(line) >= 3 and signed_area(line, range(len(line))) < 0:
            line.reverse()
        self.outlines.append(line)
        return line

    def add_rectangle(self, x: float, y: float, w: float, h: float, angle: float = 0.0) -> Outline:
        return self.add_outline(rectangle_outline(x, y, w, h, angle))

    def add_circle(self, x: float, y: float, d: float, div: int) -> Outline:
        return self.add_outline(circle_outline(x, y, d, div))

    def add_capsule(self, x: float, y: float, w: float, length: float,
                    angle: float = 0.0, div: int = 24) -> Outline:
        return self.add_outline(capsule_outline(x, y, w, length, angle, div))

    def extrude(self, bottom: float, height: float) -> "Plate":
        self.bottom = float(bottom)
        self.height = float(height)
        return self


__all__ = [
    "Outline",
    "Plate",
    "rectangle_outline",
    "circle_outline",
    "capsule_outline",
]
