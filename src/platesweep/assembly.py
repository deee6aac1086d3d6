"""Multi-part assemblies built from plates and sweeps.

The propeller guard is a motor mount plate with a guard ring held above
it: a capsule shaped base with a spindle hole and screw slots, two rings
framing the propeller disc, vertical pillars between the rings and arms
reaching from the base up to the lower ring.  All lengths are in the same
unit (millimetres in practice); angles are in degrees.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Tuple

from platesweep.errors import BuildResult, Diagnostic
from platesweep.mesh import GREEN, Color, Mesh, merge_meshes
from platesweep.outline import Plate
from platesweep.plate import build_plate
from platesweep.sweep import Sweep, build_sweep
from platesweep.vecmath import Quaternion

logger = logging.getLogger(__name__)

ARM_ELBOWS = ("base", "ring", "custom")


@dataclass
class GuardParams:
    base_w: float = 28.0
    base_l: float = 35.0
    base_t: float = 4.0
    spindle_d: float = 7.5
    hole_w: float = 3.2
    hole_l: float = 6.0
    hole_n: int = 4
    hole_r: float = 9.1
    hole_a: float = 45.0
    propeller_d: float = 135.0
    propeller_t: float = 16.0
    propeller_y: float = 25.0
    pillar_n: int = 8
    pillar_d: float = 3.0
    ring_d: float = 4.0
    arm_n: int = 4
    arm_a: float = 0.0
    arm_elbow: str = "base"
    arm_s: float = 10.0
    color: Tuple[float, float, float] = (0.0, 1.0, 0.0)

    def __post_init__(self):
        if self.arm_elbow not in ARM_ELBOWS:
            raise ValueError(f"arm_elbow must be one of {ARM_ELBOWS}, got {self.arm_elbow!r}")

    @property
    def ring_r(self) -> float:
        """Radius of the ring centre line."""
        return self.propeller_d / 2 + self.ring_d / 2

    @property
    def arm_y(self) -> float:
        """Height of the arm's elbow centre line."""
        ring_dr = self.ring_d / 2
        if self.arm_elbow == "base":
            return ring_dr
        if self.arm_elbow == "ring":
            return self.propeller_y - (self.propeller_t + self.ring_d) / 2
        return self.arm_s + ring_dr


@dataclass
class AssemblyResult:
    name: str
    parts: List[BuildResult] = field(default_factory=list)
    mesh: Mesh = field(default_factory=Mesh)

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [d for part in self.parts for d in part.diagnostics]

    @property
    def ok(self) -> bool:
        return all(part.ok for part in self.parts)

    def raise_for_errors(self) -> None:
        for part in self.parts:
            part.raise_for_errors()


def assemble(name: str, parts: List[BuildResult]) -> AssemblyResult:
    merged = merge_meshes(name, [p.mesh for p in parts])
    logger.info("assembly '%s': %d parts, %d vertices, %d triangles",
                name, len(parts), merged.vertex_count, merged.triangle_count)
    return AssemblyResult(name, parts, merged)


def guard_base(params: GuardParams) -> Plate:
    plate = Plate()
    plate.add_capsule(0, 0, params.base_w, params.base_l, 0, 48)
    plate.add_circle(0, 0, params.spindle_d, 48)
    hole_a = math.radians(params.hole_a)
    for i in range(params.hole_n):
        th = 2 * math.pi * i / params.hole_n + hole_a
        plate.add_capsule(params.hole_r * math.cos(th), params.hole_r * math.sin(th),
                          params.hole_w, params.hole_l, th, 24)
    return plate.extrude(0, params.base_t)


def guard_ring(params: GuardParams, div: int = 96) -> Sweep:
    ring = Sweep(div, 24, joint_term=True)
    ring.add_scale_at_time(0, params.ring_d, params.ring_d)
    ring.add_scale_at_time(1, params.ring_d, params.ring_d)
    for i in range(div):
        th = 2 * math.pi * i / div
        ring.add_rotation(i, Quaternion.from_axis_angle((0, 1, 0), th))
        ring.add_position(i, params.ring_r * math.cos(th), params.propeller_y,
                          params.ring_r * math.sin(th))
    return ring


def guard_pillar(params: GuardParams) -> Sweep:
    pillar = Sweep(2, 24, fill_start=True, fill_end=True)
    pillar.add_scale(0, params.pillar_d, params.pillar_d)
    pillar.add_scale(1, params.pillar_d, params.pillar_d)
    upright = Quaternion.from_axis_angle((1, 0, 0), math.pi / 2)
    pillar.add_rotation(0, upright)
    pillar.add_rotation(1, upright)
    pillar.add_position(0, 0, params.propeller_y - params.propeller_t / 2, 0)
    pillar.add_position(1, 0, params.propeller_y + params.propeller_t / 2, 0)
    return pillar


def guard_arm(params: GuardParams, div: int = 12) -> Sweep:
    """One arm in the XY plane: out of the base, round the elbow, up to the ring."""
    elbow_div = div - 3
    ring_dr = params.ring_d / 2
    arm_x = params.propeller_d / 2
    arm_y = params.arm_y

    arm = Sweep(div, 24)
    arm.add_scale(0, params.base_t, params.base_t)
    arm.add_scale(1, params.ring_d, params.ring_d)
    arm.add_scale(div - 1, params.ring_d, params.ring_d)

    qy = Quaternion.from_axis_angle((0, 1, 0), -math.pi / 2)
    arm.add_rotation(0, qy)
    th = math.atan2(arm_y - params.base_t / 2, arm_x - params.base_w / 2)
    arm.add_rotation(1, qy * Quaternion.from_axis_angle((0, 0, 1), -th))
    vertical = qy * Quaternion.from_axis_angle((0, 0, 1), -math.pi / 2)
    arm.add_rotation(div - 2, vertical)
    arm.add_rotation(div - 1, vertical)

    arm.add_position(0, params.base_w / 2, params.base_t / 2, 0)
    cy = arm_y + ring_dr
    begin = th - math.pi / 2
    sweep = math.pi / 2 - th
    for t in range(elbow_div):
        ph = sweep * t / elbow_div + begin
        arm.add_position(t + 1, ring_dr * math.cos(ph) + arm_x, ring_dr * math.sin(ph) + cy, 0)
    arm.add_position(div - 2, params.ring_r, cy, 0)
    arm.add_position(div - 1, params.ring_r, params.propeller_y - params.propeller_t / 2, 0)
    return arm


def build_propeller_guard(params: GuardParams | None = None,
                          name: str = "propeller_guard") -> AssemblyResult:
    params = params or GuardParams()
    color = Color(*params.color) if params.color else GREEN
    parts: List[BuildResult] = [build_plate(guard_base(params), "base", color)]

    ring = guard_ring(params)
    for offset in (-params.propeller_t / 2, params.propeller_t / 2):
        ring.translate_all = (0.0, offset, 0.0)
        parts.append(build_sweep(ring, "ring", color))

    pillar = guard_pillar(params)
    arm_a = math.radians(params.arm_a)
    for i in range(params.pillar_n):
        th = 2 * math.pi * i / params.pillar_n + arm_a
        pillar.translate_all = (params.ring_r * math.cos(th), 0.0, params.ring_r * math.sin(th))
        parts.append(build_sweep(pillar, "pillar", color))

    arm = guard_arm(params)
    for i in range(params.arm_n):
        arm.rotation_all = Quaternion.from_axis_angle((0, 1, 0),
                                                      2 * math.pi * i / params.arm_n + arm_a)
        parts.append(build_sweep(arm, "arm", color))

    return assemble(name, parts)


__all__ = [
    "ARM_ELBOWS",
    "GuardParams",
    "AssemblyResult",
    "assemble",
    "guard_base",
    "guard_ring",
    "guard_pillar",
    "guard_arm",
    "build_propeller_guard",
]
