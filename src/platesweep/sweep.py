"""Tubes swept through keyframed cross-sections.

A :class:`Sweep` describes ``div_count`` cross-sections, each a ring of
``rot_div_count`` points on a unit-diameter circle in the XY plane.  For
cross-section ``j`` the scale, rotation and translation tracks are
sampled at position ``j`` and applied to the ring in that order, followed
by the whole-object ``rotation_all`` and ``translate_all``.

Scale keys are therefore diameters: ``add_scale(j, 4, 4)`` makes section
``j`` a circle 4 units across.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Tuple

from platesweep.errors import (
    MISSING_KEYFRAMES,
    BuildResult,
    Diagnostic,
    MissingKeyframesError,
    Severity,
)
from platesweep.keyframes import KeyframeTrack, Value
from platesweep.mesh import GREEN, Color, single_group_mesh
from platesweep.vecmath import Quaternion, Vec3, add3, hadamard3

logger = logging.getLogger(__name__)

_IDENTITY = {
    "scale": (1.0, 1.0, 1.0),
    "rotation": Quaternion.identity(),
    "translation": (0.0, 0.0, 0.0),
}


def section_ring(rot_div_count: int) -> List[Vec3]:
    """Points of one cross-section before any transform."""
    ring = []
    for i in range(rot_div_count):
        th = -2 * math.pi * i / rot_div_count
        ring.append((math.cos(th) * 0.5, math.sin(th) * 0.5, 0.0))
    return ring


@dataclass
class Sweep:
    div_count: int
    rot_div_count: int
    joint_term: bool = False
    fill_start: bool = False
    fill_end: bool = False
    scale: KeyframeTrack = field(default_factory=lambda: KeyframeTrack("scale"))
    rotation: KeyframeTrack = field(
        default_factory=lambda: KeyframeTrack("rotation", rotation=True))
    translation: KeyframeTrack = field(default_factory=lambda: KeyframeTrack("translation"))
    rotation_all: Quaternion = field(default_factory=Quaternion.identity)
    translate_all: Vec3 = (0.0, 0.0, 0.0)

    def __post_init__(self):
        if self.div_count < 2:
            raise ValueError("a sweep needs at least two cross-sections")
        if self.rot_div_count < 3:
            raise ValueError("a cross-section needs at least three points")

    @property
    def index_max(self) -> int:
        return self.div_count - 1

    def time_to_index(self, time: float) -> float:
        """Map 0 (first section) .. 1 (last section) to a section index."""
        return time * self.index_max

    def add_scale(self, index: float, w: float, h: float) -> None:
        self.scale.add(index, (float(w), float(h), 1.0))

    def add_scale_at_time(self, time: float, w: float, h: float) -> None:
        self.add_scale(self.time_to_index(time), w, h)

    def clear_scale(self) -> None:
        self.scale.clear()

    def add_rotation(self, index: float, q: Quaternion) -> None:
        self.rotation.add(index, q.normalized())

    def add_rotation_at_time(self, time: float, q: Quaternion) -> None:
        self.add_rotation(self.time_to_index(time), q)

    def clear_rotation(self) -> None:
        self.rotation.clear()

    def add_position(self, index: float, x: float, y: float, z: float) -> None:
        self.translation.add(index, (float(x), float(y), float(z)))

    def add_position_at_time(self, time: float, x: float, y: float, z: float) -> None:
        self.add_position(self.time_to_index(time), x, y, z)

    def clear_position(self) -> None:
        self.translation.clear()


def sweep_indices(div_count: int, rot_div_count: int, joint_term: bool = False,
                  fill_start: bool = False, fill_end: bool = False) -> List[int]:
    """Triangle indices for a tube; depends only on the topology flags."""
    index: List[int] = []
    m = rot_div_count
    last_div = div_count if joint_term else div_count - 1
    for j in range(last_div):
        ofs_bottom = m * j
        ofs_top = m * ((j + 1) % div_count)
        for il in range(m):
            ir = (il + 1) % m
            bl = ofs_bottom + il
            br = ofs_bottom + ir
            tl = ofs_top + il
            tr = ofs_top + ir
            index.extend((br, bl, tl))
            index.extend((tl, tr, br))
    if fill_start:
        for i in range(1, m - 1):
            index.extend((0, i, i + 1))
    if fill_end:
        s = m * (div_count - 1)
        for i in range(1, m - 1):
            index.extend((s, s + i + 1, s + i))
    return index


def _sample(track: KeyframeTrack, position: float, missing: List[str]) -> Value:
    try:
        return track.sample(position)
    except MissingKeyframesError as exc:
        if exc.channel not in missing:
            missing.append(exc.channel)
        return _IDENTITY[exc.channel]


def section_transforms(sweep: Sweep) -> Tuple[List[Tuple[Vec3, Quaternion, Vec3]], List[str]]:
    """Sampled ``(scale, rotation, translation)`` per section, plus empty channels."""
    missing: List[str] = []
    out = []
    for j in range(sweep.div_count):
        out.append((
            _sample(sweep.scale, j, missing),
            _sample(sweep.rotation, j, missing),
            _sample(sweep.translation, j, missing),
        ))
    return out, missing


def build_sweep(sweep: Sweep, name: str = "", color: Color = GREEN) -> BuildResult:
    """Build the tube mesh for ``sweep``.

    A channel without keyframes is reported as an error diagnostic and
    treated as its identity transform, so the rest of the tube is still
    produced.
    """

    transforms, missing = section_transforms(sweep)
    diagnostics: List[Diagnostic] = []
    for channel in missing:
        diag = Diagnostic(
            MISSING_KEYFRAMES,
            f"no keyframes in '{channel}' channel; using identity",
            Severity.ERROR,
            channel=channel,
        )
        logger.warning(diag.format())
        diagnostics.append(diag)

    outline = section_ring(sweep.rot_div_count)
    vertices: List[float] = []
    for scale, rot, pos in transforms:
        for p in outline:
            v = hadamard3(p, scale)
            v = rot.rotate(v)
            v = add3(v, pos)
            v = sweep.rotation_all.rotate(v)
            v = add3(v, sweep.translate_all)
            vertices.extend(v)

    indices = sweep_indices(sweep.div_count, sweep.rot_div_count, sweep.joint_term,
                            sweep.fill_start, sweep.fill_end)
    mesh = single_group_mesh(name, vertices, indices, color)
    logger.debug("sweep '%s': %d sections x %d points, %d triangles",
                 name, sweep.div_count, sweep.rot_div_count, mesh.triangle_count)
    return BuildResult(mesh, diagnostics)


__all__ = [
    "Sweep",
    "section_ring",
    "section_transforms",
    "sweep_indices",
    "build_sweep",
]
