"""Sparse keyframe tracks sampled along a sweep.

Positions are cross-section indices (floats are allowed).  Vector tracks
interpolate linearly, rotation tracks spherically.  Sampling before the
first or after the last keyframe returns that end sample.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from typing import Any, List, Union

from platesweep.errors import MissingKeyframesError
from platesweep.vecmath import Quaternion, Vec3, lerp3, slerp

Value = Union[Vec3, Quaternion]


@dataclass(frozen=True)
class Keyframe:
    position: float
    value: Any


@dataclass
class KeyframeTrack:
    """Keyframes for one channel, kept sorted by position."""

    channel: str
    rotation: bool = False
    keys: List[Keyframe] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.keys)

    def add(self, position: float, value: Value) -> Keyframe:
        """Insert a keyframe; equal positions keep insertion order."""
        key = Keyframe(float(position), value)
        at = bisect.bisect_right([k.position for k in self.keys], key.position)
        self.keys.insert(at, key)
        return key

    def clear(self) -> None:
        self.keys.clear()

    def sample(self, position: float) -> Value:
        keys = self.keys
        if not keys:
            raise MissingKeyframesError(self.channel)
        if position <= keys[0].position:
            return keys[0].value
        if position >= keys[-1].position:
            return keys[-1].value

        for a, b in zip(keys, keys[1:]):
            if a.position <= position <= b.position:
                span = b.position - a.position
                if span == 0.0:
                    return a.value
                t = (position - a.position) / span
                if self.rotation:
                    return slerp(a.value, b.value, t)
                return lerp3(a.value, b.value, t)
        # NaN positions fall through every comparison
        return keys[-1].value


__all__ = ["Keyframe", "KeyframeTrack"]
