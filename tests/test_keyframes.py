import math

import pytest

from platesweep.errors import MissingKeyframesError
from platesweep.keyframes import KeyframeTrack
from platesweep.vecmath import Quaternion


def test_keys_are_sorted_by_position():
    track = KeyframeTrack("translation")
    track.add(5, (5.0, 0.0, 0.0))
    track.add(0, (0.0, 0.0, 0.0))
    track.add(2, (2.0, 0.0, 0.0))
    assert [k.position for k in track.keys] == [0.0, 2.0, 5.0]
    assert len(track) == 3


def test_equal_positions_keep_insertion_order():
    track = KeyframeTrack("scale")
    track.add(1, (1.0, 1.0, 1.0))
    track.add(1, (2.0, 2.0, 1.0))
    assert [k.value for k in track.keys] == [(1.0, 1.0, 1.0), (2.0, 2.0, 1.0)]


def test_linear_interpolation_and_clamping():
    track = KeyframeTrack("translation")
    track.add(0, (0.0, 0.0, 0.0))
    track.add(4, (8.0, 4.0, -4.0))
    assert track.sample(1) == pytest.approx((2.0, 1.0, -1.0))
    assert track.sample(-3) == (0.0, 0.0, 0.0)
    assert track.sample(10) == (8.0, 4.0, -4.0)


def test_single_key_is_constant():
    track = KeyframeTrack("scale")
    track.add(3, (2.0, 2.0, 1.0))
    assert track.sample(0) == (2.0, 2.0, 1.0)
    assert track.sample(99) == (2.0, 2.0, 1.0)


def test_rotation_track_uses_slerp():
    track = KeyframeTrack("rotation", rotation=True)
    track.add(0, Quaternion.identity())
    track.add(2, Quaternion.from_axis_angle((0, 0, 1), math.pi / 2))
    q = track.sample(1)
    expected = Quaternion.from_axis_angle((0, 0, 1), math.pi / 4)
    assert q.as_tuple() == pytest.approx(expected.as_tuple())


def test_empty_track_raises():
    track = KeyframeTrack("rotation", rotation=True)
    with pytest.raises(MissingKeyframesError) as info:
        track.sample(0)
    assert info.value.channel == "rotation"


def test_clear_removes_keys():
    track = KeyframeTrack("scale")
    track.add(0, (1.0, 1.0, 1.0))
    track.clear()
    assert len(track) == 0


def test_nan_position_returns_last_key():
    track = KeyframeTrack("translation")
    track.add(0, (0.0, 0.0, 0.0))
    track.add(1, (1.0, 1.0, 1.0))
    assert track.sample(float("nan")) == (1.0, 1.0, 1.0)
