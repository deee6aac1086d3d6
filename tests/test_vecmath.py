import math

import pytest

from platesweep.vecmath import Quaternion, cross2, lerp3, rotate2, slerp


def _close(a, b, tol=1e-9):
    return all(abs(x - y) <= tol for x, y in zip(a, b))


def test_cross2_sign():
    assert cross2((1, 0), (0, 1)) == 1
    assert cross2((0, 1), (1, 0)) == -1


def test_rotate2_quarter_turn_with_translation():
    p = rotate2((1.0, 0.0), math.pi / 2, 2.0, 3.0)
    assert _close(p, (2.0, 4.0))


def test_lerp3_midpoint():
    assert _close(lerp3((0, 0, 0), (2, 4, 6), 0.5), (1, 2, 3))


def test_identity_rotation_is_noop():
    assert _close(Quaternion.identity().rotate((1.0, 2.0, 3.0)), (1.0, 2.0, 3.0))


def test_rotation_about_y_moves_z_towards_minus_x():
    q = Quaternion.from_axis_angle((0, 1, 0), math.pi / 2)
    assert _close(q.rotate((0.0, 0.0, 1.0)), (-1.0, 0.0, 0.0))


def test_product_applies_left_factor_first():
    a = Quaternion.from_axis_angle((0, 0, 1), 0.7)
    b = Quaternion.from_axis_angle((1, 0, 0), -1.3)
    v = (0.3, -1.2, 2.5)
    assert _close((a * b).rotate(v), b.rotate(a.rotate(v)))


def test_axis_is_normalised():
    q1 = Quaternion.from_axis_angle((0, 0, 5), 1.0)
    q2 = Quaternion.from_axis_angle((0, 0, 1), 1.0)
    assert _close(q1.as_tuple(), q2.as_tuple())


def test_zero_axis_rejected():
    with pytest.raises(ValueError):
        Quaternion.from_axis_angle((0, 0, 0), 1.0)


def test_slerp_endpoints_and_midpoint():
    a = Quaternion.identity()
    b = Quaternion.from_axis_angle((0, 0, 1), math.pi / 2)
    assert _close(slerp(a, b, 0.0).as_tuple(), a.as_tuple())
    assert _close(slerp(a, b, 1.0).as_tuple(), b.as_tuple())
    mid = Quaternion.from_axis_angle((0, 0, 1), math.pi / 4)
    assert _close(slerp(a, b, 0.5).as_tuple(), mid.as_tuple())


def test_slerp_takes_shorter_arc():
    a = Quaternion.identity()
    b = Quaternion.from_axis_angle((0, 0, 1), math.pi / 2)
    neg_b = Quaternion(-b.w, -b.x, -b.y, -b.z)
    v = (1.0, 0.0, 0.0)
    assert _close(slerp(a, neg_b, 0.5).rotate(v), slerp(a, b, 0.5).rotate(v))


def test_slerp_nearly_equal_returns_first():
    a = Quaternion.from_axis_angle((0, 0, 1), 0.001)
    b = Quaternion.from_axis_angle((0, 0, 1), 0.002)
    assert slerp(a, b, 0.5) == a


def test_normalized_has_unit_length():
    q = Quaternion(2.0, 0.0, 2.0, 0.0).normalized()
    assert q.dot(q) == pytest.approx(1.0)
    assert _close(q.as_tuple(), (math.sqrt(0.5), 0.0, math.sqrt(0.5), 0.0))


def test_normalized_rejects_zero():
    with pytest.raises(ValueError):
        Quaternion(0.0, 0.0, 0.0, 0.0).normalized()
