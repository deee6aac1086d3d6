import pytest

from platesweep.assembly import (
    GuardParams,
    assemble,
    build_propeller_guard,
    guard_arm,
    guard_base,
    guard_pillar,
    guard_ring,
)
from platesweep.mesh import Color
from platesweep.plate import build_plate


def test_default_guard_parts():
    result = build_propeller_guard()
    names = [g.name for g in result.mesh.groups]
    assert len(result.parts) == 15
    assert names == ["base"] + ["ring"] * 2 + ["pillar"] * 8 + ["arm"] * 4
    assert result.mesh.validate() == []


def test_guard_part_triangle_counts():
    groups = build_propeller_guard().mesh.groups
    counts = {g.name: g.triangle_count for g in groups if g.name != "base"}
    assert counts == {
        "ring": 96 * 24 * 2,
        "pillar": 24 * 2 + 2 * (24 - 2),
        "arm": 11 * 24 * 2,
    }


def test_guard_is_deterministic():
    first = build_propeller_guard().mesh
    second = build_propeller_guard().mesh
    assert first.vertices == second.vertices
    assert first.indices == second.indices


def test_ring_height_and_radius():
    params = GuardParams()
    mesh = build_propeller_guard(params).mesh
    assert params.ring_r == pytest.approx(69.5)
    # first point of the lower ring's first section
    lower = [mesh.vertex(i) for i in range(mesh.vertex_count)
             if mesh.vertex(i)[1] == pytest.approx(17.0)]
    assert (71.5, 17.0, 0.0) in [tuple(round(c, 9) for c in v) for v in lower]


def test_fewer_pillars_and_arms():
    result = build_propeller_guard(GuardParams(pillar_n=3, arm_n=0))
    assert len(result.parts) == 1 + 2 + 3


def test_guard_color_reaches_materials():
    result = build_propeller_guard(GuardParams(color=(1.0, 0.0, 0.0)))
    assert {m.kd for m in result.mesh.materials()} == {Color(1.0, 0.0, 0.0)}


@pytest.mark.parametrize('elbow, expected', [("base", 2.0), ("ring", 15.0), ("custom", 12.0)])
def test_arm_elbow_height(elbow, expected):
    assert GuardParams(arm_elbow=elbow).arm_y == pytest.approx(expected)


def test_unknown_elbow_rejected():
    with pytest.raises(ValueError):
        GuardParams(arm_elbow="knee")


def test_part_builders_have_expected_topology():
    params = GuardParams()
    assert len(guard_base(params).outlines) == 2 + params.hole_n
    assert guard_ring(params).joint_term
    pillar = guard_pillar(params)
    assert pillar.fill_start and pillar.fill_end
    assert guard_arm(params).div_count == 12


def test_base_plate_outline_nesting():
    mesh = build_plate(guard_base(GuardParams())).mesh
    assert mesh.validate() == []
    assert mesh.vertex_count == 2 * (96 + 48 + 4 * 48)


def test_assemble_collects_diagnostics():
    from platesweep.sweep import Sweep, build_sweep

    broken = build_sweep(Sweep(2, 4), "broken")
    result = assemble("demo", [broken])
    assert not result.ok
    assert len(result.diagnostics) == 3
