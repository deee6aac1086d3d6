import pytest

from platesweep.errors import (
    DEGENERATE_OUTLINE,
    PARTIAL_SOLID,
    DegenerateInputError,
    Severity,
)
from platesweep.geometry_checks import faces_oriented, mesh_watertight
from platesweep.geometry_utils import facet_normals
from platesweep.mesh import Color
from platesweep.outline import Plate
from platesweep.plate import _side_walls, build_plate


def _rect_plate(w=2.0, h=3.0, bottom=0.0, height=1.0):
    plate = Plate()
    plate.add_rectangle(0, 0, w, h)
    return plate.extrude(bottom, height)


def _holed_plate():
    plate = Plate()
    plate.add_rectangle(0, 0, 10, 10)
    plate.add_rectangle(0, 0, 4, 4)
    return plate.extrude(0, 2)


def test_rectangle_plate_counts():
    result = build_plate(_rect_plate(), "slab")
    mesh = result.mesh
    assert result.ok
    assert result.diagnostics == []
    assert mesh.vertex_count == 8
    assert mesh.triangle_count == 2 + 2 + 8
    assert mesh.validate() == []


def test_vertices_are_y_up():
    mesh = build_plate(_rect_plate(bottom=1.0, height=2.0)).mesh
    ys = {mesh.vertex(i)[1] for i in range(mesh.vertex_count)}
    assert ys == {1.0, 3.0}
    assert mesh.vertex(0) == (-1.0, 1.0, -1.5)


def test_rectangle_plate_is_closed_and_oriented():
    mesh = build_plate(_rect_plate()).mesh
    assert mesh_watertight(mesh)
    assert faces_oriented(mesh)


def test_caps_face_outward():
    mesh = build_plate(_rect_plate()).mesh
    normals = facet_normals(mesh.vertex_array(), mesh.index_array())
    assert normals[0][1] == pytest.approx(-1.0)
    assert normals[2][1] == pytest.approx(1.0)


def test_circle_plate_triangle_count():
    plate = Plate()
    plate.add_circle(0, 0, 10, 24)
    mesh = build_plate(plate.extrude(0, 1)).mesh
    assert mesh.triangle_count == 2 * (24 - 2) + 2 * 24


def test_plate_with_hole():
    result = build_plate(_holed_plate(), "washer")
    assert result.ok
    assert result.diagnostics == []
    mesh = result.mesh
    assert mesh.vertex_count == 16
    # two 10 entry merged rings: 8 faces per cap and 10 wall quads
    assert mesh.triangle_count == 8 + 8 + 20


def test_build_is_idempotent():
    first = build_plate(_holed_plate(), "washer").mesh
    second = build_plate(_holed_plate(), "washer").mesh
    assert first.vertices == second.vertices
    assert first.indices == second.indices


def test_short_outline_is_skipped():
    plate = _rect_plate()
    plate.outlines.append([(0.0, 0.0), (1.0, 1.0)])
    result = build_plate(plate)
    assert result.ok
    assert result.mesh.vertex_count == 8


def test_clockwise_outline_reports_degenerate_caps():
    plate = Plate()
    plate.add_rectangle(20, 0, 2, 2)
    plate.add_outline([(0, 0), (0, 1), (1, 1), (1, 0)], normalize=False)
    result = build_plate(plate.extrude(0, 1), "bad")
    assert not result.ok
    codes = {d.code for d in result.errors}
    assert codes == {DEGENERATE_OUTLINE}
    assert {d.outline for d in result.errors} == {1}
    assert all(d.severity is Severity.ERROR for d in result.errors)
    # the good outline and every wall are still built
    assert result.mesh.triangle_count == 12 + 8
    with pytest.raises(DegenerateInputError):
        result.raise_for_errors()


def test_group_and_material():
    result = build_plate(_rect_plate(), "slab", Color(1.0, 0.0, 0.0))
    (group,) = result.mesh.groups
    assert group.name == "slab"
    assert group.index_count == len(result.mesh.indices)
    assert group.material.kd == Color(1.0, 0.0, 0.0)
    assert group.material.ka == Color(0.3, 0.0, 0.0)


def _nested_plate(outer_first):
    plate = Plate()
    shapes = [(2, 2), (10, 8), (20, 20)]
    if outer_first:
        shapes.reverse()
    for w, h in shapes:
        plate.add_rectangle(0, 0, w, h)
    return plate.extrude(0, 1)


def test_island_hole_outer_in_outer_first_order():
    result = build_plate(_nested_plate(outer_first=True))
    assert result.diagnostics == []
    # outer+hole merged ring of 10, island of 4; caps 8+2 per side
    assert result.mesh.triangle_count == 2 * (8 + 2) + 2 * (10 + 4)


def test_island_first_order_reports_partial_solid():
    result = build_plate(_nested_plate(outer_first=False))
    assert result.ok
    (diag,) = result.warnings
    assert diag.code == PARTIAL_SOLID
    assert diag.severity is Severity.WARNING
    assert diag.outline == 2
    assert "side walls skipped" in diag.message
    assert result.mesh.triangle_count == 26
    assert result.mesh.triangle_count < build_plate(_nested_plate(True)).mesh.triangle_count


def test_unmatched_wall_vertices_are_reported():
    points = [(0.0, 0.0), (1.0, 0.0), (0.0, 1.0), (5.0, 5.0), (6.0, 5.0), (5.0, 6.0)]
    indices = []
    diagnostics = []
    _side_walls(points, [[0, 1, 2]], [[5, 4, 3]], [7], indices, diagnostics)
    assert indices == []
    (diag,) = diagnostics
    assert diag.code == PARTIAL_SOLID
    assert diag.outline == 7
    assert diag.message.startswith("3 wall quads")
