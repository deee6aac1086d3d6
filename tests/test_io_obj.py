import io

import pytest

from platesweep.io import read_mtl, read_obj, write_mtl, write_obj
from platesweep.io.obj import obj_text
from platesweep.mesh import Color, Material, merge_meshes
from platesweep.outline import Plate
from platesweep.plate import build_plate
from platesweep.sweep import Sweep, build_sweep
from platesweep.vecmath import Quaternion


def _assembly():
    plate = Plate()
    plate.add_rectangle(0, 0, 10, 10)
    plate.add_circle(0, 0, 4, 12)
    base = build_plate(plate.extrude(0, 2), "base plate", Color(0.0, 0.0, 1.0)).mesh

    sweep = Sweep(4, 8, fill_start=True, fill_end=True)
    sweep.add_scale(0, 1, 1)
    sweep.add_rotation(0, Quaternion.identity())
    sweep.add_position_at_time(0, 0, 2, 0)
    sweep.add_position_at_time(1, 0, 12, 0)
    post = build_sweep(sweep, "post").mesh
    return merge_meshes("part", [base, post])


def test_obj_text_layout():
    text = obj_text(_assembly(), mtl_name="part.mtl")
    lines = text.splitlines()
    assert lines[0] == "mtllib part.mtl"
    assert "g 'base plate'" in lines
    assert "usemtl 'post'" in lines
    faces = [l for l in lines if l.startswith("f ")]
    assert min(int(tok) for l in faces for tok in l.split()[1:]) == 1


def test_obj_round_trip(tmp_path):
    mesh = _assembly()
    obj_path = tmp_path / "part.obj"
    mtl_path = tmp_path / "part.mtl"
    write_obj(mesh, obj_path, mtl_name=mtl_path.name)
    write_mtl(mesh.materials(), mtl_path)

    materials = read_mtl(mtl_path)
    back = read_obj(obj_path, materials=materials)
    assert back.vertex_count == mesh.vertex_count
    assert back.indices == mesh.indices
    assert [(g.name, g.triangle_count) for g in back.groups] == [
        (g.name, g.triangle_count) for g in mesh.groups]
    assert back.groups[0].material.kd == Color(0.0, 0.0, 1.0)
    for i in range(mesh.vertex_count):
        assert back.vertex(i) == pytest.approx(mesh.vertex(i), abs=1e-5)


def test_mtl_records_and_dedupe():
    buf = io.StringIO()
    m = Material.from_color("shiny", Color(1.0, 0.5, 0.0))
    write_mtl([m, m], buf)
    text = buf.getvalue()
    assert text.count("newmtl 'shiny'") == 1
    assert "Kd 1.00 0.50 0.00" in text
    assert "Ka 0.30 0.15 0.00" in text
    assert "Ks 1.00 1.00 1.00" in text
    assert "Ns 20" in text
    assert "Ni 1.75" in text


def test_read_mtl_rejects_record_before_newmtl():
    with pytest.raises(ValueError):
        read_mtl(io.StringIO("Kd 1 1 1\n"))


def test_read_obj_polygons_and_negative_indices():
    text = "\n".join([
        "v 0 0 0",
        "v 1 0 0",
        "v 1 1 0",
        "v 0 1 0",
        "f 1/1/1 2/2/2 3/3/3 4/4/4",
        "g tri",
        "f -4 -3 -2",
        "",
    ])
    mesh = read_obj(io.StringIO(text))
    assert [g.name for g in mesh.groups] == ["", "tri"]
    assert mesh.groups[0].triangle_count == 2
    assert mesh.groups[1].triangle_count == 1
    assert mesh.indices[-3:] == [0, 1, 2]
    assert sorted(set(mesh.indices[:6])) == [0, 1, 2, 3]


def test_read_obj_rejects_short_face():
    with pytest.raises(ValueError):
        read_obj(io.StringIO("v 0 0 0\nv 1 0 0\nf 1 2\n"))


@pytest.mark.parametrize("face", ["f 0 1 2", "f 1 2 4", "f -4 1 2"])
def test_read_obj_rejects_out_of_range_index(face):
    text = "v 0 0 0\nv 1 0 0\nv 0 1 0\n" + face + "\n"
    with pytest.raises(ValueError, match="line 4: face index"):
        read_obj(io.StringIO(text))
