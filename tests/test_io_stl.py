import io
import struct

import pytest

from platesweep.io import read_stl, write_stl
from platesweep.outline import Plate
from platesweep.plate import build_plate


def _slab():
    plate = Plate()
    plate.add_rectangle(0, 0, 2, 4)
    return build_plate(plate.extrude(0, 1), "slab").mesh


def test_write_stl_binary(tmp_path):
    mesh = _slab()
    path = tmp_path / 'slab.stl'
    write_stl(mesh, path, binary=True, name='test')

    data = path.read_bytes()
    assert len(data) == 80 + 4 + 50 * mesh.triangle_count
    assert data[0:4] == b'test'
    count = struct.unpack('<I', data[80:84])[0]
    assert count == mesh.triangle_count


def test_write_stl_ascii():
    buf = io.StringIO()
    write_stl(_slab(), buf, binary=False, name='ascii_test')

    text = buf.getvalue()
    assert 'solid ascii_test' in text
    assert text.count('facet normal') == 12
    assert text.strip().endswith('endsolid ascii_test')


def test_z_up_puts_height_on_z():
    buf = io.StringIO()
    write_stl(_slab(), buf, binary=False)
    zs = set()
    for line in buf.getvalue().splitlines():
        parts = line.split()
        if parts and parts[0] == 'vertex':
            zs.add(float(parts[3]))
    assert zs == {0.0, 1.0}


@pytest.mark.parametrize('binary', [True, False])
def test_stl_round_trip(tmp_path, binary):
    mesh = _slab()
    path = tmp_path / 'slab.stl'
    write_stl(mesh, path, binary=binary)

    back = read_stl(path)
    assert back.triangle_count == mesh.triangle_count
    assert back.vertex_count == mesh.vertex_count
    for a, b in zip(back.triangles(), mesh.triangles()):
        for i, j in zip(a, b):
            assert back.vertex(i) == pytest.approx(mesh.vertex(j), abs=1e-6)


def test_read_stl_from_stream():
    buf = io.BytesIO()
    write_stl(_slab(), buf, binary=True)
    buf.seek(0)
    back = read_stl(buf, name='copy')
    assert back.triangle_count == 12
    assert back.groups[0].name == 'copy'


def test_truncated_binary_rejected():
    data = b'\0' * 80 + struct.pack('<I', 2) + b'\0' * 50
    with pytest.raises(ValueError):
        read_stl(io.BytesIO(data))


def test_binary_facet_layout():
    buf = io.BytesIO()
    write_stl(_slab(), buf, binary=True)
    data = buf.getvalue()
    for k in range(12):
        values = struct.unpack('<12fH', data[84 + 50 * k:84 + 50 * (k + 1)])
        normal = values[0:3]
        assert sum(c * c for c in normal) == pytest.approx(1.0, abs=1e-6)
        assert values[12] == 0
    # the first faces form the bottom cap, which faces down in the Z-up frame
    assert struct.unpack('<3f', data[84:96]) == pytest.approx((0.0, 0.0, -1.0))
