"""STL import and export for platesweep meshes.

Binary facets are handled as a numpy record array with the 50 byte STL
layout: a float32 normal, three float32 corners and a uint16 attribute.
"""

from __future__ import annotations

import re
import struct
from contextlib import contextmanager
from typing import Iterator, List, Sequence, Tuple

import numpy as np

from platesweep.geometry_utils import facet_arrays
from platesweep.mesh import GREEN, Color, Mesh, single_group_mesh

_HEADER_SIZE = 80
_FACET = np.dtype([('normal', '<f4', (3,)), ('corners', '<f4', (3, 3)), ('attr', '<u2')])
_VERTEX_TOL = 1e-9  # Tolerance for vertex deduplication


@contextmanager
def _stream(path_or_file, mode: str) -> Iterator:
    if hasattr(path_or_file, 'write') or hasattr(path_or_file, 'read'):
        yield path_or_file
    elif 'b' in mode:
        with open(path_or_file, mode) as stream:
            yield stream
    else:
        with open(path_or_file, mode, encoding='ascii') as stream:
            yield stream


def write_stl(mesh: Mesh, path_or_file, *, binary: bool = True, name: str = 'platesweep',
              z_up: bool = True) -> None:
    """Write ``mesh`` to STL.

    ``path_or_file`` can be a filesystem path or an open binary/text stream.
    With ``z_up`` (the default) the mesh's Y-up frame is converted to the
    Z-up frame used by slicers.
    """

    corners, normals = facet_arrays(mesh, z_up=z_up)
    if binary:
        with _stream(path_or_file, 'wb') as stream:
            stream.write(_binary_stl(corners, normals, name))
    else:
        with _stream(path_or_file, 'w') as stream:
            stream.write(_ascii_stl(corners, normals, name))


def _binary_stl(corners: np.ndarray, normals: np.ndarray, name: str) -> bytes:
    header = name[:_HEADER_SIZE].encode('ascii', errors='replace').ljust(_HEADER_SIZE, b' ')
    records = np.zeros(len(corners), dtype=_FACET)
    records['normal'] = normals
    records['corners'] = corners
    return header + struct.pack('<I', len(records)) + records.tobytes()


def _xyz(v: Sequence[float]) -> str:
    return f"{v[0]:.6e} {v[1]:.6e} {v[2]:.6e}"


def _ascii_stl(corners: np.ndarray, normals: np.ndarray, name: str) -> str:
    lines = [f"solid {name}"]
    for tri, normal in zip(corners, normals):
        lines.append(f"  facet normal {_xyz(normal)}")
        lines.append("    outer loop")
        lines.extend(f"      vertex {_xyz(v)}" for v in tri)
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    return "\n".join(lines) + "\n"


# ---------------------------------------------------------------------------
# STL Import
# ---------------------------------------------------------------------------


def _is_binary_stl(data: bytes) -> bool:
    """Binary STL is an 80 byte header, a count, then 50 bytes per facet."""
    if len(data) < 84:
        return False
    header = data[:80].decode('ascii', errors='ignore').strip().lower()
    if not header.startswith('solid'):
        return True
    tri_count = struct.unpack('<I', data[80:84])[0]
    if len(data) != 84 + tri_count * _FACET.itemsize:
        return False
    rest = data[84:min(200, len(data))]
    return not (b'facet' in rest or b'vertex' in rest)


def _parse_binary_stl(data: bytes) -> np.ndarray:
    tri_count = struct.unpack('<I', data[80:84])[0]
    if len(data) < 84 + tri_count * _FACET.itemsize:
        raise ValueError("Invalid binary STL: truncated facet data")
    records = np.frombuffer(data, dtype=_FACET, count=tri_count, offset=84)
    return records['corners'].astype(np.float64)


_NUM = r'([eE\d.+-]+)'
_FACET_TEXT = re.compile(
    r'facet\s+normal\s+' + r'\s+'.join([_NUM] * 3) + r'\s+'
    r'outer\s+loop\s+'
    + r'\s+'.join([r'vertex\s+' + r'\s+'.join([_NUM] * 3)] * 3) + r'\s+'
    r'endloop\s+endfacet',
    re.IGNORECASE
)


def _parse_ascii_stl(text: str) -> np.ndarray:
    # the facet normal is recomputed from the corners, so only those are kept
    rows = [[float(g) for g in match.groups()[3:]] for match in _FACET_TEXT.finditer(text)]
    return np.asarray(rows, dtype=np.float64).reshape(-1, 3, 3)


def _vertex_key(v, tol: float = _VERTEX_TOL) -> Tuple[int, int, int]:
    scale = 1.0 / tol
    return (int(round(v[0] * scale)), int(round(v[1] * scale)), int(round(v[2] * scale)))


def read_stl(path_or_file, *, z_up: bool = True, name: str = '',
             color: Color = GREEN) -> Mesh:
    """Read an STL file into a single-group mesh.

    Coincident vertices are merged.  ``z_up`` undoes the axis swap (and
    winding reversal) applied by :func:`write_stl`.
    """

    if hasattr(path_or_file, 'read'):
        data = path_or_file.read()
        if isinstance(data, str):
            data = data.encode('utf-8')
    else:
        with open(path_or_file, 'rb') as f:
            data = f.read()

    if _is_binary_stl(data):
        corners = _parse_binary_stl(data)
    else:
        corners = _parse_ascii_stl(data.decode('utf-8', errors='replace'))
    if z_up:
        corners = corners[:, [0, 2, 1]][:, :, [0, 2, 1]]

    vertices: List[float] = []
    indices: List[int] = []
    vertex_map = {}
    for v in corners.reshape(-1, 3).tolist():
        key = _vertex_key(v)
        if key not in vertex_map:
            vertex_map[key] = len(vertices) // 3
            vertices.extend(v)
        indices.append(vertex_map[key])
    return single_group_mesh(name, vertices, indices, color)


__all__ = ['write_stl', 'read_stl']
