"""Wavefront OBJ/MTL import and export for platesweep meshes.

Groups map to ``g`` records and their materials to ``usemtl``.  Names are
written single quoted so they may contain spaces.  Face indices are
1-based in the file and 0-based in :class:`~platesweep.mesh.Mesh`.
"""

from __future__ import annotations

import io
import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, TextIO

from platesweep.mesh import Color, Group, Material, Mesh

logger = logging.getLogger(__name__)


@contextmanager
def _text_stream(path_or_file, mode: str) -> Iterator[TextIO]:
    if hasattr(path_or_file, 'write') or hasattr(path_or_file, 'read'):
        yield path_or_file
    else:
        with open(path_or_file, mode, encoding='utf-8') as stream:
            yield stream


def _quote(name: str) -> str:
    return f"'{name}'"


def _unquote(token: str) -> str:
    token = token.strip()
    if len(token) >= 2 and token[0] == token[-1] and token[0] in "'\"":
        return token[1:-1]
    return token


def _rest(line: str) -> str:
    parts = line.split(None, 1)
    return _unquote(parts[1]) if len(parts) > 1 else ""


def write_obj(mesh: Mesh, path_or_file, *, mtl_name: Optional[str] = None,
              precision: int = 6) -> None:
    """Write ``mesh`` as OBJ text, one ``g`` block per group."""

    fmt = f"{{:.{precision}e}}"
    with _text_stream(path_or_file, 'w') as stream:
        if mtl_name:
            stream.write(f"mtllib {mtl_name}\n")
        for i in range(mesh.vertex_count):
            x, y, z = mesh.vertex(i)
            stream.write(f"v {fmt.format(x)} {fmt.format(y)} {fmt.format(z)}\n")
        for group in mesh.groups:
            stream.write(f"g {_quote(group.name)}\n")
            stream.write(f"usemtl {_quote(group.material.name)}\n")
            for a, o, b in mesh.group_triangles(group):
                stream.write(f"f {a + 1} {o + 1} {b + 1}\n")


def write_mtl(materials: Iterable[Material], path_or_file) -> None:
    """Write MTL records; a name that repeats is written only once."""

    seen = set()
    with _text_stream(path_or_file, 'w') as stream:
        for m in materials:
            if m.name in seen:
                continue
            seen.add(m.name)
            stream.write(f"newmtl {_quote(m.name)}\n")
            stream.write("Kd {:.2f} {:.2f} {:.2f}\n".format(*m.kd.as_tuple()))
            stream.write("Ka {:.2f} {:.2f} {:.2f}\n".format(*m.ka.as_tuple()))
            stream.write("Ks {:.2f} {:.2f} {:.2f}\n".format(*m.ks.as_tuple()))
            stream.write(f"Ns {m.ns:g}\n")
            stream.write(f"Ni {m.ni:g}\n")
            stream.write("\n")


def read_mtl(path_or_file) -> Dict[str, Material]:
    """Parse MTL text into materials keyed by name."""

    materials: Dict[str, Material] = {}
    current: Optional[Material] = None
    with _text_stream(path_or_file, 'r') as stream:
        for lineno, raw in enumerate(stream, 1):
            line = raw.strip()
            if not line or line.startswith('#'):
                continue
            cols = line.split()
            key = cols[0]
            if key == 'newmtl':
                current = Material(_rest(line))
                materials[current.name] = current
                continue
            if current is None:
                raise ValueError(f"line {lineno}: '{key}' before any newmtl")
            if key in ('Kd', 'Ka', 'Ks'):
                color = Color(float(cols[1]), float(cols[2]), float(cols[3]))
                setattr(current, key.lower(), color)
            elif key == 'Ns':
                current.ns = float(cols[1])
            elif key == 'Ni':
                current.ni = float(cols[1])
    return materials


def _face_index(token: str, vertex_count: int, lineno: int) -> int:
    idx = int(token.split('/')[0])
    # negative indices count back from the last vertex read
    resolved = idx - 1 if idx > 0 else vertex_count + idx
    if idx == 0 or not 0 <= resolved < vertex_count:
        raise ValueError(f"line {lineno}: face index {idx} is out of range "
                         f"for {vertex_count} vertices")
    return resolved


def _strip_triangles(corners: List[int]) -> List[int]:
    """Split a polygon into triangles as a zig-zag strip."""
    n = len(corners)
    half = n // 2
    out: List[int] = []
    for i in range(1, half):
        bl = corners[i - 1]
        br = corners[i]
        tr = corners[n - i - 1]
        tl = corners[n - i]
        out.extend((tl, bl, br))
        out.extend((br, tr, tl))
    if n % 2:
        out.extend((corners[half - 1], corners[half], corners[half + 1]))
    return out


def read_obj(path_or_file, *, materials: Optional[Mapping[str, Material]] = None,
             name: str = '') -> Mesh:
    """Parse OBJ text into a mesh.

    Faces with more than three corners are split into triangles.  Faces
    before the first ``g`` record land in an unnamed group.  ``materials``
    (e.g. from :func:`read_mtl`) are attached to groups by ``usemtl`` name.
    """

    mesh = Mesh(name)
    group: Optional[Group] = None
    usemtl = ""
    materials = materials or {}

    def _material(mat_name: str) -> Material:
        return materials.get(mat_name) or Material(mat_name)

    with _text_stream(path_or_file, 'r') as stream:
        for lineno, raw in enumerate(stream, 1):
            line = raw.strip()
            if not line or line.startswith('#'):
                continue
            cols = line.split()
            key = cols[0]
            if key == 'v':
                mesh.add_vertex(float(cols[1]), float(cols[2]), float(cols[3]))
            elif key == 'g':
                group = Group(_rest(line), len(mesh.indices), 0, _material(usemtl))
                mesh.groups.append(group)
            elif key == 'usemtl':
                usemtl = _rest(line)
                if group is not None:
                    group.material = _material(usemtl)
            elif key == 'f':
                corners = [_face_index(tok, mesh.vertex_count, lineno) for tok in cols[1:]]
                if len(corners) < 3:
                    raise ValueError(f"line {lineno}: face with fewer than 3 corners")
                if group is None:
                    group = Group("", len(mesh.indices), 0, _material(usemtl))
                    mesh.groups.append(group)
                tris = corners if len(corners) == 3 else _strip_triangles(corners)
                mesh.indices.extend(tris)
                group.index_count += len(tris)
            else:
                logger.debug("ignoring OBJ record '%s' on line %d", key, lineno)
    return mesh


def obj_text(mesh: Mesh, mtl_name: Optional[str] = None, precision: int = 6) -> str:
    buf = io.StringIO()
    write_obj(mesh, buf, mtl_name=mtl_name, precision=precision)
    return buf.getvalue()


__all__ = ['write_obj', 'write_mtl', 'read_obj', 'read_mtl', 'obj_text']
