"""Indexed triangle meshes with named material groups.

A :class:`Mesh` is what every builder produces and every exporter
consumes: a flat vertex buffer (three floats per vertex), a flat index
buffer (three indices per triangle) and an ordered list of
:class:`Group` records partitioning the index buffer.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Iterable, Iterator, List, Sequence, Tuple

import numpy as np

from platesweep.vecmath import Vec3

TriTuple = Tuple[Vec3, Vec3, Vec3, Vec3]


@dataclass(frozen=True)
class Color:
    r: float
    g: float
    b: float

    def light(self, k: float) -> "Color":
        """Return the colour scaled by ``k``."""
        return Color(self.r * k, self.g * k, self.b * k)

    def as_tuple(self) -> Tuple[float, float, float]:
        return self.r, self.g, self.b


GREEN = Color(0.0, 1.0, 0.0)
WHITE = Color(1.0, 1.0, 1.0)


@dataclass
class Material:
    name: str
    kd: Color = GREEN
    ka: Color = WHITE.light(0.1)
    ks: Color = WHITE
    ns: float = 20.0
    ni: float = 1.75

    @classmethod
    def from_color(cls, name: str, color: Color) -> "Material":
        """Material used for built parts: ``color`` lit at 30% for ambient."""
        return cls(name, kd=color, ka=color.light(0.3), ks=WHITE, ns=20.0, ni=1.75)


@dataclass
class Group:
    name: str
    index_offset: int = 0
    index_count: int = 0
    material: Material = field(default_factory=lambda: Material(""))
    visible: bool = True

    @property
    def triangle_count(self) -> int:
        return self.index_count // 3


@dataclass
class Mesh:
    name: str = ""
    vertices: List[float] = field(default_factory=list)
    indices: List[int] = field(default_factory=list)
    groups: List[Group] = field(default_factory=list)

    @property
    def vertex_count(self) -> int:
        return len(self.vertices) // 3

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3

    def add_vertex(self, x: float, y: float, z: float) -> int:
        self.vertices.extend((float(x), float(y), float(z)))
        return self.vertex_count - 1

    def vertex(self, i: int) -> Vec3:
        j = 3 * i
        return self.vertices[j], self.vertices[j + 1], self.vertices[j + 2]

    def triangles(self) -> Iterator[Tuple[int, int, int]]:
        idx = self.indices
        for i in range(0, len(idx) - 2, 3):
            yield idx[i], idx[i + 1], idx[i + 2]

    def group_triangles(self, group: Group) -> Iterator[Tuple[int, int, int]]:
        idx = self.indices
        end = group.index_offset + group.index_count
        for i in range(group.index_offset, end, 3):
            yield idx[i], idx[i + 1], idx[i + 2]

    def materials(self) -> List[Material]:
        return [g.material for g in self.groups]

    def vertex_array(self) -> np.ndarray:
        """``(n, 3)`` float64 copy of the vertex buffer."""
        return np.asarray(self.vertices, dtype=np.float64).reshape(-1, 3)

    def index_array(self) -> np.ndarray:
        """``(m, 3)`` int64 copy of the index buffer."""
        return np.asarray(self.indices, dtype=np.int64).reshape(-1, 3)

    def validate(self) -> List[str]:
        """Return a list of structural problems (empty when the mesh is sound)."""
        problems: List[str] = []
        if len(self.vertices) % 3:
            problems.append("vertex buffer length is not a multiple of 3")
        if len(self.indices) % 3:
            problems.append("index buffer length is not a multiple of 3")
        count = self.vertex_count
        bad = [i for i in self.indices if i < 0 or i >= count]
        if bad:
            problems.append(f"{len(bad)} indices out of range [0, {count})")
        expected = 0
        for g in self.groups:
            if g.index_offset != expected:
                problems.append(
                    f"group '{g.name}' starts at {g.index_offset}, expected {expected}")
            if g.index_count % 3:
                problems.append(f"group '{g.name}' index count is not a multiple of 3")
            expected = g.index_offset + g.index_count
        if self.groups and expected != len(self.indices):
            problems.append(
                f"groups cover {expected} indices, index buffer has {len(self.indices)}")
        return problems

    def to_trimesh(self):
        """Return a ``trimesh.Trimesh`` sharing this mesh's geometry.

        Requires the optional ``trimesh`` dependency.
        """
        try:
            import trimesh
        except ImportError as exc:  # pragma: no cover - optional dependency
            raise ImportError("trimesh must be installed to convert meshes") from exc
        return trimesh.Trimesh(vertices=self.vertex_array(),
                               faces=self.index_array(),
                               process=False)


def mesh_view(mesh: Mesh) -> Iterator[TriTuple]:
    """Yield ``(normal, v0, v1, v2)`` for every non-degenerate triangle."""
    from platesweep.geometry_utils import triangle_normal

    for a, o, b in mesh.triangles():
        v0 = mesh.vertex(a)
        v1 = mesh.vertex(o)
        v2 = mesh.vertex(b)
        normal = triangle_normal(v0, v1, v2)
        if normal is None:
            continue
        yield normal, v0, v1, v2


def merge_meshes(name: str, meshes: Iterable[Mesh]) -> Mesh:
    """Concatenate meshes into one, one output group per input group."""

    merged = Mesh(name)
    vertex_ofs = 0
    for mesh in meshes:
        merged.vertices.extend(mesh.vertices)
        for group in mesh.groups:
            out = replace(group, index_offset=len(merged.indices), index_count=0)
            for tri in mesh.group_triangles(group):
                merged.indices.extend(vertex_ofs + i for i in tri)
                out.index_count += 3
            merged.groups.append(out)
        vertex_ofs += mesh.vertex_count
    return merged


def single_group_mesh(name: str, vertices: Sequence[float], indices: Sequence[int],
                      color: Color) -> Mesh:
    """Wrap buffers in a mesh with one group covering every index."""
    group = Group(name, 0, len(indices), Material.from_color(name, color))
    return Mesh(name, list(vertices), list(indices), [group])


__all__ = [
    "Color",
    "GREEN",
    "WHITE",
    "Material",
    "Group",
    "Mesh",
    "mesh_view",
    "merge_meshes",
    "single_group_mesh",
]
