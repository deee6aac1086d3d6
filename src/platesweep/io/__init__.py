"""I/O utilities for platesweep meshes."""

from .obj import read_mtl, read_obj, write_mtl, write_obj
from .stl import read_stl, write_stl

__all__ = ['write_obj', 'read_obj', 'write_mtl', 'read_mtl', 'write_stl', 'read_stl']
