"""Geometry module for the triangle primitive.

Components:
    triangle: Triangle dataclass and Moller-Trumbore intersection

All intersection routines are Taichi functions (@ti.func) and are called
from the scene traversal inside rendering kernels.
"""

from .triangle import (
    Triangle,
    TriangleHit,
    hit_triangle,
    make_triangle,
    triangle_area,
    triangle_centroid,
    triangle_normal,
)

__all__ = [
    "Triangle",
    "TriangleHit",
    "hit_triangle",
    "make_triangle",
    "triangle_area",
    "triangle_centroid",
    "triangle_normal",
]
