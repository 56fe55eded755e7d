"""Scene module: triangle storage, traversal and scene construction.

Components:
    intersection: Triangle fields, HitInfo and nearest-hit traversal
    manager: Validated scene construction and JSON asset loading
    cornell_box: The Cornell box as a triangle scene

Scene data lives in Taichi fields laid out as a structure of arrays and is
read-only while kernels run.
"""

from .cornell_box import (
    CornellBoxParams,
    create_cornell_box_scene,
    get_cornell_box_bounds,
)
from .intersection import (
    MAX_TRIANGLES,
    HitInfo,
    add_triangle,
    clear_scene,
    get_triangle,
    get_triangle_count,
    intersect_scene,
)
from .manager import (
    SceneError,
    SceneManager,
    TriangleInfo,
    load_scene_file,
    save_scene_file,
)

__all__ = [
    # Intersection module
    "HitInfo",
    "MAX_TRIANGLES",
    "add_triangle",
    "clear_scene",
    "get_triangle",
    "get_triangle_count",
    "intersect_scene",
    # Manager module
    "SceneError",
    "SceneManager",
    "TriangleInfo",
    "load_scene_file",
    "save_scene_file",
    # Cornell box module
    "CornellBoxParams",
    "create_cornell_box_scene",
    "get_cornell_box_bounds",
]
