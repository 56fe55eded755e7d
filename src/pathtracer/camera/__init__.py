"""Camera module for primary ray generation.

Components:
    pinhole: Pinhole camera with an explicit view plane

Ray generation uses normalized image coordinates:
    x in [0, 1]: left to right across the image
    y in [0, 1]: bottom to top across the image
"""

from .pinhole import (
    get_camera_eye,
    get_camera_info,
    get_ray,
    primary_ray_direction,
    setup_camera,
)

__all__ = [
    "setup_camera",
    "get_ray",
    "get_camera_eye",
    "get_camera_info",
    "primary_ray_direction",
]
