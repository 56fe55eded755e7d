"""Pinhole camera model for primary ray generation.

The camera is an eye point plus a rectangular view plane. The plane is
described by its centre ``middle``, a full-width vector ``right`` (scaled by
the aspect ratio) and a full-height vector ``up``. A normalized image
coordinate (x, y) in [0, 1]^2 maps to the plane point

    left_bottom + x * right + y * up,   left_bottom = middle - right/2 - up/2

and the primary ray runs from the eye through that point. (0, 0) is the
bottom-left corner of the image.

Example:
    >>> from src.pathtracer.camera.pinhole import setup_camera
    >>> from src.pathtracer.core.config import CameraConfig
    >>> setup_camera(CameraConfig())
    >>> @ti.kernel
    ... def centre_direction() -> vec3:
    ...     return get_ray(0.5, 0.5).direction
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.core.config import CameraConfig
from src.pathtracer.core.ray import Ray, make_ray, vec3

# =============================================================================
# Taichi Fields for Camera State (GPU-accessible)
# =============================================================================

_camera_eye = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_left_bottom = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_right = ti.Vector.field(3, dtype=ti.f32, shape=())  # Aspect-scaled
_camera_up = ti.Vector.field(3, dtype=ti.f32, shape=())


def _view_plane(config: CameraConfig):
    """Compute (eye, left_bottom, right, up) as float64 arrays."""
    eye = np.array(config.eye, dtype=np.float64)
    middle = np.array(config.middle, dtype=np.float64)
    up = np.array(config.up, dtype=np.float64)
    right = config.aspect_ratio * np.array(config.right, dtype=np.float64)
    left_bottom = middle - 0.5 * right - 0.5 * up
    return eye, left_bottom, right, up


def setup_camera(config: CameraConfig) -> None:
    """Validate a camera configuration and upload it to the camera fields.

    Args:
        config: Camera configuration.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    config.validate()
    eye, left_bottom, right, up = _view_plane(config)

    _camera_eye[None] = eye.tolist()
    _camera_left_bottom[None] = left_bottom.tolist()
    _camera_right[None] = right.tolist()
    _camera_up[None] = up.tolist()


@ti.func
def get_ray(x: ti.f32, y: ti.f32) -> Ray:
    """Generate the primary ray through normalized image coordinates.

    Args:
        x: Horizontal coordinate in [0, 1] (left to right).
        y: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the eye with a unit direction.
    """
    eye = _camera_eye[None]
    plane_point = _camera_left_bottom[None] + x * _camera_right[None] + y * _camera_up[None]
    return make_ray(eye, tm.normalize(plane_point - eye))


@ti.func
def get_camera_eye() -> vec3:
    """Get the eye position in world space."""
    return _camera_eye[None]


def primary_ray_direction(config: CameraConfig, x: float, y: float) -> npt.NDArray[np.float64]:
    """Host-side mirror of :func:`get_ray` returning the unit direction.

    Useful for checking device results and for aiming rays in tests.
    """
    eye, left_bottom, right, up = _view_plane(config)
    direction = left_bottom + x * right + y * up - eye
    return direction / np.linalg.norm(direction)


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the uploaded camera state for debugging.

    Returns:
        Dictionary with eye, left_bottom, right and up.
    """
    info = {}
    for name, field in (
        ("eye", _camera_eye),
        ("left_bottom", _camera_left_bottom),
        ("right", _camera_right),
        ("up", _camera_up),
    ):
        value = field[None]
        info[name] = (float(value[0]), float(value[1]), float(value[2]))
    return info
