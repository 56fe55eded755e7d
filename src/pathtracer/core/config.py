"""Render and camera configuration.

Everything the renderer can be tuned with lives here as plain dataclasses.
Configurations are validated on the host before anything is uploaded to
Taichi fields, so a bad value surfaces as a ``ConfigurationError`` at setup
time instead of NaN pixels at render time.

Example:
    >>> from src.pathtracer.core.config import RenderConfig
    >>> config = RenderConfig(width=256, height=256, sample_count=4)
    >>> config.validate()
    >>> RenderConfig(sample_count=0).validate()
    Traceback (most recent call last):
        ...
    src.pathtracer.core.config.ConfigurationError: sample_count must be >= 1, got 0
"""

import math
import numbers
from dataclasses import asdict, dataclass, field, fields
from typing import Any

# Buffers are preallocated to this size to avoid kernel recompilation
MAX_IMAGE_SIZE = 2048

# Intersection defaults
DEFAULT_EPSILON = 1e-4
DEFAULT_T_MIN = 1e-3
DEFAULT_T_MAX = 100.0

Vector3 = tuple[float, float, float]


class ConfigurationError(ValueError):
    """Raised when a render or camera configuration is invalid."""


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool)


def _check_vector(name: str, value: Vector3) -> None:
    if isinstance(value, (str, bytes)) or not hasattr(value, "__len__"):
        raise ConfigurationError(f"{name} must be a sequence of 3 numbers, got {value!r}")
    if len(value) != 3:
        raise ConfigurationError(f"{name} must have 3 components, got {len(value)}")
    if not all(_is_number(c) for c in value):
        raise ConfigurationError(f"{name} must contain only numbers, got {value!r}")
    if not all(math.isfinite(c) for c in value):
        raise ConfigurationError(f"{name} must be finite, got {tuple(value)}")


def _coerce_vector(name: str, value: Any) -> tuple[float, ...]:
    """Convert a JSON-style list to a float tuple.

    Raises:
        ConfigurationError: If ``value`` is not a sequence of numbers.
    """
    if isinstance(value, (str, bytes)):
        raise ConfigurationError(f"{name} must be a sequence of 3 numbers, got {value!r}")
    try:
        return tuple(float(c) for c in value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"{name} must be a sequence of 3 numbers, got {value!r}") from e


def _cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _norm(a: Vector3) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


@dataclass
class CameraConfig:
    """Pinhole camera defined by an eye point and a rectangular view plane.

    The view plane is centred on ``middle`` and spanned by ``right`` (scaled
    by ``aspect_ratio``) and ``up``. Image coordinate (0, 0) maps to the
    bottom-left corner ``middle - right/2 - up/2``.

    The defaults frame the Cornell box of
    :func:`src.pathtracer.scene.cornell_box.create_cornell_box_scene`.

    Attributes:
        eye: Camera position.
        middle: Centre of the view plane.
        up: Full-height vector of the view plane.
        right: Full-width vector of the view plane before aspect scaling.
        aspect_ratio: Width / height multiplier applied to ``right``.
    """

    eye: Vector3 = (0.278, 0.8, 0.2744)
    middle: Vector3 = (0.278, 0.0, 0.2744)
    up: Vector3 = (0.0, 0.0, 0.56)
    right: Vector3 = (-0.56, 0.0, 0.0)
    aspect_ratio: float = 1.0

    def validate(self) -> None:
        """Check the camera geometry.

        Raises:
            ConfigurationError: If a vector is malformed or non-finite, the
                plane vectors are zero or parallel, the aspect ratio is not
                positive, or the eye lies on the view plane.
        """
        for name in ("eye", "middle", "up", "right"):
            _check_vector(name, getattr(self, name))

        if (
            not _is_number(self.aspect_ratio)
            or not math.isfinite(self.aspect_ratio)
            or self.aspect_ratio <= 0.0
        ):
            raise ConfigurationError(
                f"aspect_ratio must be a positive number, got {self.aspect_ratio}"
            )

        if _norm(self.up) < 1e-12:
            raise ConfigurationError("up must be a non-zero vector")
        if _norm(self.right) < 1e-12:
            raise ConfigurationError("right must be a non-zero vector")

        plane_normal = _cross(self.right, self.up)
        if _norm(plane_normal) < 1e-12:
            raise ConfigurationError("up and right must not be parallel")

        offset = tuple(e - m for e, m in zip(self.eye, self.middle))
        distance = sum(o * n for o, n in zip(offset, plane_normal)) / _norm(plane_normal)
        if abs(distance) < 1e-9:
            raise ConfigurationError("eye must not lie on the view plane")


@dataclass
class RenderConfig:
    """Top-level renderer configuration.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        sample_count: Reflected-radiance samples averaged per pixel per frame.
            Must be at least 1.
        epsilon: Determinant threshold below which a ray counts as parallel
            to a triangle.
        t_min: Closest accepted hit distance. Keeps secondary rays from
            re-hitting the surface they start on.
        t_max: Farthest accepted hit distance.
        camera: Pinhole camera configuration.
    """

    width: int = 512
    height: int = 512
    sample_count: int = 1
    epsilon: float = DEFAULT_EPSILON
    t_min: float = DEFAULT_T_MIN
    t_max: float = DEFAULT_T_MAX
    camera: CameraConfig = field(default_factory=CameraConfig)

    def validate(self) -> None:
        """Validate every field, including the camera.

        Raises:
            ConfigurationError: On the first invalid value found.
        """
        for name in ("width", "height", "sample_count"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise ConfigurationError(
                    f"{name} must be an integer, got {type(value).__name__}"
                )

        if self.sample_count < 1:
            raise ConfigurationError(f"sample_count must be >= 1, got {self.sample_count}")

        if not (1 <= self.width <= MAX_IMAGE_SIZE and 1 <= self.height <= MAX_IMAGE_SIZE):
            raise ConfigurationError(
                f"Image dimensions ({self.width}x{self.height}) must be within "
                f"1..{MAX_IMAGE_SIZE} in each direction"
            )

        for name in ("epsilon", "t_min", "t_max"):
            value = getattr(self, name)
            if not _is_number(value):
                raise ConfigurationError(f"{name} must be a number, got {value!r}")
            if not math.isfinite(value):
                raise ConfigurationError(f"{name} must be finite, got {value}")

        if self.epsilon <= 0.0:
            raise ConfigurationError(f"epsilon must be positive, got {self.epsilon}")

        if not 0.0 < self.t_min < self.t_max:
            raise ConfigurationError(
                f"Expected 0 < t_min < t_max, got t_min={self.t_min}, t_max={self.t_max}"
            )

        self.camera.validate()

    def to_dict(self) -> dict[str, Any]:
        """Export the configuration as JSON-friendly primitives."""
        data = asdict(self)
        for key, value in data["camera"].items():
            if isinstance(value, tuple):
                data["camera"][key] = list(value)
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "RenderConfig":
        """Build a configuration from a dictionary.

        Missing keys keep their defaults. The result is validated.

        Args:
            data: Dictionary as produced by :meth:`to_dict`.

        Returns:
            A validated RenderConfig.

        Raises:
            ConfigurationError: If unknown keys are present or a value is
                invalid.
        """
        if not isinstance(data, dict):
            raise ConfigurationError(
                f"Render config must be a mapping, got {type(data).__name__}"
            )

        known = {f.name for f in fields(cls)}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(f"Unknown render config keys: {sorted(unknown)}")

        camera_data = data.get("camera", {})
        if not isinstance(camera_data, dict):
            raise ConfigurationError(
                f"camera must be a mapping, got {type(camera_data).__name__}"
            )
        camera_data = dict(camera_data)
        camera_known = {f.name for f in fields(CameraConfig)}
        unknown = set(camera_data) - camera_known
        if unknown:
            raise ConfigurationError(f"Unknown camera config keys: {sorted(unknown)}")

        for key, value in camera_data.items():
            if key != "aspect_ratio":
                camera_data[key] = _coerce_vector(f"camera.{key}", value)

        kwargs = {k: v for k, v in data.items() if k != "camera"}
        config = cls(camera=CameraConfig(**camera_data), **kwargs)
        config.validate()
        return config
