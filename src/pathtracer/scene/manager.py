"""Scene construction, validation and asset loading.

The SceneManager is the only writer of the scene fields. It validates each
triangle record before upload, keeps a host-side copy for export, and reads
and writes scene assets as JSON.

Asset format::

    {
        "triangles": [
            {
                "v0": [x, y, z], "v1": [x, y, z], "v2": [x, y, z],
                "albedo": [r, g, b],
                "emission": [r, g, b],   # optional, defaults to black
                "normal": [x, y, z]      # optional, derived from the winding
            },
            ...
        ]
    }

Example:
    >>> scene = SceneManager()
    >>> scene.add_triangle(
    ...     (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0),
    ...     albedo=(0.7, 0.7, 0.7),
    ... )
    0
    >>> scene.get_triangle(0).normal
    (0.0, 0.0, 1.0)
"""

import json
import math
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from src.pathtracer.scene.intersection import (
    MAX_TRIANGLES,
    add_triangle,
    clear_scene,
    get_triangle_count,
)

Vector3 = tuple[float, float, float]

# Twice-area threshold below which a triangle counts as degenerate
MIN_TRIANGLE_AREA = 1e-12

BLACK: Vector3 = (0.0, 0.0, 0.0)


class SceneError(ValueError):
    """Raised when scene data is malformed."""


@dataclass(frozen=True)
class TriangleInfo:
    """Host-side copy of an uploaded triangle.

    Attributes:
        triangle_index: Index in the scene fields.
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        normal: Unit face normal.
        albedo: Diffuse reflectance.
        emission: Emitted radiance.
    """

    triangle_index: int
    v0: Vector3
    v1: Vector3
    v2: Vector3
    normal: Vector3
    albedo: Vector3
    emission: Vector3

    @property
    def is_emissive(self) -> bool:
        return any(c > 0.0 for c in self.emission)


def _sub(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] - b[0], a[1] - b[1], a[2] - b[2])


def _add(a: Vector3, b: Vector3) -> Vector3:
    return (a[0] + b[0], a[1] + b[1], a[2] + b[2])


def _cross(a: Vector3, b: Vector3) -> Vector3:
    return (
        a[1] * b[2] - a[2] * b[1],
        a[2] * b[0] - a[0] * b[2],
        a[0] * b[1] - a[1] * b[0],
    )


def _length(a: Vector3) -> float:
    return math.sqrt(a[0] * a[0] + a[1] * a[1] + a[2] * a[2])


def _as_vector(name: str, value: Any) -> Vector3:
    """Coerce a 3-sequence of numbers to a float tuple.

    Raises:
        SceneError: If ``value`` is not three finite numbers.
    """
    try:
        components = [float(c) for c in value]
    except (TypeError, ValueError) as e:
        raise SceneError(f"{name} must be a sequence of 3 numbers, got {value!r}") from e
    if len(components) != 3:
        raise SceneError(f"{name} must have 3 components, got {len(components)}")
    if not all(math.isfinite(c) for c in components):
        raise SceneError(f"{name} must be finite, got {tuple(components)}")
    return (components[0], components[1], components[2])


# (v0, v1, v2, unit_normal, albedo, emission), the argument order of add_triangle
_TriangleRecord = tuple[Vector3, Vector3, Vector3, Vector3, Vector3, Vector3]


def _prepare_triangle(
    v0: Any,
    v1: Any,
    v2: Any,
    albedo: Any,
    emission: Any = BLACK,
    normal: Any = None,
) -> _TriangleRecord:
    """Coerce and validate one triangle without touching the scene fields.

    Raises:
        SceneError: If any value is malformed, the albedo or emission is out
            of range, the vertices are collinear or the normal is zero.
    """
    v0 = _as_vector("v0", v0)
    v1 = _as_vector("v1", v1)
    v2 = _as_vector("v2", v2)
    albedo = _as_vector("albedo", albedo)
    emission = _as_vector("emission", emission)

    if not all(0.0 <= c <= 1.0 for c in albedo):
        raise SceneError(f"albedo components must be in [0, 1], got {albedo}")
    if not all(c >= 0.0 for c in emission):
        raise SceneError(f"emission components must be non-negative, got {emission}")

    winding = _cross(_sub(v1, v0), _sub(v2, v0))
    twice_area = _length(winding)
    if twice_area < MIN_TRIANGLE_AREA:
        raise SceneError(f"Degenerate triangle (collinear vertices): {v0}, {v1}, {v2}")

    if normal is None:
        n = winding
        n_len = twice_area
    else:
        n = _as_vector("normal", normal)
        n_len = _length(n)
        if n_len < 1e-12:
            raise SceneError("normal must be a non-zero vector")
    unit_normal = (n[0] / n_len, n[1] / n_len, n[2] / n_len)

    return (v0, v1, v2, unit_normal, albedo, emission)


class SceneManager:
    """Builds the triangle scene and keeps a validated host-side copy.

    Creating a SceneManager clears the scene fields, so at most one manager
    should be live at a time.

    Attributes:
        triangles: TriangleInfo for every triangle, in upload order.

    Example:
        >>> scene = SceneManager()
        >>> scene.add_quad(
        ...     corner=(0.0, 0.0, 0.0), edge_u=(1.0, 0.0, 0.0), edge_v=(0.0, 1.0, 0.0),
        ...     albedo=(0.0, 0.0, 0.0), emission=(1.0, 1.0, 1.0),
        ... )
        (0, 1)
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.triangles: list[TriangleInfo] = []
        self.clear()

    def clear(self) -> None:
        """Remove all triangles from the scene fields and the host copy."""
        clear_scene()
        self.triangles.clear()

    def add_triangle(
        self,
        v0: Vector3,
        v1: Vector3,
        v2: Vector3,
        albedo: Vector3,
        emission: Vector3 = BLACK,
        normal: Vector3 | None = None,
    ) -> int:
        """Validate and upload one triangle.

        Args:
            v0: First vertex.
            v1: Second vertex.
            v2: Third vertex.
            albedo: Diffuse reflectance, each component in [0, 1].
            emission: Emitted radiance, each component >= 0. Default black.
            normal: Face normal. Normalized if given; derived from the
                winding ``(v1 - v0) x (v2 - v0)`` if omitted.

        Returns:
            The index of the added triangle.

        Raises:
            SceneError: If any value is malformed, the albedo or emission is
                out of range, or the vertices are collinear.
            RuntimeError: If the maximum number of triangles is exceeded.
        """
        return self._upload(_prepare_triangle(v0, v1, v2, albedo, emission, normal))

    def _upload(self, record: _TriangleRecord) -> int:
        index = add_triangle(*record)
        self.triangles.append(TriangleInfo(index, *record))
        return index

    def add_quad(
        self,
        corner: Vector3,
        edge_u: Vector3,
        edge_v: Vector3,
        albedo: Vector3,
        emission: Vector3 = BLACK,
    ) -> tuple[int, int]:
        """Add a parallelogram as two triangles.

        The parallelogram has vertices corner, corner+u, corner+u+v and
        corner+v. Both triangles keep the winding of (u, v), so their normal
        is ``normalize(u x v)``.

        Returns:
            Indices of the two triangles.
        """
        corner = _as_vector("corner", corner)
        edge_u = _as_vector("edge_u", edge_u)
        edge_v = _as_vector("edge_v", edge_v)

        p1 = _add(corner, edge_u)
        p2 = _add(p1, edge_v)
        p3 = _add(corner, edge_v)

        first = self.add_triangle(corner, p1, p2, albedo, emission)
        second = self.add_triangle(corner, p2, p3, albedo, emission)
        return first, second

    def get_triangle(self, index: int) -> TriangleInfo:
        """Return the host-side record of a triangle.

        Raises:
            IndexError: If ``index`` is out of range.
        """
        return self.triangles[index]

    def get_triangle_count(self) -> int:
        """Number of triangles currently in the scene fields."""
        return get_triangle_count()

    def get_emissive_triangles(self) -> list[TriangleInfo]:
        """All triangles with non-zero emission."""
        return [tri for tri in self.triangles if tri.is_emissive]

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Export the scene as a JSON-friendly dictionary."""
        return {
            "triangles": [
                {
                    "v0": list(tri.v0),
                    "v1": list(tri.v1),
                    "v2": list(tri.v2),
                    "normal": list(tri.normal),
                    "albedo": list(tri.albedo),
                    "emission": list(tri.emission),
                }
                for tri in self.triangles
            ]
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Replace the scene with the triangles in ``data``.

        Args:
            data: Dictionary with a ``triangles`` list.

        Every record is validated before the current scene is cleared, so a
        malformed record leaves the existing scene untouched.

        Raises:
            SceneError: If the data is malformed.
        """
        records = data.get("triangles") if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise SceneError("Scene data must contain a 'triangles' list")
        if len(records) > MAX_TRIANGLES:
            raise SceneError(
                f"Scene has {len(records)} triangles, maximum is {MAX_TRIANGLES}"
            )

        prepared = []
        for i, record in enumerate(records):
            if not isinstance(record, dict):
                raise SceneError(f"Triangle {i} must be an object, got {type(record).__name__}")
            missing = [key for key in ("v0", "v1", "v2", "albedo") if key not in record]
            if missing:
                raise SceneError(f"Triangle {i} is missing {missing}")
            try:
                prepared.append(
                    _prepare_triangle(
                        record["v0"],
                        record["v1"],
                        record["v2"],
                        albedo=record["albedo"],
                        emission=record.get("emission", BLACK),
                        normal=record.get("normal"),
                    )
                )
            except SceneError as e:
                raise SceneError(f"Triangle {i}: {e}") from e

        self.clear()
        for record in prepared:
            self._upload(record)

    def __repr__(self) -> str:
        emissive = len(self.get_emissive_triangles())
        return f"SceneManager(triangles={len(self.triangles)}, emissive={emissive})"


def load_scene_file(path: str | Path) -> SceneManager:
    """Load a JSON scene asset into a new SceneManager.

    Raises:
        SceneError: If the file is not valid JSON or the data is malformed.
        OSError: If the file cannot be read.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise SceneError(f"Invalid scene file {path}: {e}") from e
    if not isinstance(data, dict):
        raise SceneError(f"Scene file {path} must contain a JSON object")

    scene = SceneManager()
    scene.from_dict(data)
    return scene


def save_scene_file(scene: SceneManager, path: str | Path) -> Path:
    """Write a scene as a JSON asset.

    Returns:
        The path written.
    """
    output = Path(path)
    output.write_text(json.dumps(scene.to_dict(), indent=2), encoding="utf-8")
    return output
