"""Scene triangle storage and nearest-hit traversal.

Triangles are stored in module-level Taichi fields using a structure of
arrays. Traversal is a linear scan: every ray is tested against every
triangle. Scenes in scope hold tens of triangles. An accelerated traversal
only has to keep the ``intersect_scene`` signature and ``HitInfo`` result.

Example:
    >>> clear_scene()
    >>> add_triangle(
    ...     (0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0),
    ...     normal=(0.0, 0.0, 1.0), albedo=(0.5, 0.5, 0.5), emission=(0.0, 0.0, 0.0),
    ... )
    0
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.geometry.triangle import Triangle, hit_triangle

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

Vector3 = tuple[float, float, float]


@ti.dataclass
class HitInfo:
    """Nearest intersection of a ray with the scene.

    Attributes:
        hit: 1 if any triangle was hit, 0 otherwise.
        t: Ray parameter of the nearest hit. Only valid if hit == 1.
        point: World-space hit point. Only valid if hit == 1.
        triangle_index: Index of the hit triangle, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    point: vec3
    triangle_index: ti.i32


# Maximum number of triangles supported in the scene
MAX_TRIANGLES = 1024

triangle_v0 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v1 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_v2 = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_normals = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
triangle_emissions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_TRIANGLES)
num_triangles = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all triangles from the scene.

    Only the count is reset; stale field data is overwritten by later adds.
    """
    num_triangles[None] = 0


def add_triangle(
    v0: Vector3,
    v1: Vector3,
    v2: Vector3,
    normal: Vector3,
    albedo: Vector3,
    emission: Vector3,
) -> int:
    """Append a triangle to the scene.

    No validation happens here; :class:`SceneManager` checks records before
    they reach this function.

    Args:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        normal: Unit face normal.
        albedo: Diffuse reflectance.
        emission: Emitted radiance.

    Returns:
        The index of the added triangle.

    Raises:
        RuntimeError: If the maximum number of triangles is exceeded.
    """
    idx = num_triangles[None]
    if idx >= MAX_TRIANGLES:
        raise RuntimeError(f"Maximum number of triangles ({MAX_TRIANGLES}) exceeded")
    triangle_v0[idx] = v0
    triangle_v1[idx] = v1
    triangle_v2[idx] = v2
    triangle_normals[idx] = normal
    triangle_albedos[idx] = albedo
    triangle_emissions[idx] = emission
    num_triangles[None] = idx + 1
    return idx


def get_triangle_count() -> int:
    """Get the number of triangles in the scene."""
    return int(num_triangles[None])


@ti.func
def get_triangle(index: ti.i32) -> Triangle:
    """Fetch a stored triangle by value."""
    return Triangle(
        v0=triangle_v0[index],
        v1=triangle_v1[index],
        v2=triangle_v2[index],
        normal=triangle_normals[index],
        albedo=triangle_albedos[index],
        emission=triangle_emissions[index],
    )


@ti.func
def _make_miss_record() -> HitInfo:
    return HitInfo(hit=0, t=0.0, point=vec3(0.0, 0.0, 0.0), triangle_index=-1)


@ti.func
def intersect_scene(
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f32,
    t_max: ti.f32,
    epsilon: ti.f32,
) -> HitInfo:
    """Find the nearest triangle hit along a ray.

    The upper bound passed to each triangle test shrinks to the closest hit
    found so far, and a hit only replaces the current one when strictly
    closer. On an exact tie the triangle stored first wins.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.
        epsilon: Parallel-ray threshold forwarded to the triangle test.

    Returns:
        A HitInfo for the nearest hit, or a miss record.
    """
    closest_t = t_max
    result = _make_miss_record()

    n = num_triangles[None]
    for i in range(n):
        rec = hit_triangle(ray_origin, ray_direction, get_triangle(i), t_min, closest_t, epsilon)
        if rec.hit == 1:
            if result.hit == 0 or rec.t < closest_t:
                closest_t = rec.t
                result = HitInfo(
                    hit=1,
                    t=rec.t,
                    point=ray_origin + rec.t * ray_direction,
                    triangle_index=i,
                )

    return result

