"""Ray data structure and the few vector helpers shared by device code.

All functions here are Taichi functions and may only be called from inside
a kernel (or another ``@ti.func``).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.ray import Ray, make_ray, ray_at, vec3
    >>> @ti.kernel
    ... def probe() -> vec3:
    ...     ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(0.0, 0.0, -1.0))
    ...     return ray_at(ray, 2.0)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3
vec2 = tm.vec2


@ti.dataclass
class Ray:
    """A ray with an origin point and a unit direction.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction of travel (vec3). Primary and secondary rays
            built by the renderer are always normalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Return the point ``ray.origin + t * ray.direction``."""
    return ray.origin + t * ray.direction


@ti.func
def reflect(v: vec3, normal: vec3) -> vec3:
    """Mirror ``v`` across the plane orthogonal to ``normal``.

    Args:
        v: The vector to mirror.
        normal: Unit normal of the mirror plane.

    Returns:
        ``v - 2 (n . v) n``. Length is preserved when ``normal`` is unit.
    """
    return v - 2.0 * tm.dot(normal, v) * normal
