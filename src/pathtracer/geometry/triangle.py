"""Triangle primitive with Moller-Trumbore ray intersection.

A triangle carries its three vertices, a unit face normal, a diffuse albedo
and an emitted radiance. Triangles are uploaded once and never modified.

The intersection test solves

    origin + t * direction = (1 - u - v) * v0 + u * v1 + v * v2

directly with Cramer's rule, without computing the plane equation first
(Moller & Trumbore, "Fast, Minimum Storage Ray/Triangle Intersection", 1997).

Every rejection is reported as a miss:
    - ``|det| < epsilon``: the ray is (nearly) parallel to the plane
    - ``u`` outside [0, 1], ``v < 0`` or ``u + v > 1``: outside the triangle
    - ``t`` outside [t_min, t_max]: behind the origin, too close or too far

Example:
    >>> tri = make_triangle(
    ...     vec3(-1.0, -1.0, 0.0), vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0),
    ...     vec3(0.0, 0.0, 1.0), vec3(0.5, 0.5, 0.5), vec3(0.0, 0.0, 0.0),
    ... )
    >>> # Inside a kernel:
    >>> # rec = hit_triangle(vec3(0, 0, 5), vec3(0, 0, -1), tri, 1e-3, 100.0, 1e-4)
"""

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Triangle:
    """A flat-shaded diffuse triangle.

    Attributes:
        v0: First vertex.
        v1: Second vertex.
        v2: Third vertex.
        normal: Unit face normal.
        albedo: Diffuse reflectance (linear RGB, each component in [0, 1]).
        emission: Emitted radiance (linear RGB, non-negative).
    """

    v0: vec3
    v1: vec3
    v2: vec3
    normal: vec3
    albedo: vec3
    emission: vec3


@ti.dataclass
class TriangleHit:
    """Result of testing one ray against one triangle.

    Attributes:
        hit: 1 if the ray hits the triangle within [t_min, t_max], else 0.
        t: Ray parameter of the hit. Only valid if hit == 1.
        u: Barycentric weight of v1. Only valid if hit == 1.
        v: Barycentric weight of v2. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f32
    u: ti.f32
    v: ti.f32


@ti.func
def make_triangle(
    v0: vec3, v1: vec3, v2: vec3, normal: vec3, albedo: vec3, emission: vec3
) -> Triangle:
    """Create a triangle inside a kernel."""
    return Triangle(v0=v0, v1=v1, v2=v2, normal=normal, albedo=albedo, emission=emission)


@ti.func
def hit_triangle(
    ray_origin: vec3,
    ray_direction: vec3,
    tri: Triangle,
    t_min: ti.f32,
    t_max: ti.f32,
    epsilon: ti.f32,
) -> TriangleHit:
    """Test a ray against a triangle.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        tri: The triangle to test.
        t_min: Smallest accepted ray parameter.
        t_max: Largest accepted ray parameter.
        epsilon: Determinant threshold for the parallel-ray rejection.

    Returns:
        A TriangleHit. No division happens for rays rejected as parallel.
    """
    did_hit = 0
    hit_t = 0.0
    hit_u = 0.0
    hit_v = 0.0

    edge1 = tri.v1 - tri.v0
    edge2 = tri.v2 - tri.v0
    h = tm.cross(ray_direction, edge2)
    a = tm.dot(edge1, h)

    if ti.abs(a) >= epsilon:
        f = 1.0 / a
        s = ray_origin - tri.v0
        u = f * tm.dot(s, h)

        if u >= 0.0 and u <= 1.0:
            q = tm.cross(s, edge1)
            v = f * tm.dot(ray_direction, q)

            if v >= 0.0 and u + v <= 1.0:
                t = f * tm.dot(edge2, q)

                if t >= t_min and t <= t_max:
                    did_hit = 1
                    hit_t = t
                    hit_u = u
                    hit_v = v

    return TriangleHit(hit=did_hit, t=hit_t, u=hit_u, v=hit_v)


@ti.func
def triangle_normal(tri: Triangle) -> vec3:
    """Geometric normal ``normalize((v1 - v0) x (v2 - v0))``.

    Follows the winding order; may differ in sign from ``tri.normal``.
    """
    return tm.normalize(tm.cross(tri.v1 - tri.v0, tri.v2 - tri.v0))


@ti.func
def triangle_area(tri: Triangle) -> ti.f32:
    """Area of the triangle."""
    return 0.5 * tm.length(tm.cross(tri.v1 - tri.v0, tri.v2 - tri.v0))


@ti.func
def triangle_centroid(tri: Triangle) -> vec3:
    """Centroid (barycentrics 1/3, 1/3, 1/3)."""
    return (tri.v0 + tri.v1 + tri.v2) / 3.0
