"""Direction sampling from uniform pairs.

Both samplers are deterministic functions of their inputs; randomness comes
from :mod:`src.pathtracer.core.rng`. Directions are uniform over the sphere,
and the hemisphere sampler folds the lower half onto the upper half, which
keeps the density uniform at ``1 / (2 pi)``.
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import reflect, vec3

# Density of a direction drawn by sample_hemisphere
UNIFORM_HEMISPHERE_PDF = 1.0 / (2.0 * tm.pi)


@ti.func
def sample_sphere(u0: ti.f32, u1: ti.f32) -> vec3:
    """Map a uniform pair to a uniformly distributed unit vector.

    Inverse-transform sampling: ``z = 2 u1 - 1`` and ``phi = 2 pi u0``.
    ``u1`` at either end of [0, 1] gives a pole.

    Args:
        u0: Uniform sample in [0, 1), azimuth.
        u1: Uniform sample in [0, 1), height.

    Returns:
        A unit vector.
    """
    z = 2.0 * u1 - 1.0
    phi = 2.0 * tm.pi * u0
    # Clamp guards against 1 - z^2 rounding below zero at the poles
    r = ti.sqrt(ti.max(0.0, 1.0 - z * z))
    return vec3(ti.cos(phi) * r, ti.sin(phi) * r, z)


@ti.func
def sample_hemisphere(u0: ti.f32, u1: ti.f32, normal: vec3) -> vec3:
    """Sample a unit direction in the hemisphere around ``normal``.

    Draws from :func:`sample_sphere` and mirrors the result across the plane
    orthogonal to ``normal`` when it points below it.

    Args:
        u0: Uniform sample in [0, 1).
        u1: Uniform sample in [0, 1).
        normal: Unit normal defining the hemisphere.

    Returns:
        A unit vector ``w`` with ``dot(w, normal) >= 0``.
    """
    direction = sample_sphere(u0, u1)
    if tm.dot(direction, normal) < 0.0:
        direction = reflect(direction, normal)
    return direction
