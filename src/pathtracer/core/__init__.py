"""Core rendering module.

Components:
    ray: Ray data structure and vector helpers
    config: Render and camera configuration with validation
    rng: PCG2D per-pixel random number generation
    sampler: Uniform sphere and hemisphere direction sampling
    integrator: One-bounce radiance estimation and rendering kernels
    progressive: Frame counter and progressive accumulation

All compute-intensive operations are Taichi kernels.
"""

from .config import (
    MAX_IMAGE_SIZE,
    CameraConfig,
    ConfigurationError,
    RenderConfig,
)
from .ray import Ray, make_ray, ray_at, reflect, vec3
from .rng import next_uniform, next_uniform2, pcg2d, seed_rng, uvec2
from .sampler import UNIFORM_HEMISPHERE_PDF, sample_hemisphere, sample_sphere

# Note: integrator and progressive are NOT imported here because they declare
# Taichi fields at import time, which requires ti.init() to have run.
# Import them directly from src.pathtracer.core.integrator or
# src.pathtracer.core.progressive.

__all__ = [
    "MAX_IMAGE_SIZE",
    "CameraConfig",
    "ConfigurationError",
    "RenderConfig",
    "Ray",
    "make_ray",
    "ray_at",
    "reflect",
    "vec3",
    "pcg2d",
    "seed_rng",
    "next_uniform",
    "next_uniform2",
    "uvec2",
    "sample_sphere",
    "sample_hemisphere",
    "UNIFORM_HEMISPHERE_PDF",
]
