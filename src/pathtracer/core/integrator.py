"""One-bounce path tracing integrator.

Each pixel is estimated as

    L = L_e(x) + (1/N) * sum_k f_r * L_e(x_k) * cos(theta_k) / pdf

where x is the first surface seen through the pixel, f_r = albedo / pi is the
Lambertian BRDF, x_k is the surface hit by a direction drawn uniformly over
the hemisphere around x (pdf = 1 / (2 pi)) and N is the configured sample
count. Emission at x is added once per sample, so the average keeps it
unscaled. Rays that leave the scene contribute black.

Randomness comes from a PCG2D state seeded per pixel from the integer pixel
coordinate and the frame number, so a frame is a deterministic function of
(scene, config, frame_number).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from src.pathtracer.core.config import RenderConfig
    >>> from src.pathtracer.core.integrator import configure, render_pixel
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> configure(RenderConfig(width=256, height=256, sample_count=16, camera=camera))
    >>> r, g, b = render_pixel(0.5, 0.5, frame_number=0)
"""

import math

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.pinhole import get_ray, setup_camera
from src.pathtracer.core.config import MAX_IMAGE_SIZE, ConfigurationError, RenderConfig
from src.pathtracer.core.rng import next_uniform2, seed_rng, uvec2
from src.pathtracer.core.sampler import UNIFORM_HEMISPHERE_PDF, sample_hemisphere
from src.pathtracer.scene.intersection import (
    get_triangle,
    intersect_scene,
    triangle_emissions,
)

# Type alias for 3D vectors
vec3 = tm.vec3

U32_MASK = 0xFFFFFFFF

# =============================================================================
# Integrator Configuration (uploaded by configure)
# =============================================================================

_sample_count = ti.field(dtype=ti.i32, shape=())
_epsilon = ti.field(dtype=ti.f32, shape=())
_t_min = ti.field(dtype=ti.f32, shape=())
_t_max = ti.field(dtype=ti.f32, shape=())
_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())
_configured = ti.field(dtype=ti.i32, shape=())

# =============================================================================
# Render Target (Accumulation Buffer)
# =============================================================================

# Preallocated to the maximum size to avoid kernel recompilation
_color_buffer = ti.Vector.field(3, dtype=ti.f32, shape=(MAX_IMAGE_SIZE, MAX_IMAGE_SIZE))
_accumulated_frames = ti.field(dtype=ti.i32, shape=())


def configure(config: RenderConfig) -> None:
    """Validate a configuration and prepare the integrator to render.

    Uploads the sample count and intersection constants, sets up the camera
    and resizes and clears the render target.

    Args:
        config: The render configuration.

    Raises:
        ConfigurationError: If the configuration is invalid. Nothing is
            uploaded in that case.
    """
    config.validate()

    setup_camera(config.camera)
    _sample_count[None] = config.sample_count
    _epsilon[None] = config.epsilon
    _t_min[None] = config.t_min
    _t_max[None] = config.t_max
    setup_render_target(config.width, config.height)
    _configured[None] = 1


def reset_integrator() -> None:
    """Forget the current configuration and clear the render target."""
    _configured[None] = 0
    clear_render_target()


def is_configured() -> bool:
    """Check whether configure() has been called."""
    return bool(_configured[None])


def _check_configured() -> None:
    if _configured[None] == 0:
        raise RuntimeError("Integrator not configured. Call configure() first.")


# =============================================================================
# Render Target Management
# =============================================================================


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the accumulation buffer.

    Raises:
        ConfigurationError: If the dimensions are outside 1..MAX_IMAGE_SIZE.
    """
    if not (1 <= width <= MAX_IMAGE_SIZE and 1 <= height <= MAX_IMAGE_SIZE):
        raise ConfigurationError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_SIZE}x{MAX_IMAGE_SIZE})"
        )
    _image_width[None] = width
    _image_height[None] = height
    clear_render_target()


def clear_render_target() -> None:
    """Zero the accumulation buffer and the accumulated frame count."""
    _color_buffer.fill(0.0)
    _accumulated_frames[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the active (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def get_accumulated_frames() -> int:
    """Number of frames averaged into the accumulation buffer."""
    return int(_accumulated_frames[None])


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the accumulated linear radiance as a NumPy array.

    Values are not clamped or tone mapped.

    Returns:
        Array of shape (height, width, 3), top image row first.

    Raises:
        RuntimeError: If the integrator is not configured.
    """
    _check_configured()
    width, height = get_image_dimensions()
    image = _color_buffer.to_numpy()[:width, :height, :]
    # (width, height, 3) with row 0 at the bottom -> (height, width, 3) top-down
    image = np.flipud(np.transpose(image, (1, 0, 2)))
    return np.ascontiguousarray(image, dtype=np.float32)


def get_normalized_image_numpy() -> npt.NDArray[np.float32]:
    """Get the accumulated image clamped to [0, 1]."""
    return np.clip(get_image_numpy(), 0.0, 1.0).astype(np.float32)


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def _facing_normal(normal: vec3, incident: vec3) -> vec3:
    """Orient a face normal against the incoming ray so both faces shade."""
    result = normal
    if tm.dot(normal, incident) > 0.0:
        result = -normal
    return result


@ti.func
def direct_illumination(point: vec3, triangle_index: ti.i32, incident: vec3, state: uvec2):
    """One-sample estimate of the radiance leaving a surface point.

    Emission of the surface plus a single Monte Carlo sample of light
    reflected from whatever emitter a uniformly sampled hemisphere direction
    reaches.

    Args:
        point: Surface point, on triangle ``triangle_index``.
        triangle_index: Index of the triangle containing ``point``.
        incident: Direction of the ray that reached ``point``.
        state: RNG state of the calling pixel.

    Returns:
        A tuple ``(radiance, new_state)``.
    """
    tri = get_triangle(triangle_index)
    normal = _facing_normal(tri.normal, incident)

    new_state, u = next_uniform2(state)
    direction = sample_hemisphere(u[0], u[1], normal)

    reflected = vec3(0.0, 0.0, 0.0)
    hit = intersect_scene(point, direction, _t_min[None], _t_max[None], _epsilon[None])
    if hit.hit == 1:
        incoming = triangle_emissions[hit.triangle_index]
        brdf = tri.albedo / tm.pi
        cos_theta = tm.dot(normal, direction)
        reflected = brdf * incoming * cos_theta / UNIFORM_HEMISPHERE_PDF

    return tri.emission + reflected, new_state


@ti.func
def _pixel_index(coord: ti.f32, size: ti.i32) -> ti.u32:
    index = ti.cast(ti.floor(coord * ti.cast(size, ti.f32)), ti.i32)
    index = ti.min(ti.max(index, 0), size - 1)
    return ti.cast(index, ti.u32)


@ti.func
def render_pixel_impl(x: ti.f32, y: ti.f32, frame_number: ti.u32) -> vec3:
    """Estimate the radiance through normalized image coordinates (x, y).

    Args:
        x: Horizontal coordinate in [0, 1].
        y: Vertical coordinate in [0, 1].
        frame_number: Frame counter snapshot, mixed into the RNG seed.

    Returns:
        Linear RGB radiance, black if the primary ray escapes.
    """
    ray = get_ray(x, y)
    state = seed_rng(
        _pixel_index(x, _image_width[None]),
        _pixel_index(y, _image_height[None]),
        frame_number,
    )

    radiance = vec3(0.0, 0.0, 0.0)
    hit = intersect_scene(ray.origin, ray.direction, _t_min[None], _t_max[None], _epsilon[None])
    if hit.hit == 1:
        n = _sample_count[None]
        for _ in range(n):
            contribution, state = direct_illumination(
                hit.point, hit.triangle_index, ray.direction, state
            )
            radiance += contribution
        radiance /= ti.cast(n, ti.f32)

    return radiance


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_frame(width: ti.i32, height: ti.i32, frame_number: ti.u32, frame_count: ti.i32):
    """Render one frame and fold it into the running average."""
    for i, j in ti.ndrange(width, height):
        x = (ti.cast(i, ti.f32) + 0.5) / ti.cast(width, ti.f32)
        y = (ti.cast(j, ti.f32) + 0.5) / ti.cast(height, ti.f32)
        color = render_pixel_impl(x, y, frame_number)

        # Running average: avg_n = avg_{n-1} + (x_n - avg_{n-1}) / n
        _color_buffer[i, j] += (color - _color_buffer[i, j]) / ti.cast(frame_count, ti.f32)


@ti.kernel
def _render_single_pixel(x: ti.f32, y: ti.f32, frame_number: ti.u32) -> vec3:
    return render_pixel_impl(x, y, frame_number)


# =============================================================================
# Public Rendering API
# =============================================================================


def _check_frame_number(frame_number: int) -> int:
    if frame_number < 0:
        raise ValueError(f"frame_number must be non-negative, got {frame_number}")
    return frame_number & U32_MASK


def render_pixel(x: float, y: float, frame_number: int) -> tuple[float, float, float]:
    """Render one pixel from normalized image coordinates.

    Args:
        x: Horizontal coordinate in [0, 1] (0 = left).
        y: Vertical coordinate in [0, 1] (0 = bottom).
        frame_number: Frame counter; wraps modulo 2^32.

    Returns:
        Unclamped linear (R, G, B).

    Raises:
        RuntimeError: If the integrator is not configured.
        ValueError: If a coordinate is outside [0, 1] or frame_number < 0.
    """
    _check_configured()
    for name, value in (("x", x), ("y", y)):
        if not (math.isfinite(value) and 0.0 <= value <= 1.0):
            raise ValueError(f"{name} must be in [0, 1], got {value}")

    color = _render_single_pixel(x, y, _check_frame_number(frame_number))
    return (float(color[0]), float(color[1]), float(color[2]))


def render_frame(frame_number: int) -> None:
    """Render every pixel for one frame and accumulate the result.

    Pixel (i, j) is sampled at its centre ((i + 0.5) / width,
    (j + 0.5) / height).

    Args:
        frame_number: Frame counter snapshot shared by all pixels.

    Raises:
        RuntimeError: If the integrator is not configured.
        ValueError: If frame_number < 0.
    """
    _check_configured()
    frame = _check_frame_number(frame_number)
    width, height = get_image_dimensions()

    _accumulated_frames[None] += 1
    _render_frame(width, height, frame, _accumulated_frames[None])
