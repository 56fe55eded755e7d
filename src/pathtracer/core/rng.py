"""Counter-based per-pixel random number generation (PCG2D).

Each pixel evaluation owns a two-lane ``u32`` state seeded from its pixel
coordinate and the frame number. Every draw runs the state through the PCG2D
hash (Jarzynski & Olano, "Hash Functions for GPU Rendering", 2020) and
converts both lanes to floats in [0, 1).

State is threaded explicitly: a draw takes the current state and returns the
advanced state together with the sample, so no RNG state is ever shared
between pixels.

Example:
    >>> @ti.kernel
    ... def first_draw(px: ti.u32, py: ti.u32, frame: ti.u32) -> vec2:
    ...     state = seed_rng(px, py, frame)
    ...     state, uv = next_uniform2(state)
    ...     return uv
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

vec2 = tm.vec2
uvec2 = ti.types.vector(2, ti.u32)

# LCG constants shared by both PCG2D mixing rounds
PCG_MULTIPLIER = 1664525
PCG_INCREMENT = 1013904223

# Frame number is shifted into the high half of each lane
FRAME_SEED_SHIFT = 16

# f32 carries 24 significant bits; keep the top 24 bits of each lane
_FLOAT_SHIFT = 8
_FLOAT_SCALE = 1.0 / 16777216.0  # 2^-24


@ti.func
def pcg2d(v: uvec2) -> uvec2:
    """Hash a two-lane state with PCG2D.

    All arithmetic wraps modulo 2^32. The map is a bijection on the 64-bit
    state, so distinct seeds never collide.

    Args:
        v: Current state.

    Returns:
        The hashed state.
    """
    mul = ti.cast(PCG_MULTIPLIER, ti.u32)
    inc = ti.cast(PCG_INCREMENT, ti.u32)

    x = v[0] * mul + inc
    y = v[1] * mul + inc

    x += y * mul
    y += x * mul
    x = x ^ (x >> 16)
    y = y ^ (y >> 16)

    x += y * mul
    y += x * mul
    x = x ^ (x >> 16)
    y = y ^ (y >> 16)

    return uvec2(x, y)


@ti.func
def seed_rng(pixel_x: ti.u32, pixel_y: ti.u32, frame_number: ti.u32) -> uvec2:
    """Build the initial state for one pixel in one frame.

    Args:
        pixel_x: Integer pixel column.
        pixel_y: Integer pixel row.
        frame_number: Frame counter snapshot for the current frame.

    Returns:
        ``(pixel_x, pixel_y) ^ (frame_number << 16)`` applied to both lanes.
    """
    frame_bits = frame_number << FRAME_SEED_SHIFT
    return uvec2(pixel_x ^ frame_bits, pixel_y ^ frame_bits)


@ti.func
def state_to_uniform2(state: uvec2) -> vec2:
    """Map both lanes of a state to floats in [0, 1)."""
    return vec2(
        ti.cast(state[0] >> _FLOAT_SHIFT, ti.f32) * _FLOAT_SCALE,
        ti.cast(state[1] >> _FLOAT_SHIFT, ti.f32) * _FLOAT_SCALE,
    )


@ti.func
def next_uniform2(state: uvec2):
    """Advance the state and draw a uniform pair in [0, 1)^2.

    Args:
        state: Current RNG state.

    Returns:
        A tuple ``(new_state, sample)``.
    """
    new_state = pcg2d(state)
    return new_state, state_to_uniform2(new_state)


@ti.func
def next_uniform(state: uvec2):
    """Advance the state and draw a single uniform float in [0, 1).

    Uses the first lane only; the second lane is discarded.

    Returns:
        A tuple ``(new_state, sample)``.
    """
    new_state, pair = next_uniform2(state)
    return new_state, pair[0]


# =============================================================================
# Host-side reference
# =============================================================================


def pcg2d_numpy(state: npt.NDArray[np.uint32]) -> npt.NDArray[np.uint32]:
    """Host-side PCG2D over an array of states.

    Args:
        state: Array of shape (..., 2) with dtype uint32.

    Returns:
        Hashed states with the same shape and dtype.
    """
    v = np.asarray(state, dtype=np.uint32)
    mul = np.uint32(PCG_MULTIPLIER)
    inc = np.uint32(PCG_INCREMENT)
    shift = np.uint32(16)

    x = v[..., 0] * mul + inc
    y = v[..., 1] * mul + inc

    x = x + y * mul
    y = y + x * mul
    x = x ^ (x >> shift)
    y = y ^ (y >> shift)

    x = x + y * mul
    y = y + x * mul
    x = x ^ (x >> shift)
    y = y ^ (y >> shift)

    return np.stack([x, y], axis=-1).astype(np.uint32)


def seed_rng_numpy(
    pixel_x: npt.ArrayLike, pixel_y: npt.ArrayLike, frame_number: int
) -> npt.NDArray[np.uint32]:
    """Host-side mirror of :func:`seed_rng` for arrays of pixel coordinates."""
    frame_bits = np.uint32((frame_number << FRAME_SEED_SHIFT) & 0xFFFFFFFF)
    px = np.asarray(pixel_x, dtype=np.uint32) ^ frame_bits
    py = np.asarray(pixel_y, dtype=np.uint32) ^ frame_bits
    px, py = np.broadcast_arrays(px, py)
    return np.stack([px, py], axis=-1).astype(np.uint32)
