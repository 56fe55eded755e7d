"""Display transforms and PNG export for rendered images.

The integrator produces unclamped linear radiance. Before writing an 8-bit
file the image goes through an optional tone mapping operator, gamma
encoding and a final clamp.

Example:
    >>> from src.pathtracer.preview.export import save_png
    >>> renderer = ProgressiveRenderer(RenderConfig(width=128, height=128))
    >>> renderer.render(16)
    >>> save_png(renderer, "output.png", tone_map="reinhard")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

import numpy as np
import numpy.typing as npt
from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.pathtracer.core.progressive import ProgressiveRenderer

ToneMapMethod = Literal["none", "reinhard"]


def tone_map_reinhard(image: npt.NDArray[np.float32]) -> npt.NDArray[np.float32]:
    """Compress radiance into [0, 1) with ``c / (1 + c)`` per channel."""
    image = np.maximum(image, 0.0)
    return (image / (1.0 + image)).astype(np.float32)


def apply_gamma(image: npt.NDArray[np.float32], gamma: float = 2.2) -> npt.NDArray[np.float32]:
    """Gamma-encode an image after clamping it to [0, 1].

    Raises:
        ValueError: If gamma is not positive.
    """
    if gamma <= 0.0:
        raise ValueError(f"gamma must be positive, got {gamma}")
    image = np.clip(image, 0.0, 1.0)
    if gamma == 1.0:
        return image.astype(np.float32)
    return np.power(image, 1.0 / gamma).astype(np.float32)


def process_image_for_display(
    image: npt.NDArray[np.float32],
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> npt.NDArray[np.float32]:
    """Tone map, gamma-encode and clamp a linear image.

    Args:
        image: Linear image of shape (H, W, 3).
        tone_map: "none" (clamp only) or "reinhard".
        gamma: Gamma value, 2.2 for sRGB-like output.

    Returns:
        Display-ready image in [0, 1].

    Raises:
        ValueError: If the tone mapping method is unknown.
    """
    if tone_map == "reinhard":
        result = tone_map_reinhard(image)
    elif tone_map == "none":
        result = np.asarray(image, dtype=np.float32)
    else:
        raise ValueError(f"Unknown tone mapping method: {tone_map}")

    return apply_gamma(result, gamma)


def image_to_uint8(
    image: npt.NDArray[np.float32],
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> npt.NDArray[np.uint8]:
    """Convert a linear image to 8 bits per channel with rounding."""
    processed = process_image_for_display(image, tone_map=tone_map, gamma=gamma)
    return (processed * 255.0 + 0.5).astype(np.uint8)


def save_png_from_array(
    image: npt.NDArray[np.float32],
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> None:
    """Save a linear (H, W, 3) image as an 8-bit PNG."""
    PILImage.fromarray(image_to_uint8(image, tone_map=tone_map, gamma=gamma)).save(filepath)


def save_png(
    renderer: ProgressiveRenderer,
    filepath: str,
    *,
    tone_map: ToneMapMethod = "none",
    gamma: float = 2.2,
) -> None:
    """Save a renderer's accumulated image as an 8-bit PNG.

    Tone mapping is applied to the unclamped radiance.
    """
    save_png_from_array(renderer.get_linear_image(), filepath, tone_map=tone_map, gamma=gamma)


def compute_rmse(
    image_a: npt.NDArray[np.floating],
    image_b: npt.NDArray[np.floating],
) -> float:
    """Root mean squared error between two images.

    Raises:
        ValueError: If image shapes don't match.
    """
    if image_a.shape != image_b.shape:
        raise ValueError(f"Image shapes must match: {image_a.shape} vs {image_b.shape}")

    diff = image_a.astype(np.float64) - image_b.astype(np.float64)
    return float(np.sqrt(np.mean(diff**2)))
