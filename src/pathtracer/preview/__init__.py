"""Preview module for image output.

Components:
    export: Tone mapping, gamma encoding and PNG export
"""

from src.pathtracer.preview.export import (
    ToneMapMethod,
    apply_gamma,
    compute_rmse,
    image_to_uint8,
    process_image_for_display,
    save_png,
    save_png_from_array,
    tone_map_reinhard,
)

__all__ = [
    "ToneMapMethod",
    "apply_gamma",
    "compute_rmse",
    "image_to_uint8",
    "process_image_for_display",
    "save_png",
    "save_png_from_array",
    "tone_map_reinhard",
]
