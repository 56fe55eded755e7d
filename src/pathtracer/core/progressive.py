"""Progressive frame driver.

Owns the process-wide frame counter and drives the integrator one frame at a
time. Each frame re-seeds every pixel's RNG with the next frame number, so
successive frames are independent estimates; their running average
converges as more frames are rendered.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from src.pathtracer.core.config import RenderConfig
    >>> from src.pathtracer.core.progressive import ProgressiveRenderer
    >>> from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    >>>
    >>> scene, camera = create_cornell_box_scene()
    >>> renderer = ProgressiveRenderer(RenderConfig(width=256, height=256, camera=camera))
    >>> renderer.render(64)
    >>> image = renderer.get_image_numpy(gamma=2.2)
"""

from collections.abc import Callable, Generator
from dataclasses import dataclass

import numpy as np
import numpy.typing as npt

from src.pathtracer.core.config import RenderConfig
from src.pathtracer.core.integrator import (
    U32_MASK,
    clear_render_target,
    configure,
    get_accumulated_frames,
    get_image_numpy,
    render_frame,
)

# Callback receives (accumulated_frames, target_frames)
ProgressCallback = Callable[[int, int], None]


@dataclass
class FrameInfo:
    """Monotonic frame counter.

    Attributes:
        frame_number: Number handed to the next rendered frame.
    """

    frame_number: int = 0

    def advance(self) -> int:
        """Return the number for the frame about to render, then increment.

        The returned value is wrapped to 32 bits.
        """
        current = self.frame_number & U32_MASK
        self.frame_number += 1
        return current


class ProgressiveRenderer:
    """Accumulates frames rendered with successive frame numbers.

    Attributes:
        config: The render configuration in use.
        frame_info: The frame counter.
    """

    def __init__(self, config: RenderConfig, start_frame: int = 0) -> None:
        """Configure the integrator and start with an empty accumulator.

        Args:
            config: Render configuration.
            start_frame: First frame number to render.

        Raises:
            ConfigurationError: If the configuration is invalid.
        """
        configure(config)
        self.config = config
        self.frame_info = FrameInfo(frame_number=start_frame)

    @property
    def width(self) -> int:
        return self.config.width

    @property
    def height(self) -> int:
        return self.config.height

    @property
    def frame_number(self) -> int:
        """Frame number the next frame will use."""
        return self.frame_info.frame_number

    @property
    def accumulated_frames(self) -> int:
        """Frames averaged since construction or the last reset."""
        return get_accumulated_frames()

    def reset(self) -> None:
        """Discard accumulated frames.

        The frame counter keeps increasing so later frames do not repeat
        earlier sample sequences.
        """
        clear_render_target()

    def render_next_frame(self) -> int:
        """Render and accumulate a single frame.

        Returns:
            The frame number that was rendered.
        """
        frame = self.frame_info.advance()
        render_frame(frame)
        return frame

    def render(
        self,
        num_frames: int = 1,
        batch_size: int = 1,
        callback: ProgressCallback | None = None,
    ) -> None:
        """Render frames with an optional progress callback.

        Args:
            num_frames: Number of frames to add.
            batch_size: Frames rendered between callback invocations.
            callback: Called with (accumulated_frames, target_frames) after
                each batch.
        """
        for current, target in self.render_progressive(num_frames, batch_size):
            if callback is not None:
                callback(current, target)

    def render_progressive(
        self,
        num_frames: int = 1,
        batch_size: int = 1,
    ) -> Generator[tuple[int, int], None, None]:
        """Render frames, yielding progress after each batch.

        Yields:
            Tuple of (accumulated_frames, target_frames).
        """
        if num_frames <= 0:
            return
        batch_size = max(1, batch_size)

        target = self.accumulated_frames + num_frames
        remaining = num_frames
        while remaining > 0:
            batch = min(batch_size, remaining)
            for _ in range(batch):
                self.render_next_frame()
            remaining -= batch
            yield (self.accumulated_frames, target)

    def get_image_numpy(self, gamma: float = 1.0) -> npt.NDArray[np.float32]:
        """Get the accumulated image clamped to [0, 1].

        Args:
            gamma: Gamma correction value. 1.0 keeps the image linear.

        Returns:
            Array of shape (height, width, 3), dtype float32.
        """
        image = np.clip(get_image_numpy(), 0.0, 1.0)
        if gamma != 1.0:
            image = np.power(image, 1.0 / gamma)
        return image.astype(np.float32)

    def get_linear_image(self) -> npt.NDArray[np.float32]:
        """Get the accumulated image as unclamped linear radiance."""
        return get_image_numpy()

    def get_image_uint8(self, gamma: float = 2.2) -> npt.NDArray[np.uint8]:
        """Get the accumulated image as 8-bit values."""
        image = self.get_image_numpy(gamma=gamma)
        return (image * 255.0 + 0.5).astype(np.uint8)

    def save_image(self, filepath: str, gamma: float = 2.2) -> None:
        """Save the accumulated image as an 8-bit file (format from extension)."""
        from PIL import Image as PILImage

        PILImage.fromarray(self.get_image_uint8(gamma=gamma)).save(filepath)

    def __repr__(self) -> str:
        return (
            f"ProgressiveRenderer(width={self.width}, height={self.height}, "
            f"frames={self.accumulated_frames}, next_frame={self.frame_number})"
        )
