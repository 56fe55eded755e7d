#!/usr/bin/env python3
"""Render the Cornell box (or a JSON scene asset).

Usage:
    python -m examples.render_cornell_box [options]

Options:
    --width WIDTH       Image width in pixels (default: 512)
    --height HEIGHT     Image height in pixels (default: 512)
    --samples SAMPLES   Reflection samples per pixel per frame (default: 4)
    --frames FRAMES     Number of frames to accumulate (default: 64)
    --batch-size SIZE   Frames per progress update (default: 8)
    --scene PATH        Load triangles from a JSON scene asset instead
    --dump-scene PATH   Write the scene as a JSON asset and exit
    --output OUTPUT     Output file path (default: cornell_box.png)
    --quiet             Suppress progress output

Example:
    python -m examples.render_cornell_box --width 256 --height 256 --frames 32
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the Cornell box scene with one-bounce path tracing.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width", type=int, default=512, help="Image width in pixels (default: 512)"
    )
    parser.add_argument(
        "--height", type=int, default=512, help="Image height in pixels (default: 512)"
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=4,
        help="Reflection samples per pixel per frame (default: 4)",
    )
    parser.add_argument(
        "--frames", type=int, default=64, help="Number of frames to accumulate (default: 64)"
    )
    parser.add_argument(
        "--batch-size", type=int, default=8, help="Frames per progress update (default: 8)"
    )
    parser.add_argument("--scene", type=str, default=None, help="JSON scene asset to render")
    parser.add_argument(
        "--dump-scene", type=str, default=None, help="Write the scene as JSON and exit"
    )
    parser.add_argument(
        "--output",
        type=str,
        default="cornell_box.png",
        help="Output file path (default: cornell_box.png)",
    )
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_cornell_box(
    width: int = 512,
    height: int = 512,
    sample_count: int = 4,
    num_frames: int = 64,
    output_path: str = "cornell_box.png",
    batch_size: int = 8,
    scene_path: str | None = None,
    dump_scene_path: str | None = None,
    quiet: bool = False,
) -> Path:
    """Build the scene, render it progressively and save a PNG.

    Returns:
        Path to the written file (the scene JSON when dump_scene_path is set).
    """
    # Lazy imports: these modules declare Taichi fields
    from src.pathtracer.core.config import CameraConfig, RenderConfig
    from src.pathtracer.core.progressive import ProgressiveRenderer
    from src.pathtracer.preview.export import save_png
    from src.pathtracer.scene.cornell_box import create_cornell_box_scene
    from src.pathtracer.scene.manager import load_scene_file, save_scene_file

    if scene_path is not None:
        scene = load_scene_file(scene_path)
        camera = CameraConfig()
    else:
        scene, camera = create_cornell_box_scene()

    if not quiet:
        print(f"Scene: {scene!r}")

    if dump_scene_path is not None:
        output = save_scene_file(scene, dump_scene_path)
        if not quiet:
            print(f"Saved scene to: {output.absolute()}")
        return output

    camera.aspect_ratio = width / height
    config = RenderConfig(width=width, height=height, sample_count=sample_count, camera=camera)
    renderer = ProgressiveRenderer(config)

    if not quiet:
        print(f"Rendering {num_frames} frames at {width}x{height}, {sample_count} spp/frame...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            fps = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} frames ({progress_pct:.1f}%) - {fps:.1f} fps",
                end="",
                flush=True,
            )

    renderer.render(num_frames=num_frames, batch_size=batch_size, callback=progress_callback)

    if not quiet:
        print()

    output_file = Path(output_path)
    save_png(renderer, str(output_file), tone_map="reinhard", gamma=2.2)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Use GPU if available, fall back to CPU
    try:
        ti.init(arch=ti.gpu)
        if not args.quiet:
            print("Using GPU backend")
    except Exception:
        ti.init(arch=ti.cpu)
        if not args.quiet:
            print("Using CPU backend")

    try:
        render_cornell_box(
            width=args.width,
            height=args.height,
            sample_count=args.samples,
            num_frames=args.frames,
            output_path=args.output,
            batch_size=args.batch_size,
            scene_path=args.scene,
            dump_scene_path=args.dump_scene,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
