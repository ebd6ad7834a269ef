#!/usr/bin/env python3
"""Render a metaball scene headlessly.

This script builds the demo scene (four corner spheres, two orbiting spheres
and the cursor sphere), advances it for a number of frames on a fixed clock,
and saves the last frame as a PNG.

Usage:
    python -m examples.render_metaballs [options]

Options:
    --width WIDTH       Image width in pixels (default: 960)
    --height HEIGHT     Image height in pixels (default: 540)
    --frames FRAMES     Number of frames to simulate (default: 120)
    --preset PRESET     Lighting preset (default: holographic)
    --cursor X Y        Parked cursor position, normalized y-up (default: 0.5 0.5)
    --output OUTPUT     Output file path (default: metaballs.png)
    --transparent       Keep the alpha channel instead of the preset background
    --arch {gpu,cpu}    Taichi backend (default: gpu, falls back to cpu)
    --show              Open a Matplotlib preview of the result
    --verbose           Enable debug logging

Example:
    python -m examples.render_metaballs --preset neon --frames 300 --output neon.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti

PRESET_CHOICES = ("moody", "cosmic", "neon", "sunset", "holographic", "minimal")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a metaball scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=960, help="Image width in pixels (default: 960)")
    parser.add_argument("--height", type=int, default=540, help="Image height in pixels (default: 540)")
    parser.add_argument(
        "--frames",
        type=int,
        default=120,
        help="Number of frames to simulate at 60 fps (default: 120)",
    )
    parser.add_argument(
        "--preset",
        choices=PRESET_CHOICES,
        default="holographic",
        help="Lighting preset (default: holographic)",
    )
    parser.add_argument(
        "--cursor",
        type=float,
        nargs=2,
        metavar=("X", "Y"),
        default=(0.5, 0.5),
        help="Parked cursor position, normalized with y up (default: 0.5 0.5)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="metaballs.png",
        help="Output file path (default: metaballs.png)",
    )
    parser.add_argument(
        "--transparent",
        action="store_true",
        help="Write an RGBA PNG instead of compositing over the preset background",
    )
    parser.add_argument(
        "--arch",
        choices=("gpu", "cpu"),
        default="gpu",
        help="Taichi backend (default: gpu, falls back to cpu)",
    )
    parser.add_argument("--show", action="store_true", help="Show a Matplotlib preview")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def build_demo_primitives() -> list:
    """Four corner spheres and two orbiting spheres."""
    from metaball.scene.primitives import OrbitConfig, ScenePrimitive

    return [
        ScenePrimitive.static(position_preset="top-left", radius=1.2),
        ScenePrimitive.static(position_preset="bottom-right", radius=1.0),
        ScenePrimitive.static(position_preset="top-right", radius=0.35),
        ScenePrimitive.static(position_preset="bottom-left", radius=0.3),
        ScenePrimitive.animated(OrbitConfig(radius=0.5, speed=0.4), radius=0.14),
        ScenePrimitive.animated(OrbitConfig(radius=0.7, speed=0.3, phase=3.14159), radius=0.12),
    ]


def render_metaballs(
    width: int = 960,
    height: int = 540,
    num_frames: int = 120,
    preset: str = "holographic",
    cursor: tuple[float, float] = (0.5, 0.5),
    output_path: str = "metaballs.png",
    transparent: bool = False,
    show: bool = False,
) -> Path:
    """Simulate the demo scene and save its last frame.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_frames: Frames to advance at 60 fps before rendering.
        preset: Lighting preset name.
        cursor: Normalized y-up cursor position.
        output_path: Output file path (PNG).
        transparent: Keep alpha instead of compositing over the background.
        show: Open a Matplotlib preview window.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from metaball.camera.perspective import PerspectiveCamera
    from metaball.core.loop import RenderLoop
    from metaball.preview.display import show_frame
    from metaball.preview.export import save_png_from_array
    from metaball.scene.composer import SceneComposer, SceneParams

    print(f"Creating metaball scene ({width}x{height}, preset '{preset}')...")

    loop = RenderLoop()
    composer = SceneComposer(
        primitives=build_demo_primitives(),
        params=SceneParams(preset=preset),
        camera=PerspectiveCamera(aspect_ratio=width / height),
        loop=loop,
        width=width,
        height=height,
    )
    composer.tracker.on_pointer_move_normalized(*cursor)

    start_time = time.time()
    loop.run(num_frames)
    image = composer.render()
    elapsed = time.time() - start_time

    cx, cy, _ = composer.cursor_world_position
    print(f"  Simulated {num_frames} frames ({composer.time:.2f}s scene time) in {elapsed:.2f}s")
    print(f"  Cursor at ({cx:.3f}, {cy:.3f}), radius {composer.cursor_radius:.3f}")

    output_file = Path(output_path)
    background = None if transparent else composer.active_preset.background_color
    save_png_from_array(image, output_file, background=background)
    print(f"Saved to: {output_file.absolute()}")

    if show:
        show_frame(image, background=composer.active_preset.background_color)

    composer.dispose()
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if args.arch == "gpu":
        try:
            ti.init(arch=ti.gpu)
            print("Using GPU backend")
        except Exception:
            ti.init(arch=ti.cpu)
            print("Using CPU backend")
    else:
        ti.init(arch=ti.cpu)
        print("Using CPU backend")

    try:
        render_metaballs(
            width=args.width,
            height=args.height,
            num_frames=args.frames,
            preset=args.preset,
            cursor=tuple(args.cursor),
            output_path=args.output,
            transparent=args.transparent,
            show=args.show,
        )
        return 0
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
