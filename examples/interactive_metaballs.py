#!/usr/bin/env python3
"""Interactive metaball scene following the mouse cursor.

This script opens a Taichi GGUI window hosting the demo metaball scene. The
cursor sphere follows the mouse, grows as it approaches a static sphere and
merges into it; the orbiting spheres speed up their motion when the cursor
is near the centre of the window.

Usage:
    python -m examples.interactive_metaballs [--preset PRESET] [--width W] [--height H]

Controls:
    - Preset buttons: switch the lighting/colour preset
    - Smoothness / Animation Speed sliders
    - Export PNG: save the current frame with a timestamp
"""

from __future__ import annotations

import argparse
import logging
import platform
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except Exception:
            pass

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except Exception:
        pass

    ti.init(arch=ti.cpu)
    return "CPU"


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive metaball scene.")
    parser.add_argument("--preset", default="holographic", help="Initial preset (default: holographic)")
    parser.add_argument("--width", type=int, default=960, help="Window width in pixels (default: 960)")
    parser.add_argument("--height", type=int, default=540, help="Window height in pixels (default: 540)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser.parse_args()


def main() -> int:
    """Main entry point for the interactive metaball window.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )

    # Initialize Taichi first (before importing modules that declare fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from examples.render_metaballs import build_demo_primitives
    from metaball.camera.perspective import PerspectiveCamera
    from metaball.interaction.device import DeviceProfile
    from metaball.preview.interactive import MetaballPreview
    from metaball.scene.composer import SceneComposer, SceneParams
    from metaball.scene.primitives import CursorConfig

    if not MetaballPreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.")
        print("This script requires a graphical display environment.")
        return 1

    profile = DeviceProfile.detect()
    width, height = profile.scaled_resolution(args.width, args.height)
    print(f"Creating interactive window ({width}x{height}, low_power={profile.is_low_power})...")

    composer = SceneComposer(
        primitives=build_demo_primitives(),
        params=SceneParams(preset=args.preset),
        cursor=CursorConfig(radius_min=0.08, radius_max=0.15, smoothness=0.1),
        camera=PerspectiveCamera(aspect_ratio=width / height),
        width=width,
        height=height,
        profile=profile,
    )
    preview = MetaballPreview(composer)

    print("Starting interactive rendering...")
    print("  - Move the mouse to drive the cursor sphere")
    print("  - Click a preset to change the look")
    print("  - Click 'Export PNG' to save the current frame")
    print("  - Close window to exit")
    print()

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        composer.dispose()
        print("Preview window closed.")

    return 0


if __name__ == "__main__":
    sys.exit(main())
