"""Interactive metaball window using Taichi GGUI.

The window plays the host role for a SceneComposer: it owns the frame clock,
feeds the cursor position into the scene's pointer tracker, and presents
every rendered frame composited over the active preset's background.

Controls:
    - Preset buttons (one per preset)
    - Smoothness / Animation Speed sliders
    - Export PNG button

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from metaball.preview.interactive import MetaballPreview
    >>> from metaball.scene.composer import SceneComposer
    >>>
    >>> composer = SceneComposer(width=960, height=540)
    >>> MetaballPreview(composer).run()  # Blocks until the window is closed
"""

from __future__ import annotations

import dataclasses
import logging
import os
import time
from datetime import datetime
from typing import TYPE_CHECKING

import numpy as np
import taichi as ti

from metaball.core.loop import RenderLoop
from metaball.preview.display import process_image_for_display
from metaball.scene.presets import PRESET_NAMES

if TYPE_CHECKING:
    import numpy.typing as npt

    from metaball.scene.composer import SceneComposer

logger = logging.getLogger(__name__)

# Largest frame delta fed to the scene, so a stalled window does not jump
MAX_FRAME_DELTA = 0.1


class MetaballPreview:
    """Interactive GGUI host for a SceneComposer.

    Attributes:
        composer: The scene being shown.
        loop: Frame clock driving composer.update().
        width: Window width in pixels (the composer's render size).
        height: Window height in pixels.
        display_image: Taichi field holding the composited RGB frame.
    """

    def __init__(
        self,
        composer: SceneComposer,
        *,
        title: str = "Metaballs - Interactive Preview",
        loop: RenderLoop | None = None,
    ) -> None:
        """Wrap a composer in a (not yet opened) window.

        Args:
            composer: Scene to drive and display.
            title: Window title.
            loop: Frame clock; a new one is created when omitted.
        """
        self.composer = composer
        self.width, self.height = composer.size
        self._title = title
        self._is_initialized = False

        self.loop = loop if loop is not None else RenderLoop()
        self._unregister = self.loop.register(composer.update)

        # Defer window creation until run() to support headless checks
        self._window: ti.ui.Window | None = None
        self._canvas: ti.ui.Canvas | None = None

        self.display_image: ti.MatrixField = ti.Vector.field(
            3, dtype=ti.f32, shape=(self.width, self.height)
        )

        self._slider_smoothness = composer.params.smoothness
        self._slider_animation_speed = composer.params.animation_speed
        self._last_frame_time: float | None = None

    def _initialize_window(self) -> None:
        if self._is_initialized:
            return

        self._window = ti.ui.Window(
            name=self._title,
            res=(self.width, self.height),
            vsync=True,
        )
        self._canvas = self._window.get_canvas()
        self._is_initialized = True

    @property
    def window(self) -> ti.ui.Window:
        """Get the Taichi GGUI window, initializing if needed."""
        if self._window is None:
            self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> ti.ui.Canvas:
        """Get the canvas for rendering."""
        if self._canvas is None:
            self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def update_image(self, image: npt.NDArray[np.float32]) -> None:
        """Upload an RGBA frame, composited over the preset background.

        Args:
            image: Array of shape (height, width, 4), top row first.

        Raises:
            ValueError: If image shape doesn't match (height, width, 4).
        """
        expected_shape = (self.height, self.width, 4)
        if image.shape != expected_shape:
            raise ValueError(f"Image shape {image.shape} doesn't match expected {expected_shape}")

        rgb = process_image_for_display(
            image, background=self.composer.active_preset.background_color
        )
        # (height, width) top-down -> Taichi (x, y) bottom-up
        transposed = np.ascontiguousarray(np.transpose(np.flipud(rgb), (1, 0, 2)))
        self.display_image.from_numpy(transposed)

    def feed_cursor(self, nx: float, ny: float) -> None:
        """Forward a normalized, y-up cursor position to the scene."""
        self.composer.tracker.on_pointer_move_normalized(nx, ny)

    def step(self, delta: float) -> None:
        """Advance the scene one frame and upload the result."""
        self.loop.tick(min(delta, MAX_FRAME_DELTA))
        self.update_image(self.composer.render())

    def is_running(self) -> bool:
        return self.window.running

    def show_frame(self) -> None:
        """Present the current display image."""
        self.canvas.set_image(self.display_image)
        self.window.show()

    def run(self) -> None:
        """Run the main window event loop until the window is closed."""
        self._initialize_window()

        while self.is_running():
            now = time.perf_counter()
            delta = 0.0 if self._last_frame_time is None else now - self._last_frame_time
            self._last_frame_time = now

            cursor_x, cursor_y = self.window.get_cursor_pos()
            self.feed_cursor(cursor_x, cursor_y)

            self.step(delta)
            self._draw_gui_panel()
            self.show_frame()

    def close(self) -> None:
        """Close the window and detach the scene from the frame clock."""
        self._unregister()
        if self._window is not None:
            self._window.running = False

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering."""
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        if os.uname().sysname == "Darwin":
            ssh_connection = os.environ.get("SSH_CONNECTION")
            return not (ssh_connection and not display)

        return bool(display or wayland)

    # =========================================================================
    # GUI Controls
    # =========================================================================

    def apply_controls(self, smoothness: float, animation_speed: float) -> bool:
        """Push slider values into the scene when they changed.

        Returns:
            Whether the scene parameters were updated.
        """
        changed = (
            abs(smoothness - self._slider_smoothness) > 1e-6
            or abs(animation_speed - self._slider_animation_speed) > 1e-6
        )
        if not changed:
            return False

        self._slider_smoothness = smoothness
        self._slider_animation_speed = animation_speed
        self.composer.set_params(
            dataclasses.replace(
                self.composer.params,
                smoothness=smoothness,
                animation_speed=animation_speed,
            )
        )
        return True

    def select_preset(self, name: str) -> None:
        """Switch the scene to another preset."""
        self.composer.set_params(dataclasses.replace(self.composer.params, preset=name))

    def _draw_gui_panel(self) -> None:
        with self.window.GUI.sub_window("Presets", 0.02, 0.02, 0.2, 0.32) as gui:
            for name in PRESET_NAMES:
                label = f"> {name}" if name == self.composer.active_preset.name else name
                if gui.button(label):
                    self.select_preset(name)

        with self.window.GUI.sub_window("Scene", 0.02, 0.36, 0.2, 0.14) as gui:
            new_smoothness = gui.slider_float(
                "Smoothness", self._slider_smoothness, minimum=0.01, maximum=1.0
            )
            new_speed = gui.slider_float(
                "Animation Speed", self._slider_animation_speed, minimum=0.0, maximum=3.0
            )
        self.apply_controls(new_smoothness, new_speed)

        with self.window.GUI.sub_window("Export", 0.02, 0.52, 0.2, 0.08) as gui:
            if gui.button("Export PNG"):
                self.export_png()

    def export_png(self, filename: str | None = None) -> str:
        """Export the current frame to a PNG file.

        Args:
            filename: Output path; defaults to metaballs_YYYYMMDD_HHMMSS.png.

        Returns:
            The path written.
        """
        from metaball.preview.export import save_png

        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"metaballs_{timestamp}.png"

        save_png(self.composer, filename)
        print(f"Exported: {filename} (preset {self.composer.active_preset.name})")
        return filename
