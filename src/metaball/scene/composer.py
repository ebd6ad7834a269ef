"""Scene composer: owns the uniform set and drives it every frame.

The composer is the CPU half of the renderer. It is built once per scene and
then only ever overwrites uniform values:

- construction classifies the device, builds the preset table, allocates the
  render target and writes every uniform once
- update(delta, elapsed) runs once per frame: smooths the pointer, moves the
  animated spheres, derives the cursor radius and writes all of it
- apply_preset / set_params / set_primitives / set_cursor rewrite the
  affected uniforms between frames
- on_resize keeps the resolution, pointer normalization and fullscreen quad
  in sync with the viewport
- render() runs the ray marcher against the current uniform snapshot

Misconfiguration at runtime (unknown preset, missing camera, too many
primitives) never raises; it logs and leaves the scene as it was.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from metaball.scene.composer import SceneComposer, SceneParams
    >>> from metaball.scene.primitives import ScenePrimitive
    >>> composer = SceneComposer(
    ...     primitives=[ScenePrimitive.static(position_preset="top-left", radius=1.2)],
    ...     params=SceneParams(preset="cosmic"),
    ...     width=640,
    ...     height=360,
    ... )
    >>> composer.update(1.0 / 60.0, 1.0 / 60.0)
    >>> image = composer.render()  # (360, 640, 4) RGBA
    >>> composer.dispose()
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import numpy as np
import numpy.typing as npt

from metaball.camera.perspective import FullscreenQuad, PerspectiveCamera, fullscreen_quad
from metaball.core import raymarch
from metaball.core.loop import RenderLoop
from metaball.core.transform import aspect_ratio
from metaball.interaction.device import DeviceProfile
from metaball.interaction.mouse_tracker import MouseTracker
from metaball.scene import uniforms
from metaball.scene.presets import DEFAULT_PRESET, LOW_POWER_GLOW_SCALE, PresetConfig, create_presets
from metaball.scene.primitives import (
    CursorConfig,
    PrimitiveRegistry,
    ScenePrimitive,
    cursor_radius_for,
    dynamic_movement_scale,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneParams:
    """Global scene parameters.

    Attributes:
        preset: Name of the lighting/colour preset.
        fullscreen: Size the quad to fill the camera view.
        smoothness: Blend width between the cursor and the scene.
        animation_speed: Time multiplier for the orbits.
        movement_scale: Orbit scale when the proximity effect is off.
        mouse_proximity_effect: Drive the orbit scale by pointer distance
            from the screen centre.
        min_movement_scale: Orbit scale with the pointer at the edge.
        max_movement_scale: Orbit scale with the pointer at the centre.
        camera_distance: Distance used to size the quad. None uses the
            camera's distance from the origin.
        enable_adaptive_quality: Classify the device; False forces the
            desktop profile.
    """

    preset: str = DEFAULT_PRESET
    fullscreen: bool = True
    smoothness: float = 0.3
    animation_speed: float = 0.6
    movement_scale: float = 1.2
    mouse_proximity_effect: bool = True
    min_movement_scale: float = 0.3
    max_movement_scale: float = 1.0
    camera_distance: float | None = None
    enable_adaptive_quality: bool = True


class SceneComposer:
    """CPU-side owner of one metaball scene.

    Only one composer should be live at a time: the uniform set and render
    target are module-level and shared.
    """

    def __init__(
        self,
        primitives: list[ScenePrimitive] | None = None,
        params: SceneParams | None = None,
        cursor: CursorConfig | None = None,
        camera: PerspectiveCamera | None = None,
        loop: RenderLoop | None = None,
        width: int = uniforms.DEFAULT_RESOLUTION[0],
        height: int = uniforms.DEFAULT_RESOLUTION[1],
        profile: DeviceProfile | None = None,
        user_agent: str | None = None,
    ) -> None:
        """Build the scene and write every uniform once.

        Args:
            primitives: Authored static and animated spheres.
            params: Global parameters; defaults to SceneParams().
            cursor: Cursor sphere configuration; defaults to CursorConfig().
            camera: Host camera, may be attached later.
            loop: Frame clock to register update() with.
            width: Render width in pixels.
            height: Render height in pixels.
            profile: Explicit device profile, skipping detection.
            user_agent: User agent forwarded to device detection.

        Raises:
            ValueError: If the render size exceeds the render target capacity.
        """
        self.params = params if params is not None else SceneParams()
        self.cursor = cursor if cursor is not None else CursorConfig()

        if profile is not None:
            self.profile = profile
        elif self.params.enable_adaptive_quality:
            self.profile = DeviceProfile.detect(user_agent=user_agent)
        else:
            self.profile = DeviceProfile.desktop()

        self.presets: dict[str, PresetConfig] = create_presets(self.profile.is_low_power)
        self.active_preset = self.presets[DEFAULT_PRESET]

        self.registry = PrimitiveRegistry()
        self.tracker = MouseTracker(smoothness=self.cursor.smoothness, viewport=(width, height))
        self.camera: PerspectiveCamera | None = None
        self.quad: FullscreenQuad | None = None

        # Render target size; the viewport keeps the host's real size
        self._width = width
        self._height = height
        self._viewport = (width, height)
        self._time = 0.0
        self._current_movement_scale = self.params.movement_scale
        self._disposed = False
        self._unregister: Callable[[], None] | None = None

        raymarch.setup_render_target(width, height)
        uniforms.reset_uniforms()
        uniforms.write_resolution(width, height)

        if not self.apply_preset(self.params.preset):
            uniforms.write_preset(self.active_preset)
            self._write_glow()
        self._write_params()
        self.registry.replace(primitives or [])
        self._write_static_slots()
        self._write_frame_state()

        if camera is not None:
            self.attach_camera(camera)
        if loop is not None:
            self._unregister = loop.register(self.update)

        logger.info(
            "Scene composed: %dx%d, preset '%s', %d primitives, low_power=%s",
            width,
            height,
            self.active_preset.name,
            len(self.registry.primitives),
            self.profile.is_low_power,
        )

    # =========================================================================
    # Per-frame update
    # =========================================================================

    def update(self, delta: float, elapsed: float) -> None:
        """Advance the scene by one frame and write the changed uniforms.

        Args:
            delta: Seconds since the previous frame.
            elapsed: Seconds since the clock started. Scene time is the
                sum of deltas, so pausing the clock pauses the orbits.
        """
        if self._disposed:
            return

        self._time += delta
        self.tracker.update()
        self._write_frame_state()

    def _write_frame_state(self) -> None:
        p = self.params
        mouse = self.tracker.normalized_position

        if p.mouse_proximity_effect:
            self._current_movement_scale = dynamic_movement_scale(
                mouse, p.min_movement_scale, p.max_movement_scale
            )
        else:
            self._current_movement_scale = p.movement_scale

        uniforms.elapsed_time[None] = self._time
        uniforms.mouse_position[None] = [mouse[0], mouse[1]]
        uniforms.cursor_position[None] = list(self.tracker.world_position)

        animated = self.registry.active_animated()
        positions = self.animated_world_positions()
        uniforms.write_animated_slots([(pos, prim.radius) for pos, prim in zip(positions, animated)])

        uniforms.cursor_radius[None] = self.cursor_radius

    # =========================================================================
    # Configuration
    # =========================================================================

    def apply_preset(self, name: str) -> bool:
        """Copy a preset into the uniform set.

        Unknown names are logged and ignored; the current uniforms stay.

        Returns:
            Whether the preset was applied.
        """
        preset = self.presets.get(name)
        if preset is None:
            logger.warning("Unknown preset '%s', keeping '%s'", name, self.active_preset.name)
            return False

        self.active_preset = preset
        uniforms.write_preset(preset)
        self._write_glow()
        logger.debug("Applied preset '%s'", name)
        return True

    def set_params(self, params: SceneParams) -> None:
        """Replace the global scene parameters."""
        previous = self.params
        self.params = params
        if params.preset != previous.preset:
            self.apply_preset(params.preset)
        self._write_params()
        self._write_frame_state()
        self._update_quad()

    def set_primitives(self, primitives: list[ScenePrimitive]) -> None:
        """Swap the authored primitive list atomically."""
        self.registry.replace(primitives)
        self._write_static_slots()
        self._write_frame_state()

    def set_cursor(self, cursor: CursorConfig) -> None:
        """Replace the cursor configuration."""
        self.cursor = cursor
        self.tracker.smoothness = cursor.smoothness
        self._write_glow()
        uniforms.cursor_radius[None] = self.cursor_radius

    def _write_params(self) -> None:
        p = self.params
        uniforms.smoothness[None] = p.smoothness
        uniforms.animation_speed[None] = p.animation_speed
        uniforms.movement_scale[None] = p.movement_scale
        uniforms.mouse_proximity_effect[None] = int(p.mouse_proximity_effect)
        uniforms.min_movement_scale[None] = p.min_movement_scale
        uniforms.max_movement_scale[None] = p.max_movement_scale

    def _write_glow(self) -> None:
        c = self.cursor
        preset = self.active_preset
        intensity = c.glow_intensity if c.glow_intensity is not None else preset.cursor_glow_intensity
        if c.glow_radius is not None:
            # Preset radii are already scaled by create_presets()
            radius = c.glow_radius * (LOW_POWER_GLOW_SCALE if self.profile.is_low_power else 1.0)
        else:
            radius = preset.cursor_glow_radius
        uniforms.cursor_glow_intensity[None] = intensity
        uniforms.cursor_glow_radius[None] = radius

    def _write_static_slots(self) -> None:
        uniforms.write_static_slots(
            [(p.resolve_position(), p.radius) for p in self.registry.active_static()]
        )

    # =========================================================================
    # Camera and viewport
    # =========================================================================

    def attach_camera(self, camera: PerspectiveCamera) -> None:
        """Attach the host camera and size the fullscreen quad for it."""
        self.camera = camera
        camera.aspect_ratio = self.aspect
        self._update_quad()

    def on_resize(self, width: int, height: int) -> None:
        """Follow a viewport resize.

        An empty viewport (e.g. a minimized window) is ignored. A viewport
        larger than the render target capacity is rendered at the largest
        size that fits with the same aspect ratio.
        """
        if self._disposed:
            return
        if width <= 0 or height <= 0:
            logger.debug("Ignoring resize to empty viewport %dx%d", width, height)
            return

        render_width, render_height = raymarch.fit_render_size(width, height)
        if (render_width, render_height) != (width, height):
            logger.warning(
                "Viewport %dx%d exceeds the render target capacity, rendering at %dx%d",
                width,
                height,
                render_width,
                render_height,
            )

        raymarch.setup_render_target(render_width, render_height)
        self._width = render_width
        self._height = render_height
        self._viewport = (width, height)
        uniforms.write_resolution(width, height)
        self.tracker.set_viewport(width, height)
        if self.camera is not None:
            self.camera.aspect_ratio = self.aspect
        self._update_quad()
        self._write_frame_state()
        logger.debug("Resized to %dx%d", width, height)

    def _update_quad(self) -> None:
        if self.camera is None or not self.params.fullscreen:
            return
        self.quad = fullscreen_quad(self.camera, self.params.camera_distance)

    # =========================================================================
    # Rendering
    # =========================================================================

    def render(self) -> npt.NDArray[np.float32]:
        """Ray-march the current frame.

        Returns:
            Straight RGBA image of shape (height, width, 4), top row first.

        Raises:
            RuntimeError: If the composer has been disposed.
        """
        if self._disposed:
            raise RuntimeError("Scene has been disposed")
        raymarch.render_frame()
        return raymarch.get_image_numpy()

    def dispose(self) -> None:
        """Deregister from the frame loop and deactivate every slot.

        Safe to call more than once.
        """
        if self._disposed:
            return
        self._disposed = True
        if self._unregister is not None:
            self._unregister()
            self._unregister = None
        uniforms.write_static_slots([])
        uniforms.write_animated_slots([])
        raymarch.release_render_target()
        logger.debug("Scene disposed")

    # =========================================================================
    # Read accessors
    # =========================================================================

    @property
    def disposed(self) -> bool:
        return self._disposed

    @property
    def size(self) -> tuple[int, int]:
        return self._width, self._height

    @property
    def viewport(self) -> tuple[int, int]:
        """Host viewport size, which may exceed the render size."""
        return self._viewport

    @property
    def aspect(self) -> float:
        return aspect_ratio(*self._viewport)

    @property
    def time(self) -> float:
        """Accumulated scene time (sum of frame deltas)."""
        return self._time

    @property
    def movement_scale(self) -> float:
        """Orbit scale used for the current frame."""
        return self._current_movement_scale

    @property
    def cursor_world_position(self) -> tuple[float, float, float]:
        return self.tracker.world_position

    @property
    def normalized_mouse_position(self) -> tuple[float, float]:
        return self.tracker.normalized_position

    @property
    def cursor_radius(self) -> float:
        """Cursor radius derived from proximity to the nearest static sphere."""
        return cursor_radius_for(
            self.tracker.world_position,
            self.static_world_positions(),
            self.cursor,
        )

    def static_world_positions(self) -> list[tuple[float, float, float]]:
        return self.registry.static_world_positions(self.aspect)

    def animated_world_positions(self) -> list[tuple[float, float, float]]:
        return self.registry.animated_world_positions(
            self._time,
            self.params.animation_speed,
            self._current_movement_scale,
        )

    def uniform_snapshot(self) -> dict[str, Any]:
        return uniforms.uniform_snapshot()
