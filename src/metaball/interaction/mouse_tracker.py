"""Pointer tracking with exponential smoothing.

The tracker keeps a target position (the latest pointer sample) and a current
position that chases it once per frame:

    current += (target - current) * smoothness

A smoothness of 1 snaps straight to the target. Positions are normalized to
[0, 1] with y pointing up; the render-space projection goes through the
shared coordinate transform so it lines up with the ray marcher.
"""

import logging
from dataclasses import dataclass, field

from metaball.core.transform import aspect_ratio, screen_to_world
from metaball.scene.uniforms import DEFAULT_RESOLUTION

logger = logging.getLogger(__name__)


@dataclass
class MouseTracker:
    """Smoothed pointer state.

    Attributes:
        smoothness: Interpolation factor in (0, 1]; 1 disables smoothing.
        screen_space_y: Keep window-system y (0 at top) instead of flipping
            pixel input to the y-up convention.
        viewport: Viewport size in pixels used to normalize pixel input.
    """

    smoothness: float = 1.0
    screen_space_y: bool = False
    viewport: tuple[int, int] = DEFAULT_RESOLUTION
    target_position: list[float] = field(default_factory=lambda: [0.5, 0.5])
    current_position: list[float] = field(default_factory=lambda: [0.5, 0.5])
    world_position: tuple[float, float, float] = (0.0, 0.0, 0.0)

    def __post_init__(self) -> None:
        if not 0.0 < self.smoothness <= 1.0:
            raise ValueError(f"Smoothness must be in (0, 1], got {self.smoothness}")
        self._refresh_world_position()

    @property
    def aspect(self) -> float:
        return aspect_ratio(*self.viewport)

    @property
    def normalized_position(self) -> tuple[float, float]:
        return (self.current_position[0], self.current_position[1])

    def set_viewport(self, width: int, height: int) -> None:
        """Track a viewport resize so pixel input and the aspect stay in sync."""
        self.viewport = (int(width), int(height))
        self._refresh_world_position()

    def on_pointer_move(self, x_px: float, y_px: float) -> None:
        """Record a pointer sample in viewport pixels (origin top-left)."""
        width, height = self.viewport
        if width <= 0 or height <= 0:
            logger.debug("Ignoring pointer sample for empty viewport %s", self.viewport)
            return

        nx = x_px / width
        ny = y_px / height
        if not self.screen_space_y:
            ny = 1.0 - ny
        self.target_position[0] = nx
        self.target_position[1] = ny

    def on_pointer_move_normalized(self, nx: float, ny: float) -> None:
        """Record a pointer sample already normalized with y pointing up."""
        self.target_position[0] = float(nx)
        self.target_position[1] = float(ny)

    def on_touch(self, touches: list[tuple[float, float]]) -> None:
        """Record the first touch point of a touch event, in viewport pixels."""
        if touches:
            self.on_pointer_move(*touches[0])

    def update(self) -> None:
        """Advance the smoothed position by one frame."""
        s = self.smoothness
        if s >= 1.0:
            self.current_position[0] = self.target_position[0]
            self.current_position[1] = self.target_position[1]
        else:
            self.current_position[0] += (self.target_position[0] - self.current_position[0]) * s
            self.current_position[1] += (self.target_position[1] - self.current_position[1]) * s
        self._refresh_world_position()

    def reset(self) -> None:
        """Re-centre both target and current positions."""
        self.target_position[:] = [0.5, 0.5]
        self.current_position[:] = [0.5, 0.5]
        self._refresh_world_position()

    def _refresh_world_position(self) -> None:
        self.world_position = screen_to_world(
            self.current_position[0], self.current_position[1], self.aspect
        )
