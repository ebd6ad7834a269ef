"""Scene primitives: static, animated and cursor spheres.

A scene is authored as a list of ScenePrimitive values. Static primitives
sit at a fixed normalized position, animated primitives follow a 3-D orbit
around the screen centre, and the cursor sphere (configured separately by a
CursorConfig) follows the tracked pointer with a proximity-driven radius.

Primitive identity never changes once declared. Only the resolved position
and radius of each primitive are recomputed every frame, and the list as a
whole is swapped atomically through PrimitiveRegistry.replace().

The GPU fold has a fixed number of slots per kind. Primitives beyond that
capacity are kept by the registry in declaration order but never reach the
uniform set.

Example:
    >>> from metaball.scene.primitives import OrbitConfig, PrimitiveRegistry, ScenePrimitive
    >>> registry = PrimitiveRegistry()
    >>> registry.replace([
    ...     ScenePrimitive.static(position_preset="top-left", radius=1.2),
    ...     ScenePrimitive.animated(OrbitConfig(radius=0.5, speed=0.4)),
    ... ])
    >>> len(registry.active_static())
    1
"""

import logging
import math
from dataclasses import dataclass, field
from enum import IntEnum

from metaball.core.sdf import hermite, smoothstep
from metaball.core.transform import screen_to_world
from metaball.scene.uniforms import MAX_ANIMATED, MAX_STATIC

logger = logging.getLogger(__name__)

DEFAULT_RADIUS = 0.15

# Phase spacing between animated slots that do not specify a phase
DEFAULT_PHASE_STEP = 1.1

# Orbit shape: per-axis amplitude factors and the Y phase multiplier
ORBIT_X_SCALE = 0.8
ORBIT_Y_SCALE = 0.6
ORBIT_Z_AMPLITUDE = 0.3
ORBIT_Y_PHASE_SCALE = 1.3

# Normalized screen centre
SCREEN_CENTER = (0.5, 0.5)

POSITION_PRESET_COORDS: dict[str, tuple[float, float]] = {
    "top-left": (0.08, 0.92),
    "top-right": (0.92, 0.92),
    "bottom-left": (0.08, 0.08),
    "bottom-right": (0.92, 0.08),
    "center": (0.5, 0.5),
    "top-center": (0.5, 0.92),
    "bottom-center": (0.5, 0.08),
    "left-center": (0.08, 0.5),
    "right-center": (0.92, 0.5),
}


class PrimitiveKind(IntEnum):
    """Role of a sphere in the scene fold."""

    STATIC = 0
    ANIMATED = 1
    CURSOR = 2


# =============================================================================
# Configuration Data Structures
# =============================================================================


@dataclass(frozen=True)
class OrbitConfig:
    """Orbit of an animated primitive.

    Attributes:
        radius: Orbit radius before the dynamic movement scale is applied.
        speed: Angular speed multiplier.
        phase: Phase offset in radians. None resolves to slot * DEFAULT_PHASE_STEP.
    """

    radius: float
    speed: float
    phase: float | None = None

    def __post_init__(self) -> None:
        if self.radius < 0.0:
            raise ValueError(f"Orbit radius must be non-negative, got {self.radius}")

    def resolved_phase(self, slot: int) -> float:
        if self.phase is None:
            return slot * DEFAULT_PHASE_STEP
        return self.phase


@dataclass(frozen=True)
class ScenePrimitive:
    """A sphere contributing to the blended surface.

    Static primitives resolve their position as: explicit position, then
    position_preset, then the screen centre. Animated primitives ignore
    both and follow their orbit.

    Attributes:
        kind: STATIC or ANIMATED.
        radius: Sphere radius in render space.
        position: Normalized (x, y) in [0, 1]^2, static only.
        position_preset: Key of POSITION_PRESET_COORDS, static only.
        orbit: Orbit configuration, required for animated primitives.
    """

    kind: PrimitiveKind
    radius: float = DEFAULT_RADIUS
    position: tuple[float, float] | None = None
    position_preset: str | None = None
    orbit: OrbitConfig | None = None

    def __post_init__(self) -> None:
        if self.kind == PrimitiveKind.CURSOR:
            raise ValueError("The cursor sphere is configured with CursorConfig")
        if self.radius < 0.0:
            raise ValueError(f"Primitive radius must be non-negative, got {self.radius}")
        if self.position is not None:
            if len(self.position) != 2:
                raise ValueError(f"Position must be an (x, y) pair, got {self.position}")
            if not all(0.0 <= c <= 1.0 for c in self.position):
                raise ValueError(f"Position must lie in [0, 1]^2, got {self.position}")
        if self.position_preset is not None and self.position_preset not in POSITION_PRESET_COORDS:
            raise ValueError(
                f"Unknown position preset '{self.position_preset}', "
                f"expected one of {', '.join(POSITION_PRESET_COORDS)}"
            )
        if self.kind == PrimitiveKind.ANIMATED and self.orbit is None:
            raise ValueError("Animated primitives need an orbit")

    @classmethod
    def static(
        cls,
        position: tuple[float, float] | None = None,
        position_preset: str | None = None,
        radius: float = DEFAULT_RADIUS,
    ) -> "ScenePrimitive":
        return cls(
            kind=PrimitiveKind.STATIC,
            radius=radius,
            position=tuple(position) if position is not None else None,
            position_preset=position_preset,
        )

    @classmethod
    def animated(cls, orbit: OrbitConfig, radius: float = DEFAULT_RADIUS) -> "ScenePrimitive":
        return cls(kind=PrimitiveKind.ANIMATED, radius=radius, orbit=orbit)

    @property
    def is_animated(self) -> bool:
        return self.kind == PrimitiveKind.ANIMATED

    def resolve_position(self) -> tuple[float, float]:
        """Normalized authoring position of a static primitive."""
        if self.position is not None:
            return (float(self.position[0]), float(self.position[1]))
        if self.position_preset is not None:
            return POSITION_PRESET_COORDS[self.position_preset]
        return SCREEN_CENTER


@dataclass(frozen=True)
class CursorConfig:
    """The pointer-following sphere.

    Attributes:
        radius_min: Radius far from every static sphere.
        radius_max: Radius when touching a static sphere centre.
        glow_intensity: Glow strength; None uses the active preset's.
        glow_radius: Glow falloff radius; None uses the active preset's.
        smoothness: Pointer smoothing factor in (0, 1], 1 disables smoothing.
        proximity_distance: Distance at which the radius starts to grow.
    """

    radius_min: float = 0.08
    radius_max: float = 0.15
    glow_intensity: float | None = None
    glow_radius: float | None = None
    smoothness: float = 0.1
    proximity_distance: float = 1.5

    def __post_init__(self) -> None:
        if not 0.0 <= self.radius_min <= self.radius_max:
            raise ValueError(
                f"Cursor radii must satisfy 0 <= min <= max, got {self.radius_min}, {self.radius_max}"
            )
        if not 0.0 < self.smoothness <= 1.0:
            raise ValueError(f"Cursor smoothness must be in (0, 1], got {self.smoothness}")


# =============================================================================
# Per-frame resolution
# =============================================================================


def dynamic_movement_scale(
    mouse: tuple[float, float],
    min_scale: float,
    max_scale: float,
) -> float:
    """Movement scale driven by the pointer's distance from screen centre.

    The pointer at the centre gives max_scale; half a screen away or more
    gives min_scale.
    """
    dx = mouse[0] - SCREEN_CENTER[0]
    dy = mouse[1] - SCREEN_CENTER[1]
    dist = math.hypot(dx, dy) * 2.0
    weight = 1.0 - smoothstep(0.0, 1.0, dist)
    return min_scale + (max_scale - min_scale) * weight


def orbit_position(
    orbit: OrbitConfig,
    slot: int,
    elapsed: float,
    animation_speed: float,
    movement_scale: float,
) -> tuple[float, float, float]:
    """Render-space position of an animated primitive.

    Args:
        orbit: Orbit configuration.
        slot: Index among the animated primitives (drives the default phase).
        elapsed: Global elapsed time in seconds.
        animation_speed: Scene-wide time multiplier.
        movement_scale: Current (possibly pointer-driven) movement scale.

    Returns:
        (x, y, z). X runs at twice the base frequency, Y and Z at the base
        frequency, so the path repeats every 2 * pi / speed of scene time.
    """
    theta = elapsed * animation_speed * orbit.speed
    phase = orbit.resolved_phase(slot)
    r = orbit.radius * movement_scale
    return (
        math.sin(2.0 * theta + phase) * r * ORBIT_X_SCALE,
        math.cos(theta + phase * ORBIT_Y_PHASE_SCALE) * r * ORBIT_Y_SCALE,
        math.sin(theta + phase) * ORBIT_Z_AMPLITUDE,
    )


def cursor_radius_for(
    cursor_world: tuple[float, float, float],
    static_centers: list[tuple[float, float, float]],
    cursor: CursorConfig,
) -> float:
    """Cursor radius grown by proximity to the nearest static centre.

    Args:
        cursor_world: Cursor position in render space.
        static_centers: Render-space centres of the active static primitives.
        cursor: Cursor configuration.

    Returns:
        A radius in [cursor.radius_min, cursor.radius_max].
    """
    if not static_centers:
        return cursor.radius_min

    closest = min(math.dist(cursor_world, c) for c in static_centers)
    threshold = cursor.proximity_distance
    if threshold > 0.0:
        proximity = min(max(1.0 - closest / threshold, 0.0), 1.0)
    else:
        proximity = 1.0 if closest == 0.0 else 0.0

    eased = hermite(proximity)
    return cursor.radius_min + (cursor.radius_max - cursor.radius_min) * eased


# =============================================================================
# Registry
# =============================================================================


@dataclass
class PrimitiveRegistry:
    """Authored primitive list, split by kind and capped to slot capacity.

    Attributes:
        primitives: Every authored primitive, in declaration order.
    """

    primitives: tuple[ScenePrimitive, ...] = field(default_factory=tuple)

    def replace(self, primitives: list[ScenePrimitive]) -> None:
        """Swap the whole primitive list.

        Overflow is not an error: extra primitives are kept but ignored by
        the GPU fold, and a warning is logged.
        """
        new = tuple(primitives)
        for p in new:
            if not isinstance(p, ScenePrimitive):
                raise TypeError(f"Expected ScenePrimitive, got {type(p).__name__}")

        n_static = sum(1 for p in new if not p.is_animated)
        n_animated = len(new) - n_static
        if n_static > MAX_STATIC:
            logger.warning(
                "%d static primitives authored, only the first %d are rendered",
                n_static,
                MAX_STATIC,
            )
        if n_animated > MAX_ANIMATED:
            logger.warning(
                "%d animated primitives authored, only the first %d are rendered",
                n_animated,
                MAX_ANIMATED,
            )

        self.primitives = new
        logger.debug("Primitive list replaced: %d static, %d animated", n_static, n_animated)

    def static_primitives(self) -> list[ScenePrimitive]:
        return [p for p in self.primitives if not p.is_animated]

    def animated_primitives(self) -> list[ScenePrimitive]:
        return [p for p in self.primitives if p.is_animated]

    def active_static(self) -> list[ScenePrimitive]:
        """Static primitives that fit in the GPU slots."""
        return self.static_primitives()[:MAX_STATIC]

    def active_animated(self) -> list[ScenePrimitive]:
        """Animated primitives that fit in the GPU slots."""
        return self.animated_primitives()[:MAX_ANIMATED]

    def static_world_positions(self, aspect: float) -> list[tuple[float, float, float]]:
        """Render-space centres of the active static primitives."""
        return [screen_to_world(*p.resolve_position(), aspect) for p in self.active_static()]

    def animated_world_positions(
        self,
        elapsed: float,
        animation_speed: float,
        movement_scale: float,
    ) -> list[tuple[float, float, float]]:
        """Render-space centres of the active animated primitives."""
        return [
            orbit_position(p.orbit, slot, elapsed, animation_speed, movement_scale)
            for slot, p in enumerate(self.active_animated())
        ]
