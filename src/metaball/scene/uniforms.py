"""Uniform set: the live bridge between CPU updates and the ray marcher.

Every value the ray marching kernel reads lives in a Taichi field declared
here. Fields are allocated once at import time with a fixed capacity and are
only ever overwritten afterwards, so writing new values never forces the
kernel to recompile.

Primitive slots use a Structure-of-Arrays layout with a fixed number of
static and animated slots. Slots at or beyond the active count keep stale
data; the scene SDF skips them through the count, never through their
contents.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from metaball.scene import uniforms
    >>> uniforms.write_static_slots([((0.5, 0.5), 1.2)])
    >>> int(uniforms.static_count[None])
    1
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import taichi as ti

if TYPE_CHECKING:
    from metaball.scene.presets import PresetConfig

# GPU-evaluated primitive capacity (loop unrolling bound in the scene SDF)
MAX_STATIC = 4
MAX_ANIMATED = 4

# Default viewport used until the host reports a real size
DEFAULT_RESOLUTION = (1920, 1080)

# =============================================================================
# Scalar / vector cells
# =============================================================================

elapsed_time = ti.field(dtype=ti.f32, shape=())
resolution = ti.Vector.field(2, dtype=ti.f32, shape=())
mouse_position = ti.Vector.field(2, dtype=ti.f32, shape=())
cursor_position = ti.Vector.field(3, dtype=ti.f32, shape=())
cursor_radius = ti.field(dtype=ti.f32, shape=())
smoothness = ti.field(dtype=ti.f32, shape=())
animation_speed = ti.field(dtype=ti.f32, shape=())
movement_scale = ti.field(dtype=ti.f32, shape=())
mouse_proximity_effect = ti.field(dtype=ti.i32, shape=())
min_movement_scale = ti.field(dtype=ti.f32, shape=())
max_movement_scale = ti.field(dtype=ti.f32, shape=())

# Static spheres: normalized authoring positions, converted on the GPU
static_positions = ti.Vector.field(2, dtype=ti.f32, shape=MAX_STATIC)
static_radii = ti.field(dtype=ti.f32, shape=MAX_STATIC)
static_count = ti.field(dtype=ti.i32, shape=())

# Animated spheres: render-space positions resolved on the CPU every frame
animated_positions = ti.Vector.field(3, dtype=ti.f32, shape=MAX_ANIMATED)
animated_radii = ti.field(dtype=ti.f32, shape=MAX_ANIMATED)
animated_count = ti.field(dtype=ti.i32, shape=())

# =============================================================================
# Preset-controlled lighting cells
# =============================================================================

ambient_intensity = ti.field(dtype=ti.f32, shape=())
diffuse_intensity = ti.field(dtype=ti.f32, shape=())
specular_intensity = ti.field(dtype=ti.f32, shape=())
specular_power = ti.field(dtype=ti.f32, shape=())
fresnel_power = ti.field(dtype=ti.f32, shape=())
background_color = ti.Vector.field(3, dtype=ti.f32, shape=())
sphere_color = ti.Vector.field(3, dtype=ti.f32, shape=())
light_color = ti.Vector.field(3, dtype=ti.f32, shape=())
light_position = ti.Vector.field(3, dtype=ti.f32, shape=())
contrast = ti.field(dtype=ti.f32, shape=())
fog_density = ti.field(dtype=ti.f32, shape=())
cursor_glow_intensity = ti.field(dtype=ti.f32, shape=())
cursor_glow_radius = ti.field(dtype=ti.f32, shape=())
cursor_glow_color = ti.Vector.field(3, dtype=ti.f32, shape=())


@ti.func
def get_aspect() -> ti.f32:
    """Aspect ratio of the current resolution uniform."""
    res = resolution[None]
    return res.x / ti.max(res.y, 1.0)


# =============================================================================
# Writers (Python scope)
# =============================================================================


def reset_uniforms() -> None:
    """Return every cell to its neutral value.

    Counts drop to zero so no primitive slot participates in the SDF.
    """
    elapsed_time[None] = 0.0
    resolution[None] = [float(DEFAULT_RESOLUTION[0]), float(DEFAULT_RESOLUTION[1])]
    mouse_position[None] = [0.5, 0.5]
    cursor_position[None] = [0.0, 0.0, 0.0]
    cursor_radius[None] = 0.0
    smoothness[None] = 0.0
    animation_speed[None] = 0.0
    movement_scale[None] = 0.0
    mouse_proximity_effect[None] = 0
    min_movement_scale[None] = 0.0
    max_movement_scale[None] = 0.0
    static_positions.fill(0.5)
    static_radii.fill(0.0)
    static_count[None] = 0
    animated_positions.fill(0.0)
    animated_radii.fill(0.0)
    animated_count[None] = 0
    cursor_glow_intensity[None] = 0.0
    cursor_glow_radius[None] = 0.0


def write_resolution(width: float, height: float) -> None:
    """Set the resolution cell (viewport size in pixels)."""
    resolution[None] = [float(width), float(height)]


def write_preset(preset: PresetConfig) -> None:
    """Copy a preset's lighting constants into the live cells.

    The cursor glow radius and intensity are not part of this copy; they are
    owned by the cursor configuration and written by the composer.
    """
    ambient_intensity[None] = preset.ambient_intensity
    diffuse_intensity[None] = preset.diffuse_intensity
    specular_intensity[None] = preset.specular_intensity
    specular_power[None] = preset.specular_power
    fresnel_power[None] = preset.fresnel_power
    background_color[None] = list(preset.background_color)
    sphere_color[None] = list(preset.sphere_color)
    light_color[None] = list(preset.light_color)
    light_position[None] = list(preset.light_position)
    smoothness[None] = preset.smoothness
    contrast[None] = preset.contrast
    fog_density[None] = preset.fog_density
    cursor_glow_color[None] = list(preset.cursor_glow_color)


def write_static_slots(slots: list[tuple[tuple[float, float], float]]) -> None:
    """Fill the static slots from (normalized position, radius) pairs.

    Args:
        slots: At most MAX_STATIC entries, in declaration order.

    Raises:
        ValueError: If more than MAX_STATIC entries are given.
    """
    if len(slots) > MAX_STATIC:
        raise ValueError(f"At most {MAX_STATIC} static slots, got {len(slots)}")
    for i, (position, radius) in enumerate(slots):
        static_positions[i] = [float(position[0]), float(position[1])]
        static_radii[i] = float(radius)
    static_count[None] = len(slots)


def write_animated_slots(slots: list[tuple[tuple[float, float, float], float]]) -> None:
    """Fill the animated slots from (render-space position, radius) pairs.

    Args:
        slots: At most MAX_ANIMATED entries, in declaration order.

    Raises:
        ValueError: If more than MAX_ANIMATED entries are given.
    """
    if len(slots) > MAX_ANIMATED:
        raise ValueError(f"At most {MAX_ANIMATED} animated slots, got {len(slots)}")
    for i, (position, radius) in enumerate(slots):
        animated_positions[i] = [float(position[0]), float(position[1]), float(position[2])]
        animated_radii[i] = float(radius)
    animated_count[None] = len(slots)


def _vec(cell: Any) -> tuple[float, ...]:
    value = cell[None]
    return tuple(float(value[k]) for k in range(cell.n))


def uniform_snapshot() -> dict[str, Any]:
    """Read every cell back into plain Python values.

    Intended for debugging and tests; slot arrays only include active slots.
    """
    n_static = int(static_count[None])
    n_animated = int(animated_count[None])
    return {
        "elapsed_time": float(elapsed_time[None]),
        "resolution": _vec(resolution),
        "mouse_position": _vec(mouse_position),
        "cursor_position": _vec(cursor_position),
        "cursor_radius": float(cursor_radius[None]),
        "smoothness": float(smoothness[None]),
        "animation_speed": float(animation_speed[None]),
        "movement_scale": float(movement_scale[None]),
        "mouse_proximity_effect": bool(mouse_proximity_effect[None]),
        "min_movement_scale": float(min_movement_scale[None]),
        "max_movement_scale": float(max_movement_scale[None]),
        "static_count": n_static,
        "static_positions": [
            (float(static_positions[i][0]), float(static_positions[i][1])) for i in range(n_static)
        ],
        "static_radii": [float(static_radii[i]) for i in range(n_static)],
        "animated_count": n_animated,
        "animated_positions": [
            tuple(float(animated_positions[i][k]) for k in range(3)) for i in range(n_animated)
        ],
        "animated_radii": [float(animated_radii[i]) for i in range(n_animated)],
        "ambient_intensity": float(ambient_intensity[None]),
        "diffuse_intensity": float(diffuse_intensity[None]),
        "specular_intensity": float(specular_intensity[None]),
        "specular_power": float(specular_power[None]),
        "fresnel_power": float(fresnel_power[None]),
        "background_color": _vec(background_color),
        "sphere_color": _vec(sphere_color),
        "light_color": _vec(light_color),
        "light_position": _vec(light_position),
        "contrast": float(contrast[None]),
        "fog_density": float(fog_density[None]),
        "cursor_glow_intensity": float(cursor_glow_intensity[None]),
        "cursor_glow_radius": float(cursor_glow_radius[None]),
        "cursor_glow_color": _vec(cursor_glow_color),
    }
