"""Scene module: authoring model and the live uniform set.

Components:
    presets: Named lighting/colour presets
    primitives: Static, animated and cursor sphere configuration
    uniforms: Preallocated Taichi fields read by the ray marcher
    composer: Per-frame driver that keeps the uniforms up to date

Uniform fields are allocated once with fixed capacity (MAX_STATIC static and
MAX_ANIMATED animated slots), so updating them never recompiles a kernel.
"""

from .presets import (
    DEFAULT_PRESET,
    LOW_POWER_GLOW_SCALE,
    PRESET_NAMES,
    PresetConfig,
    create_presets,
    get_preset,
    get_preset_background_hex,
    get_preset_light_color,
)
from .primitives import (
    POSITION_PRESET_COORDS,
    CursorConfig,
    OrbitConfig,
    PrimitiveKind,
    PrimitiveRegistry,
    ScenePrimitive,
)
from .uniforms import MAX_ANIMATED, MAX_STATIC

# Note: composer is NOT imported here to avoid circular imports through the
# ray marcher. Use:
#   from metaball.scene.composer import SceneComposer, SceneParams

__all__ = [
    # Presets
    "PresetConfig",
    "PRESET_NAMES",
    "DEFAULT_PRESET",
    "LOW_POWER_GLOW_SCALE",
    "create_presets",
    "get_preset",
    "get_preset_background_hex",
    "get_preset_light_color",
    # Primitives
    "PrimitiveKind",
    "ScenePrimitive",
    "OrbitConfig",
    "CursorConfig",
    "PrimitiveRegistry",
    "POSITION_PRESET_COORDS",
    # Capacity
    "MAX_STATIC",
    "MAX_ANIMATED",
]
