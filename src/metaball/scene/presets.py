"""Named lighting/colour presets for the metaball scene.

A preset is an immutable bundle of the constants the lighting model reads:
intensity weights, specular and Fresnel exponents, colours, light direction,
blend smoothness, contrast, fog and cursor glow. Applying a preset copies
these values into the live uniform cells; it never changes kernel structure.

Colours are authored as 24-bit hex values and stored as RGB tuples in [0, 1].

Example:
    >>> from metaball.scene.presets import get_preset
    >>> preset = get_preset("holographic")
    >>> preset.smoothness
    0.8
"""

from dataclasses import dataclass, replace

DEFAULT_PRESET = "holographic"

PRESET_NAMES = ("moody", "cosmic", "neon", "sunset", "holographic", "minimal")

# Glow radius multiplier applied to every preset on a low-power profile
LOW_POWER_GLOW_SCALE = 0.75


def hex_to_rgb(value: int) -> tuple[float, float, float]:
    """Convert a 0xRRGGBB integer to an RGB tuple in [0, 1]."""
    if not 0 <= value <= 0xFFFFFF:
        raise ValueError(f"Colour must be a 24-bit value, got {value:#x}")
    return (
        ((value >> 16) & 0xFF) / 255.0,
        ((value >> 8) & 0xFF) / 255.0,
        (value & 0xFF) / 255.0,
    )


def rgb_to_hex_string(rgb: tuple[float, float, float]) -> str:
    """Convert an RGB tuple in [0, 1] to a '#rrggbb' string."""
    channels = (max(0, min(255, round(c * 255.0))) for c in rgb)
    return "#" + "".join(f"{c:02x}" for c in channels)


@dataclass(frozen=True)
class PresetConfig:
    """Lighting and colour constants for one look.

    Attributes:
        name: Preset identifier.
        ambient_intensity: Weight of the occlusion-scaled ambient term.
        diffuse_intensity: Weight of the Lambert term.
        specular_intensity: Weight of the Blinn-Phong term.
        specular_power: Blinn-Phong exponent.
        fresnel_power: Exponent of the view-angle rim term.
        background_color: RGB the fog blends towards.
        sphere_color: Base RGB of the surface.
        light_color: RGB of the single directional light.
        light_position: Light direction (normalized in the kernel).
        smoothness: Blend width between the cursor and the rest of the scene.
        contrast: Exponent applied before tone compression.
        fog_density: Exponential fog density along the marched distance.
        cursor_glow_intensity: Peak glow strength.
        cursor_glow_radius: Glow falloff radius in render space.
        cursor_glow_color: RGB of the glow.
    """

    name: str
    ambient_intensity: float
    diffuse_intensity: float
    specular_intensity: float
    specular_power: float
    fresnel_power: float
    background_color: tuple[float, float, float]
    sphere_color: tuple[float, float, float]
    light_color: tuple[float, float, float]
    light_position: tuple[float, float, float]
    smoothness: float
    contrast: float
    fog_density: float
    cursor_glow_intensity: float
    cursor_glow_radius: float
    cursor_glow_color: tuple[float, float, float]


# Authored values, colours as hex
_PRESET_TABLE = {
    "moody": dict(
        ambient_intensity=0.02,
        diffuse_intensity=0.6,
        specular_intensity=1.8,
        specular_power=8.0,
        fresnel_power=1.2,
        background_color=0x050505,
        sphere_color=0x000000,
        light_color=0xFFFFFF,
        light_position=(1.0, 1.0, 1.0),
        smoothness=0.3,
        contrast=2.0,
        fog_density=0.12,
        cursor_glow_intensity=0.4,
        cursor_glow_radius=1.2,
        cursor_glow_color=0xFFFFFF,
    ),
    "cosmic": dict(
        ambient_intensity=0.03,
        diffuse_intensity=0.8,
        specular_intensity=1.6,
        specular_power=6.0,
        fresnel_power=1.4,
        background_color=0x000011,
        sphere_color=0x000022,
        light_color=0x88AAFF,
        light_position=(0.5, 1.0, 0.5),
        smoothness=0.4,
        contrast=2.0,
        fog_density=0.15,
        cursor_glow_intensity=0.8,
        cursor_glow_radius=1.5,
        cursor_glow_color=0x4477FF,
    ),
    "neon": dict(
        ambient_intensity=0.04,
        diffuse_intensity=1.0,
        specular_intensity=2.0,
        specular_power=4.0,
        fresnel_power=1.0,
        background_color=0x000505,
        sphere_color=0x000808,
        light_color=0x00FFCC,
        light_position=(0.7, 1.3, 0.8),
        smoothness=0.7,
        contrast=2.0,
        fog_density=0.08,
        cursor_glow_intensity=0.8,
        cursor_glow_radius=1.4,
        cursor_glow_color=0x00FFAA,
    ),
    "sunset": dict(
        ambient_intensity=0.04,
        diffuse_intensity=0.7,
        specular_intensity=1.4,
        specular_power=7.0,
        fresnel_power=1.5,
        background_color=0x150505,
        sphere_color=0x100000,
        light_color=0xFF6622,
        light_position=(1.2, 0.4, 0.6),
        smoothness=0.35,
        contrast=2.0,
        fog_density=0.1,
        cursor_glow_intensity=0.8,
        cursor_glow_radius=1.4,
        cursor_glow_color=0xFF4422,
    ),
    "holographic": dict(
        ambient_intensity=0.12,
        diffuse_intensity=1.2,
        specular_intensity=2.5,
        specular_power=3.0,
        fresnel_power=0.8,
        background_color=0x0A0A15,
        sphere_color=0x050510,
        light_color=0xCCAAFF,
        light_position=(0.9, 0.9, 1.2),
        smoothness=0.8,
        contrast=1.6,
        fog_density=0.06,
        cursor_glow_intensity=1.2,
        cursor_glow_radius=2.2,
        cursor_glow_color=0xAA77FF,
    ),
    "minimal": dict(
        ambient_intensity=0.0,
        diffuse_intensity=0.25,
        specular_intensity=1.3,
        specular_power=11.0,
        fresnel_power=1.7,
        background_color=0x0A0A0A,
        sphere_color=0x000000,
        light_color=0xFFFFFF,
        light_position=(1.0, 0.5, 0.8),
        smoothness=0.25,
        contrast=2.0,
        fog_density=0.1,
        cursor_glow_intensity=0.3,
        cursor_glow_radius=1.0,
        cursor_glow_color=0xFFFFFF,
    ),
}

_COLOR_FIELDS = ("background_color", "sphere_color", "light_color", "cursor_glow_color")


def _build(name: str) -> PresetConfig:
    values = dict(_PRESET_TABLE[name])
    for key in _COLOR_FIELDS:
        values[key] = hex_to_rgb(values[key])
    return PresetConfig(name=name, **values)


def create_presets(low_power: bool = False) -> dict[str, PresetConfig]:
    """Build the preset table, adjusted for the device profile.

    Args:
        low_power: Whether the device was classified as mobile/low-power. If
            so, every glow radius is scaled by LOW_POWER_GLOW_SCALE.

    Returns:
        Mapping from preset name to PresetConfig, in PRESET_NAMES order.
    """
    presets = {name: _build(name) for name in PRESET_NAMES}
    if low_power:
        presets = {
            name: replace(p, cursor_glow_radius=p.cursor_glow_radius * LOW_POWER_GLOW_SCALE)
            for name, p in presets.items()
        }
    return presets


def is_preset_name(name: str) -> bool:
    return name in _PRESET_TABLE


def get_preset(name: str, low_power: bool = False) -> PresetConfig:
    """Look up a single preset.

    Raises:
        KeyError: If the name is not one of PRESET_NAMES.
    """
    if not is_preset_name(name):
        raise KeyError(f"Unknown preset '{name}', expected one of {', '.join(PRESET_NAMES)}")
    return create_presets(low_power)[name]


def get_preset_background_hex(name: str) -> int:
    """Background colour of a preset as a 0xRRGGBB integer.

    Raises:
        KeyError: If the name is not one of PRESET_NAMES.
    """
    if not is_preset_name(name):
        raise KeyError(f"Unknown preset '{name}', expected one of {', '.join(PRESET_NAMES)}")
    return _PRESET_TABLE[name]["background_color"]


def get_preset_light_color(name: str) -> str:
    """Light colour of a preset as a '#rrggbb' string."""
    return rgb_to_hex_string(get_preset(name).light_color)
