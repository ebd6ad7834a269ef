"""Local lighting model for the metaball surface.

All functions here run inside the ray marching kernel. The model is a
cheap stand-in for real global illumination:

- normal: central differences of the scene SDF
- ambient occlusion: two samples along the normal
- soft shadow: a hook that always reports "fully lit"
- shading: ambient + Lambert diffuse + Blinn specular + Fresnel rim +
  cursor highlight, then contrast, tone compression and fog
- cursor glow: a radial falloff around the cursor, independent of hits

The soft shadow stays disabled because a second march per pixel costs more
than the frame budget allows; soft_shadow() keeps the call site in place.
"""

import taichi as ti
import taichi.math as tm

from metaball.core.composition import scene_sdf
from metaball.core.sdf import smoothstep
from metaball.scene import uniforms

# Type alias for 3D vectors
vec3 = tm.vec3

# Central difference step for normals
NORMAL_EPSILON = 0.001

# Ambient occlusion sample offsets along the normal
AO_NEAR = 0.03
AO_FAR = 0.06

# Tone compression knee: c / (c + TONE_KNEE)
TONE_KNEE = 0.8

# Fixed weights of the composited terms
RIM_WEIGHT = 0.4
CURSOR_HIGHLIGHT_WEIGHT = 0.2
CURSOR_HIGHLIGHT_REACH = 0.4
CONTRAST_SCALE = 0.9
FOG_WEIGHT = 0.3
GLOW_ON_SURFACE_WEIGHT = 0.3
GLOW_ALPHA_WEIGHT = 0.8

# Smallest glow radius used in the falloff
MIN_GLOW_RADIUS = 1e-4


@ti.func
def calc_normal(p: vec3) -> vec3:
    """Surface normal from the central-difference gradient of the scene SDF."""
    ex = vec3(NORMAL_EPSILON, 0.0, 0.0)
    ey = vec3(0.0, NORMAL_EPSILON, 0.0)
    ez = vec3(0.0, 0.0, NORMAL_EPSILON)
    grad = vec3(
        scene_sdf(p + ex) - scene_sdf(p - ex),
        scene_sdf(p + ey) - scene_sdf(p - ey),
        scene_sdf(p + ez) - scene_sdf(p - ez),
    )
    return tm.normalize(grad)


@ti.func
def ambient_occlusion(p: vec3, n: vec3) -> ti.f32:
    """Two-tap occlusion estimate, clamped to [0, 1] (1 = unoccluded)."""
    h1 = scene_sdf(p + n * AO_NEAR)
    h2 = scene_sdf(p + n * AO_FAR)
    occ = (AO_NEAR - h1) + (AO_FAR - h2) * 0.5
    return tm.clamp(1.0 - occ * 2.0, 0.0, 1.0)


@ti.func
def soft_shadow(ro: vec3, rd: vec3, mint: ti.f32, maxt: ti.f32, k: ti.f32) -> ti.f32:
    """Soft shadow factor along rd from ro. Always 1.0 (no shadow)."""
    return 1.0


@ti.func
def cursor_glow(world_pos: vec3) -> ti.f32:
    """Glow intensity at world_pos, measured in the screen plane."""
    cursor = uniforms.cursor_position[None]
    dist = tm.length(world_pos.xy - cursor.xy)
    radius = ti.max(uniforms.cursor_glow_radius[None], MIN_GLOW_RADIUS)
    glow = 1.0 - smoothstep(0.0, radius, dist)
    return glow * glow * uniforms.cursor_glow_intensity[None]


@ti.func
def shade(hit_point: vec3, ray_dir: vec3, total_distance: ti.f32) -> vec3:
    """Shaded surface colour at a hit point, before the glow is added.

    Args:
        hit_point: Surface point found by the marcher.
        ray_dir: Direction the ray travelled (normalized).
        total_distance: Distance marched to reach the surface.

    Returns:
        Tone-compressed, fogged RGB colour.
    """
    light = uniforms.light_color[None]
    normal = calc_normal(hit_point)
    view_dir = -ray_dir
    light_dir = tm.normalize(uniforms.light_position[None])

    ao = ambient_occlusion(hit_point, normal)
    diff = ti.max(tm.dot(normal, light_dir), 0.0)
    shadow = soft_shadow(hit_point, light_dir, 0.01, 10.0, 20.0)

    half_dir = tm.normalize(light_dir + view_dir)
    spec = ti.max(tm.dot(normal, half_dir), 0.0) ** uniforms.specular_power[None]
    fresnel = (1.0 - ti.max(tm.dot(view_dir, normal), 0.0)) ** uniforms.fresnel_power[None]

    ambient = light * uniforms.ambient_intensity[None] * ao
    diffuse = light * diff * uniforms.diffuse_intensity[None] * shadow
    specular = light * spec * uniforms.specular_intensity[None] * fresnel
    rim = light * fresnel * RIM_WEIGHT

    cursor = uniforms.cursor_position[None]
    dist_to_cursor = tm.length(hit_point - cursor)
    reach = uniforms.cursor_radius[None] + CURSOR_HIGHLIGHT_REACH
    highlight = 1.0 - smoothstep(0.0, reach, dist_to_cursor)
    cursor_highlight = light * highlight * CURSOR_HIGHLIGHT_WEIGHT

    color = uniforms.sphere_color[None] + ambient + diffuse + specular + rim + cursor_highlight
    color *= ao
    color = ti.max(color, 0.0) ** (uniforms.contrast[None] * CONTRAST_SCALE)
    color = color / (color + TONE_KNEE)

    fog = 1.0 - ti.exp(-total_distance * uniforms.fog_density[None])
    return tm.mix(color, uniforms.background_color[None], fog * FOG_WEIGHT)
