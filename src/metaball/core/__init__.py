"""Core rendering module.

This module contains the building blocks of the metaball ray marcher:

Components:
    transform: Normalized-to-render-space transform shared by CPU and kernels
    sdf: Sphere SDF, smooth minimum and easing helpers
    composition: Scene SDF fold over the active primitive slots
    lighting: Normals, ambient occlusion, shading and cursor glow
    raymarch: Render target and the per-pixel ray marching kernel
    loop: Frame clock driving per-frame updates

All per-pixel work runs in Taichi kernels; nothing in this module keeps
state across pixels.
"""

from .loop import DEFAULT_DELTA, RenderLoop
from .sdf import hermite, smin, smoothstep, sphere_distance, sphere_sdf
from .transform import aspect_ratio, screen_offset, screen_to_world

# Note: composition, lighting and raymarch are NOT imported here, they read the
# uniform set in metaball.scene. Import them directly when needed, e.g.
#   from metaball.core.raymarch import render_frame

__all__ = [
    "RenderLoop",
    "DEFAULT_DELTA",
    "sphere_sdf",
    "sphere_distance",
    "smin",
    "hermite",
    "smoothstep",
    "screen_offset",
    "screen_to_world",
    "aspect_ratio",
]
