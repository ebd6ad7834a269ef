"""Taichi-based metaball ray marcher.

This package renders an implicit-surface scene: a handful of spheres whose
signed distance fields are blended with a smooth minimum into one surface,
sphere-traced per pixel, lit with a local shading model and composited with
a cursor-follow glow.

Subpackages:
    core: Coordinate transform, SDF primitives, lighting, ray marching kernel
        and the frame loop
    scene: Presets, primitive registry, uniform set and the scene composer
    interaction: Pointer tracking and device profiling
    camera: Host camera model and fullscreen quad sizing
    preview: PNG export, static preview and the interactive window
"""

import logging

__version__ = "0.1.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())
