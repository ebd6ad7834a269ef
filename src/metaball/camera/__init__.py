"""Camera module for the host view.

Components:
    perspective: Perspective camera and fullscreen quad sizing

The ray marcher does not read the camera; the camera only decides how large
the quad carrying the marched image is in world space.
"""

from .perspective import (
    FULLSCREEN_OVERSCAN,
    FullscreenQuad,
    PerspectiveCamera,
    fullscreen_quad,
    visible_plane_size,
)

__all__ = [
    "PerspectiveCamera",
    "FullscreenQuad",
    "fullscreen_quad",
    "visible_plane_size",
    "FULLSCREEN_OVERSCAN",
]
