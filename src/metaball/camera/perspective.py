"""Host perspective camera and the fullscreen quad it looks through.

The ray marcher itself is orthographic in screen space and never reads the
camera. The host camera only determines how large the quad carrying the
marched image must be to fill the view: at distance d from the camera the
visible plane is

    height = 2 * tan(vfov / 2) * d
    width  = height * aspect

and the quad is over-scaled by FULLSCREEN_OVERSCAN so its edges stay off
screen.

Example:
    >>> from metaball.camera.perspective import PerspectiveCamera, fullscreen_quad
    >>> camera = PerspectiveCamera(lookfrom=(0.0, 0.0, 5.0), vfov=60.0, aspect_ratio=16 / 9)
    >>> quad = fullscreen_quad(camera)
    >>> round(quad.width / quad.height, 4) == round(16 / 9, 4)
    True
"""

import math
from dataclasses import dataclass

import numpy as np

# Quad over-scale so its edges never show
FULLSCREEN_OVERSCAN = 1.1

# Quad offset from the far end of the view axis
QUAD_DEPTH_OFFSET = 0.01


@dataclass
class PerspectiveCamera:
    """Configuration for the host's perspective camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees.
        aspect_ratio: Width divided by height of the output image.
    """

    lookfrom: tuple[float, float, float] = (0.0, 0.0, 5.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 75.0
    aspect_ratio: float = 16.0 / 9.0

    def distance(self) -> float:
        """Distance of the camera from the world origin."""
        return float(np.linalg.norm(np.asarray(self.lookfrom, dtype=np.float64)))


@dataclass(frozen=True)
class FullscreenQuad:
    """World-space size and depth of the quad that fills the view."""

    width: float
    height: float
    z: float


def visible_plane_size(vfov: float, distance: float, aspect: float) -> tuple[float, float]:
    """Width and height of the view frustum cross-section at a distance.

    Args:
        vfov: Vertical field of view in degrees.
        distance: Distance from the camera.
        aspect: Width divided by height.

    Returns:
        (width, height) in world units.
    """
    height = 2.0 * math.tan(math.radians(vfov) / 2.0) * distance
    return height * aspect, height


def fullscreen_quad(camera: PerspectiveCamera, distance: float | None = None) -> FullscreenQuad:
    """Size and place the fullscreen quad for a camera.

    Args:
        camera: Host camera.
        distance: Camera distance override; None uses the camera's distance
            from the origin.

    Returns:
        The over-scanned quad.
    """
    d = camera.distance() if distance is None else distance
    width, height = visible_plane_size(camera.vfov, d, camera.aspect_ratio)
    return FullscreenQuad(
        width=width * FULLSCREEN_OVERSCAN,
        height=height * FULLSCREEN_OVERSCAN,
        z=-d + QUAD_DEPTH_OFFSET,
    )
