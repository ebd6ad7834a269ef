"""Scene SDF: the smooth-minimum fold over every active sphere.

The fold visits a fixed number of slots so the GPU loop can be unrolled:

    1. static spheres    (up to MAX_STATIC, blend width STATIC_BLEND)
    2. animated spheres  (up to MAX_ANIMATED, blend width ANIMATED_BLEND)
    3. the cursor sphere (blend width = live smoothness uniform)

Animated spheres use a tighter blend so they read as separate blobs until
they get close. Slots beyond the active count are skipped by comparing the
slot index with the count; a zero-radius placeholder would still pull the
surface towards its centre.
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from metaball.core.sdf import smin, sphere_sdf
from metaball.core.transform import screen_offset
from metaball.scene import uniforms
from metaball.scene.uniforms import MAX_ANIMATED, MAX_STATIC

# Type alias for 3D vectors
vec3 = tm.vec3

# Blend widths for the fixed parts of the fold
STATIC_BLEND = 0.3
ANIMATED_BLEND = 0.05

# Seed distance of the fold (farther than anything the marcher reaches)
EMPTY_DISTANCE = 100.0


@ti.func
def static_center(slot: ti.template()) -> vec3:
    """Render-space centre of a static slot, via the shared transform."""
    pos = uniforms.static_positions[slot]
    x, y = screen_offset(pos.x, pos.y, uniforms.get_aspect())
    return vec3(x, y, 0.0)


@ti.func
def scene_sdf(p: vec3) -> ti.f32:
    """Signed distance from p to the blended metaball surface.

    Args:
        p: Point in render space.

    Returns:
        The composed distance.
    """
    result = EMPTY_DISTANCE

    n_static = uniforms.static_count[None]
    for i in ti.static(range(MAX_STATIC)):
        d = sphere_sdf(p, static_center(i), uniforms.static_radii[i])
        if i < n_static:
            result = smin(result, d, STATIC_BLEND)

    n_animated = uniforms.animated_count[None]
    for i in ti.static(range(MAX_ANIMATED)):
        d = sphere_sdf(p, uniforms.animated_positions[i], uniforms.animated_radii[i])
        if i < n_animated:
            result = smin(result, d, ANIMATED_BLEND)

    cursor_d = sphere_sdf(p, uniforms.cursor_position[None], uniforms.cursor_radius[None])
    return smin(result, cursor_d, uniforms.smoothness[None])


@ti.kernel
def _sample_kernel(points: ti.types.ndarray(), out: ti.types.ndarray()):
    for n in range(points.shape[0]):
        out[n] = scene_sdf(vec3(points[n, 0], points[n, 1], points[n, 2]))


def sample_scene_sdf(points: npt.ArrayLike) -> npt.NDArray[np.float32]:
    """Evaluate the scene SDF at arbitrary points with the current uniforms.

    Args:
        points: Array-like of shape (N, 3) or a single (3,) point.

    Returns:
        Array of shape (N,) with the composed distances.

    Raises:
        ValueError: If the points do not have three components.
    """
    pts = np.ascontiguousarray(np.atleast_2d(points), dtype=np.float32)
    if pts.shape[1] != 3:
        raise ValueError(f"Expected points of shape (N, 3), got {pts.shape}")

    out = np.zeros(pts.shape[0], dtype=np.float32)
    _sample_kernel(pts, out)
    return out
