"""Coordinate transform shared by the CPU update path and the ray marcher.

Authoring positions, the tracked pointer and every pixel the ray marcher
evaluates all start out as normalized 2-D coordinates in [0, 1] per axis.
This module converts them to the render space the signed distance field
lives in:

    x = (nx - 0.5) * aspect * 2
    y = (ny - 0.5) * 2

The formula is written exactly once, in screen_offset(), which is a Taichi
pyfunc: kernels inline it and Python calls it directly. The cursor glow and
the proximity-driven cursor radius are computed on the CPU, the surface they
decorate is found on the GPU, so both sides must agree term for term.

Example:
    >>> from metaball.core.transform import screen_to_world
    >>> screen_to_world(0.5, 0.5, 16.0 / 9.0)
    (0.0, 0.0, 0.0)
    >>> screen_to_world(1.0, 1.0, 2.0)
    (2.0, 1.0, 0.0)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Depth the ray origin is pushed back to before marching along +z
RAY_ORIGIN_DEPTH = -1.0


@ti.pyfunc
def screen_offset(nx, ny, aspect):
    """Map a normalized coordinate to its render-space x/y pair.

    Args:
        nx: Horizontal coordinate in [0, 1] (left to right).
        ny: Vertical coordinate in [0, 1] (bottom to top).
        aspect: Viewport width divided by height.

    Returns:
        A tuple (x, y) in render space.
    """
    return (nx - 0.5) * aspect * 2.0, (ny - 0.5) * 2.0


def screen_to_world(nx: float, ny: float, aspect: float) -> tuple[float, float, float]:
    """Convert a normalized authoring coordinate to render space (CPU side).

    Args:
        nx: Horizontal coordinate in [0, 1].
        ny: Vertical coordinate in [0, 1].
        aspect: Viewport width divided by height.

    Returns:
        The render-space point (x, y, 0.0).
    """
    x, y = screen_offset(float(nx), float(ny), float(aspect))
    return (float(x), float(y), 0.0)


def aspect_ratio(width: float, height: float) -> float:
    """Width over height, falling back to 1.0 for an empty viewport."""
    if height <= 0:
        return 1.0
    return float(width) / float(height)


@ti.func
def pixel_to_uv(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32):
    """Normalized coordinate of a pixel centre.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).
        width: Image width in pixels.
        height: Image height in pixels.

    Returns:
        A tuple (u, v) in [0, 1].
    """
    u = (ti.cast(pixel_i, ti.f32) + 0.5) / ti.cast(width, ti.f32)
    v = (ti.cast(pixel_j, ti.f32) + 0.5) / ti.cast(height, ti.f32)
    return u, v


@ti.func
def ray_origin(u: ti.f32, v: ti.f32, aspect: ti.f32) -> vec3:
    """Ray origin for a normalized screen coordinate (GPU side).

    The marcher is orthographic in local screen space: every ray starts on
    the plane z = RAY_ORIGIN_DEPTH and travels along +z.
    """
    x, y = screen_offset(u, v, aspect)
    return vec3(x, y, RAY_ORIGIN_DEPTH)


@ti.kernel
def _ray_origins_kernel(
    uvs: ti.types.ndarray(),
    aspect: ti.f32,
    out: ti.types.ndarray(),
):
    for n in range(uvs.shape[0]):
        origin = ray_origin(uvs[n, 0], uvs[n, 1], aspect)
        for c in ti.static(range(3)):
            out[n, c] = origin[c]


def ray_origins_numpy(
    uvs: npt.NDArray[np.float32],
    aspect: float,
) -> npt.NDArray[np.float32]:
    """Evaluate ray_origin() inside a Taichi kernel for many coordinates.

    Used to check the GPU side of the transform against screen_to_world().

    Args:
        uvs: Array of shape (N, 2) with normalized (u, v) coordinates.
        aspect: Viewport width divided by height.

    Returns:
        Array of shape (N, 3) with the ray origins.

    Raises:
        ValueError: If uvs does not have shape (N, 2).
    """
    uvs = np.ascontiguousarray(uvs, dtype=np.float32)
    if uvs.ndim != 2 or uvs.shape[1] != 2:
        raise ValueError(f"Expected an (N, 2) array of coordinates, got {uvs.shape}")

    out = np.zeros((uvs.shape[0], 3), dtype=np.float32)
    _ray_origins_kernel(uvs, float(aspect), out)
    return out
