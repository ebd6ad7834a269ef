"""Ray marching kernel for the metaball scene.

Every pixel is an independent invocation: it derives its ray origin from the
shared coordinate transform, sphere-traces the scene SDF along +z for a fixed
number of steps, shades the hit (if any) and composites the cursor glow.
Invocations only read the uniform set; they never write shared state.

The march loop always runs MAX_STEPS iterations. Once a ray has hit or
escaped, the remaining iterations advance it by zero, which keeps every
invocation on the same instruction stream.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from metaball.core.raymarch import get_image_numpy, render_frame, setup_render_target
    >>> setup_render_target(640, 360)
    >>> render_frame()
    >>> image = get_image_numpy()  # (360, 640, 4) RGBA
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from metaball.core.composition import scene_sdf
from metaball.core.lighting import (
    GLOW_ALPHA_WEIGHT,
    GLOW_ON_SURFACE_WEIGHT,
    cursor_glow,
    shade,
)
from metaball.core.transform import pixel_to_uv, ray_origin
from metaball.scene import uniforms

# Type alias for 3D and 4D vectors
vec3 = tm.vec3
vec4 = tm.vec4

# =============================================================================
# Marching Constants
# =============================================================================

# Fixed iteration budget per pixel
MAX_STEPS = 16

# Distance below which the ray counts as on the surface
HIT_EPSILON = 0.001

# Marched distance beyond which the ray counts as escaped
MAX_DISTANCE = 5.0

# Under-relaxation of each step, reduces overshoot on thin blends
STEP_SCALE = 0.9

# All rays travel along the view axis
RAY_DIRECTION = vec3(0.0, 0.0, 1.0)

# =============================================================================
# Render Target (RGBA Image Buffer)
# =============================================================================

# Maximum supported image dimensions (preallocated to avoid kernel recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

_image_width = ti.field(dtype=ti.i32, shape=())
_image_height = ti.field(dtype=ti.i32, shape=())

# Straight (non-premultiplied) RGBA per pixel
_frame_buffer = ti.Vector.field(4, dtype=ti.f32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

_render_target_initialized = ti.field(dtype=ti.i32, shape=())


def setup_render_target(width: int, height: int) -> None:
    """Set the active image size and clear the frame buffer.

    Args:
        width: Image width in pixels (max MAX_IMAGE_WIDTH).
        height: Image height in pixels (max MAX_IMAGE_HEIGHT).

    Raises:
        ValueError: If a dimension is not positive or exceeds the maximum.
    """
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    _image_width[None] = width
    _image_height[None] = height
    _render_target_initialized[None] = 1
    clear_render_target()


def fit_render_size(width: int, height: int) -> tuple[int, int]:
    """Largest render size within the target capacity with the same aspect.

    Args:
        width: Requested width in pixels (positive).
        height: Requested height in pixels (positive).

    Returns:
        (width, height), unchanged when it already fits.
    """
    scale = min(1.0, MAX_IMAGE_WIDTH / width, MAX_IMAGE_HEIGHT / height)
    if scale >= 1.0:
        return width, height
    return (
        min(MAX_IMAGE_WIDTH, max(1, int(width * scale))),
        min(MAX_IMAGE_HEIGHT, max(1, int(height * scale))),
    )


def clear_render_target() -> None:
    """Clear the frame buffer to transparent black."""
    _frame_buffer.fill(0.0)


def release_render_target() -> None:
    """Tear down the render target and zero the frame buffer.

    The buffer field itself is module-level and stays allocated for the
    lifetime of the Taichi runtime; releasing drops its contents and marks
    the target unusable until the next setup_render_target().
    """
    _frame_buffer.fill(0.0)
    _render_target_initialized[None] = 0
    _image_width[None] = 0
    _image_height[None] = 0


def get_image_dimensions() -> tuple[int, int]:
    """Get the current render target dimensions as (width, height)."""
    return int(_image_width[None]), int(_image_height[None])


def is_render_target_initialized() -> bool:
    """Whether setup_render_target() has been called since the last release."""
    return bool(_render_target_initialized[None])


def _check_render_target_initialized() -> None:
    """Check if render target is initialized and raise if not."""
    if _render_target_initialized[None] == 0:
        raise RuntimeError("Render target not set up. Call setup_render_target() first.")


# =============================================================================
# Marching Core
# =============================================================================


@ti.func
def march(origin: vec3, direction: vec3):
    """Sphere-trace the scene SDF from origin along direction.

    Args:
        origin: Ray origin.
        direction: Ray direction (normalized).

    Returns:
        A tuple (hit, hit_point, total_distance) where hit is 1 when the
        surface was reached and 0 when the ray escaped or ran out of steps.
    """
    total = 0.0
    hit = 0
    hit_point = origin

    for _ in range(MAX_STEPS):
        p = origin + direction * total
        hit_point = p
        dist = scene_sdf(p)
        is_hit = dist < HIT_EPSILON
        too_far = total > MAX_DISTANCE
        if is_hit:
            hit = 1
        if not (is_hit or too_far):
            total += dist * STEP_SCALE

    return hit, hit_point, total


@ti.func
def shade_pixel(u: ti.f32, v: ti.f32) -> vec4:
    """Colour and alpha for a normalized screen coordinate.

    Args:
        u: Horizontal coordinate in [0, 1].
        v: Vertical coordinate in [0, 1] (0 = bottom).

    Returns:
        Straight RGBA: opaque on a hit, glow-only and translucent otherwise.
    """
    origin = ray_origin(u, v, uniforms.get_aspect())
    hit, hit_point, total = march(origin, RAY_DIRECTION)

    glow = cursor_glow(origin)
    glow_color = uniforms.cursor_glow_color[None] * glow

    color = glow_color
    alpha = glow * GLOW_ALPHA_WEIGHT
    if hit == 1:
        color = shade(hit_point, RAY_DIRECTION, total) + glow_color * GLOW_ON_SURFACE_WEIGHT
        alpha = 1.0

    # Degenerate normals (e.g. exactly at a sphere centre) can produce NaN
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            color[c] = 0.0

    return vec4(color, tm.clamp(alpha, 0.0, 1.0))


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_kernel(width: ti.i32, height: ti.i32):
    """Shade every pixel of the active region into the frame buffer."""
    for i, j in ti.ndrange(width, height):
        u, v = pixel_to_uv(i, j, width, height)
        _frame_buffer[i, j] = shade_pixel(u, v)


@ti.kernel
def _render_single_pixel(pixel_i: ti.i32, pixel_j: ti.i32, width: ti.i32, height: ti.i32) -> vec4:
    u, v = pixel_to_uv(pixel_i, pixel_j, width, height)
    return shade_pixel(u, v)


@ti.kernel
def _march_kernel(uvs: ti.types.ndarray(), hits: ti.types.ndarray(), distances: ti.types.ndarray()):
    for n in range(uvs.shape[0]):
        origin = ray_origin(uvs[n, 0], uvs[n, 1], uniforms.get_aspect())
        hit, _, total = march(origin, RAY_DIRECTION)
        hits[n] = hit
        distances[n] = total


# =============================================================================
# Public Rendering API
# =============================================================================


def render_frame() -> None:
    """Ray-march the whole active region with the current uniform values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    _render_kernel(width, height)


def render_pixel(pixel_i: int, pixel_j: int) -> tuple[float, float, float, float]:
    """Render a single pixel without touching the frame buffer.

    Args:
        pixel_i: Pixel x-coordinate (0 = left).
        pixel_j: Pixel y-coordinate (0 = bottom).

    Returns:
        Tuple of (R, G, B, A) values.

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()
    rgba = _render_single_pixel(pixel_i, pixel_j, width, height)
    return (float(rgba[0]), float(rgba[1]), float(rgba[2]), float(rgba[3]))


def march_rays(uvs: npt.ArrayLike) -> tuple[npt.NDArray[np.int32], npt.NDArray[np.float32]]:
    """March rays for normalized screen coordinates and report the outcome.

    Args:
        uvs: Array-like of shape (N, 2) with (u, v) in [0, 1].

    Returns:
        Tuple (hits, distances): hit flags (1 = surface) and marched distances.

    Raises:
        ValueError: If uvs does not have shape (N, 2).
    """
    coords = np.ascontiguousarray(np.atleast_2d(uvs), dtype=np.float32)
    if coords.shape[1] != 2:
        raise ValueError(f"Expected an (N, 2) array of coordinates, got {coords.shape}")

    hits = np.zeros(coords.shape[0], dtype=np.int32)
    distances = np.zeros(coords.shape[0], dtype=np.float32)
    _march_kernel(coords, hits, distances)
    return hits, distances


def get_image_numpy() -> npt.NDArray[np.float32]:
    """Get the last rendered frame as a NumPy array.

    Returns:
        Array of shape (height, width, 4), straight RGBA, top row first,
        values clamped to [0, 1].

    Raises:
        RuntimeError: If render target has not been set up.
    """
    _check_render_target_initialized()

    width, height = get_image_dimensions()

    full_image = _frame_buffer.to_numpy()
    image = full_image[:width, :height, :]

    # (width, height, 4) -> (height, width, 4), then flip to top-left origin
    image = np.transpose(image, (1, 0, 2))
    image = np.flipud(image)

    image = np.clip(image, 0.0, 1.0)
    return np.ascontiguousarray(image, dtype=np.float32)
