"""Signed distance primitives and the smooth-minimum blend.

Only spheres are supported. Distances are negative inside a surface and
positive outside. Two spheres are merged with the polynomial smooth minimum
(Quilez form), which rounds off the crease a plain min() would leave:

    h = max(k - |a - b|, 0) / k
    smin(a, b, k) = min(a, b) - h^2 * k / 4

smin() never exceeds min(a, b) for k >= 0 and degrades to min(a, b) as
k -> 0. A blend width of exactly zero short-circuits to min() instead of
dividing by zero.

Example:
    >>> from metaball.core.sdf import smin
    >>> smin(1.0, 1.0, 0.5)
    0.875
    >>> smin(0.2, 3.0, 0.0)
    0.2
"""

import math

import taichi as ti
import taichi.math as tm

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.func
def sphere_sdf(p: vec3, center: vec3, radius: ti.f32) -> ti.f32:
    """Signed distance from p to a sphere.

    Args:
        p: Point to evaluate.
        center: Sphere centre.
        radius: Sphere radius.

    Returns:
        |p - center| - radius.
    """
    return tm.length(p - center) - radius


def sphere_distance(
    p: tuple[float, float, float],
    center: tuple[float, float, float],
    radius: float,
) -> float:
    """Python-scope twin of sphere_sdf()."""
    return math.dist(p, center) - radius


@ti.pyfunc
def smin(a, b, k):
    """Polynomial smooth minimum of two distances.

    Args:
        a: First distance.
        b: Second distance.
        k: Blend width. Larger values merge shapes from further apart.

    Returns:
        The blended distance, at most min(a, b).
    """
    result = min(a, b)
    if k > 0.0:
        h = max(k - abs(a - b), 0.0) / k
        result = result - h * h * k * 0.25
    return result


@ti.pyfunc
def hermite(p):
    """Cubic Hermite ease 3p^2 - 2p^3 for p in [0, 1]."""
    return p * p * (3.0 - 2.0 * p)


@ti.pyfunc
def smoothstep(edge0, edge1, x):
    """GLSL-style smoothstep with a guard for coincident edges."""
    width = edge1 - edge0
    result = 0.0
    if width != 0.0:
        t = min(max((x - edge0) / width, 0.0), 1.0)
        result = hermite(t)
    elif x >= edge1:
        result = 1.0
    return result
