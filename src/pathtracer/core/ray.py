"""Ray data structure and vector utilities for Taichi kernels.

This module provides the Ray dataclass, the vector helpers used by the
geometry and material code, and the random direction generators used for
Monte Carlo scattering. Random generators take and return an explicit
stream state (see ``pathtracer.core.rng``) instead of drawing from
``ti.random``.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> origin = ti.math.vec3(0.0, 0.0, 0.0)
    >>> direction = ti.math.vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.rng import random_range

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Not required to be
            unit length; primary rays from the camera are not normalized.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f32) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f32:
    return tm.length(v)


@ti.func
def length_squared(v: vec3) -> ti.f32:
    """Squared Euclidean length; avoids the square root in comparisons."""
    return tm.dot(v, v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The caller must not pass a zero-length vector.
    """
    return tm.normalize(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f32:
    return tm.dot(a, b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    return tm.cross(a, b)


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        incident - 2 * dot(incident, normal) * normal
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f32) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    Args:
        incident: The incoming direction (unit length).
        normal: The surface normal facing against the incident ray.
        eta: The ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction, or a zero vector on total internal
        reflection.
    """
    cos_i = -tm.dot(incident, normal)
    sin2_t = eta * eta * (1.0 - cos_i * cos_i)
    result = vec3(0.0, 0.0, 0.0)
    if sin2_t <= 1.0:
        cos_t = ti.sqrt(1.0 - sin2_t)
        result = eta * incident + (eta * cos_i - cos_t) * normal
    return result


@ti.func
def schlick_reflectance(cosine: ti.f32, ratio: ti.f32) -> ti.f32:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between the incident direction and normal.
        ratio: Ratio of refractive indices.

    Returns:
        r0 + (1 - r0) * (1 - cosine)^5 with r0 = ((1 - ratio) / (1 + ratio))^2.
    """
    r0 = (1.0 - ratio) / (1.0 + ratio)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Returns:
        1 if every component magnitude is below 1e-8, 0 otherwise.
    """
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Generate a random point inside the unit sphere.

    Rejection sampling: draw points in the [-1, 1] cube until one lands
    strictly inside the sphere. About 52% of draws are accepted.

    Args:
        state: The random stream state.

    Returns:
        A tuple (new_state, point) with length_squared(point) < 1.
    """
    s = state
    p = vec3(1.0, 1.0, 1.0)
    while length_squared(p) >= 1.0:
        x = 0.0
        y = 0.0
        z = 0.0
        s, x = random_range(s, -1.0, 1.0)
        s, y = random_range(s, -1.0, 1.0)
        s, z = random_range(s, -1.0, 1.0)
        p = vec3(x, y, z)
    return s, p


@ti.func
def random_unit_vector(state: ti.u32):
    """Generate a random unit vector uniformly distributed on the sphere.

    Returns:
        A tuple (new_state, direction).
    """
    s, p = random_in_unit_sphere(state)
    # a draw of exactly the origin cannot be normalized
    while length_squared(p) < 1e-12:
        s, p = random_in_unit_sphere(s)
    return s, normalize(p)
