"""Sphere primitive with robust ray-sphere intersection.

This module provides the kernel-side ``SphereData`` struct, the intersection
function and the host-side ``Sphere`` scene object.

The intersection uses the robust quadratic formula from Ray Tracing Gems to
avoid catastrophic cancellation when h^2 is nearly equal to a*c.

Example:
    >>> from pathtracer.geometry.sphere import Sphere
    >>> from pathtracer.materials.lambertian import Lambertian
    >>> sphere = Sphere((0.0, 0.0, -1.0), 0.5, Lambertian((0.5, 0.5, 0.5)))
    >>> hit = sphere.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
    >>> hit.t  # 0.5
"""

import math
from collections.abc import Iterator
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray, ray_at
from pathtracer.geometry.hittable import HitRecord, Hittable, set_face_normal

if TYPE_CHECKING:
    from pathtracer.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class SphereData:
    """A sphere as stored in the scene table.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive float).
        material_id: Row of the sphere's material in the material table.
    """

    center: vec3
    radius: ti.f32
    material_id: ti.i32


@ti.func
def _solve_quadratic_robust(h: ti.f32, a: ti.f32, c: ti.f32, sqrt_d: ti.f32):
    """Solve a*t^2 + 2*h*t + c = 0 with the numerically stable formula.

    Args:
        h: Half of the linear coefficient.
        a: Quadratic coefficient.
        c: Constant term.
        sqrt_d: Square root of the discriminant (h^2 - a*c).

    Returns:
        Tuple of (t0, t1) where t0 <= t1.
    """
    # q = -(h + sign(h) * sqrt(discriminant))
    sign_h = ti.select(h < 0.0, -1.0, 1.0)
    q = -(h + sign_h * sqrt_d)

    t0 = 0.0
    t1 = 0.0

    if ti.abs(q) < 1e-10:
        # Fall back to the textbook formula for degenerate cases
        t0 = (-h - sqrt_d) / a
        t1 = (-h + sqrt_d) / a
    else:
        t0 = q / a
        t1 = c / q

    if t0 > t1:
        temp = t0
        t0 = t1
        t1 = temp

    return t0, t1


@ti.func
def hit_sphere(ray: Ray, sphere: SphereData, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Test for ray-sphere intersection.

    Substituting the ray into |P - center|^2 = radius^2 gives

        a*t^2 + 2*h*t + c = 0

    with a = dot(d, d), h = dot(d, oc), c = dot(oc, oc) - r^2 and
    oc = origin - center. A negative discriminant is a miss. The smaller
    root is tried first, then the larger one; a root counts only if it lies
    in the open interval (t_min, t_max).

    Args:
        ray: The ray to test (direction need not be normalized).
        sphere: The sphere to test against.
        t_min: Lower bound (exclusive) on accepted hits.
        t_max: Upper bound (exclusive) on accepted hits.

    Returns:
        A HitRecord; check its hit field.
    """
    oc = ray.origin - sphere.center

    a = tm.dot(ray.direction, ray.direction)
    h = tm.dot(ray.direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius

    discriminant = h * h - a * c

    # Initialize result fields (Taichi requires outer-scope declaration)
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    is_front_face = 0
    material_id = -1

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)
        t0, t1 = _solve_quadratic_robust(h, a, c, sqrt_d)

        t = t0
        valid = (t > t_min) and (t < t_max)

        if not valid:
            t = t1
            valid = (t > t_min) and (t < t_max)

        if valid:
            did_hit = 1
            hit_t = t
            hit_point = ray_at(ray, t)
            outward_normal = (hit_point - sphere.center) / sphere.radius
            is_front_face, hit_normal = set_face_normal(ray.direction, outward_normal)
            material_id = sphere.material_id

    return HitRecord(
        hit=did_hit,
        t=hit_t,
        p=hit_point,
        normal=hit_normal,
        front_face=is_front_face,
        material_id=material_id,
    )


class Sphere(Hittable):
    """A sphere scene object.

    Materials are shared by reference: many spheres may hold the same
    Material instance, and the scene upload stores it only once.

    Args:
        center: Center point (x, y, z).
        radius: Radius; must be positive and finite.
        material: The Material the sphere is made of.

    Raises:
        ValueError: If the radius is not a positive finite number.
    """

    def __init__(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: "Material",
    ) -> None:
        if not (radius > 0.0 and math.isfinite(radius)):
            raise ValueError(f"Sphere radius must be positive and finite, got {radius}")
        self.center: tuple[float, float, float] = (
            float(center[0]),
            float(center[1]),
            float(center[2]),
        )
        self.radius = float(radius)
        self.material = material

    def spheres(self) -> "Iterator[Sphere]":
        yield self

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius}, material={self.material!r})"
