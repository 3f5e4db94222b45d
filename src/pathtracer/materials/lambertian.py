"""Lambertian (ideal diffuse) material.

The scattered direction is the surface normal plus a random unit vector,
which yields a cosine-weighted distribution about the normal. A Lambertian
surface always scatters; the attenuation is its albedo.

Example:
    >>> from pathtracer.materials.lambertian import Lambertian
    >>> matte = Lambertian((0.5, 0.5, 0.5))
    >>> # Inside a Taichi kernel:
    >>> # state, did_scatter, direction, attenuation = scatter_lambertian(
    >>> #     albedo, rec, state
    >>> # )
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import near_zero, random_unit_vector
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material, MaterialType, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_lambertian(albedo: vec3, rec: HitRecord, state: ti.u32):
    """Scatter a ray off a diffuse surface.

    Args:
        albedo: The diffuse reflectance color.
        rec: The hit being shaded.
        state: The random stream state.

    Returns:
        A tuple (state, did_scatter, direction, attenuation). did_scatter is
        always 1.
    """
    s, offset = random_unit_vector(state)
    direction = rec.normal + offset

    # Catch the degenerate direction when offset is opposite the normal
    if near_zero(direction):
        direction = rec.normal

    return s, 1, direction, albedo


@dataclass(eq=False)
class Lambertian(Material):
    """Diffuse material.

    Attributes:
        albedo: Reflectance color, each component in [0, 1].

    Raises:
        ValueError: If any albedo component is outside [0, 1].
    """

    albedo: tuple[float, float, float]

    material_type: ClassVar[MaterialType] = MaterialType.LAMBERTIAN

    def __post_init__(self) -> None:
        self.albedo = validate_albedo(self.albedo)

    def table_row(self) -> tuple[tuple[float, float, float], float, float]:
        return self.albedo, 0.0, 1.0

    def to_dict(self) -> dict[str, Any]:
        return {"type": "lambertian", "albedo": list(self.albedo)}
