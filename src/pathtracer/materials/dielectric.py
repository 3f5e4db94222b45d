"""Dielectric (glass/water) material.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Total internal reflection when ratio * sin(theta) > 1
    - Schlick's approximation for Fresnel reflectance

When refraction is possible the material picks reflection with probability
equal to the Schlick reflectance, and refraction otherwise. Glass does not
tint in this model, so the attenuation is always white and the material
never absorbs.

Example:
    >>> from pathtracer.materials.dielectric import Dielectric
    >>> glass = Dielectric(1.5)
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, reflect, refract, schlick_reflectance
from pathtracer.core.rng import random_float
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material, MaterialType

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_dielectric(ior: ti.f32, incident: vec3, rec: HitRecord, state: ti.u32):
    """Scatter a ray through or off a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident: The incoming ray direction (any length).
        rec: The hit being shaded. front_face selects entering (ratio 1/ior)
            or exiting (ratio ior).
        state: The random stream state.

    Returns:
        A tuple (state, did_scatter, direction, attenuation). did_scatter is
        always 1 and attenuation is white.
    """
    ratio = ior
    if rec.front_face == 1:
        ratio = 1.0 / ior

    unit = normalize(incident)
    cos_theta = ti.min(tm.dot(-unit, rec.normal), 1.0)
    sin_theta = ti.sqrt(ti.max(0.0, 1.0 - cos_theta * cos_theta))

    # Always draw, so the stream advances the same way on every branch
    s, u = random_float(state)

    direction = vec3(0.0, 0.0, 0.0)
    cannot_refract = ratio * sin_theta > 1.0
    if cannot_refract or schlick_reflectance(cos_theta, ratio) > u:
        direction = reflect(unit, rec.normal)
    else:
        direction = refract(unit, rec.normal, ratio)

    return s, 1, direction, vec3(1.0, 1.0, 1.0)


@dataclass(eq=False)
class Dielectric(Material):
    """Transparent refractive material.

    Attributes:
        refractive_index: Index of refraction relative to the surrounding
            medium. Common values: water 1.33, glass 1.5, diamond 2.4.
            Values below 1 model a bubble of a thinner medium.

    Raises:
        ValueError: If the refractive index is not positive.
    """

    refractive_index: float = 1.5

    material_type: ClassVar[MaterialType] = MaterialType.DIELECTRIC

    def __post_init__(self) -> None:
        if not self.refractive_index > 0.0:
            raise ValueError(
                f"Index of refraction = {self.refractive_index} is not positive."
            )
        self.refractive_index = float(self.refractive_index)

    def table_row(self) -> tuple[tuple[float, float, float], float, float]:
        return (1.0, 1.0, 1.0), 0.0, self.refractive_index

    def to_dict(self) -> dict[str, Any]:
        return {"type": "dielectric", "refractive_index": self.refractive_index}
