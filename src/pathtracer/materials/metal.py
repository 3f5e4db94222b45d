"""Metal (specular reflective) material.

The unit incoming direction is mirrored about the normal and then perturbed
by ``fuzz`` times a random point in the unit sphere:

    R = I - 2(I . N)N
    D = R + fuzz * random_in_unit_sphere()

The scatter is rejected (the ray is absorbed) whenever the mirror reflection
R points into the surface, i.e. dot(R, N) <= 0.

Example:
    >>> from pathtracer.materials.metal import Metal
    >>> gold = Metal((0.8, 0.6, 0.2), fuzz=0.3)
"""

from dataclasses import dataclass
from typing import Any, ClassVar

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import normalize, random_in_unit_sphere, reflect
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.material import Material, MaterialType, validate_albedo

# Type alias for 3D vectors
vec3 = tm.vec3


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f32, incident: vec3, rec: HitRecord, state: ti.u32):
    """Scatter a ray off a metal surface.

    Args:
        albedo: The reflective color.
        fuzz: Perturbation radius in [0, 1]; 0 is a perfect mirror.
        incident: The incoming ray direction (any length).
        rec: The hit being shaded.
        state: The random stream state.

    Returns:
        A tuple (state, did_scatter, direction, attenuation). With fuzz == 0
        the direction is exactly the mirror reflection.
    """
    reflected = reflect(normalize(incident), rec.normal)
    s, jitter = random_in_unit_sphere(state)
    direction = reflected + fuzz * jitter

    did_scatter = 0
    if tm.dot(reflected, rec.normal) > 0.0:
        did_scatter = 1

    return s, did_scatter, direction, albedo


@dataclass(eq=False)
class Metal(Material):
    """Reflective material with optional fuzz.

    Attributes:
        albedo: Reflective tint, each component in [0, 1].
        fuzz: Perturbation radius. Values above 1 are clamped to 1.

    Raises:
        ValueError: If any albedo component is outside [0, 1] or fuzz is
            negative.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    material_type: ClassVar[MaterialType] = MaterialType.METAL

    def __post_init__(self) -> None:
        self.albedo = validate_albedo(self.albedo)
        if self.fuzz < 0.0:
            raise ValueError(f"Fuzz = {self.fuzz} is negative. Fuzz must be >= 0.")
        self.fuzz = min(float(self.fuzz), 1.0)

    def table_row(self) -> tuple[tuple[float, float, float], float, float]:
        return self.albedo, self.fuzz, 1.0

    def to_dict(self) -> dict[str, Any]:
        return {"type": "metal", "albedo": list(self.albedo), "fuzz": self.fuzz}
