"""Materials module for scattering models.

Components:
    material: Material base class, MaterialType tags and albedo validation
    lambertian: Ideal diffuse reflection
    metal: Mirror reflection with optional fuzz
    dielectric: Glass-like refraction with Schlick reflectance

Each material has a host-side class (validated at construction) and a
Taichi scatter function returning (state, did_scatter, direction,
attenuation). A did_scatter of 0 means the ray was absorbed.
"""

from .dielectric import Dielectric, scatter_dielectric
from .lambertian import Lambertian, scatter_lambertian
from .material import Material, MaterialType, validate_albedo
from .metal import Metal, scatter_metal

__all__ = [
    "Material",
    "MaterialType",
    "validate_albedo",
    "Lambertian",
    "scatter_lambertian",
    "Metal",
    "scatter_metal",
    "Dielectric",
    "scatter_dielectric",
]
