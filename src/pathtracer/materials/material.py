"""Material base class and material type tags.

Host-side materials are small Python objects attached to spheres. When the
scene is uploaded, each distinct material instance becomes one row of the
kernel-side material table: a ``MaterialType`` tag plus the parameters the
scatter functions need (albedo, fuzz, refractive index). The integrator
dispatches on the tag.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from enum import IntEnum
from typing import Any, ClassVar


class MaterialType(IntEnum):
    """Enumeration of supported material types.

    Used for material dispatch in the radiance estimator to determine which
    scattering function to call.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


def validate_albedo(albedo: tuple[float, float, float]) -> tuple[float, float, float]:
    """Check an albedo color and return it as a float triple.

    Raises:
        ValueError: If the color does not have three components or any
            component is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return (float(albedo[0]), float(albedo[1]), float(albedo[2]))


class Material(ABC):
    """Base class for all materials.

    Subclasses set ``material_type`` and describe themselves as one row of
    the material table.
    """

    material_type: ClassVar[MaterialType]

    @abstractmethod
    def table_row(self) -> tuple[tuple[float, float, float], float, float]:
        """Return (albedo, fuzz, refractive_index) for the material table."""

    @abstractmethod
    def to_dict(self) -> dict[str, Any]:
        """Serialize the material to a JSON-compatible dictionary."""

    @staticmethod
    def from_dict(data: dict[str, Any]) -> Material:
        """Build a material from a dictionary produced by ``to_dict``.

        Raises:
            ValueError: If the material type is unknown or a parameter is
                invalid.
        """
        # Deferred: the concrete modules import this one
        from pathtracer.materials.dielectric import Dielectric
        from pathtracer.materials.lambertian import Lambertian
        from pathtracer.materials.metal import Metal

        mat_type = str(data.get("type", "")).lower()
        if mat_type == "lambertian":
            return Lambertian(tuple(data.get("albedo", (0.5, 0.5, 0.5))))
        if mat_type == "metal":
            return Metal(tuple(data.get("albedo", (0.8, 0.8, 0.8))), data.get("fuzz", 0.0))
        if mat_type == "dielectric":
            return Dielectric(data.get("refractive_index", 1.5))
        raise ValueError(f"Unknown material type: {mat_type}")
