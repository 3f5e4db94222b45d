"""Scene manager: uploads host-side worlds into the scene tables.

The SceneManager flattens a Hittable (a Sphere or an arbitrarily nested
HittableList) into the sphere table and assigns material rows. Materials are
deduplicated by identity, so spheres sharing one Material instance share one
material_id.

It also answers single-ray queries from Python and converts worlds to and
from plain dictionaries (for JSON scene files).

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.manager import SceneManager
    >>> manager = SceneManager()
    >>> manager.load(world)
    >>> info = manager.hit((0, 0, 0), (0, 0, -1))
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.geometry.hittable import HitInfo, Hittable
from pathtracer.geometry.hittable_list import HittableList
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.material import Material
from pathtracer.scene.intersection import (
    MAX_SPHERES,
    add_material,
    add_sphere,
    clear_scene,
    get_material_count,
    get_sphere_count,
    intersect_scene,
    is_scene_loaded,
    mark_scene_loaded,
)

logger = logging.getLogger(__name__)

# Type alias for 3D vectors
vec3 = tm.vec3

# Result of the single-ray query kernel
_query_hit = ti.field(dtype=ti.i32, shape=())
_query_t = ti.field(dtype=ti.f32, shape=())
_query_point = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_normal = ti.Vector.field(3, dtype=ti.f32, shape=())
_query_front_face = ti.field(dtype=ti.i32, shape=())
_query_material_id = ti.field(dtype=ti.i32, shape=())


@ti.kernel
def _query_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    t_min: ti.f32,
    t_max: ti.f32,
):
    # Single-iteration outer loop keeps the sphere loop serial
    for _ in range(1):
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        rec = intersect_scene(ray, t_min, t_max)
        _query_hit[None] = rec.hit
        _query_t[None] = rec.t
        _query_point[None] = rec.p
        _query_normal[None] = rec.normal
        _query_front_face[None] = rec.front_face
        _query_material_id[None] = rec.material_id


@dataclass
class SceneStats:
    """Counts describing the loaded scene.

    Attributes:
        spheres: Number of spheres in the sphere table.
        materials: Number of distinct material rows.
    """

    spheres: int
    materials: int


class SceneManager:
    """Uploads a world into the Taichi scene tables.

    Attributes:
        world: The most recently loaded world, or None.
        materials: Distinct Material instances, indexed by material_id.
    """

    def __init__(self) -> None:
        """Initialize an empty manager and clear the scene tables."""
        self.world: Hittable | None = None
        self.materials: list[Material] = []
        self._material_ids: dict[int, int] = {}
        self.clear()

    def clear(self) -> None:
        """Clear the scene tables and local tracking."""
        clear_scene()
        self.world = None
        self.materials.clear()
        self._material_ids.clear()

    def load(self, world: Hittable) -> SceneStats:
        """Replace the current scene with ``world``.

        Args:
            world: A Sphere, HittableList or other Hittable.

        Returns:
            Counts of the uploaded spheres and materials.

        Raises:
            TypeError: If world is not a Hittable or a sphere has no Material.
            RuntimeError: If the scene exceeds the sphere or material capacity.
        """
        if not isinstance(world, Hittable):
            raise TypeError(f"Expected a Hittable, got {type(world).__name__}")

        self.clear()
        for sphere in world.spheres():
            if get_sphere_count() >= MAX_SPHERES:
                raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
            material_id = self._material_id(sphere.material)
            add_sphere(sphere.center, sphere.radius, material_id)

        self.world = world
        mark_scene_loaded()

        stats = SceneStats(spheres=get_sphere_count(), materials=get_material_count())
        logger.debug(
            "Loaded scene with %d spheres and %d materials", stats.spheres, stats.materials
        )
        return stats

    def _material_id(self, material: Material) -> int:
        """Return the material row for ``material``, adding it on first use."""
        key = id(material)
        if key in self._material_ids:
            return self._material_ids[key]
        if not isinstance(material, Material):
            raise TypeError(f"Expected a Material, got {type(material).__name__}")

        albedo, fuzz, ior = material.table_row()
        material_id = add_material(int(material.material_type), albedo, fuzz, ior)
        self._material_ids[key] = material_id
        self.materials.append(material)
        return material_id

    def get_material(self, material_id: int) -> Material | None:
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = 0.0,
        t_max: float = math.inf,
    ) -> HitInfo | None:
        """Find the nearest hit of a single ray against the loaded scene.

        Args:
            origin: Ray origin.
            direction: Ray direction (need not be unit length).
            t_min: Hits at t <= t_min are ignored.
            t_max: Hits at t >= t_max are ignored.

        Returns:
            A HitInfo, or None on a miss.

        Raises:
            RuntimeError: If no world has been loaded.
        """
        if not is_scene_loaded():
            raise RuntimeError("No scene loaded. Call load() first.")

        _query_kernel(
            origin[0],
            origin[1],
            origin[2],
            direction[0],
            direction[1],
            direction[2],
            t_min,
            t_max,
        )
        if _query_hit[None] == 0:
            return None

        p = _query_point[None]
        n = _query_normal[None]
        return HitInfo(
            t=float(_query_t[None]),
            p=(float(p[0]), float(p[1]), float(p[2])),
            normal=(float(n[0]), float(n[1]), float(n[2])),
            front_face=bool(_query_front_face[None]),
            material=self.materials[int(_query_material_id[None])],
        )

    def get_stats(self) -> SceneStats:
        return SceneStats(spheres=get_sphere_count(), materials=get_material_count())

    def to_dict(self) -> dict[str, Any]:
        """Export the loaded world to a dictionary.

        Raises:
            RuntimeError: If no world has been loaded.
        """
        if self.world is None:
            raise RuntimeError("No scene loaded. Call load() first.")
        return world_to_dict(self.world)


# =============================================================================
# Scene Serialization
# =============================================================================


def world_to_dict(world: Hittable) -> dict[str, Any]:
    """Convert a world to a JSON-compatible dictionary.

    The result has a ``materials`` list and an ``objects`` tree. Spheres refer
    to materials by index, so shared materials stay shared after a round trip.

    Raises:
        ValueError: If the world contains a Hittable other than Sphere or
            HittableList.
    """
    materials: list[dict[str, Any]] = []
    indices: dict[int, int] = {}

    def material_index(material: Material) -> int:
        key = id(material)
        if key not in indices:
            indices[key] = len(materials)
            materials.append(material.to_dict())
        return indices[key]

    def convert(obj: Hittable) -> dict[str, Any]:
        if isinstance(obj, Sphere):
            return {
                "type": "sphere",
                "center": list(obj.center),
                "radius": obj.radius,
                "material": material_index(obj.material),
            }
        if isinstance(obj, HittableList):
            return {"type": "list", "objects": [convert(child) for child in obj]}
        raise ValueError(f"Cannot serialize object of type {type(obj).__name__}")

    objects = [convert(obj) for obj in world] if isinstance(world, HittableList) else [convert(world)]
    return {"materials": materials, "objects": objects}


def world_from_dict(data: dict[str, Any]) -> HittableList:
    """Build a world from a dictionary produced by ``world_to_dict``.

    Raises:
        ValueError: If an object or material type is unknown, a material
            index is out of range, or a parameter is invalid.
    """
    materials = [Material.from_dict(mat) for mat in data.get("materials", [])]

    def build(obj: dict[str, Any]) -> Hittable:
        obj_type = str(obj.get("type", "")).lower()
        if obj_type == "sphere":
            index = obj.get("material", 0)
            if not 0 <= index < len(materials):
                raise ValueError(f"Invalid material index: {index}")
            center = obj.get("center", [0.0, 0.0, 0.0])
            return Sphere(
                (center[0], center[1], center[2]),
                obj.get("radius", 1.0),
                materials[index],
            )
        if obj_type == "list":
            return HittableList(build(child) for child in obj.get("objects", []))
        raise ValueError(f"Unknown object type: {obj_type}")

    return HittableList(build(obj) for obj in data.get("objects", []))
