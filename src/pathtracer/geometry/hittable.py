"""Hittable contract and hit records.

Inside kernels a hit test returns a ``HitRecord`` by value: every test builds
its own record and nothing writes into a record owned by a caller. On the
host side, scene objects derive from ``Hittable``; the renderer flattens them
into the sphere table through ``spheres()``, and ``hit()`` answers a single
ray query with an immutable ``HitInfo``.
"""

import math
from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

import taichi as ti
import taichi.math as tm

if TYPE_CHECKING:
    from pathtracer.geometry.sphere import Sphere
    from pathtracer.materials.material import Material

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3


@ti.dataclass
class HitRecord:
    """Record of a ray-surface intersection.

    Attributes:
        hit: 1 if the ray intersected a surface, 0 on a miss.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        p: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal, always facing against the incoming ray.
        front_face: 1 if the ray arrived from outside the surface, 0 if it
            hit the surface from inside (normal flipped).
        material_id: Row of the hit material in the scene material table,
            -1 on a miss.
    """

    hit: ti.i32
    t: ti.f32
    p: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        p=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a unit outward normal against the incoming ray.

    Args:
        ray_direction: Direction of the incoming ray.
        outward_normal: Unit normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal). front_face is 1 when the ray approaches
        from outside; otherwise the returned normal is flipped.
    """
    front_face = 1
    normal = outward_normal
    if tm.dot(ray_direction, outward_normal) > 0.0:
        front_face = 0
        normal = -outward_normal
    return front_face, normal


@dataclass(frozen=True)
class HitInfo:
    """Host-side result of a single ray query.

    Attributes:
        t: Ray parameter of the nearest intersection.
        p: Intersection point.
        normal: Unit normal facing against the ray.
        front_face: True if the ray hit the outside of the surface.
        material: The Material instance attached to the hit object.
    """

    t: float
    p: tuple[float, float, float]
    normal: tuple[float, float, float]
    front_face: bool
    material: "Material"


class Hittable(ABC):
    """Anything a ray can be intersected with.

    Concrete objects only need to report the spheres they are made of;
    intersection itself happens in the Taichi kernels once the object has
    been uploaded by the SceneManager.
    """

    @abstractmethod
    def spheres(self) -> "Iterator[Sphere]":
        """Yield every sphere contained in this object, depth first."""

    def hit(
        self,
        origin: tuple[float, float, float],
        direction: tuple[float, float, float],
        t_min: float = 0.0,
        t_max: float = math.inf,
    ) -> HitInfo | None:
        """Find the nearest intersection of a ray with this object.

        Warning:
            This uploads the object into the global scene tables, replacing
            whatever world was loaded before. A Renderer prepared earlier
            refuses to render until its prepare() is called again. For
            repeated queries against a loaded world use SceneManager.hit.

        Args:
            origin: Ray origin.
            direction: Ray direction (need not be unit length).
            t_min: Hits at t <= t_min are ignored.
            t_max: Hits at t >= t_max are ignored.

        Returns:
            A HitInfo for the nearest hit, or None if the ray misses.
        """
        # Deferred: the manager declares Taichi fields
        from pathtracer.scene.manager import SceneManager

        manager = SceneManager()
        manager.load(self)
        return manager.hit(origin, direction, t_min, t_max)
