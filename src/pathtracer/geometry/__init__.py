"""Geometry module for hittable objects.

Components:
    hittable: HitRecord struct, face-normal orientation and the Hittable base
    sphere: Sphere primitive with robust ray-sphere intersection
    hittable_list: Ordered (possibly nested) collection of hittables

Kernel-side intersection routines are Taichi functions returning a fresh
HitRecord per test. Host-side objects describe the scene and are flattened
into Taichi fields by ``pathtracer.scene.manager.SceneManager``.
"""

from .hittable import HitInfo, Hittable, HitRecord, make_miss_record, set_face_normal
from .sphere import Sphere, SphereData, hit_sphere
from .hittable_list import HittableList

__all__ = [
    "HitRecord",
    "HitInfo",
    "Hittable",
    "make_miss_record",
    "set_face_normal",
    "Sphere",
    "SphereData",
    "hit_sphere",
    "HittableList",
]
