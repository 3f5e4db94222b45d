"""Scene tables and nearest-hit traversal.

The uploaded scene lives in Taichi fields using a Structure-of-Arrays
layout: one table of spheres and one table of materials. Both are written
from Python before a render and only read inside kernels.

``intersect_scene`` is the kernel-side counterpart of ``HittableList.hit``:
it tests every sphere, shrinking the search interval to the closest hit seen
so far, so the result does not depend on the order of the spheres.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.scene.intersection import add_material, add_sphere, clear_scene
    >>> clear_scene()
    >>> mat = add_material(0, (0.5, 0.5, 0.5), 0.0, 1.0)
    >>> add_sphere((0.0, 0.0, -1.0), 0.5, mat)
    >>> # Use intersect_scene within a Taichi kernel
"""

import taichi as ti
import taichi.math as tm

from pathtracer.core.ray import Ray
from pathtracer.geometry.hittable import HitRecord, make_miss_record
from pathtracer.geometry.sphere import SphereData, hit_sphere

# Type alias for 3D vectors using Taichi's math module
vec3 = tm.vec3

# Maximum number of spheres and distinct materials in a scene
MAX_SPHERES = 1024
MAX_MATERIALS = 1024

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f32, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f32, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

# Material storage: one row per distinct material instance
material_kinds = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f32, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
material_iors = ti.field(dtype=ti.f32, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())

# Set once a world has been uploaded; an empty world still counts as loaded
_scene_loaded = ti.field(dtype=ti.i32, shape=())
# Bumped on every clear so holders of an upload can tell it was replaced
_scene_generation = ti.field(dtype=ti.i32, shape=())


def clear_scene() -> None:
    """Remove all spheres and materials and mark the scene as not loaded.

    The field data is not zeroed; it is overwritten by later uploads.
    """
    num_spheres[None] = 0
    num_materials[None] = 0
    _scene_loaded[None] = 0
    _scene_generation[None] += 1


def mark_scene_loaded() -> None:
    _scene_loaded[None] = 1


def is_scene_loaded() -> bool:
    return bool(_scene_loaded[None])


def get_scene_generation() -> int:
    """Number of times the scene tables have been cleared."""
    return int(_scene_generation[None])


def add_material(
    kind: int,
    albedo: tuple[float, float, float],
    fuzz: float,
    ior: float,
) -> int:
    """Append a row to the material table.

    Args:
        kind: The MaterialType tag.
        albedo: Albedo color (white for dielectrics).
        fuzz: Metal fuzz (0 for other kinds).
        ior: Refractive index (1 for other kinds).

    Returns:
        The row index, used as material_id by spheres.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    idx = num_materials[None]
    if idx >= MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
    material_kinds[idx] = int(kind)
    material_albedos[idx] = vec3(albedo[0], albedo[1], albedo[2])
    material_fuzz[idx] = fuzz
    material_iors[idx] = ior
    num_materials[None] = idx + 1
    return idx


def add_sphere(center: tuple[float, float, float], radius: float, material_id: int) -> int:
    """Append a sphere to the sphere table.

    Args:
        center: The center point of the sphere.
        radius: The radius of the sphere (positive).
        material_id: Row of the sphere's material in the material table.

    Returns:
        The index of the added sphere.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
        ValueError: If material_id does not name an existing material row.
    """
    if material_id < 0 or material_id >= num_materials[None]:
        raise ValueError(f"Invalid material_id: {material_id}")
    idx = num_spheres[None]
    if idx >= MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")
    sphere_centers[idx] = vec3(center[0], center[1], center[2])
    sphere_radii[idx] = radius
    sphere_material_ids[idx] = material_id
    num_spheres[None] = idx + 1
    return idx


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


def get_material_count() -> int:
    """Get the number of material rows in the scene."""
    return int(num_materials[None])


@ti.func
def get_sphere(index: ti.i32) -> SphereData:
    return SphereData(
        center=sphere_centers[index],
        radius=sphere_radii[index],
        material_id=sphere_material_ids[index],
    )


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f32, t_max: ti.f32) -> HitRecord:
    """Find the nearest sphere hit along a ray.

    Args:
        ray: The ray to trace.
        t_min: Lower bound (exclusive) on accepted hits.
        t_max: Upper bound (exclusive) on accepted hits.

    Returns:
        The HitRecord of the closest intersection, or a miss record.
    """
    closest_t = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        rec = hit_sphere(ray, get_sphere(i), t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result
