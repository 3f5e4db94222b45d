"""Preset scenes.

Factories return a ``(world, camera)`` pair. The camera is fixed at the
origin looking down -z, so every preset places its objects in front of it,
around z = -1 to -4 for the default 25 degree field of view.

Example:
    >>> from pathtracer.scene.presets import create_material_showcase_scene
    >>> world, camera = create_material_showcase_scene(aspect_ratio=16 / 9)
"""

from pathtracer.camera.pinhole import DEFAULT_VFOV, PinholeCamera
from pathtracer.geometry.hittable_list import HittableList
from pathtracer.geometry.sphere import Sphere
from pathtracer.materials.dielectric import Dielectric
from pathtracer.materials.lambertian import Lambertian
from pathtracer.materials.metal import Metal

# Radius of the large sphere used as the ground
GROUND_RADIUS = 100.0


def create_single_sphere_scene(
    albedo: tuple[float, float, float] = (0.5, 0.5, 0.5),
    aspect_ratio: float = 1.0,
    vfov: float = DEFAULT_VFOV,
) -> tuple[HittableList, PinholeCamera]:
    """One diffuse sphere of radius 0.5 centered at (0, 0, -1).

    Args:
        albedo: Color of the sphere.
        aspect_ratio: Image width divided by height.
        vfov: Vertical field of view in degrees.

    Returns:
        (world, camera)
    """
    world = HittableList([Sphere((0.0, 0.0, -1.0), 0.5, Lambertian(albedo))])
    return world, PinholeCamera(vfov=vfov, aspect_ratio=aspect_ratio)


def create_material_showcase_scene(
    aspect_ratio: float = 16.0 / 9.0,
    vfov: float = DEFAULT_VFOV,
) -> tuple[HittableList, PinholeCamera]:
    """Three spheres on a large ground sphere: glass, diffuse and metal.

    The glass sphere on the left holds a smaller sphere of refractive index
    1/1.5, which renders as a hollow glass shell.

    Returns:
        (world, camera)
    """
    ground = Lambertian((0.8, 0.8, 0.0))
    center = Lambertian((0.1, 0.2, 0.5))
    glass = Dielectric(1.5)
    bubble = Dielectric(1.0 / 1.5)
    gold = Metal((0.8, 0.6, 0.2), fuzz=0.2)

    world = HittableList()
    world.add(Sphere((0.0, -GROUND_RADIUS - 0.5, -4.0), GROUND_RADIUS, ground))
    world.add(Sphere((0.0, 0.0, -4.0), 0.5, center))
    world.add(HittableList([
        Sphere((-1.05, 0.0, -4.0), 0.5, glass),
        Sphere((-1.05, 0.0, -4.0), 0.4, bubble),
    ]))
    world.add(Sphere((1.05, 0.0, -4.0), 0.5, gold))

    return world, PinholeCamera(vfov=vfov, aspect_ratio=aspect_ratio)
