"""Taichi-accelerated Monte Carlo path tracer for sphere scenes.

This package renders scenes built from spheres with diffuse, metal and glass
materials. Every ray is traced inside Taichi kernels, one parallel task per
pixel, with an explicit per-pixel random stream so renders are reproducible.

Subpackages:
    core: Ray algebra, random streams, radiance estimator and render driver
    geometry: Hittable contract, spheres and hittable lists
    materials: Lambertian, metal and dielectric scattering
    scene: Scene upload into Taichi fields, traversal and preset scenes
    camera: Fixed pinhole camera
    preview: Image buffer, PPM/PNG export and Matplotlib display

Taichi must be initialized (``ti.init``) by the application before any
module that declares fields is imported.
"""

__version__ = "0.1.0"
