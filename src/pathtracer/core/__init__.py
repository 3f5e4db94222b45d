"""Core rendering module.

Components:
    rng: Seedable counter-based random streams
    ray: Ray data structure, vector algebra and random direction sampling
    integrator: Radiance estimator and the per-pixel sampling kernel
    renderer: Render settings and the banded render driver

All per-ray work runs inside Taichi kernels. Each pixel owns an independent
random stream, so renders are deterministic for a fixed seed.
"""

from .ray import (
    Ray,
    cross,
    dot,
    length,
    length_squared,
    make_ray,
    near_zero,
    normalize,
    random_in_unit_sphere,
    random_unit_vector,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .rng import make_rng_state, next_uint, random_float, random_range, wang_hash

# Note: integrator and renderer are NOT imported here; they declare Taichi
# fields, which requires ti.init() to have run first.

__all__ = [
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "length",
    "length_squared",
    "normalize",
    "dot",
    "cross",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "random_in_unit_sphere",
    "random_unit_vector",
    "wang_hash",
    "make_rng_state",
    "next_uint",
    "random_float",
    "random_range",
]
