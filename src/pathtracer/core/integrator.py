"""Radiance estimator and per-pixel sampling kernel.

The radiance estimator follows a ray through the scene: find the nearest
hit, let the hit material scatter the ray, and continue from the hit point
until the ray is absorbed, escapes to the background, or the depth limit is
reached. It is written as a loop that carries the product of attenuations
(the throughput) instead of recursing, which Taichi does not support; the
result is the same as the recursive definition

    color(ray, depth) = black                                  if depth > max
                      = background(ray)                        on a miss
                      = black                                  if absorbed
                      = attenuation * color(scattered, depth+1) otherwise

The sampling kernel runs one parallel task per pixel. Every pixel averages
``samples`` jittered primary rays, applies gamma 2 (square root), clamps to
[0, 0.999] and scales to 8-bit integers.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.pinhole import PinholeCamera, setup_camera
    >>> from pathtracer.core.integrator import read_rows, render_rows
    >>> from pathtracer.scene.manager import SceneManager
    >>> SceneManager().load(world)
    >>> setup_camera(PinholeCamera(aspect_ratio=1.0))
    >>> render_rows(0, 64, 64, 64, samples=10, max_depth=50, t_min=1e-3, seed=0)
    >>> image = read_rows(0, 64, 64)
"""

import numpy as np
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import get_ray, is_camera_ready
from pathtracer.core.ray import Ray, normalize
from pathtracer.core.rng import make_rng_state, random_float
from pathtracer.geometry.hittable import HitRecord
from pathtracer.materials.dielectric import scatter_dielectric
from pathtracer.materials.lambertian import scatter_lambertian
from pathtracer.materials.material import MaterialType
from pathtracer.materials.metal import scatter_metal
from pathtracer.scene.intersection import (
    intersect_scene,
    is_scene_loaded,
    material_albedos,
    material_fuzz,
    material_iors,
    material_kinds,
)

# Type alias for 3D vectors
vec3 = tm.vec3

# =============================================================================
# Configuration Constants
# =============================================================================

# Depth of the primary ray; each scatter adds one
START_DEPTH = 1

# Deepest bounce that is still traced
MAX_DEPTH = 50

# Nearest accepted hit distance; keeps scattered rays off their own surface
T_MIN = 1e-3

# Background gradient: white at the horizon, sky blue at the zenith
WHITE = vec3(1.0, 1.0, 1.0)
SKY_BLUE = vec3(0.5, 0.7, 1.0)

# Largest representable 8-bit value after clamping to [0, 0.999]
COLOR_CLAMP_MAX = 0.999

# =============================================================================
# Output Buffer
# =============================================================================

# Maximum image dimensions (preallocated to avoid recompilation)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Finished 8-bit pixels, indexed [col, row] with row 0 at the bottom
_pixels = ti.Vector.field(3, dtype=ti.i32, shape=(MAX_IMAGE_WIDTH, MAX_IMAGE_HEIGHT))

# Result of a single trace_ray() call
_trace_result = ti.Vector.field(3, dtype=ti.f32, shape=())


# =============================================================================
# Radiance Estimation
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Sky gradient seen by rays that escape the scene.

    Args:
        direction: Ray direction (any non-zero length).

    Returns:
        (1 - t) * white + t * sky_blue with t = 0.5 * (unit.y + 1).
    """
    unit = normalize(direction)
    t = 0.5 * (unit.y + 1.0)
    return (1.0 - t) * WHITE + t * SKY_BLUE


@ti.func
def _scatter_material(rec: HitRecord, incident: vec3, state: ti.u32):
    """Dispatch to the scatter function of the hit material.

    Args:
        rec: The hit being shaded.
        incident: Direction of the incoming ray.
        state: The random stream state.

    Returns:
        A tuple (state, did_scatter, direction, attenuation).
    """
    material_id = rec.material_id
    kind = material_kinds[material_id]

    s = state
    did_scatter = 0
    direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)

    if kind == int(MaterialType.LAMBERTIAN):
        s, did_scatter, direction, attenuation = scatter_lambertian(
            material_albedos[material_id], rec, s
        )
    elif kind == int(MaterialType.METAL):
        s, did_scatter, direction, attenuation = scatter_metal(
            material_albedos[material_id], material_fuzz[material_id], incident, rec, s
        )
    elif kind == int(MaterialType.DIELECTRIC):
        s, did_scatter, direction, attenuation = scatter_dielectric(
            material_iors[material_id], incident, rec, s
        )

    return s, did_scatter, direction, attenuation


@ti.func
def ray_color(ray: Ray, depth: ti.i32, max_depth: ti.i32, t_min: ti.f32, state: ti.u32):
    """Estimate the color carried back along a ray.

    Args:
        ray: The ray to trace.
        depth: Depth of this ray; primary rays start at START_DEPTH.
        max_depth: Deepest depth that is still traced. A ray at a greater
            depth contributes black.
        t_min: Nearest accepted hit distance.
        state: The random stream state.

    Returns:
        A tuple (state, color).
    """
    s = state
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    origin = ray.origin
    direction = ray.direction
    current_depth = depth
    active = 1

    while active == 1 and current_depth <= max_depth:
        rec = intersect_scene(Ray(origin=origin, direction=direction), t_min, tm.inf)

        if rec.hit == 0:
            color = throughput * background_color(direction)
            active = 0
        else:
            did_scatter = 0
            scattered = vec3(0.0, 0.0, 0.0)
            attenuation = vec3(0.0, 0.0, 0.0)
            s, did_scatter, scattered, attenuation = _scatter_material(rec, direction, s)

            if did_scatter == 0:
                # Absorbed
                active = 0
            else:
                throughput = throughput * attenuation
                origin = rec.p
                direction = scattered
                current_depth += 1

    # Leaving the loop while still active means the depth ran out: black
    return s, color


@ti.func
def sanitize_color(color: vec3) -> vec3:
    """Zero out NaN, infinite and negative channels."""
    result = color
    for k in ti.static(range(3)):
        if tm.isnan(color[k]) or tm.isinf(color[k]) or color[k] < 0.0:
            result[k] = 0.0
    return result


@ti.func
def to_rgb8(color_sum: vec3, samples: ti.i32) -> tm.ivec3:
    """Average, gamma-correct and quantize an accumulated color.

    Each channel becomes floor(clamp(sqrt(sum / samples), 0, 0.999) * 255).
    """
    scale = 1.0 / ti.cast(samples, ti.f32)
    rgb = tm.ivec3(0, 0, 0)
    for k in ti.static(range(3)):
        c = tm.clamp(ti.sqrt(color_sum[k] * scale), 0.0, COLOR_CLAMP_MAX)
        rgb[k] = ti.cast(ti.floor(c * 255.0), ti.i32)
    return rgb


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _render_rows(
    row_start: ti.i32,
    row_end: ti.i32,
    width: ti.i32,
    height: ti.i32,
    samples: ti.i32,
    max_depth: ti.i32,
    t_min: ti.f32,
    seed: ti.i32,
    jitter: ti.i32,
):
    """Render rows [row_start, row_end) into the pixel buffer.

    Rows count from the bottom of the image. Each pixel seeds its own random
    stream from (seed, row * width + col).
    """
    inv_w = 1.0 / ti.cast(width - 1, ti.f32)
    inv_h = 1.0 / ti.cast(height - 1, ti.f32)
    for col, row in ti.ndrange(width, (row_start, row_end)):
        state = make_rng_state(seed, row * width + col)
        total = vec3(0.0, 0.0, 0.0)

        for _ in range(samples):
            jx = 0.0
            jy = 0.0
            if jitter == 1:
                state, jx = random_float(state)
                state, jy = random_float(state)
            u = (ti.cast(col, ti.f32) + jx) * inv_w
            v = (ti.cast(row, ti.f32) + jy) * inv_h

            color = vec3(0.0, 0.0, 0.0)
            state, color = ray_color(get_ray(u, v), START_DEPTH, max_depth, t_min, state)
            total += sanitize_color(color)

        _pixels[col, row] = to_rgb8(total, samples)


@ti.kernel
def _copy_rows(out: ti.types.ndarray(), row_start: ti.i32, row_end: ti.i32, width: ti.i32):
    for r, col in ti.ndrange((row_start, row_end), width):
        pixel = _pixels[col, r]
        for k in ti.static(range(3)):
            out[r - row_start, col, k] = pixel[k]


@ti.kernel
def _trace_kernel(
    ox: ti.f32,
    oy: ti.f32,
    oz: ti.f32,
    dx: ti.f32,
    dy: ti.f32,
    dz: ti.f32,
    depth: ti.i32,
    max_depth: ti.i32,
    t_min: ti.f32,
    seed: ti.i32,
):
    # Single-iteration outer loop keeps the scene traversal serial
    for i in range(1):
        state = make_rng_state(seed, i)
        ray = Ray(origin=vec3(ox, oy, oz), direction=vec3(dx, dy, dz))
        color = vec3(0.0, 0.0, 0.0)
        state, color = ray_color(ray, depth, max_depth, t_min, state)
        _trace_result[None] = color


# =============================================================================
# Python API
# =============================================================================


def _check_ready() -> None:
    if not is_scene_loaded():
        raise RuntimeError("No scene loaded. Load a world with SceneManager.load() first.")
    if not is_camera_ready():
        raise RuntimeError("Camera not set up. Call setup_camera() first.")


def render_rows(
    row_start: int,
    row_end: int,
    width: int,
    height: int,
    samples: int,
    max_depth: int = MAX_DEPTH,
    t_min: float = T_MIN,
    seed: int = 0,
    jitter: bool = True,
) -> None:
    """Render a band of rows into the pixel buffer.

    Args:
        row_start: First row (counted from the bottom, inclusive).
        row_end: Last row (exclusive).
        width: Image width in pixels, at least 2.
        height: Image height in pixels, at least 2.
        samples: Samples per pixel.
        max_depth: Deepest traced bounce.
        t_min: Nearest accepted hit distance.
        seed: Render seed.
        jitter: If False every sample goes through the pixel corner, which
            makes single-sample renders deterministic without a seed.

    Raises:
        RuntimeError: If no scene is loaded or the camera is not set up.
        ValueError: If the dimensions or row range are out of bounds.
    """
    _check_ready()
    if not (2 <= width <= MAX_IMAGE_WIDTH and 2 <= height <= MAX_IMAGE_HEIGHT):
        raise ValueError(
            f"Image size {width}x{height} must be between 2x2 and "
            f"{MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT}"
        )
    if not 0 <= row_start <= row_end <= height:
        raise ValueError(f"Invalid row range [{row_start}, {row_end}) for height {height}")
    if samples < 1:
        raise ValueError(f"samples = {samples} must be at least 1")

    _render_rows(
        row_start,
        row_end,
        width,
        height,
        samples,
        max_depth,
        t_min,
        seed,
        1 if jitter else 0,
    )


def read_rows(row_start: int, row_end: int, width: int) -> np.ndarray:
    """Copy finished rows out of the pixel buffer.

    Returns:
        A uint8 array of shape (row_end - row_start, width, 3). Index 0 is
        row_start, i.e. the bottom-most row of the band.
    """
    out = np.zeros((row_end - row_start, width, 3), dtype=np.int32)
    if row_end > row_start:
        _copy_rows(out, row_start, row_end, width)
    return out.astype(np.uint8)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    depth: int = START_DEPTH,
    max_depth: int = MAX_DEPTH,
    t_min: float = T_MIN,
    seed: int = 0,
) -> tuple[float, float, float]:
    """Estimate the color of a single ray against the loaded scene.

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero).
        depth: Depth to start at.
        max_depth: Deepest traced bounce; depth > max_depth gives black.
        t_min: Nearest accepted hit distance.
        seed: Seed of the ray's random stream.

    Returns:
        The linear (not gamma-corrected) RGB color.

    Raises:
        RuntimeError: If no scene is loaded.
    """
    if not is_scene_loaded():
        raise RuntimeError("No scene loaded. Load a world with SceneManager.load() first.")
    _trace_kernel(
        origin[0],
        origin[1],
        origin[2],
        direction[0],
        direction[1],
        direction[2],
        depth,
        max_depth,
        t_min,
        seed,
    )
    c = _trace_result[None]
    return (float(c[0]), float(c[1]), float(c[2]))

