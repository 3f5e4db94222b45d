"""Fixed pinhole camera for primary ray generation.

The eye sits at the world origin looking down the negative z axis with +y
up. The viewport lies on the plane z = -1; its height is 2 * tan(vfov / 2)
and its width is height * aspect_ratio. Normalized image coordinates map onto
the viewport as:

    u = 0: left edge,   u = 1: right edge
    v = 0: bottom edge, v = 1: top edge

Ray directions are not normalized; they point from the origin to the
viewport point.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.camera.pinhole import PinholeCamera, setup_camera, get_ray
    >>> setup_camera(PinholeCamera(vfov=25.0, aspect_ratio=16.0 / 9.0))
    >>> @ti.kernel
    ... def render():
    ...     ray = get_ray(0.5, 0.5)  # Ray through image center
"""

import math
from dataclasses import dataclass

import taichi as ti

from pathtracer.core.ray import Ray, make_ray, vec3

# =============================================================================
# Camera Data Structures
# =============================================================================

DEFAULT_VFOV = 25.0


@dataclass
class PinholeCamera:
    """Configuration for the fixed pinhole camera.

    Attributes:
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.

    Raises:
        ValueError: If vfov or aspect_ratio is out of range.
    """

    vfov: float = DEFAULT_VFOV
    aspect_ratio: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov = {self.vfov} must be in (0, 180) degrees")
        if not self.aspect_ratio > 0.0:
            raise ValueError(f"aspect_ratio = {self.aspect_ratio} must be positive")

    @classmethod
    def for_image(cls, width: int, height: int, vfov: float = DEFAULT_VFOV) -> "PinholeCamera":
        """Create a camera whose aspect ratio matches an image size."""
        return cls(vfov=vfov, aspect_ratio=width / height)


# =============================================================================
# Taichi Fields for Camera State
# =============================================================================

_camera_origin = ti.Vector.field(3, dtype=ti.f32, shape=())
_viewport_horizontal = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full width
_viewport_vertical = ti.Vector.field(3, dtype=ti.f32, shape=())  # Full height
_lower_left_corner = ti.Vector.field(3, dtype=ti.f32, shape=())
_camera_ready = ti.field(dtype=ti.i32, shape=())


# =============================================================================
# Camera Setup (Python-side)
# =============================================================================


def setup_camera(camera: PinholeCamera) -> None:
    """Write the viewport geometry for ``camera`` into the camera fields.

    Must be called before rendering.
    """
    theta = math.radians(camera.vfov)
    viewport_height = 2.0 * math.tan(theta / 2.0)
    viewport_width = camera.aspect_ratio * viewport_height

    horizontal = (viewport_width, 0.0, 0.0)
    vertical = (0.0, viewport_height, 0.0)
    # origin - horizontal/2 - vertical/2 - (0, 0, focal_length)
    lower_left = (-viewport_width / 2.0, -viewport_height / 2.0, -1.0)

    _camera_origin[None] = vec3(0.0, 0.0, 0.0)
    _viewport_horizontal[None] = vec3(*horizontal)
    _viewport_vertical[None] = vec3(*vertical)
    _lower_left_corner[None] = vec3(*lower_left)
    _camera_ready[None] = 1


def is_camera_ready() -> bool:
    return bool(_camera_ready[None])


# =============================================================================
# Ray Generation (Taichi-compatible)
# =============================================================================


@ti.func
def get_ray(u: ti.f32, v: ti.f32) -> Ray:
    """Generate the primary ray through normalized image coordinates (u, v).

    Args:
        u: Horizontal coordinate in [0, 1] (left to right).
        v: Vertical coordinate in [0, 1] (bottom to top).

    Returns:
        A Ray from the eye toward the viewport point.
    """
    origin = _camera_origin[None]
    target = (
        _lower_left_corner[None] + u * _viewport_horizontal[None] + v * _viewport_vertical[None]
    )
    return make_ray(origin, target - origin)


def _as_tuple(field) -> tuple[float, float, float]:
    vec = field[None]
    return (float(vec[0]), float(vec[1]), float(vec[2]))


def get_camera_info() -> dict[str, tuple[float, float, float]]:
    """Get the current camera setup for debugging.

    Returns:
        Dictionary with origin, horizontal, vertical and lower_left.
    """
    return {
        "origin": _as_tuple(_camera_origin),
        "horizontal": _as_tuple(_viewport_horizontal),
        "vertical": _as_tuple(_viewport_vertical),
        "lower_left": _as_tuple(_lower_left_corner),
    }
