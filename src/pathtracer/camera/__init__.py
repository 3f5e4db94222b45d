"""Camera module for primary ray generation.

Components:
    pinhole: Fixed pinhole camera at the origin looking down -z

Ray generation uses normalized image coordinates:
    u in [0, 1]: left to right across image
    v in [0, 1]: bottom to top across image
"""

from .pinhole import (
    DEFAULT_VFOV,
    PinholeCamera,
    get_camera_info,
    get_ray,
    is_camera_ready,
    setup_camera,
)

__all__ = [
    "DEFAULT_VFOV",
    "PinholeCamera",
    "setup_camera",
    "is_camera_ready",
    "get_ray",
    "get_camera_info",
]
