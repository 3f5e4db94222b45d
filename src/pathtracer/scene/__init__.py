"""Scene module: scene tables, upload and preset scenes.

Components:
    intersection: Sphere and material tables in Taichi fields, and the
        nearest-hit traversal used by the radiance estimator
    manager: SceneManager (world upload, single-ray queries) and scene
        dictionary serialization
    presets: Ready-made (world, camera) pairs

Scene data is organized for parallel kernel access:
    - Structure-of-Arrays layout for sphere data
    - One material row per distinct Material instance
"""

from .intersection import (
    MAX_MATERIALS,
    MAX_SPHERES,
    add_material,
    add_sphere,
    clear_scene,
    get_material_count,
    get_scene_generation,
    get_sphere_count,
    intersect_scene,
    is_scene_loaded,
)
from .manager import SceneManager, SceneStats, world_from_dict, world_to_dict
from .presets import create_material_showcase_scene, create_single_sphere_scene

__all__ = [
    "MAX_SPHERES",
    "MAX_MATERIALS",
    "add_material",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "get_material_count",
    "get_scene_generation",
    "intersect_scene",
    "is_scene_loaded",
    "SceneManager",
    "SceneStats",
    "world_to_dict",
    "world_from_dict",
    "create_single_sphere_scene",
    "create_material_showcase_scene",
]
