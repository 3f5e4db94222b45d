"""Unit tests for the scene tables and the SceneManager.

Tests cover:
- Uploading spheres, lists and nested lists
- Material deduplication by identity
- Table capacity and validation
- Single-ray queries
- Dictionary export and import
"""

import pytest


class TestSceneTables:
    """Tests for the raw sphere and material tables."""

    def test_add_material_and_sphere(self):
        from pathtracer.scene.intersection import (
            add_material,
            add_sphere,
            get_material_count,
            get_sphere_count,
        )

        mat = add_material(0, (0.5, 0.5, 0.5), 0.0, 1.0)
        idx = add_sphere((0.0, 0.0, -1.0), 0.5, mat)
        assert mat == 0
        assert idx == 0
        assert get_material_count() == 1
        assert get_sphere_count() == 1

    def test_add_sphere_rejects_unknown_material(self):
        from pathtracer.scene.intersection import add_sphere

        with pytest.raises(ValueError):
            add_sphere((0.0, 0.0, -1.0), 0.5, 0)

    def test_clear_scene(self):
        from pathtracer.scene.intersection import (
            add_material,
            clear_scene,
            get_material_count,
            is_scene_loaded,
            mark_scene_loaded,
        )

        add_material(0, (0.5, 0.5, 0.5), 0.0, 1.0)
        mark_scene_loaded()
        clear_scene()
        assert get_material_count() == 0
        assert not is_scene_loaded()


class TestSceneManagerLoad:
    """Tests for SceneManager.load."""

    def test_load_single_sphere(self, gray):
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.scene.manager import SceneManager

        stats = SceneManager().load(Sphere((0.0, 0.0, -1.0), 0.5, gray))
        assert stats.spheres == 1
        assert stats.materials == 1

    def test_shared_material_uploaded_once(self, gray):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.materials.lambertian import Lambertian
        from pathtracer.scene.manager import SceneManager

        world = HittableList([
            Sphere((0.0, 0.0, -1.0), 0.5, gray),
            Sphere((1.0, 0.0, -1.0), 0.5, gray),
            Sphere((2.0, 0.0, -1.0), 0.5, Lambertian((0.5, 0.5, 0.5))),
        ])
        manager = SceneManager()
        stats = manager.load(world)
        assert stats.spheres == 3
        # Equal but distinct instances are separate rows
        assert stats.materials == 2
        assert manager.get_material(0) is gray
        assert manager.get_material(5) is None

    def test_load_replaces_previous_scene(self, gray):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.scene.manager import SceneManager

        manager = SceneManager()
        manager.load(HittableList([Sphere((0, 0, -1), 0.5, gray), Sphere((0, 0, -3), 0.5, gray)]))
        stats = manager.load(Sphere((0, 0, -1), 0.5, gray))
        assert stats.spheres == 1
        assert manager.get_stats().spheres == 1

    def test_load_empty_world(self):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.scene.intersection import is_scene_loaded
        from pathtracer.scene.manager import SceneManager

        stats = SceneManager().load(HittableList())
        assert stats.spheres == 0
        assert is_scene_loaded()

    def test_load_rejects_non_hittable(self):
        from pathtracer.scene.manager import SceneManager

        with pytest.raises(TypeError):
            SceneManager().load([1, 2, 3])

    def test_too_many_spheres(self, gray):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.scene.intersection import MAX_SPHERES
        from pathtracer.scene.manager import SceneManager

        world = HittableList(Sphere((float(i), 0.0, -5.0), 0.1, gray) for i in range(MAX_SPHERES + 1))
        with pytest.raises(RuntimeError):
            SceneManager().load(world)


class TestSceneManagerHit:
    """Tests for single-ray queries."""

    def test_hit_requires_loaded_scene(self):
        from pathtracer.scene.manager import SceneManager

        with pytest.raises(RuntimeError):
            SceneManager().hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

    def test_hit_returns_material_instance(self, gray):
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.scene.manager import SceneManager

        manager = SceneManager()
        manager.load(Sphere((0.0, 0.0, -2.0), 1.0, gray))
        info = manager.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert info.t == pytest.approx(1.0, abs=1e-5)
        assert info.p == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)
        assert info.normal == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert info.material is gray


class TestSceneDicts:
    """Tests for world_to_dict / world_from_dict."""

    def test_round_trip_keeps_structure_and_sharing(self, gray):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.materials.metal import Metal
        from pathtracer.scene.manager import world_from_dict, world_to_dict

        mirror = Metal((0.9, 0.9, 0.9), 0.1)
        world = HittableList([
            Sphere((0.0, -100.5, -1.0), 100.0, gray),
            HittableList([Sphere((0.0, 0.0, -1.0), 0.5, mirror), Sphere((1.0, 0.0, -1.0), 0.5, gray)]),
        ])
        data = world_to_dict(world)
        assert len(data["materials"]) == 2
        assert data["objects"][1]["type"] == "list"

        copy = world_from_dict(data)
        spheres = list(copy.spheres())
        assert [s.center for s in spheres] == [s.center for s in world.spheres()]
        assert spheres[0].material is spheres[2].material
        assert isinstance(spheres[1].material, Metal)
        assert spheres[1].material.fuzz == pytest.approx(0.1)

    def test_manager_to_dict(self, gray):
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.scene.manager import SceneManager

        manager = SceneManager()
        with pytest.raises(RuntimeError):
            manager.to_dict()
        manager.load(Sphere((0.0, 0.0, -1.0), 0.5, gray))
        data = manager.to_dict()
        assert data["objects"][0] == {
            "type": "sphere",
            "center": [0.0, 0.0, -1.0],
            "radius": 0.5,
            "material": 0,
        }

    def test_unknown_object_type(self):
        from pathtracer.scene.manager import world_from_dict

        with pytest.raises(ValueError):
            world_from_dict({"materials": [], "objects": [{"type": "quad"}]})

    def test_bad_material_index(self):
        from pathtracer.scene.manager import world_from_dict

        data = {
            "materials": [{"type": "lambertian", "albedo": [0.5, 0.5, 0.5]}],
            "objects": [{"type": "sphere", "center": [0, 0, -1], "radius": 0.5, "material": 3}],
        }
        with pytest.raises(ValueError):
            world_from_dict(data)
