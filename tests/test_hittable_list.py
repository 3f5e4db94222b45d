"""Unit tests for HittableList and nearest-hit traversal."""

import itertools

import pytest


def _three_spheres(material):
    from pathtracer.geometry.sphere import Sphere

    return [
        Sphere((0.0, 0.0, -3.0), 0.5, material),
        Sphere((0.0, 0.0, -1.5), 0.25, material),
        Sphere((0.0, 0.0, -6.0), 1.0, material),
    ]


class TestHittableList:
    """Tests for building lists."""

    def test_add_and_len(self, gray):
        from pathtracer.geometry.hittable_list import HittableList

        world = HittableList()
        assert len(world) == 0
        for sphere in _three_spheres(gray):
            world.add(sphere)
        assert len(world) == 3

    def test_add_rejects_non_hittable(self):
        from pathtracer.geometry.hittable_list import HittableList

        with pytest.raises(TypeError):
            HittableList().add("not a sphere")

    def test_add_rejects_itself(self):
        from pathtracer.geometry.hittable_list import HittableList

        world = HittableList()
        with pytest.raises(ValueError):
            world.add(world)

    def test_add_rejects_indirect_cycle(self, gray):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.geometry.sphere import Sphere

        outer = HittableList([Sphere((0.0, 0.0, -1.0), 0.5, gray)])
        middle = HittableList([outer])
        inner = HittableList([middle])
        with pytest.raises(ValueError):
            outer.add(inner)
        assert len(outer) == 1
        assert len(list(inner.spheres())) == 1

    def test_shared_sublist_is_not_a_cycle(self, gray):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.geometry.sphere import Sphere

        shared = HittableList([Sphere((0.0, 0.0, -1.0), 0.5, gray)])
        world = HittableList([shared, HittableList([shared])])
        assert len(list(world.spheres())) == 2

    def test_nested_lists_flatten_depth_first(self, gray):
        from pathtracer.geometry.hittable_list import HittableList

        a, b, c = _three_spheres(gray)
        world = HittableList([a, HittableList([b, HittableList([c])])])
        assert list(world.spheres()) == [a, b, c]

    def test_clear(self, gray):
        from pathtracer.geometry.hittable_list import HittableList

        world = HittableList(_three_spheres(gray))
        world.clear()
        assert len(world) == 0
        assert list(world.spheres()) == []


class TestNearestHit:
    """The nearest hit does not depend on the order of the objects."""

    def test_order_independent(self, gray):
        from pathtracer.geometry.hittable_list import HittableList

        for order in itertools.permutations(_three_spheres(gray)):
            info = HittableList(order).hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0.001)
            assert info is not None
            assert info.t == pytest.approx(1.25, abs=1e-5)

    def test_nested_list_nearest(self, gray):
        from pathtracer.geometry.hittable_list import HittableList

        far, near, farthest = _three_spheres(gray)
        world = HittableList([far, HittableList([farthest, HittableList([near])])])
        info = world.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0.001)
        assert info.t == pytest.approx(1.25, abs=1e-5)

    def test_t_max_limits_search(self, gray):
        from pathtracer.geometry.hittable_list import HittableList

        world = HittableList(_three_spheres(gray))
        assert world.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0.001, 1.0) is None

    def test_empty_list_misses(self):
        from pathtracer.geometry.hittable_list import HittableList

        assert HittableList().hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0)) is None

    def test_material_of_nearest_object(self):
        from pathtracer.geometry.hittable_list import HittableList
        from pathtracer.geometry.sphere import Sphere
        from pathtracer.materials.lambertian import Lambertian
        from pathtracer.materials.metal import Metal

        matte = Lambertian((0.2, 0.3, 0.4))
        mirror = Metal((0.9, 0.9, 0.9))
        world = HittableList([
            Sphere((0.0, 0.0, -5.0), 1.0, matte),
            Sphere((0.0, 0.0, -2.0), 0.5, mirror),
        ])
        info = world.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), 0.001)
        assert info.material is mirror
