"""Unit tests for sphere intersection.

Tests cover:
- Ray hitting sphere from outside (front face)
- Ray missing sphere
- Ray starting inside sphere (back face)
- Open interval bounds on t
- Host-side Sphere objects
"""

import math

import pytest
import taichi as ti


def _hit(origin, direction, center, radius, t_min=0.001, t_max=1000.0):
    """Run hit_sphere in a kernel and return the record fields as a dict."""
    from pathtracer.core.ray import Ray, vec3
    from pathtracer.geometry.sphere import SphereData, hit_sphere

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f32, shape=())
    point = ti.Vector.field(3, dtype=ti.f32, shape=())
    normal = ti.Vector.field(3, dtype=ti.f32, shape=())
    front_face = ti.field(dtype=ti.i32, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: ti.math.vec3, d: ti.math.vec3, c: ti.math.vec3, r: ti.f32, lo: ti.f32, hi: ti.f32):
        ray = Ray(origin=o, direction=d)
        sphere = SphereData(center=c, radius=r, material_id=7)
        rec = hit_sphere(ray, sphere, lo, hi)
        hit[None] = rec.hit
        t_val[None] = rec.t
        point[None] = rec.p
        normal[None] = rec.normal
        front_face[None] = rec.front_face
        material_id[None] = rec.material_id

    test_kernel(vec3(*origin), vec3(*direction), vec3(*center), radius, t_min, t_max)
    p = point[None]
    n = normal[None]
    return {
        "hit": hit[None],
        "t": t_val[None],
        "p": (p[0], p[1], p[2]),
        "normal": (n[0], n[1], n[2]),
        "front_face": front_face[None],
        "material_id": material_id[None],
    }


class TestHitSphere:
    """Tests for the kernel-side ray-sphere intersection."""

    def test_direct_hit_from_outside(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(4.0, abs=1e-5)
        assert rec["p"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)
        assert rec["front_face"] == 1
        assert rec["material_id"] == 7

    def test_unnormalized_direction(self):
        """t is measured in units of the direction vector."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -2.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(2.0, abs=1e-5)
        assert rec["p"] == pytest.approx((0.0, 0.0, 1.0), abs=1e-5)

    def test_miss(self):
        rec = _hit((5.0, 0.0, 0.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0
        assert rec["material_id"] == -1

    def test_sphere_behind_ray_is_missed(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 0

    def test_hit_from_inside_flips_normal(self):
        rec = _hit((0.0, 0.0, 0.0), (0.0, 0.0, 1.0), (0.0, 0.0, 0.0), 1.0)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(1.0, abs=1e-5)
        assert rec["normal"] == pytest.approx((0.0, 0.0, -1.0), abs=1e-5)
        assert rec["front_face"] == 0

    def test_hit_point_lies_on_sphere(self):
        center = (0.3, -0.2, -2.0)
        radius = 0.75
        rec = _hit((0.0, 0.0, 0.0), (0.2, -0.1, -1.0), center, radius)
        assert rec["hit"] == 1
        distance = math.dist(rec["p"], center)
        assert distance == pytest.approx(radius, abs=1e-4)
        n = rec["normal"]
        assert math.sqrt(sum(c * c for c in n)) == pytest.approx(1.0, abs=1e-5)

    def test_t_min_rejects_near_root(self):
        """With the near root excluded the far root is returned."""
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.5)
        assert rec["hit"] == 1
        assert rec["t"] == pytest.approx(6.0, abs=1e-5)
        assert rec["front_face"] == 0

    def test_t_max_rejects_far_hit(self):
        rec = _hit((0.0, 0.0, 100.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_max=50.0)
        assert rec["hit"] == 0

    def test_bounds_are_exclusive(self):
        rec = _hit((0.0, 0.0, 5.0), (0.0, 0.0, -1.0), (0.0, 0.0, 0.0), 1.0, t_min=4.0, t_max=6.0)
        assert rec["hit"] == 0


class TestSphereObject:
    """Tests for the host-side Sphere."""

    def test_invalid_radius(self, gray):
        from pathtracer.geometry.sphere import Sphere

        with pytest.raises(ValueError):
            Sphere((0.0, 0.0, 0.0), 0.0, gray)
        with pytest.raises(ValueError):
            Sphere((0.0, 0.0, 0.0), -1.0, gray)
        with pytest.raises(ValueError):
            Sphere((0.0, 0.0, 0.0), math.inf, gray)

    def test_spheres_yields_itself(self, gray):
        from pathtracer.geometry.sphere import Sphere

        sphere = Sphere((1, 2, 3), 0.5, gray)
        assert list(sphere.spheres()) == [sphere]
        assert sphere.center == (1.0, 2.0, 3.0)

    def test_host_hit(self, gray):
        from pathtracer.geometry.sphere import Sphere

        sphere = Sphere((0.0, 0.0, -1.0), 0.5, gray)
        info = sphere.hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert info is not None
        assert info.t == pytest.approx(0.5, abs=1e-5)
        assert info.front_face
        assert info.material is gray

    def test_host_miss(self, gray):
        from pathtracer.geometry.sphere import Sphere

        sphere = Sphere((0.0, 0.0, -1.0), 0.5, gray)
        assert sphere.hit((0.0, 0.0, 0.0), (0.0, 1.0, 0.0)) is None
