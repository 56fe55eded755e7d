"""Unit tests for scene triangle storage and nearest-hit traversal."""

import pytest
import taichi as ti

GREY = (0.5, 0.5, 0.5)
BLACK = (0.0, 0.0, 0.0)
UP = (0.0, 0.0, 1.0)


def _add_plane_triangle(z, albedo=GREY):
    """Add a large triangle in the plane at height z covering the origin."""
    from src.pathtracer.scene.intersection import add_triangle

    return add_triangle(
        (-2.0, -2.0, z),
        (2.0, -2.0, z),
        (0.0, 2.0, z),
        normal=UP,
        albedo=albedo,
        emission=BLACK,
    )


def _cast_down(origin_z=0.0, t_min=1e-3, t_max=100.0):
    """Cast a ray from (0, 0, origin_z) along -z; return (hit, t, index, point)."""
    from src.pathtracer.scene.intersection import intersect_scene, vec3

    hit = ti.field(dtype=ti.i32, shape=())
    index = ti.field(dtype=ti.i32, shape=())
    t = ti.field(dtype=ti.f32, shape=())
    point = ti.field(dtype=ti.math.vec3, shape=())

    @ti.kernel
    def test_kernel(origin_z: ti.f32, t_min: ti.f32, t_max: ti.f32):
        rec = intersect_scene(
            vec3(0.0, 0.0, origin_z), vec3(0.0, 0.0, -1.0), t_min, t_max, 1e-4
        )
        hit[None] = rec.hit
        index[None] = rec.triangle_index
        t[None] = rec.t
        point[None] = rec.point

    test_kernel(origin_z, t_min, t_max)
    return hit[None], t[None], index[None], point[None]


class TestSceneStorage:
    """Tests for adding, counting and clearing triangles."""

    def test_add_returns_sequential_indices(self):
        from src.pathtracer.scene.intersection import get_triangle_count

        assert get_triangle_count() == 0
        assert _add_plane_triangle(-1.0) == 0
        assert _add_plane_triangle(-2.0) == 1
        assert get_triangle_count() == 2

    def test_clear_scene(self):
        from src.pathtracer.scene.intersection import clear_scene, get_triangle_count

        _add_plane_triangle(-1.0)
        clear_scene()
        assert get_triangle_count() == 0

        hit, _, index, _ = _cast_down()
        assert hit == 0
        assert index == -1

    def test_capacity_exceeded(self):
        from src.pathtracer.scene.intersection import MAX_TRIANGLES, num_triangles

        num_triangles[None] = MAX_TRIANGLES
        with pytest.raises(RuntimeError, match="Maximum number of triangles"):
            _add_plane_triangle(-1.0)


class TestIntersectScene:
    """Tests for intersect_scene."""

    def test_empty_scene_misses(self):
        hit, _, index, _ = _cast_down()
        assert hit == 0
        assert index == -1

    def test_single_hit(self):
        _add_plane_triangle(-1.5)
        hit, t, index, point = _cast_down()
        assert hit == 1
        assert index == 0
        assert abs(t - 1.5) < 1e-5
        assert abs(point[2] + 1.5) < 1e-5

    @pytest.mark.parametrize("order", [(-1.0, -2.0), (-2.0, -1.0)])
    def test_nearest_hit_regardless_of_order(self, order):
        """The closer of two stacked triangles wins whatever the insertion order."""
        near_index = None
        for i, z in enumerate(order):
            _add_plane_triangle(z)
            if z == -1.0:
                near_index = i

        hit, t, index, _ = _cast_down()
        assert hit == 1
        assert abs(t - 1.0) < 1e-5
        assert index == near_index

    def test_tie_goes_to_first_triangle(self):
        """Coincident triangles resolve to the lowest index."""
        _add_plane_triangle(-1.0, albedo=(0.1, 0.1, 0.1))
        _add_plane_triangle(-1.0, albedo=(0.9, 0.9, 0.9))

        hit, _, index, _ = _cast_down()
        assert hit == 1
        assert index == 0

    def test_t_max_excludes_far_triangle(self):
        _add_plane_triangle(-5.0)
        hit, _, _, _ = _cast_down(t_max=4.0)
        assert hit == 0

    def test_ray_pointing_away_misses(self):
        _add_plane_triangle(1.0)
        hit, _, index, _ = _cast_down()
        assert hit == 0
        assert index == -1

    def test_get_triangle_reads_back_fields(self):
        from src.pathtracer.scene.intersection import add_triangle, get_triangle

        add_triangle(
            (0.0, 0.0, 0.0),
            (1.0, 0.0, 0.0),
            (0.0, 1.0, 0.0),
            normal=UP,
            albedo=(0.2, 0.4, 0.6),
            emission=(3.0, 2.0, 1.0),
        )

        albedo = ti.field(dtype=ti.math.vec3, shape=())
        emission = ti.field(dtype=ti.math.vec3, shape=())

        @ti.kernel
        def test_kernel():
            tri = get_triangle(0)
            albedo[None] = tri.albedo
            emission[None] = tri.emission

        test_kernel()
        assert abs(albedo[None][1] - 0.4) < 1e-6
        assert abs(emission[None][0] - 3.0) < 1e-6

