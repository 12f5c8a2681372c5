import math
import random

import numpy as np
import pytest

from quadvox.geom import add, close, dot, isfinite3, mag, point, scale3, sub, vclose
from quadvox.raycast import (
    DegenerateGeometryError,
    HitStatus,
    cast_mesh,
    plane_basis,
    point_in_triangle,
    ray_cast,
    ray_plane_intersect,
    ray_through,
    to_plane,
)
from quadvox.quad import Quad
from quadvox.voxel import Voxel

## a triangle facing +z, five units down the -z axis
FAR = [point(-1, -1, -5), point(1, -1, -5), point(0, 1, -5)]


class TestPlaneBasis:
    def test_orthonormal(self):
        b = plane_basis([point(0, 0, 0), point(2, 0, 0), point(1, 3, 0)])
        assert vclose(b.base0, point(1, 0, 0))
        assert vclose(b.base1, point(0, 1, 0))
        assert vclose(b.normal, point(0, 0, 6))
        assert close(dot(b.base0, b.base1), 0.0)
        assert b.finite

    def test_degenerate(self):
        b = plane_basis([point(0, 0, 0), point(1, 1, 1), point(2, 2, 2)])
        assert not b.finite

    def test_to_plane(self):
        b = plane_basis(FAR)
        # measured from the first vertex
        assert to_plane(point(-1, -1, -5), b) == [0.0, 0.0]
        assert to_plane(point(0.25, 0.5, -5), b) == pytest.approx([1.25, 1.5])
        # the out-of-plane component is dropped
        assert to_plane(point(0.25, 0.5, 7), b) == pytest.approx([1.25, 1.5])


class TestPointInTriangle:
    TRI = [[0, 0], [3, 0], [0, 3]]

    def test_centroid_inside(self):
        assert point_in_triangle([1, 1], self.TRI)

    def test_boundary_is_outside(self):
        for corner in self.TRI:
            assert not point_in_triangle(corner, self.TRI)
        assert not point_in_triangle([1.5, 0], self.TRI)
        assert not point_in_triangle([1.5, 1.5], self.TRI)

    def test_outside(self):
        assert not point_in_triangle([2, 2], self.TRI)
        assert not point_in_triangle([-1, 1], self.TRI)

    def test_winding_does_not_matter(self):
        assert point_in_triangle([1, 1], [[0, 0], [0, 3], [3, 0]])

    def test_degenerate_contains_nothing(self):
        assert not point_in_triangle([1, 0], [[0, 0], [1, 1], [2, 2]])
        assert not point_in_triangle([1, 1], [[0, 0], [1, 1], [2, 2]])


class TestRayPlane:
    def test_hits_plane(self):
        p = ray_plane_intersect(point(0, 0, -1), FAR)
        assert vclose(p, point(0, 0, -5))

    def test_point_lies_on_plane(self):
        tri = [point(1, 0, -4), point(0, 2, -5), point(-1, -1, -6)]
        ray = point(0.2, 0.1, -1)
        p = ray_plane_intersect(ray, tri)
        normal = plane_basis(tri).normal
        assert close(dot(sub(p, tri[0]), normal), 0.0)

    def test_scale_of_ray_does_not_matter(self):
        a = ray_plane_intersect(point(0.1, 0.2, -1), FAR)
        b = ray_plane_intersect(point(0.3, 0.6, -3), FAR)
        assert vclose(a, b)

    def test_origin(self):
        p = ray_plane_intersect(point(0, 0, -1), FAR, origin=point(0.5, 0, 2))
        assert vclose(p, point(0.5, 0, -5))

    def test_parallel_ray_is_not_finite(self):
        p = ray_plane_intersect(point(1, 0, 0), FAR)
        assert not isfinite3(p)


class TestRayCast:
    def test_hit(self):
        hit = ray_cast(point(0, 0, -1), FAR)
        assert hit.status is HitStatus.HIT
        assert hit
        assert math.isclose(hit.t, 5.0)
        assert vclose(hit.point, point(0, 0, -5))
        assert hit.coords == pytest.approx([1.0, 1.0])

    def test_miss_beside(self):
        hit = ray_cast(point(1, 1, -1), FAR)
        assert hit.status is HitStatus.MISS
        assert not hit
        assert math.isclose(hit.t, 5.0)

    def test_behind_origin_is_a_miss(self):
        hit = ray_cast(point(0, 0, -1), FAR, origin=point(0, 0, -10))
        assert hit.status is HitStatus.MISS
        assert hit.t < 0

    def test_parallel_is_degenerate(self):
        hit = ray_cast(point(1, 0, 0), FAR)
        assert hit.status is HitStatus.DEGENERATE
        assert not hit
        with pytest.raises(DegenerateGeometryError):
            ray_cast(point(1, 0, 0), FAR, strict=True)

    def test_zero_area_is_degenerate(self):
        tri = [point(0, 0, -5), point(1, 0, -5), point(2, 0, -5)]
        assert ray_cast(point(0, 0, -1), tri).status is HitStatus.DEGENERATE
        with pytest.raises(ValueError):
            ray_cast(point(0, 0, -1), tri, strict=True)

    def test_back_side_hits(self):
        # winding only fixes the plane, a ray from behind still hits
        hit = ray_cast(point(0, 0, 1), FAR, origin=point(0, 0, -10))
        assert hit.status is HitStatus.HIT
        assert math.isclose(hit.t, 5.0)


class TestCastMesh:
    def test_nearest_face_wins(self):
        v = Voxel(1.0, position=(0, 0, -5))
        origin = point(0, 0, 0)
        found = cast_mesh(ray_through(origin, point(0.1, 0.2, -5)),
                          v.vertices, v.indices, v.transform, origin=origin)
        assert found is not None
        triangle, hit = found
        # upper-left half of the front face
        assert triangle == 1
        assert math.isclose(hit.t, 0.9)
        assert vclose(hit.point, point(0.09, 0.18, -4.5))

    def test_other_half(self):
        v = Voxel(1.0, position=(0, 0, -5))
        triangle, _ = cast_mesh(point(0.2, 0.1, -5), v.vertices, v.indices, v.transform)
        assert triangle == 0

    def test_from_behind(self):
        v = Voxel(1.0, position=(0, 0, -5))
        origin = point(0, 0, -10)
        triangle, hit = cast_mesh(ray_through(origin, point(0.1, 0.2, -5)),
                                  v.vertices, v.indices, v.transform, origin=origin)
        assert triangle // 2 == 2
        assert math.isclose(hit.t, 0.9)

    def test_miss(self):
        v = Voxel(1.0, position=(0, 0, -5))
        assert cast_mesh(point(3, 0, -5), v.vertices, v.indices, v.transform) is None

    def test_diagonal_misses_both_halves(self):
        q = Quad([1, 1], position=(0, 0, -5))
        assert cast_mesh(point(0, 0, -1), q.vertices, q.triangles, q.transform) is None
        triangle, hit = cast_mesh(point(0.1, 0.2, -5), q.vertices, q.triangles, q.transform)
        assert triangle == 1
        assert math.isclose(hit.t, 1.0)


class TestProjectedTriangles:
    """3D triangles projected into their own plane basis"""

    @staticmethod
    def _triangles(count, seed=7):
        rng = random.Random(seed)
        made = 0
        while made < count:
            tri = [point(*(rng.uniform(-10, 10) for _ in range(3))) for _ in range(3)]
            # skip slivers
            if mag(plane_basis(tri).normal) < 1e-1:
                continue
            made += 1
            yield tri

    def test_vertices_outside_centroid_inside(self):
        for tri in self._triangles(2000):
            basis = plane_basis(tri)
            flat = [to_plane(v, basis) for v in tri]
            for v in flat:
                assert not point_in_triangle(v, flat)
            centroid = scale3(add(add(tri[0], tri[1]), tri[2]), 1.0 / 3.0)
            assert point_in_triangle(to_plane(centroid, basis), flat)

    def test_cast_at_centroid_hits(self):
        origin = point(0, 0, 30)
        for tri in self._triangles(200, seed=11):
            basis = plane_basis(tri)
            # origin at least one unit off the plane
            if abs(dot(sub(origin, tri[0]), basis.normal)) < mag(basis.normal):
                continue
            centroid = scale3(add(add(tri[0], tri[1]), tri[2]), 1.0 / 3.0)
            hit = ray_cast(ray_through(origin, centroid), tri, origin=origin)
            assert hit.status is HitStatus.HIT
            assert math.isclose(hit.t, 1.0, rel_tol=1e-6)


class TestNumpyBuffers:
    def test_float32_triangle(self):
        tri = np.asarray([p[:3] for p in FAR], dtype=np.float32)
        b = plane_basis(tri)
        assert vclose(b.origin, point(-1, -1, -5))
        hit = ray_cast(point(0, 0, -1), tri)
        assert hit.status is HitStatus.HIT
        assert math.isclose(hit.t, 5.0)

    def test_float32_mesh(self):
        v = Voxel(1.0, position=(0, 0, -5))
        positions = np.asarray(v.vertices, dtype=np.float32)
        found = cast_mesh(point(0.1, 0.2, -5), positions, v.indices, v.transform)
        assert found is not None
        assert found[0] == 1
        assert math.isclose(found[1].t, 0.9, rel_tol=1e-6)
