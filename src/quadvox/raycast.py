"""Ray casting against triangles by projection into the triangle's plane.

A triangle ``(t0, t1, t2)`` defines a plane with an orthonormal in-plane
basis: ``base0`` along ``t1 - t0`` and ``base1`` along the rejection of
``t2 - t0`` from ``t1 - t0``.  The plane normal is
``(t1 - t0) x (t2 - t0)``, so the triangle is assumed to be wound
counter-clockwise.

``ray_plane_intersect`` and ``point_in_triangle`` are the unchecked
building blocks: degenerate input (a ray parallel to the plane, a
zero-area triangle) comes back as ``nan``/``inf`` rather than an
exception.  ``ray_cast`` wraps them and reports degenerate geometry
explicitly.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from math import inf, isfinite, nan
from typing import List, Optional, Sequence, Tuple

from quadvox.geom import (
    add,
    cross,
    fdiv,
    isfinite3,
    normalize,
    point,
    project_scalar,
    reject,
    scale3,
    sub,
)
from quadvox.mesh import world_triangles
from quadvox.xform import Matrix

Vec = List[float]

ORIGIN = [0.0, 0.0, 0.0, 1.0]


class DegenerateGeometryError(ValueError):
    """A ray is parallel to a triangle's plane, or the triangle has no area."""


class HitStatus(Enum):
    HIT = 'hit'
    MISS = 'miss'
    DEGENERATE = 'degenerate'


@dataclass(frozen=True)
class PlaneBasis:
    origin: Vec
    base0: Vec
    base1: Vec
    normal: Vec

    @property
    def finite(self) -> bool:
        return (isfinite3(self.base0) and isfinite3(self.base1)
                and isfinite3(self.normal))


@dataclass(frozen=True)
class RayHit:
    """Outcome of ``ray_cast``.

    ``point`` is the intersection with the triangle's plane, ``coords``
    the same point in the plane basis and ``t`` the ray parameter, so
    that ``point == origin + t * ray``.  For a degenerate cast all three
    may be non-finite.
    """

    status: HitStatus
    point: Optional[Vec] = None
    coords: Optional[Vec] = None
    t: float = nan

    def __bool__(self) -> bool:
        return self.status is HitStatus.HIT


def plane_basis(triangle: Sequence[Sequence[float]]) -> PlaneBasis:
    """Orthonormal in-plane basis and (unnormalized) normal of a triangle."""

    # point() rejects numpy scalars
    t0 = point([float(c) for c in triangle[0][:3]])
    v1 = sub(triangle[1], t0)
    v2 = sub(triangle[2], t0)

    base0 = normalize(v1)
    base1 = normalize(reject(v2, v1))
    normal = cross(v1, v2)
    return PlaneBasis(origin=t0, base0=base0, base1=base1, normal=normal)


def _ray_parameter(ray, basis, origin):
    # signed distances to the plane along its normal, for the plane
    # itself and for one unit of ray
    origin_to_plane = project_scalar(sub(basis.origin, origin), basis.normal)
    ray_to_plane = project_scalar(ray, basis.normal)
    return fdiv(origin_to_plane, ray_to_plane)


def ray_plane_intersect(
    ray: Sequence[float],
    triangle: Sequence[Sequence[float]],
    origin: Optional[Sequence[float]] = None,
) -> Vec:
    """Where a ray meets the plane of ``triangle``.

    The ray starts at ``origin`` (the coordinate origin by default) and
    points along ``ray``.  The result is the ray scaled by the ratio of
    the plane's distance to the ray's own projection onto the normal,
    so it can lie behind the origin.  A ray parallel to the plane gives
    non-finite components.
    """

    origin = ORIGIN if origin is None else origin
    t = _ray_parameter(ray, plane_basis(triangle), origin)
    return add(origin, scale3(ray, t))


def to_plane(p: Sequence[float], basis: PlaneBasis) -> Vec:
    """Coordinates ``[u, v]`` of a point in ``basis``, measured from the
    basis origin.  The out-of-plane component is dropped."""

    in_plane = reject(sub(p, basis.origin), basis.normal)
    return [project_scalar(in_plane, basis.base0),
            project_scalar(in_plane, basis.base1)]


def point_in_triangle(p: Sequence[float], triangle: Sequence[Sequence[float]]) -> bool:
    """Is a 2D point strictly inside a 2D triangle?

    Solves ``p = t0 + a*(t1-t0) + b*(t2-t0)``; inside means ``a > 0``,
    ``b > 0`` and ``a + b < 1``.  Points on an edge or a corner are
    outside, and a degenerate triangle contains nothing.
    See http://mathworld.wolfram.com/TriangleInterior.html
    """

    v0x = triangle[0][0]
    v0y = triangle[0][1]

    v1x = triangle[1][0] - v0x
    v1y = triangle[1][1] - v0y

    v2x = triangle[2][0] - v0x
    v2y = triangle[2][1] - v0y

    vx = p[0] - v0x
    vy = p[1] - v0y

    det12 = v1x*v2y - v2x*v1y

    a = fdiv(vx*v2y - v2x*vy, det12)
    b = -fdiv(vx*v1y - v1x*vy, det12)

    return (a + b) < 1 and a > 0 and b > 0


def ray_cast(
    ray: Sequence[float],
    triangle: Sequence[Sequence[float]],
    origin: Optional[Sequence[float]] = None,
    strict: bool = False,
) -> RayHit:
    """Cast a ray at a triangle.

    Intersections behind ``origin`` (``t < 0``) are misses.  Degenerate
    geometry gives ``HitStatus.DEGENERATE``, or raises
    ``DegenerateGeometryError`` when ``strict`` is set.
    """

    origin = ORIGIN if origin is None else origin
    basis = plane_basis(triangle)
    t = _ray_parameter(ray, basis, origin)

    if not (basis.finite and isfinite(t)):
        if strict:
            raise DegenerateGeometryError(
                'no unique intersection: ray {} against triangle {}'.format(list(ray[:3]), [list(v[:3]) for v in triangle]))
        return RayHit(HitStatus.DEGENERATE, t=t)

    hit = add(origin, scale3(ray, t))
    coords = to_plane(hit, basis)
    if t < 0:
        return RayHit(HitStatus.MISS, point=hit, coords=coords, t=t)

    flat = [to_plane(v, basis) for v in triangle]
    status = HitStatus.HIT if point_in_triangle(coords, flat) else HitStatus.MISS
    return RayHit(status, point=hit, coords=coords, t=t)


def cast_mesh(
    ray: Sequence[float],
    positions: Sequence[float],
    indices: Sequence[int],
    transform: Optional[Matrix] = None,
    origin: Optional[Sequence[float]] = None,
) -> Optional[Tuple[int, RayHit]]:
    """Nearest hit over every triangle of a mesh, by brute force.

    Returns ``(triangle_ordinal, hit)`` or ``None``.  Triangles the ray
    runs parallel to are skipped.  A ray through an edge shared by two
    triangles, such as a quad diagonal, misses both.
    """

    best: Optional[Tuple[int, RayHit]] = None
    best_t = inf
    for n, (_, v0, v1, v2) in enumerate(world_triangles(positions, indices, transform)):
        hit = ray_cast(ray, (v0, v1, v2), origin=origin)
        if hit and hit.t < best_t:
            best = (n, hit)
            best_t = hit.t
    return best


def ray_through(origin: Sequence[float], target: Sequence[float]) -> Vec:
    """Direction of the ray from ``origin`` through ``target``."""
    return sub(target, origin)


__all__ = [
    'DegenerateGeometryError',
    'HitStatus',
    'PlaneBasis',
    'RayHit',
    'cast_mesh',
    'plane_basis',
    'point_in_triangle',
    'ray_cast',
    'ray_plane_intersect',
    'ray_through',
    'to_plane',
]
