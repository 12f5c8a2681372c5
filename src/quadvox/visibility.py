"""Facing classification and silhouette vertices for triangle meshes.

Every function here is a brute-force pass over all triangles, O(n) in
the triangle count with no spatial structure.  That is fine for
voxel-sized meshes and will not scale to large ones.

Triangles are assumed to be wound counter-clockwise when seen from
outside.  Clockwise input is not detected; it silently inverts the
classification.
"""

from __future__ import annotations

from typing import Callable, List, Optional, Sequence, Set, Tuple

from quadvox.geom import cross, dot, sub
from quadvox.mesh import Mesh, world_triangles
from quadvox.xform import Matrix

Condition = Callable[[float], bool]


def facing_toward(d: float) -> bool:
    return d > 0


def facing_away(d: float) -> bool:
    return d <= 0


def _facing_dots(viewpoint, positions, indices, transform):
    for tri, v0, v1, v2 in world_triangles(positions, indices, transform):
        normal = cross(sub(v1, v0), sub(v2, v0))
        to_view = sub(viewpoint, v0)
        yield tri, dot(normal, to_view)


def classify_facing(
    condition: Condition,
    viewpoint: Sequence[float],
    positions: Sequence[float],
    indices: Sequence[int],
    transform: Optional[Matrix] = None,
) -> Set[int]:
    """Return the vertex indices of every triangle whose facing dot
    product satisfies ``condition``.

    The dot product is ``((v1-v0) x (v2-v0)) . (viewpoint - v0)`` with
    the vertices in world space.  Pass ``facing_toward`` for triangles
    facing the viewpoint and ``facing_away`` for the rest.
    """

    result: Set[int] = set()
    for tri, d in _facing_dots(viewpoint, positions, indices, transform):
        if condition(d):
            result.update(tri)
    return result


def partition_triangles(
    viewpoint: Sequence[float],
    positions: Sequence[float],
    indices: Sequence[int],
    transform: Optional[Matrix] = None,
) -> Tuple[List[int], List[int]]:
    """Split triangle ordinals into ``(toward, away)``.  A dot product of
    exactly zero counts as away."""

    toward: List[int] = []
    away: List[int] = []
    for n, (_, d) in enumerate(_facing_dots(viewpoint, positions, indices, transform)):
        (toward if facing_toward(d) else away).append(n)
    return toward, away


def find_edges(
    viewpoint: Sequence[float],
    positions: Sequence[float],
    indices: Sequence[int],
    transform: Optional[Matrix] = None,
) -> Set[int]:
    """Silhouette vertices: those used by at least one triangle facing
    the viewpoint and at least one facing away.

    Only meaningful for meshes whose faces share vertices; a voxel's
    faces do not, so its silhouette set is always empty.
    """

    toward = classify_facing(facing_toward, viewpoint, positions, indices, transform)
    away = classify_facing(facing_away, viewpoint, positions, indices, transform)
    return toward & away


def mesh_edges(mesh: Mesh, viewpoint: Sequence[float]) -> Set[int]:
    """``find_edges`` for a ``Mesh``."""
    return find_edges(viewpoint, mesh.positions, mesh.indices, mesh.transform)


__all__ = [
    'classify_facing',
    'facing_away',
    'facing_toward',
    'find_edges',
    'mesh_edges',
    'partition_triangles',
]
