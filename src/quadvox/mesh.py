"""Read-only triangle mesh views consumed by the visibility and ray tools."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple

from quadvox.geom import point
from quadvox.xform import Matrix

Vec = List[float]
TriIndex = Tuple[int, int, int]


@dataclass
class Mesh:
    """Flat positions (stride 3), flat triangle indices (stride 3) and a
    world transform.

    The mesh only borrows its lists; nothing in quadvox that accepts a
    ``Mesh`` writes to them.
    """

    positions: Sequence[float]
    indices: Sequence[int]
    transform: Matrix = field(default_factory=Matrix)

    @property
    def vertex_count(self) -> int:
        return len(self.positions) // 3

    @property
    def triangle_count(self) -> int:
        return len(self.indices) // 3


def to_world(positions: Sequence[float], index: int, transform: Optional[Matrix]) -> Vec:
    """Return vertex ``index`` of a flat position list as a world-space point."""

    base = index * 3
    # point() rejects numpy scalars
    p = point(float(positions[base]), float(positions[base + 1]), float(positions[base + 2]))
    if transform is None:
        return p
    return transform.mul(p)


def world_triangles(
    positions: Sequence[float],
    indices: Sequence[int],
    transform: Optional[Matrix] = None,
) -> Iterator[Tuple[TriIndex, Vec, Vec, Vec]]:
    """Yield ``((i0, i1, i2), v0, v1, v2)`` for each consecutive index triple.

    Vertices are transformed into world space as homogeneous points. A
    trailing partial triple is ignored.
    """

    for j in range(0, len(indices) - 2, 3):
        i0, i1, i2 = indices[j], indices[j + 1], indices[j + 2]
        yield (
            (i0, i1, i2),
            to_world(positions, i0, transform),
            to_world(positions, i1, transform),
            to_world(positions, i2, transform),
        )


## closed cube with shared corners: 8 vertices, 12 CCW triangles seen
## from outside.  Unlike a Voxel, faces share vertices, which is what
## silhouette detection needs.
_CUBE_CORNERS = [
    -0.5, -0.5,  0.5,  # front face
     0.5, -0.5,  0.5,
     0.5,  0.5,  0.5,
    -0.5,  0.5,  0.5,

     0.5, -0.5, -0.5,  # back face
    -0.5, -0.5, -0.5,
    -0.5,  0.5, -0.5,
     0.5,  0.5, -0.5,
]

_CUBE_INDICES = [
    0, 1, 2, 2, 3, 0,  # front
    4, 5, 6, 6, 7, 4,  # back
    1, 4, 7, 7, 2, 1,  # right
    5, 0, 3, 3, 6, 5,  # left
    3, 2, 7, 7, 6, 3,  # top
    5, 4, 1, 1, 0, 5,  # bottom
]


def shared_cube(side: float = 1.0, transform: Optional[Matrix] = None) -> Mesh:
    """Return a closed cube of edge ``side`` centred at the origin."""

    positions = [c * side for c in _CUBE_CORNERS]
    return Mesh(
        positions=positions,
        indices=list(_CUBE_INDICES),
        transform=transform if transform is not None else Matrix(),
    )


__all__ = [
    "Mesh",
    "shared_cube",
    "to_world",
    "world_triangles",
]
