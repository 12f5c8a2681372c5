## Quad: the smallest composable piece of quadvox geometry
## Copyright (c) 2020 quadvox contributors
## All rights reserved
## See licensing terms in the LICENSE section of geom.py

"""A flat, four-vertex, two-triangle patch.

Attribute data is kept as parallel flat lists, one per attribute, in
the same layout it is uploaded in: ``vertices`` (3 floats per vertex),
``normals`` (3), ``colors`` (4, RGBA in [0,1]) and ``texcoords`` (2).
The index list is always ``[0,1,2, 2,3,0]``, counter-clockwise when
viewed from the side the normals point to::

    3 <-- 2
    |     ^
    v     |
    0 --> 1

A quad can be drawn on its own (it is a ``Drawable``) or merged into
a larger mesh, see ``quadvox.voxel``.
"""

from __future__ import annotations

import logging
from copy import deepcopy

import numpy as np

from quadvox.drawable import Drawable
from quadvox.geom import isgoodnum, unflatten3
from quadvox.xform import Matrix, Translation, isrigid

logger = logging.getLogger(__name__)

QUAD_TRIANGLES = [0, 1, 2, 2, 3, 0]

DEFAULT_COLOR = [1.0, 0.0, 0.0, 1.0]


def _checkcolor(rgba):
    if (not isinstance(rgba, (list, tuple)) or len(rgba) not in (3, 4) or
            not all(isgoodnum(c) and 0.0 <= c <= 1.0 for c in rgba)):
        raise ValueError('bad color: {}'.format(rgba))
    if len(rgba) == 3:
        return [float(rgba[0]), float(rgba[1]), float(rgba[2]), 1.0]
    return [float(c) for c in rgba]


def _transform_flat(data, transform):
    ## every triple is treated as a homogeneous point with w=1; w of
    ## the result is dropped, not divided out
    out = []
    for p in unflatten3(data):
        q = transform.mul(p)
        out.extend((q[0], q[1], q[2]))
    return out


class Quad(Drawable):
    """Rectangle in its local XY plane, centred at the origin.

    ``size`` holds full edge lengths; each is halved so the rectangle
    spans ``[-size/2, size/2]``.  ``offset`` is added to every vertex.
    ``position`` only matters when the quad is drawn standalone: it is
    the translation of its world transform.
    """

    def __init__(self, size, offset=(0, 0, 0), position=(0, 0, 0)):
        sx = size[0] / 2.0
        sy = size[1] / 2.0
        ox, oy, oz = offset[0], offset[1], offset[2]
        self.vertices = [
            -sx + ox, -sy + oy, oz,
             sx + ox, -sy + oy, oz,
             sx + ox,  sy + oy, oz,
            -sx + ox,  sy + oy, oz,
        ]
        self.triangles = list(QUAD_TRIANGLES)
        self.colors = DEFAULT_COLOR * 4
        # xy quad, so all the normals are in z
        self.normals = [0.0, 0.0, 1.0] * 4
        self.texcoords = [
            0.0, 0.0,
            1.0, 0.0,
            1.0, 1.0,
            0.0, 1.0,
        ]
        self.offset = [float(ox), float(oy), float(oz)]
        self.position = [float(position[0]), float(position[1]), float(position[2])]

    def __repr__(self):
        return 'Quad(vertices={}, normals={})'.format(self.vertices, self.normals)

    def adjust(self, transform: Matrix) -> None:
        """Bake ``transform`` into the raw vertex and normal data, in place.

        Normals go through the same ``w=1`` point transform as the
        positions and are not re-normalized.  That is only a true normal
        transform for rotations; a translation moves the normals too.
        Use ``adjust_exact`` when the transform scales.
        """
        if not isrigid(transform):
            logger.warning('adjust() with a non-rigid transform; normals are approximate')
        self.vertices = _transform_flat(self.vertices, transform)
        self.normals = _transform_flat(self.normals, transform)

    def adjusted(self, transform: Matrix) -> 'Quad':
        """Return a transformed copy, leaving this quad untouched."""
        q = deepcopy(self)
        q.adjust(transform)
        return q

    def adjust_exact(self, transform: Matrix) -> None:
        """Bake ``transform`` into positions, and its inverse-transpose
        into normals, which are then re-normalized.  In place."""
        self.vertices = _transform_flat(self.vertices, transform)
        normals = np.asarray(self.normals, dtype=float).reshape(-1, 3)
        normals = normals @ transform.normal_matrix().T
        lengths = np.linalg.norm(normals, axis=1, keepdims=True)
        self.normals = (normals / lengths).ravel().tolist()

    def set_color(self, rgba) -> None:
        self.colors = _checkcolor(rgba) * 4

    @property
    def normal_points(self):
        """``normal + position`` per component, for normal visualization"""
        return [n + v for n, v in zip(self.normals, self.vertices)]

    def corners(self):
        """The four vertices as points."""
        return unflatten3(self.vertices)

    ## Drawable interface

    def attribute_buffers(self):
        return {
            'position': self.vertices,
            'normal': self.normals,
            'normal_point': self.normal_points,
            'color': self.colors,
            'texcoord': self.texcoords,
        }

    @property
    def index_buffer(self):
        return self.triangles

    @property
    def transform(self):
        return Translation(self.position)


__all__ = ['DEFAULT_COLOR', 'QUAD_TRIANGLES', 'Quad']
