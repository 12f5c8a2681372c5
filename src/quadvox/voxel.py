## Voxel: six quads merged into one rigid cube mesh
## Copyright (c) 2020 quadvox contributors
## All rights reserved
## See licensing terms in the LICENSE section of geom.py

"""Voxel composite.

A voxel is built from six ``Quad`` faces.  Each face is offset by half
the edge length along its local normal and rotated into place, then
all six faces' attribute lists are concatenated into one set of merged
buffers.  Faces keep their own vertices (flat normals), so a voxel has
24 vertices and 36 indices; face ``i``'s indices are shifted by
``i*4`` so they address the merged vertex list.

The merged buffers are built once.  After construction only the
shared transform changes, via ``step()``.
"""

from __future__ import annotations

import logging

from quadvox.drawable import Drawable
from quadvox.mesh import Mesh
from quadvox.quad import Quad
from quadvox.xform import Matrix, Rotation, Translation

logger = logging.getLogger(__name__)

XAXIS = [1, 0, 0]
YAXIS = [0, 1, 0]

FACE_NAMES = ['front', 'right', 'back', 'left', 'top', 'bottom']

VERTICES_PER_FACE = 4
TRIANGLES_PER_FACE = 2

## rotation taking the local +z face onto each cube face, in
## FACE_NAMES order
FACE_ROTATIONS = [
    Matrix(),
    Rotation(YAXIS, 90.0),
    Rotation(YAXIS, 180.0),
    Rotation(YAXIS, 270.0),
    Rotation(XAXIS, -90.0),
    Rotation(XAXIS, 90.0),
]

DEFAULT_STEP_X = 2.0
DEFAULT_STEP_Y = 3.0


class Voxel(Drawable):
    """Cube of edge ``side`` centred on ``position``."""

    def __init__(self, side, position=(0, 0, 0), colors=None,
                 step_x=DEFAULT_STEP_X, step_y=DEFAULT_STEP_Y):
        self.side = side
        self.position = [float(position[0]), float(position[1]), float(position[2])]
        self.step_x = step_x
        self.step_y = step_y

        self.faces = []
        for rotation in FACE_ROTATIONS:
            face = Quad([side, side], offset=(0, 0, side / 2.0))
            face.adjust(rotation)
            self.faces.append(face)

        if colors is not None:
            self._color_faces(colors)

        self.vertices = []
        self.indices = []
        self.colors = []
        self.normals = []
        self.normal_points = []
        self.texcoords = []
        for idx, face in enumerate(self.faces):
            self.vertices.extend(face.vertices)
            self.colors.extend(face.colors)
            self.texcoords.extend(face.texcoords)
            self.normals.extend(face.normals)
            self.normal_points.extend(face.normal_points)
            self.indices.extend(i + idx * VERTICES_PER_FACE for i in face.triangles)

        self._transform = Translation(self.position)
        logger.debug('voxel side %s merged: %d vertices, %d indices',
                     side, len(self.vertices) // 3, len(self.indices))

    def _color_faces(self, colors):
        # one RGBA for every face, or one per face
        if len(colors) == len(self.faces) and isinstance(colors[0], (list, tuple)):
            for face, rgba in zip(self.faces, colors):
                face.set_color(rgba)
        else:
            for face in self.faces:
                face.set_color(colors)

    def step(self):
        """Compose one incremental rotation into the shared transform."""
        self._transform = (self._transform
                           .mul(Rotation(XAXIS, self.step_x))
                           .mul(Rotation(YAXIS, self.step_y)))

    def face_vertices(self, name):
        """Merged-buffer vertex indices belonging to face ``name``."""
        i = FACE_NAMES.index(name)
        return list(range(i * VERTICES_PER_FACE, (i + 1) * VERTICES_PER_FACE))

    def mesh(self) -> Mesh:
        return Mesh(positions=self.vertices, indices=self.indices,
                    transform=self._transform)

    ## Drawable interface: merged buffers only, faces are never
    ## attached themselves

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
        return self.indices

    @property
    def transform(self):
        return self._transform

    @transform.setter
    def transform(self, m):
        self._transform = Matrix(m)


__all__ = ['FACE_NAMES', 'FACE_ROTATIONS', 'Voxel']
