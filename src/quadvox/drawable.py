## base class of drawable for quadvox
## Copyright (c) 2020 quadvox contributors
## All rights reserved
## See licensing terms in the LICENSE section of geom.py

"""Drawable capability interface and the pipeline boundary.

A ``Drawable`` knows its own attribute and index buffers and its world
transform.  It never talks to a graphics API directly: every boundary
call goes through an explicit ``Pipeline`` object that the caller
passes in.  ``attach`` uploads buffers once; ``render`` uploads the
transform and issues one indexed draw.

``RecordingPipeline`` is an in-memory pipeline that keeps the uploaded
buffers as numpy arrays and logs every call.  It is what the ``edges``
and ``pick`` command line tools and the tests run against.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Sequence, Tuple

import numpy as np

from quadvox.xform import Matrix

logger = logging.getLogger(__name__)

## floats per vertex for every attribute a drawable may upload
ATTRIBUTE_STRIDES = {
    'position': 3,
    'normal': 3,
    'normal_point': 3,
    'color': 4,
    'texcoord': 2,
}

## indices are uploaded as unsigned shorts
MAX_INDEX = 65535


class Pipeline(ABC):
    """Boundary between quadvox geometry and a rendering backend."""

    @abstractmethod
    def upload_attribute(self, owner: Any, name: str, data: Sequence[float], stride: int) -> None:
        """Register a named per-vertex float buffer for ``owner``."""

    @abstractmethod
    def upload_indices(self, owner: Any, indices: Sequence[int]) -> None:
        """Register the triangle index buffer for ``owner``."""

    @abstractmethod
    def set_projection(self, matrix: Matrix) -> None:
        """Upload the projection matrix; once per frame."""

    @abstractmethod
    def set_transform(self, matrix: Matrix) -> None:
        """Upload the model transform for the next draw."""

    @abstractmethod
    def draw(self, owner: Any, count: int) -> None:
        """Draw ``count`` indices of ``owner``'s buffers as triangles."""

    def release(self) -> None:
        """Free any backend resources.  The default holds none."""


def check_attribute(name: str, data: Sequence[float], stride: int) -> None:
    """Raise ``ValueError`` for an unknown attribute or a ragged buffer."""

    expected = ATTRIBUTE_STRIDES.get(name)
    if expected is None:
        raise ValueError('unknown attribute: {}'.format(name))
    if stride != expected:
        raise ValueError('bad stride {} for attribute {}, expected {}'.format(stride, name, expected))
    if len(data) % stride != 0:
        raise ValueError('attribute {} has {} floats, not a multiple of {}'.format(name, len(data), stride))


def check_indices(indices: Sequence[int], vertex_count: int) -> None:
    if len(indices) % 3 != 0:
        raise ValueError('index buffer length {} is not a multiple of 3'.format(len(indices)))
    for i in indices:
        if i < 0 or i >= vertex_count or i > MAX_INDEX:
            raise ValueError('index {} out of range for {} vertices'.format(i, vertex_count))


class Drawable(ABC):
    """Base class for quadvox drawables"""

    @abstractmethod
    def attribute_buffers(self) -> Dict[str, List[float]]:
        """Map attribute name to its flat float list."""

    @property
    @abstractmethod
    def index_buffer(self) -> List[int]:
        """Flat triangle index list."""

    @property
    @abstractmethod
    def transform(self) -> Matrix:
        """Current world transform."""

    @property
    def vertex_count(self) -> int:
        return len(self.attribute_buffers()['position']) // 3

    def attach(self, pipeline: Pipeline) -> None:
        """Upload this drawable's buffers.  Call once, not per frame."""

        for name, data in self.attribute_buffers().items():
            pipeline.upload_attribute(self, name, data, ATTRIBUTE_STRIDES[name])
        pipeline.upload_indices(self, self.index_buffer)

    def render(self, pipeline: Pipeline) -> None:
        pipeline.set_transform(self.transform)
        pipeline.draw(self, len(self.index_buffer))


class RecordingPipeline(Pipeline):
    """In-memory pipeline: keeps uploads as numpy arrays, logs calls."""

    def __init__(self):
        self.attributes: Dict[Any, Dict[str, np.ndarray]] = {}
        self.indices: Dict[Any, np.ndarray] = {}
        self.projection: Matrix | None = None
        self.transform: Matrix | None = None
        self.calls: List[Tuple] = []

    def upload_attribute(self, owner, name, data, stride):
        check_attribute(name, data, stride)
        self.attributes.setdefault(owner, {})[name] = np.asarray(data, dtype=np.float32)
        self.calls.append(('upload_attribute', owner, name, stride))
        logger.debug('uploaded %s: %d floats, stride %d', name, len(data), stride)

    def upload_indices(self, owner, indices):
        attrs = self.attributes.get(owner, {})
        if 'position' not in attrs:
            raise ValueError('indices uploaded before positions')
        check_indices(indices, len(attrs['position']) // 3)
        self.indices[owner] = np.asarray(indices, dtype=np.uint16)
        self.calls.append(('upload_indices', owner, len(indices)))
        logger.debug('uploaded %d indices', len(indices))

    def set_projection(self, matrix):
        self.projection = Matrix(matrix)
        self.calls.append(('set_projection',))

    def set_transform(self, matrix):
        # copy: voxels keep mutating their own transform
        self.transform = Matrix(matrix)
        self.calls.append(('set_transform', self.transform))

    def draw(self, owner, count):
        if owner not in self.indices:
            raise ValueError('draw called for a drawable that was never attached')
        if count > len(self.indices[owner]):
            raise ValueError('draw count {} exceeds {} uploaded indices'.format(count, len(self.indices[owner])))
        self.calls.append(('draw', owner, count))

    def release(self):
        self.attributes.clear()
        self.indices.clear()
        self.calls.append(('release',))

    def count(self, op: str) -> int:
        """How many times ``op`` was called."""
        return sum(1 for call in self.calls if call[0] == op)


__all__ = [
    'ATTRIBUTE_STRIDES',
    'Drawable',
    'Pipeline',
    'RecordingPipeline',
    'check_attribute',
    'check_indices',
]
