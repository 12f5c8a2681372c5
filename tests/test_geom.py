import math

import pytest
from quadvox.geom import *
## unit tests for quadvox geom.py

class TestPoint:
    """unit tests for quadvox point functions"""

    def test_create(self):
        a = point(5,0)
        b = point(0,5,-2)
        c = point([1.0,2.0,3.0])
        assert a == [5,0,0,1]
        assert b == [0,5,-2,1]
        assert c == [1.0,2.0,3.0,1]

    def test_bad_w(self):
        with pytest.raises(ValueError):
            point(1,2,3,-1)

    def test_isvect(self):
        assert isvect([0,2,2,1])
        assert not isvect([1,2])
        assert not isvect([True,0,0,1])

class TestOperations:
    def test_arithmetic(self):
        a = point(1,2,3)
        b = point(4,5,6)
        assert add(a,b) == [5,7,9,1.0]
        assert sub(b,a) == [3,3,3,1.0]
        assert scale3(a,2) == [2,4,6,1.0]
        assert dot(a,b) == 32
        assert cross(point(1,0,0),point(0,1,0)) == [0,0,1,1.0]

    def test_normalize(self):
        n = normalize(point(3,0,4))
        assert vclose(n,point(0.6,0,0.8))
        assert close(mag(n),1.0)

class TestProjection:
    def test_project(self):
        a = point(2,3,0)
        b = point(5,0,0)
        assert vclose(project(a,b),point(2,0,0))
        assert vclose(reject(a,b),point(0,3,0))

    def test_project_scalar_is_signed(self):
        assert close(project_scalar(point(-2,3,0),point(1,0,0)),-2.0)
        assert close(project_scalar(point(2,3,0),point(4,0,0)),2.0)

    def test_projection_parts_are_orthogonal(self):
        a = point(1.5,-2.0,0.7)
        b = point(0.3,0.9,-1.1)
        assert close(dot(reject(a,b),b),0.0)
        assert vclose(add(project(a,b),reject(a,b)),a)

    def test_zero_length_reference_is_silent(self):
        zero = point(0,0,0)
        assert not isfinite3(project(point(1,2,3),zero))
        assert math.isnan(project_scalar(point(1,2,3),zero))
        assert not isfinite3(normalize(zero))

    def test_fdiv(self):
        assert fdiv(1.0,0) == math.inf
        assert fdiv(-1.0,0) == -math.inf
        assert math.isnan(fdiv(0.0,0))
        assert fdiv(6,3) == 2

class TestBuffers:
    def test_unflatten(self):
        pts = unflatten3([0,1,2, 3,4,5, 6])
        # a trailing partial triple is dropped
        assert pts == [[0,1,2,1.0],[3,4,5,1.0]]

    def test_vstr(self):
        assert vstr(point(1,2,3)) == '[1, 2, 3]'
        assert vstr('x') == 'x'
