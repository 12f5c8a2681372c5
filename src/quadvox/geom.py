## foundational vector operations for quadvox
## Copyright (c) 2020 quadvox contributors
## All rights reserved

# Permission is hereby granted, free of charge, to any person
# obtaining a copy of this software and associated documentation files
# (the "Software"), to deal in the Software without restriction,
# including without limitation the rights to use, copy, modify, merge,
# publish, distribute, sublicense, and/or sell copies of the Software,
# and to permit persons to whom the Software is furnished to do so,
# subject to the following conditions:
#
# The above copyright notice and this permission notice shall be
# included in all copies or substantial portions of the Software.
#
# THE SOFTWARE IS PROVIDED "AS IS", WITHOUT WARRANTY OF ANY KIND,
# EXPRESS OR IMPLIED, INCLUDING BUT NOT LIMITED TO THE WARRANTIES OF
# MERCHANTABILITY, FITNESS FOR A PARTICULAR PURPOSE AND
# NONINFRINGEMENT. IN NO EVENT SHALL THE AUTHORS OR COPYRIGHT HOLDERS
# BE LIABLE FOR ANY CLAIM, DAMAGES OR OTHER LIABILITY, WHETHER IN AN
# ACTION OF CONTRACT, TORT OR OTHERWISE, ARISING FROM, OUT OF OR IN
# CONNECTION WITH THE SOFTWARE OR THE USE OR OTHER DEALINGS IN THE
# SOFTWARE.

"""foundational vector operations for **quadvox**

vectors
=======

vectors are defined as a list of four numbers, i.e. ``[x,y,z,w]``.
When a vector is interpreted as a three-dimensional coordinate, the
``w`` coordinate is a normalization factor, which allows the general
use of 4x4 transformation matrices for affine transforms (see
``quadvox.xform``).

The convenience function ``vect()`` makes a vector out of just about
any plausible set of arguments.  Unspecified ``w`` values are set to
1, and unspecified ``z`` values are set to 0.  ``point()`` does the
same but insists on ``w > 0``.

Most operations here are R^3 operations and ignore ``w``.

degenerate input
================

The projection helpers (``project``, ``project_scalar``, ``reject``)
and ``normalize`` do not raise on a zero-length reference vector.
They quietly return ``nan`` components instead, so that degenerate
geometry propagates as non-finite numbers.  Use ``isfinite3`` to check.
"""

from math import *

## constants
epsilon=0.000005
pi2 = 2.0*pi
nan = float('nan')

## operations on scalars
## -----------------------

## booleans are ints in python, but we never want True to be a
## coordinate
def isgoodnum(n):
    """ determine if an argument is actually a scalar number, and not boolean
    """
    return (not isinstance(n,bool)) and isinstance(n,(int,float))

def close(a,b):
    """ are two scalars the same within epsilon
    """
    return abs(a-b) < epsilon

## division that follows IEEE rules instead of raising ZeroDivisionError
def fdiv(a,b):
    if b == 0:
        if a == 0 or isnan(a):
            return nan
        return copysign(inf,a)
    return a/b


## operations on vectors
## ------------------------

def vect(a=False,b=False,c=False,d=False):
    """Convenience function for making a homogeneous coordinates 4 vector
from practically anything
    """
    r = [0,0,0,1]
    if isgoodnum(a):
        r[0]=a
        if isgoodnum(b):
            r[1]=b
            if isgoodnum(c):
                r[2]=c
                if isgoodnum(d):
                    r[3]=d
    elif isinstance(a,(tuple,list)):
        for i in range(min(4,len(a))):
            x=a[i]
            if isgoodnum(x):
                r[i]=x
    return r

def point(x=False,y=False,z=False,w=False):
    """Point creation from point, sequence or scalars"""
    r = vect(x,y,z,w)
    if r[3] > 0:
        return r
    else:
        raise ValueError('bad w argument to point()')

def isvect(x):
    """
    check to see if argument is a proper vector for our purposes
    """
    return isinstance(x,list) and len(x) == 4 and isgoodnum(x[0]) and isgoodnum(x[1]) and isgoodnum(x[2]) and isgoodnum(x[3])

def vclose(a,b):
    """ are two vectors the same within epsilon"""
    return close(mag(sub(a,b)),0)

def isfinite3(a):
    """ are all three spatial components finite?"""
    return isfinite(a[0]) and isfinite(a[1]) and isfinite(a[2])

## R^3 -> R^3 functions: ignore w component
## ------------------------------------------------
def add(a,b):
    """ 3 vector, `a + b`"""
    return [a[0]+b[0],a[1]+b[1],a[2]+b[2],1.0]

def sub(a,b):
    """ 3 vector, `a - b`"""
    return [a[0]-b[0],a[1]-b[1],a[2]-b[2],1.0]

def scale3(a,c):
    """ 3 vector, vector ``a`` times scalar ``c``, `a * c`"""
    return [a[0]*c,a[1]*c,a[2]*c,1.0]

def cross(a,b):
    """Compute the cross product of a x b, assuming that both
    fall into the w=1 hyperplane
    """
    return [ a[1]*b[2] - a[2]*b[1],
             a[2]*b[0] - a[0]*b[2],
             a[0]*b[1] - a[1]*b[0],
             1.0 ]

def normalize(a):
    """ unit vector in the direction of ``a``; ``nan`` if ``a`` has no length"""
    m = mag(a)
    return [fdiv(a[0],m),fdiv(a[1],m),fdiv(a[2],m),1.0]

def project(a,b):
    """ vector projection of ``a`` onto ``b``"""
    s = fdiv(dot(a,b),dot(b,b))
    return scale3(b,s)

def reject(a,b):
    """ vector rejection of ``a`` from ``b``: the part of ``a`` orthogonal to ``b``"""
    return sub(a,project(a,b))

## R^3 -> R functions -- ignore w component
## ----------------------------------------
def dot(a,b):
    """ 3 vector ``a`` dot ``b`` """
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]

def mag(a):
    """ compute the magnitude of 3 vector ``a``"""
    return sqrt(a[0]*a[0]+a[1]*a[1]+a[2]*a[2])

def project_scalar(a,b):
    """ scalar projection of ``a`` onto ``b``, the signed length of ``project(a,b)``"""
    return fdiv(dot(a,b),mag(b))

## R^4 -> R^4 functions: operate on w component
## ---------------------------------------------
def scale4(a,c):
    """ 4 vector ``a`` times scalar ``c``"""
    return [a[0]*c,a[1]*c,a[2]*c,a[3]*c]

def dot4(a,b):
    """ 4 vect dot product"""
    return a[0]*b[0]+a[1]*b[1]+a[2]*b[2]+a[3]*b[3]

def homo(a):
    """Homogenize, or project back to the w=1 plane by scaling all values by w"""
    return [ a[0]/a[3],
             a[1]/a[3],
             a[2]/a[3],
             1 ]

## flat buffer helpers
## -------------------

## attribute buffers are flat lists of floats; this turns flat
## triples into vectors
def unflatten3(data):
    """ split a flat ``[x0,y0,z0,x1,...]`` list into a list of points"""
    return [ [data[i],data[i+1],data[i+2],1.0] for i in range(0,len(data)-2,3) ]

def vstr(a):
    """ compact string formatting for a vector"""
    if isvect(a) or (isinstance(a,list) and len(a) >= 3):
        return "[{:g}, {:g}, {:g}]".format(a[0],a[1],a[2])
    return str(a)
