## generalized matrix transformation operations for 3D homogeneous
## coordinates in quadvox

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

from math import *
import numpy as np
import quadvox.geom as geom

## a matrix is represented as a list of four four vectors. In a
## matrix, vectors represent rows unless the transpose property is
## true.  We assume that operations like Mx imply a column vector,
## which is the OpenGL convention; flat() produces the column-major
## layout that OpenGL expects on upload.

class Matrix:
    """4x4 transformation matrix class for transforming homogemenous 3D coordinates"""

    def __init__(self,a=False,trans=False):
        self.m = [[1,0,0,0],
                  [0,1,0,0],
                  [0,0,1,0],
                  [0,0,0,1]]
        self.trans=False

        if isinstance(a,Matrix):
            for i in range(4):
                self.setrow(i,list(a.getrow(i)))

        elif isinstance(a,(tuple,list)):
            if len(a) == 4:
                r1 =a[0]
                r2 =a[1]
                r3 =a[2]
                r4 =a[3]
                if len(r1) == len(r2) == len(r3) == len(r4) == 4:
                    for i in range(4):
                        for j in range(4):
                            x =a[i][j]
                            if geom.isgoodnum(x):
                                self.m[i][j]=x
                            else:
                                raise ValueError('bad element in matrix initialization: {}'.format(x))
                else:
                    raise ValueError('bad row length in matrix initialization: {}'.format(a))
            elif len(a)==16:
                for i in range(4):
                    for j in range(4):
                        x = a[i*4+j]
                        if geom.isgoodnum(x):
                            self.m[i][j]=x
                        else:
                            raise ValueError('bad element in matrix initialization: {}'.format(x))
            else:
                raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        elif a is not False:
            raise ValueError('bad thing used in attempt to initialize matrix: {}'.format(a))
        self.trans=trans

    def __repr__(self):
        return "Matrix({},{},{},{},{})".format(self.m[0],self.m[1],
                                               self.m[2],self.m[3],self.trans)

    def __eq__(self,other):
        if not isinstance(other,Matrix):
            return NotImplemented
        return all(self.get(i,j) == other.get(i,j)
                   for i in range(4) for j in range(4))

    #return value indexed by i,j
    def get(self,i,j):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to get: {},{}'.format(i,j))
        if self.trans:
            return self.m[j][i]
        else:
            return self.m[i][j]

    #set value indexed by i,j
    def set(self,i,j,x):
        if i < 0 or i > 3 or j < 0 or j > 3:
            raise ValueError('bad index passed to set: {},{}'.format(i,j))
        if geom.isgoodnum(x):
            if self.trans:
                self.m[j][i]=x
            else:
                self.m[i][j]=x
        else:
            raise ValueError('bad value passed to set: {}'.format(x))

    def getrow(self,i):
        if i < 0 or i > 3:
            raise ValueError('bad row passed to getrow: {}'.format(i))
        if self.trans:
            return [self.m[0][i],
                    self.m[1][i],
                    self.m[2][i],
                    self.m[3][i]]
        else:
            return self.m[i]

    def getcol(self,j):
        if j < 0 or j > 3:
            raise ValueError('bad column passed to getcol: {}'.format(j))
        if not self.trans:
            return [self.m[0][j],
                    self.m[1][j],
                    self.m[2][j],
                    self.m[3][j]]
        else:
            return self.m[j]

    def setrow(self,i,x):
        if not geom.isvect(x):
            raise ValueError('bad non-vector passed to setrow: {}'.format(x))
        if i < 0 or i > 3:
            raise ValueError('bad row index passed to setrow: {}'.format(i))
        if self.trans:
            self.m[0][i] = x[0]
            self.m[1][i] = x[1]
            self.m[2][i] = x[2]
            self.m[3][i] = x[3]
        else:
            self.m[i] = x

    # matrix multiply.  If x is a matrix, compute MX.  If X is a
    # vector, compute Mx. If x is a scalar, compute xM.  Respects
    # transpose flag.

    def mul(self,x):
        if isinstance(x,Matrix):
            result = Matrix()
            for i in range(4):
                for j in range(4):
                    result.set(i,j,
                               geom.dot4(self.getrow(i),x.getcol(j)))
            return result
        elif geom.isvect(x):
            result = geom.vect()
            for i in range(4):
                result[i]=geom.dot4(self.getrow(i),x)
            return result
        elif geom.isgoodnum(x):
            result = Matrix()
            for i in range(4):
                result.setrow(i,geom.scale4(self.getrow(i),x))
            return result

        raise ValueError('bad thing passed to mul(): {}'.format(x))

    def flat(self,column_major=True):
        """16 floats, column-major by default (OpenGL upload order)"""
        if column_major:
            return [float(self.get(i,j)) for j in range(4) for i in range(4)]
        return [float(self.get(i,j)) for i in range(4) for j in range(4)]

    def array(self):
        return np.array([[self.get(i,j) for j in range(4)] for i in range(4)],
                        dtype=float)

    def inverse(self):
        """numeric inverse; raises ``ValueError`` for a singular matrix"""
        try:
            inv = np.linalg.inv(self.array())
        except np.linalg.LinAlgError as err:
            raise ValueError('singular matrix has no inverse') from err
        return Matrix(inv.tolist())

    def normal_matrix(self):
        """inverse-transpose of the upper 3x3, as a numpy array.

        This is the correct transform for surface normals under any
        invertible linear part, including non-uniform scale.
        """
        upper = self.array()[:3,:3]
        try:
            return np.linalg.inv(upper).T
        except np.linalg.LinAlgError as err:
            raise ValueError('singular matrix has no normal matrix') from err


## true if the linear part is a pure rotation (orthonormal rows).
## Translation is allowed.
def isrigid(m):
    upper = m.array()[:3,:3]
    return bool(np.allclose(upper @ upper.T,np.eye(3),atol=geom.epsilon))


# return the generalized 4x4 arbitrary axis rotation matrix, angle in
# degrees
def Rotation(axis,angle):
    m = geom.mag(axis)
    u = axis
    if m < geom.epsilon:
        raise ValueError('zero-length rotation axis not allowed')
    if not geom.close(m,1.0):
        u = geom.scale3(axis,1.0/m)

    rad = (angle%360.0)*geom.pi2/360.0

    ux = u[0]
    uy = u[1]
    uz = u[2]

    cang = cos(rad)
    cmin = 1.0-cang
    sang = sin(rad)

    # see http://www.opengl-tutorial.org/assets/faq_quaternions/index.html#Q38
    R = [[cang + ux*ux*cmin, ux*uy*cmin-uz*sang, ux*uz*cmin+uy*sang,0],
         [uy*ux*cmin+uz*sang, cang + uy*uy*cmin, uy*uz*cmin - ux*sang,0],
         [uz*ux*cmin-uy*sang, uz*uy*cmin+ux*sang, cang+uz*uz*cmin,0],
         [0,0,0,1]]

    return Matrix(R)

def Translation(delta):
    dx = delta[0]
    dy = delta[1]
    dz = delta[2]
    T = [[1,0,0,dx],
         [0,1,0,dy],
         [0,0,1,dz],
         [0,0,0,1]]
    return Matrix(T)

def Scale(x,y=False,z=False):
    sx = sy = sz = 1.0
    if geom.isgoodnum(x):
        sx = x
        if geom.isgoodnum(y) and geom.isgoodnum(z):
            sy = y
            sz = z
        else:
            sy = sz = x
    elif isinstance(x,(list,tuple)) and len(x) >= 3:
        sx = x[0]
        sy = x[1]
        sz = x[2]
    else:
        raise ValueError('bad scaling values passed to Scale')

    S = [[sx,0,0,0],
         [0,sy,0,0],
         [0,0,sz,0],
         [0,0,0,1.0]]
    return Matrix(S)

## OpenGL-style perspective projection; fov is the vertical field of
## view in degrees
def Perspective(fov,aspect,near,far):
    if not (geom.isgoodnum(fov) and 0 < fov < 180):
        raise ValueError('bad field of view: {}'.format(fov))
    if not (geom.isgoodnum(aspect) and aspect > 0):
        raise ValueError('bad aspect ratio: {}'.format(aspect))
    if not (0 < near < far):
        raise ValueError('bad clip planes: near={}, far={}'.format(near,far))
    f = 1.0/tan(radians(fov)/2.0)
    nf = 1.0/(near-far)
    P = [[f/aspect,0,0,0],
         [0,f,0,0],
         [0,0,(far+near)*nf,2*far*near*nf],
         [0,0,-1.0,0]]
    return Matrix(P)
