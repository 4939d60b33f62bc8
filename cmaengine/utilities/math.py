# -*- coding: utf-8 -*-
"""dense vector and matrix arithmetic and the symmetric eigensolver `eig`.

Vectors are one-dimensional and matrices are two-dimensional `numpy`
arrays, where ``A[i]`` is the i-th row of ``A``. All functions return
new arrays and never change their input, that is, vectors have value
semantics.

>>> from cmaengine.utilities.math import eye, dot, plus, minus, outer
>>> A = eye(2)
>>> A[0][1] = 2
>>> dot(A, [1, 1]).tolist(), dot(A, [1, 1], transpose=True).tolist()
([3.0, 1.0], [1.0, 3.0])
>>> plus([1, 2], minus([3, 3], [1, 2])).tolist()
[3.0, 3.0]
>>> outer([1, 2]).tolist()
[[1.0, 2.0], [2.0, 4.0]]

"""
import numpy as np
from ..interfaces import NumericalBreakdownError

def eye(dimension):
    """return identity matrix of size `dimension`"""
    return np.eye(dimension)

def dot(A, b, transpose=False):
    """usual dot product of "matrix" A with "vector" b.

    ``A[i]`` is the i-th row of A. With ``transpose=True``, A transposed
    is used, that is, a weighted sum of the rows of A with weights `b`.
    """
    A = np.asarray(A, dtype=float)
    if transpose:
        return np.dot(np.asarray(b, dtype=float), A)
    return np.dot(A, np.asarray(b, dtype=float))

def plus(a, b):
    """add vectors, return a + b """
    return np.asarray(a, dtype=float) + np.asarray(b, dtype=float)

def minus(a, b):
    """subtract vectors, return a - b"""
    return np.asarray(a, dtype=float) - np.asarray(b, dtype=float)

def times(factor, a):
    """return scalar `factor` times vector or matrix `a`"""
    return factor * np.asarray(a, dtype=float)

def vdot(a, b):
    """inner product of two vectors as `float`"""
    return float(np.dot(np.asarray(a, dtype=float), np.asarray(b, dtype=float)))

def outer(a, b=None):
    """outer product ``a b^T``, by default of `a` with itself"""
    a = np.asarray(a, dtype=float)
    return np.outer(a, a if b is None else np.asarray(b, dtype=float))

def transpose(A):
    """return a transposed copy of matrix `A`"""
    return np.array(A, dtype=float).T.copy()

def vsum(a):
    """sum of the vector entries"""
    return float(np.sum(a))

def sum_of_squares(a):
    """squared Euclidean length of `a`, ``sum(a**2)``"""
    a = np.asarray(a, dtype=float)
    return float(np.dot(a, a))

def normalized(a):
    """return `a` divided by its Euclidean length.

    >>> from cmaengine.utilities.math import normalized
    >>> normalized([3, 4]).tolist()
    [0.6, 0.8]

    """
    return np.asarray(a, dtype=float) / sum_of_squares(a)**0.5

def eig(C):
    """eigendecomposition of a symmetric matrix.

    Return the eigenvalues in ascending order and an orthonormal basis
    of the corresponding eigenvectors, ``(EVals, Basis)``, where

    - ``Basis[i]`` is the i-th row of ``Basis``
    - the i-th column of ``Basis``, ie ``Basis[:, i]``, is the i-th
      eigenvector with eigenvalue ``EVals[i]``

    Only the lower triangle of `C` is used. Raise
    `NumericalBreakdownError` when the solver does not converge or when
    the result is not finite.

    >>> import numpy as np
    >>> from cmaengine.utilities.math import eig
    >>> d, B = eig(np.diag([5., 5.]))
    >>> d.tolist()
    [5.0, 5.0]
    >>> assert np.allclose(abs(B), np.eye(2))
    >>> d, B = eig([[2, -1, 0], [-1, 2, -1], [0, -1, 2]])
    >>> assert np.allclose(d, [2 - 2**0.5, 2, 2 + 2**0.5], atol=1e-4)
    >>> assert np.allclose(abs(B[:, 0]), [0.5, 2**-0.5, 0.5], atol=1e-4)
    >>> assert np.allclose(abs(B[:, 1]), [2**-0.5, 0, 2**-0.5], atol=1e-4)
    >>> assert np.allclose(np.dot(B.T, B), np.eye(3))

    """
    C = np.asarray(C, dtype=float)
    try:
        eigenvalues, eigenbasis = np.linalg.eigh(C)
    except np.linalg.LinAlgError as e:
        raise NumericalBreakdownError(
            "eigendecomposition did not converge: %s" % str(e))
    if not (np.all(np.isfinite(eigenvalues)) and
            np.all(np.isfinite(eigenbasis))):
        raise NumericalBreakdownError(
            "eigendecomposition returned non-finite values, eigenvalues=%s"
            % str(eigenvalues))
    return eigenvalues, eigenbasis
