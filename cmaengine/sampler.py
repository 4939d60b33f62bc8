"""The adapted covariance matrix of the search distribution, which
maintains its own eigendecomposition and samples from the multi-variate
normal distribution with zero mean it defines.
"""
import numpy as np
from .interfaces import NumericalBreakdownError
from .utilities import math as _math

class CovarianceMatrix(object):
    """Symmetric positive definite matrix ``C`` maintaining its own
    eigendecomposition.

    The eigendecomposion (the return value of `eig`) is stored in the
    attributes `eigenbasis` and `eigenvalues` (ascending) such that the
    i-th eigenvector is ``C.eigenbasis[:, i]`` with eigenvalue
    ``C.eigenvalues[i]`` and hence::

        C = C.eigenbasis x diag(C.eigenvalues) x C.eigenbasis^T

    The decomposition is only refreshed in `update_eigensystem`, hence
    `eigenbasis`, `eigenvalues`, `invsqrt` and `condition_number` reflect
    the matrix as of evaluation count `updated_eval` while the matrix
    itself, `C`, is changed in between by `multiply_with` and
    `addouter`.

    >>> import numpy as np
    >>> from cmaengine.sampler import CovarianceMatrix
    >>> C = CovarianceMatrix(2)
    >>> C.eigenvalues.tolist(), C.condition_number
    ([1.0, 1.0], 1.0)
    >>> _ = C.multiply_with(0.5).addouter([1, 1], 1.5)
    >>> C.C.tolist()
    [[2.0, 1.5], [1.5, 2.0]]
    >>> _ = C.update_eigensystem(10)
    >>> assert np.allclose(C.eigenvalues, [0.5, 3.5])
    >>> assert abs(C.condition_number - 7) < 1e-9
    >>> C.updated_eval
    10
    >>> assert np.allclose(np.dot(np.dot(C.invsqrt, C.C), C.invsqrt), np.eye(2))
    >>> assert abs(C.mahalanobis_norm([1, 1]) - (2 / 3.5)**0.5) < 1e-12

    """
    def __init__(self, dimension):
        self.dimension = dimension
        self.C = _math.eye(dimension)
        "covariance matrix"
        self.eigenbasis = _math.eye(dimension)
        "columns, eigenbasis[:, i], are eigenvectors of C"
        self.eigenvalues = np.ones(dimension)
        self.condition_number = 1.0
        self.invsqrt = _math.eye(dimension)
        "C**-1/2 as of the last eigendecomposition"
        self.updated_eval = 0

    def __len__(self):
        return self.dimension

    @property
    def diag(self):
        """diagonal of the matrix as a copy (save to change)"""
        return np.diag(self.C).copy()

    def multiply_with(self, factor):
        """multiply matrix in place with `factor`"""
        self.C *= factor
        return self

    def addouter(self, b, factor=1):
        """Add in place `factor` times outer product of vector `b`,

        without any dimensional consistency checks.
        """
        self.C += factor * _math.outer(b)
        return self

    def enforce_symmetry(self):
        """replace ``C[i][j]`` and ``C[j][i]`` by their average"""
        self.C = (self.C + self.C.T) / 2
        return self

    def update_eigensystem(self, current_eval, lazy_gap_evals=0):
        """Execute eigendecomposition of `self`, unless
        ``current_eval <= lazy_gap_evals + updated_eval`` with a positive
        `lazy_gap_evals`.

        With ``lazy_gap_evals=0``, the decomposition is done in each
        call. Raise `NumericalBreakdownError` if `self` is not positive
        definite (anymore), in which case the previous decomposition is
        kept.

        >>> import numpy as np
        >>> from cmaengine.sampler import CovarianceMatrix
        >>> C = CovarianceMatrix(2)
        >>> _ = C.addouter([1, 0], 3).update_eigensystem(10, lazy_gap_evals=5)
        >>> assert np.allclose(C.eigenvalues, [1, 4]) and C.updated_eval == 10
        >>> _ = C.addouter([0, 1], 1).update_eigensystem(15, lazy_gap_evals=5)
        >>> assert np.allclose(C.eigenvalues, [1, 4]) and C.updated_eval == 10
        >>> _ = C.update_eigensystem(16, lazy_gap_evals=5)
        >>> assert np.allclose(C.eigenvalues, [2, 4]) and C.updated_eval == 16
        >>> _ = C.addouter([0, 1], 1).update_eigensystem(16)  # no gap
        >>> assert np.allclose(C.eigenvalues, [3, 4]) and C.updated_eval == 16

        """
        if lazy_gap_evals > 0 and current_eval <= self.updated_eval + lazy_gap_evals:
            return self
        self.enforce_symmetry()
        eigenvalues, eigenbasis = _math.eig(self.C)  # O(N**3)
        if min(eigenvalues) <= 0:
            raise NumericalBreakdownError(
                "The smallest eigenvalue is <= 0 after %d evaluations!"
                "\neigenvectors:\n%s \neigenvalues:\n%s"
                % (current_eval, str(eigenbasis), str(eigenvalues)))
        self.eigenvalues, self.eigenbasis = eigenvalues, eigenbasis
        self.condition_number = float(max(self.eigenvalues) / min(self.eigenvalues))
        # now compute invsqrt(C) = C**(-1/2) = B D**(-1/2) B'
        # this is O(n^3) and takes about 25% of the time of eig
        self.invsqrt = np.dot(self.eigenbasis / self.eigenvalues**0.5,
                              self.eigenbasis.T)
        self.invsqrt = (self.invsqrt + self.invsqrt.T) / 2
        self.updated_eval = current_eval
        return self

    def mahalanobis_norm(self, dx):
        """return ``(dx^T * C^-1 * dx)**0.5``, based on the last
        eigendecomposition
        """
        return _math.sum_of_squares(_math.dot(self.invsqrt, dx))**0.5

    def sample(self, number, sigma, rng):
        """return `number` i.i.d. samples from ``Normal(0, sigma**2 C)``
        as rows of an array.

        Each sample is ``B * (sigma * D * z)`` where ``B`` is the
        eigenbasis, ``D`` the square roots of the eigenvalues and ``z``
        a standard normal vector drawn from the `numpy` generator `rng`.

        >>> import numpy as np
        >>> from cmaengine.sampler import CovarianceMatrix
        >>> C = CovarianceMatrix(3)
        >>> ary = C.sample(5, 2.0, np.random.default_rng(1))
        >>> ary.shape
        (5, 3)
        >>> arz = 2.0 * np.random.default_rng(1).standard_normal((5, 3))
        >>> assert np.allclose(ary, arz)  # C is the identity

        """
        arz = rng.standard_normal((number, self.dimension))
        return np.dot(sigma * self.eigenvalues**0.5 * arz, self.eigenbasis.T)
