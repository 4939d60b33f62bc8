# -*- coding: utf-8 -*-
"""Search space configuration: coordinate-wise scaling between the
external (user) and the internal coordinates of the engine and variable
boundaries (AKA box constraints) handled by reflection.
"""
import numpy as np
from .interfaces import ConfigurationError
from .utilities.utils import rglen

def normalize_bounds(bounds):
    """return bounds as a `list` with one ``[lower, upper]`` pair or
    `None` per coordinate.

    Within a pair, `None` and infinite values both mean that the
    coordinate is unbounded on that side and become `None`. A pair
    without any finite value becomes `None`.

    >>> from cmaengine.boundary_handler import normalize_bounds
    >>> normalize_bounds([(1, 50), None, (None, 3), (-float('inf'), None)])
    [[1.0, 50.0], None, [None, 3.0], None]

    """
    res = []
    for i, interval in enumerate(bounds):
        if interval is None:
            res.append(None)
            continue
        try:
            lower, upper = interval
        except (TypeError, ValueError):
            raise ConfigurationError("bounds of coordinate %d must be None or"
                                     " a (lower, upper) pair, was %s"
                                     % (i, str(interval)))
        lower, upper = [None if b is None or not np.isfinite(b) else float(b)
                        for b in (lower, upper)]
        if lower is not None and upper is not None and not lower < upper:
            raise ConfigurationError("lower bound %s of coordinate %d is not"
                                     " smaller than upper bound %s"
                                     % (str(lower), i, str(upper)))
        res.append(None if lower is None and upper is None else [lower, upper])
    return res

class SearchSpaceConfiguration(object):
    """per-coordinate bound intervals and scaling factors.

    The engine searches in internal coordinates, ``internal = external *
    scaling_factors``, and returns external coordinates to the user.
    Bounds apply to external coordinates. Out-of-bounds coordinates are
    handled by "darwinian" reflection: the objective function sees the
    reflected solution while the engine keeps learning from the
    unreflected one, hence the bound penalty is implicit in the returned
    objective value.

    :param bounds: `list` with a ``(lower, upper)`` pair or `None` for
        each coordinate, or `None` for no bounds at all.
    :param scaling_factors: `list` of positive numbers, by default ones.
    :param method: bound handling method, only ``'reflect'`` (alias
        ``'darwinian'``) is available.
    :param dimension: only needed when neither `bounds` nor
        `scaling_factors` is given.

    >>> from cmaengine.boundary_handler import SearchSpaceConfiguration
    >>> ssc = SearchSpaceConfiguration([(1, 50), None, (1, 50)], [1, 2, 4])
    >>> len(ssc)
    3
    >>> ssc.encode([1, 1, 1]).tolist()
    [1.0, 2.0, 4.0]
    >>> ssc.decode([1, 1, 1]).tolist()
    [1.0, 0.5, 0.25]
    >>> ssc.reflect([0.5, -7, 52]).tolist()
    [1.5, -7.0, 48.0]
    >>> ssc.reflect([1, -7, 50]).tolist()  # on the bound is in bounds
    [1.0, -7.0, 50.0]
    >>> ssc.is_in_bounds([0.5, -7, 50])
    False

    """
    methods = {'reflect': 'reflect', 'darwinian': 'reflect',
               'darwinian-reflection': 'reflect'}
    "accepted method names and the method they stand for"

    def __init__(self, bounds=None, scaling_factors=None, method='reflect',
                 dimension=None):
        dims = [len(v) for v in (bounds, scaling_factors) if v is not None]
        if dimension is not None:
            dims.append(dimension)
        if not dims:
            raise ConfigurationError("dimension cannot be inferred, pass"
                                     " bounds, scaling_factors or dimension")
        if any(d != dims[0] for d in dims):
            raise ConfigurationError("mismatching dimensions of bounds,"
                                     " scaling_factors and dimension: %s"
                                     % str(dims))
        self.dimension = dims[0]
        if self.dimension < 1:
            raise ConfigurationError("dimension must be >= 1, was %d"
                                     % self.dimension)
        self.bounds = normalize_bounds(bounds if bounds is not None
                                       else self.dimension * [None])
        if scaling_factors is None:
            scaling_factors = self.dimension * [1.0]
        self.scaling_factors = np.array(scaling_factors, dtype=float)
        if not np.all(np.isfinite(self.scaling_factors)) or np.any(
                self.scaling_factors <= 0):
            raise ConfigurationError("scaling factors must be finite and"
                                     " positive, were %s"
                                     % str(list(scaling_factors)))
        try:
            self.method = SearchSpaceConfiguration.methods[method]
        except KeyError:
            raise ConfigurationError("bound handling method '%s' is not"
                                     " available, choose from %s"
                                     % (str(method), str(sorted(
                                         SearchSpaceConfiguration.methods))))

    def __len__(self):
        return self.dimension

    def __repr__(self):
        return '%s(bounds=%s, scaling_factors=%s, method=%s)' % (
            self.__class__.__name__, str(self.bounds),
            str(self.scaling_factors.tolist()), repr(self.method))

    def has_bounds(self):
        """return `True` if any coordinate is bounded"""
        return any(b is not None for b in self.bounds)

    def encode(self, x):
        """return internal representation of the external solution `x`"""
        return np.asarray(x, dtype=float) * self.scaling_factors

    def decode(self, x):
        """return external representation of the internal solution `x`"""
        return np.asarray(x, dtype=float) / self.scaling_factors

    def reflect(self, x):
        """return a copy of external solution `x` where each violated
        bound is reflected once.

        Coordinate ``x_i < lower`` becomes ``2 * lower - x_i`` and
        ``x_i > upper`` becomes ``2 * upper - x_i``. The result is in
        bounds if no violation exceeds the interval length.
        """
        y = np.array(x, dtype=float)
        for i in rglen(y):
            if self.bounds[i] is None:
                continue
            lower, upper = self.bounds[i]
            if lower is not None and y[i] < lower:
                y[i] = 2 * lower - y[i]
            elif upper is not None and y[i] > upper:
                y[i] = 2 * upper - y[i]
        return y

    def is_in_bounds(self, x):
        """return `True` if all coordinates of `x` are within bounds"""
        for i in rglen(x):
            if self.bounds[i] is None:
                continue
            lower, upper = self.bounds[i]
            if (lower is not None and x[i] < lower) or (
                    upper is not None and x[i] > upper):
                return False
        return True

    def to_dict(self):
        """return a `dict` of Python literals, see also `from_dict`"""
        return {'bounds': [None if b is None else list(b) for b in self.bounds],
                'scaling_factors': self.scaling_factors.tolist(),
                'method': self.method}

    @classmethod
    def from_dict(cls, dict_):
        """return a new instance from the output of `to_dict`"""
        return cls(dict_['bounds'], dict_['scaling_factors'], dict_['method'])
