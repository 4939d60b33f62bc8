# -*- coding: utf-8 -*-
"""Checkpoints of a `CMAEngine` state.

A checkpoint is the UTF-8 encoded `repr` of a `dict` of Python literals,
which is read back with `ast.literal_eval`. Floats which are not finite
are written as the strings ``'inf'``, ``'-inf'`` and ``'nan'``, because
`repr` of those is not a literal. The random number generator state is
part of the checkpoint, hence a restored engine continues with the very
same random draws:

>>> import numpy as np
>>> import cmaengine
>>> from cmaengine import checkpoint
>>> es = cmaengine.CMAEngine(4 * [1], 0.5, rng=11)
>>> for _ in range(5):
...     _ = es.epoch(cmaengine.ff.elli)
>>> blob = checkpoint.dumps(es)
>>> es2 = checkpoint.loads(blob)
>>> _ = es.epoch(cmaengine.ff.elli), es2.epoch(cmaengine.ff.elli)
>>> assert np.array_equal(es.xmean, es2.xmean) and es.sigma == es2.sigma
>>> assert np.array_equal(es.C.C, es2.C.C)

`save` and `load` do the same with a file. Errors from the file system,
like `FileNotFoundError`, propagate unchanged while an unusable content
raises `CheckpointError`:

>>> try:
...     checkpoint.loads(b"{'format': 'something else'}")
... except cmaengine.CheckpointError as e:
...     print('CheckpointError')
CheckpointError

"""
import ast
import numpy as np
from .interfaces import CheckpointError
from .boundary_handler import SearchSpaceConfiguration
from .evolution_strategy import (CMAEngine, CMAESParameters, BestSolution)
from .recombination_weights import RecombinationWeights
from .sampler import CovarianceMatrix

FORMAT = 'cmaengine-checkpoint'
VERSION = 1
bit_generators = ('PCG64', 'PCG64DXSM', 'MT19937', 'Philox', 'SFC64')
"names of `numpy.random` bit generators which can be restored"

def _literal(obj):
    """return `obj` with `numpy` types replaced by Python literals and
    non-finite floats replaced by strings"""
    if isinstance(obj, dict):
        return dict((k, _literal(v)) for k, v in obj.items())
    if isinstance(obj, (list, tuple, np.ndarray)):
        return [_literal(v) for v in obj]
    if isinstance(obj, (bool, np.bool_)):
        return bool(obj)
    if isinstance(obj, (int, np.integer)):
        return int(obj)
    if isinstance(obj, (float, np.floating)):
        obj = float(obj)
        return obj if np.isfinite(obj) else repr(obj)
    return obj

def _float(value):
    """inverse of `_literal` for a single float"""
    if isinstance(value, str) and value not in ('inf', '-inf', 'nan'):
        raise ValueError("'%s' is not a float" % value)
    return float(value)

def _floats(values):
    """return (nested) `list` `values` as `float` array"""
    if isinstance(values, list):
        return np.array([_floats(v) for v in values], dtype=float)
    return _float(values)

def _check(condition, message):
    if not condition:
        raise CheckpointError(message)

def to_dict(es):
    """return the state of `CMAEngine` `es` as `dict` of literals"""
    par = es.params
    best = None
    if es.best.f is not None:
        best = {'x': es.best.x, 'f': es.best.f, 'evals': es.best.evals}
    return _literal({
        'format': FORMAT,
        'version': VERSION,
        'dimension': par.dimension,
        'popsize': par.lam,
        'sigma': es.sigma,
        'weights': list(par.weights),
        'constants': {'mu': par.mu, 'mueff': par.mueff, 'cc': par.cc,
                      'cs': par.cs, 'c1': par.c1, 'cmu': par.cmu,
                      'damps': par.damps,
                      'lazy_gap_evals': par.lazy_gap_evals,
                      'active': par.active},
        'lazy_eigendecomposition': es.lazy_eigendecomposition,
        'xmean': es.xmean,
        'pc': es.pc,
        'ps': es.ps,
        'covariance': {'C': es.C.C,
                       'eigenbasis': es.C.eigenbasis,
                       'eigenvalues': es.C.eigenvalues,
                       'invsqrt': es.C.invsqrt,
                       'condition_number': es.C.condition_number,
                       'updated_eval': es.C.updated_eval},
        'counteval': es.counteval,
        'fitvals': es.fitvals,
        'best': best,
        'search_space': (None if es.search_space is None
                         else es.search_space.to_dict()),
        'ftarget': es.ftarget,
        'maxfevals': es.maxfevals,
        'rng_state': es.rng.bit_generator.state,
    })

def from_dict(dict_):
    """return a new `CMAEngine` instance from the output of `to_dict`.

    Raise `CheckpointError` if `dict_` is incomplete or inconsistent.
    """
    try:
        return _from_dict(dict_)
    except CheckpointError:
        raise
    except (KeyError, TypeError, ValueError, AssertionError,
            ZeroDivisionError, AttributeError) as e:
        raise CheckpointError("invalid checkpoint content, %s: %s"
                              % (type(e).__name__, str(e)))

def _from_dict(d):
    _check(isinstance(d, dict), "checkpoint must be a dict, was %s"
           % str(type(d)))
    _check(d.get('format') == FORMAT, "unknown checkpoint format %s"
           % repr(d.get('format')))
    _check(d.get('version') == VERSION, "unsupported checkpoint version %s"
           % repr(d.get('version')))
    N, lam = int(d['dimension']), int(d['popsize'])
    _check(N >= 1 and lam >= 2, "invalid dimension %d or popsize %d"
           % (N, lam))

    par = CMAESParameters.__new__(CMAESParameters)
    par.dimension, par.lam = N, lam
    par.weights = RecombinationWeights.from_values(
        [_float(w) for w in d['weights']])
    _check(len(par.weights) == lam, "%d weights for popsize %d"
           % (len(par.weights), lam))
    constants = d['constants']
    par.mu = int(constants['mu'])
    _check(par.mu == par.weights.mu, "mu=%d does not match the weights"
           % par.mu)
    par.active = bool(constants['active'])
    for key in ('mueff', 'cc', 'cs', 'c1', 'cmu', 'damps', 'lazy_gap_evals'):
        setattr(par, key, _float(constants[key]))

    C = CovarianceMatrix(N)
    cov = d['covariance']
    for key in ('C', 'eigenbasis', 'invsqrt'):
        value = _floats(cov[key])
        _check(value.shape == (N, N), "covariance '%s' has shape %s"
               % (key, str(value.shape)))
        setattr(C, key, value)
    C.eigenvalues = _floats(cov['eigenvalues'])
    C.condition_number = _float(cov['condition_number'])
    C.updated_eval = int(cov['updated_eval'])

    state = d['rng_state']
    _check(state['bit_generator'] in bit_generators,
           "unknown bit generator %s" % repr(state['bit_generator']))
    bit_generator = getattr(np.random, state['bit_generator'])()
    bit_generator.state = state

    es = CMAEngine.__new__(CMAEngine)
    es.params = par
    es.search_space = (None if d['search_space'] is None
                       else SearchSpaceConfiguration.from_dict(d['search_space']))
    _check(es.search_space is None or len(es.search_space) == N,
           "search space dimension differs from %d" % N)
    es.lazy_eigendecomposition = bool(d['lazy_eigendecomposition'])
    es.ftarget = None if d['ftarget'] is None else _float(d['ftarget'])
    es.maxfevals = int(d['maxfevals'])
    es.rng = np.random.Generator(bit_generator)
    es.sigma = _float(d['sigma'])
    for key in ('xmean', 'pc', 'ps'):
        value = _floats(d[key])
        _check(value.shape == (N,), "'%s' has shape %s"
               % (key, str(value.shape)))
        setattr(es, key, value)
    es.C = C
    _check(C.eigenvalues.shape == (N,), "%d eigenvalues for dimension %d"
           % (len(C.eigenvalues), N))
    es.counteval = int(d['counteval'])
    es.fitvals = [_float(f) for f in d['fitvals']]
    best = d['best']
    es.best = BestSolution() if best is None else BestSolution(
        _floats(best['x']), _float(best['f']), int(best['evals']))
    return es

def dumps(es):
    """return a checkpoint of `es` as `bytes`"""
    return repr(to_dict(es)).encode('utf-8')

def loads(blob):
    """return a new `CMAEngine` from checkpoint `bytes` `blob`"""
    try:
        dict_ = ast.literal_eval(bytes(blob).decode('utf-8'))
    except (SyntaxError, ValueError, TypeError, MemoryError,
            RecursionError, UnicodeDecodeError) as e:
        raise CheckpointError("checkpoint cannot be parsed, %s: %s"
                              % (type(e).__name__, str(e)))
    return from_dict(dict_)

def save(es, filename):
    """write a checkpoint of `es` to file `filename`.

    The file is overwritten without any atomicity guarantee.
    """
    with open(filename, 'wb') as f:
        f.write(dumps(es))

def load(filename):
    """return a new `CMAEngine` from the checkpoint file `filename`"""
    with open(filename, 'rb') as f:
        return loads(f.read())
