#!/usr/bin/env python
"""test module of `cmaengine` package.

Usage::

    python -m cmaengine.test -h    # print this docstring
    python -m cmaengine.test       # doctest all (listed) files
    python -m cmaengine.test list  # list files to be doctested
    python -m cmaengine.test sampler.py [file2 [file3 [...]]] # doctest only these

or equivalently by passing Python code::

    python -c "import cmaengine.test; cmaengine.test.main()"  # doctest all (listed) files
    python -c "import cmaengine.test; cmaengine.test.main('list')"  # show files in doctest list

File(name)s are interpreted within the package. Without a filename
argument, all files from attribute `files_for_doctest` are tested.

The same doctests are collected by ``python -m pytest``, see
``setup.cfg``.
"""
import os, sys
import doctest

files_for_doctest = ['boundary_handler.py',
                     'checkpoint.py',
                     'evolution_strategy.py',
                     'fitness_functions.py',
                     'interfaces.py',
                     'recombination_weights.py',
                     'sampler.py',
                     'test.py',
                     os.path.join('utilities', 'math.py'),
                     os.path.join('utilities', 'utils.py'),
    ]

def various_doctests():
    """various doc tests.

    This function describes test cases which go beyond the examples in
    the modules. The main testing feature is by doctest with
    ``cmaengine.test.main()`` in a Python shell or by ``python -m
    cmaengine.test`` in a system shell.

    A fresh engine starts with the identity as covariance matrix and
    zero evolution paths:

    >>> import numpy as np
    >>> import cmaengine
    >>> from cmaengine import checkpoint
    >>> es = cmaengine.CMAEngine([1, 2, 3], 0.7)
    >>> assert np.array_equal(es.C.C, np.eye(3))
    >>> assert np.array_equal(es.C.eigenbasis, np.eye(3))
    >>> assert np.array_equal(es.C.eigenvalues, np.ones(3))
    >>> assert not any(es.pc) and not any(es.ps) and es.sigma == 0.7
    >>> es.popsize, es.params.mu, es.evaluations, es.stop()
    (7, 3, 0, {})

    Each generation has lambda candidates of the right dimension and
    each update counts lambda evaluations:

    >>> for n in (1, 2, 5, 10):
    ...     es = cmaengine.CMAEngine(n * [0], 1, rng=n)
    ...     for _ in range(3):
    ...         evals = es.evaluations
    ...         X = es.sample_generation()
    ...         assert len(X) == es.popsize == cmaengine.population_size(n)
    ...         assert all(len(x) == n for x in X)
    ...         es.complete_generation([(x, cmaengine.ff.sphere(x)) for x in X])
    ...         assert es.evaluations == evals + es.popsize

    Recombination weights for any population size:

    >>> for lam in range(2, 40):
    ...     w = cmaengine.CMAESParameters(5, lam).weights
    ...     assert abs(sum(w[:w.mu]) - 1) < 1e-9
    ...     assert all(wi == 0 for wi in w[w.mu:])
    ...     assert 1 <= w.mueff <= w.mu

    Scaling and reflection:

    >>> ssc = cmaengine.SearchSpaceConfiguration(scaling_factors=[1e-3, 3, 7.7])
    >>> rng = np.random.default_rng(1)
    >>> for _ in range(20):
    ...     v = 100 * rng.standard_normal(3)
    ...     assert np.allclose(ssc.decode(ssc.encode(v)), v, rtol=1e-14, atol=0)
    >>> ssc = cmaengine.SearchSpaceConfiguration([(-1, 2)])
    >>> for x in np.linspace(-4, 5, 91):
    ...     assert -1 <= ssc.reflect([x])[0] <= 2
    >>> ssc.reflect([-1]).tolist(), ssc.reflect([2]).tolist()
    ([-1.0], [2.0])

    Repeated epochs on quadratic bowls never break down, with and without
    lazy eigendecomposition and negative weights:

    >>> for seed in range(6):
    ...     es = cmaengine.CMAEngine(6 * [3], 1, rng=seed,
    ...                              lazy_eigendecomposition=seed % 2 == 1,
    ...                              active=seed > 2)
    ...     fun = cmaengine.ff.sphere if seed < 2 else (
    ...         lambda x: cmaengine.ff.elli(x, cond=1e4))
    ...     for _ in range(400):
    ...         _ = es.epoch(fun)
    ...         if es.stop():
    ...             break
    ...     assert es.result.fbest < 1e-3, (seed, es.result.fbest)
    ...     assert min(es.C.eigenvalues) > 0

    Minimizing the sphere function in 3-D from a random start in
    ``[-5, 5]**3`` is successful in almost all cases:

    >>> successes = 0
    >>> for seed in range(10):
    ...     rng = np.random.default_rng(seed)
    ...     es = cmaengine.CMAEngine(rng.uniform(-5, 5, 3), 3.0, rng=rng)
    ...     found = []
    ...     while not found and es.countiter < 1000:
    ...         _ = es.epoch(cmaengine.ff.SphereEvaluator(),
    ...                      lambda x, f: found.append(f))
    ...     successes += bool(found) and es.best.f < 0.01
    >>> assert successes >= 9, successes

    Termination and display:

    >>> es = cmaengine.CMAEngine(3 * [1], 1, ftarget=1e-8, rng=1)
    >>> 'ftarget' in es.optimize(cmaengine.ff.sphere).stop()
    True
    >>> es = cmaengine.CMAEngine(3 * [1], 1, maxfevals=70, rng=1)
    >>> es.optimize(cmaengine.ff.sphere).stop(), es.countiter
    ({'maxfevals': 70}, 10)
    >>> es = cmaengine.CMAEngine(3 * [1], 1, rng=1)
    >>> es.epoch(cmaengine.ff.sphere).disp()  # doctest: +ELLIPSIS
    evals: ax-ratio max(std)   f-value
        7: ...

    Candidates can be evaluated concurrently and passed back in any
    order:

    >>> from concurrent.futures import ThreadPoolExecutor
    >>> es1 = cmaengine.CMAEngine(5 * [2], 1, rng=4)
    >>> es2 = cmaengine.CMAEngine(5 * [2], 1, rng=4)
    >>> shuffle = np.random.default_rng(0).permutation
    >>> with ThreadPoolExecutor(3) as executor:
    ...     for _ in range(50):
    ...         X = es1.ask()
    ...         pairs = list(zip(X, executor.map(cmaengine.ff.elli, X)))
    ...         es1.complete_generation(pairs[i] for i in shuffle(len(pairs)))
    ...         _ = es2.epoch(cmaengine.ff.elli)
    >>> assert np.array_equal(es1.xmean, es2.xmean) and es1.sigma == es2.sigma

    An evaluator which changes its argument does not change the
    candidates used for the update:

    >>> def sphere_and_clear(x):
    ...     value = cmaengine.ff.sphere(x)
    ...     x[:] = 0
    ...     return value
    >>> es1 = cmaengine.CMAEngine(3 * [1], 1, rng=9)
    >>> es2 = cmaengine.CMAEngine(3 * [1], 1, rng=9)
    >>> for _ in range(20):
    ...     _ = es1.epoch(sphere_and_clear), es2.epoch(cmaengine.ff.sphere)
    >>> assert np.array_equal(es1.xmean, es2.xmean)
    >>> assert np.array_equal(es1.best.x, es2.best.x)

    With bounds, the best solution is the reflected solution which was
    evaluated, and its value is the value of this solution:

    >>> ssc = cmaengine.SearchSpaceConfiguration([(1, 50), (1, 50)])
    >>> es = cmaengine.CMAEngine([1.2, 1.2], 2, search_space=ssc, rng=1)
    >>> for _ in range(30):
    ...     _ = es.epoch(cmaengine.ff.sphere)
    >>> xbest, fbest = es.best.solution
    >>> assert ssc.is_in_bounds(xbest) and cmaengine.ff.sphere(xbest) == fbest
    >>> assert np.array_equal(es.result.xbest, xbest)

    By default, the eigendecomposition is refreshed with each sampling,
    otherwise it is postponed by at least ``params.lazy_gap_evals``
    evaluations:

    >>> es = cmaengine.CMAEngine(4 * [1], 1, rng=1)
    >>> for _ in range(10):
    ...     X = es.ask()
    ...     assert es.C.updated_eval == es.evaluations
    ...     assert np.allclose(np.linalg.eigvalsh(es.C.C), es.C.eigenvalues)
    ...     es.tell(X, [cmaengine.ff.elli(x) for x in X])
    >>> es = cmaengine.CMAEngine(4 * [1], 1, lazy_eigendecomposition=True, rng=1)
    >>> updates = []
    >>> for _ in range(30):
    ...     X = es.ask()
    ...     updates.append(es.C.updated_eval)
    ...     es.tell(X, [cmaengine.ff.elli(x) for x in X])
    >>> assert 1 < len(set(updates)) < len(updates)
    >>> assert all(b == a or b - a > es.params.lazy_gap_evals
    ...            for a, b in zip(updates[:-1], updates[1:]))

    Incomplete generations are rejected:

    >>> X = es1.ask()
    >>> try:
    ...     es1.complete_generation([(x, 0.) for x in X[1:]])
    ... except ValueError as e:
    ...     print('ValueError')
    ValueError
    >>> try:
    ...     es1.tell(X, len(X) * [0.] + [1.])
    ... except ValueError as e:
    ...     print('ValueError')
    ValueError

    Negative weights are rescaled on a copy, the base weights remain
    unchanged:

    >>> es = cmaengine.CMAEngine(4 * [1], 1, active=True, rng=6)
    >>> w = list(es.params.weights)
    >>> assert w[-1] < 0 < w[0]
    >>> for _ in range(200):
    ...     _ = es.epoch(lambda x: cmaengine.ff.elli(x, cond=1e3))
    >>> assert list(es.params.weights) == w
    >>> assert es.result.fbest < 1e-4

    Invalid configurations:

    >>> for args, kwargs in [(([], 1), {}),
    ...                      (([1, 2], 0), {}),
    ...                      (([1, 2], -1), {}),
    ...                      (([1, 2], 1), {'popsize': 1}),
    ...                      (([1, float('nan')], 1), {}),
    ...                      (([1, 2], 1), {'search_space':
    ...                           cmaengine.SearchSpaceConfiguration(dimension=3)})]:
    ...     try:
    ...         cmaengine.CMAEngine(*args, **kwargs)
    ...     except cmaengine.ConfigurationError:
    ...         pass
    ...     else:
    ...         raise AssertionError((args, kwargs))
    >>> for args in [(None, [1, 0]), (None, [1, -2]), ([(2, 1)],),
    ...              ([(1, 2)], [1, 1]), ([(1, 2)], None, 'penalty'), ()]:
    ...     try:
    ...         cmaengine.SearchSpaceConfiguration(*args)
    ...     except cmaengine.ConfigurationError:
    ...         pass
    ...     else:
    ...         raise AssertionError(args)

    A covariance matrix which is not positive definite raises and keeps
    its previous eigendecomposition:

    >>> C = cmaengine.CovarianceMatrix(2)
    >>> _ = C.addouter([1, 1], -1)  # now C == [[0, -1], [-1, 0]]
    >>> try:
    ...     C.update_eigensystem(1)
    ... except cmaengine.NumericalBreakdownError:
    ...     print('breakdown')
    breakdown
    >>> C.eigenvalues.tolist(), C.updated_eval
    ([1.0, 1.0], 0)

    After a breakdown, the engine continues from its last checkpoint:

    >>> es = cmaengine.CMAEngine(2 * [1], 1, rng=2)
    >>> blob = checkpoint.dumps(es)
    >>> _ = es.C.multiply_with(-1)
    >>> try:
    ...     es.ask()
    ... except cmaengine.NumericalBreakdownError:
    ...     print('breakdown')
    breakdown
    >>> len(es.restore(blob).ask())
    6

    A checkpoint written to a file continues the very same run, here
    with scaling, bounds and negative weights:

    >>> import os, tempfile
    >>> ssc = cmaengine.SearchSpaceConfiguration([(-2, 2), None, (0, None)],
    ...                                          [1, 10, 1])
    >>> es = cmaengine.CMAEngine([1, 0.1, 1], 0.5, search_space=ssc,
    ...                          active=True, rng=7)
    >>> f = cmaengine.ff.AckleyEvaluator()
    >>> for _ in range(10):
    ...     _ = es.epoch(f)
    >>> filename = os.path.join(tempfile.mkdtemp(), 'checkpoint.cma')
    >>> es.save(filename) is es
    True
    >>> es2 = cmaengine.CMAEngine.from_checkpoint(filename)
    >>> for _ in range(10):
    ...     _ = es.epoch(f), es2.epoch(f)
    >>> assert np.array_equal(es.xmean, es2.xmean) and es.sigma == es2.sigma
    >>> assert es.result.fbest == es2.result.fbest
    >>> assert checkpoint.dumps(es) == checkpoint.dumps(es2)
    >>> os.remove(filename)

    A failed load leaves the instance unchanged:

    >>> state = checkpoint.dumps(es)
    >>> d = checkpoint.to_dict(es)
    >>> corrupted = [dict(d, maxfevals='x'),
    ...              dict(d, best=dict(d['best'], evals='x'))]
    >>> for blob in [b"{'format': 'cmaengine-checkpoint', 'version': 1}",
    ...              state.replace(b"'version': 1", b"'version': 2"),
    ...              state[:100], b'\\xff\\xfe', b'[1, 2]',
    ...              ] + [repr(c).encode('utf-8') for c in corrupted]:
    ...     try:
    ...         es.restore(blob)
    ...     except cmaengine.CheckpointError:
    ...         pass
    ...     else:
    ...         raise AssertionError(blob)
    >>> try:
    ...     es.restore(filename)  # was removed
    ... except FileNotFoundError:
    ...     print('not found')
    not found
    >>> assert checkpoint.dumps(es) == state
    >>> es.restore(state) is es
    True

    Non-finite values survive a checkpoint:

    >>> es = cmaengine.CMAEngine(2 * [1], 1, ftarget=-np.inf, rng=3)
    >>> X = es.ask()
    >>> es.tell(X, [np.inf] + [cmaengine.ff.sphere(x) for x in X[1:]])
    >>> es2 = checkpoint.loads(checkpoint.dumps(es))
    >>> es2.ftarget, es2.fitvals[-1]
    (-inf, inf)

    """

def doctest_files(file_list=files_for_doctest, **kwargs):
    """doctest all (listed) files of the `cmaengine` package.

    Details: accepts ``verbose`` and all other keyword arguments that
    `doctest.testfile` would accept, while negative ``verbose`` values
    are passed as 0.
    """
    if isinstance(file_list, (str, bytes)):
        file_list = [file_list]
    verbosity_here = kwargs.get('verbose', 0)
    if verbosity_here < 0:
        kwargs['verbose'] = 0
    failures = 0
    for file_ in file_list:
        file_ = file_.strip().strip(os.path.sep)
        if file_.startswith('cmaengine' + os.path.sep):
            file_ = file_[len('cmaengine' + os.path.sep):]
        if verbosity_here >= 0:
            print('doctesting %s ...' % file_,
                  ' ' * (max(len(_file) for _file in file_list) -
                         len(file_)),
                  end="")
            sys.stdout.flush()
        report = doctest.testfile(file_, package=__package__, **kwargs)
        failures += report[0]
        if verbosity_here >= 0:
            print(report)
    return failures

def get_version():
    try:
        with open(os.path.join(os.path.dirname(__file__), '__init__.py')) as f:
            for line in f.readlines():
                if line.startswith('__version__'):
                    return line.split('=')[1].strip().strip('"\'')
    except OSError:
        return ""
    return ""

def main(*args, **kwargs):
    """test the `cmaengine` package.

    The first argument can be '-h' or '--help' or 'list' to list all
    files to be tested. Otherwise, arguments can be file(name)s to be
    tested, where names are interpreted relative to the package root
    and a leading 'cmaengine' + path separator is ignored.

    By default all files are tested.

    :See also: ``python -c "import cmaengine.test; help(cmaengine.test)"``
    """
    if len(args) > 0:
        if args[0].startswith(('-h', '--h')):
            print(__doc__)
            sys.exit(0)
        elif args[0].startswith('list'):
            for file_ in files_for_doctest:
                print(file_)
            sys.exit(0)
    else:
        v = get_version()
        print("doctesting `cmaengine` package%s by calling `doctest_files`:"
              % ((" (v%s)" % v) if v else ""))
    return doctest_files(list(args) if args else files_for_doctest, **kwargs)

if __name__ == "__main__":
    sys.exit(main(*sys.argv[1:]) > 0)  # 0 if failures == 0 else 1
