# -*- coding: utf-8 -*-
"""CMA-ES, Covariance Matrix Adaptation Evolution Strategy, as an engine
with explicit sampling and update steps.

The main functionality is implemented in class `CMAEngine`, where

- `CMAEngine.sample_generation` (AKA `ask`) samples lambda candidate
  solutions from the current search distribution,
- `CMAEngine.complete_generation` (or `tell`) updates all distribution
  parameters from the evaluated candidates, and
- `CMAEngine.epoch` does both, evaluating the candidates in between.

Static "strategy" parameters are set in `CMAESParameters`.

The engine does not evaluate anything on its own unless `epoch` or
`optimize` is called, hence candidates may be evaluated in any order and
concurrently by the caller:

>>> from concurrent.futures import ThreadPoolExecutor
>>> import cmaengine
>>> es = cmaengine.CMAEngine(4 * [1], 0.5, rng=3)
>>> with ThreadPoolExecutor(4) as executor:
...     for _ in range(100):
...         X = es.ask()
...         futures = [(x, executor.submit(cmaengine.ff.sphere, x)) for x in X]
...         es.complete_generation((x, future.result()) for x, future in futures)
>>> assert es.result.fbest < 1e-3

"""
import collections
import math
import numpy as np
from . import interfaces
from .interfaces import ConfigurationError, as_objective, _pass
from .recombination_weights import RecombinationWeights
from .sampler import CovarianceMatrix
from .utilities import math as _math
from .utilities.utils import argsort, num2str, print_warning

def population_size(dimension):
    """return the default population size ``4 + floor(3 * ln(dimension))``

    >>> from cmaengine.evolution_strategy import population_size
    >>> [population_size(n) for n in (1, 2, 3, 10, 100)]
    [4, 6, 7, 10, 17]

    """
    return 4 + int(math.floor(3 * math.log(dimension)))

EvaluatedSolution = collections.namedtuple('EvaluatedSolution',
                                           ['solution', 'value'])
EvaluatedSolution.__doc__ = """a solution vector and its objective function
value, lower values are better"""

class CMAEngineResult(collections.namedtuple(
    'CMAEngineResult', [
        'xbest',
        'fbest',
        'evals_best',
        'evaluations',
        'iterations',
        'xfavorite',
        'stds',
    ])):
    """A results tuple from `CMAEngine` property ``result``.

    This tuple contains in the given position and as attribute

    - 0 ``xbest`` best solution evaluated
    - 1 ``fbest`` objective function value of best solution
    - 2 ``evals_best`` evaluation count when ``xbest`` was evaluated
    - 3 ``evaluations`` evaluations overall done
    - 4 ``iterations``
    - 5 ``xfavorite`` distribution mean in external coordinates, to be
      considered as current best estimate of the optimum
    - 6 ``stds`` effective standard deviations in external coordinates

    """

class BestSolution(object):
    """container to keep track of the best solution seen"""
    def __init__(self, x=None, f=None, evals=None):
        """take `x`, `f`, and `evals` to initialize the best solution
        """
        self.x, self.f, self.evals = x, f, evals

    def update(self, x, f, evals=None):
        """update the best solution if ``f < self.f``
        """
        if self.f is None or f < self.f:
            self.x = x
            self.f = f
            self.evals = evals
        return self

    @property
    def solution(self):
        """best-ever `EvaluatedSolution` or `None`"""
        if self.f is None:
            return None
        return EvaluatedSolution(self.x, self.f)

class CMAESParameters(object):
    """static "internal" parameter setting for `CMAEngine`

    >>> from cmaengine.evolution_strategy import CMAESParameters
    >>> par = CMAESParameters(3, 7)
    >>> par.mu, len(par.weights)
    (3, 7)
    >>> assert abs(sum(par.weights) - 1) < 1e-9
    >>> assert 0 < par.c1 + par.cmu < 1 and par.cc < 1 and par.cs < 1
    >>> assert par.lazy_gap_evals > 0

    """
    def __init__(self, N, popsize=None, active=False):
        """set static, fixed "strategy" parameters once and for all.

        With `active`, negative weights are finalized here, because they
        depend on the learning rates.
        """
        self.dimension = N
        # Strategy parameter setting: Selection
        self.lam = population_size(N) if popsize is None else popsize
        if int(self.lam) != self.lam or self.lam < 2:
            raise ConfigurationError("population size must be an integer"
                                     " >= 2, was %s" % str(popsize))
        self.lam = int(self.lam)
        self.mu = self.lam // 2  # number of parents/points/solutions for recombination
        self.active = active
        self.weights = RecombinationWeights(self.lam, active=active)
        self.mueff = self.weights.mueff  # variance-effectiveness of sum w_i x_i

        # Strategy parameter setting: Adaptation
        self.cc = (4 + self.mueff/N) / (N+4 + 2 * self.mueff/N)  # time constant for cumulation for C
        self.cs = (self.mueff + 2) / (N + self.mueff + 5)  # time constant for cumulation for sigma control
        self.c1 = 2 / ((N + 1.3)**2 + self.mueff)  # learning rate for rank-one update of C
        self.cmu = min([1 - self.c1, 2 * (self.mueff - 2 + 1/self.mueff) / ((N + 2)**2 + self.mueff)])  # and for rank-mu update
        self.damps = 2 * self.mueff/self.lam + 0.3 + self.cs  # damping for sigma, usually close to 1

        if active:
            self.weights.finalize_negative_weights(N, self.c1, self.cmu)
        # gap to postpone eigendecomposition to achieve O(N**2) per eval
        # 0.5 is chosen such that eig takes 2 times the time of tell in >=20-D
        self.lazy_gap_evals = 0.5 * N * self.lam * (self.c1 + self.cmu)**-1 / N**2

class CMAEngine(interfaces.OOOptimizer):
    """class for non-linear non-convex numerical minimization with CMA-ES.

    The class implements the interface defined in `OOOptimizer`, namely
    the methods `ask`, `tell`, `epoch`, `stop`, `disp` and property
    `result`.

    Examples
    --------

    A run with the explicit loop, where the evaluator signals when it
    considers a solution good enough:

    >>> import cmaengine
    >>> es = cmaengine.CMAEngine(3 * [2], 3.0, rng=5)
    >>> found = []
    >>> while not found and es.countiter < 1000:
    ...     _ = es.epoch(cmaengine.ff.SphereEvaluator(),
    ...                  lambda x, f: found.append(cmaengine.EvaluatedSolution(x, f)))
    >>> assert found and found[0].value < 0.01
    >>> assert es.best.solution.value <= found[0].value

    Bounded search with scaled coordinates, where the objective function
    never sees an out-of-bounds solution:

    >>> ssc = cmaengine.SearchSpaceConfiguration(
    ...           bounds=[(1, 50), None, (1, 50)], scaling_factors=[1, 1, 10])
    >>> es = cmaengine.CMAEngine([3, 3, 3], 1.2, search_space=ssc, rng=2)
    >>> def fun(x):
    ...     assert ssc.is_in_bounds(x)
    ...     return cmaengine.ff.sphere(x)
    >>> for _ in range(200):
    ...     _ = es.epoch(fun)
    >>> xbest, fbest = es.result[:2]
    >>> assert 2 < fbest < 2.01 and es.evaluations == 200 * es.params.lam

    The best solution is kept as it was evaluated:

    >>> xbest, fbest = es.best.solution
    >>> assert ssc.is_in_bounds(xbest) and fun(xbest) == fbest

    Details
    -------
    Most of the work is done in the method `complete_generation`. The
    property `result` contains more useful output.

    :See: `OOOptimizer.optimize`
    """
    def __init__(self, xstart, sigma,
                 popsize=None,
                 search_space=None,
                 lazy_eigendecomposition=False,
                 active=False,
                 ftarget=None,
                 maxfevals=None,
                 rng=None):
        """Instantiate `CMAEngine` object instance using `xstart` and `sigma`.

        Parameters
        ----------
            `xstart`: `list`
                of numbers (like ``[3, 2, 1.2]``), initial solution
                vector in external coordinates, its length defines the
                search space dimension
            `sigma`: `float`
                initial step-size (standard deviation in each internal
                coordinate)
            `popsize`: `int`
                population size, number of candidate samples per
                iteration, by default ``population_size(len(xstart))``
            `search_space`: `SearchSpaceConfiguration`
                scaling and bounds, `None` means no scaling and no bounds
            `lazy_eigendecomposition`: `bool`
                if `True`, the eigendecomposition of the covariance
                matrix is postponed until ``params.lazy_gap_evals``
                evaluations have passed since the last decomposition,
                which makes an iteration O(N**2) per evaluation. By
                default the decomposition is refreshed in each iteration.
            `active`: `bool`
                use negative recombination weights for the worse half of
                the population in the covariance matrix update
            `ftarget`: `float`
                target function value to `stop`
            `maxfevals`: `int`
                maximal number of function evaluations to `stop`
            `rng`: `numpy.random.Generator` or `int` or `None`
                generator for all random draws, an `int` is used as seed

        Raise `ConfigurationError` on inconsistent input.
        """
        # process input parameters and set static parameters
        xstart = np.array(xstart, dtype=float)
        if xstart.ndim != 1 or len(xstart) < 1:
            raise ConfigurationError("xstart must be a non-empty vector,"
                                     " was %s" % str(xstart))
        if not np.all(np.isfinite(xstart)):
            raise ConfigurationError("xstart must be finite, was %s"
                                     % str(xstart.tolist()))
        N = len(xstart)  # number of objective variables/problem dimension
        if search_space is not None and len(search_space) != N:
            raise ConfigurationError("search space dimension %d differs"
                                     " from len(xstart)=%d"
                                     % (len(search_space), N))
        if not sigma > 0 or not np.isfinite(sigma):
            raise ConfigurationError("sigma must be positive, was %s"
                                     % str(sigma))
        self.params = CMAESParameters(N, popsize, active)
        self.search_space = search_space
        self.lazy_eigendecomposition = lazy_eigendecomposition
        self.ftarget = ftarget  # stop if fitness <= ftarget
        self.maxfevals = maxfevals if maxfevals is not None else int(
            100 * self.params.lam + 150 * (N + 3)**2 * self.params.lam**0.5)
        self.rng = np.random.default_rng(rng)

        # initializing dynamic state variables
        self.xmean = self.encode(xstart)  # initial point, distribution mean, a copy
        self.sigma = float(sigma)
        self.pc = np.zeros(N)  # evolution path for C
        self.ps = np.zeros(N)  # and for sigma
        self.C = CovarianceMatrix(N)  # covariance matrix
        self.counteval = 0  # countiter should be equal to counteval / lam
        self.fitvals = []   # for bookkeeping output and termination
        self.best = BestSolution()

    @property
    def dimension(self):
        return self.params.dimension

    @property
    def popsize(self):
        return self.params.lam

    @property
    def evaluations(self):
        return self.counteval

    @property
    def countiter(self):
        """number of completed iterations"""
        return self.counteval // self.params.lam

    def encode(self, x):
        """return internal representation of external solution `x`"""
        if self.search_space is None:
            return np.array(x, dtype=float)
        return self.search_space.encode(x)

    def decode(self, x):
        """return external representation of internal solution `x`"""
        if self.search_space is None:
            return np.array(x, dtype=float)
        return self.search_space.decode(x)

    def repair(self, x):
        """return the version of external solution `x` to be evaluated,
        reflected into bounds if there are any."""
        if self.search_space is None or not self.search_space.has_bounds():
            return np.array(x, dtype=float)
        y = self.search_space.reflect(x)
        if not self.search_space.is_in_bounds(y):
            print_warning("reflected solution %s is still out of bounds"
                          % str(y.tolist()), 'repair', 'CMAEngine',
                          self.countiter)
        return y

    def sample_generation(self):
        """sample lambda candidate solutions

        distributed according to::

            m + sigma * Normal(0,C) = m + sigma * B * D * Normal(0,I)
                                    = m + B * D * sigma * Normal(0,I)

        and return a `list` of the sampled "vectors" in external
        coordinates.

        >>> import cmaengine
        >>> es = cmaengine.CMAEngine(5 * [1], 2, rng=1)
        >>> X = es.sample_generation()
        >>> len(X) == es.popsize == 8 and all(len(x) == 5 for x in X)
        True

        Raise `NumericalBreakdownError` if the covariance matrix is
        not positive definite.
        """
        self.C.update_eigensystem(self.counteval,
                                  self.params.lazy_gap_evals
                                  if self.lazy_eigendecomposition else 0)
        ary = self.C.sample(self.params.lam, self.sigma, self.rng)
        return [self.decode(self.xmean + y) for y in ary]

    ask = sample_generation

    def complete_generation(self, evaluated_solutions):
        """update the evolution paths and the distribution parameters m,
        sigma, and C within CMA-ES.

        Parameters
        ----------
            `evaluated_solutions`: iterable of ``(x, f)`` pairs
                exactly lambda candidate solutions ``x`` in external
                coordinates, presumably from calling `sample_generation`,
                together with their objective function values ``f``, to
                be minimized. The order of the pairs is irrelevant.

        >>> import cmaengine
        >>> es = cmaengine.CMAEngine(3 * [1], 1, rng=1)
        >>> X = es.ask()
        >>> es.complete_generation([(x, sum(x**2)) for x in X])
        >>> es.evaluations == es.popsize == 7
        True
        >>> sorted(es.fitvals) == es.fitvals
        True

        """
        evaluated = list(evaluated_solutions)
        par = self.params
        N = par.dimension
        if len(evaluated) != par.lam:
            raise ValueError("exactly lambda=%d evaluated solutions are"
                             " needed, got %d" % (par.lam, len(evaluated)))
        X = [np.array(x, dtype=float) for x, _ in evaluated]
        fitvals = [float(f) for _, f in evaluated]
        if any(x.shape != (N,) for x in X):
            raise ValueError("all solutions must have dimension %d, got %s"
                             % (N, str([x.shape for x in X])))

        ### bookkeeping and convenience short cuts
        self.counteval += len(fitvals)  # evaluations used within tell
        xold = self.xmean  # not a copy, xmean is assigned anew later

        ### Sort by fitness
        idx = argsort(fitvals)
        arx = [self.encode(X[k]) for k in idx]  # sorted internal solutions
        self.fitvals = sorted(fitvals)  # used for termination and display only
        self.best.update(self.repair(X[idx[0]]), self.fitvals[0], self.counteval)

        ### recombination, compute new weighted mean value
        self.xmean = _math.dot(arx[0:par.mu], par.weights[:par.mu], transpose=True)

        ### Cumulation: update evolution paths
        y = _math.minus(self.xmean, xold)
        z = _math.dot(self.C.invsqrt, y)  # == C**(-1/2) * (xnew - xold)
        csn = (par.cs * (2 - par.cs) * par.mueff)**0.5 / self.sigma
        self.ps = (1 - par.cs) * self.ps + csn * z
        ccn = (par.cc * (2 - par.cc) * par.mueff)**0.5 / self.sigma
        # turn off rank-one accumulation when sigma increases quickly
        hsig = (_math.sum_of_squares(self.ps) / N  # ||ps||^2 / N is 1 in expectation
                / (1-(1-par.cs)**(2*self.counteval/par.lam))  # account for initial value of ps
                < 2 + 4./(N+1))  # should be smaller than 2 + ...
        self.pc = (1 - par.cc) * self.pc + ccn * hsig * y

        ### Adapt covariance matrix C
        # minor adjustment for the variance loss from hsig
        c1a = par.c1 * (1 - (1-hsig**2) * par.cc * (2-par.cc))
        weights = list(par.weights)  # negative weights are rescaled in this copy
        self.C.multiply_with(1 - c1a - par.cmu * sum(weights))  # C *= 1 - c1 - cmu * sum(w)
        self.C.addouter(self.pc, par.c1)  # C += c1 * pc * pc^T, so-called rank-one update
        for k, wk in enumerate(weights):  # so-called rank-mu update
            if wk == 0:
                continue
            dx = _math.minus(arx[k], xold)
            if wk < 0:  # guaranty positive definiteness
                wk *= N * (self.sigma / self.C.mahalanobis_norm(dx))**2
                weights[k] = wk
            self.C.addouter(dx,  # C += wk * cmu * dx * dx^T
                            wk * par.cmu / self.sigma**2)

        ### Adapt step-size sigma
        cn, sum_square_ps = par.cs / par.damps, _math.sum_of_squares(self.ps)
        self.sigma *= math.exp(min(1, cn * (sum_square_ps / N - 1) / 2))

    def tell(self, solutions, function_values):
        """`complete_generation` with solutions and their function values
        passed as two lists of the same length"""
        if len(solutions) != len(function_values):
            raise ValueError("%d solutions but %d function values"
                             % (len(solutions), len(function_values)))
        self.complete_generation(zip(solutions, function_values))

    def epoch(self, evaluator, on_solution_found=None):
        """sample, evaluate and update, that is, one iteration.

        `evaluator` is an `ObjectiveEvaluator` or a plain function
        ``f(x) -> float``. It is called with each candidate solution,
        reflected into the bounds of the `search_space` if necessary,
        while the update uses the unreflected candidates.

        ``on_solution_found(x, f)`` is handed to the evaluator, which may
        call it to signal that it considers ``x`` good enough. The engine
        does not act upon the signal.

        Return `self`.
        """
        objective = as_objective(evaluator)
        on_solution_found = on_solution_found or _pass
        X = self.sample_generation()
        fitvals = [objective(self.repair(x), on_solution_found) for x in X]
        self.complete_generation(zip(X, fitvals))
        return self

    def stop(self):
        """return satisfied termination conditions in a dictionary,

        generally speaking like ``{'termination_reason':value, ...}``,
        for example ``{'tolfun':1e-12}``, or the empty `dict` ``{}``.
        """
        res = {}
        if self.counteval <= 0:
            return res
        if self.counteval >= self.maxfevals:
            res['maxfevals'] = self.maxfevals
        if self.ftarget is not None and len(self.fitvals) > 0 \
                and self.fitvals[0] <= self.ftarget:
            res['ftarget'] = self.ftarget
        if self.C.condition_number > 1e14:
            res['condition'] = self.C.condition_number
        if len(self.fitvals) > 1 \
                and self.fitvals[-1] - self.fitvals[0] < 1e-12:
            res['tolfun'] = 1e-12
        if self.sigma * max(self.C.eigenvalues)**0.5 < 1e-11:
            # remark: max(D) >= max(diag(C))**0.5
            res['tolx'] = 1e-11
        return res

    @property
    def result(self):
        """a `CMAEngineResult` named tuple ``(xbest, f(xbest),
        evaluations_xbest, evaluations, iterations, xfavorite, stds)``

        ``xbest`` is the solution as it was evaluated, that is, reflected
        into the bounds if necessary, while the distribution is updated
        with the unreflected candidate.
        """
        stds = self.sigma * self.C.diag**0.5
        if self.search_space is not None:
            stds = stds / self.search_space.scaling_factors
        return CMAEngineResult(self.best.x,
                               self.best.f,
                               self.best.evals,
                               self.counteval,
                               self.countiter,
                               self.decode(self.xmean),
                               stds)

    def disp(self, verb_modulo=1):
        """`print` some iteration info to `stdout` every `verb_modulo`
        iteration, nothing if `verb_modulo` is `None` or zero
        """
        if not verb_modulo:
            return
        iteration = self.countiter

        if iteration == 1 or iteration % (10 * verb_modulo) < 1:
            print('evals: ax-ratio max(std)   f-value')
        if iteration <= 2 or iteration % verb_modulo < 1:
            print(str(self.counteval).rjust(5) + ': ' +
                  ' %6.1f %8.1e  ' % (self.C.condition_number**0.5,
                                      self.sigma * max(self.C.diag)**0.5) +
                  (num2str(self.fitvals[0], 11) if self.fitvals else ''))

    def save(self, filename):
        """write a checkpoint of the current state to `filename`,
        see `cmaengine.checkpoint`"""
        from . import checkpoint
        checkpoint.save(self, filename)
        return self

    @classmethod
    def from_checkpoint(cls, source):
        """return a new instance from checkpoint file name or `bytes`"""
        from . import checkpoint
        if isinstance(source, (bytes, bytearray)):
            return checkpoint.loads(source)
        return checkpoint.load(source)

    def restore(self, source):
        """replace the entire state of `self` with the state of checkpoint
        `source` (file name or `bytes`).

        If reading the checkpoint fails, `self` remains unchanged.
        """
        restored = self.__class__.from_checkpoint(source)
        if not isinstance(restored, CMAEngine):
            raise TypeError("checkpoint did not describe a CMAEngine")
        self.__dict__.clear()
        self.__dict__.update(restored.__dict__)
        return self

CMAES = CMAEngine  # shortcut
