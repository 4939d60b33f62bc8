# -*- coding: utf-8 -*-
"""Package `cmaengine` implements the CMA-ES (Covariance Matrix Adaptation
Evolution Strategy) as an engine with explicit sampling and update steps.

CMA-ES is a stochastic optimizer for robust non-linear non-convex
derivative- and function-value-free numerical optimization. It searches
for a minimizer of an objective function f, such that f(x) is minimal,
by sampling from a multivariate normal distribution whose mean, step-size
and covariance matrix are adapted from the ranking of the sampled
candidate solutions.

The engine, class `CMAEngine` (alias `CMAES`), provides

- `CMAEngine.sample_generation` (alias `ask`) to get lambda candidate
  solutions,
- `CMAEngine.complete_generation` (or `tell`) to pass back the evaluated
  candidates in any order,
- `CMAEngine.epoch` to do both with a given objective evaluator,

such that the evaluation of candidates remains entirely with the user,
for example concurrently. Coordinate-wise scaling and box constraints are
given with a `SearchSpaceConfiguration`. The entire state can be written
to and restored from a checkpoint, see `cmaengine.checkpoint`.

The implementation relies on `numpy`.

Testing
=======
From the system shell::

    python -m cmaengine.test
    python -m pytest  # runs all doctests as configured in setup.cfg

Example
=======
From a python shell::

    import cmaengine
    es = cmaengine.CMAEngine(8 * [1], 0.5).optimize(cmaengine.ff.elli)
    es.result[0]  # best evaluated solution
    es.result[5]  # mean solution, presumably better with noise

    es = cmaengine.CMAEngine(3 * [3], 3.0, rng=1)
    found = []
    while not found and not es.stop():
        es.epoch(cmaengine.ff.SphereEvaluator(),
                 lambda x, f: found.append((x, f)))
    es.save('checkpoint.cma')  # continue later with
    es = cmaengine.CMAEngine.from_checkpoint('checkpoint.cma')


"""
__author__ = "cmaengine authors"
__license__ = "BSD 3-clause"

from . import (boundary_handler, checkpoint, evolution_strategy,
               fitness_functions, interfaces, recombination_weights,
               sampler)
from .fitness_functions import ff
from .boundary_handler import SearchSpaceConfiguration
from .evolution_strategy import (CMAEngine, CMAES, CMAESParameters,
                                 CMAEngineResult, EvaluatedSolution,
                                 population_size)
from .interfaces import (ObjectiveEvaluator, FunctionEvaluator,
                         ConfigurationError, NumericalBreakdownError,
                         CheckpointError)
from .sampler import CovarianceMatrix

__version__ = "1.0.0"
