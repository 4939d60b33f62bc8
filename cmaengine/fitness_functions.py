# -*- coding: utf-8 -*-
"""versatile container for test objective functions.

Functions accept a `list` or a `numpy` array and return a `float`. Use
the collection like ``cmaengine.ff.sphere(x)`` or, with early acceptance
of a solution close to the optimum in zero, one of the evaluator
classes:

>>> import cmaengine
>>> cmaengine.ff.sphere([1, 2])
5.0
>>> cmaengine.ff.rastrigin([0, 0]), cmaengine.ff.rosen([1, 1, 1])
(0.0, 0.0)
>>> assert abs(cmaengine.ff.ackley([0, 0])) < 1e-12
>>> assert cmaengine.ff.elli([0, 1]) == 1e6
>>> found = []
>>> f = cmaengine.ff.SphereEvaluator()([0.05, 0.05], lambda x, f: found.append(f))
>>> assert abs(f - 0.005) < 1e-12 and len(found) == 1

"""
import math
import numpy as np
from .interfaces import ObjectiveEvaluator

def elli(x, cond=1e6):
    """ellipsoid test objective function with condition number `cond`"""
    x = np.asarray(x, dtype=float)
    N = len(x)
    if N == 1:
        return float(x[0]**2)
    return float(sum(cond**(np.arange(N) / (N - 1.)) * x**2))

def sphere(x):
    """Sphere (squared norm) test objective function"""
    x = np.asarray(x, dtype=float)
    return float(sum(x**2))

class SquaredNormAcceptance(ObjectiveEvaluator):
    """evaluator of `function` which signals a found solution when the
    squared distance to the optimum in zero is below `threshold`.

    The signal passes the squared distance, not the function value.
    """
    threshold = 0.01
    function = staticmethod(sphere)

    def objective(self, x, on_solution_found):
        diff = sphere(x)  # distance from the origin is the error
        if diff < self.threshold:
            on_solution_found(x, diff)
        return self.function(x)

class FitnessFunctions(object):
    """collection of objective functions.

    """
    def sphere(self, x):
        """Sphere (squared norm) test objective function"""
        return sphere(x)

    def elli(self, x, cond=1e6):
        """Ellipsoid test objective function"""
        return elli(x, cond)

    def rosen(self, x, alpha=1e2):
        """Rosenbrock test objective function"""
        x = np.asarray(x, dtype=float)
        return float(sum(alpha * (x[:-1]**2 - x[1:])**2 + (1. - x[:-1])**2))

    def rastrigin(self, x):
        """Rastrigin test objective function"""
        x = np.asarray(x, dtype=float)
        N = len(x)
        return float(10 * N + sum(x**2 - 10 * np.cos(2 * np.pi * x)))

    def ackley(self, x):
        """Ackley test objective function, zero in zero in any dimension

        >>> from cmaengine.fitness_functions import ff
        >>> assert all(abs(ff.ackley(n * [0])) < 1e-12 for n in (1, 2, 3, 10))
        >>> assert ff.ackley([2, 0, 0]) > ff.ackley([1, 0, 0]) > 0

        """
        x = np.asarray(x, dtype=float)
        return float(-20 * math.exp(-0.2 * np.mean(x**2)**0.5)
                     - math.exp(np.mean(np.cos(2 * np.pi * x)))
                     + math.e + 20)

    class SphereEvaluator(SquaredNormAcceptance):
        """sphere, accepting a squared norm below 0.01"""
        threshold = 0.01
        function = staticmethod(sphere)

    class RastriginEvaluator(SquaredNormAcceptance):
        """Rastrigin function, accepting a squared norm below 0.1"""
        threshold = 0.1

        def function(self, x):
            return ff.rastrigin(x)

    class AckleyEvaluator(SquaredNormAcceptance):
        """Ackley function, accepting a squared norm below 0.1"""
        threshold = 0.1

        def function(self, x):
            return ff.ackley(x)

ff = FitnessFunctions()

SphereEvaluator = FitnessFunctions.SphereEvaluator
RastriginEvaluator = FitnessFunctions.RastriginEvaluator
AckleyEvaluator = FitnessFunctions.AckleyEvaluator
