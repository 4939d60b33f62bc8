"""Very few interface defining base class definitions and the exception
types of `cmaengine`"""
from .utilities.utils import print_message

class ConfigurationError(ValueError):
    """invalid construction parameters, like mismatching dimensions or a
    non-positive scaling factor. Raised before any state is built."""

class NumericalBreakdownError(RuntimeError):
    """the covariance matrix lost positive definiteness or the
    eigensolver failed.

    The engine state is mathematically invalid afterwards. Catching this
    exception and restoring the last checkpoint is the way to continue.
    """

class CheckpointError(ValueError):
    """a checkpoint blob could not be parsed or does not describe a
    consistent engine state"""

def _pass(*args, **kwargs):
    """a callable that does nothing and returns `None`"""
    return None

class ObjectiveEvaluator(object):
    """abstract base class for objective functions which can signal early
    acceptance of a solution.

    Derived classes implement `objective`. The engine calls
    ``objective(x, on_solution_found)`` once for each candidate solution
    ``x``. The method returns the objective function value to be
    minimized and may call ``on_solution_found(x, value)`` to indicate
    that ``x`` is good enough. The signal is forwarded to the caller of
    `CMAEngine.epoch` and not interpreted by the engine.

    A plain `callable` ``f(x) -> float`` can be used wherever an
    `ObjectiveEvaluator` is expected, it just never signals.

    >>> from cmaengine.interfaces import ObjectiveEvaluator
    >>> class Norm1(ObjectiveEvaluator):
    ...     def objective(self, x, on_solution_found):
    ...         value = sum(abs(xi) for xi in x)
    ...         if value < 1e-3:
    ...             on_solution_found(x, value)
    ...         return value
    >>> found = []
    >>> Norm1().objective([0, 1e-4], lambda x, f: found.append(f))
    0.0001
    >>> found
    [0.0001]
    >>> Norm1()([1, -2])  # without callback
    3

    """
    def objective(self, x, on_solution_found):
        """abstract method, return the value to be minimized at `x`"""
        raise NotImplementedError('method objective() must be implemented in derived class')

    def __call__(self, x, on_solution_found=None):
        return self.objective(x, on_solution_found or _pass)

class FunctionEvaluator(ObjectiveEvaluator):
    """wrap a plain function ``f(x) -> float`` as `ObjectiveEvaluator`
    which signals a found solution when ``f(x) <= accept_below``.

    >>> from cmaengine.interfaces import FunctionEvaluator
    >>> fe = FunctionEvaluator(lambda x: x[0]**2, accept_below=0.01)
    >>> found = []
    >>> fe.objective([0.05], lambda x, f: found.append(x))
    0.0025000000000000005
    >>> fe.objective([1], lambda x, f: found.append(x))
    1
    >>> found
    [[0.05]]

    """
    def __init__(self, function, accept_below=None):
        self.function = function
        self.accept_below = accept_below

    def objective(self, x, on_solution_found):
        value = self.function(x)
        if self.accept_below is not None and value <= self.accept_below:
            on_solution_found(x, value)
        return value

def as_objective(evaluator):
    """return a callable ``objective(x, on_solution_found)`` from an
    `ObjectiveEvaluator` instance or from a plain function ``f(x)``.
    """
    if hasattr(evaluator, 'objective'):
        return evaluator.objective
    if not callable(evaluator):
        raise TypeError("evaluator must be callable or provide an"
                        " `objective` method, was %s" % str(type(evaluator)))
    def objective(x, on_solution_found):
        return evaluator(x)
    return objective

class OOOptimizer(object):
    """abstract base class for an Object Oriented Optimizer interface.

    Relevant methods are `ask`, `tell`, `epoch`, `optimize` and `stop`,
    and property `result`. Only `optimize` is fully implemented in this
    base class.

    Examples
    --------
    All examples minimize the function `elli`, the output is not shown.

    First we need::

        from cmaengine import CMAEngine
        from cmaengine.fitness_functions import ff

    The shortest example uses the inherited method
    `OOOptimizer.optimize`::

        es = CMAEngine(8 * [0.1], 0.5).optimize(ff.elli)

    We might have a look at the result::

        print(es.result[0])  # best solution and
        print(es.result[1])  # its function value

    Virtually the same example can be written with an explicit loop
    instead of using `optimize`. This gives the necessary insight into
    the `OOOptimizer` class interface and entire control over the
    iteration loop::

        optim = CMAEngine(9 * [0.5], 0.3)

        # this loop resembles optimize()
        while not optim.stop():  # iterate
            X = optim.ask()      # get candidate solutions
            f = [ff.elli(x) for x in X]  # evaluate solutions
            #  in case do something else that needs to be done
            optim.tell(X, f)     # do all the real "update" work
            optim.disp(20)       # display info every 20th iteration

        # final output
        print('termination by', optim.stop())
        print('best f-value =', optim.result[1])
        print('best solution =', optim.result[0])

    Details
    -------
    Most of the work is done in the methods `tell` or `ask`. The property
    `result` provides more useful output.

    """
    def ask(self):
        """abstract method, AKA "get" or "sample_distribution", deliver
        new candidate solution(s), a list of "vectors"
        """
        raise NotImplementedError('method ask() must be implemented in derived class')
    def tell(self, solutions, function_values):
        """abstract method, AKA "update", pass f-values and prepare for
        next iteration
        """
        raise NotImplementedError('method tell() must be implemented in derived class')
    def epoch(self, evaluator, on_solution_found=None):
        """abstract method, one iteration of ask, evaluate and tell"""
        raise NotImplementedError('method epoch() must be implemented in derived class')
    def stop(self):
        """abstract method, return satisfied termination conditions in a
        dictionary like ``{'termination reason': value, ...}`` or ``{}``.

        For example ``{'tolfun': 1e-12}``, or the empty dictionary ``{}``.
        """
        raise NotImplementedError('method stop() is not implemented')
    def disp(self, modulo=None):
        """abstract method, display some iteration info when
        ``self.iteration_counter % modulo < 1``, using a reasonable
        default for `modulo` if ``modulo is None``.
        """
    @property
    def result(self):
        """abstract property, contain ``(x, f(x), ...)``, that is, the
        minimizer, its function value, ...
        """
        raise NotImplementedError('result property is not implemented')

    def optimize(self, evaluator,
                 iterations=None, min_iterations=1,
                 verb_disp=None,
                 callback=None):
        """find minimizer of ``evaluator``.

        Arguments
        ---------

        ``evaluator``: `ObjectiveEvaluator` or f(x: array_like) -> float
            function be to minimized. When it signals a found solution,
            the loop ends after the current iteration and the solution
            is kept in attribute ``accepted_solution``.
        ``iterations``: number
            number of (maximal) iterations, while ``not self.stop()``,
            it can be useful to conduct only one iteration at a time.
        ``min_iterations``: number
            minimal number of iterations, even if ``not self.stop()``
        ``verb_disp``: number
            print to screen every ``verb_disp`` iteration, if `None`
            nothing is printed.
        ``callback``: callable or list of callables
            callback function called like ``callback(self)`` or
            a list of call back functions called in the same way.

        ``return self``, that is, the `OOOptimizer` instance.

        Example
        -------
        >>> import cmaengine
        >>> es = cmaengine.CMAEngine(3 * [1], 1, rng=1).optimize(
        ...          cmaengine.ff.sphere, iterations=200)
        >>> assert es.result[1] < 1e-8

        """
        if iterations is not None and min_iterations > iterations:
            print_message("doing min_iterations = %d > %d = iterations"
                          % (min_iterations, iterations), 'optimize',
                          self.__class__.__name__)
            iterations = min_iterations

        callback = self._prepare_callback_list(callback)
        self.accepted_solution = None
        found = []

        citer = 0
        while not self.stop() or citer < min_iterations:
            if iterations and citer >= iterations:
                return self
            citer += 1

            self.epoch(evaluator, lambda x, f: found.append((x, f)))
            for f in callback:
                f(self)
            self.disp(verb_disp)  # disp does nothing if not overwritten
            if found:
                self.accepted_solution = found[0]
                break

        if verb_disp:  # do not print by default to allow silent verbosity
            self.disp(1)
            print('termination by', self.stop() or
                  ('accepted solution' if found else {}))
            print('best f-value =', self.result[1])
            print('solution =', self.result[0])

        return self

    def _prepare_callback_list(self, callback):  # helper function
        """return a list of callbacks.

        ``callback`` can be a `callable` or a `list` (or iterable) of
        callables. Otherwise a `ValueError` exception is raised.
        """
        if callback is None:
            callback = []
        if callable(callback):
            callback = [callback]
        try:
            callback = list(callback)
            for c in callback:
                if not callable(c):
                    raise ValueError("""callback argument %s is not
                        callable""" % str(c))
        except TypeError:
            raise ValueError("""callback argument must be a `callable` or
                an iterable (e.g. a list) of callables, after some
                processing it was %s""" % str(callback))
        return callback
