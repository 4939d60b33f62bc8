# -*- coding: utf-8 -*-
"""`RecombinationWeights` is a list of recombination weights for the CMA-ES.

By default only the best ``mu = lambda // 2`` solutions get a (positive)
weight, all others get zero weight. With ``active=True``, the worse
solutions get negative weights which must be finalized depending on
learning rates to prevent negative definite matrices when using the
weights in the covariance matrix update.

The dependency chain is

lambda -> weights -> mueff -> c1, cmu -> negative weights

"""
import math
from .interfaces import ConfigurationError
from .utilities.utils import print_warning

class RecombinationWeights(list):
    """a list of decreasing (recombination) weight values.

    To be used in the update of the covariance matrix C in CMA-ES as
    ``w_i``::

        C <- (1 - c1 - cmu * sum w_i) C + c1 ... + cmu sum w_i y_i y_i^T

    The raw weights are ``log(mu + 1/2) - log(i + 1)`` for ``i = 0, ...,
    lambda - 1``, the positive ones are normalized to sum to one.

    Class attributes/properties:

    - ``lambda_``: number of weights, alias for ``len(self)``
    - ``mu``: number of strictly positive weights, i.e.
      ``sum([wi > 0 for wi in self])``
    - ``mueff``: variance effective number of positive weights, i.e.
      ``1 / sum([self[i]**2 for i in range(self.mu)])`` where
      ``1 == sum([self[i] for i in range(self.mu)])**2``
    - `mueffminus`: variance effective number of negative weights
    - ``finalized``: `True` if class instance is ready to use

    Usage:

    >>> from cmaengine.recombination_weights import RecombinationWeights
    >>> weights = RecombinationWeights(7)
    >>> print('weights = [%s]' % ', '.join("%.2f" % w for w in weights))
    weights = [0.64, 0.28, 0.08, 0.00, 0.00, 0.00, 0.00]
    >>> weights.mu, weights.finalized
    (3, True)
    >>> assert abs(sum(weights[:weights.mu]) - 1) < 1e-9
    >>> assert 1 <= weights.mueff <= weights.mu

    With negative weights, the decay ``c1 + cmu * sum(w)`` does not
    become negative after finalization and the sum of negative weights
    respects the positive definiteness limit:

    >>> dimension = 5
    >>> weights = RecombinationWeights(7, active=True)
    >>> weights.finalized
    False
    >>> c1 = 2. / ((dimension + 1.3)**2 + weights.mueff)
    >>> cmu = 2 * (weights.mueff - 2 + 1 / weights.mueff) / (
    ...             (dimension + 2)**2 + weights.mueff)
    >>> weights.finalize_negative_weights(dimension, c1, cmu)
    >>> assert weights[-1] < weights[weights.mu] < 0
    >>> assert c1 + cmu * sum(weights) > -1e-9
    >>> assert -sum(weights[weights.mu:]) <= (1 - c1 - cmu) / cmu / dimension

    Reference: Hansen 2016, arXiv:1604.00772.
    """
    def __init__(self, len_, active=False):
        """return recombination weights `list`, post condition is
        ``sum(self[:self.mu]) == 1``.

        Without `active`, weights beyond ``mu`` are zero and the instance
        is finalized. Otherwise negative weights sum to -1 and
        `finalize_negative_weights` should be called to finalize them.

        :param `len_`: AKA ``lambda`` is the number of weights, see
            attribute `lambda_` which is an alias for ``len(self)``.
            Alternatively, a list of "raw" weights can be provided, which
            are taken as is, apart from normalization.

        """
        weights = len_
        try:
            len_ = len(weights)
        except TypeError:  # create from scratch
            len_ = int(weights)
            mu = len_ // 2
            weights = [math.log(mu + 0.5) - math.log(i + 1)
                       for i in range(len_)]  # raw shape
            if not active:
                weights = [w if i < mu else 0 for i, w in enumerate(weights)]
        if len_ < 2:
            raise ConfigurationError("number of weights must be >=2, was %d"
                                     % (len_))
        list.__init__(self, [float(w) for w in weights])
        self.set_attributes_from_weights(do_asserts=False)
        sum_neg = sum(self[self.mu:])
        if sum_neg != 0:
            for i in range(self.mu, len(self)):
                self[i] /= -sum_neg
        self.do_asserts()
        self.finalized = self[-1] == 0

    @classmethod
    def from_values(cls, values):
        """return finalized weights with exactly the given `values`,
        without any renormalization, as needed to restore a checkpoint.
        """
        weights = cls.__new__(cls)
        list.__init__(weights, [float(w) for w in values])
        if len(weights) < 2:
            raise ConfigurationError("number of weights must be >=2, was %d"
                                     % len(weights))
        weights.mu = sum(w > 0 for w in weights)
        weights.mueff = sum(weights[:weights.mu])**2 / sum(
            w**2 for w in weights[:weights.mu])
        weights.do_asserts()
        weights.finalized = True
        return weights

    def set_attributes_from_weights(self, do_asserts=True):
        """make the class attribute values consistent with the weights,
        post condition is also ``sum(self[:self.mu]) == 1``.

        Weights must be non-increasing and the first weight must be
        strictly positive and the last weight not larger than zero.
        """
        weights = self
        if not weights[0] > 0:
            raise ConfigurationError(
                "the first weight must be >0 but was %f" % weights[0])
        if weights[-1] > 0:
            raise ConfigurationError(
                "the last weight must be <=0 but was %f" % weights[-1])
        if any(weights[i] < weights[i+1] for i in range(len(weights) - 1)):
            raise ConfigurationError("weights must be non-increasing")
        self.mu = sum(w > 0 for w in weights)
        spos = sum(weights[:self.mu])
        for i in range(len(self)):
            self[i] /= spos
        # variance-effectiveness of sum^mu w_i x_i
        self.mueff = sum(weights[:self.mu])**2 / sum(w**2 for w in
                                                      weights[:self.mu])
        not do_asserts or self.do_asserts()
        return self

    def finalize_negative_weights(self, dimension, c1, cmu, pos_def=True):
        """finalize negative weights using ``dimension`` and learning
        rates ``c1`` and ``cmu``.

        The negative weights are scaled to achieve in this order:

        1. zero decay, i.e. ``c1 + cmu * sum w == 0``,
        2. a learning rate respecting mueff, i.e. ``sum |w|^- / sum |w|^+
           <= 1 + 2 * self.mueffminus / (self.mueff + 2)``,
        3. if `pos_def` guaranty positive definiteness when sum w^+ = 1
           and all negative input vectors used later have at most their
           dimension as squared Mahalanobis norm. This is accomplished by
           setting ``sum |w|^- <= (1 - c1 -cmu) / dimension / cmu``.

        To guaranty 3., the input vectors associated to negative weights
        must obey ||.||^2 <= dimension in Mahalanobis norm, which is what
        the per-iteration rescaling in `CMAEngine.complete_generation`
        achieves.
        """
        if dimension <= 0:
            raise ConfigurationError("dimension must be larger than zero,"
                                     " was " + str(dimension))
        if self[-1] < 0:
            if cmu > 0:
                if c1 > 10 * cmu:
                    print_warning("c1/cmu = %f/%f seems to assume a too large"
                                  " value for negative weights setting"
                                  % (c1, cmu), 'finalize_negative_weights',
                                  'RecombinationWeights')
                self._negative_weights_set_sum(1 + c1 / cmu)
                if pos_def:
                    self._negative_weights_limit_sum((1 - c1 - cmu) / cmu
                                                     / dimension)
            self._negative_weights_limit_sum(1 + 2 * self.mueffminus
                                             / (self.mueff + 2))
        self.do_asserts()
        self.finalized = True

    def _negative_weights_set_sum(self, value):
        """set sum of negative weights to ``-abs(value)``"""
        weights = self
        value = abs(value)
        factor = abs(value / sum(weights[self.mu:]))
        for i in range(self.mu, self.lambda_):
            weights[i] *= factor

    def _negative_weights_limit_sum(self, value):
        """lower bound the sum of negative weights to ``-abs(value)``."""
        weights = self
        value = abs(value)
        if sum(weights[self.mu:]) >= -value:  # nothing to limit
            return  # needed when sum is zero
        factor = abs(value / sum(weights[self.mu:]))
        if factor < 1:
            for i in range(self.mu, self.lambda_):
                weights[i] *= factor

    def do_asserts(self):
        """assert consistency of ``lambda_, mu, mueff``, of the first and
        last weight, of monotonicity and of the sum of positive weights.
        """
        weights = self
        assert 1 >= weights[0] > 0
        assert weights[-1] <= 0
        assert all(weights[i] >= weights[i+1]
                        for i in range(len(weights) - 1))  # monotony
        assert self.mu > 0  # needed for next assert
        assert weights[self.mu-1] > 0 >= weights[self.mu]
        assert 0.999 < sum(w for w in weights[:self.mu]) < 1.001
        assert 1 - 1e-9 < self.mueff < self.mu + 1e-9

    @property
    def lambda_(self):
        """alias for ``len(self)``"""
        return len(self)
    @property
    def mueffminus(self):
        weights = self
        sneg = sum(weights[self.mu:])
        return (0 if sneg == 0 else
                sneg**2 / sum(w**2 for w in weights[self.mu:]))
