# -*- coding: utf-8 -*-
"""various utilities not related to optimization"""
import warnings
import numpy as np

global_verbosity = 1

def rglen(ar):
    """return generator ``range(len(.))`` with shortcut ``rglen(.)``
    """
    return range(len(ar))

def argsort(a, reverse=False):
    """return index list to get `a` in order, ie
    ``a[argsort(a)[i]] == sorted(a)[i]``

    The sort is stable, ties keep their input order.

    >>> from cmaengine.utilities.utils import argsort
    >>> argsort([3, 1, 2, 1])
    [1, 3, 2, 0]

    """
    return sorted(range(len(a)), key=a.__getitem__, reverse=reverse)  # a.__getitem__(i) is a[i]

def num2str(val, significant_digits=2):
    """returns the shortest string representation with ``significant_digits``,
    in exponential notation for small or large absolute values.

    >>> from cmaengine.utilities.utils import num2str
    >>> num2str(0.00012345)
    '1.2e-04'
    >>> num2str(123.45)
    '1.2e+02'
    >>> num2str(1.5)
    '1.5'

    """
    if val == 0 or not np.isfinite(val):
        return str(val)
    if 1e-2 <= abs(val) < 1e2:
        return ('%.' + str(significant_digits) + 'g') % val
    return ('%.' + str(significant_digits - 1) + 'e') % val

def print_warning(msg, method_name=None, class_name=None, iteration=None,
                   verbose=None, maxwarns=None):
    """Poor man's maxwarns: warn only if ``iteration<=maxwarns``"""
    if verbose is None:
        verbose = global_verbosity
    if maxwarns is not None and iteration is None:
        raise ValueError('iteration must be given to activate maxwarns')
    if verbose >= -2 and (iteration is None or maxwarns is None or
                            iteration <= maxwarns):
        warnings.warn(msg + ' (' +
              ('class=%s ' % str(class_name) if class_name else '') +
              ('method=%s ' % str(method_name) if method_name else '') +
              ('iteration=%s' % str(iteration) if iteration else '') +
              ')')

def print_message(msg, method_name=None, class_name=None, iteration=None,
                   verbose=None):
    if verbose is None:
        verbose = global_verbosity
    if verbose >= 0:
        print('NOTE (module=cmaengine' +
              (', class=' + str(class_name) if class_name else '') +
              (', method=' + str(method_name) if method_name else '') +
              (', iteration=' + str(iteration) if iteration is not None else '') +
              '): ', msg)
