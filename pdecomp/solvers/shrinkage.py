# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Pointwise soft shrinkage for L1 regularised quadratic problems."""

import numpy as np

from pdecomp.util.exceptions import DimensionMismatchError, InvalidArgumentError

__all__ = ('soft_shrinkage',)


def _term_columns(arrays, nterms, name):
    """Return ``arrays`` as list of ``nterms`` flat float arrays."""
    if isinstance(arrays, np.ndarray) and arrays.ndim == 2:
        if arrays.shape[1] != nterms:
            raise DimensionMismatchError(
                '`{}` must have {} columns, got shape {}'
                ''.format(name, nterms, arrays.shape))
        return [arrays[:, j].astype(float) for j in range(nterms)]

    columns = [np.asarray(a, dtype=float).ravel() for a in arrays]
    if len(columns) != nterms:
        raise DimensionMismatchError('`{}` must contain {} terms, got {}'
                                     ''.format(name, nterms, len(columns)))
    return columns


def soft_shrinkage(lam, theta, design, targets):
    r"""Return the pointwise minimiser of an L1 regularised quadratic.

    Solves, independently for each index ``k``, ::

        min_x  lam[k] |x| + sum_j theta[j] (a_j[k] x - b_j[k])^2

    With ``alpha = sum_j theta[j] a_j^2`` and
    ``beta = sum_j theta[j] a_j b_j`` the quadratic part equals
    ``alpha x^2 - 2 beta x`` up to a constant, and the minimiser is given
    by the soft-shrinkage formula

    .. math::
        x = \mathrm{sign}(\beta)
            \frac{\max(|\beta| - \lambda / 2, 0)}{\alpha}.

    Parameters
    ----------
    lam : float or `array-like`
        Nonnegative regularisation weight(s), scalar or one per entry.
    theta : sequence of nonnegative floats
        Weights of the quadratic terms.
    design : sequence of `array-like` or 2-D `numpy.ndarray`
        Coefficients ``a_j``, one array per term or one column per term.
    targets : sequence of `array-like` or 2-D `numpy.ndarray`
        Targets ``b_j``, laid out like ``design``.

    Returns
    -------
    x : `numpy.ndarray`
        1-D array of minimisers.

    Raises
    ------
    InvalidArgumentError
        For negative weights.
    DimensionMismatchError
        If the sizes of the inputs do not fit.

    Examples
    --------
    With a single term ``(x - b)^2`` this is the usual soft shrinkage of
    ``b`` by ``lam / 2``:

    >>> x = soft_shrinkage(1.0, [1.0], [[1, 1, 1]], [[-2.0, 0.25, 3.0]])
    >>> print(x)
    [-1.5  0.   2.5]
    """
    theta = np.asarray(theta, dtype=float).ravel()
    if np.any(theta < 0):
        raise InvalidArgumentError('`theta` must be nonnegative, got {}'
                                   ''.format(theta))

    design = _term_columns(design, theta.size, 'design')
    targets = _term_columns(targets, theta.size, 'targets')
    size = design[0].size
    if any(a.size != size for a in design + targets):
        raise DimensionMismatchError('all terms must have the same size')

    lam = np.asarray(lam, dtype=float)
    if lam.ndim > 0:
        lam = lam.ravel()
        if lam.size != size:
            raise DimensionMismatchError('`lam` must be scalar or have size '
                                         '{}, got {}'.format(size, lam.size))
    if np.any(lam < 0):
        raise InvalidArgumentError('`lam` must be nonnegative')

    alpha = np.zeros(size)
    beta = np.zeros(size)
    for weight, a, b in zip(theta, design, targets):
        alpha += weight * a * a
        beta += weight * a * b

    # alpha == 0 implies beta == 0, the minimiser is 0 there
    shrunk = np.maximum(np.abs(beta) - lam / 2, 0)
    degenerate = (alpha == 0)

    x = np.zeros(size)
    np.divide(np.sign(beta) * shrunk, alpha, out=x, where=~degenerate)
    return x


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
