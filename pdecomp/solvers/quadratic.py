# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Minimisation of weighted sums of linear least squares terms."""

import numpy as np
import scipy.sparse
import scipy.sparse.linalg

from pdecomp.util.exceptions import DimensionMismatchError, InvalidArgumentError

__all__ = ('minimize_quadratic_energy',)


def minimize_quadratic_energy(coeffs, operators, targets):
    """Return the minimiser of ``sum_i coeffs[i] * ||A_i x - b_i||^2``.

    The minimiser is computed from the normal equations ::

        (sum_i c_i A_i^T A_i) x = sum_i c_i A_i^T b_i

    with a sparse direct solver.

    Parameters
    ----------
    coeffs : sequence of nonnegative floats
        Weights ``c_i`` of the terms. Terms with zero weight are skipped.
    operators : sequence
        Matrices ``A_i``, either sparse matrices, dense 2-D arrays or
        ``None`` for the identity.
    targets : sequence of `array-like`
        Right-hand sides ``b_i``, flattened before use.

    Returns
    -------
    x : `numpy.ndarray`
        1-D minimiser.

    Raises
    ------
    InvalidArgumentError
        If the sequences have different lengths, a coefficient is negative
        or no term has a positive weight.
    DimensionMismatchError
        If operator and target sizes do not fit.

    Examples
    --------
    The weighted mean of two targets:

    >>> x = minimize_quadratic_energy([1.0, 3.0], [None, None],
    ...                               [[0.0, 4.0], [4.0, 8.0]])
    >>> print(x)
    [3. 7.]
    """
    if not len(coeffs) == len(operators) == len(targets):
        raise InvalidArgumentError(
            'need the same number of coefficients, operators and targets, '
            'got {}, {} and {}'.format(len(coeffs), len(operators),
                                       len(targets)))

    normal_mat = None
    normal_rhs = None
    size = None
    for coeff, op, target in zip(coeffs, operators, targets):
        coeff, coeff_in = float(coeff), coeff
        if not coeff >= 0:
            raise InvalidArgumentError('coefficients must be nonnegative, '
                                       'got {}'.format(coeff_in))
        if coeff == 0:
            continue

        target = np.asarray(target, dtype=float).ravel()
        if op is None:
            op = scipy.sparse.identity(target.size, format='csr')
        else:
            op = scipy.sparse.csr_matrix(op)

        if op.shape[0] != target.size:
            raise DimensionMismatchError(
                'operator of shape {} does not fit target of size {}'
                ''.format(op.shape, target.size))
        if size is None:
            size = op.shape[1]
        elif op.shape[1] != size:
            raise DimensionMismatchError(
                'operators act on different sizes, {} and {}'
                ''.format(size, op.shape[1]))

        term_mat = coeff * op.T.dot(op)
        term_rhs = coeff * op.T.dot(target)
        if normal_mat is None:
            normal_mat, normal_rhs = term_mat, term_rhs
        else:
            normal_mat = normal_mat + term_mat
            normal_rhs = normal_rhs + term_rhs

    if normal_mat is None:
        raise InvalidArgumentError('at least one coefficient must be '
                                   'positive')

    x = scipy.sparse.linalg.spsolve(scipy.sparse.csc_matrix(normal_mat),
                                    normal_rhs)
    return np.atleast_1d(np.asarray(x, dtype=float))


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
