# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""One-dimensional finite difference schemes as sparse matrices."""

import numpy as np
import scipy.sparse
from scipy.special import factorial

from pdecomp.util.exceptions import (
    ConsistencyError, InvalidArgumentError, StencilError)
from pdecomp.util.utility import safe_int_conv

__all__ = ('DEFAULT_TOL', 'BOUNDARY_CONDITIONS', 'stencil_weights',
           'consistency_order', 'finite_diff_matrix')


DEFAULT_TOL = 100 * np.finfo(float).eps
BOUNDARY_CONDITIONS = ('neumann', 'dirichlet')


def normalized_boundary(boundary):
    """Return the lower-case name of ``boundary`` after checking it."""
    bc, bc_in = str(boundary).lower(), boundary
    if bc not in BOUNDARY_CONDITIONS:
        raise InvalidArgumentError('`boundary` {!r} not understood, '
                                   'expected one of {}'
                                   ''.format(bc_in, BOUNDARY_CONDITIONS))
    return bc


def _normalized_knots(knots):
    """Return ``knots`` as 1-D integer array after checking them."""
    knots_arr = np.asarray(knots)
    if knots_arr.ndim != 1 or knots_arr.size == 0:
        raise StencilError('`knots` must be a non-empty 1-D sequence, got '
                           '{!r}'.format(knots))
    if not np.issubdtype(knots_arr.dtype, np.number):
        raise StencilError('`knots` must be integers, got {!r}'
                           ''.format(knots))
    knots_int = knots_arr.astype(int)
    if not np.array_equal(knots_int, knots_arr):
        raise StencilError('`knots` must be integers, got {!r}'
                           ''.format(knots))
    if np.unique(knots_int).size != knots_int.size:
        raise StencilError('`knots` {!r} contain repeated offsets'
                           ''.format(knots))
    return knots_int


def _normalized_scalars(order, grid_size, tol):
    """Check and convert the scalar parameters shared by the builders."""
    order = safe_int_conv(order, 'order')
    if order < 0:
        raise InvalidArgumentError('`order` must be nonnegative, got {}'
                                   ''.format(order))

    grid_size, grid_size_in = float(grid_size), grid_size
    if not (np.isfinite(grid_size) and grid_size > 0):
        raise InvalidArgumentError('`grid_size` must be positive, got {}'
                                   ''.format(grid_size_in))

    tol, tol_in = float(tol), tol
    if not tol >= 0:
        raise InvalidArgumentError('`tol` must be nonnegative, got {}'
                                   ''.format(tol_in))
    return order, grid_size, tol


def _moments(knots, weights, degrees):
    """Return ``sum_j w_j k_j^m / m!`` for each ``m`` in ``degrees``.

    Also returns the magnitude of the summands, which is the natural scale
    of the rounding errors in the sums.
    """
    degrees = np.asarray(degrees)
    taylor = (knots[None, :].astype(float) ** degrees[:, None] /
              factorial(degrees)[:, None])
    return taylor.dot(weights), np.abs(taylor).dot(np.abs(weights))


def _moment_residual(knots, weights, order, nmoments):
    """Maximal relative deviation of the first ``nmoments`` moments."""
    degrees = np.arange(nmoments)
    moments, scale = _moments(knots, weights, degrees)
    expected = (degrees == order).astype(float)
    return np.max(np.abs(moments - expected) / np.maximum(scale, 1.0))


def stencil_weights(knots, order, grid_size=1.0, tol=DEFAULT_TOL):
    """Return finite difference weights for a derivative on given knots.

    The weights ``w`` are determined such that ::

        sum_j w[j] * u(x + knots[j] * h)  ~  u^(order)(x)

    by matching the Taylor expansion of ``u`` up to the highest degree the
    number of knots allows, i.e. by solving the Vandermonde type system ::

        sum_j w[j] * knots[j] ** m / m! = delta(m, order) / h ** order

    for ``m = 0, ..., len(knots) - 1``.

    Parameters
    ----------
    knots : sequence of ints
        Distinct integer offsets of the sampling points relative to the
        point where the derivative is evaluated.
    order : nonnegative int
        Order of the derivative.
    grid_size : positive float, optional
        Distance ``h`` between two neighbouring samples.
    tol : nonnegative float, optional
        Tolerance for the consistency check of the computed weights.
        The deviation of each moment is measured relative to the size of
        its summands.

    Returns
    -------
    weights : `numpy.ndarray`
        Weights aligned with ``knots``.

    Raises
    ------
    StencilError
        If ``knots`` are not distinct integers or are too few to determine
        a scheme for the requested order.
    ConsistencyError
        If the moments of the computed weights deviate by more than
        ``tol``.

    Examples
    --------
    Central second derivative:

    >>> print(stencil_weights([-1, 0, 1], 2))
    [ 1. -2.  1.]

    Forward difference on a grid with spacing 0.5:

    >>> print(stencil_weights([0, 1], 1, grid_size=0.5))
    [-2.  2.]
    """
    order, grid_size, tol = _normalized_scalars(order, grid_size, tol)
    knots = _normalized_knots(knots)
    if knots.size <= order:
        raise StencilError('{} knots cannot determine a scheme for a '
                           'derivative of order {}, need at least {}'
                           ''.format(knots.size, order, order + 1))

    degrees = np.arange(knots.size)
    system = (knots[None, :].astype(float) ** degrees[:, None] /
              factorial(degrees)[:, None])
    rhs = (degrees == order).astype(float)
    try:
        weights = np.linalg.solve(system, rhs)
    except np.linalg.LinAlgError:
        raise StencilError('knots {!r} lead to a singular system for the '
                           'stencil weights'.format(list(knots)))

    residual = _moment_residual(knots, weights, order, knots.size)
    if not residual <= tol:
        raise ConsistencyError(
            'stencil on knots {!r} for derivative of order {} violates the '
            'moment conditions by {:.3}, tolerance is {:.3}'
            ''.format(list(knots), order, residual, tol))

    return weights / grid_size ** order


def consistency_order(knots, weights, order, grid_size=1.0, tol=DEFAULT_TOL):
    """Return the consistency order of a finite difference scheme.

    Parameters
    ----------
    knots : sequence of ints
        Offsets of the sampling points.
    weights : sequence of floats
        Weights of the scheme, aligned with ``knots`` and already scaled
        by ``grid_size ** -order``.
    order : nonnegative int
        Order of the approximated derivative.
    grid_size : positive float, optional
        Distance between two neighbouring samples.
    tol : nonnegative float, optional
        Tolerance for a moment to be considered matched.

    Returns
    -------
    p : int
        Largest ``p`` such that the scheme approximates the derivative
        with an error of order ``h ** p``, or ``-1`` if the scheme is not
        consistent with the derivative at all.

    Examples
    --------
    >>> consistency_order([-1, 0, 1], [1, -2, 1], 2)
    2
    >>> consistency_order([0, 1], [-1, 1], 1)
    1
    >>> consistency_order([0, 1], [1, 1], 1)
    -1
    """
    order, grid_size, tol = _normalized_scalars(order, grid_size, tol)
    knots = _normalized_knots(knots)
    weights = np.asarray(weights, dtype=float)
    if weights.shape != knots.shape:
        raise InvalidArgumentError('`weights` must have shape {}, got {}'
                                   ''.format(knots.shape, weights.shape))

    unscaled = weights * grid_size ** order
    if not _moment_residual(knots, unscaled, order, order + 1) <= tol:
        return -1

    # The leading error term is h ** (m - order) for the first moment of
    # degree m > order that does not vanish
    max_degree = order + knots.size + 1
    for degree in range(order + 1, max_degree + 1):
        moment, scale = _moments(knots, unscaled, [degree])
        if abs(moment[0]) > tol * max(scale[0], 1.0):
            return degree - order
    return max_degree - order


def _reflected_index(index, n):
    """Map indices into ``range(n)`` by half-sample symmetric reflection."""
    index = np.mod(index, 2 * n)
    return np.where(index < n, index, 2 * n - 1 - index)


def finite_diff_matrix(n, knots, order, grid_size=1.0, boundary='neumann',
                       tol=DEFAULT_TOL, weights=None):
    """Return the sparse matrix of a 1-D finite difference scheme.

    Row ``i`` of the matrix evaluates the scheme at sample ``i``, i.e. it
    contains the weight for ``knots[j]`` in column ``i + knots[j]``.
    Interior rows are therefore a pure convolution with the stencil.
    Columns outside ``0, ..., n - 1`` are treated according to the
    boundary condition.

    Parameters
    ----------
    n : positive int
        Number of samples on the line.
    knots : sequence of ints
        Distinct integer offsets of the stencil.
    order : nonnegative int
        Order of the derivative.
    grid_size : positive float, optional
        Distance between two neighbouring samples.
    boundary : {'neumann', 'dirichlet'}, optional
        Boundary condition, case insensitive.

        ``'neumann'``: The signal is extended evenly across the boundary,
        repeating the outermost sample (``c b a | a b c | c b a``). This
        is the discrete zero-derivative condition.

        ``'dirichlet'``: The signal is zero outside the domain, weights
        falling outside are dropped.

    tol : nonnegative float, optional
        Tolerance for the consistency check of the stencil.
    weights : sequence of floats, optional
        Use these weights instead of computing them from ``knots``. They
        must be scaled for ``grid_size`` already and are checked to be
        consistent with the derivative of order ``order``.

    Returns
    -------
    matrix : `scipy.sparse.csr_matrix`
        Matrix of shape ``(n, n)``.

    Raises
    ------
    InvalidArgumentError
        For ``n < 1``, an unknown ``boundary`` or invalid scalars.
    StencilError
        If ``knots`` cannot determine a scheme of the requested order.
    ConsistencyError
        If the scheme fails the consistency check.

    Examples
    --------
    Second derivative with Neumann boundary conditions:

    >>> print(finite_diff_matrix(4, [-1, 0, 1], 2).toarray())
    [[-1.  1.  0.  0.]
     [ 1. -2.  1.  0.]
     [ 0.  1. -2.  1.]
     [ 0.  0.  1. -1.]]

    Forward differences with Dirichlet boundary conditions:

    >>> print(finite_diff_matrix(3, [0, 1], 1,
    ...                          boundary='dirichlet').toarray())
    [[-1.  1.  0.]
     [ 0. -1.  1.]
     [ 0.  0. -1.]]
    """
    n = safe_int_conv(n, 'n')
    if n < 1:
        raise InvalidArgumentError('`n` must be positive, got {}'.format(n))
    boundary = normalized_boundary(boundary)

    if weights is None:
        weights = stencil_weights(knots, order, grid_size, tol)
        knots = _normalized_knots(knots)
    else:
        if consistency_order(knots, weights, order, grid_size, tol) < 0:
            raise ConsistencyError('`weights` {!r} are not consistent with '
                                   'a derivative of order {} on knots {!r}'
                                   ''.format(list(weights), order,
                                             list(knots)))
        knots = _normalized_knots(knots)
        weights = np.asarray(weights, dtype=float)

    rows = np.tile(np.arange(n), knots.size)
    cols = rows + np.repeat(knots, n)
    data = np.repeat(weights, n)

    if boundary == 'dirichlet':
        inside = (cols >= 0) & (cols < n)
        rows, cols, data = rows[inside], cols[inside], data[inside]
    else:
        cols = _reflected_index(cols, n)

    # Duplicate entries from the reflection are summed up
    matrix = scipy.sparse.coo_matrix((data, (rows, cols)),
                                     shape=(n, n)).tocsr()
    matrix.eliminate_zeros()
    return matrix


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
