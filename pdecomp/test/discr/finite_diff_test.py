# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for `finite_diff`."""

import math

import numpy as np
import pytest

import pdecomp
from pdecomp.discr.finite_diff import (
    consistency_order, finite_diff_matrix, stencil_weights)
from pdecomp.util.exceptions import (
    ConsistencyError, FiniteDifferenceError, InvalidArgumentError,
    StencilError)
from pdecomp.util.testutils import all_almost_equal, simple_fixture


# --- pytest fixtures --- #


boundary = simple_fixture('boundary', ['neumann', 'dirichlet'])
grid_size = simple_fixture('grid_size', [1.0, 0.5])

stencil_params = [((-1, 0, 1), 1), ((-1, 0, 1), 2), ((0, 1), 1),
                  ((-1, 0), 1), ((-2, -1, 0, 1, 2), 2), ((0, 1, 2), 1),
                  ((-2, -1, 0, 1, 2), 3)]
stencil_ids = [' knots={} order={} '.format(*p) for p in stencil_params]


@pytest.fixture(scope='module', params=stencil_params, ids=stencil_ids)
def stencil(request):
    return request.param


def _monomial_derivative(x, degree, order):
    """Exact ``order``-th derivative of ``x ** degree``."""
    if order > degree:
        return np.zeros_like(x)
    coeff = math.factorial(degree) / math.factorial(degree - order)
    return coeff * x ** (degree - order)


# --- stencil_weights --- #


def test_stencil_weights_known():
    """Compare weights with the textbook schemes."""
    assert all_almost_equal(stencil_weights([-1, 0, 1], 2), [1, -2, 1])
    assert all_almost_equal(stencil_weights([-1, 0, 1], 1), [-0.5, 0, 0.5])
    assert all_almost_equal(stencil_weights([0, 1], 1), [-1, 1])
    assert all_almost_equal(stencil_weights([-1, 0], 1), [-1, 1])
    assert all_almost_equal(stencil_weights([-2, -1, 0, 1, 2], 2),
                            [-1 / 12, 4 / 3, -5 / 2, 4 / 3, -1 / 12])


def test_stencil_weights_grid_size(stencil, grid_size):
    """Weights scale with ``grid_size ** -order``."""
    knots, order = stencil
    unscaled = stencil_weights(knots, order)
    scaled = stencil_weights(knots, order, grid_size=grid_size)
    assert all_almost_equal(scaled, unscaled / grid_size ** order)


def test_stencil_weights_knot_order():
    """Weights follow the order of the knots."""
    w = stencil_weights([1, -1, 0], 2)
    assert all_almost_equal(w, [1, 1, -2])


def test_stencil_weights_errors():
    # Too few knots for the derivative
    with pytest.raises(StencilError):
        stencil_weights([0], 1)
    with pytest.raises(StencilError):
        stencil_weights([0, 1], 2)

    # Repeated or non-integer knots
    with pytest.raises(StencilError):
        stencil_weights([0, 0, 1], 1)
    with pytest.raises(StencilError):
        stencil_weights([0, 0.5, 1], 1)
    with pytest.raises(StencilError):
        stencil_weights([], 0)

    # Invalid scalars
    with pytest.raises(InvalidArgumentError):
        stencil_weights([0, 1], -1)
    with pytest.raises(InvalidArgumentError):
        stencil_weights([0, 1], 1, grid_size=0)
    with pytest.raises(InvalidArgumentError):
        stencil_weights([0, 1], 1, tol=-1)


def test_exception_hierarchy():
    assert issubclass(StencilError, FiniteDifferenceError)
    assert issubclass(ConsistencyError, FiniteDifferenceError)
    assert issubclass(FiniteDifferenceError, ValueError)


# --- consistency_order --- #


def test_consistency_order():
    """Check the consistency order of standard schemes."""
    # One-sided first derivative
    assert consistency_order([0, 1], [-1, 1], 1) == 1
    assert consistency_order([-1, 0], [-1, 1], 1) == 1

    # Central differences
    assert consistency_order([-1, 0, 1], [-0.5, 0, 0.5], 1) == 2
    assert consistency_order([-1, 0, 1], [1, -2, 1], 2) == 2

    # Five-point second derivative
    w = stencil_weights([-2, -1, 0, 1, 2], 2)
    assert consistency_order([-2, -1, 0, 1, 2], w, 2) == 4

    # Weights for a different grid size
    w = stencil_weights([-1, 0, 1], 2, grid_size=0.1)
    assert consistency_order([-1, 0, 1], w, 2, grid_size=0.1) == 2


def test_consistency_order_inconsistent():
    """Inconsistent schemes give -1."""
    assert consistency_order([0, 1], [1, 1], 1) == -1
    assert consistency_order([-1, 0, 1], [1, -1, 1], 2) == -1
    # Scheme for the wrong derivative
    assert consistency_order([-1, 0, 1], [1, -2, 1], 1) == -1


def test_consistency_order_errors():
    with pytest.raises(InvalidArgumentError):
        consistency_order([0, 1], [1, 1, 1], 1)


# --- finite_diff_matrix --- #


def test_finite_diff_matrix_monomials(stencil, boundary, grid_size):
    """Schemes are exact for low degree monomials in the interior."""
    knots, order = stencil
    n = 12
    matrix = finite_diff_matrix(n, knots, order, grid_size=grid_size,
                                boundary=boundary)
    x = np.arange(n) * grid_size

    # Only rows whose stencil lies completely inside are compared
    interior = slice(-min(min(knots), 0), n - max(max(knots), 0))

    for degree in range(len(knots)):
        values = x ** degree
        result = matrix.dot(values)
        expected = _monomial_derivative(x, degree, order)
        scale = max(np.max(np.abs(expected)), 1.0)
        assert all_almost_equal(result[interior] / scale,
                                expected[interior] / scale, ndigits=8)


def test_finite_diff_matrix_neumann_constants(stencil, grid_size):
    """With Neumann boundary conditions, constants are in the kernel."""
    knots, order = stencil
    n = 7
    matrix = finite_diff_matrix(n, knots, order, grid_size=grid_size)
    assert all_almost_equal(matrix.dot(np.ones(n)), np.zeros(n), ndigits=10)


def test_finite_diff_matrix_explicit():
    """Compare boundary rows with hand-written matrices."""
    neumann = finite_diff_matrix(4, [0, 1], 1)
    expected = [[-1, 1, 0, 0],
                [0, -1, 1, 0],
                [0, 0, -1, 1],
                [0, 0, 0, 0]]
    assert all_almost_equal(neumann.toarray(), expected)
    # Zeros from the reflection are not stored
    assert neumann.nnz == 6

    dirichlet = finite_diff_matrix(4, [-1, 0, 1], 2, boundary='dirichlet')
    expected = [[-2, 1, 0, 0],
                [1, -2, 1, 0],
                [0, 1, -2, 1],
                [0, 0, 1, -2]]
    assert all_almost_equal(dirichlet.toarray(), expected)

    neumann = finite_diff_matrix(4, [-1, 0, 1], 2, boundary='Neumann')
    expected = [[-1, 1, 0, 0],
                [1, -2, 1, 0],
                [0, 1, -2, 1],
                [0, 0, 1, -1]]
    assert all_almost_equal(neumann.toarray(), expected)


def test_finite_diff_matrix_single_sample():
    """A single sample is a constant signal for Neumann conditions."""
    matrix = finite_diff_matrix(1, [-1, 0, 1], 2)
    assert matrix.shape == (1, 1)
    assert matrix.nnz == 0

    matrix = finite_diff_matrix(1, [-1, 0, 1], 2, boundary='dirichlet')
    assert all_almost_equal(matrix.toarray(), [[-2]])


def test_finite_diff_matrix_user_weights():
    """Weights given by the user are checked for consistency."""
    matrix = finite_diff_matrix(5, [0, 1], 1, weights=[-1, 1])
    assert all_almost_equal(matrix.toarray(),
                            finite_diff_matrix(5, [0, 1], 1).toarray())

    with pytest.raises(ConsistencyError):
        finite_diff_matrix(5, [0, 1], 1, weights=[1, 1])
    with pytest.raises(ConsistencyError):
        finite_diff_matrix(5, [-1, 0, 1], 2, weights=[1, -1, 1])


def test_finite_diff_matrix_errors():
    with pytest.raises(InvalidArgumentError):
        finite_diff_matrix(0, [0, 1], 1)
    with pytest.raises(InvalidArgumentError):
        finite_diff_matrix(4, [0, 1], 1, boundary='periodic')
    with pytest.raises(StencilError):
        finite_diff_matrix(4, [0], 1)


if __name__ == '__main__':
    pdecomp.util.test_file(__file__)
