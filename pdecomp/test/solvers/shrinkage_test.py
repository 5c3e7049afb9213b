# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for the soft shrinkage operator."""

import numpy as np
import pytest

import pdecomp
from pdecomp.solvers import soft_shrinkage
from pdecomp.util.exceptions import DimensionMismatchError, InvalidArgumentError
from pdecomp.util.testutils import all_almost_equal, noise_array, simple_fixture


# --- pytest fixtures --- #


lam = simple_fixture('lam', [0.0, 0.3, 2.0])


def _objective(x, lam, theta, design, targets):
    value = lam * np.abs(x)
    for weight, a, b in zip(theta, design, targets):
        value = value + weight * (a * x - b) ** 2
    return value


# --- soft_shrinkage --- #


def test_soft_shrinkage_single_term():
    """A single identity term is the classical soft thresholding."""
    b = np.array([-3.0, -0.4, 0.0, 0.4, 3.0])
    x = soft_shrinkage(1.0, [1.0], [np.ones(5)], [b])
    assert all_almost_equal(x, [-2.5, 0, 0, 0, 2.5])


def test_soft_shrinkage_optimality(lam):
    """The result is a minimiser, compared to perturbed values."""
    theta = [1.5, 0.5]
    design = [noise_array(20, seed=1, low=-2, high=2), np.ones(20)]
    targets = [noise_array(20, seed=2, low=-2, high=2),
               noise_array(20, seed=3, low=-1, high=1)]

    x = soft_shrinkage(lam, theta, design, targets)
    best = _objective(x, lam, theta, design, targets)
    for delta in [-1e-3, 1e-3, -0.1, 0.1]:
        other = _objective(x + delta, lam, theta, design, targets)
        assert np.all(best <= other + 1e-12)


def test_soft_shrinkage_no_regularisation():
    """Without regularisation the result is the weighted least squares
    solution ``beta / alpha``."""
    a = noise_array(8, seed=4, low=0.5, high=2)
    b = noise_array(8, seed=5)
    c_old = noise_array(8, seed=6)
    x = soft_shrinkage(0.0, [2.0, 1.0], [a, np.ones(8)], [b, c_old])
    expected = (2 * a * b + c_old) / (2 * a ** 2 + 1)
    assert all_almost_equal(x, expected)


def test_soft_shrinkage_column_layout():
    """Design and targets may be given with one column per term."""
    design = noise_array((6, 2), seed=7, low=0.5, high=1)
    targets = noise_array((6, 2), seed=8)
    x_cols = soft_shrinkage(0.1, [1.0, 2.0], design, targets)
    x_seq = soft_shrinkage(0.1, [1.0, 2.0], [design[:, 0], design[:, 1]],
                           [targets[:, 0], targets[:, 1]])
    assert all_almost_equal(x_cols, x_seq)


def test_soft_shrinkage_pointwise_lam():
    b = np.array([1.0, 1.0, 1.0])
    x = soft_shrinkage([0.0, 1.0, 4.0], [1.0], [np.ones(3)], [b])
    assert all_almost_equal(x, [1.0, 0.5, 0.0])


def test_soft_shrinkage_degenerate():
    """Entries without quadratic part are zero if the problem is bounded."""
    x = soft_shrinkage(1.0, [1.0], [[0.0, 1.0]], [[5.0, 2.0]])
    assert all_almost_equal(x, [0.0, 1.5])


def test_soft_shrinkage_errors():
    with pytest.raises(InvalidArgumentError):
        soft_shrinkage(1.0, [-1.0], [np.ones(3)], [np.ones(3)])
    with pytest.raises(InvalidArgumentError):
        soft_shrinkage(-1.0, [1.0], [np.ones(3)], [np.ones(3)])
    with pytest.raises(DimensionMismatchError):
        soft_shrinkage(1.0, [1.0, 1.0], [np.ones(3)], [np.ones(3)])
    with pytest.raises(DimensionMismatchError):
        soft_shrinkage(1.0, [1.0], [np.ones(3)], [np.ones(4)])
    with pytest.raises(DimensionMismatchError):
        soft_shrinkage(np.ones(2), [1.0], [np.ones(3)], [np.ones(3)])


if __name__ == '__main__':
    pdecomp.util.test_file(__file__)
