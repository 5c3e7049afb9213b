# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for `diff_ops`."""

import numpy as np
import pytest
import scipy.sparse

import pdecomp
from pdecomp.discr.diff_ops import (
    gradient_matrix, image_gradient, image_laplacian, laplacian_matrix)
from pdecomp.discr.finite_diff import finite_diff_matrix
from pdecomp.util.exceptions import InvalidArgumentError
from pdecomp.util.testutils import (
    all_almost_equal, noise_array, simple_fixture, sparse_almost_equal)


# --- pytest fixtures --- #


boundary = simple_fixture('boundary', ['neumann', 'dirichlet'])
shape = simple_fixture('shape', [(1, 5), (4, 1), (3, 4), (5, 5)])
builder = simple_fixture('builder', [gradient_matrix, laplacian_matrix],
                         fmt=' {name}={value.__name__} ')


# Test data
IMAGE = np.array([[0.5, 1.0, 3.5, 2.0],
                  [-0.5, 3.0, -1.0, -1.0],
                  [0.0, 3.0, 1.5, 2.0]])


# --- gradient_matrix --- #


def test_gradient_matrix_shape(shape):
    nrows, ncols = shape
    grad = gradient_matrix(nrows, ncols)
    size = nrows * ncols
    if nrows == 1 or ncols == 1:
        assert grad.shape == (size, size)
    else:
        assert grad.shape == (2 * size, size)
    assert grad.format == 'csr'


def test_gradient_matrix_explicit():
    """Compare with forward differences computed by hand."""
    grad = gradient_matrix(*IMAGE.shape)
    result = grad.dot(IMAGE.ravel()).reshape((2,) + IMAGE.shape)

    # Neumann conditions: last forward difference along each axis is zero
    dx = np.zeros_like(IMAGE)
    dx[:, :-1] = IMAGE[:, 1:] - IMAGE[:, :-1]
    dy = np.zeros_like(IMAGE)
    dy[:-1, :] = IMAGE[1:, :] - IMAGE[:-1, :]

    assert all_almost_equal(result[0], dx)
    assert all_almost_equal(result[1], dy)
    assert all_almost_equal(image_gradient(IMAGE), result)


def test_gradient_matrix_dirichlet():
    grad = gradient_matrix(*IMAGE.shape, boundary='dirichlet')
    result = grad.dot(IMAGE.ravel()).reshape((2,) + IMAGE.shape)

    dx = np.empty_like(IMAGE)
    dx[:, :-1] = IMAGE[:, 1:] - IMAGE[:, :-1]
    dx[:, -1] = -IMAGE[:, -1]
    dy = np.empty_like(IMAGE)
    dy[:-1, :] = IMAGE[1:, :] - IMAGE[:-1, :]
    dy[-1, :] = -IMAGE[-1, :]

    assert all_almost_equal(result[0], dx)
    assert all_almost_equal(result[1], dy)


def test_gradient_matrix_degenerate(boundary):
    """Single row or column images use the 1-D operator directly."""
    knots_r = (0, 1)
    knots_c = (-1, 0)

    grad = gradient_matrix(1, 6, knots_r=knots_r, knots_c=knots_c,
                           grid_size_r=0.5, boundary=boundary)
    expected = finite_diff_matrix(6, knots_r, 1, grid_size=0.5,
                                  boundary=boundary)
    assert sparse_almost_equal(grad, expected)

    grad = gradient_matrix(6, 1, knots_r=knots_r, knots_c=knots_c,
                           grid_size_c=0.5, boundary=boundary)
    expected = finite_diff_matrix(6, knots_c, 1, grid_size=0.5,
                                  boundary=boundary)
    assert sparse_almost_equal(grad, expected)


def test_gradient_matrix_kron_blocks(boundary):
    """The two blocks are Kronecker products of the 1-D operators."""
    nrows, ncols = 3, 5
    grad = gradient_matrix(nrows, ncols, knots_r=(-1, 0, 1),
                           knots_c=(0, 1), grid_size_c=2.0,
                           boundary=boundary)
    mr = finite_diff_matrix(ncols, (-1, 0, 1), 1, boundary=boundary)
    mc = finite_diff_matrix(nrows, (0, 1), 1, grid_size=2.0,
                            boundary=boundary)
    size = nrows * ncols

    expected_x = scipy.sparse.kron(scipy.sparse.identity(nrows), mr)
    expected_y = scipy.sparse.kron(mc, scipy.sparse.identity(ncols))
    assert sparse_almost_equal(grad[:size], expected_x)
    assert sparse_almost_equal(grad[size:], expected_y)


# --- laplacian_matrix --- #


def test_laplacian_matrix_shape(shape):
    nrows, ncols = shape
    lapl = laplacian_matrix(nrows, ncols)
    assert lapl.shape == (nrows * ncols, nrows * ncols)


def test_laplacian_symmetric_nsd(shape):
    """The Neumann 3-point Laplacian is symmetric negative semidefinite."""
    lapl = laplacian_matrix(*shape)
    dense = lapl.toarray()
    assert all_almost_equal(dense, dense.T, ndigits=12)

    eigvals = np.linalg.eigvalsh(dense)
    assert np.max(eigvals) <= 1e-10
    # Constant images span the kernel
    size = lapl.shape[0]
    assert all_almost_equal(lapl.dot(np.ones(size)), np.zeros(size))


def test_laplacian_dirichlet_negative_definite(shape):
    lapl = laplacian_matrix(*shape, boundary='dirichlet')
    dense = lapl.toarray()
    assert all_almost_equal(dense, dense.T, ndigits=12)
    assert np.max(np.linalg.eigvalsh(dense)) < 0


def test_laplacian_matrix_five_point_stencil():
    """Interior values are exact for a quadratic image."""
    rows, cols = np.meshgrid(np.arange(5.0), np.arange(6.0), indexing='ij')
    image = rows ** 2 + 3 * cols ** 2

    lapl = image_laplacian(image)
    assert all_almost_equal(lapl[1:-1, 1:-1], np.full((3, 4), 8.0))

    # Higher order stencil with grid sizes
    image = (0.5 * rows) ** 2 + (0.25 * cols) ** 2
    lapl = image_laplacian(image, knots_r=(-2, -1, 0, 1, 2),
                           knots_c=(-2, -1, 0, 1, 2),
                           grid_size_r=0.25, grid_size_c=0.5)
    assert all_almost_equal(lapl[2:-2, 2:-2], np.full((1, 2), 4.0))


def test_laplacian_degenerate():
    lapl = laplacian_matrix(1, 5, knots_c=(-2, -1, 0, 1, 2))
    assert sparse_almost_equal(lapl, finite_diff_matrix(5, (-1, 0, 1), 2))

    lapl = laplacian_matrix(5, 1, knots_r=(-2, -1, 0, 1, 2))
    assert sparse_almost_equal(lapl, finite_diff_matrix(5, (-1, 0, 1), 2))


def test_image_laplacian_row_major():
    """Image wrappers use row-major flattening."""
    image = noise_array((4, 3), seed=42)
    lapl = laplacian_matrix(4, 3)
    assert all_almost_equal(image_laplacian(image),
                            lapl.dot(image.ravel()).reshape(4, 3))

    # Unit impulse in the interior
    image = np.zeros((3, 3))
    image[1, 1] = 1
    expected = [[0, 1, 0],
                [1, -4, 1],
                [0, 1, 0]]
    assert all_almost_equal(image_laplacian(image), expected)


# --- error handling --- #


def test_boundary_mismatch(builder, shape):
    """Different boundary conditions for rows and columns are an error."""
    with pytest.raises(InvalidArgumentError):
        builder(*shape, boundary=('neumann', 'dirichlet'))
    with pytest.raises(InvalidArgumentError):
        builder(*shape, boundary=['dirichlet', 'neumann'])

    # Equal pairs are accepted
    single = builder(*shape, boundary='dirichlet')
    pair = builder(*shape, boundary=('dirichlet', 'Dirichlet'))
    assert sparse_almost_equal(single, pair)


def test_invalid_args(builder):
    with pytest.raises(InvalidArgumentError):
        builder(0, 3)
    with pytest.raises(InvalidArgumentError):
        builder(3, 2.5)
    with pytest.raises(InvalidArgumentError):
        builder(3, 3, boundary='periodic')
    with pytest.raises(InvalidArgumentError):
        builder(3, 3, boundary=('neumann', 'neumann', 'neumann'))

    with pytest.raises(InvalidArgumentError):
        image_laplacian(np.zeros(4))
    with pytest.raises(InvalidArgumentError):
        image_gradient(np.zeros((2, 2, 2)))


if __name__ == '__main__':
    pdecomp.util.test_file(__file__)
