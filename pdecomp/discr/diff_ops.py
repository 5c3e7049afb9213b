# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Separable differential operators on 2-D images.

All matrices act on images flattened in row-major ("C") order, i.e. pixel
``(i, j)`` of an image with ``ncols`` columns has the index
``i * ncols + j``. This is the order of ``image.ravel()`` and
``vector.reshape(nrows, ncols)``.
"""

import numpy as np
import scipy.sparse

from pdecomp.discr.finite_diff import (
    DEFAULT_TOL, finite_diff_matrix, normalized_boundary)
from pdecomp.util.exceptions import InvalidArgumentError
from pdecomp.util.utility import normalized_pair, safe_int_conv

__all__ = ('gradient_matrix', 'laplacian_matrix',
           'image_gradient', 'image_laplacian')


def _normalized_shape(nrows, ncols):
    nrows = safe_int_conv(nrows, 'nrows')
    ncols = safe_int_conv(ncols, 'ncols')
    if nrows < 1 or ncols < 1:
        raise InvalidArgumentError('image shape must be positive, got '
                                   '({}, {})'.format(nrows, ncols))
    return nrows, ncols


def _common_boundary(boundary):
    """Return the single boundary condition for both axes.

    ``boundary`` may be one name or a ``(rows, cols)`` pair, which must
    then name the same condition.
    """
    bc_r, bc_c = normalized_pair(boundary, 'boundary', normalized_boundary)
    if bc_r != bc_c:
        raise InvalidArgumentError(
            'row and column discretisations must use the same boundary '
            'condition, got {!r} and {!r}'.format(bc_r, bc_c))
    return bc_r


def _axis_matrices(nrows, ncols, order, knots_r, knots_c, grid_size_r,
                   grid_size_c, boundary, tol):
    """Return the 1-D operators along rows (``MR``) and columns (``MC``)."""
    nrows, ncols = _normalized_shape(nrows, ncols)
    boundary = _common_boundary(boundary)

    # MR differentiates along a row (x direction) and acts on ncols samples,
    # MC differentiates along a column (y direction) on nrows samples
    mr = finite_diff_matrix(ncols, knots_r, order, grid_size=grid_size_r,
                            boundary=boundary, tol=tol)
    mc = finite_diff_matrix(nrows, knots_c, order, grid_size=grid_size_c,
                            boundary=boundary, tol=tol)
    return nrows, ncols, mr, mc


def gradient_matrix(nrows, ncols, knots_r=(0, 1), knots_c=(0, 1),
                    grid_size_r=1.0, grid_size_c=1.0, boundary='neumann',
                    tol=DEFAULT_TOL):
    """Return the sparse matrix of the discrete gradient.

    The matrix first computes all derivatives in x direction (one block of
    ``ncols`` entries per image row) and then all derivatives in
    y direction::

        G = [ kron(I_nrows, MR) ]
            [ kron(MC, I_ncols) ]

    Parameters
    ----------
    nrows, ncols : positive int
        Shape of the image.
    knots_r : sequence of ints, optional
        Stencil for the derivative along rows (x derivative).
    knots_c : sequence of ints, optional
        Stencil for the derivative along columns (y derivative).
    grid_size_r, grid_size_c : positive float, optional
        Grid sizes for the row and column discretisation.
    boundary : string or 2-tuple of strings, optional
        Boundary condition ``'neumann'`` or ``'dirichlet'``. A pair
        ``(boundary_r, boundary_c)`` is accepted, but both entries must
        name the same condition.
    tol : nonnegative float, optional
        Tolerance for the consistency check of the stencils.

    Returns
    -------
    matrix : `scipy.sparse.csr_matrix`
        Matrix of shape ``(2 * nrows * ncols, nrows * ncols)``. For a
        single row image it is the x derivative operator of shape
        ``(ncols, ncols)``, for a single column image the y derivative
        operator of shape ``(nrows, nrows)``.

    Raises
    ------
    InvalidArgumentError
        For mismatching boundary conditions or an invalid shape.

    Examples
    --------
    >>> grad = gradient_matrix(2, 3)
    >>> grad.shape
    (12, 6)
    >>> image = np.array([[0.0, 1.0, 3.0],
    ...                   [2.0, 2.0, 2.0]])
    >>> print(grad.dot(image.ravel()).reshape(2, 2, 3))
    [[[ 1.  2.  0.]
      [ 0.  0.  0.]]
    <BLANKLINE>
     [[ 2.  1. -1.]
      [ 0.  0.  0.]]]
    """
    nrows, ncols, mr, mc = _axis_matrices(
        nrows, ncols, 1, knots_r, knots_c, grid_size_r, grid_size_c,
        boundary, tol)

    if nrows == 1:
        return mr
    elif ncols == 1:
        return mc
    else:
        dx = scipy.sparse.kron(scipy.sparse.identity(nrows), mr)
        dy = scipy.sparse.kron(mc, scipy.sparse.identity(ncols))
        return scipy.sparse.vstack([dx, dy], format='csr')


def laplacian_matrix(nrows, ncols, knots_r=(-1, 0, 1), knots_c=(-1, 0, 1),
                     grid_size_r=1.0, grid_size_c=1.0, boundary='neumann',
                     tol=DEFAULT_TOL):
    """Return the sparse matrix of the discrete Laplacian.

    The Laplacian is the sum of the second derivatives along rows and
    columns::

        D = kron(I_nrows, MR) + kron(MC, I_ncols)

    Parameters
    ----------
    nrows, ncols : positive int
        Shape of the image.
    knots_r, knots_c : sequence of ints, optional
        Stencils for the second derivatives along rows (x) and columns (y).
    grid_size_r, grid_size_c : positive float, optional
        Grid sizes for the row and column discretisation.
    boundary : string or 2-tuple of strings, optional
        Boundary condition ``'neumann'`` or ``'dirichlet'``. A pair
        ``(boundary_r, boundary_c)`` is accepted, but both entries must
        name the same condition.
    tol : nonnegative float, optional
        Tolerance for the consistency check of the stencils.

    Returns
    -------
    matrix : `scipy.sparse.csr_matrix`
        Matrix of shape ``(nrows * ncols, nrows * ncols)``.

    Raises
    ------
    InvalidArgumentError
        For mismatching boundary conditions or an invalid shape.

    Examples
    --------
    With Neumann boundary conditions constant images are harmonic:

    >>> lapl = laplacian_matrix(3, 4)
    >>> lapl.shape
    (12, 12)
    >>> print(np.abs(lapl.dot(np.ones(12))).max())
    0.0
    """
    nrows, ncols, mr, mc = _axis_matrices(
        nrows, ncols, 2, knots_r, knots_c, grid_size_r, grid_size_c,
        boundary, tol)

    if nrows == 1:
        return mr
    elif ncols == 1:
        return mc
    else:
        dxx = scipy.sparse.kron(scipy.sparse.identity(nrows), mr)
        dyy = scipy.sparse.kron(mc, scipy.sparse.identity(ncols))
        return (dxx + dyy).tocsr()


def image_gradient(image, **kwargs):
    """Apply the discrete gradient to a 2-D image.

    Parameters
    ----------
    image : `array-like`
        2-D input array.
    kwargs :
        Further keyword arguments passed to `gradient_matrix`.

    Returns
    -------
    grad : `numpy.ndarray`
        Array of shape ``(2, nrows, ncols)`` with the x and y derivatives.
        For single row or single column images, the shape is
        ``(1, nrows, ncols)``.
    """
    image = np.asarray(image, dtype=float)
    if image.ndim != 2:
        raise InvalidArgumentError('`image` must be 2-dimensional, got '
                                   'shape {}'.format(image.shape))
    grad = gradient_matrix(*image.shape, **kwargs)
    return grad.dot(image.ravel()).reshape((-1,) + image.shape)


def image_laplacian(image, **kwargs):
    """Apply the discrete Laplacian to a 2-D image.

    Parameters
    ----------
    image : `array-like`
        2-D input array.
    kwargs :
        Further keyword arguments passed to `laplacian_matrix`.

    Returns
    -------
    lapl : `numpy.ndarray`
        Array of the same shape as ``image``.

    Examples
    --------
    >>> image = np.zeros((3, 3))
    >>> image[1, 1] = 1.0
    >>> print(image_laplacian(image))
    [[ 0.  1.  0.]
     [ 1. -4.  1.]
     [ 0.  1.  0.]]
    """
    image = np.asarray(image, dtype=float)
    if image.ndim != 2:
        raise InvalidArgumentError('`image` must be 2-dimensional, got '
                                   'shape {}'.format(image.shape))
    lapl = laplacian_matrix(*image.shape, **kwargs)
    return lapl.dot(image.ravel()).reshape(image.shape)


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
