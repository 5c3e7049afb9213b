# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Matrices and helpers for homogeneous diffusion inpainting.

For a mask ``c`` and a discrete Laplacian ``D`` the inpainting equation
reads ::

    c * (u - f) - (1 - c) * D u = 0

i.e. ``u`` equals the data ``f`` where ``c == 1`` and is harmonic where
``c == 0``.
"""

import numpy as np
import scipy.sparse
import scipy.sparse.linalg

from pdecomp.discr.diff_ops import laplacian_matrix
from pdecomp.util.exceptions import DimensionMismatchError, InvalidArgumentError
from pdecomp.util.utility import validated_image

__all__ = ('mask_matrix', 'pde_matrix', 'solve_pde', 'is_solvable',
           'threshold', 'energy', 'residual')


def mask_matrix(mask):
    """Return the diagonal matrix with the flattened ``mask`` as diagonal.

    Parameters
    ----------
    mask : `array-like`
        Mask values, flattened in row-major order.

    Returns
    -------
    matrix : `scipy.sparse.dia_matrix`
        Square diagonal matrix of size ``mask.size``.
    """
    mask = np.asarray(mask, dtype=float).ravel()
    return scipy.sparse.diags(mask, 0, shape=(mask.size, mask.size))


def pde_matrix(mask, laplacian):
    """Return the matrix ``Mask(c) - (I - Mask(c)) D`` of the inpainting PDE.

    Applied to a candidate ``u`` and compared against ``c * f``, the matrix
    measures how far ``u`` is from matching the data where ``c == 1`` and
    from solving the Laplace equation where ``c == 0``.

    Parameters
    ----------
    mask : `array-like`
        Mask ``c``, flattened in row-major order. Its size must match the
        dimension of ``laplacian``.
    laplacian : `scipy.sparse.spmatrix`
        Square matrix ``D`` of the discrete Laplacian.

    Returns
    -------
    matrix : `scipy.sparse.csr_matrix`
        The PDE matrix.

    Raises
    ------
    DimensionMismatchError
        If ``laplacian`` is not square or does not fit the mask.

    Examples
    --------
    A full mask gives the identity, an empty one the negative Laplacian:

    >>> lapl = laplacian_matrix(2, 2)
    >>> print(pde_matrix(np.ones((2, 2)), lapl).toarray())
    [[1. 0. 0. 0.]
     [0. 1. 0. 0.]
     [0. 0. 1. 0.]
     [0. 0. 0. 1.]]
    >>> (pde_matrix(np.zeros((2, 2)), lapl) != -lapl).nnz
    0
    """
    mask = np.asarray(mask, dtype=float).ravel()
    nrows, ncols = laplacian.shape
    if nrows != ncols:
        raise DimensionMismatchError('`laplacian` must be square, got shape '
                                     '{}'.format(laplacian.shape))
    if mask.size != nrows:
        raise DimensionMismatchError('`mask` with {} entries does not fit '
                                     '`laplacian` of shape {}'
                                     ''.format(mask.size, laplacian.shape))

    c_mat = mask_matrix(mask)
    return (c_mat - mask_matrix(1.0 - mask).dot(laplacian)).tocsr()


def solve_pde(f, mask, laplacian=None):
    """Return the exact solution of the inpainting PDE.

    Solves ``pde_matrix(c, D) u = c * f`` with a sparse direct solver.

    Parameters
    ----------
    f : `array-like`
        2-D image providing the data at the mask points.
    mask : `array-like`
        Mask ``c`` of the same shape as ``f``.
    laplacian : `scipy.sparse.spmatrix`, optional
        Discrete Laplacian ``D``. Default: `laplacian_matrix` with the
        3-point stencil and Neumann boundary conditions for ``f.shape``.

    Returns
    -------
    u : `numpy.ndarray`
        Reconstruction of the same shape as ``f``.

    Raises
    ------
    DimensionMismatchError
        If the shapes of ``f``, ``mask`` and ``laplacian`` do not fit.
    InvalidArgumentError
        If ``mask`` has no nonzero entry while constant images are in the
        kernel of ``laplacian``, which makes the system singular.

    Examples
    --------
    Linear interpolation between two mask points on a line:

    >>> f = np.array([[0.0, 7.0, 7.0, 3.0]])
    >>> u = solve_pde(f, [[1, 0, 0, 1]])
    >>> np.allclose(u, [[0, 1, 2, 3]])
    True
    """
    f = validated_image(f, 'f', copy=False)
    mask = np.asarray(mask, dtype=float)
    if mask.shape != f.shape:
        raise DimensionMismatchError('`mask` shape {} differs from image '
                                     'shape {}'.format(mask.shape, f.shape))
    if laplacian is None:
        laplacian = laplacian_matrix(*f.shape)

    if not is_solvable(mask, laplacian):
        raise InvalidArgumentError(
            'cannot solve the PDE for an empty mask: constant images '
            'are harmonic, so the solution is not unique')

    system = pde_matrix(mask, laplacian)
    rhs = (mask * f).ravel()
    u = scipy.sparse.linalg.spsolve(system.tocsc(), rhs)
    return np.asarray(u).reshape(f.shape)


def is_solvable(mask, laplacian):
    """Return whether the inpainting PDE has a unique solution for ``mask``.

    The system is singular only for an all-zero mask together with a
    Laplacian that annihilates constants, as with Neumann boundary
    conditions.

    Examples
    --------
    >>> lapl = laplacian_matrix(2, 2)
    >>> is_solvable([[0, 0], [0, 0]], lapl)
    False
    >>> is_solvable([[0, 0], [0, 1]], lapl)
    True
    >>> is_solvable([[0, 0], [0, 0]],
    ...             laplacian_matrix(2, 2, boundary='dirichlet'))
    True
    """
    if np.any(np.asarray(mask)):
        return True
    row_sums = np.asarray(laplacian.sum(axis=1)).ravel()
    return not np.allclose(row_sums, 0)


def threshold(mask, level):
    """Return the binary mask ``mask >= level``.

    Parameters
    ----------
    mask : `array-like`
        Continuous mask values.
    level : float
        Threshold level.

    Returns
    -------
    binary : `numpy.ndarray`
        Float array with entries ``1.0`` where ``mask >= level`` and
        ``0.0`` elsewhere.

    Examples
    --------
    >>> print(threshold([0.2, 0.6, 0.8, 0.3], 0.5))
    [0. 1. 1. 0.]
    """
    mask = np.asarray(mask, dtype=float)
    return (mask >= float(level)).astype(float)


def energy(u, c, f, lam):
    """Return the objective ``0.5 * ||u - f||_2^2 + lam * ||c||_1``.

    This is the unpenalised energy of the optimal control problem, the
    PDE constraint is not part of it.

    Examples
    --------
    >>> energy([1.0, 2.0], [0.5, -0.5], [0.0, 0.0], 2.0)
    4.5
    """
    u, c, f = (np.asarray(a, dtype=float).ravel() for a in (u, c, f))
    return float(0.5 * np.sum((u - f) ** 2) + lam * np.sum(np.abs(c)))


def residual(u, c, f, laplacian):
    """Return the constraint violation ``||c (u - f) - (1 - c) D u||_2``.

    Parameters
    ----------
    u, c, f : `array-like`
        Reconstruction, mask and data, all of the same size.
    laplacian : `scipy.sparse.spmatrix`
        Discrete Laplacian ``D`` acting on the flattened arrays.

    Returns
    -------
    residual : float
    """
    u, c, f = (np.asarray(a, dtype=float).ravel() for a in (u, c, f))
    if not u.size == c.size == f.size == laplacian.shape[1]:
        raise DimensionMismatchError(
            'sizes of `u` ({}), `c` ({}), `f` ({}) and `laplacian` {} do '
            'not match'.format(u.size, c.size, f.size, laplacian.shape))
    return float(np.linalg.norm(c * (u - f) - (1 - c) * laplacian.dot(u)))


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
