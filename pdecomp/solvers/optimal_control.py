# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Optimal control approach to finding inpainting masks.

The solver looks for a sparse mask ``c`` and a reconstruction ``u`` that
approximately solve ::

    min_{u, c}  0.5 * ||u - f||_2^2 + lam * ||c||_1
    s.t.        c * (u - f) - (1 - c) * D u = 0

by a quadratic penalty method. The constraint is replaced by penalty
terms whose weights are increased in an outer loop, while an inner loop
alternates between updates of ``u`` and ``c``.
"""

import warnings

import numpy as np

from pdecomp.compression.pde_ops import (
    energy, is_solvable, pde_matrix, residual, solve_pde, threshold)
from pdecomp.discr.diff_ops import laplacian_matrix
from pdecomp.discr.finite_diff import normalized_boundary
from pdecomp.solvers.quadratic import minimize_quadratic_energy
from pdecomp.solvers.shrinkage import soft_shrinkage
from pdecomp.util.exceptions import DimensionMismatchError, InvalidArgumentError
from pdecomp.util.filters import window_filter
from pdecomp.util.utility import (
    normalized_pair, safe_int_conv, signature_string, validated_image)

__all__ = ('OptimalControlOptions', 'OptimalControlDiagnostics',
           'optimal_control_penalize')


# Above this value of ||u||_inf, tolerances are scaled to the spacing of
# floating point numbers around the change
LARGE_VALUE_LIMIT = 1e8


class OptimalControlOptions(object):

    """Parameters of `optimal_control_penalize`.

    All values are checked when the record is created, so that a solver
    run never starts with an invalid configuration.
    """

    _defaults = (
        ('max_outer', 1),
        ('max_inner', 10),
        ('tol_outer', 1e3),
        ('tol_inner', 1e3),
        ('u_init', None),
        ('c_init', None),
        ('lam', 1.0),
        ('pen_pde', 1.0),
        ('pen_u', 1.0),
        ('pen_c', 1.0),
        ('u_step', 2.0),
        ('c_step', 2.0),
        ('pde_step', 2.0),
        ('thresh', 0.0),
        ('mask_norm', 1),
        ('filter_size', 1),
        ('knots', (-1, 0, 1)),
        ('boundary', 'neumann'),
    )

    def __init__(self, **kwargs):
        """Initialize a new instance.

        Parameters
        ----------
        max_outer : positive int, optional
            Maximal number of outer iterations, i.e. penalty increases.
        max_inner : positive int, optional
            Maximal number of alternating ``u``/``c`` updates per outer
            iteration.
        tol_outer, tol_inner : nonnegative float, optional
            Tolerances for the maximal change of ``u`` and ``c`` in the
            outer and inner loop.
        u_init : `array-like`, optional
            Initial reconstruction. ``None`` means the data ``f``.
        c_init : `array-like`, optional
            Initial mask. ``None`` means uniformly distributed random values
            in ``[0, 1)``.
        lam : nonnegative float, optional
            Weight of the sparsity term of the mask.
        pen_pde, pen_u, pen_c : positive float, optional
            Initial weights of the PDE penalty and of the proximal terms
            for ``u`` and ``c``.
        u_step, c_step, pde_step : float >= 1, optional
            Factors by which ``pen_u``, ``pen_c`` and ``pen_pde`` grow after
            each outer iteration without convergence.
        thresh : float, optional
            Post-processing. For ``thresh > 0`` the mask is binarised with
            ``c >= thresh`` and ``u`` recomputed from the PDE, for
            ``thresh < 0`` only ``u`` is recomputed, and for ``thresh == 0``
            the iterates are returned as they are. If the final mask is
            empty and the PDE has no unique solution, ``u`` is kept from
            the iteration and a `RuntimeWarning` is issued.
        mask_norm : {1, 2}, optional
            Regulariser of the mask update, ``lam * ||c||_1`` for 1 and
            ``lam / 2 * ||c||_2^2`` for 2.
        filter_size : positive int or 2-tuple of positive ints, optional
            Window size of the box filter summing up ``u - f`` in the mask
            update.
        knots : sequence of ints, optional
            Stencil of the second derivatives in the Laplacian, used for
            both axes.
        boundary : {'neumann', 'dirichlet'}, optional
            Boundary condition of the Laplacian.

        Examples
        --------
        >>> opts = OptimalControlOptions(max_inner=5, lam=0.1)
        >>> opts
        OptimalControlOptions(max_inner=5, lam=0.1)
        >>> opts.pen_pde
        1.0
        """
        names = [name for name, _ in self._defaults]
        unknown = sorted(set(kwargs) - set(names))
        if unknown:
            raise InvalidArgumentError('unknown option(s) {}, valid options '
                                       'are {}'.format(unknown, names))

        values = dict(self._defaults)
        values.update(kwargs)

        self.max_outer = self._positive_int(values['max_outer'], 'max_outer')
        self.max_inner = self._positive_int(values['max_inner'], 'max_inner')
        self.tol_outer = self._float_at_least(values['tol_outer'],
                                              'tol_outer', 0)
        self.tol_inner = self._float_at_least(values['tol_inner'],
                                              'tol_inner', 0)

        u_init, c_init = values['u_init'], values['c_init']
        self.u_init = (None if u_init is None
                       else validated_image(u_init, 'u_init'))
        self.c_init = (None if c_init is None
                       else validated_image(c_init, 'c_init'))

        self.lam = self._float_at_least(values['lam'], 'lam', 0)
        self.pen_pde = self._positive_float(values['pen_pde'], 'pen_pde')
        self.pen_u = self._positive_float(values['pen_u'], 'pen_u')
        self.pen_c = self._positive_float(values['pen_c'], 'pen_c')
        self.u_step = self._float_at_least(values['u_step'], 'u_step', 1)
        self.c_step = self._float_at_least(values['c_step'], 'c_step', 1)
        self.pde_step = self._float_at_least(values['pde_step'],
                                             'pde_step', 1)

        self.thresh = self._float(values['thresh'], 'thresh')
        if not np.isfinite(self.thresh):
            raise InvalidArgumentError('`thresh` must be finite, got {!r}'
                                       ''.format(values['thresh']))

        mask_norm = values['mask_norm']
        if mask_norm not in (1, 2) or isinstance(mask_norm, bool):
            raise InvalidArgumentError('`mask_norm` must be 1 or 2, got {!r}'
                                       ''.format(mask_norm))
        self.mask_norm = int(mask_norm)

        filter_size = normalized_pair(
            values['filter_size'], 'filter_size',
            lambda s: safe_int_conv(s, 'filter_size'))
        if min(filter_size) < 1:
            raise InvalidArgumentError('`filter_size` must be positive, got '
                                       '{!r}'.format(values['filter_size']))
        if filter_size[0] == filter_size[1]:
            self.filter_size = filter_size[0]
        else:
            self.filter_size = filter_size

        try:
            knots = tuple(safe_int_conv(k, 'knots') for k in values['knots'])
        except TypeError:
            raise InvalidArgumentError('`knots` must be a sequence of ints, '
                                       'got {!r}'.format(values['knots']))
        if not knots:
            raise InvalidArgumentError('`knots` must not be empty')
        self.knots = knots

        bc_r, bc_c = normalized_pair(values['boundary'], 'boundary',
                                     normalized_boundary)
        if bc_r != bc_c:
            raise InvalidArgumentError(
                'row and column discretisations must use the same boundary '
                'condition, got {!r} and {!r}'.format(bc_r, bc_c))
        self.boundary = bc_r

    @staticmethod
    def _float(value, name):
        try:
            return float(value)
        except (TypeError, ValueError):
            raise InvalidArgumentError('`{}` must be a real number, got {!r}'
                                       ''.format(name, value))

    @classmethod
    def _float_at_least(cls, value, name, lower):
        result = cls._float(value, name)
        if not result >= lower:
            raise InvalidArgumentError('`{}` must be at least {}, got {!r}'
                                       ''.format(name, lower, value))
        return result

    @classmethod
    def _positive_float(cls, value, name):
        result = cls._float(value, name)
        if not result > 0:
            raise InvalidArgumentError('`{}` must be positive, got {!r}'
                                       ''.format(name, value))
        return result

    @staticmethod
    def _positive_int(value, name):
        result = safe_int_conv(value, name)
        if result < 1:
            raise InvalidArgumentError('`{}` must be positive, got {!r}'
                                       ''.format(name, value))
        return result

    def as_dict(self):
        """Return the options as a dictionary."""
        return {name: getattr(self, name) for name, _ in self._defaults}

    def copy(self, **changes):
        """Return a copy with some options replaced.

        Examples
        --------
        >>> opts = OptimalControlOptions(lam=0.1)
        >>> opts.copy(mask_norm=2)
        OptimalControlOptions(lam=0.1, mask_norm=2)
        """
        values = self.as_dict()
        values.update(changes)
        return type(self)(**values)

    def __eq__(self, other):
        """Return ``self == other``."""
        if not isinstance(other, OptimalControlOptions):
            return False
        for name, _ in self._defaults:
            mine, theirs = getattr(self, name), getattr(other, name)
            if mine is None or theirs is None:
                if mine is not theirs:
                    return False
            elif isinstance(mine, np.ndarray) or isinstance(theirs,
                                                            np.ndarray):
                if not np.array_equal(mine, theirs):
                    return False
            elif mine != theirs:
                return False
        return True

    def __ne__(self, other):
        """Return ``self != other``."""
        return not self == other

    __hash__ = None

    def __repr__(self):
        """Return ``repr(self)``."""
        optargs = [(name, getattr(self, name), default)
                   for name, default in self._defaults]
        inner_str = signature_string([], optargs)
        return '{}({})'.format(self.__class__.__name__, inner_str)


class OptimalControlDiagnostics(object):

    """Record of the iteration history of `optimal_control_penalize`.

    Attributes
    ----------
    inner_iterations : `numpy.ndarray`
        Number of inner iterations in each outer iteration.
    outer_iterations : int
        Number of outer iterations performed.
    energy : `numpy.ndarray`
        Unpenalised energy ``0.5 * ||u - f||^2 + lam * ||c||_1`` after each
        inner iteration.
    residual : `numpy.ndarray`
        Violation of the PDE constraint after each inner iteration.
    penalty_increases : `numpy.ndarray`
        Total number of inner iterations performed when the penalties were
        increased, one entry per increase.
    penalties : `numpy.ndarray`
        Array of shape ``(outer_iterations, 3)`` with the weights
        ``(pen_pde, pen_u, pen_c)`` used in each outer iteration.
    converged : bool
        ``True`` if the outer loop stopped because of its tolerance,
        ``False`` if it ran into ``max_outer``.
    feasible : bool
        ``False`` if the final mask was empty and the PDE could not be
        solved for it, in which case ``u`` is the last iterate.
    solution_history, mask_history : list of `numpy.ndarray` or None
        All iterates ``u`` and ``c`` if requested, else ``None``.
    """

    def __init__(self, inner_iterations, outer_iterations, energy, residual,
                 penalty_increases, penalties, converged, feasible=True,
                 solution_history=None, mask_history=None):
        """Initialize a new instance."""
        self.inner_iterations = np.asarray(inner_iterations, dtype=int)
        self.outer_iterations = int(outer_iterations)
        self.energy = np.asarray(energy, dtype=float)
        self.residual = np.asarray(residual, dtype=float)
        self.penalty_increases = np.asarray(penalty_increases, dtype=int)
        self.penalties = np.asarray(penalties, dtype=float).reshape(-1, 3)
        self.converged = bool(converged)
        self.feasible = bool(feasible)
        self.solution_history = solution_history
        self.mask_history = mask_history

    @property
    def total_iterations(self):
        """Total number of inner iterations over all outer iterations."""
        return int(np.sum(self.inner_iterations))

    def __repr__(self):
        """Return ``repr(self)``."""
        return ('{}(outer_iterations={}, total_iterations={}, converged={})'
                ''.format(self.__class__.__name__, self.outer_iterations,
                          self.total_iterations, self.converged))


def _is_converged(change, u, tol):
    """Return whether ``change`` is below ``tol``, scaled for large ``u``."""
    if np.max(np.abs(u)) <= LARGE_VALUE_LIMIT:
        return change < tol
    else:
        return change < 10 * tol * np.spacing(abs(change))


def _max_change(u_old, u, c_old, c):
    return max(np.max(np.abs(u_old - u)), np.max(np.abs(c_old - c)))


def _update_mask(u, f, c_old, laplacian, lam, pen_pde, pen_c, mask_norm,
                 filter_size):
    """Return the minimiser of the mask subproblem, flattened.

    With ``a = W(u - f) + D u`` and ``b = D u``, where ``W`` sums over a
    box window, the mask minimises pointwise ::

        lam * R(c) + pen_pde * (a c - b)^2 + pen_c * (c - c_old)^2

    with ``R(c) = |c|`` for ``mask_norm == 1`` and ``R(c) = c^2 / 2`` for
    ``mask_norm == 2``.
    """
    lapl_u = laplacian.dot(u.ravel())
    summed = window_filter(u - f, filter_size, normalize=False).ravel()
    a = summed + lapl_u
    b = lapl_u
    c_old = c_old.ravel()

    if mask_norm == 1:
        return soft_shrinkage(lam, [pen_pde, pen_c],
                              [a, np.ones_like(a)], [b, c_old])
    else:
        return ((pen_pde * a * b + pen_c * c_old) /
                (lam / 2 + pen_pde * a ** 2 + pen_c))


def optimal_control_penalize(f, options=None, diagnostics=False,
                             history=False, callback=None, rng=None,
                             **kwargs):
    r"""Find a sparse inpainting mask and reconstruction for an image.

    The method approximates a solution of ::

        min_{u, c}  0.5 * ||u - f||_2^2 + lam * ||c||_1
        s.t.        c * (u - f) - (1 - c) * D u = 0

    with the discrete Laplacian ``D`` by a quadratic penalty approach.

    Parameters
    ----------
    f : `array-like`
        Real 2-D image to be compressed.
    options : `OptimalControlOptions`, optional
        Parameters of the method. ``None`` means default options.
    diagnostics : bool, optional
        If ``True``, also return an `OptimalControlDiagnostics` record.
    history : bool, optional
        If ``True``, the diagnostics record contains all iterates.
    callback : callable, optional
        Function called with the tuple ``(u, c)`` after each inner
        iteration.
    rng : int, `numpy.random.Generator` or None, optional
        Random source for the initial mask if ``options.c_init`` is not
        given.
    kwargs :
        Further options, used to create (or replace values in) ``options``.

    Returns
    -------
    u : `numpy.ndarray`
        Reconstruction of the same shape as ``f``.
    c : `numpy.ndarray`
        Mask of the same shape as ``f``.
    diagnostics : `OptimalControlDiagnostics`
        Only returned if ``diagnostics=True``.

    Raises
    ------
    InvalidArgumentError
        For invalid images or options.
    DimensionMismatchError
        If the shape of ``u_init`` or ``c_init`` differs from ``f.shape``.

    Warns
    -----
    RuntimeWarning
        If ``thresh != 0`` and the final mask is empty, so the PDE cannot be
        solved for it. ``diagnostics.feasible`` is then ``False``.

    Notes
    -----
    Starting from :math:`u^{(0)}` and :math:`c^{(0)}`, each inner iteration
    performs the steps

    .. math::
        u^{(i+1)} &= \arg\min_u \|u - f\|^2
            + \mu_{\mathrm{pde}} \|M(c^{(i)}) u - c^{(i)} f\|^2
            + \mu_u \|u - u^{(i)}\|^2,

        c^{(i+1)} &= \arg\min_c \lambda \|c\|_1
            + \mu_{\mathrm{pde}} \|a c - D u^{(i+1)}\|^2
            + \mu_c \|c - c^{(i)}\|^2,

    where :math:`M(c) = \mathrm{diag}(c) - \mathrm{diag}(1 - c) D` and
    :math:`a = W(u^{(i+1)} - f) + D u^{(i+1)}` with the box window sum
    :math:`W`. The mask update is a pointwise soft shrinkage. After the
    inner loop has converged, the penalty weights :math:`\mu` are multiplied
    by their step factors unless the outer loop has converged as well.

    Examples
    --------
    A constant image is harmonic, so it stays unchanged, while the mask is
    pulled towards zero:

    >>> f = np.ones((4, 4))
    >>> u, c = optimal_control_penalize(f, c_init=np.full((4, 4), 0.5),
    ...                                 lam=0.1, mask_norm=2, max_inner=1)
    >>> np.allclose(u, f)
    True
    >>> np.allclose(c, 0.5 / 1.05)
    True
    """
    f = validated_image(f, 'f')

    if options is None:
        options = OptimalControlOptions(**kwargs)
    elif isinstance(options, OptimalControlOptions):
        if kwargs:
            options = options.copy(**kwargs)
    else:
        raise TypeError('`options` {!r} is not an `OptimalControlOptions` '
                        'instance'.format(options))

    if callback is not None and not callable(callback):
        raise TypeError('`callback` {!r} is not callable'.format(callback))

    for name in ('u_init', 'c_init'):
        init = getattr(options, name)
        if init is not None and init.shape != f.shape:
            raise DimensionMismatchError(
                '`{}` has shape {}, expected the image shape {}'
                ''.format(name, init.shape, f.shape))

    if options.u_init is None:
        u = f.copy()
    else:
        u = options.u_init.copy()

    if options.c_init is None:
        c = np.random.default_rng(rng).random(f.shape)
    else:
        c = options.c_init.copy()

    lapl = laplacian_matrix(*f.shape, knots_r=options.knots,
                            knots_c=options.knots, boundary=options.boundary)

    pen_pde, pen_u, pen_c = options.pen_pde, options.pen_u, options.pen_c
    lam = options.lam

    max_total = options.max_inner * options.max_outer
    energies = np.full(max_total, np.nan)
    residuals = np.full(max_total, np.nan)
    inner_iters = []
    penalties = []
    increases = []
    sol_hist = [] if history else None
    mask_hist = [] if history else None
    num_iter = 0
    converged = False

    for _ in range(options.max_outer):
        u_old_k, c_old_k = u, c
        penalties.append((pen_pde, pen_u, pen_c))
        inner_iters.append(0)

        for _ in range(options.max_inner):
            u_old_i, c_old_i = u, c

            u = minimize_quadratic_energy(
                [1.0, pen_pde, pen_u],
                [None, pde_matrix(c_old_i, lapl), None],
                [f, c_old_i * f, u_old_i])
            u = u.reshape(f.shape)

            c = _update_mask(u, f, c_old_i, lapl, lam, pen_pde, pen_c,
                             options.mask_norm, options.filter_size)
            c = c.reshape(f.shape)

            if diagnostics:
                energies[num_iter] = energy(u, c, f, lam)
                residuals[num_iter] = residual(u, c, f, lapl)
            if history:
                sol_hist.append(u.copy())
                mask_hist.append(c.copy())

            num_iter += 1
            inner_iters[-1] += 1

            if callback is not None:
                callback((u, c))

            change_i = _max_change(u_old_i, u, c_old_i, c)
            if _is_converged(change_i, u, options.tol_inner):
                break

        change_k = _max_change(u_old_k, u, c_old_k, c)
        if _is_converged(change_k, u, options.tol_outer):
            converged = True
            break
        else:
            pen_pde *= options.pde_step
            pen_u *= options.u_step
            pen_c *= options.c_step
            increases.append(num_iter)

    feasible = True
    if options.thresh != 0:
        if options.thresh > 0:
            c = threshold(c, options.thresh)
        if is_solvable(c, lapl):
            u = solve_pde(f, c, lapl)
        else:
            feasible = False
            warnings.warn('final mask is empty, the PDE solution is not '
                          'unique; returning the last iterate as `u`',
                          RuntimeWarning)

    if not diagnostics:
        return u, c

    diag = OptimalControlDiagnostics(
        inner_iterations=inner_iters,
        outer_iterations=len(inner_iters),
        energy=energies[:num_iter],
        residual=residuals[:num_iter],
        penalty_increases=increases,
        penalties=penalties,
        converged=converged,
        feasible=feasible,
        solution_history=sol_hist,
        mask_history=mask_hist)
    return u, c, diag


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
