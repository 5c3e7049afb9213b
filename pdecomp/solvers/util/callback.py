# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Callbacks reporting on the ``(u, c)`` iterates of the mask solver.

`optimal_control_penalize` calls its callback after every inner iteration
with the tuple ``(u, c)`` of the current reconstruction and mask.
"""

import copy

from pdecomp.compression.pde_ops import energy, residual
from pdecomp.discr.diff_ops import laplacian_matrix
from pdecomp.util.utility import signature_string, validated_image

__all__ = ('Callback', 'CallbackStore', 'CallbackPrintEnergy')


class Callback(object):

    """Base class for callbacks acting on ``(u, c)`` iterates.

    Callbacks can be combined with ``&``, which calls both in sequence,
    and with ``*``, which first applies a function to the iterate.
    """

    def __call__(self, iterate):
        """Handle the current ``(u, c)`` iterate. Does nothing here."""

    def __and__(self, other):
        """Return ``self & other``, a callback calling both.

        Examples
        --------
        >>> CallbackStore() & CallbackStore(step=2)
        CallbackStore() & CallbackStore(step=2)
        """
        return _CallbackAnd(self, other)

    def __mul__(self, other):
        """Return ``self * other``, calling ``self`` on ``other(iterate)``.

        Examples
        --------
        Keep only the masks:

        >>> masks = CallbackStore() * (lambda uc: uc[1])
        >>> masks((np.zeros(2), np.ones(2)))
        >>> masks.callback[0]
        array([1., 1.])
        """
        return _CallbackCompose(self, other)

    def reset(self):
        """Return to the state before the first call."""

    def __repr__(self):
        """Return ``repr(self)``."""
        return '{}()'.format(self.__class__.__name__)


class _CallbackAnd(Callback):

    """Sequence of callables called one after the other."""

    def __init__(self, *callbacks):
        self.callbacks = list(callbacks)

    def __call__(self, iterate):
        for callback in self.callbacks:
            callback(iterate)

    def reset(self):
        for callback in self.callbacks:
            if isinstance(callback, Callback):
                callback.reset()

    def __repr__(self):
        return ' & '.join(repr(callback) for callback in self.callbacks)


class _CallbackCompose(Callback):

    """Callback applied to the result of a function of the iterate."""

    def __init__(self, callback, function):
        self.callback = callback
        self.function = function

    def __call__(self, iterate):
        self.callback(self.function(iterate))

    def reset(self):
        if isinstance(self.callback, Callback):
            self.callback.reset()

    def __repr__(self):
        return '{!r} * {!r}'.format(self.callback, self.function)


class CallbackStore(Callback):

    """Callback keeping copies of the iterates.

    Iterates are deep-copied since the solver may reuse its arrays.
    """

    def __init__(self, results=None, step=1):
        """Initialize a new instance.

        Parameters
        ----------
        results : list, optional
            List the copies are appended to. Default: a new empty list.
        step : positive int, optional
            Only every ``step``-th iterate is stored, starting with the
            first.

        Examples
        --------
        >>> store = CallbackStore(step=2)
        >>> for k in range(5):
        ...     store((np.full(2, k), np.zeros(2)))
        >>> [int(u[0]) for u, c in store]
        [0, 2, 4]
        """
        self.results = [] if results is None else results
        self.step = int(step)
        self.iter = 0

    def __call__(self, iterate):
        """Store a copy of ``iterate`` if it is due."""
        if self.iter % self.step == 0:
            self.results.append(copy.deepcopy(iterate))
        self.iter += 1

    def reset(self):
        """Forget all stored iterates."""
        self.results = []
        self.iter = 0

    def __iter__(self):
        return iter(self.results)

    def __getitem__(self, index):
        return self.results[index]

    def __len__(self):
        return len(self.results)

    def __repr__(self):
        """Return ``repr(self)``."""
        optargs = [('results', self.results, []),
                   ('step', self.step, 1)]
        return '{}({})'.format(self.__class__.__name__,
                               signature_string([], optargs))


class CallbackPrintEnergy(Callback):

    """Print energy and constraint violation of ``(u, c)`` iterates.

    For each reported iterate one line with the iteration number, the
    unpenalised `energy` ``0.5 * ||u - f||^2 + lam * ||c||_1`` and the
    `residual` ``||c (u - f) - (1 - c) D u||`` of the PDE constraint is
    printed.
    """

    def __init__(self, f, lam=1.0, laplacian=None, step=1,
                 fmt='iter = {:>3}, energy = {:.6g}, residual = {:.6g}',
                 **kwargs):
        """Initialize a new instance.

        Parameters
        ----------
        f : `array-like`
            The image given to the solver.
        lam : nonnegative float, optional
            Weight of the sparsity term, as given to the solver.
        laplacian : `scipy.sparse.spmatrix`, optional
            Discrete Laplacian ``D``. Default: `laplacian_matrix` for
            ``f.shape`` with its default stencil and boundary condition.
        step : positive int, optional
            Number of iterations between two printed lines.
        fmt : string, optional
            Format string receiving the iteration number, energy and
            residual.

        Other Parameters
        ----------------
        kwargs :
            Keyword arguments passed on to ``print``.

        Examples
        --------
        A constant image is harmonic, so only the mask term contributes:

        >>> f = np.ones((3, 3))
        >>> callback = CallbackPrintEnergy(f, lam=0.5)
        >>> callback((f, np.full((3, 3), 0.2)))
        iter =   0, energy = 0.9, residual = 0
        >>> callback((f, np.zeros((3, 3))))
        iter =   1, energy = 0, residual = 0
        """
        self.f = validated_image(f, 'f')
        self.lam = float(lam)
        if laplacian is None:
            laplacian = laplacian_matrix(*self.f.shape)
        self.laplacian = laplacian
        self.step = int(step)
        self.fmt = str(fmt)
        self.kwargs = kwargs
        self.iter = 0

    def __call__(self, iterate):
        """Print the line for ``iterate = (u, c)`` if it is due."""
        if self.iter % self.step == 0:
            u, c = iterate
            print(self.fmt.format(self.iter,
                                  energy(u, c, self.f, self.lam),
                                  residual(u, c, self.f, self.laplacian)),
                  **self.kwargs)
        self.iter += 1

    def reset(self):
        """Restart the iteration count."""
        self.iter = 0

    def __repr__(self):
        """Return ``repr(self)``.

        Examples
        --------
        >>> CallbackPrintEnergy(np.zeros((2, 3)), lam=0.5)
        CallbackPrintEnergy(<2x3 image>, lam=0.5)
        """
        optargs = [('lam', self.lam, 1.0),
                   ('step', self.step, 1)]
        inner_str = signature_string([], optargs)
        if inner_str:
            inner_str = ', ' + inner_str
        nrows, ncols = self.f.shape
        return '{}(<{}x{} image>{})'.format(self.__class__.__name__,
                                            nrows, ncols, inner_str)


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
