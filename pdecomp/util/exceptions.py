# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""pdecomp specific exceptions."""


__all__ = ('InvalidArgumentError', 'DimensionMismatchError',
           'FiniteDifferenceError', 'StencilError', 'ConsistencyError')


class InvalidArgumentError(ValueError):
    """Exception for invalid arguments.

    Raised for bad option values, bad array shapes and unknown or
    mismatching boundary conditions. These errors are always detected
    before any iteration of a solver starts.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class DimensionMismatchError(InvalidArgumentError):
    """Exception for size mismatches between operators and images.

    Raised e.g. when a mask and a Laplacian matrix act on vectors of
    different length.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class FiniteDifferenceError(ValueError):
    """Base exception for failures in finite difference construction."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class StencilError(FiniteDifferenceError):
    """Exception for knot sets that do not determine a scheme.

    Raised when there are too few or repeated knots, so that the linear
    system for the stencil weights is underdetermined or singular.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)


class ConsistencyError(FiniteDifferenceError):
    """Exception for schemes that fail the consistency check.

    Raised when the moments of the computed stencil weights deviate from
    the ones of the requested derivative by more than the tolerance.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
