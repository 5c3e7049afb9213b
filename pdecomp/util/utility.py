# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Utilities mainly for internal use."""

import numpy as np

from pdecomp.util.exceptions import InvalidArgumentError

__all__ = (
    'is_string',
    'safe_int_conv',
    'normalized_pair',
    'validated_image',
    'signature_string',
    'signature_string_parts',
)


def is_string(obj):
    """Return ``True`` if ``obj`` behaves like a string, ``False`` else."""
    try:
        obj + ''
    except TypeError:
        return False
    else:
        return True


def safe_int_conv(number, name='number'):
    """Safely convert a single number to integer.

    Floats with an integral value are accepted, everything else raises
    `InvalidArgumentError`.

    Examples
    --------
    >>> safe_int_conv(3.0)
    3
    """
    if isinstance(number, (bool, np.bool_)):
        raise InvalidArgumentError('`{}` must be an integer, got {!r}'
                                   ''.format(name, number))
    try:
        as_int = int(number)
    except (TypeError, ValueError):
        raise InvalidArgumentError('`{}` must be an integer, got {!r}'
                                   ''.format(name, number))
    if as_int != number:
        raise InvalidArgumentError('`{}` must be an integer, got {!r}'
                                   ''.format(name, number))
    return as_int


def normalized_pair(param, name='param', param_conv=None):
    """Return a 2-tuple from a single value or a sequence of length 2.

    Strings are always treated as single values.

    Parameters
    ----------
    param :
        Single value or sequence of two values.
    name : str, optional
        Name used in error messages.
    param_conv : callable, optional
        Conversion applied to both entries. ``None`` means no conversion.

    Returns
    -------
    pair : tuple
        The two (converted) values.

    Examples
    --------
    >>> normalized_pair(3)
    (3, 3)
    >>> normalized_pair(['neumann', 'dirichlet'])
    ('neumann', 'dirichlet')
    >>> normalized_pair('neumann')
    ('neumann', 'neumann')
    """
    if is_string(param) or np.isscalar(param):
        pair = (param, param)
    else:
        try:
            pair = tuple(param)
        except TypeError:
            pair = (param, param)
        if len(pair) == 1:
            pair = (pair[0], pair[0])
        elif len(pair) != 2:
            raise InvalidArgumentError(
                '`{}` must be a single value or a pair, got {!r}'
                ''.format(name, param))

    if param_conv is not None:
        pair = tuple(param_conv(p) for p in pair)
    return pair


def validated_image(image, name='image', copy=True):
    """Return ``image`` as a 2-D float array after checking it.

    Parameters
    ----------
    image : `array-like`
        Real-valued, finite, non-empty 2-D array.
    name : str, optional
        Name used in error messages.
    copy : bool, optional
        If ``True``, always return a new array.

    Raises
    ------
    InvalidArgumentError
        If ``image`` is not 2-D, empty, complex or contains non-finite
        values.
    """
    arr = np.array(image) if copy else np.asarray(image)
    if arr.ndim != 2:
        raise InvalidArgumentError('`{}` must be 2-dimensional, got array '
                                   'with shape {}'.format(name, arr.shape))
    if arr.size == 0:
        raise InvalidArgumentError('`{}` must not be empty'.format(name))
    if np.iscomplexobj(arr):
        raise InvalidArgumentError('`{}` must be real-valued'.format(name))
    try:
        arr = arr.astype(float, copy=False)
    except (TypeError, ValueError):
        raise InvalidArgumentError('`{}` must be numeric, got dtype {}'
                                   ''.format(name, arr.dtype))
    if not np.all(np.isfinite(arr)):
        raise InvalidArgumentError('`{}` contains non-finite values'
                                   ''.format(name))
    return arr


def signature_string(posargs, optargs, sep=', ', mod='!r'):
    """Return a stringified signature from given arguments.

    Parameters
    ----------
    posargs : sequence
        Positional argument values, always included in the returned string.
    optargs : sequence of 3-tuples
        Optional arguments with names and defaults, given in the form::

            [(name1, value1, default1), (name2, value2, default2), ...]

        Only those parameters that are different from the given default
        are included as ``name=value`` keyword pairs.

        **Note:** The comparison is done by using ``if value == default:``,
        which is not valid for, e.g., NumPy arrays.

    sep : string, optional
        Separator for the argument strings.
    mod : string or callable, optional
        Format modifier applied to all arguments, see
        `signature_string_parts`.

    Returns
    -------
    signature : string
        Stringification of a signature, typically used in the form::

            '{}({})'.format(self.__class__.__name__, signature)

    Examples
    --------
    >>> posargs = [1, 'hello', None]
    >>> optargs = [('dtype', 'float32', 'float64')]
    >>> signature_string(posargs, optargs)
    "1, 'hello', None, dtype='float32'"

    Values equal to the default are omitted:

    >>> signature_string([], [('size', 1, 1)])
    ''
    """
    posargs_conv, optargs_conv = signature_string_parts(posargs, optargs, mod)
    return sep.join(posargs_conv + optargs_conv)


def signature_string_parts(posargs, optargs, mod='!r'):
    """Return stringified arguments as tuples.

    Parameters
    ----------
    posargs : sequence
        Positional argument values, always included.
    optargs : sequence of 3-tuples
        Optional ``(name, value, default)`` arguments, only included when
        ``value != default``.
    mod : string or callable, optional
        Format modifier. A string ``m`` results in
        ``'{{{}}}'.format(m).format(arg)``, a callable ``to_str`` in
        ``to_str(arg)``. Strings keep their single quotes, and
        floating point scalars are printed with NumPy's ``precision``.

    Returns
    -------
    pos_strings : tuple of str
        The stringified positional arguments.
    opt_strings : tuple of str
        The stringified optional arguments, not including the ones
        equal to their respective defaults.
    """
    precision = np.get_printoptions()['precision']

    def to_str(arg):
        if callable(mod):
            return mod(arg)
        elif is_string(arg):
            return "'{}'".format(arg)
        elif (np.isscalar(arg) and np.isfinite(arg) and
              float(arg) != int(arg) and mod in ('', '!s', '!r')):
            # Floating point value, use numpy print option 'precision'
            return '{{:.{}}}'.format(precision).format(arg)
        else:
            return '{{{}}}'.format(mod).format(arg)

    posargs_conv = tuple(to_str(arg) for arg in posargs)
    optargs_conv = tuple('{}={}'.format(name, to_str(value))
                         for name, value, default in optargs
                         if not _equal(value, default))
    return posargs_conv, optargs_conv


def _equal(value, default):
    """Compare with ``==``, falling back to identity for arrays."""
    try:
        return bool(value == default)
    except ValueError:
        return value is default


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
