# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Local window filters on images."""

import numpy as np
from scipy import ndimage

from pdecomp.util.exceptions import InvalidArgumentError
from pdecomp.util.utility import normalized_pair, safe_int_conv

__all__ = ('window_filter', 'average_filter')


def window_filter(image, size=1, normalize=True):
    """Filter ``image`` with a rectangular box window.

    The image is extended symmetrically across its boundary, i.e. the
    outermost pixels are repeated once (``[c b a | a b c | c b a]``).
    A window of size ``n`` at index ``i`` covers ``i - (n - 1) // 2``
    through ``i + n // 2``, so even windows extend one sample further
    towards higher indices.

    Parameters
    ----------
    image : `array-like`
        2-D input array.
    size : positive int or 2-tuple of positive ints, optional
        Window size in ``(rows, cols)``. A single value is used for both
        axes.
    normalize : bool, optional
        If ``True``, compute the local average, otherwise the local sum
        over the window.

    Returns
    -------
    out : `numpy.ndarray`
        Filtered array of the same shape as ``image``.

    Examples
    --------
    >>> img = np.array([[1.0, 2.0, 3.0]])
    >>> np.allclose(window_filter(img, size=(1, 3)), [[4 / 3, 2, 8 / 3]])
    True
    >>> np.allclose(window_filter(img, size=(1, 3), normalize=False),
    ...             [[4, 6, 8]])
    True

    Even sizes sum the current and the next sample:

    >>> print(window_filter(img, size=(1, 2), normalize=False))
    [[3. 5. 6.]]
    """
    image = np.asarray(image, dtype=float)
    if image.ndim != 2:
        raise InvalidArgumentError('`image` must be 2-dimensional, got '
                                   'shape {}'.format(image.shape))

    size = normalized_pair(size, 'size',
                           lambda s: safe_int_conv(s, 'size'))
    if min(size) < 1:
        raise InvalidArgumentError('`size` must be positive, got {}'
                                   ''.format(size))

    if size == (1, 1):
        return image.copy()

    # scipy's 'reflect' mode repeats the edge sample. Even windows reach
    # one sample further forward than backward: [i - (n - 1) // 2, i + n // 2]
    origin = [-1 if n % 2 == 0 else 0 for n in size]
    out = ndimage.uniform_filter(image, size=size, mode='reflect',
                                 origin=origin)
    if not normalize:
        out *= np.prod(size)
    return out


def average_filter(image, size=1):
    """Local average of ``image`` over a box window.

    Shortcut for ``window_filter(image, size, normalize=True)``.
    """
    return window_filter(image, size, normalize=True)


if __name__ == '__main__':
    from pdecomp.util.testutils import run_doctests
    run_doctests()
