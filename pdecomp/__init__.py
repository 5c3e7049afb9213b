# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""pdecomp, PDE-based image compression with optimal control.

pdecomp builds sparse finite difference operators on images and uses them
to find sparse inpainting masks from which homogeneous diffusion
reconstructs an image.
"""

from os import path

import numpy as np

__all__ = ('discr', 'compression', 'solvers', 'util')

# Set package version
curdir = path.abspath(path.dirname(__file__))

with open(path.join(curdir, 'VERSION')) as version_file:
    __version__ = version_file.read().strip()

# Set printing line width to 71 to allow method docstrings to not extend
# beyond 79 characters (2 times indent of 4)
np.set_printoptions(linewidth=71)

from . import discr
from . import compression
from . import solvers
from . import util

from .discr import *
from .compression import *
from .solvers import *

__all__ += discr.__all__
__all__ += compression.__all__
__all__ += solvers.__all__

# Add `test` function to global namespace so users can run `pdecomp.test()`
from .util import test
