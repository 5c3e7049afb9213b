# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Optimisation routines for finding inpainting masks."""

from .quadratic import *
from .shrinkage import *
from .optimal_control import *
from .util import *

__all__ = ()
__all__ += quadratic.__all__
__all__ += shrinkage.__all__
__all__ += optimal_control.__all__
__all__ += util.__all__
