# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Finite difference discretisation of differential operators."""

from .finite_diff import *
from .diff_ops import *

__all__ = ()
__all__ += finite_diff.__all__
__all__ += diff_ops.__all__
