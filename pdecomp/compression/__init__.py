# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""PDE-based image compression."""

from .pde_ops import *

__all__ = ()
__all__ += pde_ops.__all__
