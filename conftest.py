# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Test configuration file."""

import numpy as np
import pytest

import pdecomp

collect_ignore = ['setup.py']


def pytest_addoption(parser):
    parser.addoption('--largescale', action='store_true',
                     help='Run large and slow tests')


def pytest_collection_modifyitems(config, items):
    if config.getoption('--largescale'):
        return
    skip_largescale = pytest.mark.skip(reason='need --largescale option')
    for item in items:
        if 'largescale' in item.keywords:
            item.add_marker(skip_largescale)


def pytest_configure(config):
    config.addinivalue_line('markers', 'largescale: large and slow tests')


@pytest.fixture(autouse=True)
def add_doctest_modules(doctest_namespace):
    doctest_namespace['np'] = np
    doctest_namespace['pdecomp'] = pdecomp
