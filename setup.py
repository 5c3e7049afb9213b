# Copyright 2026 The pdecomp contributors
#
# This file is part of pdecomp.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

"""Setup script for pdecomp.

Installation command::

    pip install [--user] [-e] .
"""

import os

from setuptools import setup, find_packages

root_path = os.path.dirname(__file__)


def read_lines(fname):
    with open(os.path.join(root_path, fname)) as f:
        return [line.strip() for line in f
                if line.strip() and not line.startswith('#')]


requires = read_lines('requirements.txt')
test_requires = read_lines('test_requirements.txt')

with open(os.path.join(root_path, 'pdecomp', 'VERSION')) as version_file:
    version = version_file.read().strip()

long_description = """
pdecomp is a Python library for PDE-based image compression. It finds a
sparse inpainting mask for an image such that homogeneous diffusion
inpainting from the mask pixels reconstructs the image well.

Features
========

- Sparse finite difference matrices for arbitrary stencils, with Neumann
  or Dirichlet boundary conditions and a consistency check of the scheme.
- Gradient and Laplacian matrices for 2-D images built from Kronecker
  products of 1-D operators.
- The matrix of the homogeneous diffusion inpainting equation and an exact
  sparse solver for it.
- An optimal control solver that alternates between reconstruction and
  mask updates with a quadratic penalty method.
"""

setup(
    name='pdecomp',

    version=version,

    description='PDE-based image compression with optimal control',
    long_description=long_description,

    author='pdecomp contributors',

    license='MPL-2.0',

    # See https://pypi.python.org/pypi?%3Aaction=list_classifiers
    classifiers=[
        'Development Status :: 3 - Alpha',

        'Intended Audience :: Developers',
        'Intended Audience :: Science/Research',
        'Topic :: Scientific/Engineering',
        'Topic :: Scientific/Engineering :: Mathematics',
        'Topic :: Scientific/Engineering :: Image Processing',

        'License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)',

        'Programming Language :: Python :: 3',

        'Operating System :: OS Independent'
    ],

    keywords='research mathematics imaging compression inpainting pde',

    packages=find_packages(),
    package_data={'pdecomp': ['VERSION']},
    include_package_data=True,

    python_requires='>=3.7',
    install_requires=requires,
    extras_require={
        'testing': test_requires,
    },
)
