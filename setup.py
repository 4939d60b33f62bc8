#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""setup for cmaengine package distribution.

To prepare a distribution::

    python setup.py check
    python setup.py sdist bdist_wheel > dist_call_output.txt ; less dist_call_output.txt

Check distribution and project description::

    tree build  # check that the build folders are clean
    twine check dist/*

Finally upload the distribution::

    twine upload dist/*1.0.0*  # to not upload outdated stuff

"""
import os
import re
from setuptools import setup

here = os.path.abspath(os.path.dirname(__file__))

def _read_version():
    """return ``__version__`` from ``cmaengine/__init__.py`` without
    importing the package, which needs `numpy` installed"""
    with open(os.path.join(here, 'cmaengine', '__init__.py')) as f:
        match = re.search(r'^__version__ = "([^"]+)"', f.read(), re.M)
    if match is None:
        raise RuntimeError("unable to find __version__ in cmaengine/__init__.py")
    return match.group(1)

long_description = ("CMA-ES engine with explicit sample and update steps, "
                    "scaling and bound reflection, and checkpoints.")
try:
    with open(os.path.join(here, 'README.txt')) as file:
        long_description = file.read()
except IOError:  # file not found
    pass

setup(name="cmaengine",
      long_description=long_description,
      long_description_content_type='text/x-rst',
      version=_read_version(),
      description="CMA-ES, Covariance Matrix Adaptation " +
                  "Evolution Strategy engine for non-linear numerical " +
                  "optimization in Python",
      license="BSD",
      classifiers=[
          "Intended Audience :: Science/Research",
          "Intended Audience :: Education",
          "Topic :: Scientific/Engineering",
          "Topic :: Scientific/Engineering :: Mathematics",
          "Topic :: Scientific/Engineering :: Artificial Intelligence",
          "Operating System :: OS Independent",
          "Programming Language :: Python :: 3",
          "Development Status :: 4 - Beta",
          "License :: OSI Approved :: BSD License",
      ],
      keywords=["optimization", "CMA-ES", "cmaes", "checkpoint"],
      packages=["cmaengine", "cmaengine.utilities"],
      python_requires=">=3.8",
      install_requires=["numpy"],
      extras_require={
            "test": ["pytest"],
      },
      )
