#!/usr/bin/env python

from setuptools import setup

setup(name='slico',
      version='0.1',
      description='Zero-parameter SLIC superpixel segmentation of multichannel images',
      packages=['slico'],
      install_requires=['numpy', 'scipy', 'scikit-learn'],
      extras_require={
          'examples': ['matplotlib', 'astropy'],
          'test': ['pytest'],
      },
      )
