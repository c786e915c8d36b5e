"""Shared test fixtures."""

import numpy as np
import pytest
from scipy import ndimage

from slico.utils import rings_dataset, step_edge_dataset


def n_components(mask):
    """ Number of 4-connected components in a boolean mask. """
    return ndimage.label(mask)[1]


def assert_dense_connected(labels, n_labels):
    assert labels.min() >= 0
    assert labels.max() < n_labels
    assert set(np.unique(labels)) == set(range(n_labels))
    for label in range(n_labels):
        assert n_components(labels == label) == 1, "label %d is split" % label


@pytest.fixture
def step_edge():
    return step_edge_dataset(npix=100, n_channels=2)


@pytest.fixture
def rings():
    return rings_dataset(npix=30)


@pytest.fixture
def gradient():
    yy, xx = np.mgrid[0:60, 0:60]
    return np.array([2.0*xx, 3.0*yy, xx + yy])
