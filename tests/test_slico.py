"""Tests for the SLICOSegmenter superpixel algorithm."""

import numpy as np
import pytest

from slico import SLICOSegmenter, InvalidInputError, segment
from slico.SLICO import INITIAL_MAX_COLOR_DIST, as_planes
from slico.utils import enforce_connectivity

from conftest import assert_dense_connected


# --- input validation ---

@pytest.mark.parametrize("n_segments", [0, -3, 2.5])
def test_rejects_bad_n_segments(n_segments):
    with pytest.raises(InvalidInputError):
        SLICOSegmenter(np.zeros((4, 4)), n_segments)


@pytest.mark.parametrize("n_iter", [0, 1.5])
def test_rejects_bad_n_iter(n_iter):
    with pytest.raises(InvalidInputError):
        SLICOSegmenter(np.zeros((4, 4)), 2, n_iter=n_iter)


@pytest.mark.parametrize("data", [np.zeros((0, 5)), np.zeros((3, 4, 0)), np.zeros(5),
                                  np.zeros((1, 2, 3, 4)), []])
def test_rejects_bad_images(data):
    with pytest.raises(InvalidInputError):
        SLICOSegmenter(data, 2)


def test_rejects_mismatched_planes():
    with pytest.raises(InvalidInputError):
        SLICOSegmenter([np.zeros((4, 4)), np.zeros((4, 5))], 2)


def test_as_planes_shapes():
    assert as_planes(np.ones((4, 5))).shape == (1, 4, 5)
    assert as_planes(np.ones((2, 4, 5))).shape == (2, 4, 5)
    planes = as_planes([np.ones((4, 5)), np.zeros((4, 5), dtype=np.uint8)])
    assert planes.shape == (2, 4, 5)
    assert planes.dtype == np.float64


def test_results_unset_before_segmenting():
    slic = SLICOSegmenter(np.zeros((4, 4)), 2)
    assert slic.n_seeds is None
    assert slic.raw_labels is None
    assert slic.max_color_dist is None
    assert slic.labels is None and slic.n_labels is None


# --- edge map ---

def test_edges_ramp():
    ramp = np.tile(np.arange(5.0), (5, 1))
    edges = SLICOSegmenter(np.array([ramp, ramp]), 2)._detect_edges()
    # (x-1) - (x+1) = -2 in both channels, no vertical change
    np.testing.assert_array_equal(edges[1:-1, 1:-1], 8.0)
    assert np.all(np.isinf(edges[0])) and np.all(np.isinf(edges[-1]))
    assert np.all(np.isinf(edges[:, 0])) and np.all(np.isinf(edges[:, -1]))


def test_edges_tiny_image():
    edges = SLICOSegmenter(np.zeros((2, 2)), 1)._detect_edges()
    assert edges.shape == (2, 2)
    assert np.all(np.isinf(edges))


# --- seeds ---

def test_hexagonal_grid():
    xs, ys = SLICOSegmenter(np.zeros((4, 4)), 2)._grid_points()
    # odd rows are shifted by half a step
    np.testing.assert_array_equal(xs, [1, 3, 2])
    np.testing.assert_array_equal(ys, [1, 1, 3])


def test_seeds_move_off_border():
    slic = SLICOSegmenter(np.zeros((4, 4)), 2)
    slic._get_seeds(slic._detect_edges())
    np.testing.assert_array_equal(slic.seeds_x, [1, 2, 1])
    np.testing.assert_array_equal(slic.seeds_y, [1, 1, 2])
    assert slic.n_seeds == 3


def test_seeds_move_off_edges(step_edge):
    slic = SLICOSegmenter(step_edge, 4)
    slic._get_seeds(slic._detect_edges())
    # the third grid point lands on the edge at (50, 75)
    np.testing.assert_array_equal(slic.seeds_x, [25, 75, 51])
    np.testing.assert_array_equal(slic.seeds_y, [25, 25, 74])
    np.testing.assert_array_equal(slic.seeds_color, [[0, 0], [255, 255], [255, 255]])


def test_more_segments_than_pixels():
    data = np.random.RandomState(1).uniform(size=(5, 5))
    slic = SLICOSegmenter(data, 100)
    labels = slic.get_labels()
    assert slic.n_seeds <= 25
    assert slic.n_labels <= 25
    assert labels.shape == (5, 5)
    assert_dense_connected(labels, slic.n_labels)


# --- clustering ---

def test_window_offset():
    assert SLICOSegmenter._window_offset(4) == 6
    assert SLICOSegmenter._window_offset(9) == 13
    assert SLICOSegmenter._window_offset(10) == 10
    assert SLICOSegmenter._window_offset(52) == 52


def _with_seeds(data, n_segments, xs, ys, n_iter=1):
    slic = SLICOSegmenter(data, n_segments, n_iter=n_iter)
    slic.seeds_x = np.array(xs, dtype=float)
    slic.seeds_y = np.array(ys, dtype=float)
    slic.seeds_color = slic.data[:, np.array(ys), np.array(xs)].T.copy()
    return slic


def test_best_distance_shared_between_windows():
    slic = _with_seeds(np.zeros((10, 10)), 2, [2, 7], [5, 5])
    labels = slic._cluster()
    # the second window covers the whole image but must not steal the pixels
    # that are closer to the first seed
    assert np.all(labels[:, :5] == 0)
    assert np.all(labels[:, 5:] == 1)


def test_stale_labels_do_not_move_centroid():
    # the window covers columns 0-7 first, then only 0-6 once the seed moves to x=3.5;
    # column 7 keeps its old label but must not pull the centroid back
    slic = _with_seeds(np.zeros((1, 16)), 16, [4], [0], n_iter=2)
    labels = slic._cluster()
    assert labels[0, 7] == 0
    assert np.all(labels[0, 8:] == -1)
    assert slic.seeds_x[0] == pytest.approx(3.0)


def test_empty_seed_keeps_centroid():
    # the duplicate seed always loses the tie to the first one
    slic = _with_seeds(np.zeros((10, 10)), 2, [2, 7, 2], [5, 5, 5])
    labels = slic._cluster()
    assert not np.any(labels == 2)
    assert slic.seeds_x[2] == 2
    assert slic.seeds_y[2] == 5
    np.testing.assert_array_equal(slic.seeds_color[2], [0])
    assert slic.seeds_x[0] == pytest.approx(2.0)
    assert slic.seeds_x[1] == pytest.approx(7.0)


def test_every_pixel_assigned(rings):
    slic = SLICOSegmenter(rings, 9)
    slic.get_labels()
    assert slic.raw_labels.min() >= 0
    assert slic.raw_labels.max() < slic.n_seeds


def test_scales_never_decrease(rings):
    previous = None
    for n_iter in range(1, 6):
        slic = SLICOSegmenter(rings, 9, n_iter=n_iter)
        slic.get_labels()
        assert np.all(slic.max_color_dist >= INITIAL_MAX_COLOR_DIST)
        assert np.all(slic.max_spatial_dist >= slic.grid_step**2)
        if previous is not None:
            assert np.all(slic.max_color_dist >= previous[0])
            assert np.all(slic.max_spatial_dist >= previous[1])
        previous = (slic.max_color_dist.copy(), slic.max_spatial_dist.copy())


# --- full segmentation ---

def test_flat_image():
    slic = SLICOSegmenter(np.zeros((4, 4)), 2)
    labels = slic.get_labels()
    assert labels.shape == (4, 4)
    assert 2 <= slic.n_labels <= slic.n_seeds
    assert_dense_connected(labels, slic.n_labels)


def test_step_edge(step_edge):
    slic = SLICOSegmenter(step_edge, 4)
    labels = slic.get_labels()
    assert_dense_connected(labels, slic.n_labels)
    assert slic.n_labels <= slic.n_seeds
    # no superpixel crosses the edge at the top of the image
    assert labels[0, 0] != labels[0, 99]
    assert np.all(labels[:20, :50] == labels[0, 0])
    assert np.all(labels[:20, 50:] == labels[0, 99])


def test_single_pixel():
    slic = SLICOSegmenter(np.array([[7.0]]), 1)
    labels = slic.get_labels()
    assert slic.n_seeds == 1
    assert slic.n_labels == 1
    np.testing.assert_array_equal(labels, [[0]])


def test_no_grid_point_fits():
    # a single row is thinner than half a grid step
    slic = SLICOSegmenter(np.arange(100.0)[None, :], 1)
    labels = slic.get_labels()
    assert slic.n_seeds == 0
    assert slic.n_labels == 1
    assert np.all(labels == 0)


def test_region_count_near_request(gradient):
    slic = SLICOSegmenter(gradient, 36)
    labels = slic.get_labels()
    assert slic.n_seeds == 33
    assert 0.8*36 <= slic.n_labels <= 1.2*36
    assert slic.n_labels <= slic.n_seeds
    assert_dense_connected(labels, slic.n_labels)


def test_connectivity_pass_is_stable(rings):
    slic = SLICOSegmenter(rings, 16)
    labels = slic.get_labels()
    again, n_again = enforce_connectivity(labels, 16)
    np.testing.assert_array_equal(again, labels)
    assert n_again == slic.n_labels


def test_get_labels_is_cached(rings):
    slic = SLICOSegmenter(rings, 9)
    assert slic.get_labels() is slic.get_labels()


def test_segment_matches_class(rings):
    np.testing.assert_array_equal(segment(rings, 9, n_iter=5),
                                  SLICOSegmenter(rings, 9, n_iter=5).get_labels())


def test_accepts_list_of_planes(rings):
    np.testing.assert_array_equal(segment(list(rings), 9), segment(rings, 9))
