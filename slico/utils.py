""" Utilities to aid in running superpixel segmentation with SLICOSegmenter: connectivity repair
of label maps, PCA channel reduction, label visualization, test dataset generation and a
command-line parser."""

import argparse
import numpy as np
from sklearn.decomposition import PCA

# Fragments of at most (expected superpixel size)/MIN_SIZE_DIVISOR pixels are merged away.
MIN_SIZE_DIVISOR = 4

# 4-neighborhood: left, up, right, down
_DXY4 = ((-1, 0), (0, -1), (1, 0), (0, 1))
_DXY8 = ((-1, 0), (-1, -1), (0, -1), (1, -1), (1, 0), (1, 1), (0, 1), (-1, 1))

def enforce_connectivity(labels, n_segments):
    """
    Takes a 2D map of integer labels and relabels it so that every label is a single 4-connected
    region. Connected groups of pixels sharing an input label are numbered densely in the order
    they are first met in a row-major scan. Groups of at most
    (image size // n_segments) // MIN_SIZE_DIVISOR pixels are too small to be a superpixel and are
    merged into a neighboring region found just before the group was flood-filled. Pixels labeled
    -1 (unassigned) are always merged this way.

    Parameters
    ----------
    labels: array_like
        A 2D array of integers indicating superpixels in an image.
    n_segments: int
        The number of superpixels that was requested; sets the size below which a connected
        group is merged.

    Returns
    -------
    new_labels: array_like
        A new 2D label map with labels in [0, n_labels).
    n_labels: int
        The number of regions in new_labels.
    """
    labels = np.asarray(labels)
    ny, nx = labels.shape
    min_size = (nx*ny // n_segments) // MIN_SIZE_DIVISOR

    new_labels = np.full((ny, nx), -1, dtype=int)
    label = 0
    adj_label = 0
    for iy in range(ny):
        for ix in range(nx):
            if new_labels[iy, ix] >= 0:
                continue
            new_labels[iy, ix] = label
            # remember a neighboring region in case this one has to be merged
            for dx, dy in _DXY4:
                x = ix + dx
                y = iy + dy
                if 0 <= x < nx and 0 <= y < ny and new_labels[y, x] >= 0:
                    adj_label = new_labels[y, x]

            old = labels[iy, ix]
            segment = [(ix, iy)]
            if old >= 0:
                i = 0
                while i < len(segment):
                    sx, sy = segment[i]
                    for dx, dy in _DXY4:
                        x = sx + dx
                        y = sy + dy
                        if (0 <= x < nx and 0 <= y < ny and new_labels[y, x] < 0
                                and labels[y, x] == old):
                            new_labels[y, x] = label
                            segment.append((x, y))
                    i += 1

            if old < 0 or len(segment) <= min_size:
                for x, y in segment:
                    new_labels[y, x] = adj_label
            else:
                label += 1
    # everything was merged into the first region
    n_labels = max(label, 1)
    return new_labels, n_labels

def boundary_mask(labels):
    """
    Mark the pixels on the border between superpixels. A pixel is marked when more than one of its
    8 neighbors carries a different label; neighbors that are already marked are not counted, which
    keeps the lines about two pixels wide.

    Parameters
    ----------
    labels: array_like
        A 2D array of integers indicating superpixels in an image.

    Returns
    -------
    mask: array_like
        A boolean array of the same shape, True on superpixel borders.
    """
    labels = np.asarray(labels)
    ny, nx = labels.shape
    mask = np.zeros((ny, nx), dtype=bool)
    for iy in range(ny):
        for ix in range(nx):
            n_diff = 0
            for dx, dy in _DXY8:
                x = ix + dx
                y = iy + dy
                if 0 <= x < nx and 0 <= y < ny and not mask[y, x]:
                    if labels[iy, ix] != labels[y, x]:
                        n_diff += 1
            if n_diff > 1:
                mask[iy, ix] = True
    return mask

def mark_boundaries(data, labels, color):
    """
    Draw superpixel borders on top of an image.

    Parameters
    ----------
    data: array_like
        An image of shape (n_channels, ny, nx), or (ny, nx) for a single channel.
    labels: array_like
        A 2D label map of shape (ny, nx).
    color: float or sequence of float
        The value to paint the borders with, either one per channel or one for all channels.

    Returns
    -------
    marked: array_like
        A copy of data with the border pixels painted.
    """
    marked = np.array(data, copy=True)
    mask = boundary_mask(labels)
    if marked.ndim == 2:
        marked[mask] = color
        return marked
    if marked.shape[1:] != mask.shape:
        raise ValueError("labels shape %s does not match image shape %s"
                         % (mask.shape, marked.shape[1:]))
    color = np.broadcast_to(np.asarray(color, dtype=marked.dtype), (marked.shape[0],))
    for c in range(marked.shape[0]):
        marked[c][mask] = color[c]
    return marked

def paint_labels(labels, seed=12345):
    """ Give every label a random color, for display. Returns a (3, ny, nx) uint8 image; the
    colors are reproducible for a given seed. """
    labels = np.asarray(labels)
    rng = np.random.RandomState(seed)
    unique, inverse = np.unique(labels, return_inverse=True)
    palette = rng.randint(0, 255, size=(len(unique), 3)).astype(np.uint8)
    return np.moveaxis(palette[inverse.reshape(labels.shape)], -1, 0)

def paint_label(labels, label, color):
    """ Paint the pixels of a single label with color on a black (3, ny, nx) uint8 image. """
    labels = np.asarray(labels)
    painted = np.zeros((3,) + labels.shape, dtype=np.uint8)
    mask = labels == label
    for c in range(3):
        painted[c][mask] = color[c]
    return painted

def pca_reduce(X, ndim=3):
    """
    Use the scikit-learn principal component algorithm to reduce the number of channels of a
    multichannel image before segmenting it.  For an array of shape (n_channels, ny, nx), this
    routine produces a new array of shape (ndim, ny, nx).

    Parameters
    ----------
    X: array_like
        A multichannel image. Shape should be (n_channels, ny, nx), that is, the first dimension
        should be the channel dimension.
    ndim: int
        The number of desired channels in the output array.

    Returns
    -------
    X_new: array_like
        A multichannel image of shape (ndim, ny, nx).
    """
    shape = X.shape
    pca = PCA(n_components=ndim)
    X_flat = X.reshape((shape[0], -1)).T
    X_new = pca.fit_transform(X_flat)
    return X_new.T.reshape((ndim, shape[1], shape[2]))

def step_edge_dataset(npix=100, n_channels=2, low=0., high=255., edge=None):
    """
    Generate an image with a sharp vertical edge: every channel is `low` to the left of column
    `edge` and `high` from that column on.

    Parameters
    ----------
    npix: int
        The size of each edge of the image (default 100)
    n_channels: int
        The number of channels (default 2)
    low, high: float
        Channel values on the left and right of the edge (default 0 and 255)
    edge: int
        The first column with value `high` (default npix//2)

    Returns
    -------
    image: array_like
        A 3D array of size (n_channels, npix, npix)
    """
    if edge is None:
        edge = npix//2
    image = np.full((n_channels, npix, npix), float(low))
    image[:, :, edge:] = high
    return image

def rings_dataset(seed=0, npix=40, noise_scale=0.03):
    """
    Generate an RGB test dataset. This image looks like a red central disc, a green ring around
    it, and a blue outer border.  Noise is applied to the image if noise_scale>0.
    The typical difference in intensity between regions within a single channel is 0.25.

    Parameters
    ----------
    seed: int
        An integer to seed the random number generator (default 0)
    npix: int
        The size of each edge of the image (default 40)
    noise_scale: float
        The width of the Gaussian noise applied to the intensities

    Returns
    -------
    image: array_like
        A 3D array of size (3, npix, npix)
    """
    rng = np.random.RandomState(seed)
    t = np.arange(npix) - (npix-1)/2.
    rad = np.hypot(t[None, :], t[:, None])
    zones = [rad < 0.2*npix, rad <= 0.4*npix]
    # (disc, ring, border) value of each channel
    levels = [(1., 0.75, 0.75), (0.75, 1., 0.75), (0.75, 0.75, 1.)]
    image = np.array([np.select(zones, level[:2], default=level[2]) for level in levels])
    if noise_scale > 0:
        image += rng.normal(scale=noise_scale, size=image.shape)
        image /= np.max(image, axis=(1, 2), keepdims=True)
    return image

def float_rescale(x):
    """ A convenience function to apply to arrays being passed to plt.imshow() to ensure the
    colors are scaled correctly. """
    return (1.0*x-np.min(x))/(np.max(x)-np.min(x))

def parser():
    """ Return a command-line parser that includes keys for all the parameters of a
    SLICOSegmenter object. """
    parser = argparse.ArgumentParser(description='Generate a superpixel segmentation map with the '
                                                 'zero-parameter SLIC algorithm.')
    parser.add_argument('-n', '--n_segments', dest='n_segments', type=int, default=100,
                        help='Approximate number of superpixels to produce (default 100)')
    parser.add_argument('-i', '--n_iter', dest='n_iter', type=int, default=10,
                        help='Number of clustering iterations (default 10)')
    return parser
