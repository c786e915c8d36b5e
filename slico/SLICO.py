""" SLICO.py: contains the definition of the SLICOSegmenter object that performs the
    zero-parameter SLIC superpixel algorithm of Achanta et al. """

import logging

import numpy as np

from .utils import enforce_connectivity

logger = logging.getLogger(__name__)

# Starting value of the per-seed color normalization; it only ever grows from here.
INITIAL_MAX_COLOR_DIST = 10.0*10.0

# 8-neighborhood, in the order neighbors are tried when perturbing seeds
_DX8 = (-1, -1, 0, 1, 1, 1, 0, -1)
_DY8 = (0, -1, -1, -1, 0, 1, 1, 1)


class InvalidInputError(ValueError):
    """ Raised when an image or a parameter cannot be segmented. """


def as_planes(data):
    """ Turn an image into a float (n_channels, height, width) cube.

    Parameters
    ----------
    data: array_like or sequence of array_like
        A 2-D single-channel image, a 3-D cube with the channel axis first, or a list of
        2-D channel planes that all have the same shape.

    Returns
    -------
    planes: np.array
        A float64 array of shape (n_channels, height, width).
    """
    if isinstance(data, (list, tuple)):
        planes = [np.asarray(p, dtype=float) for p in data]
        if len(planes) == 0:
            raise InvalidInputError("Need at least one channel plane")
        if any(p.ndim != 2 for p in planes):
            raise InvalidInputError("Channel planes must be 2-D")
        if len(set(p.shape for p in planes)) != 1:
            raise InvalidInputError("Channel planes must all have the same shape, got %s"
                                    % [p.shape for p in planes])
        data = np.array(planes)
    else:
        data = np.asarray(data, dtype=float)
        if data.ndim == 2:
            data = data[None, :, :] # add a channel dimension
    if data.ndim != 3:
        raise InvalidInputError("data must be 2-D or 3-D, got %d dimensions" % data.ndim)
    if min(data.shape) == 0:
        raise InvalidInputError("Cannot segment an empty image of shape %s" % (data.shape,))
    return data


class SLICOSegmenter(object):
    """
    A class to perform the zero-parameter version of the SLIC superpixel algorithm ("SLICO") of
    "SLIC Superpixels Compared to State-of-the-art Superpixel Methods" (Achanta et al., IEEE
    TPAMI 34, 2012). Pixels are clustered around a grid of seeds by a distance that mixes color
    and position, where the color term is normalized per cluster by the largest color distance
    seen so far in that cluster, so no compactness weight needs to be chosen. A final pass
    relabels the result so that every superpixel is a single 4-connected region.

    Parameters
    ----------
    data: array-like
        A 2- or 3-D data cube. If 2-d, the data will represent a single color channel.
        If 3-D, the *first* dimension should be the channel dimension, e.g. a 200 by 300 RGB image
        should have the shape (3, 200, 300). A list of 2-D planes of equal shape is also accepted.
        Distances are computed directly on the channel values, so convert to the color space
        you want (e.g. CIELAB) before segmenting.
    n_segments: int
        The approximate number of superpixels to produce. The seed grid may hold a few fewer
        seeds, and the connectivity pass may merge small fragments, so the final count is
        usually close to but not exactly n_segments.
    n_iter: int
        The number of assign/update iterations to run. There is no convergence test.
        (default: 10)
    """
    def __init__(self, data, n_segments, n_iter=10):
        if n_segments != int(n_segments):
            raise InvalidInputError("n_segments must be an int")
        if n_segments < 1:
            raise InvalidInputError("Must request at least 1 segment via n_segments")
        if n_iter != int(n_iter):
            raise InvalidInputError("n_iter must be an int")
        if n_iter < 1:
            raise InvalidInputError("n_iter must be at least 1")
        self.data = as_planes(data)
        self.nc, self.ny, self.nx = self.data.shape
        self.n_segments = int(n_segments)
        self.n_iter = int(n_iter)
        self.seeds_x = None
        self.seeds_y = None
        self.seeds_color = None
        self.max_color_dist = None
        self.max_spatial_dist = None
        self.raw_labels = None
        self.labels = None
        self.n_labels = None

    @property
    def step(self):
        """ Nominal distance between neighboring seeds. """
        return np.sqrt(float(self.nx*self.ny)/self.n_segments)

    @property
    def grid_step(self):
        """ Integer step used for the search windows and the spatial normalization. It is padded
        by 2 so that very dense grids still get a usable window. """
        return int(self.step + 2.0)

    @staticmethod
    def _window_offset(grid_step):
        # small grids search a wider window relative to their spacing
        if grid_step < 10:
            return int(grid_step*1.5)
        return grid_step

    @property
    def n_seeds(self):
        """ Number of seeds actually placed, or None before the seeds are laid out. """
        if self.seeds_x is None:
            return None
        return len(self.seeds_x)

    def get_labels(self):
        """ Compute the superpixel segmentation.

        Returns
        -------
        labels: np.array
            A 2-D map of integer superpixel labels in [0, self.n_labels). Every label is a single
            4-connected region. If self.data has shape (n_channels, ny, nx), then labels has
            shape (ny, nx).
        """
        if self.labels is not None:
            return self.labels
        edges = self._detect_edges()
        self._get_seeds(edges)
        self.raw_labels = self._cluster()
        self.labels, self.n_labels = enforce_connectivity(self.raw_labels, self.n_segments)
        logger.info("Segmented %dx%d image into %d superpixels (%d requested, %d seeds)",
                    self.nx, self.ny, self.n_labels, self.n_segments, self.n_seeds)
        return self.labels

    def _detect_edges(self):
        """ Gradient magnitude summed over channels, from central differences. The 1-pixel
        border has no central difference and is set to infinity so it never attracts a seed. """
        edges = np.full((self.ny, self.nx), np.inf)
        if self.ny > 2 and self.nx > 2:
            dx = self.data[:, 1:-1, :-2] - self.data[:, 1:-1, 2:]
            dy = self.data[:, :-2, 1:-1] - self.data[:, 2:, 1:-1]
            edges[1:-1, 1:-1] = np.sum(dx**2 + dy**2, axis=0)
        return edges

    def _grid_points(self):
        """ Lay out the seed grid. Rows are self.step apart and every other row is shifted by
        half a step, which packs the seeds hexagonally.

        Returns
        -------
        xs, ys: np.array
            Integer pixel coordinates of the grid points that fall inside the image.
        """
        step = self.step
        off = int(step/2)
        xs = []
        ys = []
        for row in range(self.ny):
            y = int(row*step + off)
            if y > self.ny-1:
                break
            for col in range(self.nx):
                x = int(col*step + (off << (row & 1)))
                if x > self.nx-1:
                    break
                xs.append(x)
                ys.append(y)
        return np.array(xs, dtype=int), np.array(ys, dtype=int)

    def _perturb_seeds(self, xs, ys, edges):
        """ Move each seed to the pixel of lowest edge magnitude among itself and its 8
        neighbors, so that seeds do not start on an edge or a noisy pixel. """
        xs = xs.copy()
        ys = ys.copy()
        for n in range(len(xs)):
            bx, by = xs[n], ys[n]
            for dx, dy in zip(_DX8, _DY8):
                x = xs[n] + dx
                y = ys[n] + dy
                if 0 <= x < self.nx and 0 <= y < self.ny and edges[y, x] < edges[by, bx]:
                    bx, by = x, y
            xs[n] = bx
            ys[n] = by
        return xs, ys

    def _get_seeds(self, edges):
        xs, ys = self._perturb_seeds(*self._grid_points(), edges=edges)
        self.seeds_x = xs.astype(float)
        self.seeds_y = ys.astype(float)
        # (n_seeds, n_channels)
        self.seeds_color = self.data[:, ys, xs].T.copy()
        if len(xs) == 0:
            logger.warning("No seed grid point fits in a %dx%d image for n_segments=%d",
                           self.nx, self.ny, self.n_segments)
        logger.debug("Placed %d seeds for %d requested segments", len(xs), self.n_segments)

    def _cluster(self):
        """ Run the iterative assign/update loop on the current seeds.

        Every seed claims the pixels of its search window that it is closer to than any seed
        processed before it in the same iteration; the best distance per pixel is shared by all
        windows and only reset when a new iteration starts.

        Returns
        -------
        labels: np.array
            A 2-D map of seed indices. Pixels that no window ever reached are -1.
        """
        n_seeds = self.n_seeds
        grid_step = self.grid_step
        offset = self._window_offset(grid_step)
        inv_xy_weight = 1.0/(grid_step*grid_step)

        labels = np.full((self.ny, self.nx), -1, dtype=int)
        self.max_color_dist = np.full(n_seeds, INITIAL_MAX_COLOR_DIST)
        self.max_spatial_dist = np.full(n_seeds, float(grid_step*grid_step))
        yy, xx = np.mgrid[0:self.ny, 0:self.nx]
        flat_data = self.data.reshape((self.nc, -1))

        for itr in range(self.n_iter):
            best = np.full((self.ny, self.nx), np.inf)
            color_dist = np.zeros((self.ny, self.nx))
            spatial_dist = np.zeros((self.ny, self.nx))
            for n in range(n_seeds):
                y1 = int(max(0.0, self.seeds_y[n]-offset))
                y2 = int(min(float(self.ny), self.seeds_y[n]+offset))
                x1 = int(max(0.0, self.seeds_x[n]-offset))
                x2 = int(min(float(self.nx), self.seeds_x[n]+offset))
                window = (slice(y1, y2), slice(x1, x2))

                dc = np.sum((self.data[:, y1:y2, x1:x2]
                             - self.seeds_color[n][:, None, None])**2, axis=0)
                dxy = (xx[window]-self.seeds_x[n])**2 + (yy[window]-self.seeds_y[n])**2
                dist = dc/self.max_color_dist[n] + dxy*inv_xy_weight

                closer = dist < best[window]
                best[window][closer] = dist[closer]
                labels[window][closer] = n
                color_dist[window][closer] = dc[closer]
                spatial_dist[window][closer] = dxy[closer]

            flat_labels = labels.ravel()
            # pixels no window reached this iteration keep their old label but do not vote
            assigned = np.isfinite(best.ravel())
            owners = flat_labels[assigned]
            np.maximum.at(self.max_color_dist, owners, color_dist.ravel()[assigned])
            np.maximum.at(self.max_spatial_dist, owners, spatial_dist.ravel()[assigned])

            counts = np.bincount(owners, minlength=n_seeds)
            filled = counts > 0
            self.seeds_x[filled] = (np.bincount(owners, weights=xx.ravel()[assigned],
                                                minlength=n_seeds)[filled] / counts[filled])
            self.seeds_y[filled] = (np.bincount(owners, weights=yy.ravel()[assigned],
                                                minlength=n_seeds)[filled] / counts[filled])
            for c in range(self.nc):
                sums = np.bincount(owners, weights=flat_data[c][assigned], minlength=n_seeds)
                self.seeds_color[filled, c] = sums[filled] / counts[filled]
            logger.debug("Iteration %d/%d: %d empty seeds, %d pixels not reached",
                         itr+1, self.n_iter, n_seeds - np.sum(filled), np.sum(~assigned))
        return labels


def segment(data, n_segments, n_iter=10):
    """ Convenience wrapper: segment data into approximately n_segments superpixels and return
    the label map. See SLICOSegmenter for the parameters. """
    return SLICOSegmenter(data, n_segments, n_iter=n_iter).get_labels()
