""" slico: a module to run the zero-parameter SLIC superpixel algorithm of Achanta et al. """

from .SLICO import SLICOSegmenter, InvalidInputError, segment
from .utils import (enforce_connectivity, pca_reduce, mark_boundaries, paint_labels,
                    float_rescale, parser)
