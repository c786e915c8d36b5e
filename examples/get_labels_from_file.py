""" get_labels_from_file.py: a callable Python script to run the zero-parameter SLIC superpixel
algorithm implemented in the SLICOSegmenter module. """

import logging

import numpy as np
import matplotlib.pyplot as plt
from astropy.nddata import CCDData
from slico import (SLICOSegmenter, pca_reduce, mark_boundaries, paint_labels, parser,
                   float_rescale)

def main(filename=None, **kwargs):
    """ Run the segmentation in SLICOSegmenter; if user requested, make a pretty plot comparing
        the superpixels with the original image; return the map of superpixel labels.

        For more info, run python get_labels_from_file.py --help"""
    # Prep data and inputs
    if isinstance(filename, str):
        data = np.array(CCDData.read(filename))
    else:
        data = filename
    if kwargs.get('pca', False):
        data = pca_reduce(data, ndim=kwargs.get('n_pca', 3))
    output_file = kwargs.get('output_file', None)
    for k in ['pca', 'n_pca', 'output_file', 'verbose']:
        if k in kwargs:
            del kwargs[k]

    # Perform segmentation
    slic = SLICOSegmenter(data, **kwargs)
    labels = slic.get_labels()

    # Make some nice plots
    if output_file is not None:
        # imshow takes either 3 channels or 1
        image = float_rescale(slic.data[:3] if slic.nc >= 3 else slic.data[:1])
        fig, axes = plt.subplots(1, 3, figsize=(12, 4))
        axes[0].imshow(np.moveaxis(image, 0, -1).squeeze())
        axes[0].set_title("Original image")
        axes[1].imshow(np.moveaxis(mark_boundaries(image, labels, 1.0), 0, -1).squeeze())
        axes[1].set_title("Superpixel boundaries")
        axes[2].imshow(np.moveaxis(paint_labels(labels), 0, -1))
        axes[2].set_title("%d superpixels" % slic.n_labels)

        fig.tight_layout()

        fig.savefig(output_file)

    return labels

def get_parser():
    """ Add some arguments relating to files & channel reduction to the default SLICOSegmenter
        parser """
    p = parser()
    p.add_argument('-P', '--n_pca', dest='n_pca', type=int, default=3,
                   help="Number of PCA modes to keep")
    p.add_argument('-p', '--pca', dest="pca", action="store_true",
                   help="Run a PCA on the channel dimension of a data cube")
    p.add_argument('-o', dest="output_file", type=str,
                   help="Output filename for diagnostic image")
    p.add_argument('-v', '--verbose', dest="verbose", action="store_true",
                   help="Log every clustering iteration")
    p.add_argument('filename', type=str, help="FITS filename to process")
    return p

if __name__ == '__main__':
    import sys
    p = get_parser()
    kwargs = p.parse_args(sys.argv[1:]).__dict__
    logging.basicConfig(level=logging.DEBUG if kwargs['verbose'] else logging.INFO)
    main(**kwargs)
