""" get_labels_from_array.py: a callable Python script that runs get_labels_from_file.py, but with
user-defined Python arrays instead of FITS filenames."""

import logging
import sys
from slico import parser
from slico.utils import rings_dataset
from get_labels_from_file import main

def get_parser():
    """ Add some arguments relating to channel reduction & plotting to the default SLICOSegmenter
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
    return p


if __name__ == '__main__':
    # Get a parser and parse command-line arguments
    p = get_parser()
    kwargs = p.parse_args(sys.argv[1:]).__dict__
    logging.basicConfig(level=logging.DEBUG if kwargs['verbose'] else logging.INFO)
    # Change the 'filename' arg to be a dataset of your choice
    kwargs['filename'] = rings_dataset()
    # run the segmentation
    main(**kwargs)
