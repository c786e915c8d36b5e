""" evaluation.py: agreement coefficients between a gold-standard binary mask and a binary
segmentation, e.g. a set of superpixels selected as foreground. """

import numpy as np
from scipy import ndimage
from sklearn.metrics import f1_score, jaccard_score

from .SLICO import InvalidInputError

# objects are counted with 8-connectivity
_STRUCTURE = np.ones((3, 3), dtype=int)


def _check_masks(gold, seg):
    gold = np.asarray(gold)
    seg = np.asarray(seg)
    if gold.shape != seg.shape:
        raise InvalidInputError("Mask shapes differ: %s and %s" % (gold.shape, seg.shape))
    for mask in (gold, seg):
        if not np.all(np.isin(mask, (0, 1))):
            raise InvalidInputError("Masks must be binary (0/1 or boolean)")
    return gold.astype(bool), seg.astype(bool)


def _objects_touching(mask, other):
    # returns (number of objects in mask, number of them overlapping other)
    objects, n_objects = ndimage.label(mask, structure=_STRUCTURE)
    touching = np.unique(objects[mask & other])
    return n_objects, len(touching)


def area_overlap(gold, seg):
    """ Area overlap (Jaccard) coefficient: |gold & seg| / |gold | seg|. """
    gold, seg = _check_masks(gold, seg)
    return jaccard_score(gold.ravel().astype(int), seg.ravel().astype(int))


def area_similarity(gold, seg):
    """ Area similarity (Dice) coefficient: 2|gold & seg| / (|gold| + |seg|). """
    gold, seg = _check_masks(gold, seg)
    return f1_score(gold.ravel().astype(int), seg.ravel().astype(int))


def overlap_error(gold, seg):
    """ Area overlap error: (|gold | seg| - |gold & seg|) / |gold|. NaN if gold is empty. """
    gold, seg = _check_masks(gold, seg)
    n_gold = np.sum(gold)
    if n_gold == 0:
        return np.nan
    return float(np.sum(gold ^ seg)) / n_gold


def true_positives(gold, seg):
    """ Number of segmented objects that overlap the gold standard. """
    gold, seg = _check_masks(gold, seg)
    return _objects_touching(seg, gold)[1]


def false_positives(gold, seg):
    """ Number of segmented objects that do not overlap the gold standard at all. """
    gold, seg = _check_masks(gold, seg)
    n_objects, n_touching = _objects_touching(seg, gold)
    return n_objects - n_touching


def false_negatives(gold, seg):
    """ Number of gold-standard objects missed entirely by the segmentation. """
    gold, seg = _check_masks(gold, seg)
    n_objects, n_touching = _objects_touching(gold, seg)
    return n_objects - n_touching


def sensitivity(gold, seg):
    """
    Object-level sensitivity, TP / (TP + FN), where TP counts segmented objects overlapping the
    gold standard and FN counts gold-standard objects with no overlap.

    Parameters
    ----------
    gold: array_like
        Gold-standard binary mask.
    seg: array_like
        Segmented binary mask of the same shape.

    Returns
    -------
    sensitivity: float
        NaN when neither mask contains an object.
    """
    tp = true_positives(gold, seg)
    fn = false_negatives(gold, seg)
    if tp + fn == 0:
        return np.nan
    return float(tp) / (tp + fn)
