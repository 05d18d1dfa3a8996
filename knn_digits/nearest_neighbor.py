"""
nearest_neighbor.py
~~~~~~~~~~~~~~~~~~~

1-nearest-neighbor classification under squared Euclidean distance.

All arithmetic is done in int64, which holds the distance between two
0-255 pixel vectors of any realistic length without overflow.
"""

import logging
from typing import Sequence

import numpy as np

from knn_digits.dataset_loader import Dataset
from knn_digits.errors import DimensionMismatchError, EmptyDatasetError

logger = logging.getLogger(__name__)


def distance_sqr(a: Sequence[int], b: Sequence[int]) -> int:
    """
    Squared Euclidean distance between two integer vectors.

    Args:
        a: First vector
        b: Second vector, same length as ``a``

    Returns:
        int: Sum of ``(a[i] - b[i]) ** 2`` over all positions

    Raises:
        DimensionMismatchError: If the vectors differ in length
    """
    a = np.asarray(a, dtype=np.int64)
    b = np.asarray(b, dtype=np.int64)
    if a.ndim != 1 or a.shape != b.shape:
        raise DimensionMismatchError(
            f"cannot compare vectors of length {a.size} and {b.size}"
        )

    diff = a - b
    return int(np.dot(diff, diff))


def distances_sqr(features: np.ndarray, query: Sequence[int]) -> np.ndarray:
    """
    Squared distance from ``query`` to every row of ``features``.

    Row ``i`` of the result equals ``distance_sqr(features[i], query)``.
    """
    query = np.asarray(query, dtype=np.int64)
    if query.ndim != 1 or features.shape[1] != query.shape[0]:
        raise DimensionMismatchError(
            f"query has {query.size} features, training rows have {features.shape[1]}"
        )

    diff = features - query
    return np.einsum('ij,ij->i', diff, diff)


def classify(training: Dataset, query: Sequence[int]) -> int:
    """
    Label of the training row nearest to ``query``.

    When several rows share the minimum distance the one that comes first
    in the training set wins.

    Raises:
        EmptyDatasetError: If ``training`` has no rows
        DimensionMismatchError: If ``query`` does not match the training dimension
    """
    if len(training) == 0:
        raise EmptyDatasetError("cannot classify against an empty training set")

    distances = distances_sqr(training.features, query)
    # argmin returns the first index of the minimum
    return int(training.labels[np.argmin(distances)])
