"""
test_nearest_neighbor.py
~~~~~~~~~~~~~~~~~~~~~~~~

Unit tests for the distance function and the 1-NN classifier.
"""

import pytest
import numpy as np

from knn_digits.dataset_loader import Dataset
from knn_digits.errors import (
    DimensionMismatchError,
    EmptyDatasetError,
    EmptyTrainingSetError
)
from knn_digits.nearest_neighbor import classify, distance_sqr, distances_sqr


@pytest.fixture
def two_point_training():
    """Training set with one sample near the origin and one far away."""
    return Dataset.from_vectors([(1, [0, 0]), (2, [10, 10])])


@pytest.mark.unit
class TestDistanceSqr:
    """Test squared Euclidean distance."""

    def test_known_value(self):
        """Test the distance between two small vectors."""
        assert distance_sqr([1, 2, 3], [4, 6, 3]) == 9 + 16 + 0

    def test_identity(self):
        """Test that a vector is at distance zero from itself."""
        assert distance_sqr([5, 0, 255, 17], [5, 0, 255, 17]) == 0

    @pytest.mark.parametrize("a, b", [
        ([0, 0], [3, 4]),
        ([-7, 2, 9], [4, -1, 0]),
        ([255] * 5, [0] * 5),
    ])
    def test_symmetry(self, a, b):
        """Test that swapping the arguments does not change the distance."""
        assert distance_sqr(a, b) == distance_sqr(b, a)

    def test_empty_vectors(self):
        """Test that two empty vectors are at distance zero."""
        assert distance_sqr([], []) == 0

    def test_no_overflow_for_full_range_pixels(self):
        """Test a large image of maximal pixel differences."""
        size = 4096
        assert distance_sqr([255] * size, [0] * size) == 255 * 255 * size

    def test_returns_python_int(self):
        """Test that the result is a plain int, not a numpy scalar."""
        assert type(distance_sqr([1], [2])) is int

    def test_length_mismatch_rejected(self):
        """Test that vectors of different lengths are not truncated."""
        with pytest.raises(DimensionMismatchError):
            distance_sqr([1, 2, 3], [1, 2])


@pytest.mark.unit
class TestDistancesSqr:
    """Test the vectorized distance to every training row."""

    def test_matches_scalar_distance(self):
        """Test that each row agrees with distance_sqr."""
        features = np.array([[0, 0, 0], [1, 2, 3], [255, 0, 128]])
        query = [3, 2, 1]

        result = distances_sqr(features, query)

        assert result.tolist() == [distance_sqr(row, query) for row in features]

    def test_query_length_mismatch(self):
        """Test that a query of the wrong length is rejected."""
        with pytest.raises(DimensionMismatchError):
            distances_sqr(np.zeros((2, 3), dtype=np.int64), [1, 2])


@pytest.mark.unit
class TestClassify:
    """Test nearest-neighbor classification."""

    def test_picks_nearest_label(self, two_point_training):
        """Test that the closest training sample's label is returned."""
        assert classify(two_point_training, [0, 1]) == 1
        assert classify(two_point_training, [9, 9]) == 2

    def test_tie_breaks_to_first_sample(self):
        """Test that equal distances resolve to the earliest training row."""
        training = Dataset.from_vectors([(1, [0, 0]), (2, [0, 0])])

        assert classify(training, [0, 0]) == 1

    def test_tie_between_non_adjacent_rows(self):
        """Test first-wins tie-breaking when a farther row sits between."""
        training = Dataset.from_vectors([
            (4, [5, 5]),
            (8, [1, 0]),
            (9, [50, 50]),
            (3, [0, 1]),
        ])

        assert classify(training, [0, 0]) == 8

    def test_single_row_always_wins(self):
        """Test that a one-row training set returns its label for any query."""
        training = Dataset.from_vectors([(7, [1, 2, 3])])

        assert classify(training, [1, 2, 3]) == 7
        assert classify(training, [255, 255, 255]) == 7
        assert classify(training, [-100, 0, 100]) == 7

    def test_deterministic(self, two_point_training):
        """Test that repeated calls return the same label."""
        results = {classify(two_point_training, [4, 6]) for _ in range(20)}

        assert len(results) == 1

    def test_empty_training_set(self):
        """Test that an empty training set raises EmptyDatasetError."""
        with pytest.raises(EmptyDatasetError):
            classify(Dataset.from_vectors([]), [0, 0])

    def test_empty_training_set_alias(self):
        """Test that the EmptyTrainingSetError name catches the same error."""
        with pytest.raises(EmptyTrainingSetError):
            classify(Dataset.from_vectors([]), [0, 0])

    def test_query_dimension_mismatch(self, two_point_training):
        """Test that a query with the wrong length is rejected."""
        with pytest.raises(DimensionMismatchError):
            classify(two_point_training, [0, 0, 0])

    def test_returns_python_int(self, two_point_training):
        """Test that the label is a plain int."""
        assert type(classify(two_point_training, [0, 0])) is int
