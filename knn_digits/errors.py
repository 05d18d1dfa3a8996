"""
errors.py
~~~~~~~~~

Exceptions raised while loading data and classifying digits.
Every error aborts the run; the CLI maps each class to its own exit code.
"""


class KnnDigitsError(Exception):
    """Base class for all knn_digits errors."""

    exit_code = 1


class DatasetIOError(KnnDigitsError, IOError):
    """A dataset file could not be opened or read."""

    exit_code = 3

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"cannot read '{path}': {reason}")


class ParseError(KnnDigitsError):
    """A dataset row holds a non-integer field or the wrong field count."""

    exit_code = 4

    def __init__(self, path: str, line: int, reason: str):
        self.path = path
        self.line = line
        self.reason = reason
        super().__init__(f"{path}:{line}: {reason}")


class EmptyDatasetError(KnnDigitsError):
    """A training or validation set has no rows."""

    exit_code = 5


class DimensionMismatchError(KnnDigitsError):
    """Two feature vectors (or datasets) have different lengths."""

    exit_code = 6


# Name used for the empty-training-set case of classify()
EmptyTrainingSetError = EmptyDatasetError
