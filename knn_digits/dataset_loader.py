"""
dataset_loader.py
~~~~~~~~~~~~~~~~~

Load labeled digit images from CSV files.

Each file starts with a header line, which is ignored. Every following
line is ``label,pixel_0,...,pixel_{N-1}``, all integers. A file is either
loaded completely or rejected: a single malformed row aborts the load.
"""

import os
import re
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Iterator, NamedTuple, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from knn_digits.errors import DatasetIOError, DimensionMismatchError, ParseError

logger = logging.getLogger(__name__)

# The header is line 1, so data row i (0-based) sits on line i + 2
_FIRST_DATA_LINE = 2

_INTEGER_FIELD = r'[+-]?\d+'
_PARSER_LINE = re.compile(r'line (\d+)')


class LabeledVector(NamedTuple):
    """One image: its digit label and its pixel intensities."""

    label: int
    features: np.ndarray


class Dataset:
    """
    An immutable, ordered collection of labeled feature vectors.

    Rows keep the order they had in the source file. Labels and features
    are stored as read-only int64 arrays so the same dataset can be shared
    between worker threads without copying or locking.
    """

    def __init__(self, labels, features):
        """
        Build a dataset from a label array and a feature matrix.

        Args:
            labels: Sequence of ``n`` integer labels
            features: ``n x d`` integer matrix, one row per label

        Raises:
            DimensionMismatchError: If the shapes do not line up
        """
        labels = np.array(labels, dtype=np.int64).reshape(-1)
        features = np.array(features, dtype=np.int64)
        if features.size == 0 and features.ndim < 2:
            features = features.reshape(len(labels), 0)

        if features.ndim != 2:
            raise DimensionMismatchError(
                f"features must be a 2-D matrix, got {features.ndim} dimension(s)"
            )
        if features.shape[0] != labels.shape[0]:
            raise DimensionMismatchError(
                f"{labels.shape[0]} labels but {features.shape[0]} feature rows"
            )

        labels.setflags(write=False)
        features.setflags(write=False)
        self._labels = labels
        self._features = features

    @classmethod
    def from_vectors(cls, vectors: Sequence[Tuple[int, Sequence[int]]]) -> 'Dataset':
        """
        Build a dataset from ``(label, features)`` pairs.

        Raises:
            DimensionMismatchError: If the feature sequences differ in length
        """
        if not vectors:
            return cls([], np.empty((0, 0), dtype=np.int64))

        dimension = len(vectors[0][1])
        for index, (_, features) in enumerate(vectors):
            if len(features) != dimension:
                raise DimensionMismatchError(
                    f"row {index} has {len(features)} features, expected {dimension}"
                )

        labels = [label for label, _ in vectors]
        features = np.array([list(f) for _, f in vectors], dtype=np.int64)
        return cls(labels, features.reshape(len(vectors), dimension))

    @property
    def labels(self) -> np.ndarray:
        return self._labels

    @property
    def features(self) -> np.ndarray:
        return self._features

    @property
    def dimension(self) -> int:
        """Length of every feature vector (0 for an empty dataset)."""
        return self._features.shape[1]

    def __len__(self) -> int:
        return self._labels.shape[0]

    def __getitem__(self, index: int) -> LabeledVector:
        return LabeledVector(int(self._labels[index]), self._features[index])

    def __iter__(self) -> Iterator[LabeledVector]:
        for index in range(len(self)):
            yield self[index]

    def __repr__(self) -> str:
        return f"Dataset(rows={len(self)}, dimension={self.dimension})"


def _first_bad_row(path: str, column: int) -> Optional[int]:
    """
    Find the first row whose field in ``column`` is not an integer.

    Only called once a column has already failed integer inference, so
    re-reading that single column as text is acceptable.
    """
    raw = pd.read_csv(
        path,
        header=None,
        skiprows=1,
        usecols=[column],
        dtype=str,
        keep_default_na=False,
        skip_blank_lines=False,
        encoding='utf-8'
    )[column].fillna('')

    valid = raw.str.strip().str.fullmatch(_INTEGER_FIELD).to_numpy(dtype=bool)
    bad_rows = np.flatnonzero(~valid)
    if len(bad_rows) == 0:
        return None
    return int(bad_rows[0])


def _raise_for_bad_column(path: str, frame: pd.DataFrame, column: int) -> None:
    """Raise a ParseError pointing at the first malformed field of a column."""
    series = frame[column]
    missing = np.flatnonzero(series.isna().to_numpy())
    row = _first_bad_row(path, column)

    if row is None and len(missing) == 0:
        # Parsed as a non-integer type but every field looks like an integer
        raise ParseError(
            path, _FIRST_DATA_LINE,
            f"column {column} does not fit in a 64-bit integer"
        )

    if row is None or (len(missing) > 0 and missing[0] <= row):
        row = int(missing[0])
        raise ParseError(
            path, row + _FIRST_DATA_LINE,
            f"expected {frame.shape[1]} fields, found fewer"
        )

    raise ParseError(
        path, row + _FIRST_DATA_LINE,
        f"field {column} is not an integer: {series.iloc[row]!r}"
    )


def load_dataset(path: str) -> Dataset:
    """
    Load a dataset from a CSV file.

    Args:
        path: Path to a UTF-8 CSV file with a header line

    Returns:
        Dataset: Rows in file order; empty if the file has no data lines

    Raises:
        DatasetIOError: If the file cannot be opened or read
        ParseError: If a field is not an integer or a row has the wrong
            number of fields
    """
    filename = os.path.basename(path)
    logger.debug(f"Loading dataset from {path}")

    try:
        frame = pd.read_csv(
            path,
            header=None,
            skiprows=1,
            skip_blank_lines=False,
            encoding='utf-8'
        )
    except pd.errors.EmptyDataError:
        logger.warning(f"{filename} has no data rows")
        return Dataset([], np.empty((0, 0), dtype=np.int64))
    except pd.errors.ParserError as e:
        match = _PARSER_LINE.search(str(e))
        line = int(match.group(1)) if match else _FIRST_DATA_LINE
        raise ParseError(path, line, f"wrong number of fields ({e})") from e
    except UnicodeDecodeError as e:
        raise DatasetIOError(path, f"not valid UTF-8 ({e.reason})") from e
    except OSError as e:
        raise DatasetIOError(path, e.strerror or str(e)) from e

    for column in frame.columns:
        if not pd.api.types.is_integer_dtype(frame[column]) or \
                pd.api.types.is_unsigned_integer_dtype(frame[column]):
            _raise_for_bad_column(path, frame, column)

    values = frame.to_numpy(dtype=np.int64)
    dataset = Dataset(values[:, 0], values[:, 1:])

    logger.info(
        f"Loaded {filename}: {len(dataset)} rows, dimension {dataset.dimension}"
    )
    return dataset


def load_datasets(
    training_path: str,
    validation_path: str,
    parallel: bool = True
) -> Tuple[Dataset, Dataset]:
    """
    Load the training and validation sets.

    Args:
        training_path: CSV file with the labeled training images
        validation_path: CSV file with the labeled validation images
        parallel: If True, read both files at the same time on two threads

    Returns:
        tuple: (training, validation)

    Raises:
        DatasetIOError, ParseError: From whichever file fails first
            (training is checked before validation)
    """
    if not parallel:
        return load_dataset(training_path), load_dataset(validation_path)

    with ThreadPoolExecutor(max_workers=2) as executor:
        training_future = executor.submit(load_dataset, training_path)
        validation_future = executor.submit(load_dataset, validation_path)
        return training_future.result(), validation_future.result()
