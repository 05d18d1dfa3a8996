"""
evaluation.py
~~~~~~~~~~~~~

Measure classification accuracy on a validation set.

The validation set is split into contiguous chunks, one per worker thread.
Every worker classifies its chunk against the shared read-only training
set and returns its own match count; the counts are summed at the end.
"""

import os
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

import numpy as np

from knn_digits.dataset_loader import Dataset
from knn_digits.errors import DimensionMismatchError, EmptyDatasetError
from knn_digits.nearest_neighbor import classify

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of classifying a validation set."""

    correct: int
    total: int

    @property
    def accuracy(self) -> float:
        """Percentage of correctly classified rows (0.0 to 100.0)."""
        return self.correct / self.total * 100


def default_workers() -> int:
    """Number of worker threads used when none is requested."""
    return os.cpu_count() or 4


def _count_matches(
    training: Dataset,
    features: np.ndarray,
    labels: np.ndarray
) -> int:
    """Classify one chunk of validation rows and count the correct ones."""
    correct = 0
    for query, label in zip(features, labels):
        if classify(training, query) == label:
            correct += 1
    return correct


def evaluate(
    training: Dataset,
    validation: Dataset,
    workers: Optional[int] = None
) -> EvaluationResult:
    """
    Classify every validation row and count how many match their label.

    Args:
        training: Labeled reference images
        validation: Labeled images to classify
        workers: Size of the thread pool (defaults to the CPU count)

    Returns:
        EvaluationResult: Correct and total counts

    Raises:
        EmptyDatasetError: If either dataset has no rows
        DimensionMismatchError: If the datasets have different dimensions
        ValueError: If ``workers`` is less than 1
    """
    if len(training) == 0:
        raise EmptyDatasetError("training set is empty")
    if len(validation) == 0:
        raise EmptyDatasetError("validation set is empty, accuracy is undefined")
    if training.dimension != validation.dimension:
        raise DimensionMismatchError(
            f"training rows have {training.dimension} features, "
            f"validation rows have {validation.dimension}"
        )

    if workers is None:
        workers = default_workers()
    if workers < 1:
        raise ValueError(f"workers must be at least 1, got {workers}")
    workers = min(workers, len(validation))

    bounds = np.linspace(0, len(validation), workers + 1).astype(int)
    logger.info(
        f"Classifying {len(validation)} rows against {len(training)} "
        f"training rows on {workers} worker(s)"
    )

    start = time.time()
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [
            executor.submit(
                _count_matches,
                training,
                validation.features[lo:hi],
                validation.labels[lo:hi]
            )
            for lo, hi in zip(bounds[:-1], bounds[1:])
        ]
        correct = sum(future.result() for future in futures)

    logger.info(
        f"Classified {len(validation)} rows in {time.time() - start:.2f}s: "
        f"{correct} correct"
    )
    return EvaluationResult(correct=correct, total=len(validation))


def format_accuracy(result: EvaluationResult, precision: int = 2) -> str:
    """Render the result line, e.g. ``Percentage correct: 97.50%``."""
    return f"Percentage correct: {result.accuracy:.{precision}f}%"
