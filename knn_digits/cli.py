"""
cli.py
~~~~~~

Command line entry point.

Loads the training and validation CSV files, classifies every validation
image by its nearest training image and prints one line to stdout:

    Percentage correct: 97.50%

Errors are reported on stderr and mapped to a non-zero exit code
(3 unreadable file, 4 malformed row, 5 empty dataset, 6 dimension mismatch).
"""

import os
import sys
import logging
import argparse
from typing import List, Optional

from knn_digits.config import (
    DEFAULT_PRECISION,
    DEFAULT_TRAINING_PATH,
    DEFAULT_VALIDATION_PATH,
    RunConfig
)
from knn_digits.dataset_loader import load_datasets
from knn_digits.errors import KnnDigitsError
from knn_digits.evaluation import EvaluationResult, evaluate, format_accuracy

logger = logging.getLogger(__name__)


# ============================================================================
# LOGGING SETUP
# ============================================================================

def configure_logging(level: Optional[str] = None) -> None:
    """
    Set up logging for the run.

    Logs go to stderr so stdout only carries the result line. The level
    comes from ``level`` if given, otherwise from the LOG_LEVEL environment
    variable, and defaults to WARNING.
    """
    log_level_str = (level or os.getenv('LOG_LEVEL', 'WARNING')).upper()
    log_level = getattr(logging, log_level_str, logging.WARNING)

    logging.basicConfig(
        level=log_level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
    logging.getLogger('knn_digits').setLevel(log_level)


# ============================================================================
# ARGUMENTS
# ============================================================================

def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be at least 1, got {number}")
    return number


def _non_negative_int(value: str) -> int:
    number = int(value)
    if number < 0:
        raise argparse.ArgumentTypeError(f"must be non-negative, got {number}")
    return number


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='knn-digits',
        description='Classify handwritten digits with a 1-nearest-neighbor search'
    )
    parser.add_argument(
        '--training',
        default=DEFAULT_TRAINING_PATH,
        help=f'training set CSV (default: {DEFAULT_TRAINING_PATH})'
    )
    parser.add_argument(
        '--validation',
        default=DEFAULT_VALIDATION_PATH,
        help=f'validation set CSV (default: {DEFAULT_VALIDATION_PATH})'
    )
    parser.add_argument(
        '--precision',
        type=_non_negative_int,
        default=DEFAULT_PRECISION,
        help=f'decimal places of the reported percentage (default: {DEFAULT_PRECISION})'
    )
    parser.add_argument(
        '--workers',
        type=_positive_int,
        default=None,
        help='number of classification threads (default: one per CPU)'
    )
    parser.add_argument(
        '--sequential-load',
        action='store_true',
        help='read the two CSV files one after the other'
    )
    parser.add_argument(
        '--log-level',
        default=None,
        help='logging level (default: $LOG_LEVEL or WARNING)'
    )
    return parser


def parse_config(argv: Optional[List[str]] = None) -> RunConfig:
    """Turn command line arguments into a RunConfig."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)
    return RunConfig(
        training_path=args.training,
        validation_path=args.validation,
        output_precision=args.precision,
        workers=args.workers,
        parallel_load=not args.sequential_load
    )


# ============================================================================
# RUN
# ============================================================================

def run(config: RunConfig) -> EvaluationResult:
    """
    Load both datasets and evaluate the classifier.

    Raises:
        KnnDigitsError: On any data error; nothing is retried or skipped
    """
    training, validation = load_datasets(
        config.training_path,
        config.validation_path,
        parallel=config.parallel_load
    )
    return evaluate(training, validation, workers=config.workers)


def main(argv: Optional[List[str]] = None) -> int:
    """Run from the command line and return the process exit code."""
    config = parse_config(argv)

    try:
        result = run(config)
    except KnnDigitsError as e:
        logger.error(f"Run aborted: {e}")
        print(f"error: {e}", file=sys.stderr)
        return e.exit_code

    logger.info(f"{result.correct}/{result.total} validation rows correct")
    print(format_accuracy(result, config.output_precision))
    return 0


if __name__ == '__main__':
    sys.exit(main())
