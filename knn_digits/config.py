"""
config.py
~~~~~~~~~

Settings for a classification run.
"""

from dataclasses import dataclass
from typing import Optional

DEFAULT_TRAINING_PATH = 'trainingsample.csv'
DEFAULT_VALIDATION_PATH = 'validationsample.csv'
DEFAULT_PRECISION = 2


@dataclass(frozen=True)
class RunConfig:
    """
    Inputs and output settings for one run.

    Attributes:
        training_path: CSV file with the training images
        validation_path: CSV file with the validation images
        output_precision: Decimal places of the reported percentage
        workers: Classification threads (None means one per CPU)
        parallel_load: Read both CSV files concurrently
    """

    training_path: str = DEFAULT_TRAINING_PATH
    validation_path: str = DEFAULT_VALIDATION_PATH
    output_precision: int = DEFAULT_PRECISION
    workers: Optional[int] = None
    parallel_load: bool = True

    def __post_init__(self) -> None:
        if self.output_precision < 0:
            raise ValueError(
                f"output_precision must be non-negative, got {self.output_precision}"
            )
        if self.workers is not None and self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")
