"""
knn_digits package
~~~~~~~~~~~~~~~~~~

Nearest-neighbor classification of handwritten digits.
Contains the CSV dataset loader, the squared-Euclidean classifier,
the parallel evaluation driver and the command line entry point.
"""

__version__ = "1.0.0"
