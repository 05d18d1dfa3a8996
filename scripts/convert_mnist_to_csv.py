#!/usr/bin/env python3
"""
Convert an MNIST NPZ archive to the CSV files read by knn-digits.

The archive must hold ``train_images``, ``train_labels``, ``val_images``
and ``val_labels`` arrays. Images may be floats in [0, 1] or integers in
0-255; they are written as integer pixel intensities.

Usage:
    python scripts/convert_mnist_to_csv.py [--npz data/mnist.npz] [--limit 5000]

The script will:
1. Load the training and validation splits from the NPZ file
2. Write trainingsample.csv and validationsample.csv to the output directory
3. Verify the written files load back with the same labels
"""

import os
import sys
import argparse
from typing import Optional, Tuple

import numpy as np
import pandas as pd


def to_pixel_ints(images: np.ndarray) -> np.ndarray:
    """
    Convert images to integer pixel intensities.

    Parameters:
    -----------
    images : np.ndarray
        ``n x d`` array, floats in [0, 1] or integers in 0-255

    Returns:
    --------
    np.ndarray
        ``n x d`` int64 array with values in 0-255
    """
    images = np.asarray(images)
    if np.issubdtype(images.dtype, np.floating):
        images = np.rint(np.clip(images, 0.0, 1.0) * 255)
    return images.astype(np.int64).reshape(len(images), -1)


def load_npz_mnist(filepath: str) -> Tuple:
    """
    Load the training and validation splits of an MNIST NPZ archive.

    Returns:
    --------
    tuple
        ((train_images, train_labels), (val_images, val_labels))
    """
    print(f"📂 Loading MNIST data from: {filepath}")

    with np.load(filepath) as data:
        training = (to_pixel_ints(data['train_images']), data['train_labels'])
        validation = (to_pixel_ints(data['val_images']), data['val_labels'])

    print(f"✅ Loaded successfully:")
    print(f"   - Training: {len(training[0])} images")
    print(f"   - Validation: {len(validation[0])} images")

    return training, validation


def write_sample_csv(
    images: np.ndarray,
    labels: np.ndarray,
    filepath: str,
    limit: Optional[int] = None
) -> int:
    """
    Write images and labels as ``label,pixel0,...,pixelN`` rows.

    Parameters:
    -----------
    images : np.ndarray
        ``n x d`` pixel array
    labels : np.ndarray
        ``n`` digit labels
    filepath : str
        Output CSV path
    limit : int, optional
        Only write the first ``limit`` rows

    Returns:
    --------
    int
        Number of rows written
    """
    pixels = to_pixel_ints(images)
    labels = np.asarray(labels, dtype=np.int64).reshape(-1)
    if len(pixels) != len(labels):
        raise ValueError(
            f"{len(pixels)} images but {len(labels)} labels"
        )

    if limit is not None:
        pixels = pixels[:limit]
        labels = labels[:limit]

    frame = pd.DataFrame(
        pixels, columns=[f'pixel{i}' for i in range(pixels.shape[1])]
    )
    frame.insert(0, 'label', labels)
    frame.to_csv(filepath, index=False)

    print(f"💾 Wrote {len(frame)} rows to {filepath}")
    return len(frame)


def verify_csv(filepath: str, labels: np.ndarray) -> bool:
    """Check that a written CSV loads back with the expected labels."""
    written = pd.read_csv(filepath)
    assert np.array_equal(written['label'].to_numpy(), labels), \
        f"Labels in {filepath} don't match!"
    print(f"✅ Verified {filepath}")
    return True


def main():
    """Main conversion function."""
    script_dir = os.path.dirname(os.path.abspath(__file__))
    project_root = os.path.dirname(script_dir)

    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        '--npz', default=os.path.join(project_root, 'data', 'mnist.npz'),
        help='MNIST NPZ archive'
    )
    parser.add_argument(
        '--output-dir', default=project_root,
        help='directory for the CSV files'
    )
    parser.add_argument(
        '--limit', type=int, default=None,
        help='only write the first N rows of each split'
    )
    args = parser.parse_args()

    print("=" * 60)
    print("MNIST NPZ → knn-digits CSV")
    print("=" * 60)

    if not os.path.exists(args.npz):
        print(f"❌ Error: NPZ file not found: {args.npz}")
        sys.exit(1)

    training_path = os.path.join(args.output_dir, 'trainingsample.csv')
    validation_path = os.path.join(args.output_dir, 'validationsample.csv')

    try:
        training, validation = load_npz_mnist(args.npz)

        write_sample_csv(*training, training_path, limit=args.limit)
        write_sample_csv(*validation, validation_path, limit=args.limit)

        verify_csv(training_path, np.asarray(training[1])[:args.limit])
        verify_csv(validation_path, np.asarray(validation[1])[:args.limit])

        print("\n" + "=" * 60)
        print("✅ CONVERSION COMPLETE!")
        print("=" * 60)
        print(f"\n📝 Next step: knn-digits --training {training_path} "
              f"--validation {validation_path}")

    except Exception as e:
        print(f"\n❌ Error during conversion: {e}")
        import traceback
        traceback.print_exc()
        sys.exit(1)


if __name__ == '__main__':
    main()
