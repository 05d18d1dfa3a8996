import sys

from knn_digits.cli import main

sys.exit(main())
