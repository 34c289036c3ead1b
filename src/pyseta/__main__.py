"""Allow ``python -m pyseta``."""

import sys

from pyseta.cli import main

sys.exit(main())
