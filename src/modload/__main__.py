"""Run the modload command line interface with ``python -m modload``."""

import sys

from modload.cli import main


if __name__ == "__main__":
    sys.exit(main())
