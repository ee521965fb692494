"""Entry point for ``python -m formatlint``."""

import sys

from formatlint.cli import main

if __name__ == "__main__":
    sys.exit(main())
