"""Run sitemark with `python -m sitemark`."""

import sys

from sitemark.cli import main

sys.exit(main())
