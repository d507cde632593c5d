"""Allow ``python -m refdbc``."""

import sys

from refdbc.cli import main

sys.exit(main())
