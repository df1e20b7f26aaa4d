"""Allow `python -m rbc`."""

import sys

from rbc.cli import main

sys.exit(main())
