"""Allow ``python -m moonpointer``."""

import sys

from moonpointer.cli import main

sys.exit(main())
