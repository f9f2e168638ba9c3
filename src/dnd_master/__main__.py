"""Allow ``python -m dnd_master``."""

import sys

from dnd_master.cli import main


sys.exit(main())
