"""Allow running as `python -m repl_fold`."""

import sys

from repl_fold.cli import main

sys.exit(main())
