"""Allow ``python -m mtxmult n s``."""

import sys

from .cli import main

sys.exit(main())
