"""Allow ``python -m currency_converter``."""

import sys

from currency_converter.cli import main

sys.exit(main())
