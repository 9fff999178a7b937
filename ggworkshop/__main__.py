"""Allow ``python -m ggworkshop``."""

import sys

from ggworkshop.cli import main

if __name__ == "__main__":  # pragma: no cover - CLI entry
    sys.exit(main())
