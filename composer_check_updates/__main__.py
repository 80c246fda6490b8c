"""
Executable module for composer-check-updates.

Running:
    python -m composer_check_updates

is equivalent to:
    ccu

This module simply forwards execution to the CLI entrypoint defined in
`composer_check_updates.cli`.
"""

from __future__ import annotations

import sys

from composer_check_updates.cli import main

if __name__ == "__main__":
    sys.exit(main())
