"""
Click subcommands for composer-check-updates.

- ``check``: report available updates.
- ``update``: write chosen updates to ``composer.json``.
"""

from __future__ import annotations

from composer_check_updates.commands.check import check
from composer_check_updates.commands.update import update

__all__ = ["check", "update"]
