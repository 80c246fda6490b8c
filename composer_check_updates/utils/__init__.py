"""
Utility helpers for composer-check-updates.

This package provides reusable utilities used across the tool, including:

- Console output helpers (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- Async HTTP client utilities
- Version and constraint helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from composer_check_updates.utils.filesystem import (
    create_timestamped_backup,
    safe_read_file,
    safe_write_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from composer_check_updates.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from composer_check_updates.utils.console import (
    colorize_update_type,
    confirm,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from composer_check_updates.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Version and constraint utilities
# ---------------------------------------------------------------------------

from composer_check_updates.utils.version_utils import (
    compare_versions,
    get_update_type,
    is_version_newer,
    parse_version,
)
from composer_check_updates.utils.constraint_utils import (
    parse_constraint,
    rewrite_constraint,
)

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "confirm",
    "print_error",
    "print_info",
    "print_table",
    "print_success",
    "print_warning",
    "get_raw_console",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "create_timestamped_backup",
    # HTTP
    "HTTPClient",
    # Versions and constraints
    "compare_versions",
    "get_update_type",
    "is_version_newer",
    "parse_version",
    "parse_constraint",
    "rewrite_constraint",
]
