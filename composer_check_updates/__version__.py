"""
composer-check-updates version information.

This module provides a single source of truth for the package version.
It follows Semantic Versioning: https://semver.org/

Version format:
    MAJOR.MINOR.PATCH[-PRERELEASE]

Examples:
    0.1.0
    1.0.0-rc1
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Main version (single source of truth)
# ---------------------------------------------------------------------------

__version__ = "0.3.0"


# ---------------------------------------------------------------------------
# Human-readable version (for CLI)
# ---------------------------------------------------------------------------

VERSION_STRING = f"composer-check-updates {__version__}"
