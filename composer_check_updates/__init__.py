"""
composer-check-updates: find Composer dependency upgrades beyond your constraints.

composer-check-updates reads the ``require`` and ``require-dev`` sections of
a ``composer.json``, asks Packagist which versions have been published, and
proposes constraint rewrites for packages whose newer releases fall outside
what the declared constraint already allows.

Features include:
    • Concurrent, cached Packagist lookups
    • major / minor / patch / prerelease classification
    • Style-preserving constraint rewrites (``^1.2`` → ``^2.0``)
    • latest / minor / patch target policies
    • Interactive selection and in-place ``composer.json`` upgrades
"""

from __future__ import annotations

from composer_check_updates.__version__ import __version__
from composer_check_updates.core import (
    CatalogCache,
    UpdateChecker,
    VersionCatalogClient,
    rewrite_constraint,
    select_for_target,
    select_stable,
)
from composer_check_updates.models import (
    Dependency,
    PackageUpdate,
    TargetPolicy,
    UpdateType,
)
from composer_check_updates.utils.version_utils import (
    compare_versions,
    get_update_type,
    is_version_newer,
    parse_version,
)

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "composer-check-updates Contributors"
__license__ = "MIT"
__description__ = "Check Composer dependencies for updates beyond their constraints."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
    "CatalogCache",
    "Dependency",
    "PackageUpdate",
    "TargetPolicy",
    "UpdateChecker",
    "UpdateType",
    "VersionCatalogClient",
    "compare_versions",
    "get_update_type",
    "is_version_newer",
    "parse_version",
    "rewrite_constraint",
    "select_for_target",
    "select_stable",
]
