"""
Core resolution components for composer-check-updates.

- :mod:`catalog` fetches and caches Packagist version catalogs.
- :mod:`resolver` picks a stable candidate per target policy.
- :mod:`checker` turns dependencies and catalogs into updates.
- :mod:`manifest` reads and rewrites ``composer.json``.
- :mod:`selection` holds the interactive picker state.
"""

from __future__ import annotations

from composer_check_updates.core.catalog import (
    CatalogCache,
    CatalogEntry,
    CatalogVersion,
    VersionCatalogClient,
)
from composer_check_updates.core.checker import (
    UpdateChecker,
    extract_version_from_constraint,
)
from composer_check_updates.core.manifest import (
    ComposerManifest,
    apply_updates,
    collect_dependencies,
    load_lock_versions,
)
from composer_check_updates.core.resolver import select_for_target, select_stable
from composer_check_updates.core.selection import UpdateSelection
from composer_check_updates.utils.constraint_utils import rewrite_constraint

__all__ = [
    "CatalogCache",
    "CatalogEntry",
    "CatalogVersion",
    "ComposerManifest",
    "UpdateChecker",
    "UpdateSelection",
    "VersionCatalogClient",
    "apply_updates",
    "collect_dependencies",
    "extract_version_from_constraint",
    "load_lock_versions",
    "rewrite_constraint",
    "select_for_target",
    "select_stable",
]
