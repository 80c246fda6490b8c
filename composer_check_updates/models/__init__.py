"""
Unified data model exports for composer-check-updates.

Example:
    >>> from composer_check_updates.models import PackageUpdate, TargetPolicy
"""

from __future__ import annotations

from composer_check_updates.models.update import (
    Dependency,
    PackageUpdate,
    TargetPolicy,
)
from composer_check_updates.utils.constraint_utils import ParsedConstraint
from composer_check_updates.utils.version_utils import ParsedVersion, UpdateType

__all__ = [
    "Dependency",
    "PackageUpdate",
    "ParsedConstraint",
    "ParsedVersion",
    "TargetPolicy",
    "UpdateType",
]
