"""Candidate selection from a Packagist catalog.

Two entry points pick the version to propose for a package:

* :func:`select_stable` returns the highest stable version, falling back
  to the first non-``dev-`` row when the catalog has no stable release.
* :func:`select_for_target` additionally restricts candidates to the
  current major (``minor`` target) or the current major.minor (``patch``
  target). It never falls back to an unrelated version.

Both return the version with any leading ``v`` removed, or ``None``.
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from composer_check_updates.core.catalog import CatalogVersion
from composer_check_updates.models.update import TargetPolicy
from composer_check_updates.utils.logger import get_logger
from composer_check_updates.utils.version_utils import (
    ParsedVersion,
    normalize_version,
    parse_version,
    version_sort_key,
)

logger = get_logger("resolver")

__all__ = [
    "is_dev_version",
    "is_stable",
    "is_unstable_version",
    "select_for_target",
    "select_stable",
]

# alpha/beta/rc anywhere, or a bare a/b after a digit or separator: 1.0a1, 1.1.0-b1
_UNSTABLE_PATTERN = re.compile(
    r"(?:alpha|beta|rc)\d*|(?:(?<=\d)|(?<=[-._]))[ab]\d*(?![a-z\d])", re.IGNORECASE
)


def is_dev_version(entry: CatalogVersion) -> bool:
    """Return True for branch aliases such as ``dev-main`` or ``2.x-dev``."""
    return entry.version.startswith("dev-") or "dev" in entry.version_normalized


def is_unstable_version(version: str) -> bool:
    """Return True if *version* carries an alpha, beta or RC marker.

    Examples:
        >>> is_unstable_version("1.1.0-beta1")
        True
        >>> is_unstable_version("2.0.0RC2")
        True
        >>> is_unstable_version("1.0.0")
        False
    """
    return bool(_UNSTABLE_PATTERN.search(version))


def is_stable(entry: CatalogVersion) -> bool:
    return not is_dev_version(entry) and not is_unstable_version(entry.version)


def _sort_descending(versions: List[str]) -> List[str]:
    # sorted() is stable, so equal versions keep catalog order
    return sorted(versions, key=version_sort_key(), reverse=True)


def select_stable(catalog: Sequence[CatalogVersion]) -> Optional[str]:
    """Return the highest stable version in *catalog*.

    When no stable version exists, the first entry not starting with
    ``dev-`` is returned instead, unstable or not.

    Examples:
        >>> rows = [CatalogVersion("1.0.0", "1.0.0.0"),
        ...         CatalogVersion("1.1.0-beta1", "1.1.0.0-beta1"),
        ...         CatalogVersion("dev-main", "dev-main")]
        >>> select_stable(rows)
        '1.0.0'
    """
    stable = [normalize_version(entry.version) for entry in catalog if is_stable(entry)]

    if stable:
        return _sort_descending(stable)[0]

    for entry in catalog:
        if not entry.version.startswith("dev-"):
            logger.debug("No stable release; falling back to %s", entry.version)
            return normalize_version(entry.version)

    return None


def _matches_target(
    candidate: ParsedVersion,
    current: ParsedVersion,
    target: TargetPolicy,
) -> bool:
    if target is TargetPolicy.PATCH:
        return candidate.major == current.major and candidate.minor == current.minor
    if target is TargetPolicy.MINOR:
        return candidate.major == current.major
    return True


def select_for_target(
    catalog: Sequence[CatalogVersion],
    current_version: str,
    target: "TargetPolicy | str" = TargetPolicy.LATEST,
) -> Optional[str]:
    """Return the highest stable version allowed by *target*.

    Args:
        catalog: Catalog rows in index order.
        current_version: Installed or constraint-derived version.
        target: ``latest``, ``minor`` or ``patch``. Unknown strings are
            treated as ``latest``.

    Returns:
        The chosen version, or ``None`` when no stable candidate passes
        the target filter. If *current_version* cannot be parsed this is
        :func:`select_stable` instead.

    Examples:
        >>> rows = [CatalogVersion(v, v) for v in ("1.2.0", "1.3.0", "2.0.0")]
        >>> select_for_target(rows, "1.2.0", "minor")
        '1.3.0'
        >>> select_for_target(rows, "1.2.0", "patch") is None
        True
    """
    current = parse_version(current_version)
    if current is None:
        logger.debug("Cannot parse current version '%s'", current_version)
        return select_stable(catalog)

    try:
        policy = TargetPolicy(str(target).lower())
    except ValueError:
        policy = TargetPolicy.LATEST

    candidates: List[str] = []
    for entry in catalog:
        if not is_stable(entry):
            continue

        version = normalize_version(entry.version)
        parsed = parse_version(version)
        if parsed is None:
            continue

        if _matches_target(parsed, current, policy):
            candidates.append(version)

    if not candidates:
        return None

    return _sort_descending(candidates)[0]
