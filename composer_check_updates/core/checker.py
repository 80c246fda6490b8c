"""Update detection for declared Composer dependencies.

:class:`UpdateChecker` ties the resolution pipeline together:

1. every package catalog is fetched through a shared
   :class:`~composer_check_updates.core.catalog.VersionCatalogClient`
   (one request per package per run, in bounded windows);
2. a candidate is chosen per the active :class:`TargetPolicy`;
3. the delta is classified and filtered (non-upgrades, ``minor_only``,
   ``patch_only``);
4. updates whose rewritten constraint equals the declared one are dropped.

Typical usage::

    from composer_check_updates.utils.http import HTTPClient
    from composer_check_updates.core.catalog import VersionCatalogClient
    from composer_check_updates.core.checker import UpdateChecker

    async with HTTPClient() as http:
        checker = UpdateChecker(VersionCatalogClient(http))
        updates = await checker.check(dependencies)

        for update in updates:
            print(f"{update.name}: {update.current_constraint} → {update.new_constraint}")
"""

from __future__ import annotations

import re
from typing import List, Optional, Sequence

from composer_check_updates.core.catalog import Catalog, VersionCatalogClient
from composer_check_updates.core.resolver import select_for_target
from composer_check_updates.models.update import Dependency, PackageUpdate, TargetPolicy
from composer_check_updates.utils.logger import get_logger
from composer_check_updates.utils.version_utils import (
    UpdateType,
    get_update_type,
    is_version_newer,
    normalize_version,
)

logger = get_logger("checker")

_OPERATOR_PREFIX = re.compile(r"^[~^>=<!\s|]+")
_LEADING_VERSION = re.compile(r"^\d+(?:\.\d+)*(?:-[\w.]+)?")


def extract_version_from_constraint(constraint: str) -> str:
    """Approximate the current version from a declared constraint.

    Leading operator, whitespace and pipe characters are removed and the
    first ``digits(.digits)*(-suffix)?`` token is returned. When there is
    no such token the constraint is returned unchanged.

    Examples:
        >>> extract_version_from_constraint("^5.4")
        '5.4'
        >>> extract_version_from_constraint(">=1.0 <2.0")
        '1.0'
        >>> extract_version_from_constraint("dev-main")
        'dev-main'
    """
    stripped = _OPERATOR_PREFIX.sub("", constraint)
    match = _LEADING_VERSION.match(stripped)
    return match.group(0) if match else constraint


class UpdateChecker:
    """Compute available updates for a list of dependencies.

    Args:
        catalog_client: Client used to fetch and cache Packagist catalogs.
        target: How far upgrades may move from the current version.
        minor_only: Drop ``major`` updates.
        patch_only: Keep only ``patch`` updates.

    Example::

        >>> checker = UpdateChecker(client, target=TargetPolicy.MINOR)
        >>> await checker.check([Dependency("monolog/monolog", "^2.0", installed_version="2.3.0")])
        [PackageUpdate(name='monolog/monolog', ..., latest_version='2.9.3', ...)]
    """

    def __init__(
        self,
        catalog_client: VersionCatalogClient,
        target: "TargetPolicy | str" = TargetPolicy.LATEST,
        minor_only: bool = False,
        patch_only: bool = False,
    ) -> None:
        self.catalog_client = catalog_client
        self.target = TargetPolicy.parse(target)
        self.minor_only = minor_only
        self.patch_only = patch_only

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def check(self, dependencies: Sequence[Dependency]) -> List[PackageUpdate]:
        """Return the updates available for *dependencies*, in input order.

        Packages without catalog data, without a candidate for the target,
        or whose update is filtered out contribute nothing. This method does
        not raise for individual packages.
        """
        if not dependencies:
            return []

        catalogs = await self.catalog_client.fetch_batch([dep.name for dep in dependencies])

        updates: List[PackageUpdate] = []
        for dependency in dependencies:
            update = self.evaluate(dependency, catalogs.get(dependency.name))
            if update is not None:
                updates.append(update)

        logger.info(
            "%d of %d package(s) have updates (target: %s)",
            len(updates),
            len(dependencies),
            self.target,
        )
        return updates

    def current_version_for(self, dependency: Dependency) -> str:
        """Installed version when known, else one derived from the constraint."""
        if dependency.installed_version:
            return normalize_version(dependency.installed_version)
        return extract_version_from_constraint(dependency.constraint)

    def evaluate(
        self,
        dependency: Dependency,
        catalog: Optional[Catalog],
    ) -> Optional[PackageUpdate]:
        """Decide the update for one dependency given its catalog."""
        if catalog is None:
            logger.debug("Skipping %s: no catalog data", dependency.name)
            return None

        current_version = self.current_version_for(dependency)
        candidate = select_for_target(catalog, current_version, self.target)

        if candidate is None or not is_version_newer(current_version, candidate):
            return None

        update_type = get_update_type(current_version, candidate)
        if not self._passes_type_filter(update_type):
            logger.debug("Skipping %s: %s update filtered", dependency.name, update_type)
            return None

        update = PackageUpdate.create(
            name=dependency.name,
            current_constraint=dependency.constraint,
            current_version=current_version,
            latest_version=candidate,
            update_type=update_type,
            is_dev=dependency.is_dev,
        )

        if update is None or update.is_noop:
            return None

        return update

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _passes_type_filter(self, update_type: UpdateType) -> bool:
        if self.patch_only:
            return update_type is UpdateType.PATCH
        if self.minor_only:
            return update_type is not UpdateType.MAJOR
        return True
