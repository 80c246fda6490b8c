"""Packagist version catalogs with a per-run cache.

:class:`VersionCatalogClient` asks the Packagist v2 metadata endpoint
(``/p2/{vendor}/{package}.json``) for every published version of a
package. Results are kept in a :class:`CatalogCache` owned by the client,
so within one run each package is requested at most once.

Batch fetching is windowed: uncached names are split into groups of
``concurrency`` and each group is awaited as a whole before the next one
starts. With ``parallel=False`` the same names are fetched one by one.

Nothing in this module raises for a single package. A non-200 status, a
transport error, a timeout or an unexpected body all mean "no catalog for
this package" and are logged at debug level.

Typical usage::

    async with HTTPClient() as http:
        client = VersionCatalogClient(http)
        catalogs = await client.fetch_batch(["monolog/monolog", "symfony/console"])
        print(catalogs["monolog/monolog"][0].version)
"""

from __future__ import annotations

import time
import asyncio
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import httpx

from composer_check_updates.exceptions import NetworkError, PackagistError
from composer_check_updates.utils.http import HTTPClient
from composer_check_updates.utils.logger import get_logger
from composer_check_updates.constants import (
    DEFAULT_CONCURRENCY,
    PACKAGE_METADATA_PATH,
    PACKAGIST_REPO_URL,
)

logger = get_logger("catalog")

__all__ = [
    "CatalogCache",
    "CatalogEntry",
    "CatalogVersion",
    "VersionCatalogClient",
    "expand_minified",
]

#: Marker used by minified Packagist payloads to drop an inherited key.
UNSET_MARKER = "__unset"


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CatalogVersion:
    """One published version of a package.

    Attributes:
        version: Raw tag as published (``v2.1.0``, ``dev-main``).
        version_normalized: Packagist's normalised form (``2.1.0.0``);
            falls back to ``version`` when the index omits it.
    """

    version: str
    version_normalized: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> Optional["CatalogVersion"]:
        version = payload.get("version")
        if not isinstance(version, str) or not version:
            return None

        normalized = payload.get("version_normalized")
        if not isinstance(normalized, str) or not normalized:
            normalized = version

        return cls(version=version, version_normalized=normalized)


Catalog = Tuple[CatalogVersion, ...]


@dataclass(frozen=True)
class CatalogEntry:
    """Cached catalog of one package, in index order."""

    package_name: str
    versions: Catalog
    fetched_at: float


class CatalogCache:
    """In-memory catalog store for a single run.

    The first entry stored for a package wins; later writes for the same
    name are ignored. A cache is never shared between runs.
    """

    def __init__(self) -> None:
        self._entries: Dict[str, CatalogEntry] = {}

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, name: str) -> Optional[CatalogEntry]:
        return self._entries.get(name)

    def put(self, name: str, versions: Sequence[CatalogVersion]) -> CatalogEntry:
        """Store *versions* for *name* unless an entry already exists."""
        existing = self._entries.get(name)
        if existing is not None:
            return existing

        entry = CatalogEntry(
            package_name=name,
            versions=tuple(versions),
            fetched_at=time.time(),
        )
        self._entries[name] = entry
        return entry

    def names(self) -> List[str]:
        return sorted(self._entries)


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------


def expand_minified(entries: Sequence[Any]) -> List[Dict[str, Any]]:
    """Expand a ``composer/2.0`` minified version list.

    In minified payloads each entry only lists keys that changed since the
    previous entry; a value of ``"__unset"`` removes an inherited key.
    Non-dict entries are dropped. Expanding an already full list is a no-op.
    """
    expanded: List[Dict[str, Any]] = []
    previous: Dict[str, Any] = {}

    for entry in entries:
        if not isinstance(entry, dict):
            continue

        current = dict(previous)
        for key, value in entry.items():
            if value == UNSET_MARKER:
                current.pop(key, None)
            else:
                current[key] = value

        expanded.append(current)
        previous = current

    return expanded


def parse_catalog_payload(name: str, data: Dict[str, Any]) -> Catalog:
    """Extract the version list for *name* from a Packagist response body.

    Raises:
        PackagistError: The body is not ``{"packages": {name: [...]}}``.
    """
    packages = data.get("packages")
    if not isinstance(packages, dict) or not isinstance(packages.get(name), list):
        raise PackagistError(
            f"Unexpected catalog payload for '{name}'",
            package_name=name,
        )

    rows = packages[name]
    if data.get("minified"):
        rows = expand_minified(rows)

    versions: List[CatalogVersion] = []
    for row in rows:
        if isinstance(row, dict):
            parsed = CatalogVersion.from_payload(row)
            if parsed is not None:
                versions.append(parsed)

    return tuple(versions)


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


class VersionCatalogClient:
    """Cache-first Packagist catalog fetcher.

    Args:
        http_client: Open :class:`HTTPClient` (owns the connection pool).
        cache: Cache to populate; a fresh one is created when omitted.
        concurrency: Requests per window in :meth:`fetch_batch`.
        base_url: Repository base URL, ``https://repo.packagist.org/p2``
            by default.
        parallel: Issue each window concurrently. When ``False`` (or when
            ``concurrency`` is 1 or less) packages are fetched sequentially
            with the same cache and timeout behaviour.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        cache: Optional[CatalogCache] = None,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
        base_url: str = PACKAGIST_REPO_URL,
        parallel: bool = True,
    ) -> None:
        self.http_client = http_client
        self.cache = cache if cache is not None else CatalogCache()
        self.concurrency = max(1, concurrency)
        self.base_url = base_url.rstrip("/")
        self.parallel = parallel and self.concurrency > 1

        # Requests currently on the wire, keyed by package name
        self._inflight: Dict[str, "asyncio.Future[Optional[Catalog]]"] = {}

    def url_for(self, name: str) -> str:
        """Return the metadata URL for *name* (inserted verbatim)."""
        return f"{self.base_url}/{PACKAGE_METADATA_PATH.format(package=name)}"

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def fetch_one(self, name: str) -> Optional[Catalog]:
        """Return the catalog for *name*, fetching it if not cached.

        Concurrent calls for the same uncached name share one request.

        Returns:
            Versions in index order, or ``None`` when no usable data could
            be retrieved.
        """
        entry = self.cache.get(name)
        if entry is not None:
            return entry.versions

        pending = self._inflight.get(name)
        if pending is None:
            pending = asyncio.ensure_future(self._fetch_and_store(name))
            self._inflight[name] = pending
            pending.add_done_callback(lambda _: self._inflight.pop(name, None))

        return await pending

    async def fetch_batch(self, names: Iterable[str]) -> Dict[str, Optional[Catalog]]:
        """Fetch catalogs for many packages in bounded windows.

        Duplicate names are collapsed and cached names are never requested.
        The returned mapping is ordered by package name regardless of the
        order in which responses arrive.
        """
        unique = list(dict.fromkeys(names))
        pending = [name for name in unique if name not in self.cache]

        if pending:
            logger.debug(
                "Fetching %d catalog(s) (%d cached, %s)",
                len(pending),
                len(unique) - len(pending),
                f"windows of {self.concurrency}" if self.parallel else "sequential",
            )

        if self.parallel:
            for start in range(0, len(pending), self.concurrency):
                window = pending[start : start + self.concurrency]
                await asyncio.gather(*(self.fetch_one(name) for name in window))
        else:
            for name in pending:
                await self.fetch_one(name)

        return {name: self.get_cached_versions(name) for name in sorted(unique)}

    def get_cached_versions(self, name: str) -> Optional[Catalog]:
        """Return the cached catalog for *name* without any I/O."""
        entry = self.cache.get(name)
        return entry.versions if entry is not None else None

    # ------------------------------------------------------------------
    # Network (private)
    # ------------------------------------------------------------------

    async def _fetch_and_store(self, name: str) -> Optional[Catalog]:
        try:
            versions = await self._request_catalog(name)
        except (NetworkError, httpx.HTTPError, httpx.InvalidURL, ValueError) as exc:
            logger.debug("No catalog for %s: %s", name, exc)
            return None

        return self.cache.put(name, versions).versions

    async def _request_catalog(self, name: str) -> Catalog:
        url = self.url_for(name)
        response = await self.http_client.get(url)

        if response.status_code != 200:
            raise PackagistError(
                f"Packagist returned status {response.status_code} for '{name}'",
                package_name=name,
                url=url,
                status_code=response.status_code,
            )

        data = response.json()
        if not isinstance(data, dict):
            raise PackagistError(
                f"Expected JSON object for '{name}'",
                package_name=name,
                url=url,
            )

        return parse_catalog_payload(name, data)
