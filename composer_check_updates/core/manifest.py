"""Reading and rewriting ``composer.json`` / ``composer.lock``.

The manifest is parsed into a :class:`ComposerManifest` that keeps the raw
JSON object (key order included) alongside the ``require`` and
``require-dev`` mappings. :func:`collect_dependencies` turns those mappings
into the :class:`~composer_check_updates.models.update.Dependency` records
the checker consumes, and :func:`apply_updates` writes chosen constraint
rewrites back without touching anything else in the document.

Typical usage::

    manifest = ComposerManifest.load(Path("composer.json"))
    locked = load_lock_versions(Path("composer.lock"))
    dependencies = collect_dependencies(manifest, locked, rejects=["symfony/*"])
"""

from __future__ import annotations

import re
import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from composer_check_updates.exceptions import FileOperationError, ManifestError
from composer_check_updates.models.update import Dependency, PackageUpdate
from composer_check_updates.utils.filesystem import safe_read_file, safe_write_file
from composer_check_updates.utils.logger import get_logger
from composer_check_updates.utils.version_utils import normalize_version

logger = get_logger("manifest")

REQUIRE = "require"
REQUIRE_DEV = "require-dev"

JSON_INDENT = 4


def _string_mapping(value: Any) -> Dict[str, str]:
    if not isinstance(value, dict):
        return {}
    return {name: constraint for name, constraint in value.items() if isinstance(constraint, str)}


@dataclass
class ComposerManifest:
    """A parsed ``composer.json``.

    Attributes:
        path: File the manifest was read from.
        data: Whole JSON object, in file order.
        raw: File contents as read.
    """

    path: Path
    data: Dict[str, Any] = field(default_factory=dict)
    raw: str = ""

    @classmethod
    def load(cls, path: Path) -> "ComposerManifest":
        """Read and parse *path*.

        Raises:
            ManifestError: The file is missing, unreadable, not valid JSON,
                or not a JSON object.
        """
        try:
            raw = safe_read_file(path)
        except FileOperationError as exc:
            raise ManifestError(
                f"{path.name} not found or unreadable in {path.parent}",
                file_path=str(path),
            ) from exc

        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise ManifestError(f"Invalid JSON in {path.name}: {exc}", file_path=str(path)) from exc

        if not isinstance(data, dict):
            raise ManifestError(f"{path.name} must contain a JSON object", file_path=str(path))

        return cls(path=path, data=data, raw=raw)

    @property
    def require(self) -> Dict[str, str]:
        return _string_mapping(self.data.get(REQUIRE))

    @property
    def require_dev(self) -> Dict[str, str]:
        return _string_mapping(self.data.get(REQUIRE_DEV))

    @property
    def extra(self) -> Dict[str, Any]:
        extra = self.data.get("extra")
        return extra if isinstance(extra, dict) else {}


def load_lock_versions(path: Path) -> Dict[str, str]:
    """Map package names to installed versions from ``composer.lock``.

    Both ``packages`` and ``packages-dev`` are read; the first occurrence
    of a name wins and a leading ``v`` is stripped. A missing, unreadable
    or malformed lock file yields an empty mapping.
    """
    if not path.is_file():
        logger.debug("No lock file at %s", path)
        return {}

    try:
        data = json.loads(safe_read_file(path))
    except (FileOperationError, ValueError) as exc:
        logger.warning("Ignoring unreadable lock file %s: %s", path, exc)
        return {}

    if not isinstance(data, dict):
        return {}

    versions: Dict[str, str] = {}
    for section in ("packages", "packages-dev"):
        packages = data.get(section)
        if not isinstance(packages, list):
            continue

        for package in packages:
            if not isinstance(package, dict):
                continue
            name, version = package.get("name"), package.get("version")
            if isinstance(name, str) and isinstance(version, str):
                versions.setdefault(name, normalize_version(version))

    logger.debug("Read %d locked version(s) from %s", len(versions), path)
    return versions


# ---------------------------------------------------------------------------
# Dependency selection
# ---------------------------------------------------------------------------


def _pattern_regex(pattern: str) -> "re.Pattern[str]":
    parts = (re.escape(part) for part in pattern.split("*"))
    return re.compile("^" + ".*".join(parts) + "$", re.IGNORECASE)


def matches_pattern(name: str, pattern: str) -> bool:
    """Case-insensitive match where ``*`` stands for any run of characters.

    Examples:
        >>> matches_pattern("Symfony/Console", "symfony/*")
        True
        >>> matches_pattern("monolog/monolog", "symfony/*")
        False
    """
    return bool(_pattern_regex(pattern).match(name))


def is_platform_package(name: str) -> bool:
    """True for ``php``, ``ext-*``, ``lib-*`` and other names without a vendor."""
    return name == "php" or name.startswith("ext-") or "/" not in name


def should_include(
    name: str,
    filters: Sequence[str] = (),
    rejects: Sequence[str] = (),
) -> bool:
    """Decide whether *name* takes part in the check.

    Platform packages are always excluded. With *filters*, a name must
    match at least one of them; a name matching any of *rejects* is
    excluded.
    """
    if is_platform_package(name):
        return False

    if filters and not any(matches_pattern(name, pattern) for pattern in filters):
        return False

    return not any(matches_pattern(name, pattern) for pattern in rejects)


def collect_dependencies(
    manifest: ComposerManifest,
    lock_versions: Optional[Dict[str, str]] = None,
    filters: Sequence[str] = (),
    rejects: Sequence[str] = (),
    dev_only: bool = False,
    prod_only: bool = False,
) -> List[Dependency]:
    """Build the dependency list handed to the checker.

    Development dependencies are collected first, then production ones. A
    name present in both keeps its first position but takes the production
    constraint.
    """
    locked = lock_versions or {}
    collected: Dict[str, Dependency] = {}

    sections = []
    if not prod_only:
        sections.append((manifest.require_dev, True))
    if not dev_only:
        sections.append((manifest.require, False))

    for requirements, is_dev in sections:
        for name, constraint in requirements.items():
            if not should_include(name, filters, rejects):
                continue
            collected[name] = Dependency(
                name=name,
                constraint=constraint,
                is_dev=is_dev,
                installed_version=locked.get(name),
            )

    logger.debug("Collected %d dependency(ies) from %s", len(collected), manifest.path)
    return list(collected.values())


# ---------------------------------------------------------------------------
# Writing
# ---------------------------------------------------------------------------


def render_manifest(data: Dict[str, Any], trailing_newline: bool = True) -> str:
    """Serialize *data* as Composer does: 4-space indent, raw slashes and unicode."""
    content = json.dumps(data, indent=JSON_INDENT, ensure_ascii=False)
    return content + "\n" if trailing_newline else content


def apply_updates(
    path: Path,
    updates: Iterable[PackageUpdate],
    backup: bool = False,
) -> Optional[Path]:
    """Rewrite the constraints of *updates* in the manifest at *path*.

    Only entries already present in the update's section (``require`` or
    ``require-dev``) are changed. The file is replaced atomically.

    Returns:
        Path of the backup copy when *backup* is set.

    Raises:
        ManifestError: The manifest cannot be read or parsed.
        FileOperationError: The new content cannot be written.
    """
    manifest = ComposerManifest.load(path)
    data = manifest.data

    changed = 0
    for update in updates:
        section = data.get(REQUIRE_DEV if update.is_dev else REQUIRE)
        if isinstance(section, dict) and update.name in section:
            section[update.name] = update.new_constraint
            changed += 1
        else:
            logger.debug("%s not declared in its section; left untouched", update.name)

    content = render_manifest(data, trailing_newline=manifest.raw.endswith("\n"))
    backup_path = safe_write_file(path, content, create_backup=backup)

    logger.info("Updated %d constraint(s) in %s", changed, path)
    return backup_path
