"""Shared plumbing for the ``check`` and ``update`` commands.

Both commands select dependencies the same way, run the same resolution
pipeline and render updates with the same grouped tables; this module
holds those pieces:

- :func:`selection_options` attaches the common click options.
- :class:`RunSettings` merges configuration and command-line values.
- :func:`run_check` reads the manifest and lock file and returns updates.
- :func:`display_updates` / :func:`display_json` render the result.
"""

from __future__ import annotations

import json
from pathlib import Path
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple

import click

from composer_check_updates.config import CCUConfig
from composer_check_updates.constants import (
    COMPOSER_JSON,
    COMPOSER_LOCK,
    DEFAULT_CONCURRENCY,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_TIMEOUT,
    PACKAGIST_REPO_URL,
    TARGET_CHOICES,
)
from composer_check_updates.core import (
    ComposerManifest,
    UpdateChecker,
    VersionCatalogClient,
    collect_dependencies,
    load_lock_versions,
)
from composer_check_updates.models import Dependency, PackageUpdate, TargetPolicy, UpdateType
from composer_check_updates.utils import (
    HTTPClient,
    colorize_update_type,
    get_logger,
    get_raw_console,
    print_table,
)

logger = get_logger("commands")

#: Display order and headings of the update groups.
UPDATE_GROUPS: Tuple[Tuple[UpdateType, str], ...] = (
    (UpdateType.MAJOR, "Major Upgrades"),
    (UpdateType.MINOR, "Minor Upgrades"),
    (UpdateType.PATCH, "Patch Updates"),
    (UpdateType.PRERELEASE, "Prerelease Updates"),
)


def selection_options(func: Callable[..., Any]) -> Callable[..., Any]:
    """Attach the dependency-selection options shared by every command."""
    options = [
        click.option(
            "--working-dir",
            "-d",
            type=click.Path(exists=True, file_okay=False, path_type=Path),
            default=".",
            show_default=True,
            help="Directory containing composer.json.",
        ),
        click.option(
            "--target",
            "-t",
            type=click.Choice(list(TARGET_CHOICES), case_sensitive=False),
            default=None,
            help="How far to upgrade: latest, minor or patch [default: latest].",
        ),
        click.option(
            "--filter",
            "-f",
            "filters",
            multiple=True,
            metavar="PATTERN",
            help="Only check packages matching PATTERN (wildcards allowed, repeatable).",
        ),
        click.option(
            "--reject",
            "-x",
            "rejects",
            multiple=True,
            metavar="PATTERN",
            help="Skip packages matching PATTERN (wildcards allowed, repeatable).",
        ),
        click.option("--dev-only", is_flag=True, help="Only check require-dev."),
        click.option("--prod-only", is_flag=True, help="Only check require."),
        click.option(
            "--minor-only",
            is_flag=True,
            help="Only show minor and patch updates.",
        ),
        click.option("--patch-only", is_flag=True, help="Only show patch updates."),
        click.option(
            "--concurrency",
            type=click.IntRange(min=1),
            default=None,
            help="Packagist requests per batch [default: 10].",
        ),
        click.option(
            "--no-parallel",
            is_flag=True,
            help="Fetch package metadata one request at a time.",
        ),
    ]

    for option in reversed(options):
        func = option(func)
    return func


@dataclass(frozen=True)
class RunSettings:
    """Effective settings of one run (defaults < config file < CLI)."""

    working_dir: Path
    target: TargetPolicy = TargetPolicy.LATEST
    filters: Tuple[str, ...] = ()
    rejects: Tuple[str, ...] = ()
    dev_only: bool = False
    prod_only: bool = False
    minor_only: bool = False
    patch_only: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    parallel: bool = True
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    timeout: float = DEFAULT_TIMEOUT
    repository_url: str = PACKAGIST_REPO_URL

    @property
    def manifest_path(self) -> Path:
        return self.working_dir / COMPOSER_JSON

    @property
    def lock_path(self) -> Path:
        return self.working_dir / COMPOSER_LOCK

    @classmethod
    def build(
        cls,
        config: CCUConfig,
        *,
        working_dir: Path,
        target: Optional[str] = None,
        filters: Sequence[str] = (),
        rejects: Sequence[str] = (),
        dev_only: bool = False,
        prod_only: bool = False,
        minor_only: bool = False,
        patch_only: bool = False,
        concurrency: Optional[int] = None,
        no_parallel: bool = False,
    ) -> "RunSettings":
        if dev_only and prod_only:
            raise click.UsageError("--dev-only and --prod-only cannot be combined")

        return cls(
            working_dir=working_dir,
            target=TargetPolicy.parse(target or config.target),
            filters=tuple(filters),
            rejects=tuple(config.reject) + tuple(rejects),
            dev_only=dev_only,
            prod_only=prod_only,
            minor_only=minor_only,
            patch_only=patch_only,
            concurrency=concurrency or config.concurrency,
            parallel=config.parallel and not no_parallel,
            connect_timeout=config.connect_timeout,
            timeout=config.timeout,
            repository_url=config.repository_url,
        )


@dataclass
class CheckResult:
    """Outcome of :func:`run_check`."""

    manifest: ComposerManifest
    dependencies: List[Dependency]
    updates: List[PackageUpdate]


def load_dependencies(settings: RunSettings) -> Tuple[ComposerManifest, List[Dependency]]:
    """Read ``composer.json`` and ``composer.lock`` and select dependencies.

    Raises:
        ManifestError: ``composer.json`` is missing or malformed.
    """
    manifest = ComposerManifest.load(settings.manifest_path)
    locked = load_lock_versions(settings.lock_path)

    dependencies = collect_dependencies(
        manifest,
        locked,
        filters=settings.filters,
        rejects=settings.rejects,
        dev_only=settings.dev_only,
        prod_only=settings.prod_only,
    )
    return manifest, dependencies


async def run_check(settings: RunSettings) -> CheckResult:
    """Find the available updates for the project in ``settings.working_dir``."""
    manifest, dependencies = load_dependencies(settings)

    if not dependencies:
        return CheckResult(manifest=manifest, dependencies=[], updates=[])

    logger.info("Checking %d package(s)...", len(dependencies))

    async with HTTPClient(
        timeout=settings.timeout,
        connect_timeout=settings.connect_timeout,
    ) as http:
        client = VersionCatalogClient(
            http,
            concurrency=settings.concurrency,
            base_url=settings.repository_url,
            parallel=settings.parallel,
        )
        checker = UpdateChecker(
            client,
            target=settings.target,
            minor_only=settings.minor_only,
            patch_only=settings.patch_only,
        )
        updates = await checker.check(dependencies)

    return CheckResult(manifest=manifest, dependencies=dependencies, updates=updates)


# ---------------------------------------------------------------------------
# Display renderers
# ---------------------------------------------------------------------------


def group_updates(updates: Sequence[PackageUpdate]) -> Dict[UpdateType, List[PackageUpdate]]:
    """Bucket updates by type, keeping their order within each bucket."""
    grouped: Dict[UpdateType, List[PackageUpdate]] = {kind: [] for kind, _ in UPDATE_GROUPS}
    for update in updates:
        grouped[update.update_type].append(update)
    return grouped


def _update_row(update: PackageUpdate) -> Dict[str, str]:
    kind = update.update_type.value
    return {
        "Package": update.name + (" [dim](dev)[/dim]" if update.is_dev else ""),
        "Current": update.current_constraint,
        "": "→",
        "New": colorize_update_type(kind, update.new_constraint),
        "Installed": update.current_version,
        "Latest": update.latest_version,
    }


def display_updates(updates: Sequence[PackageUpdate], *, title_suffix: str = "") -> None:
    """Render updates as one table per update type.

    Example::

        Major Upgrades
        ┏━━━━━━━━━━━━━━━━━━━┳━━━━━━━━━┳━━━┳━━━━━━┳━━━━━━━━━━━┳━━━━━━━━┓
        ┃ Package           ┃ Current ┃   ┃ New  ┃ Installed ┃ Latest ┃
        ┡━━━━━━━━━━━━━━━━━━━╇━━━━━━━━━╇━━━╇━━━━━━╇━━━━━━━━━━━╇━━━━━━━━┩
        │ symfony/console   │ ^5.4    │ → │ ^7.0 │ 5.4.21    │ 7.0.0  │
        └───────────────────┴─────────┴───┴──────┴───────────┴────────┘
    """
    column_styles: Dict[str, Dict[str, Any]] = {
        "Package": {"style": "bold", "no_wrap": True},
        "Current": {"justify": "right", "style": "dim"},
        "": {"justify": "center"},
        "New": {"justify": "left"},
        "Installed": {"justify": "right", "style": "dim"},
        "Latest": {"justify": "right", "style": "dim"},
    }

    grouped = group_updates(updates)
    for kind, heading in UPDATE_GROUPS:
        bucket = grouped[kind]
        if not bucket:
            continue

        print_table(
            [_update_row(update) for update in bucket],
            title=colorize_update_type(kind.value, heading + title_suffix),
            column_styles=column_styles,
        )


def display_json(updates: Sequence[PackageUpdate]) -> None:
    """Print updates as a JSON array on stdout, bypassing Rich markup."""
    data = [update.to_json() for update in updates]
    click.echo(json.dumps(data, indent=4, ensure_ascii=False))


def print_hints(lines: Sequence[str]) -> None:
    console = get_raw_console()
    console.print()
    for line in lines:
        console.print(line)
