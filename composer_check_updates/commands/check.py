"""Check command implementation for composer-check-updates.

Reads ``composer.json`` (and ``composer.lock`` when present), asks
Packagist which versions exist for each declared dependency and reports
the constraint rewrites that would reach them. Nothing is written.

Typical usage::

    # Everything, grouped by update type
    $ ccu check

    # Stay within the installed major version
    $ ccu check --target minor

    # Only symfony packages, machine-readable
    $ ccu check -f 'symfony/*' --format json > updates.json
"""

from __future__ import annotations

import sys
import asyncio
from pathlib import Path
from typing import Optional, Tuple

import click

from composer_check_updates.exceptions import CCUError
from composer_check_updates.context import pass_context, CCUContext
from composer_check_updates.commands.common import (
    RunSettings,
    display_json,
    display_updates,
    print_hints,
    run_check,
    selection_options,
)
from composer_check_updates.utils import (
    get_logger,
    print_error,
    print_info,
    print_success,
)

logger = get_logger("commands.check")


@click.command()
@selection_options
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    show_default=True,
    help="Output format.",
)
@pass_context
def check(
    ctx: CCUContext,
    working_dir: Path,
    target: Optional[str],
    filters: Tuple[str, ...],
    rejects: Tuple[str, ...],
    dev_only: bool,
    prod_only: bool,
    minor_only: bool,
    patch_only: bool,
    concurrency: Optional[int],
    no_parallel: bool,
    output_format: str,
) -> None:
    """Check composer.json for dependency updates.

    Lists every declared dependency whose newer release falls outside its
    current constraint, grouped into major, minor, patch and prerelease
    updates, together with the rewritten constraint.

    Exits 0 whether or not updates were found and 1 on errors.
    """
    try:
        config = ctx.load_config(working_dir)
        settings = RunSettings.build(
            config,
            working_dir=working_dir,
            target=target,
            filters=filters,
            rejects=rejects,
            dev_only=dev_only,
            prod_only=prod_only,
            minor_only=minor_only,
            patch_only=patch_only,
            concurrency=concurrency,
            no_parallel=no_parallel,
        )
        asyncio.run(_check_async(settings, output_format.lower()))
        sys.exit(0)

    except CCUError as e:
        print_error(f"{e}")
        sys.exit(1)


async def _check_async(settings: RunSettings, output_format: str) -> None:
    """Run the pipeline and render the result in *output_format*."""
    show_progress = output_format == "table"

    if show_progress:
        print_info(f"Checking [bold]{settings.manifest_path}[/bold]")

    result = await run_check(settings)

    if output_format == "json":
        display_json(result.updates)
        return

    if not result.updates:
        print_success("All packages are up to date!")
        return

    display_updates(result.updates)
    print_hints(
        [
            "Run [info]ccu update[/info] to upgrade composer.json",
            "Run [info]ccu update -i[/info] for interactive mode",
        ]
    )
