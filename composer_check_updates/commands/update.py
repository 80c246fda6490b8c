"""Update command implementation for composer-check-updates.

Runs the same check as ``ccu check`` and writes the rewritten constraints
back into ``composer.json``. Only the constraint strings of declared
dependencies change; key order, other sections and the trailing newline
are kept.

With ``--interactive`` a full-screen picker lets the user choose which
updates to apply:

====================  ===================================
Key                   Action
====================  ===================================
``↑`` / ``k``         move up
``↓`` / ``j``         move down
``space``             toggle the current package
``a``                 toggle all
``enter``             apply the selected updates
``q`` / ``esc``       cancel
====================  ===================================

Typical usage::

    # Apply every available update after a confirmation prompt
    $ ccu update

    # Preview only
    $ ccu update --dry-run

    # Pick updates by hand, keep a backup of composer.json
    $ ccu update -i --backup
"""

from __future__ import annotations

import sys
import asyncio
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import click
from rich.text import Text
from rich.console import Group

from composer_check_updates.core import UpdateSelection, apply_updates
from composer_check_updates.core.selection import (
    KEY_DOWN,
    KEY_ENTER,
    KEY_ESCAPE,
    KEY_UP,
)
from composer_check_updates.models import PackageUpdate
from composer_check_updates.exceptions import CCUError
from composer_check_updates.context import pass_context, CCUContext
from composer_check_updates.commands.common import (
    UPDATE_GROUPS,
    RunSettings,
    display_updates,
    run_check,
    selection_options,
)
from composer_check_updates.utils import (
    confirm,
    get_logger,
    get_raw_console,
    print_error,
    print_info,
    print_success,
    print_warning,
)
from composer_check_updates.utils.console import update_type_style

logger = get_logger("commands.update")

#: Raw key sequences returned by ``click.getchar`` mapped to logical keys.
KEY_ALIASES = {
    "\x1b[A": KEY_UP,
    "\x1bOA": KEY_UP,
    "\xe0H": KEY_UP,
    "\x00H": KEY_UP,
    "\x1b[B": KEY_DOWN,
    "\x1bOB": KEY_DOWN,
    "\xe0P": KEY_DOWN,
    "\x00P": KEY_DOWN,
    "\r": KEY_ENTER,
    "\n": KEY_ENTER,
    "\x1b": KEY_ESCAPE,
}


@click.command()
@selection_options
@click.option(
    "--interactive",
    "-i",
    is_flag=True,
    help="Choose the updates to apply in an interactive list.",
)
@click.option(
    "--dry-run",
    is_flag=True,
    help="Preview changes without applying them.",
)
@click.option(
    "--yes",
    "-y",
    is_flag=True,
    help="Skip confirmation prompt.",
)
@click.option(
    "--backup",
    is_flag=True,
    help="Create backup file before updating.",
)
@pass_context
def update(
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
    interactive: bool,
    dry_run: bool,
    yes: bool,
    backup: bool,
) -> None:
    """Upgrade constraints in composer.json.

    Finds the same updates as ``ccu check`` and rewrites the matching
    ``require`` / ``require-dev`` entries. Run ``composer update``
    afterwards to install the new versions.

    Exits 0 on success (including "nothing to do" and cancellation) and 1
    on errors.
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
        sys.exit(
            asyncio.run(
                _update_async(
                    settings,
                    interactive=interactive,
                    dry_run=dry_run,
                    skip_confirm=yes,
                    backup=backup,
                )
            )
        )

    except CCUError as e:
        print_error(f"{e}")
        sys.exit(1)


# ---------------------------------------------------------------------------
# Async orchestration
# ---------------------------------------------------------------------------


async def _update_async(
    settings: RunSettings,
    *,
    interactive: bool,
    dry_run: bool,
    skip_confirm: bool,
    backup: bool,
) -> int:
    """Find updates, let the user narrow them down, then write them.

    Returns:
        Exit code for the command.
    """
    if interactive and not _is_interactive_terminal():
        print_error("Interactive mode requires a TTY")
        return 1

    print_info(f"Checking [bold]{settings.manifest_path}[/bold]")
    result = await run_check(settings)

    if not result.updates:
        print_success("All packages are up to date!")
        return 0

    updates: Sequence[PackageUpdate] = result.updates
    if interactive:
        updates = select_interactively(updates)
        if not updates:
            print_info("No packages selected.")
            return 0

    display_updates(updates, title_suffix=" (Dry Run)" if dry_run else "")

    if dry_run:
        print_warning("Dry run mode - no changes applied")
        return 0

    if not (skip_confirm or interactive):
        count = len(updates)
        if not confirm(f"\nUpdate {count} package{'s' if count != 1 else ''}?", default=True):
            logger.info("Update cancelled by user")
            return 0

    backup_path = apply_updates(settings.manifest_path, updates, backup=backup)

    if backup_path is not None:
        print_info(f"Backup written to {backup_path}")
    print_success(f"{settings.manifest_path.name} updated successfully!")
    print_info("\nRun [info]composer update[/info] to install new versions.")

    for item in updates:
        logger.debug("  %s: %s → %s", item.name, item.current_constraint, item.new_constraint)

    return 0


# ---------------------------------------------------------------------------
# Interactive picker
# ---------------------------------------------------------------------------


def _is_interactive_terminal() -> bool:
    try:
        return sys.stdin.isatty() and sys.stdout.isatty()
    except (AttributeError, ValueError):
        return False


def read_key() -> str:
    """Read one key press and translate escape sequences to logical keys."""
    key = click.getchar()
    return KEY_ALIASES.get(key, key)


def render_selection(selection: UpdateSelection) -> Group:
    """Build the picker screen for the current *selection* state."""
    lines: List[Text] = [Text("Select packages to update:", style="success"), Text()]

    indexed = list(enumerate(selection.updates))
    for kind, heading in UPDATE_GROUPS:
        members = [(index, item) for index, item in indexed if item.update_type is kind]
        if not members:
            continue

        style = update_type_style(kind.value)
        lines.append(Text(heading, style=style))

        for index, item in members:
            is_current = index == selection.cursor
            pointer = ">" if is_current else " "
            checkbox = "[x]" if selection.is_selected(index) else "[ ]"
            dev = " (dev)" if item.is_dev else ""
            line = (
                f"{pointer} {checkbox} {item.name + dev:<35}  "
                f"{item.current_constraint:>12}  →  {item.new_constraint:<12}"
            )
            lines.append(Text(line, style="cursor" if is_current else style))

        lines.append(Text())

    lines.append(
        Text(
            f"{selection.selected_count} of {len(selection)} packages selected",
            style="warning",
        )
    )
    lines.append(Text())
    lines.append(
        Text("↑/↓ Navigate  Space Toggle  a Toggle all  Enter Confirm  q Cancel", style="dim")
    )
    return Group(*lines)


def select_interactively(updates: Sequence[PackageUpdate]) -> List[PackageUpdate]:
    """Run the picker until the user confirms or cancels.

    Returns:
        The chosen updates, or an empty list when cancelled.
    """
    console = get_raw_console()
    selection = UpdateSelection(updates)

    while True:
        console.clear()
        console.print(render_selection(selection))

        try:
            key = read_key()
        except EOFError:
            return []

        outcome = selection.handle_key(key)
        if outcome is True:
            return selection.chosen()
        if outcome is False:
            return []
