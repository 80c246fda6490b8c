"""
Console output utilities for composer-check-updates using Rich.

This module provides user-facing output helpers for CLI commands.
For diagnostic or debug output, use :mod:`composer_check_updates.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table / confirm: structured or interactive CLI output
- Logging should never go through this module
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

CCU_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
        "update.major": "red",
        "update.minor": "cyan",
        "update.patch": "green",
        "update.prerelease": "magenta",
        "cursor": "black on white",
    }
)

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()
_color_override: Optional[bool] = None


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if _color_override is not None:
        return _color_override
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=CCU_THEME,
                    no_color=not use_color,
                    highlight=False,
                )
    return _console


def reconfigure_console(color: Optional[bool] = None) -> None:
    """Reset the global console instance.

    Args:
        color: Force color on or off (``--color`` / ``--no-color``);
            ``None`` returns to environment detection.
    """
    global _console, _color_override
    with _console_lock:
        _color_override = color
        _console = None


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str) -> None:
    _get_console().print(message, style="success")


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    _get_console().print(f"{prefix} {message}", style="error")


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    _get_console().print(f"{prefix} {message}", style="warning")


def print_info(message: str) -> None:
    _get_console().print(message)


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    caption: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render structured data as a Rich table.

    Args:
        data: List of row dictionaries. Values may contain Rich markup.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        caption: Optional table caption.
        column_styles: Per-column style configuration.
        row_styler: Optional callback returning a row style.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(
        title=title,
        caption=caption,
        show_header=True,
        header_style="bold",
        title_justify="left",
    )

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
        )

    for row in data:
        values = [str(row.get(h, "")) for h in headers]
        style = row_styler(row) if row_styler else None
        table.add_row(*values, style=style)

    _get_console().print(table)


# ---------------------------------------------------------------------------
# User interaction
# ---------------------------------------------------------------------------


def confirm(message: str, *, default: bool = False) -> bool:
    """Prompt the user for a yes/no confirmation.

    - "y", "yes"   → return True
    - "n", "no"    → return False
    - empty or unrecognised input → return `default`
    - Ctrl+C / EOF → return False
    """
    console = _get_console()
    suffix = r" \[Y/n]: " if default else r" \[y/N]: "
    console.print(f"{message}{suffix}", end="", style="info")

    try:
        response = input().strip().lower()
    except (KeyboardInterrupt, EOFError):
        console.print()
        return False

    if response in ("y", "yes"):
        return True
    if response in ("n", "no"):
        return False

    return default


# ---------------------------------------------------------------------------
# Advanced / internal helpers
# ---------------------------------------------------------------------------


def get_raw_console() -> Console:
    """Return the underlying Rich Console instance."""
    return _get_console()


def update_type_style(update_type: str) -> str:
    """Theme style name for an update type (``update.major`` ...)."""
    return f"update.{update_type.lower()}"


def colorize_update_type(update_type: str, text: Optional[str] = None) -> str:
    """Wrap *text* (default: the type label) in the update type's color.

    Args:
        update_type: ``major``, ``minor``, ``patch`` or ``prerelease``.
        text: Text to color; already-escaped Rich markup.

    Returns:
        Rich markup string. Unknown types are returned uncolored.
    """
    label = update_type if text is None else text
    if update_type.lower() not in ("major", "minor", "patch", "prerelease"):
        return label

    style = update_type_style(update_type)
    return f"[{style}]{label}[/{style}]"
