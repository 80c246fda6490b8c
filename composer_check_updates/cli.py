"""
Command-line interface for composer-check-updates.

This module provides the main CLI entry point and handles global options,
logging and console setup, and command registration.
"""

from __future__ import annotations

import sys
import logging
from pathlib import Path
from typing import Optional

import click

from composer_check_updates.__version__ import __version__
from composer_check_updates.context import CCUContext
from composer_check_updates.exceptions import CCUError
from composer_check_updates.commands import check, update
from composer_check_updates.utils.logger import (
    get_logger,
    setup_logging,
    verbosity_to_level,
)
from composer_check_updates.utils.console import (
    print_error,
    print_warning,
    reconfigure_console,
)

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file (ccu.toml or composer.json).",
    envvar="CCU_CONFIG",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=None,
    help="Force colored output on or off [default: auto].",
    envvar="CCU_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="composer-check-updates",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: Optional[bool],
) -> None:
    """ccu: find Composer dependency updates beyond your constraints.

    \b
    Available commands:
      ccu check              Show available updates
      ccu update             Upgrade constraints in composer.json

    \b
    Examples:
      ccu check
      ccu check --target minor --dev-only
      ccu update -i

    Use ``ccu COMMAND --help`` for command-specific options.
    """
    _configure_logging(verbose)
    reconfigure_console(color)

    ccu_ctx = CCUContext()
    ccu_ctx.config_path = config
    ccu_ctx.verbose = verbose
    ccu_ctx.color = color if color is not None else True
    ctx.obj = ccu_ctx

    logger.debug("composer-check-updates v%s", __version__)
    logger.debug("Config path: %s", config)
    logger.debug("Verbosity: %s | Color: %s", verbose, color)


def _configure_logging(verbose: int) -> None:
    """Configure logging level based on verbosity flags."""
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose > 1)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))


cli.add_command(check)
cli.add_command(update)


def main() -> int:
    """Main entry point for the ``ccu`` CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Exit as exc:
        return exc.exit_code

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except click.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    except CCUError as exc:
        print_error(str(exc))
        logger.debug(
            "CCUError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
