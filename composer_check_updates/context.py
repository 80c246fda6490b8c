"""
Shared context object for composer-check-updates CLI commands.

This module defines the global Click context used to share global options
across subcommands. Configuration is loaded by each command once its
working directory is known.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from composer_check_updates.config import CCUConfig, load_config


class CCUContext:
    """Global context object for composer-check-updates CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        config_path: Explicit configuration file, if provided.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("config_path", "verbose", "color")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True

    def load_config(self, working_dir: Path) -> CCUConfig:
        """Load configuration for a command running in *working_dir*."""
        return load_config(self.config_path, working_dir)


#: Click decorator for injecting :class:`CCUContext` into commands.
pass_context = click.make_pass_decorator(CCUContext, ensure=True)
