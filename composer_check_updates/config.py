"""Configuration file loader for composer-check-updates.

Handles discovery, loading, parsing, and validation of configuration.
Supports two sources:

- ``ccu.toml``: settings under a ``[ccu]`` table
- ``composer.json``: settings under the ``extra.ccu`` object

Discovery order:

1. Explicit path from ``--config`` or ``CCU_CONFIG``
2. ``ccu.toml`` in the working directory
3. ``composer.json`` with an ``extra.ccu`` object in the working directory

Configuration precedence: defaults < config file < CLI args.

Typical usage::

    config = load_config()  # Auto-discover in the current directory
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``ccu.toml``)::

    [ccu]
    target = "minor"
    concurrency = 5
    reject = ["symfony/*"]
"""

from __future__ import annotations

import json
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import tomli as tomllib

from composer_check_updates.exceptions import ConfigError
from composer_check_updates.utils.logger import get_logger
from composer_check_updates.constants import (
    COMPOSER_JSON,
    CONFIG_FILE_NAME,
    DEFAULT_CONCURRENCY,
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_TARGET,
    DEFAULT_TIMEOUT,
    PACKAGIST_REPO_URL,
    TARGET_CHOICES,
)

logger = get_logger("config")

#: Table name in ``ccu.toml`` and key under ``extra`` in ``composer.json``.
CONFIG_SECTION = "ccu"


@dataclass
class CCUConfig:
    """Parsed and validated configuration.

    All fields have defaults, so an empty ``[ccu]`` table is valid.

    Attributes:
        target: Default target policy (``latest``, ``minor`` or ``patch``).
        concurrency: Catalog requests per concurrent window.
        parallel: Fetch catalogs concurrently; ``False`` fetches one by one.
        connect_timeout: Seconds allowed to open a connection.
        timeout: Seconds allowed per request.
        repository_url: Base URL of the Packagist v2 metadata repository.
        reject: Package patterns always excluded from checks.
        source_path: Path of the loaded file, or ``None`` for defaults.
    """

    target: str = DEFAULT_TARGET
    concurrency: int = DEFAULT_CONCURRENCY
    parallel: bool = True
    connect_timeout: float = DEFAULT_CONNECT_TIMEOUT
    timeout: float = DEFAULT_TIMEOUT
    repository_url: str = PACKAGIST_REPO_URL
    reject: List[str] = field(default_factory=list)

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "target": self.target,
            "concurrency": self.concurrency,
            "parallel": self.parallel,
            "connect_timeout": self.connect_timeout,
            "timeout": self.timeout,
            "repository_url": self.repository_url,
            "reject": list(self.reject),
        }


def discover_config_file(
    explicit_path: Optional[Path] = None,
    working_dir: Optional[Path] = None,
) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.
        working_dir: Directory searched for ``ccu.toml`` and
            ``composer.json``; defaults to the current directory.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    base = working_dir or Path.cwd()

    ccu_toml = base / CONFIG_FILE_NAME
    if ccu_toml.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, ccu_toml)
        return ccu_toml

    composer_json = base / COMPOSER_JSON
    if composer_json.is_file() and _composer_json_has_section(composer_json):
        logger.debug("Found extra.%s in %s", CONFIG_SECTION, composer_json)
        return composer_json

    logger.debug("No configuration file found")
    return None


def _composer_json_has_section(path: Path) -> bool:
    """Quick check for an ``extra.ccu`` object; parse errors mean "no"."""
    try:
        raw = _read_json(path)
    except ConfigError:
        return False
    extra = raw.get("extra")
    return isinstance(extra, dict) and isinstance(extra.get(CONFIG_SECTION), dict)


def load_config(
    config_path: Optional[Path] = None,
    working_dir: Optional[Path] = None,
) -> CCUConfig:
    """Load and validate configuration.

    Args:
        config_path: Explicit path to a ``.toml`` or ``.json`` file. If
            ``None``, uses auto-discovery (see :func:`discover_config_file`).
        working_dir: Directory used for auto-discovery.

    Returns:
        Validated :class:`CCUConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path, working_dir)

    if resolved is None:
        return CCUConfig()

    logger.info("Loading configuration from %s", resolved)

    if resolved.suffix == ".json":
        extra = _read_json(resolved).get("extra")
        section = extra.get(CONFIG_SECTION) if isinstance(extra, dict) else None
    else:
        section = _read_toml(resolved).get(CONFIG_SECTION)

    if section is None:
        logger.debug("Config file found but no %s section, using defaults", CONFIG_SECTION)
        return CCUConfig(source_path=resolved)

    if not isinstance(section, dict):
        raise ConfigError(
            f"'{CONFIG_SECTION}' must be a table",
            config_path=str(resolved),
        )

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _read_json(path: Path) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            data = json.load(fh)
    except ValueError as exc:
        raise ConfigError(
            f"Invalid JSON in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc

    if not isinstance(data, dict):
        raise ConfigError(f"{path.name} must contain a JSON object", config_path=str(path))
    return data


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> CCUConfig:
    """Validate a ``[ccu]`` table and build a :class:`CCUConfig`.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    config = CCUConfig()

    known = {
        "target",
        "concurrency",
        "parallel",
        "connect_timeout",
        "timeout",
        "repository_url",
        "reject",
    }

    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    def invalid(option: str, expected: str) -> ConfigError:
        value = section[option]
        return ConfigError(
            f"{option} must be {expected}, got {type(value).__name__} {value!r}",
            config_path=config_path,
            option=option,
        )

    if "target" in section:
        val = section["target"]
        if not isinstance(val, str) or val.lower() not in TARGET_CHOICES:
            raise invalid("target", "one of " + ", ".join(TARGET_CHOICES))
        config.target = val.lower()

    if "concurrency" in section:
        val = section["concurrency"]
        if not isinstance(val, int) or isinstance(val, bool) or val < 1:
            raise invalid("concurrency", "a positive integer")
        config.concurrency = val

    if "parallel" in section:
        val = section["parallel"]
        if not isinstance(val, bool):
            raise invalid("parallel", "a boolean")
        config.parallel = val

    for option in ("connect_timeout", "timeout"):
        if option in section:
            val = section[option]
            if not _is_number(val) or val <= 0:
                raise invalid(option, "a positive number")
            setattr(config, option, float(val))

    if "repository_url" in section:
        val = section["repository_url"]
        if not isinstance(val, str) or not val.strip():
            raise invalid("repository_url", "a non-empty string")
        config.repository_url = val.strip()

    if "reject" in section:
        val = section["reject"]
        if not isinstance(val, list) or not all(isinstance(item, str) for item in val):
            raise invalid("reject", "a list of strings")
        config.reject = list(val)

    return config
