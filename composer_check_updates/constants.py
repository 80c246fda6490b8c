"""
Centralized constants for composer-check-updates.

This module defines immutable configuration values used across the tool,
including Packagist endpoints, network settings, target policies, and
logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "composer-check-updates/{version}"

# ---------------------------------------------------------------------------
# Packagist endpoints
# ---------------------------------------------------------------------------

#: Base URL of the Packagist v2 metadata repository.
PACKAGIST_REPO_URL: Final[str] = "https://repo.packagist.org/p2"

#: Per-package metadata path, relative to the repository base URL.
PACKAGE_METADATA_PATH: Final[str] = "{package}.json"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Seconds allowed for establishing a connection.
DEFAULT_CONNECT_TIMEOUT: Final[float] = 5.0

#: Seconds allowed for a whole request.
DEFAULT_TIMEOUT: Final[float] = 10.0

#: Retries for timed-out or failed requests (0 = a single attempt).
DEFAULT_MAX_RETRIES: Final[int] = 0

#: Number of catalog requests issued per concurrent window.
DEFAULT_CONCURRENCY: Final[int] = 10

# ---------------------------------------------------------------------------
# Version targets
# ---------------------------------------------------------------------------

#: Accepted values for ``--target``.
TARGET_CHOICES: Final[Sequence[str]] = ("latest", "minor", "patch")

#: Default target policy.
DEFAULT_TARGET: Final[str] = "latest"

# ---------------------------------------------------------------------------
# Composer files
# ---------------------------------------------------------------------------

#: Manifest file name.
COMPOSER_JSON: Final[str] = "composer.json"

#: Lock file name.
COMPOSER_LOCK: Final[str] = "composer.lock"

#: Configuration file name looked up in the working directory.
CONFIG_FILE_NAME: Final[str] = "ccu.toml"

#: Maximum allowed file size (in bytes) when reading manifest files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
