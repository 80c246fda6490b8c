"""
Filesystem helpers for composer-check-updates.

Reads are size-limited, writes go through a temporary file in the target
directory followed by an atomic replace, and backups are timestamped copies
placed next to the original. Every ``OSError`` is reported as
:class:`~composer_check_updates.exceptions.FileOperationError`.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from datetime import datetime
from typing import Optional, Union

from composer_check_updates.utils.logger import get_logger
from composer_check_updates.exceptions import FileOperationError
from composer_check_updates.constants import MAX_FILE_SIZE

logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _existing_file(path: Path, operation: str) -> Path:
    if not path.exists():
        raise FileOperationError(
            f"File not found: {path}",
            file_path=str(path),
            operation=operation,
        )
    if not path.is_file():
        raise FileOperationError(
            f"Not a file: {path}",
            file_path=str(path),
            operation=operation,
        )
    return path


def _atomic_write(target: Path, content: str) -> None:
    """Write *content* to a sibling temp file, then replace *target* with it."""
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            newline="",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        if target.exists():
            shutil.copymode(target, temp_path)
        temp_path.replace(target)

    except OSError as exc:
        if temp_path is not None and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Read a text file, refusing files larger than *max_size* bytes.

    Args:
        file_path: Path to the file.
        max_size: Size limit in bytes; ``None`` disables the check.
        encoding: Text encoding.

    Raises:
        FileOperationError: The file is missing, too large, or unreadable.
    """
    path = _existing_file(Path(file_path), "read")

    try:
        size = path.stat().st_size
        if max_size is not None and size > max_size:
            raise FileOperationError(
                f"File too large: {size} bytes (max {max_size})",
                file_path=str(path),
                operation="read",
            )
        with path.open("r", encoding=encoding, newline="") as handle:
            return handle.read()
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(
    file_path: PathLike,
    content: str,
    *,
    create_backup: bool = False,
) -> Optional[Path]:
    """Atomically replace the contents of *file_path*.

    Args:
        file_path: Destination path.
        content: Text written verbatim (no newline translation).
        create_backup: Copy the existing file aside first.

    Returns:
        Path of the backup, when one was created.
    """
    path = Path(file_path)
    backup: Optional[Path] = None

    if create_backup and path.is_file():
        backup = create_timestamped_backup(path)

    _atomic_write(path, content)
    return backup


def create_timestamped_backup(file_path: PathLike) -> Path:
    """Copy *file_path* to ``{stem}.{timestamp}.backup{suffix}`` beside it.

    Example:
        ``composer.json`` → ``composer.20260101_120000.backup.json``
    """
    path = _existing_file(Path(file_path), "backup")

    timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
    backup_path = path.parent / f"{path.stem}.{timestamp}.backup{path.suffix}"

    try:
        shutil.copy2(path, backup_path)
    except OSError as exc:
        raise FileOperationError(
            f"Failed to create backup: {exc}",
            file_path=str(path),
            operation="backup",
            original_error=exc,
        ) from exc

    logger.debug("Created backup: %s", backup_path)
    return backup_path
