"""
capital — filesystem utilities

File: src/capital/utils/fs.py

Purpose
- Atomic document writes and first-fit backup naming for the config loader.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
- Backups never overwrite an existing file: ``<name>.old``, then ``<name>.old.2``, ``<name>.old.3``, ...

Non-functional requirements
- Standard library only and cross-platform behavior where feasible.
"""

from __future__ import annotations

import contextlib
import os
import shutil
import tempfile
from pathlib import Path

from capital.constants import BACKUP_SUFFIX

PathLike = str | os.PathLike[str]

__all__ = [
    "archive_file",
    "atomic_write",
    "next_backup_path",
]


def atomic_write(path: PathLike, data: bytes | str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The write strategy is:
    1. create temp file in the same directory,
    2. write + flush + fsync file data,
    3. replace target via ``os.replace``.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        if isinstance(data, bytes):
            with os.fdopen(fd, "wb") as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())
        else:
            with os.fdopen(fd, "w", encoding=encoding) as file_handle:
                file_handle.write(data)
                file_handle.flush()
                os.fsync(file_handle.fileno())

        os.replace(temp_path, target)
        _fsync_directory(target_parent)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise


def next_backup_path(path: PathLike) -> Path:
    """Return the first unused backup name for ``path``.

    ``config.yml`` maps to ``config.yml.old``; when that exists the lowest free
    ``config.yml.old.<n>`` with ``n >= 2`` is used.
    """

    target = Path(path)
    candidate = target.with_name(target.name + BACKUP_SUFFIX)
    index = 1
    while candidate.exists():
        index += 1
        candidate = target.with_name(f"{target.name}{BACKUP_SUFFIX}.{index}")
    return candidate


def archive_file(path: PathLike) -> Path | None:
    """Copy ``path`` to its next backup name. Returns ``None`` if ``path`` does not exist."""

    source = Path(path)
    if not source.is_file():
        return None
    backup = next_backup_path(source)
    shutil.copy2(source, backup)
    return backup


def _fsync_directory(path: Path) -> None:
    """
    Best-effort directory fsync for metadata durability after ``os.replace``.

    Some platforms/filesystems do not support fsync on directories.
    """

    if os.name == "nt":
        return

    flags = os.O_RDONLY
    if hasattr(os, "O_DIRECTORY"):
        flags |= os.O_DIRECTORY

    try:
        dir_fd = os.open(path, flags)
    except OSError:
        return

    try:
        os.fsync(dir_fd)
    except OSError:
        return
    finally:
        os.close(dir_fd)
