"""Interrupt-safe file helpers for configuration fragments and marker files."""

from __future__ import annotations

import os
import tempfile
from pathlib import Path


def fs_write_text_atomic(path: Path, content: str, mode: int = 0o644) -> None:
    """Write a text file through a sibling temp file and an atomic rename.

    A kill between write and rename leaves either the previous file or the
    new one, never a truncated fragment.

    Args:
        path: Destination path.
        content: Full file content.
        mode: Permission bits applied before the rename. `mkstemp` creates
            owner-only files, so readers under other identities need this.

    Returns:
        None: File is written as a side effect.

    Raises:
        OSError: Raised when the directory is not writable.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    file_descriptor, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(file_descriptor, "w", encoding="utf-8") as handle:
            handle.write(content)
        os.chmod(temp_name, mode)
        os.replace(temp_name, path)
    except BaseException:
        Path(temp_name).unlink(missing_ok=True)
        raise


def fs_touch(path: Path) -> None:
    """Create an empty marker file, keeping an existing one untouched.

    Args:
        path: Marker path.

    Raises:
        OSError: Raised when the directory is not writable.
    """

    path.parent.mkdir(parents=True, exist_ok=True)
    path.touch(exist_ok=True)
