"""Marker files shared between the entrypoint, probe and monitor processes."""

from __future__ import annotations

from pathlib import Path

from swocker.adapters import fs_touch


class HealthMarker:
    """Presence-only flag stored as an empty file.

    Writers and readers never coordinate beyond the file itself; the last
    writer wins.
    """

    def __init__(self, path: Path):
        if path is None:
            raise ValueError("path must not be None")
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def marker_set(self) -> None:
        fs_touch(self._path)

    def marker_clear(self) -> None:
        self._path.unlink(missing_ok=True)

    def marker_is_set(self) -> bool:
        return self._path.exists()
