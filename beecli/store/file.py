"""Owner-only file storage used when no platform secret store is available."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from .backend import SecretBackend

DIR_MODE = 0o700
FILE_MODE = 0o600


def default_storage_dir() -> Path:
    return Path.home() / ".bee"


class FileBackend(SecretBackend):
    """One file per secret inside a private directory.

    Names map to file names by replacing ``:`` with ``-``; names starting with
    ``pairing:`` get a ``.json`` suffix since they hold serialized state.
    """

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory else default_storage_dir()

    def path_for(self, name: str) -> Path:
        filename = name.replace(":", "-")
        if name.startswith("pairing:"):
            filename += ".json"
        return self.directory / filename

    def _ensure_directory(self) -> None:
        if not self.directory.exists():
            self.directory.mkdir(mode=DIR_MODE, parents=True, exist_ok=True)

    def get(self, name: str) -> Optional[str]:
        path = self.path_for(name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def set(self, name: str, value: str) -> None:
        self._ensure_directory()
        path = self.path_for(name)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        if os.name == "posix":
            # The mode passed to os.open does not apply to existing files.
            os.fchmod(fd, FILE_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(value)

    def delete(self, name: str) -> None:
        self.path_for(name).unlink(missing_ok=True)
