"""Filesystem storage driver.

Each key is stored as one file inside a directory. Keys are
percent-encoded to form the file name, so any string is a valid key.

Configuration::

    storage:
      driver: file
      options:
        directory: var/carts
"""
from __future__ import annotations

import logging
import os
from pathlib import Path
from urllib.parse import quote

from cartmanager.storage.base import StorageDriver

logger = logging.getLogger(__name__)

DEFAULT_DIRECTORY = ".carts"


class FileStorage(StorageDriver):
    """Store each snapshot in ``<directory>/<encoded key>.json``.

    Parameters
    ----------
    directory:
        Directory holding the snapshot files. Created on first save.
    """

    def __init__(self, directory: str | os.PathLike[str] = DEFAULT_DIRECTORY) -> None:
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        """Return the file path used for ``key``."""
        return self.directory / f"{quote(key, safe='')}.json"

    def save(self, key: str, data: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        target = self.path_for(key)
        tmp = target.with_name(target.name + ".tmp")
        tmp.write_text(data, encoding="utf-8")
        os.replace(tmp, target)
        logger.debug("Wrote %d bytes to %s", len(data), target)

    def restore(self, key: str) -> str | None:
        try:
            return self.path_for(key).read_text(encoding="utf-8")
        except FileNotFoundError:
            return None

    def clear(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    def __repr__(self) -> str:
        return f"FileStorage(directory={str(self.directory)!r})"
