"""JSON file-backed key-value store."""

import os
import re
import tempfile
from pathlib import Path

from personashop.storage.base import KeyValueStore

_SAFE_KEY = re.compile(r"^[A-Za-z0-9_.-]+$")


class FileKeyValueStore(KeyValueStore):
    """Store each key as ``<directory>/<key>.json``.

    Writes go to a temporary file in the same directory and are moved into
    place with ``os.replace`` so a reader never sees a half-written slot.
    """

    def __init__(self, directory: Path | str) -> None:
        """Initialize file store.

        Args:
            directory: Directory holding the slot files (created on first write)
        """
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        if not _SAFE_KEY.match(key):
            raise ValueError(f"Invalid storage key: {key!r}")
        return self.directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        self.directory.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=f".{key}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(value)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def delete(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)
