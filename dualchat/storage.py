"""key-value persistence boundary."""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from dualchat.errors import PersistenceError

logger = logging.getLogger(__name__)


class StoragePort(Protocol):
    """string key-value store the conversation store persists through."""

    def get(self, key: str) -> Optional[str]:
        """returns the stored value, or None if absent or unreadable."""

    def set(self, key: str, value: str) -> None:
        """stores value under key, raises PersistenceError on failure."""

    def remove(self, key: str) -> None:
        """deletes key if present, raises PersistenceError on failure."""


class MemoryStorage:
    """in-process storage, used for tests and ephemeral sessions."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self.data: dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    def set(self, key: str, value: str) -> None:
        self.data[key] = value

    def remove(self, key: str) -> None:
        self.data.pop(key, None)


class JsonFileStorage:
    """
    storage backed by a single JSON object file.

    every write rewrites the file through a temporary file and an atomic
    rename, so a failed write never leaves a torn file behind.
    """

    def __init__(self, path: Path):
        self.path = path

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("Cannot read storage file %s: %s", self.path, e)
            return {}
        try:
            data = json.loads(raw)
        except ValueError:
            logger.warning("Storage file %s is not valid JSON, ignoring it", self.path)
            return {}
        if not isinstance(data, dict):
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, data: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=str(self.path.parent)
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, ensure_ascii=False)
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Cannot write storage file {self.path}: {e}") from e

    def get(self, key: str) -> Optional[str]:
        return self._read_all().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def remove(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)
