"""Key-value persistence port and its implementations."""

from __future__ import annotations

import json
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path

from riyl_chat.log import get_logger

logger = get_logger(__name__)


class KeyValueStore(ABC):
    """Synchronous string blob storage addressed by key."""

    @abstractmethod
    def read(self, key: str) -> str | None:
        """Return the blob stored under *key*, or None if absent."""
        ...

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        ...


class MemoryKeyValueStore(KeyValueStore):
    """In-process store; contents vanish with the process."""

    def __init__(self, initial: dict[str, str] | None = None):
        self._data: dict[str, str] = dict(initial or {})

    def read(self, key: str) -> str | None:
        return self._data.get(key)

    def write(self, key: str, value: str) -> None:
        self._data[key] = value


class FileKeyValueStore(KeyValueStore):
    """JSON file holding a flat ``{key: blob}`` object.

    Writes go to a temp file in the same directory and are swapped in with
    ``os.replace`` so a crash never leaves a half-written file behind.
    """

    def __init__(self, path: str | Path):
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError, RecursionError) as e:
            logger.warning("store_unreadable", path=str(self._path), error=str(e))
            return {}
        if not isinstance(data, dict):
            logger.warning("store_unexpected_shape", path=str(self._path))
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def read(self, key: str) -> str | None:
        return self._load().get(key)

    def write(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = value
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self._path.parent, prefix=f".{self._path.name}.")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.debug("store_written", path=str(self._path), key=key, size=len(value))
