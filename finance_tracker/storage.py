# finance_tracker/storage.py
"""Key/blob storage backing the transaction store.

A storage maps a fixed key to one serialized document. ``FileStorage`` keeps
each key in ``<directory>/<key>.json`` and replaces it atomically through a
temporary file and ``os.replace()``; ``MemoryStorage`` is used by tests and
by callers that do not want anything written to disk.
"""
from __future__ import annotations

import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional


class BaseStorage(ABC):
    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the blob stored under ``key`` or None when absent."""

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store ``value`` under ``key``, replacing any previous blob."""


class MemoryStorage(BaseStorage):
    def __init__(self, initial: Dict[str, str] | None = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key):
        return self._items.get(key)

    def set_item(self, key, value):
        self._items[key] = value


class FileStorage(BaseStorage):
    def __init__(self, directory: str | os.PathLike):
        self.directory = Path(directory)

    def path_for(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def get_item(self, key):
        path = self.path_for(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def set_item(self, key, value):
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(key)
        tmp = path.with_suffix(".tmp")
        try:
            tmp.write_text(value, encoding="utf-8")
            os.replace(tmp, path)
        finally:
            tmp.unlink(missing_ok=True)
