"""
Key-value persistence backends.

The store treats persistence as an opaque string-to-string map with two
operations, ``get`` and ``set``. Backends raise ``PersistenceError`` on any
failure; the store decides whether that is fatal.
"""

from __future__ import annotations
import json
import os
import threading
from typing import Dict, Optional, Protocol

from plantpal.utils.errors import PersistenceError, log_warning


class Persistence(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, value: str) -> None: ...


class MemoryBackend:
    """In-process dict backend, used by tests and the ``memory`` storage setting."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileBackend:
    """
    Stores all keys in one JSON object on disk.

    Writes go to a temporary file that then replaces the target, so a crash
    mid-write leaves the previous snapshot intact.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def _read_all(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            raise PersistenceError(f"Could not read {self.path}: {e}") from e
        if not isinstance(data, dict):
            raise PersistenceError(f"Storage file {self.path} does not hold a JSON object")
        return data

    def _safe_write(self, text: str) -> None:
        tmp = self.path + ".tmp"
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(tmp, "w", encoding="utf-8") as f:
            f.write(text)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, self.path)

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self._read_all().get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, value: str) -> None:
        with self._lock:
            try:
                data = self._read_all()
            except PersistenceError as e:
                # Unreadable file was already treated as empty at load time
                log_warning("[Storage] Overwriting unreadable storage file", path=self.path, error=e.message)
                data = {}
            data[key] = value
            try:
                self._safe_write(json.dumps(data, indent=2, sort_keys=True))
            except OSError as e:
                raise PersistenceError(f"Could not write {self.path}: {e}") from e
