"""Simple memory-backed storage backend

This backend keeps strings in a process-local dict and plays the role of
the session-scoped store: everything is gone when the process exits.
"""
from threading import RLock
from typing import Dict, List, Optional

from .base import RawStorage


class MemoryStorage(RawStorage):
    def __init__(self, quota_bytes: Optional[int] = None):
        super().__init__(quota_bytes)
        self._lock = RLock()
        self._store: Dict[str, str] = {}

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            self._check_quota(key, value)
            self._store[key] = value
            self._track(key, len(key) + len(value))

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._store.get(key)

    def remove_item(self, key: str) -> None:
        with self._lock:
            self._store.pop(key, None)
            self._track(key, None)

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._store.keys())

    def clear(self) -> None:
        with self._lock:
            self._store.clear()
            self._reset_tracking()

    def used_bytes(self) -> int:
        with self._lock:
            return self._used
