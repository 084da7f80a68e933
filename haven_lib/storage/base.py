"""Raw storage backend interface definitions.

Defines the `RawStorage` abstract class: a flat string-to-string store with
the same primitive contract browsers give `localStorage` and
`sessionStorage`. Implementations know nothing about prefixes, envelopes
or expiry; that is layered on top by `BackendAdapter`.
"""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

from .errors import QuotaExceededError


class RawStorage(ABC):
    """Abstract raw key/value backend.

    `quota_bytes` caps the total of `len(key) + len(value)` over all stored
    entries. `None` disables the limit. Usage is tracked per key as items
    are written and removed, so quota checks do not rescan the store.
    """

    def __init__(self, quota_bytes: Optional[int] = None) -> None:
        self.quota_bytes = quota_bytes
        self._sizes: Dict[str, int] = {}
        self._used = 0

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """Store `value` under `key`.

        Should raise `QuotaExceededError` without modifying the store when
        the write would exceed `quota_bytes`.
        """

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        """Return the stored string or `None` when `key` is absent.

        Should raise `CorruptEnvelopeError` when the stored data is not text.
        """

    @abstractmethod
    def remove_item(self, key: str) -> None:
        """Delete `key`. Missing keys are ignored."""

    @abstractmethod
    def keys(self) -> List[str]:
        """Return a snapshot list of every stored key."""

    def clear(self) -> None:
        for key in self.keys():
            self.remove_item(key)

    def used_bytes(self) -> int:
        return self._used

    def _track(self, key: str, size: Optional[int]) -> None:
        """Record that `key` now takes `size` units, or nothing when None."""
        self._used -= self._sizes.pop(key, 0)
        if size is not None:
            self._sizes[key] = size
            self._used += size

    def _reset_tracking(self) -> None:
        self._sizes.clear()
        self._used = 0

    def _check_quota(self, key: str, value: str) -> None:
        if self.quota_bytes is None:
            return
        needed = len(key) + len(value)
        used = self._used - self._sizes.get(key, 0)
        if used + needed > self.quota_bytes:
            raise QuotaExceededError(
                f"writing {key!r} needs {needed} bytes; "
                f"{self.quota_bytes - used} of {self.quota_bytes} left"
            )
