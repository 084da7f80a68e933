"""Per-backend adapter.

`BackendAdapter` binds one raw backend to the key namespace and the
envelope codec. It is the error firewall: raw backend exceptions stop
here and come out as status values, defaults or `False`.
"""
from __future__ import annotations
import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional

from . import envelope as codec
from .envelope import TTL, ReadResult, ReadStatus
from .errors import CorruptEnvelopeError, QuotaExceededError
from .interfaces import StorageProtocol
from .keys import PREFIX, namespace, strip_namespace
from .serializer import JSONSerializer, Serializer
from .sweeper import sweep

logger = logging.getLogger(__name__)


class Scope(str, Enum):
    PERSISTENT = "persistent"
    SESSION = "session"
    BOTH = "both"

    def includes(self, scope: "Scope") -> bool:
        return self is Scope.BOTH or self is scope


class WriteStatus(Enum):
    OK = "ok"
    RECOVERED = "recovered"
    QUOTA_EXCEEDED = "quota_exceeded"
    UNAVAILABLE = "unavailable"
    FAILED = "failed"

    @property
    def ok(self) -> bool:
        return self in (WriteStatus.OK, WriteStatus.RECOVERED)


class BackendAdapter:
    """Namespaced, enveloped access to one raw backend.

    Args:
        backend: raw string store
        scope: which backend this is (used in log messages and reports)
        available: result of the availability probe for `backend`
        clock: returns the current time in seconds since the epoch
    """

    def __init__(
        self,
        backend: StorageProtocol,
        scope: Scope,
        available: bool,
        clock: Callable[[], float],
        prefix: str = PREFIX,
        serializer: Optional[Serializer] = None,
        compact_large_strings: bool = True,
    ) -> None:
        self.backend = backend
        self.scope = scope
        self.available = available
        self.prefix = prefix
        self.serializer = serializer or JSONSerializer()
        self.compact_large_strings = compact_large_strings
        self._clock = clock

    def now(self) -> int:
        return int(self._clock() * 1000)

    def _key(self, key: str) -> str:
        return namespace(key, self.prefix)

    def write(self, key: str, value: Any, ttl: TTL = None, version: Optional[str] = None) -> WriteStatus:
        if not self.available:
            logger.warning("%s storage is not available", self.scope.value)
            return WriteStatus.UNAVAILABLE

        physical = self._key(key)
        item = codec.wrap(value, self.now(), ttl=ttl, version=version,
                          compact_large_strings=self.compact_large_strings)
        try:
            raw = codec.encode(item, self.serializer)
        except Exception as e:
            logger.error("Failed to serialize %s item %r: %s", self.scope.value, key, e)
            return WriteStatus.FAILED

        try:
            self.backend.set_item(physical, raw)
            return WriteStatus.OK
        except QuotaExceededError as e:
            logger.warning("Quota exceeded writing %s item %r: %s", self.scope.value, key, e)
        except Exception:
            logger.exception("Failed to set %s item %r", self.scope.value, key)
            return WriteStatus.FAILED

        try:
            removed = sweep(self)
        except Exception:
            logger.exception("Cleanup of %s storage failed", self.scope.value)
            removed = 0
        logger.info("Swept %d stale %s items after quota error", removed, self.scope.value)
        try:
            self.backend.set_item(physical, raw)
            return WriteStatus.RECOVERED
        except QuotaExceededError:
            logger.error("Failed to set %s item %r after cleanup: quota still exceeded", self.scope.value, key)
            return WriteStatus.QUOTA_EXCEEDED
        except Exception:
            logger.exception("Failed to set %s item %r after cleanup", self.scope.value, key)
            return WriteStatus.FAILED

    def set(self, key: str, value: Any, ttl: TTL = None, version: Optional[str] = None) -> bool:
        return self.write(key, value, ttl=ttl, version=version).ok

    def read(self, key: str) -> ReadResult:
        if not self.available:
            return ReadResult(ReadStatus.UNAVAILABLE)
        physical = self._key(key)
        try:
            raw = self.backend.get_item(physical)
        except CorruptEnvelopeError as e:
            logger.warning("Unreadable %s item %r: %s", self.scope.value, key, e)
            result = ReadResult(ReadStatus.CORRUPT)
        except Exception:
            logger.exception("Failed to get %s item %r", self.scope.value, key)
            return ReadResult(ReadStatus.UNAVAILABLE)
        else:
            result = codec.unwrap(raw, self.now(), self.serializer)

        if result.status in (ReadStatus.EXPIRED, ReadStatus.CORRUPT):
            logger.debug("Evicting %s %s item %r", result.status.value, self.scope.value, key)
            self._discard(physical)
        return result

    def get(self, key: str, default: Any = None) -> Any:
        result = self.read(key)
        return result.value if result.hit else default

    def remove(self, key: str) -> bool:
        if not self.available:
            return False
        return self._discard(self._key(key))

    def _discard(self, physical: str) -> bool:
        try:
            self.backend.remove_item(physical)
            return True
        except Exception:
            logger.exception("Failed to remove %s item %r", self.scope.value, physical)
            return False

    def namespaced_keys(self) -> List[str]:
        """Logical keys of every entry under this adapter's prefix."""
        if not self.available:
            return []
        try:
            physical_keys = self.backend.keys()
        except Exception:
            logger.exception("Failed to enumerate %s storage", self.scope.value)
            return []
        found = []
        for physical in physical_keys:
            logical = strip_namespace(physical, self.prefix)
            if logical is not None:
                found.append(logical)
        return found

    def entries(self) -> Dict[str, Optional[str]]:
        """Map each namespaced logical key to its raw stored string.

        Entries the backend holds but cannot return as text map to None so
        callers can treat them as corrupt; entries that fail to read for any
        other reason are skipped.
        """
        found: Dict[str, Optional[str]] = {}
        for logical in self.namespaced_keys():
            try:
                raw = self.backend.get_item(self._key(logical))
            except CorruptEnvelopeError as e:
                logger.warning("Unreadable %s item %r: %s", self.scope.value, logical, e)
                found[logical] = None
                continue
            except Exception:
                logger.exception("Failed to read %s item %r", self.scope.value, logical)
                continue
            if raw is not None:
                found[logical] = raw
        return found

    def clear(self) -> int:
        removed = 0
        for logical in self.namespaced_keys():
            if self._discard(self._key(logical)):
                removed += 1
        return removed

    def info(self) -> dict:
        used = 0
        items = 0
        for logical, raw in self.entries().items():
            used += len(self._key(logical)) + len(raw or "")
            items += 1
        return {"used": used, "items": items, "used_mb": f"{used / 1024 / 1024:.2f}"}
