"""Unified storage facade.

`StorageService` puts one get/set/remove API in front of a persistent and a
session backend. Build it once at startup (see `haven_lib.bootstrap`) and
hand the instance to whatever needs it; the availability probe runs in the
constructor and its result is kept for the life of the service.

No method raises because of a storage problem. Reads fall back to the
caller's default and writes report `False`.
"""
from __future__ import annotations
import logging
import time
from typing import Any, Callable, List, Optional

from .adapter import BackendAdapter, Scope
from .envelope import TTL
from .interfaces import StorageProtocol
from .keys import PREFIX
from .probe import probe_all
from .serializer import Serializer
from .sweeper import cleanup

logger = logging.getLogger(__name__)


class StorageService:
    def __init__(
        self,
        persistent: StorageProtocol,
        session: StorageProtocol,
        prefix: str = PREFIX,
        serializer: Optional[Serializer] = None,
        clock: Callable[[], float] = time.time,
        compact_large_strings: bool = True,
    ) -> None:
        self.prefix = prefix
        self.availability = probe_all(persistent, session, prefix)
        common = dict(prefix=prefix, serializer=serializer, clock=clock,
                      compact_large_strings=compact_large_strings)
        self.persistent = BackendAdapter(persistent, Scope.PERSISTENT, self.availability.persistent, **common)
        self.session = BackendAdapter(session, Scope.SESSION, self.availability.session, **common)

    def adapters(self, scope: Scope = Scope.BOTH) -> List[BackendAdapter]:
        return [a for a in (self.persistent, self.session) if scope.includes(a.scope)]

    def adapter(self, scope: Scope) -> BackendAdapter:
        if scope is Scope.PERSISTENT:
            return self.persistent
        if scope is Scope.SESSION:
            return self.session
        raise ValueError("a single backend scope is required")

    # persistent backend

    def set_local(self, key: str, value: Any, ttl: TTL = None, version: Optional[str] = None) -> bool:
        return self.persistent.set(key, value, ttl=ttl, version=version)

    def get_local(self, key: str, default: Any = None) -> Any:
        return self.persistent.get(key, default)

    def remove_local(self, key: str) -> bool:
        return self.persistent.remove(key)

    # session backend

    def set_session(self, key: str, value: Any, ttl: TTL = None, version: Optional[str] = None) -> bool:
        return self.session.set(key, value, ttl=ttl, version=version)

    def get_session(self, key: str, default: Any = None) -> Any:
        return self.session.get(key, default)

    def remove_session(self, key: str) -> bool:
        return self.session.remove(key)

    # unified

    def set(self, key: str, value: Any, persist: bool = False, ttl: TTL = None,
            version: Optional[str] = None) -> bool:
        target = self.persistent if persist else self.session
        return target.set(key, value, ttl=ttl, version=version)

    def get(self, key: str, default: Any = None) -> Any:
        """Return the persistent value if there is one, else the session value."""
        value = self.persistent.get(key)
        if value is not None:
            return value
        value = self.session.get(key)
        if value is not None:
            return value
        return default

    def remove(self, key: str) -> bool:
        local_ok = self.persistent.remove(key)
        session_ok = self.session.remove(key)
        return local_ok or session_ok

    # maintenance

    def cleanup_expired(self, scope: Scope = Scope.BOTH) -> int:
        removed = cleanup(self.adapters(scope))
        logger.info("Cleanup removed %d expired items (%s)", removed, scope.value)
        return removed

    def clear(self, scope: Scope = Scope.BOTH) -> int:
        """Remove every namespaced key; foreign keys in the same backend stay."""
        removed = sum(a.clear() for a in self.adapters(scope))
        logger.info("Cleared %d items (%s)", removed, scope.value)
        return removed

    def storage_info(self) -> dict:
        return {
            "persistent": self.persistent.info(),
            "session": self.session.info(),
            "available": self.availability.to_dict(),
        }
