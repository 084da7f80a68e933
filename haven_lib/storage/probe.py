"""Backend availability probe.

Run once when the storage service is built. A backend that cannot round
trip a throwaway value is marked unavailable for the life of the service.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass

from .interfaces import StorageProtocol
from .keys import PREFIX, PROBE_NAME, namespace

logger = logging.getLogger(__name__)

PROBE_VALUE = "test"


@dataclass(frozen=True)
class Availability:
    persistent: bool
    session: bool

    def to_dict(self) -> dict:
        return {"persistent": self.persistent, "session": self.session}


def probe_backend(backend: StorageProtocol, name: str = "backend", prefix: str = PREFIX) -> bool:
    key = namespace(PROBE_NAME, prefix)
    try:
        backend.set_item(key, PROBE_VALUE)
        ok = backend.get_item(key) == PROBE_VALUE
        backend.remove_item(key)
    except Exception as e:
        logger.warning("Storage availability check failed for %s: %s", name, e)
        return False
    if not ok:
        logger.warning("Storage availability check for %s read back a different value", name)
    return ok


def probe_all(persistent: StorageProtocol, session: StorageProtocol, prefix: str = PREFIX) -> Availability:
    result = Availability(
        persistent=probe_backend(persistent, "persistent", prefix),
        session=probe_backend(session, "session", prefix),
    )
    logger.debug("Storage availability: %s", result.to_dict())
    return result
