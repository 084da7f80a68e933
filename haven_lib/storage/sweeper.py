"""Expiration sweeper.

Scans the namespaced entries of an adapter and deletes the ones that are
expired or cannot be decoded. Cost is linear in the number of entries.
"""
from __future__ import annotations
import logging
from typing import TYPE_CHECKING, Iterable

from .envelope import decode
from .errors import CorruptEnvelopeError

if TYPE_CHECKING:
    from .adapter import BackendAdapter

logger = logging.getLogger(__name__)


def sweep(adapter: "BackendAdapter") -> int:
    """Remove expired and corrupt entries from one adapter; return the count."""
    if not adapter.available:
        return 0
    now = adapter.now()
    stale = []
    for logical, raw in adapter.entries().items():
        if raw is None:
            stale.append(logical)
            continue
        try:
            if decode(raw, adapter.serializer).is_expired(now):
                stale.append(logical)
        except CorruptEnvelopeError:
            stale.append(logical)

    removed = 0
    for logical in stale:
        if adapter.remove(logical):
            removed += 1
    if removed:
        logger.debug("Removed %d expired %s items", removed, adapter.scope.value)
    return removed


def cleanup(adapters: Iterable["BackendAdapter"]) -> int:
    return sum(sweep(a) for a in adapters)
