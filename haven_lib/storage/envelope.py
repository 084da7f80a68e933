"""Item envelope codec.

Every stored value is wrapped in an envelope carrying its write time, an
optional absolute expiry, a schema version and the JavaScript-style type
name of the value. Times are epoch milliseconds so data written by the web
client and by this package share one format.
"""
from __future__ import annotations
import logging
import math
import re
from dataclasses import asdict, dataclass
from datetime import timedelta
from enum import Enum
from typing import Any, Optional, Union

from .errors import CorruptEnvelopeError
from .serializer import JSONSerializer, Serializer

logger = logging.getLogger(__name__)

DEFAULT_VERSION = "1.0.0"
COMPACT_THRESHOLD = 1024

TTL = Union[int, float, timedelta, None]

_WHITESPACE = re.compile(r"\s+")
_default_serializer = JSONSerializer()


class ReadStatus(Enum):
    HIT = "hit"
    MISS = "miss"
    EXPIRED = "expired"
    CORRUPT = "corrupt"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class ReadResult:
    status: ReadStatus
    value: Any = None
    envelope: Optional["ItemEnvelope"] = None

    @property
    def hit(self) -> bool:
        return self.status is ReadStatus.HIT


@dataclass
class ItemEnvelope:
    value: Any
    timestamp: int
    expires: Optional[int] = None
    version: str = DEFAULT_VERSION
    type: str = "object"
    compressed: bool = False

    def is_expired(self, now: int) -> bool:
        return bool(self.expires) and now > self.expires

    def remaining_ttl_ms(self) -> Optional[int]:
        """Lifetime the item was written with, or None when it never expires."""
        if not self.expires:
            return None
        return self.expires - self.timestamp

    def to_dict(self) -> dict:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Any) -> "ItemEnvelope":
        if not isinstance(data, dict) or "value" not in data:
            raise CorruptEnvelopeError("envelope must be an object with a 'value' field")
        timestamp = data.get("timestamp", 0)
        expires = data.get("expires")
        if not _is_number(timestamp) or (expires is not None and not _is_number(expires)):
            raise CorruptEnvelopeError("envelope timestamps must be numeric")
        return cls(
            value=data["value"],
            timestamp=int(timestamp),
            expires=int(expires) if expires is not None else None,
            version=str(data.get("version") or DEFAULT_VERSION),
            type=str(data.get("type") or js_type(data["value"])),
            compressed=bool(data.get("compressed", False)),
        )


def _is_number(v: Any) -> bool:
    if isinstance(v, bool) or not isinstance(v, (int, float)):
        return False
    # json.loads accepts NaN and Infinity
    return math.isfinite(v)


def js_type(value: Any) -> str:
    """Name `value`'s type the way JavaScript's `typeof` would."""
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    return "object"


def ttl_to_ms(ttl: TTL) -> Optional[int]:
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        ms = int(ttl.total_seconds() * 1000)
    else:
        ms = int(ttl * 1000)
    return ms if ms > 0 else None


def compact(text: str) -> str:
    """Collapse whitespace runs into single spaces. Lossy."""
    return _WHITESPACE.sub(" ", text).strip()


def wrap(value: Any, now: int, ttl: TTL = None, version: Optional[str] = None,
         compact_large_strings: bool = True) -> ItemEnvelope:
    ttl_ms = ttl_to_ms(ttl)
    envelope = ItemEnvelope(
        value=value,
        timestamp=now,
        expires=now + ttl_ms if ttl_ms else None,
        version=version or DEFAULT_VERSION,
        type=js_type(value),
    )
    if compact_large_strings and isinstance(value, str) and len(value) > COMPACT_THRESHOLD:
        envelope.value = compact(value)
        envelope.compressed = True
    return envelope


def encode(envelope: ItemEnvelope, serializer: Serializer = _default_serializer) -> str:
    return serializer.dump(envelope.to_dict())


def decode(raw: str, serializer: Serializer = _default_serializer) -> ItemEnvelope:
    try:
        data = serializer.load(raw)
    except Exception as e:
        raise CorruptEnvelopeError(f"unparsable envelope: {e}") from e
    try:
        return ItemEnvelope.from_dict(data)
    except (TypeError, ValueError, OverflowError) as e:
        raise CorruptEnvelopeError(f"invalid envelope field: {e}") from e


def unwrap(raw: Optional[str], now: int, serializer: Serializer = _default_serializer) -> ReadResult:
    if raw is None:
        return ReadResult(ReadStatus.MISS)
    try:
        envelope = decode(raw, serializer)
    except CorruptEnvelopeError as e:
        logger.warning("Failed to parse storage item: %s", e)
        return ReadResult(ReadStatus.CORRUPT)
    if envelope.is_expired(now):
        return ReadResult(ReadStatus.EXPIRED, envelope=envelope)
    return ReadResult(ReadStatus.HIT, value=envelope.value, envelope=envelope)
