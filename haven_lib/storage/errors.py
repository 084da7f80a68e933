"""Exceptions raised by the raw backends and the envelope codec.

These never escape `StorageService`; the adapters translate them into
default values, `False` returns or explicit status enums.
"""


class StorageError(Exception):
    """Base class for storage failures."""


class QuotaExceededError(StorageError):
    """A write would exceed the backend's configured capacity."""


class CorruptEnvelopeError(StorageError):
    """A stored string could not be decoded into an item envelope."""
