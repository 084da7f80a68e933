"""Namespaced key/value cache over a persistent and a session backend."""

from .adapter import BackendAdapter, Scope, WriteStatus
from .base import RawStorage
from .envelope import ItemEnvelope, ReadResult, ReadStatus
from .errors import CorruptEnvelopeError, QuotaExceededError, StorageError
from .file_backend import FileStorage
from .memory_backend import MemoryStorage
from .service import StorageService

__all__ = [
    "BackendAdapter",
    "CorruptEnvelopeError",
    "FileStorage",
    "ItemEnvelope",
    "MemoryStorage",
    "QuotaExceededError",
    "RawStorage",
    "ReadResult",
    "ReadStatus",
    "Scope",
    "StorageError",
    "StorageService",
    "WriteStatus",
]
