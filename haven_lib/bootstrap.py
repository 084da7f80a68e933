"""Startup helpers for the storage service.

The service is built exactly once, here, and handed to callers by
reference. Nothing in `haven_lib.storage` creates an instance at import
time.
"""
import time
from pathlib import Path
from typing import Callable, Optional, Tuple

from haven_lib.config.config import StorageSettings, load_settings
from haven_lib.logging_config import configure_logging
from haven_lib.storage.file_backend import FileStorage
from haven_lib.storage.memory_backend import MemoryStorage
from haven_lib.storage.serializer import get_serializer
from haven_lib.storage.service import StorageService


def build_storage_service(settings: StorageSettings, clock: Callable[[], float] = time.time) -> StorageService:
    persistent = FileStorage(settings.data_dir, quota_bytes=settings.persistent_quota_bytes)
    session = MemoryStorage(quota_bytes=settings.session_quota_bytes)
    return StorageService(
        persistent,
        session,
        prefix=settings.prefix,
        serializer=get_serializer(settings.serializer),
        clock=clock,
        compact_large_strings=settings.compact_large_strings,
    )


def bootstrap(config_path: Optional[Path] = None) -> Tuple[StorageSettings, StorageService]:
    """Configure logging, load settings and build the storage service."""
    settings = load_settings(config_path)
    logger = configure_logging(settings=settings)
    service = build_storage_service(settings)
    logger.info("Storage service ready (data_dir=%s, available=%s)",
                settings.data_dir, service.availability.to_dict())
    return settings, service
