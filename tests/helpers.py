from typing import Optional

from haven_lib.storage.errors import QuotaExceededError, StorageError
from haven_lib.storage.memory_backend import MemoryStorage
from haven_lib.storage.service import StorageService

T0 = 1_700_000_000.0


class FakeClock:
    """Callable clock for the storage service; advance it instead of sleeping."""

    def __init__(self, start: float = T0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class QuotaFailingStorage(MemoryStorage):
    """Memory store whose next `quota_failures` writes raise a quota error."""

    def __init__(self):
        super().__init__()
        self.quota_failures = 0
        self.writes = 0

    def set_item(self, key, value):
        self.writes += 1
        if self.quota_failures > 0:
            self.quota_failures -= 1
            raise QuotaExceededError("full")
        super().set_item(key, value)


class BrokenStorage(MemoryStorage):
    """Store that rejects every access, like storage in a locked-down browser."""

    def set_item(self, key, value):
        raise StorageError("storage disabled")

    def get_item(self, key):
        raise StorageError("storage disabled")


def make_service(clock: Optional[FakeClock] = None, persistent=None, session=None, **kwargs) -> StorageService:
    return StorageService(
        persistent if persistent is not None else MemoryStorage(),
        session if session is not None else MemoryStorage(),
        clock=clock or FakeClock(),
        **kwargs,
    )
