from typing import List, Optional, Protocol, runtime_checkable


@runtime_checkable
class StorageProtocol(Protocol):
    """Raw backend protocol mirroring `haven_lib.storage.base.RawStorage`.

    Implementations should follow the semantics documented on the abstract
    base class (`None` for missing keys, `QuotaExceededError` on a full
    store, no-op removal of absent keys).
    """

    def set_item(self, key: str, value: str) -> None: ...

    def get_item(self, key: str) -> Optional[str]: ...

    def remove_item(self, key: str) -> None: ...

    def keys(self) -> List[str]: ...

    def clear(self) -> None: ...

    def used_bytes(self) -> int: ...
