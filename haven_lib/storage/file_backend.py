"""Simple file-backed storage backend.

This backend stores each key as a text file `<data_dir>/<quoted key>.json`
and is used as the persistent store. It provides atomic writes by writing
to a temporary file then renaming.
"""
from __future__ import annotations
import logging
import os
from pathlib import Path
from typing import List, Optional
from urllib.parse import quote, unquote

from .base import RawStorage
from .errors import CorruptEnvelopeError, StorageError

logger = logging.getLogger(__name__)

SUFFIX = ".json"


class FileStorage(RawStorage):
    def __init__(self, data_dir: str | Path = "./data/storage", quota_bytes: Optional[int] = None) -> None:
        super().__init__(quota_bytes)
        self.data_dir = Path(data_dir)
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._load_sizes()

    def _path_for(self, key: str) -> Path:
        # quote() keeps the mapping reversible so keys() can recover the name
        return self.data_dir / f"{quote(key, safe='')}{SUFFIX}"

    def _load_sizes(self) -> None:
        # One pass at startup; afterwards writes and removals keep the total current
        self._reset_tracking()
        for key in self.keys():
            path = self._path_for(key)
            try:
                with open(path, "r", encoding="utf-8", errors="replace") as f:
                    self._track(key, len(key) + len(f.read()))
            except OSError as e:
                logger.warning("Could not size %s: %s", path, e)
        logger.debug("FileStorage %s uses %d bytes", self.data_dir, self._used)

    def set_item(self, key: str, value: str) -> None:
        self._check_quota(key, value)
        path = self._path_for(key)
        tmp = path.with_suffix(path.suffix + ".tmp")
        try:
            with open(tmp, "w", encoding="utf-8") as f:
                f.write(value)
                f.flush()
                os.fsync(f.fileno())
            tmp.replace(path)
        except OSError as e:
            raise StorageError(f"failed to write {path}: {e}") from e
        self._track(key, len(key) + len(value))

    def get_item(self, key: str) -> Optional[str]:
        path = self._path_for(key)
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return f.read()
        except UnicodeDecodeError as e:
            raise CorruptEnvelopeError(f"{path} is not valid UTF-8: {e}") from e
        except OSError as e:
            raise StorageError(f"failed to read {path}: {e}") from e

    def remove_item(self, key: str) -> None:
        path = self._path_for(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise StorageError(f"failed to remove {path}: {e}") from e
        self._track(key, None)

    def keys(self) -> List[str]:
        if not self.data_dir.exists():
            return []
        result = []
        for p in self.data_dir.iterdir():
            if p.is_file() and p.suffix == SUFFIX:
                result.append(unquote(p.name[: -len(SUFFIX)]))
        return result

    def clear(self) -> None:
        super().clear()
        self._reset_tracking()
