"""Export and import of namespaced entries.

The export document looks like::

    {
        "persistent": {"<logical key>": {<envelope>}, ...},
        "session": {...},
        "exportedAt": "2026-01-01T00:00:00.000Z",
        "version": "1.0.0",
    }

and can be written to disk with `write_backup` for transfer to another
machine. Imports also accept documents produced by the web client, which
name the sections `localStorage` and `sessionStorage`.
"""
from __future__ import annotations
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Tuple

from .adapter import BackendAdapter, Scope
from .envelope import ItemEnvelope, decode
from .errors import CorruptEnvelopeError
from .serializer import get_serializer

if TYPE_CHECKING:
    from .service import StorageService

logger = logging.getLogger(__name__)

EXPORT_VERSION = "1.0.0"

SECTION_NAMES = {
    Scope.PERSISTENT: ("persistent", "localStorage"),
    Scope.SESSION: ("session", "sessionStorage"),
}


def _export_adapter(adapter: BackendAdapter, keys: Optional[set]) -> Dict[str, dict]:
    data: Dict[str, dict] = {}
    now = adapter.now()
    for logical, raw in sorted(adapter.entries().items()):
        if keys is not None and logical not in keys:
            continue
        if raw is None:
            logger.warning("Skipping unreadable %s item %r in export", adapter.scope.value, logical)
            continue
        try:
            item = decode(raw, adapter.serializer)
        except CorruptEnvelopeError:
            logger.warning("Skipping corrupt %s item %r in export", adapter.scope.value, logical)
            continue
        if item.is_expired(now):
            continue
        data[logical] = item.to_dict()
    return data


def _iso(ms: int) -> str:
    stamp = datetime.fromtimestamp(ms / 1000, tz=timezone.utc)
    return stamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_data(service: "StorageService", keys: Optional[Iterable[str]] = None) -> dict:
    """Snapshot every live namespaced entry, optionally only `keys`."""
    wanted = set(keys) if keys is not None else None
    persistent = _export_adapter(service.persistent, wanted)
    session = _export_adapter(service.session, wanted)
    logger.info("Exported %d persistent and %d session items", len(persistent), len(session))
    return {
        "persistent": persistent,
        "session": session,
        "exportedAt": _iso(service.persistent.now()),
        "version": EXPORT_VERSION,
    }


def _section(data: dict, scope: Scope) -> Any:
    for name in SECTION_NAMES[scope]:
        if name in data:
            return data[name]
    return None


def _unpack(item: Any) -> Tuple[Any, Optional[float], Optional[str]]:
    """Return (value, ttl seconds, version) for an exported entry."""
    if isinstance(item, dict) and "value" in item and "timestamp" in item:
        try:
            envelope = ItemEnvelope.from_dict(item)
        except CorruptEnvelopeError:
            return item, None, None
        lifetime = envelope.remaining_ttl_ms()
        return envelope.value, (lifetime / 1000 if lifetime else None), envelope.version
    return item, None, None


def _import_section(adapter: BackendAdapter, section: dict, overwrite: bool) -> Tuple[int, int, int]:
    written = skipped = failed = 0
    for key, item in section.items():
        if not overwrite and adapter.read(key).hit:
            skipped += 1
            continue
        value, ttl, version = _unpack(item)
        if adapter.set(key, value, ttl=ttl, version=version):
            written += 1
        else:
            failed += 1
    return written, skipped, failed


def import_data(service: "StorageService", data: Any, overwrite: bool = False,
                target: Scope = Scope.PERSISTENT) -> bool:
    """Write the snapshot section(s) selected by `target` back into storage.

    Entries already present in the target backend are kept unless
    `overwrite` is set. An entry written with a TTL gets the same lifetime
    again, counted from now.
    """
    if not isinstance(data, dict):
        logger.error("Failed to import data: expected an export document, got %s", type(data).__name__)
        return False

    ok = True
    for adapter in service.adapters(target):
        section = _section(data, adapter.scope)
        if section is None:
            continue
        if not isinstance(section, dict):
            logger.error("Failed to import %s data: section is not a mapping", adapter.scope.value)
            ok = False
            continue
        written, skipped, failed = _import_section(adapter, section, overwrite)
        logger.info("Imported %d %s items (%d skipped, %d failed)",
                    written, adapter.scope.value, skipped, failed)
        if failed:
            ok = False
    return ok


def _serializer_for(path: Path, fmt: Optional[str]):
    return get_serializer(fmt or path.suffix.lstrip(".") or "json")


def write_backup(data: dict, path: str | Path, fmt: Optional[str] = None) -> Path:
    """Write an export document to `path` as JSON or YAML (by suffix unless `fmt`)."""
    path = Path(path)
    serializer = _serializer_for(path, fmt)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(serializer.dump(data))
    return path


def read_backup(path: str | Path, fmt: Optional[str] = None) -> dict:
    path = Path(path)
    serializer = _serializer_for(path, fmt)
    with open(path, "r", encoding="utf-8") as f:
        return serializer.load(f.read()) or {}
