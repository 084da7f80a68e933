"""Physical key naming.

Every key this package writes is `<prefix><logical key>`; the prefix is the
only thing separating our entries from anything else sharing the store.
"""
from typing import Optional

PREFIX = "hwc_"
PROBE_NAME = "storage_test"

AUTH_TOKEN = "auth_token"
USER_PREFERENCES = "user_preferences"
RECENT_SEARCHES = "recent_searches"


def namespace(key: str, prefix: str = PREFIX) -> str:
    return f"{prefix}{key}"


def is_namespaced(physical_key: str, prefix: str = PREFIX) -> bool:
    return physical_key.startswith(prefix)


def strip_namespace(physical_key: str, prefix: str = PREFIX) -> Optional[str]:
    """Return the logical key for `physical_key`, or None for foreign keys."""
    if not is_namespaced(physical_key, prefix):
        return None
    return physical_key[len(prefix):]


def form_key(form_id: str) -> str:
    return f"form_{form_id}"
