"""Typed convenience wrappers around `StorageService`.

Preferences, recent searches and the auth token live in the persistent
backend; form drafts live in the session backend for 30 minutes.
"""
from __future__ import annotations
import base64
import binascii
import json
import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any, List, Optional

from pydantic import BaseModel

from .keys import AUTH_TOKEN, RECENT_SEARCHES, USER_PREFERENCES, form_key

if TYPE_CHECKING:
    from .service import StorageService

logger = logging.getLogger(__name__)

MAX_RECENT_SEARCHES = 10
FORM_DRAFT_TTL = timedelta(minutes=30)


class AuthTokenClaims(BaseModel):
    """Claims read out of a token for display only; never verified."""

    id: Any = None
    name: Optional[str] = None
    email: Optional[str] = None
    role: Optional[str] = None


def set_user_preferences(service: "StorageService", preferences: dict) -> bool:
    return service.set_local(USER_PREFERENCES, preferences)


def get_user_preferences(service: "StorageService") -> dict:
    return service.get_local(USER_PREFERENCES, {})


def set_recent_searches(service: "StorageService", searches: List[str]) -> bool:
    return service.set_local(RECENT_SEARCHES, list(searches)[:MAX_RECENT_SEARCHES])


def get_recent_searches(service: "StorageService") -> List[str]:
    return service.get_local(RECENT_SEARCHES, [])


def add_recent_search(service: "StorageService", term: Any) -> bool:
    """Put `term` at the front of the recent searches, dropping any copy of it.

    Matching ignores case; the newest spelling is the one kept.
    """
    if not term or not isinstance(term, str) or not term.strip():
        return False
    term = term.strip()
    folded = term.lower()
    searches = [s for s in get_recent_searches(service) if isinstance(s, str) and s.lower() != folded]
    return set_recent_searches(service, [term] + searches)


def clear_recent_searches(service: "StorageService") -> bool:
    return service.remove_local(RECENT_SEARCHES)


def set_form_data(service: "StorageService", form_id: str, form_data: dict) -> bool:
    return service.set_session(form_key(form_id), form_data, ttl=FORM_DRAFT_TTL)


def get_form_data(service: "StorageService", form_id: str) -> dict:
    return service.get_session(form_key(form_id), {})


def clear_form_data(service: "StorageService", form_id: str) -> bool:
    return service.remove_session(form_key(form_id))


def set_token(service: "StorageService", token: str) -> bool:
    return service.set_local(AUTH_TOKEN, token)


def get_token(service: "StorageService") -> Optional[str]:
    return service.get_local(AUTH_TOKEN, None)


def remove_token(service: "StorageService") -> bool:
    return service.remove_local(AUTH_TOKEN)


def decode_token(token: Any) -> Optional[dict]:
    """Decode the payload segment of a dot-delimited token without verifying it."""
    if not token or not isinstance(token, str):
        return None
    parts = token.split(".")
    if len(parts) < 2:
        return None
    segment = parts[1]
    segment += "=" * (-len(segment) % 4)
    try:
        payload = json.loads(base64.urlsafe_b64decode(segment.encode("ascii")))
    except (ValueError, UnicodeError, binascii.Error) as e:
        logger.debug("Failed to decode token payload: %s", e)
        return None
    return payload if isinstance(payload, dict) else None


def get_user_from_token(service: "StorageService") -> Optional[AuthTokenClaims]:
    payload = decode_token(get_token(service))
    if payload is None:
        return None
    return AuthTokenClaims(
        id=payload.get("id"),
        name=_str_or_none(payload.get("name")),
        email=_str_or_none(payload.get("email")),
        role=_str_or_none(payload.get("role")),
    )


def _str_or_none(value: Any) -> Optional[str]:
    return None if value is None else str(value)
