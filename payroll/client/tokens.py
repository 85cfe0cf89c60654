# payroll/client/tokens.py
from __future__ import annotations

import json
import time
from typing import Any, Dict, Optional

from jose.utils import base64url_decode

from payroll.client.storage import KeyValueStorage, MemoryStorage

ACCESS_KEY = "access_token"
REFRESH_KEY = "refresh_token"
USER_KEY = "user"


def _now_ms() -> int:
    return int(time.time() * 1000)


def get_token_expiry(token: Optional[str]) -> Optional[int]:
    """``exp`` of a JWT as epoch milliseconds, read from the payload segment only (no signature check)."""
    if not token:
        return None
    segments = token.split(".")
    if len(segments) < 2:
        return None
    try:
        claims = json.loads(base64url_decode(segments[1].encode("ascii")))
    except ValueError:
        # bad base64, bad utf-8 or bad json
        return None
    if not isinstance(claims, dict):
        return None
    exp = claims.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return None
    return int(exp * 1000)


def is_expiring_soon(token: Optional[str], within_seconds: int = 30, now_ms: Optional[int] = None) -> bool:
    expiry = get_token_expiry(token)
    if expiry is None:
        # unreadable expiry: let the server decide instead of refreshing
        return False
    now = _now_ms() if now_ms is None else now_ms
    return expiry - now <= within_seconds * 1000


class TokenStore:
    def __init__(self, storage: Optional[KeyValueStorage] = None):
        self.storage: KeyValueStorage = storage if storage is not None else MemoryStorage()

    def save_tokens(self, access: str, refresh: Optional[str] = None, user: Optional[Dict[str, Any]] = None) -> None:
        self.storage.set(ACCESS_KEY, access)
        if refresh:
            self.storage.set(REFRESH_KEY, refresh)
        if user:
            self.storage.set(USER_KEY, json.dumps(user))

    def get_access_token(self) -> Optional[str]:
        return self.storage.get(ACCESS_KEY)

    def get_refresh_token(self) -> Optional[str]:
        return self.storage.get(REFRESH_KEY)

    def get_user(self) -> Optional[Dict[str, Any]]:
        raw = self.storage.get(USER_KEY)
        if not raw:
            return None
        try:
            user = json.loads(raw)
        except json.JSONDecodeError:
            return None
        return user if isinstance(user, dict) else None

    def clear_tokens(self) -> None:
        for key in (ACCESS_KEY, REFRESH_KEY, USER_KEY):
            self.storage.remove(key)

    # kept on the store so callers need a single object
    get_token_expiry = staticmethod(get_token_expiry)
    is_expiring_soon = staticmethod(is_expiring_soon)
