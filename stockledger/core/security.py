from __future__ import annotations

import hmac
from typing import Optional

from fastapi import HTTPException, status

from stockledger.config import get_settings
from stockledger.core.constants import UNKNOWN_USER


def _load_api_key() -> Optional[str]:
    settings = get_settings()
    if not settings.API_KEY_SECRET:
        return None
    value = settings.API_KEY_SECRET.strip()
    return value or None


def _resolve_identity(user_email: Optional[str]) -> str:
    if user_email is None:
        return UNKNOWN_USER
    user_email = user_email.strip()
    return user_email or UNKNOWN_USER


def authenticate_request(
    api_key: Optional[str],
    user_email: Optional[str] = None,
) -> dict:
    expected = _load_api_key()
    if not api_key or expected is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    if not hmac.compare_digest(api_key.strip().encode("utf-8"), expected.encode("utf-8")):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
        )
    return {"auth_type": "api_key", "email": _resolve_identity(user_email)}
