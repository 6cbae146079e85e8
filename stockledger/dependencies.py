from fastapi import Request

from stockledger.config import get_settings
from stockledger.core.exceptions import LedgerUnavailableError
from stockledger.core.security import authenticate_request
from stockledger.ledger.client import LedgerClient


def require_auth(request: Request) -> dict:
    settings = get_settings()
    return authenticate_request(
        api_key=request.headers.get(settings.API_KEY_HEADER),
        user_email=request.headers.get(settings.USER_EMAIL_HEADER),
    )


def get_ledger(request: Request) -> LedgerClient:
    ledger = getattr(request.app.state, "ledger", None)
    if ledger is None:
        raise LedgerUnavailableError("Ledger is not connected")
    return ledger


__all__ = ["get_ledger", "require_auth"]
