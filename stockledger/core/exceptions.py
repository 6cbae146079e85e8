"""
Exception hierarchy for ledger access and inventory rules.

Every error carries an HTTP ``status_code``, a machine-readable ``code`` and
optional structured ``details`` that end up next to ``message`` in the JSON
error body.
"""

from __future__ import annotations

from typing import Any, Optional


class LedgerError(Exception):
    """Base class for every failure raised by the ledger layer and services."""

    status_code: int = 500
    code: str = "ledger_error"
    default_message: str = "Ledger operation failed"

    def __init__(self, message: Optional[str] = None, **details: Any) -> None:
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        payload = {"message": self.message, "code": self.code}
        payload.update(self.details)
        return payload


class NotFoundError(LedgerError):
    """The key has never been written."""

    status_code = 404
    code = "not_found"
    default_message = "Key not found"


class VerificationError(LedgerError):
    """
    A cryptographic proof did not validate.

    The value may exist in the store but must not be trusted. Never retried.
    """

    code = "verification_failed"
    default_message = "Ledger verification failed"


class SessionExpiredError(LedgerError):
    """The ledger session is gone; the client re-establishes it once."""

    code = "session_expired"
    default_message = "Ledger session expired"


class LedgerUnavailableError(LedgerError):
    code = "ledger_unavailable"
    default_message = "Ledger is unavailable"


class ValidationFailure(LedgerError):
    status_code = 400
    code = "validation_failed"
    default_message = "Validation failed"


class InsufficientStockError(LedgerError):
    status_code = 400
    code = "insufficient_stock"
    default_message = "Insufficient stock"


class ProductExistsError(LedgerError):
    status_code = 409
    code = "product_exists"
    default_message = "Product already exists"


class CorruptDataError(LedgerError):
    """A value was fetched but is not a valid record."""

    code = "corrupt_data"
    default_message = "Corrupt ledger data"


__all__ = [
    "CorruptDataError",
    "InsufficientStockError",
    "LedgerError",
    "LedgerUnavailableError",
    "NotFoundError",
    "ProductExistsError",
    "SessionExpiredError",
    "ValidationFailure",
    "VerificationError",
]
