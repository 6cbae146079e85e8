from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

import grpc
from immudb import ImmudbClient
from immudb.exceptions import ErrCorruptedData

from stockledger.config import Settings
from stockledger.core.constants import KEY_NOT_FOUND_MARKER, SESSION_NOT_FOUND_MARKER
from stockledger.core.exceptions import (
    LedgerUnavailableError,
    NotFoundError,
    SessionExpiredError,
    VerificationError,
)
from stockledger.ledger.base import LedgerEntry, LedgerState, VerifiedEntry, WriteReceipt
from stockledger.ledger.client import LedgerClient

logger = logging.getLogger(__name__)


def _error_text(exc: grpc.RpcError) -> str:
    details = getattr(exc, "details", None)
    if callable(details):
        text = details()
        if text:
            return str(text)
    return str(exc)


def translate_rpc_error(exc: grpc.RpcError):
    message = _error_text(exc)
    lowered = message.lower()
    if SESSION_NOT_FOUND_MARKER in lowered:
        return SessionExpiredError(message)
    if KEY_NOT_FOUND_MARKER in lowered:
        return NotFoundError(message)
    return LedgerUnavailableError(message)


def _driver_call(method):
    @wraps(method)
    def wrapper(self, *args, **kwargs):
        if self._client is None:
            raise SessionExpiredError("Ledger session not found: client is not logged in")
        try:
            return method(self, *args, **kwargs)
        except ErrCorruptedData as exc:
            raise VerificationError(
                "Ledger verification failed during {}".format(method.__name__)
            ) from exc
        except grpc.RpcError as exc:
            raise translate_rpc_error(exc) from exc

    return wrapper


class ImmudbBackend:
    """immudb-py adapter; the only module that knows about the driver."""

    def __init__(
        self,
        url: str,
        user: str,
        password: str,
        database: str,
        *,
        timeout: Optional[float] = None,
    ) -> None:
        self._url = url
        self._user = user
        self._password = password
        self._database = database
        self._timeout = timeout
        self._client: Optional[ImmudbClient] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "ImmudbBackend":
        return cls(
            settings.immudb_url,
            settings.IMMUDB_USER,
            settings.IMMUDB_PASS,
            settings.IMMUDB_DB,
            timeout=settings.IMMUDB_TIMEOUT,
        )

    def open_session(self) -> None:
        if self._timeout is not None:
            client = ImmudbClient(self._url, timeout=self._timeout)
        else:
            client = ImmudbClient(self._url)
        try:
            client.login(self._user, self._password, database=self._database.encode("utf-8"))
        except grpc.RpcError as exc:
            raise LedgerUnavailableError(
                "Could not connect to immudb database: {}".format(_error_text(exc))
            ) from exc
        self._client = client
        logger.info("Logged in to immudb at %s (database %s)", self._url, self._database)

    def close_session(self) -> None:
        client, self._client = self._client, None
        if client is None:
            return
        try:
            client.logout()
        except grpc.RpcError as exc:
            raise translate_rpc_error(exc) from exc

    @_driver_call
    def current_state(self) -> LedgerState:
        state = self._client.currentState()
        return LedgerState(tx_id=state.txId, tx_hash=state.txHash)

    @_driver_call
    def get(self, key: bytes) -> LedgerEntry:
        response = self._client.get(key)
        if response is None:
            raise NotFoundError("Key not found: {}".format(key.decode("utf-8", "replace")))
        return LedgerEntry(key=key, value=response.value, tx_id=response.tx)

    @_driver_call
    def set(self, key: bytes, value: bytes) -> WriteReceipt:
        response = self._client.set(key, value)
        return WriteReceipt(key=key, tx_id=response.id, verified=False)

    @_driver_call
    def verified_get(self, key: bytes, state: LedgerState) -> VerifiedEntry:
        # Waits until the store has indexed at least up to the given state.
        response = self._client.verifiedGetSince(key, state.tx_id)
        if response is None:
            raise NotFoundError("Key not found: {}".format(key.decode("utf-8", "replace")))
        return VerifiedEntry(
            key=key,
            value=response.value,
            tx_id=response.id,
            verified=bool(response.verified),
            state=state,
        )

    @_driver_call
    def verified_set(self, key: bytes, value: bytes, state: LedgerState) -> WriteReceipt:
        response = self._client.verifiedSet(key, value)
        # The new transaction must extend the state read before the write.
        extends_state = response.id > state.tx_id
        if not extends_state:
            logger.warning(
                "Ledger write landed at tx %s, not after state tx %s",
                response.id,
                state.tx_id,
                extra={"ledger_key": key, "ledger_tx": response.id},
            )
        return WriteReceipt(
            key=key,
            tx_id=response.id,
            verified=bool(response.verified) and extends_state,
            state=state,
        )

    @_driver_call
    def history(self, key: bytes, limit: int, descending: bool) -> list[LedgerEntry]:
        items = self._client.history(key, 0, limit, descending)
        return [LedgerEntry(key=key, value=item.value, tx_id=item.tx) for item in items]

    @_driver_call
    def scan(self, seek_key: bytes, limit: int) -> list[LedgerEntry]:
        page = self._client.scan(seek_key, b"", False, limit)
        return [LedgerEntry(key=key, value=value) for key, value in page.items()]


def connect_ledger(settings: Settings) -> LedgerClient:
    client = LedgerClient(
        ImmudbBackend.from_settings(settings),
        scan_page_size=settings.KEYSPACE_SCAN_PAGE_SIZE,
    )
    return client.connect()


__all__ = ["ImmudbBackend", "connect_ledger", "translate_rpc_error"]
