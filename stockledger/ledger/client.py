from __future__ import annotations

import logging
import threading
from functools import wraps
from typing import Any, Callable, Optional, TypeVar

from stockledger.core.exceptions import LedgerUnavailableError, SessionExpiredError, VerificationError
from stockledger.ledger.base import (
    LedgerBackend,
    LedgerEntry,
    VerifiedEntry,
    WriteReceipt,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

DEFAULT_HISTORY_LIMIT = 1000
DEFAULT_SCAN_PAGE_SIZE = 1000


def _to_bytes(value) -> bytes:
    if isinstance(value, bytes):
        return value
    return str(value).encode("utf-8")


def session_retry(method: F) -> F:
    """
    Re-establish the ledger session once and repeat the call when the store
    reports that the session is gone. A second failure propagates unchanged.
    """

    @wraps(method)
    def wrapper(self, *args, **kwargs):
        generation = self.generation
        try:
            return method(self, *args, **kwargs)
        except SessionExpiredError:
            logger.info(
                "Ledger session expired during %s, re-establishing session",
                method.__name__,
                extra={"ledger_key": args[0] if args else None},
            )
            self.reconnect(seen_generation=generation)
            return method(self, *args, **kwargs)

    return wrapper  # type: ignore[return-value]


class LedgerClient:
    """
    Plain and verified access to the ledger over an injected backend.

    Verified operations fetch the current global state on every call and hand
    it to the backend, so proofs are never checked against a cached state.
    """

    def __init__(
        self,
        backend: LedgerBackend,
        *,
        scan_page_size: int = DEFAULT_SCAN_PAGE_SIZE,
    ) -> None:
        if scan_page_size < 1:
            raise ValueError("scan_page_size must be positive")
        self._backend = backend
        self._scan_page_size = scan_page_size
        self._connected = False
        # Guards the one backend session shared by every worker thread.
        self._session_lock = threading.Lock()
        self._generation = 0

    @property
    def connected(self) -> bool:
        return self._connected

    @property
    def generation(self) -> int:
        """Incremented every time a session is opened."""
        return self._generation

    def _open_session(self) -> None:
        self._backend.open_session()
        self._generation += 1
        self._connected = True
        logger.info("Connected to ledger (session %s)", self._generation)

    def connect(self) -> "LedgerClient":
        with self._session_lock:
            self._open_session()
        return self

    def reconnect(self, seen_generation: Optional[int] = None) -> None:
        """
        Replace the session. A caller that saw an older session than the
        current one only retries; another thread already replaced it.
        """
        with self._session_lock:
            if seen_generation is not None and seen_generation != self._generation:
                logger.debug(
                    "Ledger session %s already replaced by session %s",
                    seen_generation,
                    self._generation,
                )
                return
            try:
                self._backend.close_session()
            except (SessionExpiredError, LedgerUnavailableError):
                logger.debug("Ignoring failure while closing stale ledger session", exc_info=True)
            self._connected = False
            self._open_session()

    def close(self) -> None:
        with self._session_lock:
            if not self._connected:
                return
            self._backend.close_session()
            self._connected = False
        logger.info("Ledger session closed")

    # ------------------------------------------------------------------
    # Plain operations
    # ------------------------------------------------------------------

    @session_retry
    def set(self, key: str, value) -> WriteReceipt:
        return self._backend.set(_to_bytes(key), _to_bytes(value))

    @session_retry
    def get(self, key: str) -> LedgerEntry:
        return self._backend.get(_to_bytes(key))

    # ------------------------------------------------------------------
    # Verified operations
    # ------------------------------------------------------------------

    @session_retry
    def verified_set(self, key: str, value) -> WriteReceipt:
        state = self._backend.current_state()
        receipt = self._backend.verified_set(_to_bytes(key), _to_bytes(value), state)
        if not receipt.verified:
            # The write may have landed; it is still reported as failed.
            raise VerificationError("Ledger verification failed during set operation", key=key)
        return receipt

    @session_retry
    def verified_get(self, key: str) -> VerifiedEntry:
        state = self._backend.current_state()
        entry = self._backend.verified_get(_to_bytes(key), state)
        if not entry.verified:
            raise VerificationError("Ledger verification failed during get operation", key=key)
        return entry

    # ------------------------------------------------------------------
    # History and keyspace scans
    # ------------------------------------------------------------------

    @session_retry
    def history(
        self,
        key: str,
        limit: int = DEFAULT_HISTORY_LIMIT,
        descending: bool = True,
    ) -> list[LedgerEntry]:
        """
        Up to ``limit`` versions of ``key``, most recent first by default.

        ``limit`` is a ceiling, not a cursor: older versions beyond it are
        silently left out.
        """
        if limit < 1:
            raise ValueError("limit must be positive")
        return list(self._backend.history(_to_bytes(key), limit, descending))

    @session_retry
    def scan_entries(self, start_key: bytes = b"") -> list[LedgerEntry]:
        """Every key/value pair of the keyspace from ``start_key`` onwards."""
        entries: list[LedgerEntry] = []
        seen: set[bytes] = set()
        seek_key: Optional[bytes] = _to_bytes(start_key)
        while seek_key is not None:
            page = self._backend.scan(seek_key, self._scan_page_size)
            fresh = [entry for entry in page if entry.key not in seen]
            for entry in fresh:
                seen.add(entry.key)
                entries.append(entry)
            if len(page) < self._scan_page_size or not fresh:
                seek_key = None
            else:
                seek_key = page[-1].key
        return entries


__all__ = ["LedgerClient", "session_retry"]
