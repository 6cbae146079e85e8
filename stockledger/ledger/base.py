from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Protocol, runtime_checkable


@dataclass(frozen=True)
class LedgerState:
    """Global store state a verified operation is bound to."""

    tx_id: int
    tx_hash: bytes


@dataclass(frozen=True)
class LedgerEntry:
    key: bytes
    value: bytes
    tx_id: Optional[int] = None

    def text(self) -> str:
        return self.value.decode("utf-8")


@dataclass(frozen=True)
class VerifiedEntry(LedgerEntry):
    verified: bool = False
    state: Optional[LedgerState] = None


@dataclass(frozen=True)
class WriteReceipt:
    key: bytes
    tx_id: Optional[int]
    verified: bool = False
    state: Optional[LedgerState] = None


@runtime_checkable
class PlainStore(Protocol):
    def get(self, key: str) -> LedgerEntry: ...

    def set(self, key: str, value: bytes | str) -> WriteReceipt: ...

    def history(
        self, key: str, limit: int, descending: bool = True
    ) -> list[LedgerEntry]: ...

    def scan_entries(self, start_key: bytes = b"") -> list[LedgerEntry]: ...


@runtime_checkable
class VerifiedStore(Protocol):
    def verified_get(self, key: str) -> VerifiedEntry: ...

    def verified_set(self, key: str, value: bytes | str) -> WriteReceipt: ...


@runtime_checkable
class InventoryStore(PlainStore, VerifiedStore, Protocol):
    """Both capabilities; what the inventory services are written against."""


class LedgerBackend(Protocol):
    """
    Driver adapter contract.

    Implementations raise ``NotFoundError`` for unknown keys,
    ``SessionExpiredError`` when the session is gone, ``VerificationError``
    when the driver rejects a proof and ``LedgerUnavailableError`` for any
    other store failure.
    """

    def open_session(self) -> None: ...

    def close_session(self) -> None: ...

    def current_state(self) -> LedgerState: ...

    def get(self, key: bytes) -> LedgerEntry: ...

    def set(self, key: bytes, value: bytes) -> WriteReceipt: ...

    def verified_get(self, key: bytes, state: LedgerState) -> VerifiedEntry: ...

    def verified_set(self, key: bytes, value: bytes, state: LedgerState) -> WriteReceipt: ...

    def history(self, key: bytes, limit: int, descending: bool) -> list[LedgerEntry]: ...

    def scan(self, seek_key: bytes, limit: int) -> list[LedgerEntry]: ...
