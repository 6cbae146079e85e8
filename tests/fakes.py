import hashlib
import json

from stockledger.core.exceptions import (
    LedgerUnavailableError,
    NotFoundError,
    SessionExpiredError,
)
from stockledger.ledger.base import LedgerEntry, LedgerState, VerifiedEntry, WriteReceipt
from stockledger.ledger.client import LedgerClient


class FakeLedgerBackend:
    """In-memory versioned key-value store speaking the LedgerBackend contract."""

    def __init__(self):
        self.versions = {}
        self.tx_id = 0
        self.tx_hash = hashlib.sha256(b"genesis").digest()
        self.tx_hashes = {0: self.tx_hash}
        self.sessions_opened = 0
        self.session_open = False
        self.expire_next = 0
        self.tampered_keys = set()
        self.unavailable_history = False
        self.failing_write_keys = set()
        self.states_seen = []
        self.scan_calls = 0

    # -- session ---------------------------------------------------------

    def open_session(self):
        self.sessions_opened += 1
        self.session_open = True

    def close_session(self):
        self.session_open = False

    def _check_session(self):
        if not self.session_open:
            raise SessionExpiredError("7 PERMISSION_DENIED: session not found")
        if self.expire_next:
            self.expire_next -= 1
            self.session_open = False
            raise SessionExpiredError("7 PERMISSION_DENIED: session not found")

    # -- helpers ---------------------------------------------------------

    def _append(self, key, value):
        if key in self.failing_write_keys:
            raise LedgerUnavailableError("write rejected for {}".format(key.decode()))
        self.tx_id += 1
        self.tx_hash = hashlib.sha256(self.tx_hash + key + value).digest()
        self.tx_hashes[self.tx_id] = self.tx_hash
        self.versions.setdefault(key, []).append((self.tx_id, value))
        return self.tx_id

    def _latest(self, key):
        if key not in self.versions:
            raise NotFoundError("tbtree: key not found")
        return self.versions[key][-1]

    def put(self, key, value):
        """Seed a raw version without going through a session."""
        if isinstance(key, str):
            key = key.encode("utf-8")
        if isinstance(value, dict):
            value = json.dumps(value).encode("utf-8")
        elif isinstance(value, str):
            value = value.encode("utf-8")
        return self._append(key, value)

    def _proves(self, key, state):
        """A proof holds only against a state this store actually reached."""
        return key not in self.tampered_keys and self.tx_hashes.get(state.tx_id) == state.tx_hash

    def values(self, key):
        if isinstance(key, str):
            key = key.encode("utf-8")
        return [value for _, value in self.versions.get(key, [])]

    # -- LedgerBackend ---------------------------------------------------

    def current_state(self):
        self._check_session()
        state = LedgerState(tx_id=self.tx_id, tx_hash=self.tx_hash)
        self.states_seen.append(state)
        return state

    def get(self, key):
        self._check_session()
        tx_id, value = self._latest(key)
        return LedgerEntry(key=key, value=value, tx_id=tx_id)

    def set(self, key, value):
        self._check_session()
        return WriteReceipt(key=key, tx_id=self._append(key, value))

    def verified_get(self, key, state):
        self._check_session()
        tx_id, value = self._latest(key)
        return VerifiedEntry(
            key=key,
            value=value,
            tx_id=tx_id,
            verified=self._proves(key, state),
            state=state,
        )

    def verified_set(self, key, value, state):
        self._check_session()
        proved = self._proves(key, state)
        tx_id = self._append(key, value)
        return WriteReceipt(
            key=key,
            tx_id=tx_id,
            verified=proved and tx_id > state.tx_id,
            state=state,
        )

    def history(self, key, limit, descending):
        self._check_session()
        if self.unavailable_history:
            raise LedgerUnavailableError("14 UNAVAILABLE: connection refused")
        if key not in self.versions:
            raise NotFoundError("tbtree: key not found")
        versions = list(self.versions[key])
        if descending:
            versions.reverse()
        return [LedgerEntry(key=key, value=value, tx_id=tx_id) for tx_id, value in versions[:limit]]

    def scan(self, seek_key, limit):
        self._check_session()
        self.scan_calls += 1
        keys = sorted(key for key in self.versions if key > seek_key)
        return [LedgerEntry(key=key, value=self.versions[key][-1][1]) for key in keys[:limit]]


def make_ledger(backend=None, scan_page_size=1000):
    backend = backend or FakeLedgerBackend()
    return LedgerClient(backend, scan_page_size=scan_page_size).connect(), backend


def transaction_entry(quantity_change, timestamp="2024-05-01T10:00:00.000Z", **extra):
    record = {
        "transaction_id": extra.pop("transaction_id", "00000000-0000-4000-8000-000000000000"),
        "sku": extra.pop("sku", "SKU-1"),
        "type": extra.pop("type", "IN" if quantity_change >= 0 else "OUT"),
        "quantity_change": quantity_change,
        "timestamp": timestamp,
    }
    record.update(extra)
    return LedgerEntry(key=b"transaction:SKU-1", value=json.dumps(record).encode("utf-8"))
