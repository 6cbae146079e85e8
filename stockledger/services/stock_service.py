"""
Stock aggregation over a SKU's transaction history.

Balances are never stored: every read replays the versions of
``transaction:<sku>`` and sums their signed ``quantity_change`` values.
A version that does not decode into a transaction is logged and skipped so
one corrupt entry cannot sink a whole aggregate.
"""

import json
import logging
import math
from numbers import Number

from stockledger.core.dates import format_timestamp, parse_timestamp, utc_date
from stockledger.core.exceptions import NotFoundError, ValidationFailure
from stockledger.ledger.base import PlainStore
from stockledger.ledger.keys import transaction_key

logger = logging.getLogger(__name__)


def _entry_value(entry):
    value = getattr(entry, "value", entry)
    if isinstance(value, (bytes, bytearray)):
        return value.decode("utf-8")
    return value


def _is_quantity(value):
    if not isinstance(value, Number) or isinstance(value, bool):
        return False
    return math.isfinite(value)


def parse_transaction(entry, sku=None):
    try:
        transaction = json.loads(_entry_value(entry))
    except (TypeError, ValueError) as exc:
        logger.warning("Skipping malformed transaction entry for SKU %s: %s", sku, exc)
        return None

    if not isinstance(transaction, dict) or not _is_quantity(transaction.get("quantity_change")):
        logger.warning("Skipping transaction without numeric quantity_change for SKU %s", sku)
        return None
    return transaction


def iter_transactions(history, sku=None):
    for entry in history or ():
        transaction = parse_transaction(entry, sku)
        if transaction is not None:
            yield transaction


def current_balance(history, opening=0, sku=None):
    balance = opening
    for transaction in iter_transactions(history, sku):
        balance += transaction["quantity_change"]
    return balance


def running_balance(history, sku=None):
    """
    Transactions in the order supplied, each with the cumulative sum so far.

    History is usually most-recent-first and is not reordered.
    """
    total = 0
    transactions = []
    for transaction in iter_transactions(history, sku):
        total += transaction["quantity_change"]
        transactions.append({**transaction, "running_balance": total})
    return transactions, total


def balance_as_of(history, target, sku=None):
    """Sum and list the transactions recorded on the UTC calendar day of ``target``."""
    target_day = utc_date(target)
    if target_day is None:
        raise ValueError("target must be a date, datetime or ISO-8601 string")

    balance = 0
    transactions = []
    for transaction in iter_transactions(history, sku):
        if utc_date(transaction.get("timestamp")) != target_day:
            continue
        balance += transaction["quantity_change"]
        transactions.append(transaction)
    return balance, transactions


def last_transaction_timestamp(history, sku=None):
    latest = None
    latest_value = None
    for transaction in iter_transactions(history, sku):
        value = transaction.get("timestamp")
        parsed = parse_timestamp(value)
        if parsed is None:
            continue
        if latest is None or parsed > latest:
            latest = parsed
            latest_value = value
    return latest_value


def load_history(ledger: PlainStore, sku, limit):
    """Versions of ``transaction:<sku>``; a SKU never written has none."""
    try:
        return ledger.history(transaction_key(sku), limit=limit)
    except NotFoundError:
        return []


def opening_quantity(product):
    if not isinstance(product, dict):
        return 0
    for field in ("initial_quantity", "quantity"):
        value = product.get(field)
        if _is_quantity(value):
            return int(value)
    return 0


def product_stock(ledger: PlainStore, sku, product, limit):
    history = load_history(ledger, sku, limit)
    return current_balance(history, opening=opening_quantity(product), sku=sku)


def inventory_at(ledger: PlainStore, sku, timestamp, limit):
    target = parse_timestamp(timestamp)
    if target is None:
        raise ValidationFailure("Invalid timestamp", timestamp=timestamp)
    history = load_history(ledger, sku, limit)
    inventory, transactions = balance_as_of(history, target, sku=sku)
    return {
        "sku": sku,
        "timestamp": format_timestamp(target),
        "inventory": inventory,
        "transactions": transactions,
    }


__all__ = [
    "balance_as_of",
    "current_balance",
    "inventory_at",
    "iter_transactions",
    "last_transaction_timestamp",
    "load_history",
    "opening_quantity",
    "parse_transaction",
    "product_stock",
    "running_balance",
]
