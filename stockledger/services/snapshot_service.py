import logging

from stockledger.core.exceptions import (
    CorruptDataError,
    LedgerUnavailableError,
    NotFoundError,
    SessionExpiredError,
)
from stockledger.ledger.base import InventoryStore, PlainStore, VerifiedStore
from stockledger.ledger.keys import sku_from_product_key
from stockledger.services.product_service import load_product
from stockledger.services.stock_service import (
    current_balance,
    last_transaction_timestamp,
    load_history,
    opening_quantity,
)

logger = logging.getLogger(__name__)


def list_product_skus(ledger: PlainStore) -> list[str]:
    skus = []
    for entry in ledger.scan_entries():
        sku = sku_from_product_key(entry.key)
        if sku:
            skus.append(sku)
    return skus


def _snapshot_product(ledger: VerifiedStore, sku: str):
    try:
        return load_product(ledger, sku)
    except (NotFoundError, CorruptDataError):
        logger.warning("Product record for SKU %s is missing or unreadable", sku)
        return None


def snapshot_row(ledger: InventoryStore, sku: str, history_limit: int) -> dict:
    product = _snapshot_product(ledger, sku)
    try:
        history = load_history(ledger, sku, history_limit)
    except (LedgerUnavailableError, SessionExpiredError):
        logger.error("Error retrieving transactions for SKU %s", sku, exc_info=True)
        quantity = 0
        last_timestamp = None
    else:
        quantity = current_balance(history, opening=opening_quantity(product), sku=sku)
        last_timestamp = last_transaction_timestamp(history, sku=sku)

    return {
        "sku": sku,
        "product": product,
        "current_quantity": quantity,
        "last_transaction_timestamp": last_timestamp,
    }


def build_snapshot(ledger: InventoryStore, history_limit: int) -> list[dict]:
    """One row per ``product:`` key, in keyspace scan order."""
    return [snapshot_row(ledger, sku, history_limit) for sku in list_product_skus(ledger)]


__all__ = ["build_snapshot", "list_product_skus", "snapshot_row"]
