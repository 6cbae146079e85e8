import logging
import uuid

from stockledger.core.constants import TRANSACTION_TYPES, UNKNOWN_USER
from stockledger.core.dates import utc_now_iso
from stockledger.core.exceptions import (
    InsufficientStockError,
    LedgerError,
    NotFoundError,
    ValidationFailure,
)
from stockledger.ledger.base import InventoryStore, PlainStore, VerifiedStore
from stockledger.ledger.keys import product_key, transaction_id_key, transaction_key
from stockledger.services.product_service import load_product, serialize_record
from stockledger.services.stock_service import (
    current_balance,
    load_history,
    opening_quantity,
    running_balance,
)

logger = logging.getLogger(__name__)


def normalize_quantity(transaction_type, quantity):
    """Signed delta for a movement: IN adds, OUT removes, ADJUSTMENT is taken as given."""
    if transaction_type == "IN":
        return abs(quantity)
    if transaction_type == "OUT":
        return -abs(quantity)
    if transaction_type == "ADJUSTMENT":
        return quantity
    raise ValidationFailure(
        "type must be one of {}".format(", ".join(TRANSACTION_TYPES)),
        type=transaction_type,
    )


def _balance_before(ledger: InventoryStore, sku, product, history_limit):
    try:
        history = load_history(ledger, sku, history_limit)
    except LedgerError:
        # A missing history must not block the movement; count it as empty.
        logger.warning(
            "Failed to retrieve transaction history for SKU %s, assuming no prior movements",
            sku,
            exc_info=True,
        )
        history = []
    return current_balance(history, opening=opening_quantity(product), sku=sku)


def _mirror_product_stock(ledger: VerifiedStore, sku, product, balance):
    record = dict(product)
    record.pop("current_stock", None)
    record["initial_quantity"] = opening_quantity(product)
    record["quantity"] = balance
    try:
        ledger.verified_set(product_key(sku), serialize_record(record))
    except LedgerError:
        logger.warning("Failed to mirror stock %s onto product %s", balance, sku, exc_info=True)


def record_transaction(
    ledger: InventoryStore,
    payload,
    performed_by=None,
    *,
    history_limit,
    sync_product_stock=False,
):
    sku = payload["sku"]
    transaction_type = payload["type"]
    quantity = payload["quantity"]
    reason = payload.get("reason")

    product = load_product(ledger, sku)
    balance = _balance_before(ledger, sku, product, history_limit)

    quantity_change = normalize_quantity(transaction_type, quantity)
    if transaction_type == "OUT" and balance + quantity_change < 0:
        raise InsufficientStockError(
            "Insufficient stock",
            sku=sku,
            current_stock=balance,
            requested=abs(quantity_change),
        )

    transaction = {
        "transaction_id": str(uuid.uuid4()),
        "sku": sku,
        "type": transaction_type,
        "quantity_change": quantity_change,
        "reason": reason,
        "performed_by": performed_by or UNKNOWN_USER,
        "timestamp": utc_now_iso(),
    }
    value = serialize_record(transaction)

    # Two independent writes: a failure after the first leaves the ID index
    # without this transaction while the SKU history already has it.
    ledger.verified_set(transaction_key(sku), value)
    ledger.verified_set(transaction_id_key(transaction["transaction_id"]), value)
    logger.info(
        "Recorded %s %s for SKU %s (transaction %s)",
        transaction_type,
        quantity_change,
        sku,
        transaction["transaction_id"],
        extra={"sku": sku, "transaction_id": transaction["transaction_id"]},
    )

    if sync_product_stock:
        _mirror_product_stock(ledger, sku, product, balance + quantity_change)

    return {"transaction": transaction, "verified": True}


def transaction_history(ledger: PlainStore, sku, size):
    try:
        history = ledger.history(transaction_key(sku), limit=size)
    except NotFoundError as exc:
        raise NotFoundError("No transactions found for SKU: {}".format(sku), sku=sku) from exc

    if not history:
        raise NotFoundError("No transactions found for SKU: {}".format(sku), sku=sku)

    transactions, total = running_balance(history, sku=sku)
    return {"sku": sku, "transactions": transactions, "running_balance": total}


__all__ = ["normalize_quantity", "record_transaction", "transaction_history"]
