import json
import logging

from stockledger.core.exceptions import (
    CorruptDataError,
    LedgerUnavailableError,
    NotFoundError,
    ProductExistsError,
)
from stockledger.ledger.base import InventoryStore, VerifiedStore
from stockledger.ledger.keys import product_key
from stockledger.services.stock_service import opening_quantity, product_stock

logger = logging.getLogger(__name__)


def serialize_record(record: dict) -> str:
    return json.dumps(record, separators=(",", ":"), ensure_ascii=False)


def decode_product(entry, sku):
    try:
        product = json.loads(entry.value.decode("utf-8"))
    except ValueError as exc:
        logger.error("Corrupt product entry for SKU %s: %s", sku, exc)
        raise CorruptDataError("Corrupt product data", sku=sku) from exc
    if not isinstance(product, dict):
        logger.error("Product entry for SKU %s is not an object", sku)
        raise CorruptDataError("Corrupt product data", sku=sku)
    return product


def load_product(ledger: VerifiedStore, sku: str) -> dict:
    try:
        entry = ledger.verified_get(product_key(sku))
    except NotFoundError as exc:
        raise NotFoundError("Product not found", sku=sku) from exc
    return decode_product(entry, sku)


def create_product(ledger: VerifiedStore, product: dict):
    sku = product["sku"]
    key = product_key(sku)

    try:
        ledger.verified_get(key)
    except NotFoundError:
        pass
    else:
        raise ProductExistsError(
            "Product with SKU {} already exists".format(sku),
            sku=sku,
        )

    receipt = ledger.verified_set(key, serialize_record(product))
    logger.info(
        "Created product %s at ledger tx %s",
        sku,
        receipt.tx_id,
        extra={"sku": sku, "ledger_tx": receipt.tx_id},
    )
    return product, receipt


def get_product(ledger: InventoryStore, sku: str, history_limit: int) -> dict:
    product = load_product(ledger, sku)
    try:
        stock = product_stock(ledger, sku, product, history_limit)
    except LedgerUnavailableError:
        logger.warning(
            "Failed to replay transaction history for SKU %s, using recorded quantity",
            sku,
            exc_info=True,
        )
        stock = opening_quantity(product)
    product["current_stock"] = stock
    return product


__all__ = ["create_product", "decode_product", "get_product", "load_product", "serialize_record"]
