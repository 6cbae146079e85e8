from typing import Optional

# Stored data depends on these exact prefixes.
PRODUCT_PREFIX = "product:"
TRANSACTION_PREFIX = "transaction:"
TRANSACTION_ID_PREFIX = "transaction:id:"
HEALTH_KEY = "health:status"


def product_key(sku: str) -> str:
    return PRODUCT_PREFIX + sku


def transaction_key(sku: str) -> str:
    return TRANSACTION_PREFIX + sku


def transaction_id_key(transaction_id: str) -> str:
    return TRANSACTION_ID_PREFIX + transaction_id


def sku_from_product_key(key) -> Optional[str]:
    if isinstance(key, bytes):
        try:
            key = key.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if not key.startswith(PRODUCT_PREFIX):
        return None
    return key[len(PRODUCT_PREFIX):]
