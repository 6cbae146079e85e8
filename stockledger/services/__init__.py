from stockledger.services.audit_service import audit_transaction
from stockledger.services.health_service import probe_ledger
from stockledger.services.product_service import create_product, get_product
from stockledger.services.snapshot_service import build_snapshot
from stockledger.services.stock_service import current_balance, inventory_at, running_balance
from stockledger.services.transaction_service import record_transaction, transaction_history

__all__ = [
    "audit_transaction",
    "build_snapshot",
    "create_product",
    "current_balance",
    "get_product",
    "inventory_at",
    "probe_ledger",
    "record_transaction",
    "running_balance",
    "transaction_history",
]
