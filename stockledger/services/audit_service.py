import json
import logging

from stockledger.core.exceptions import CorruptDataError, NotFoundError
from stockledger.ledger.base import VerifiedStore
from stockledger.ledger.keys import transaction_id_key

logger = logging.getLogger(__name__)


def audit_transaction(ledger: VerifiedStore, transaction_id: str) -> dict:
    """Verified O(1) lookup through the ``transaction:id:`` index."""
    try:
        entry = ledger.verified_get(transaction_id_key(transaction_id))
    except NotFoundError as exc:
        raise NotFoundError("Transaction not found", transaction_id=transaction_id) from exc

    try:
        transaction = json.loads(entry.value.decode("utf-8"))
    except ValueError as exc:
        logger.error("Corrupt transaction entry %s: %s", transaction_id, exc)
        raise CorruptDataError(
            "Corrupt transaction data", transaction_id=transaction_id
        ) from exc

    return {"transaction": transaction, "verified": True}
