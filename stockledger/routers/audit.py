from fastapi import APIRouter, Depends

from stockledger.dependencies import get_ledger, require_auth
from stockledger.services.audit_service import audit_transaction

router = APIRouter(prefix="/api/audit", tags=["Audit"])


@router.get("/verify/{transaction_id}")
def verify_transaction(
    transaction_id: str,
    _auth=Depends(require_auth),
    ledger=Depends(get_ledger),
):
    result = audit_transaction(ledger, transaction_id)
    return {"message": "Transaction verified", **result}


__all__ = ["router"]
