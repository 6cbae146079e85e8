from typing import Optional

from fastapi import APIRouter, Depends, Path, Query

from stockledger.config import get_settings
from stockledger.core.constants import SKU_PATTERN
from stockledger.dependencies import get_ledger, require_auth
from stockledger.schemas.transaction import TransactionCreate
from stockledger.services.snapshot_service import build_snapshot
from stockledger.services.transaction_service import record_transaction, transaction_history

router = APIRouter(prefix="/api/inventory", tags=["Inventory"])


@router.post("/transaction", status_code=201)
def create_transaction(
    payload: TransactionCreate,
    auth=Depends(require_auth),
    ledger=Depends(get_ledger),
):
    settings = get_settings()
    result = record_transaction(
        ledger,
        payload.model_dump(),
        performed_by=auth.get("email"),
        history_limit=settings.HISTORY_SCAN_LIMIT,
        sync_product_stock=settings.SYNC_PRODUCT_STOCK,
    )
    return {"message": "Transaction recorded", **result}


@router.get("/history/{sku}")
def get_history(
    sku: str = Path(..., pattern=SKU_PATTERN),
    size: Optional[int] = Query(None, ge=1, description="Maximum number of versions to replay"),
    _auth=Depends(require_auth),
    ledger=Depends(get_ledger),
):
    settings = get_settings()
    history = transaction_history(ledger, sku, size or settings.HISTORY_SCAN_LIMIT)
    return {"message": "Transaction history retrieved", **history}


@router.get("/snapshot")
def get_snapshot(
    _auth=Depends(require_auth),
    ledger=Depends(get_ledger),
):
    settings = get_settings()
    snapshot = build_snapshot(ledger, settings.HISTORY_SCAN_LIMIT)
    return {"message": "Inventory snapshot built", "snapshot": snapshot}


__all__ = ["router"]
