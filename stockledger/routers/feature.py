from fastapi import APIRouter, Depends, Path

from stockledger.config import get_settings
from stockledger.core.constants import SKU_PATTERN
from stockledger.dependencies import get_ledger, require_auth
from stockledger.services.stock_service import inventory_at

router = APIRouter(prefix="/api/feature", tags=["Feature"])


@router.get("/time-travel/{sku}/at/{timestamp}")
def get_inventory_at_timestamp(
    sku: str = Path(..., pattern=SKU_PATTERN),
    timestamp: str = Path(..., description="ISO-8601 date or datetime"),
    _auth=Depends(require_auth),
    ledger=Depends(get_ledger),
):
    settings = get_settings()
    result = inventory_at(ledger, sku, timestamp, settings.TIME_TRAVEL_SCAN_LIMIT)
    return {"message": "Inventory reconstructed", **result}


__all__ = ["router"]
