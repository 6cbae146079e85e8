from fastapi import APIRouter, Depends, Path

from stockledger.config import get_settings
from stockledger.core.constants import SKU_PATTERN
from stockledger.dependencies import get_ledger, require_auth
from stockledger.schemas.product import ProductCreate
from stockledger.services.product_service import create_product, get_product

router = APIRouter(prefix="/api/product", tags=["Products"])


@router.post("", status_code=201)
def add_product(
    payload: ProductCreate,
    _auth=Depends(require_auth),
    ledger=Depends(get_ledger),
):
    product, receipt = create_product(ledger, payload.to_record())
    return {
        "message": "Product created",
        "product": product,
        "verified": receipt.verified,
        "tx_id": receipt.tx_id,
    }


@router.get("/{sku}")
def read_product(
    sku: str = Path(..., pattern=SKU_PATTERN),
    _auth=Depends(require_auth),
    ledger=Depends(get_ledger),
):
    settings = get_settings()
    product = get_product(ledger, sku, settings.HISTORY_SCAN_LIMIT)
    return {"message": "Product retrieved", "product": product}


__all__ = ["router"]
