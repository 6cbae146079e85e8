from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from stockledger.config import get_settings
from stockledger.services.health_service import probe_ledger

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check(request: Request):
    settings = get_settings()
    ledger = getattr(request.app.state, "ledger", None)
    if ledger is None:
        probe = {"connected": False, "error": "Ledger is not connected"}
    else:
        probe = probe_ledger(ledger)

    body = {
        "message": "Success" if probe["connected"] else "Health check failed",
        "app": settings.APP_NAME,
        "environment": settings.ENVIRONMENT,
        "time": datetime.now(timezone.utc).isoformat(),
        **probe,
    }
    return JSONResponse(status_code=200 if probe["connected"] else 500, content=body)


__all__ = ["router"]
