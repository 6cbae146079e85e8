import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from stockledger.config import Settings, get_settings
from stockledger.core.exceptions import LedgerError
from stockledger.core.logging import setup_logging
from stockledger.ledger.immudb_backend import connect_ledger
from stockledger.routers import (
    audit_router,
    feature_router,
    health_router,
    inventory_router,
    products_router,
)

setup_logging()
settings: Settings = get_settings()
logger = logging.getLogger(__name__)

_LOCATION_ROOTS = {"body", "path", "query", "header"}


@asynccontextmanager
async def lifespan(_app: FastAPI):
    ledger = connect_ledger(settings)
    _app.state.ledger = ledger
    try:
        yield
    finally:
        _app.state.ledger = None
        ledger.close()


app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
app.add_middleware(CORSMiddleware, allow_origins=["*"], allow_methods=["*"], allow_headers=["*"])


@app.exception_handler(LedgerError)
async def ledger_error_handler(_request: Request, exc: LedgerError):
    if exc.status_code >= 500:
        logger.error("%s: %s", exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def validation_error_handler(_request: Request, exc: RequestValidationError):
    errors = []
    for error in exc.errors():
        location = [str(part) for part in error.get("loc", ()) if part not in _LOCATION_ROOTS]
        errors.append({"field": ".".join(location), "message": error.get("msg", "Invalid value")})
    return JSONResponse(
        status_code=400,
        content={"message": "Validation failed", "errors": errors},
    )


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(_request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": str(exc.detail)},
        headers=getattr(exc, "headers", None),
    )


app.include_router(health_router)
app.include_router(products_router)
app.include_router(inventory_router)
app.include_router(audit_router)
app.include_router(feature_router)


__all__ = ["app"]
