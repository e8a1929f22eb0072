"""
Ledgerbook – FastAPI application entry point.

Run with:
    uvicorn ledgerbook.main:app --reload --host 0.0.0.0 --port 8000
or
    python -m ledgerbook.main
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from loguru import logger

from ledgerbook.api.client_routes import client_router
from ledgerbook.api.invoice_routes import invoice_router
from ledgerbook.api.payment_routes import payment_router
from ledgerbook.api.quotation_routes import quotation_router
from ledgerbook.api.report_routes import report_router
from ledgerbook.api.routes import router
from ledgerbook.api.staff_routes import staff_router
from ledgerbook.core.config import settings
from ledgerbook.core.database import create_db_and_tables
from ledgerbook.core.errors import BillingError
from ledgerbook.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown hooks."""
    setup_logging()
    logger.info("Starting Ledgerbook backend …")
    create_db_and_tables()
    logger.info("Database tables ready")
    yield
    logger.info("Ledgerbook backend shut down")


app = FastAPI(
    title="Ledgerbook API",
    description="Billing, payments, payroll and running-balance ledgers for a small business",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS – allow frontend dev server
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(BillingError)
async def billing_error_handler(request: Request, exc: BillingError):
    if exc.http_status >= 409:
        logger.warning(f"{request.method} {request.url.path} rejected: {exc.code} ({exc.message})")
    body = {"ok": False, "error": exc.code, "message": exc.message}
    if exc.retryable:
        body["retryable"] = True
    return JSONResponse(status_code=exc.http_status, content=body)


app.include_router(router)
app.include_router(client_router)
app.include_router(invoice_router)
app.include_router(payment_router)
app.include_router(quotation_router)
app.include_router(staff_router)
app.include_router(report_router)

# Published invoice snapshots
app.mount("/exports", StaticFiles(directory=settings.EXPORT_DIR), name="exports")


@app.get("/")
def root():
    return {"message": "Ledgerbook API", "docs": "/docs"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("ledgerbook.main:app", host=settings.API_HOST, port=settings.API_PORT)
