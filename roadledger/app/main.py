"""
FastAPI Application Entry Point.

This is the main application file for the Road Ledger back-office API.
"""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from roadledger.app.core.config import settings
from roadledger.app.core.observability import configure_logging, logger, ObservabilityMiddleware
from roadledger.app.core.redis_client import ping_redis, close_redis
from roadledger.app.api.v1.router import router as api_v1_router
from roadledger.app.db.session import engine, create_tables
from roadledger.app.core.exceptions import (
    AppException,
    app_exception_handler,
    http_exception_handler,
    validation_exception_handler,
    generic_exception_handler
)
from fastapi import HTTPException

# Import models to ensure they are registered with Base
from roadledger.app.models.party import Party
from roadledger.app.models.supplier import Supplier
from roadledger.app.models.vehicle import Vehicle
from roadledger.app.models.loading_slip import LoadingSlip
from roadledger.app.models.advance_payment import AdvancePayment
from roadledger.app.models.memo import Memo
from roadledger.app.models.bill import Bill
from roadledger.app.models.banking_entry import BankingEntry
from roadledger.app.models.cashbook_entry import CashbookEntry
from roadledger.app.models.ledger_entry import LedgerEntry
from roadledger.app.models.fuel_wallet import FuelWallet
from roadledger.app.models.fuel_transaction import FuelTransaction
from roadledger.app.models.party_commission_ledger import PartyCommissionLedger
from roadledger.app.models.pod_file import PODFile


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan context manager for application startup/shutdown.

    1. Configures logging.
    2. Creates database tables on startup.
    3. Closes Redis and the engine on shutdown.
    """
    configure_logging(settings.log_level)
    await create_tables()
    logger.info("%s %s started", settings.app_name, settings.api_version)
    yield
    await close_redis()
    await engine.dispose()


# Initialize FastAPI application
app = FastAPI(
    title=settings.app_name,
    version=settings.api_version,
    debug=settings.debug,
    description="Back-office API for road transport bookings, ledgers and cashbook",
    lifespan=lifespan,
)

app.add_middleware(ObservabilityMiddleware)

# Register global exception handlers
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(HTTPException, http_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(Exception, generic_exception_handler)


@app.get("/health", tags=["Health"])
async def health_check():
    """
    Health check endpoint.

    Redis only backs the change counters, so an unreachable Redis is
    reported but does not make the service unhealthy.

    Returns:
        dict: Status and application information
    """
    return {
        "status": "healthy",
        "app_name": settings.app_name,
        "version": settings.api_version,
        "redis": "connected" if await ping_redis() else "unavailable",
    }


# Include API v1 router
app.include_router(api_v1_router, prefix=f"/{settings.api_version}")


@app.get("/", tags=["Root"])
async def root():
    """
    Root endpoint.

    Returns:
        dict: Welcome message and API documentation links
    """
    return {
        "message": "Welcome to Road Ledger Back-Office API",
        "docs": "/docs",
        "health": "/health",
    }
