# main.py
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException
from sqlalchemy.exc import IntegrityError

from app.routers import (
    health_router,
    inbound_order_router,
    inbound_item_router,
    outbound_order_router,
    outbound_item_router,
    stock_balance_router,
    stock_transaction_router,
    storage_snapshot_router,
    billing_event_router,
    service_event_router,
)

from app.core.config import (
    APP_ENV,
    APP_VERSION,
    CORS_ORIGINS,
    AUTO_CREATE_SCHEMA,
    STORAGE_SNAPSHOT_SCHEDULE_ENABLED,
)
from app.core.db import init_models
from app.core.scheduler import scheduler
from app.core.exceptions import AppException
from app.core.logging import setup_logging
from app.middleware.request_logging import request_logging_middleware
from app.core.error_handlers import (
    app_exception_handler,
    validation_exception_handler,
    http_exception_handler,
    integrity_error_handler,
    unhandled_exception_handler,
)

APP_NAME = "3PL WMS – Stock Ledger API"

# ------------------------------------------------------------------------------
# LOGGING
# ------------------------------------------------------------------------------
setup_logging()
logger = logging.getLogger(__name__)

# ------------------------------------------------------------------------------
# LIFESPAN
# ------------------------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Starting application (%s)", APP_ENV)

    if AUTO_CREATE_SCHEMA:
        await init_models()
        logger.info("Database schema ensured")
    else:
        logger.info("AUTO_CREATE_SCHEMA disabled: schema creation skipped")

    if STORAGE_SNAPSHOT_SCHEDULE_ENABLED:
        scheduler.start()
        logger.info("Scheduler started")
    else:
        logger.info("Storage snapshot schedule disabled")

    yield

    logger.info("Shutting down application")
    if scheduler.running:
        scheduler.shutdown()

# ------------------------------------------------------------------------------
# APP INIT
# ------------------------------------------------------------------------------
app = FastAPI(
    title=APP_NAME,
    description="Stock ledger, order state machines and billing events for a 3PL warehouse",
    version=APP_VERSION,
    docs_url="/docs" if APP_ENV != "production" else None,
    redoc_url=None,
    lifespan=lifespan,
)

# ------------------------------------------------------------------------------
# EXCEPTION HANDLERS
# ------------------------------------------------------------------------------
app.add_exception_handler(AppException, app_exception_handler)
app.add_exception_handler(RequestValidationError, validation_exception_handler)
app.add_exception_handler(StarletteHTTPException, http_exception_handler)
app.add_exception_handler(IntegrityError, integrity_error_handler)
app.add_exception_handler(Exception, unhandled_exception_handler)

# ------------------------------------------------------------------------------
# MIDDLEWARE
# ------------------------------------------------------------------------------
app.middleware("http")(request_logging_middleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ------------------------------------------------------------------------------
# ROUTERS
# ------------------------------------------------------------------------------
app.include_router(health_router)
app.include_router(inbound_order_router)
app.include_router(inbound_item_router)
app.include_router(outbound_order_router)
app.include_router(outbound_item_router)
app.include_router(stock_balance_router)
app.include_router(stock_transaction_router)
app.include_router(storage_snapshot_router)
app.include_router(billing_event_router)
app.include_router(service_event_router)
