"""
mpay24 Payment Gateway - FastAPI Application

Connects the learning platform's payment abstraction to the mpay24 processor.

Usage:
    uvicorn mpay24_gateway.api.main:app --reload --host 0.0.0.0 --port 8000

Docs:
    http://localhost:8000/docs (Swagger UI)
    http://localhost:8000/redoc (ReDoc)
"""

from dotenv import load_dotenv
import os

load_dotenv()  # load .env from current working directory (project root)

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from sqlalchemy import text
import logging

from mpay24_gateway.core.exceptions import (
    PaymentGatewayError,
    internal_error_handler,
    not_found_handler,
    payment_gateway_error_handler,
)
from mpay24_gateway.core.logging import setup_logger
from mpay24_gateway.core.middleware import request_logger
import mpay24_gateway.database.session as db_session_module

setup_logger(logging.DEBUG if os.getenv("DEBUG", "false").lower() == "true" else logging.INFO)
logger = logging.getLogger(__name__)

VERSION = "1.0.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifecycle: startup and shutdown."""
    logger.info("mpay24 gateway API starting...")

    try:
        with db_session_module.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        logger.info("Database connection OK")
    except Exception as e:
        logger.error(f"Database connection failed: {e}")

    try:
        from mpay24_gateway.core.services.scheduler_service import start_scheduler
        start_scheduler()
    except Exception as e:
        logger.warning(f"APScheduler not started: {e}")

    logger.info("API ready")
    yield

    logger.info("mpay24 gateway API shutting down...")
    from mpay24_gateway.core.services.scheduler_service import shutdown_scheduler
    shutdown_scheduler()


app = FastAPI(
    title="mpay24 Payment Gateway",
    description="mpay24 credit-card checkout for the learning platform's payment subsystem.",
    version=VERSION,
    lifespan=lifespan,
    docs_url="/docs",
    redoc_url="/redoc",
)

# CORS (configurable via .env CORS_ORIGINS, comma-separated)
_DEFAULT_CORS = "http://localhost:3000,http://localhost:8080,http://127.0.0.1:3000,http://127.0.0.1:8080"
_CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", _DEFAULT_CORS).split(",") if o.strip()]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"],
)

app.middleware("http")(request_logger)

app.add_exception_handler(PaymentGatewayError, payment_gateway_error_handler)
app.add_exception_handler(404, not_found_handler)
app.add_exception_handler(Exception, internal_error_handler)


# Health endpoints
@app.get("/", tags=["Health"])
def root():
    return {
        "name": "mpay24 Payment Gateway",
        "version": VERSION,
        "status": "running",
        "docs": "/docs",
    }


@app.get("/health", tags=["Health"])
def health_check():
    health = {"status": "healthy", "components": {"api": "ok"}}
    try:
        with db_session_module.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        health["components"]["database"] = "ok"
    except Exception as e:
        health["status"] = "degraded"
        health["components"]["database"] = f"error: {str(e)}"
    return health


# Register routers
from mpay24_gateway.api.routers import checkout, gateway

app.include_router(checkout.router, prefix="/paygw_mpay24", tags=["Checkout"])
app.include_router(gateway.router, prefix="/paygw_mpay24", tags=["Gateway"])

logger.info("Routers registered: checkout, gateway")


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("mpay24_gateway.api.main:app", host="0.0.0.0", port=8000, reload=True)
