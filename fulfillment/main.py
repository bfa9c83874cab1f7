"""
FastAPI Application Entry Point - Fulfillment Service
"""
import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from fulfillment import __version__
from fulfillment.api import health, inventory, orders, payments
from fulfillment.config import settings
from fulfillment.database import init_db
from fulfillment.exceptions import FulfillmentError
from fulfillment.logging_config import setup_logging
from fulfillment.publishers.dispatcher import get_dispatcher, shutdown_dispatcher
from fulfillment.security import uses_default_secret

setup_logging()
logger = logging.getLogger(__name__)

# Create FastAPI application
app = FastAPI(
    title="Fulfillment Service",
    description="Stock reservation, order placement and payment simulation",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(health.router)
app.include_router(inventory.router, prefix=settings.API_PREFIX)
app.include_router(orders.router, prefix=settings.API_PREFIX)
app.include_router(payments.router, prefix=settings.API_PREFIX)

# Prometheus metrics
Instrumentator().instrument(app).expose(app)


@app.exception_handler(FulfillmentError)
def fulfillment_error_handler(request: Request, exc: FulfillmentError):
    """Render expected failures with their code and offending items"""
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Malformed requests are client errors: 400 with the offending fields"""
    errors = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ()) if part != "body"),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid request", "code": "INVALID_REQUEST", "errors": errors},
    )


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception):
    """Log with full context; never leak internals to the caller"""
    logger.exception("Unhandled error in %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


@app.on_event("startup")
def startup_event():
    """Initialize database and outbound dispatcher on startup"""
    logger.info("Starting %s...", settings.SERVICE_NAME)
    uses_default_secret()
    init_db()
    logger.info("Database initialized")
    get_dispatcher().start()
    logger.info("Event bus: %s, email: %s", settings.EVENT_BUS, settings.EMAIL_SERVICE)
    logger.info("%s is running on port %s", settings.SERVICE_NAME, settings.SERVICE_PORT)


@app.on_event("shutdown")
def shutdown_event():
    """Drain outbound messages on shutdown"""
    logger.info("Shutting down %s...", settings.SERVICE_NAME)
    shutdown_dispatcher()
