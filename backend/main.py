"""
Deliveries Service — FastAPI Application

Tracks food-delivery orders from payment to doorstep: consumes OrderProcessed
events from the event bus, persists deliveries, and republishes every state
change as DeliveryUpdated.
"""
import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from config import settings
from database import async_session, init_db
from domain.constants import MSG_BODY_INCOMPLETE
from routes import delivery, events, health
from services import seed_service
from services.event_bus import EventBusClient

# ── Logging ─────────────────────────────────────────────────────────

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ── Lifespan ────────────────────────────────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables, seed, subscribe to the bus. Shutdown: drain publishes."""
    # Ensure data/ directory exists for SQLite
    os.makedirs("data", exist_ok=True)

    settings.validate_production_settings()

    await init_db()
    logger.info("Database initialized")

    if settings.seed_on_startup:
        async with async_session() as db:
            await seed_service.seed_restaurants(db)

    event_bus = EventBusClient(settings.event_bus_url, timeout=settings.event_bus_timeout_seconds)
    app.state.event_bus = event_bus

    if settings.subscribe_on_startup:
        # Fatal on failure: an unsubscribed instance would never see an order
        try:
            await event_bus.subscribe_with_retry(
                settings.event_subscriptions_list,
                settings.callback_url,
                attempts=settings.subscribe_attempts,
                backoff_seconds=settings.subscribe_backoff_seconds,
            )
        except Exception:
            logger.error("Event bus subscription failed; refusing to start", exc_info=True)
            await event_bus.aclose()
            raise
    else:
        logger.warning("Event bus subscription skipped (SUBSCRIBE_ON_STARTUP=false)")

    yield  # app runs here

    await event_bus.aclose(timeout=settings.event_bus_timeout_seconds)
    logger.info("Shutting down")


# ── App Factory ─────────────────────────────────────────────────────

app = FastAPI(
    title="Deliveries Service API",
    description="Delivery lifecycle tracking for the food-ordering event bus",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ── Routes ──────────────────────────────────────────────────────────

app.include_router(health.router)
app.include_router(events.router)
app.include_router(delivery.router)


# ── Exception Handlers ──────────────────────────────────────────────


@app.exception_handler(Exception)
async def global_exception_handler(request, exc):
    """
    Catch-all for unhandled exceptions.

    Never return raw exception details to clients; the full traceback is
    logged server-side.
    """
    logger.error(f"Unhandled exception on {request.url.path}: {exc}", exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"message": "Internal server error"},
    )


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request, exc: RequestValidationError):
    """Malformed bodies get the same 400 the hand-validated endpoints return."""
    return JSONResponse(status_code=400, content={"message": MSG_BODY_INCOMPLETE})


@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc: HTTPException):
    """
    Flatten HTTPException responses to {"message": ...}, the shape every
    service on the bus uses. Registered for Starlette's base class so routing
    404/405 responses are flattened too.
    """
    # DomainError carries a message and structured details
    if hasattr(exc, "message") and hasattr(exc, "details"):
        content = {"message": exc.message}
        if exc.details:
            content["details"] = exc.details
        return JSONResponse(status_code=exc.status_code, content=content)

    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


# ── Entrypoint ──────────────────────────────────────────────────────

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.port, log_level="info")
