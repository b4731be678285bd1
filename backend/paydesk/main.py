"""
Paydesk — FastAPI Application Entry Point

Aggregates all routers, configures middleware and error handlers,
and initializes the database on startup.
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from paydesk.config import get_settings
from paydesk.database import SessionLocal, init_db
from paydesk.exceptions import PaydeskError
from paydesk.logging_config import configure_logging
from paydesk.routes import admin_router, payment_router, receipt_router

settings = get_settings()
logger = logging.getLogger(__name__)

BOOT_TIME = time.time()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize logging and database tables, log boot info."""
    configure_logging()
    init_db()
    logger.info(
        "%s v%s started at %s | database: %s | gateway: %s | debug: %s",
        settings.APP_NAME,
        settings.APP_VERSION,
        datetime.now().isoformat(),
        settings.DATABASE_URL,
        "simulated" if settings.gateway_simulated else "razorpay",
        settings.DEBUG,
    )
    yield


# ─── Application Instance ───────────────────────────────────────────
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description=(
        "Payment collection and receipt generation API. Covers gateway checkout "
        "(Razorpay), UPI QR payments confirmed by UTR, direct receipts for offline "
        "payments, PDF receipts with email delivery, and an admin dashboard."
    ),
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan,
)


# ─── Middleware ──────────────────────────────────────────────────────
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["Content-Disposition", "X-Receipt-Number", "X-Process-Time"],
)


@app.middleware("http")
async def time_api_calls(request: Request, call_next):
    """Stamp API responses with X-Process-Time and log method, path, status."""
    if not request.url.path.startswith("/api"):
        return await call_next(request)

    started = time.perf_counter()
    response = await call_next(request)
    elapsed_ms = (time.perf_counter() - started) * 1000
    response.headers["X-Process-Time"] = f"{elapsed_ms:.1f}ms"
    logger.info("%s %s -> %s (%.1fms)", request.method, request.url.path, response.status_code, elapsed_ms)
    return response


# ─── Error Handlers ──────────────────────────────────────────────────
@app.exception_handler(PaydeskError)
async def paydesk_error_handler(request: Request, exc: PaydeskError):
    logger.warning("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# ─── API Routers ─────────────────────────────────────────────────────
app.include_router(payment_router)
app.include_router(receipt_router)
app.include_router(admin_router)


def _database_reachable() -> bool:
    with SessionLocal() as db:
        try:
            db.execute(text("SELECT 1"))
        except SQLAlchemyError:
            logger.exception("Health check: database unreachable")
            return False
    return True


@app.get("/health", tags=["Health"])
def health():
    """Liveness plus database reachability and gateway mode."""
    db_ok = _database_reachable()
    return {
        "status": "healthy" if db_ok else "degraded",
        "database": "connected" if db_ok else "disconnected",
        "gateway": "simulated" if settings.gateway_simulated else "razorpay",
        "uptime_seconds": round(time.time() - BOOT_TIME, 1),
        "version": settings.APP_VERSION,
    }
