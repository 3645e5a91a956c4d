"""Inkform FastAPI application, entry point.

Start with:
    uvicorn inkform.api.main:app --reload --host 0.0.0.0 --port 8000

Every /api/v1 request is scoped to one studio through the X-Studio-Id header.
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from inkform.config.notifications import load_notification_config
from inkform.core.exceptions import ProjectError, UnauthorizedError
from inkform.core.logger import configure
from inkform.infra.database.engine import (
    build_engine,
    build_session_factory,
    close_engine,
    ensure_database_exists,
    init_db,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()

    await ensure_database_exists()
    engine = build_engine()
    app.state.session_factory = build_session_factory(engine)
    await init_db()

    app.state.notification_config = load_notification_config()
    logger.info(
        "API: ready (calendar=%s, timezone=%s)",
        app.state.notification_config.calendar_id,
        app.state.notification_config.timezone,
    )

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    await close_engine()
    logger.info("API: engine disposed")


app = FastAPI(
    title="Inkform API",
    version="0.1.0",
    description="Tattoo studio appointments: booking, check-in with signed intake form, payment and cancellation.",
    lifespan=lifespan,
)

# Rate limiter, configurable via API_RATE_LIMIT (default 60/minute per client address)
_api_rate_limit = os.environ.get("API_RATE_LIMIT", "60/minute")
limiter = Limiter(key_func=get_remote_address, default_limits=[_api_rate_limit])
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

_allowed_origins = os.environ.get(
    "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
).split(",")

app.add_middleware(
    CORSMiddleware,
    allow_origins=_allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(ProjectError)
async def project_error_handler(request: Request, exc: ProjectError):
    if exc.http_status >= 500:
        logger.error("API: %s on %s: %s", exc.code, request.url.path, exc.to_dict())
    else:
        logger.info("API: %s on %s: %s", exc.code, request.url.path, exc.message)
    return JSONResponse(
        status_code=exc.http_status,
        content={"error": exc.to_dict(include_traceback=False)},
    )


# ── Optional API key authentication ──────────────────────────────
# With ADMIN_API_KEY set, /api/v1/* requires the X-Api-Key header.
_ADMIN_API_KEY = os.environ.get("ADMIN_API_KEY", "").strip() or None


@app.middleware("http")
async def api_key_middleware(request: Request, call_next):
    if _ADMIN_API_KEY and request.url.path.startswith("/api/v1"):
        if request.headers.get("X-Api-Key") != _ADMIN_API_KEY:
            return JSONResponse(
                status_code=401,
                content={"error": UnauthorizedError("Set the X-Api-Key header").to_dict()},
            )
    return await call_next(request)


# ── Routers ───────────────────────────────────────────────────────
from inkform.api.routers import appointments  # noqa: E402

app.include_router(appointments.router, prefix="/api/v1")


@app.get("/health", tags=["health"])
@limiter.exempt
async def health():
    return {"status": "ok"}
