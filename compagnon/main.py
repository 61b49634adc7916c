"""
main.py — Compagnon application

Assembles the FastAPI app: session middleware, request ids and security
headers, structured error bodies, rate limiting, and the routers.

Called by: uvicorn (compagnon.main:app)
Depends on: config, logging_config, startup, rate_limit, routers/*
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from . import __version__
from .config import get_settings
from .http_client import close_clients
from .logging_config import setup_logging
from .rate_limit import limiter
from .routers import auth, dashboard, notifications, profiles, stats, tenders
from .schemas.errors import ErrorResponse, FieldError
from .startup import run_startup_migrations


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    run_startup_migrations()
    logger.info("Compagnon {} started", __version__)
    yield
    await close_clients()
    logger.info("Compagnon stopped")


settings = get_settings()

app = FastAPI(title="Compagnon", version=__version__, lifespan=lifespan)
app.add_middleware(SessionMiddleware, secret_key=settings.secret_key, https_only=False)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


# ── Middleware ───────────────────────────────────────────────────────


@app.middleware("http")
async def request_id_and_headers(request: Request, call_next):
    request_id = uuid.uuid4().hex[:8]
    request.state.request_id = request_id
    with logger.contextualize(request_id=request_id):
        response = await call_next(request)
    response.headers["X-Request-ID"] = request_id
    response.headers["X-Content-Type-Options"] = "nosniff"
    response.headers["X-Frame-Options"] = "DENY"
    response.headers["X-XSS-Protection"] = "1; mode=block"
    response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
    return response


# ── Error bodies ─────────────────────────────────────────────────────


def _request_id(request: Request) -> str:
    return getattr(request.state, "request_id", "")


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException):
    body = ErrorResponse(error=str(exc.detail), status_code=exc.status_code, request_id=_request_id(request))
    return JSONResponse(body.model_dump(), status_code=exc.status_code, headers=getattr(exc, "headers", None))


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = [FieldError(loc=list(e["loc"]), msg=e["msg"], type=e["type"]) for e in exc.errors()]
    body = ErrorResponse(error="Validation error", status_code=422, request_id=_request_id(request), detail=errors)
    return JSONResponse(body.model_dump(), status_code=422)


# ── Routes ───────────────────────────────────────────────────────────

app.include_router(auth.router)
app.include_router(profiles.router)
app.include_router(dashboard.router)
app.include_router(tenders.router)
app.include_router(notifications.router)
app.include_router(stats.router)


@app.get("/health")
async def health():
    return {"status": "ok", "version": __version__}
