"""
logging_config.py — Loguru setup for Compagnon

One Loguru sink on stdout; stdlib logging (services that use
logging.getLogger, uvicorn, alembic) is routed into it.

Business Rules:
- JSON lines when APP_URL points at a deployed host, colored text otherwise
- Every record carries a request_id (bound by the HTTP middleware, "-" outside requests)
- httpx / uvicorn access / sqlalchemy chatter kept at WARNING

Called by: compagnon/main.py (lifespan startup)
Depends on: config (LOG_LEVEL, APP_URL overridable from the environment)
"""

import logging
import os
import sys

from loguru import logger

from .config import settings

_DEV_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "{message}"
)

_QUIET = ("httpx", "httpcore", "uvicorn.access", "sqlalchemy.engine")


def _is_production() -> bool:
    app_url = os.getenv("APP_URL", settings.app_url)
    return bool(app_url) and not any(h in app_url for h in ("localhost", "127.0.0.1"))


def setup_logging() -> None:
    """Replace Loguru's default sink and bridge stdlib logging. Idempotent."""
    level = os.getenv("LOG_LEVEL", settings.log_level).upper()
    production = _is_production()

    logger.remove()
    logger.configure(extra={"request_id": "-"})
    if production:
        logger.add(sys.stdout, level=level, format="{message}", serialize=True)
    else:
        logger.add(sys.stdout, level=level, format=_DEV_FORMAT, colorize=True)

    logging.basicConfig(handlers=[_InterceptHandler()], level=0, force=True)
    for name in _QUIET:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging configured (level={}, production={})", level, production)


class _InterceptHandler(logging.Handler):
    """Forward stdlib records to Loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())
