"""Request rate limiting (slowapi).

Limits are keyed per signed-in user, falling back to the client address
for anonymous calls. Counters live in Redis when REDIS_URL answers a ping
at startup, in process memory otherwise.
"""

from loguru import logger
from slowapi import Limiter
from slowapi.util import get_remote_address
from starlette.requests import Request

from .config import settings


def rate_key(request: Request) -> str:
    session = request.scope.get("session") or {}
    user_id = session.get("user_id")
    if user_id:
        return f"user:{user_id}"
    return get_remote_address(request)


def _resolve_storage() -> str | None:
    """Redis URL if it is configured and reachable, else None (in-memory)."""
    if not settings.redis_url:
        return None
    try:
        import redis as redis_lib

        redis_lib.from_url(settings.redis_url, socket_connect_timeout=2).ping()
    except Exception as e:
        logger.warning("Redis unreachable ({}), rate limits are per process", e.__class__.__name__)
        return None
    logger.info("Rate limiter using Redis storage")
    return settings.redis_url


limiter = Limiter(
    key_func=rate_key,
    default_limits=[settings.rate_limit_default],
    enabled=settings.rate_limit_enabled,
    storage_uri=_resolve_storage() or "memory://",
)
