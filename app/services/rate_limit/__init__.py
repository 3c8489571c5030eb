from __future__ import annotations

import logging

import redis
from fastapi import HTTPException, Request

from app.connections.redis import get_redis


logger = logging.getLogger(__name__)


def client_address(request: Request) -> str:
    # First hop of X-Forwarded-For when behind a proxy
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",", 1)[0].strip()
    return request.client.host if request.client else "unknown"


def limit_route(seconds: int):
    """Return a FastAPI dependency that rate-limits a client on a route for N seconds.

    Uses Redis TTL to block repeated calls from the same client address to
    the same path within the configured window. A window of 0 disables it.
    """

    def _dependency(request: Request) -> None:
        if seconds <= 0:
            return
        client = get_redis()
        key = f"rl:{client_address(request)}:{request.url.path}"

        try:
            # If a TTL exists, the client must wait; otherwise set a new TTL.
            ttl = client.ttl(key)
            if not (ttl and ttl > 0):
                client.setex(name=key, time=seconds, value="1")
                return
        except redis.RedisError as exc:
            logger.warning("Rate limiter unavailable, allowing %s: %s", request.url.path, exc)
            return
        logger.info("Rate limited %s on %s for %ss", client_address(request), request.url.path, ttl)
        raise HTTPException(status_code=429, detail=f"rate limited, try again in {ttl}s")

    return _dependency
