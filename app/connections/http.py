import httpx
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional
from fastapi import FastAPI

from app.utils.config import settings


_http_client: Optional[httpx.Client] = None


def get_http_client() -> httpx.Client:
    assert _http_client is not None, "HTTP client not initialized"
    return _http_client


def init_http_client() -> None:
    global _http_client
    _http_client = httpx.Client(timeout=settings.http_timeout_seconds)


def close_http_client() -> None:
    global _http_client
    if _http_client is not None:
        try:
            _http_client.close()
        finally:
            _http_client = None


@asynccontextmanager
async def http_lifespan(app: FastAPI) -> AsyncIterator[None]:
    init_http_client()
    try:
        yield
    finally:
        close_http_client()
