"""Shared FastAPI dependencies."""

from fastapi import Request

from embytag.config import settings
from embytag.services.server_cache import ActiveServerCache


def get_server_cache(request: Request) -> ActiveServerCache:
    """Return the app-wide active server cache, creating it on first use."""
    cache = getattr(request.app.state, "server_cache", None)
    if cache is None:
        cache = ActiveServerCache(ttl=settings.active_server_cache_ttl)
        request.app.state.server_cache = cache
    return cache
