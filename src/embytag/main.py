"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from embytag import __version__
from embytag.api.routes import health, mappings, servers
from embytag.config import settings
from embytag.services.server_cache import ActiveServerCache

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # One active-server cache per process, shared by every request
    app.state.server_cache = ActiveServerCache(ttl=settings.active_server_cache_ttl)
    logger.info(
        f"EmbyTag {__version__} started, active server cached for "
        f"{settings.active_server_cache_ttl}s"
    )
    yield
    app.state.server_cache.invalidate()


app = FastAPI(
    title="EmbyTag API",
    description="Local tags and metadata for an Emby media catalog",
    version=__version__,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health.router)
app.include_router(servers.router, prefix="/api", tags=["servers"])
app.include_router(mappings.router, prefix="/api", tags=["mappings"])


def run() -> None:
    """Serve the API with uvicorn on the configured host and port."""
    uvicorn.run("embytag.main:app", host=settings.api_host, port=settings.api_port)
