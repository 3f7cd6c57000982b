"""Time-bounded cache of the active Emby server."""

import logging
import time
from collections.abc import Awaitable, Callable

from embytag.models.remote_server import RemoteServer

logger = logging.getLogger(__name__)


class ActiveServerCache:
    """
    Caches the active server lookup for ``ttl`` seconds.

    ``set`` and ``invalidate`` must be called by whatever changes which
    server is active. Loader errors propagate to the caller.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl = ttl
        self._clock = clock
        self._server: RemoteServer | None = None
        self._loaded_at: float | None = None

    def is_fresh(self) -> bool:
        return self._loaded_at is not None and self._clock() - self._loaded_at < self.ttl

    async def get(
        self, loader: Callable[[], Awaitable[RemoteServer | None]]
    ) -> RemoteServer | None:
        if self.is_fresh():
            return self._server
        server = await loader()
        self.set(server)
        return server

    def set(self, server: RemoteServer | None) -> None:
        self._server = server
        self._loaded_at = self._clock()

    def invalidate(self) -> None:
        logger.debug("Active server cache invalidated")
        self._server = None
        self._loaded_at = None
