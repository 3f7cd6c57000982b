"""Emby API client for reading server identity and catalog listings."""

import asyncio
import logging
from typing import TYPE_CHECKING, Any

import httpx
from pydantic import ValidationError

from embytag.config import settings
from embytag.exceptions import EmbyConnectionError
from embytag.schemas.emby import EmbyItem, ServerInfo

if TYPE_CHECKING:
    from embytag.models.remote_server import RemoteServer

logger = logging.getLogger(__name__)

# Statuses worth another attempt: timeouts, throttling and server errors
RETRY_STATUSES = frozenset({408, 429, 500, 502, 503, 504})

# Filters used by a sync pass when listing the whole catalog
SYNC_ITEM_FILTERS: dict[str, Any] = {
    "Recursive": "true",
    "IncludeItemTypes": "Movie,Series",
    "Fields": "Overview,Genres,Studios,ProviderIds,DateCreated,People,Path,PremiereDate,ProductionYear",
    "SortBy": "Name",
    "SortOrder": "Ascending",
}


class EmbyClient:
    """Client for the Emby server REST API."""

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float | None = None,
        retries: int | None = None,
        retry_backoff: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Initialize Emby client.

        Args:
            url: Server base URL, e.g. "http://nas:8096"
            api_key: Emby API key
            timeout: Request timeout in seconds (uses settings if not provided)
            retries: Retries for connection failures, timeouts and transient
                statuses (uses settings if not provided)
            retry_backoff: Seconds before the first retry, doubled on each
                further retry (uses settings if not provided)
            transport: Custom httpx transport, used by tests
        """
        self.base_url = url.rstrip("/")
        self.api_key = api_key
        self.timeout = timeout if timeout is not None else settings.emby_timeout
        self.retries = retries if retries is not None else settings.emby_max_retries
        self.retry_backoff = (
            retry_backoff if retry_backoff is not None else settings.emby_retry_backoff
        )
        self._transport = transport

    @classmethod
    def from_server(cls, server: "RemoteServer") -> "EmbyClient":
        """Build a client for a stored server."""
        return cls(server.url, server.api_key)

    def _client(self) -> httpx.AsyncClient:
        transport = self._transport or httpx.AsyncHTTPTransport(retries=self.retries)
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"X-Emby-Token": self.api_key, "Accept": "application/json"},
            timeout=self.timeout,
            transport=transport,
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        # Connection failures are retried by the transport; timeouts and
        # transient statuses are retried here
        attempt = 0
        async with self._client() as client:
            while True:
                try:
                    response = await client.get(path, params=params)
                except httpx.TimeoutException as e:
                    attempt += 1
                    if attempt <= self.retries:
                        await self._backoff(path, attempt, "timeout")
                        continue
                    raise EmbyConnectionError(
                        f"Emby server at {self.base_url} timed out after {self.timeout}s"
                    ) from e
                except httpx.HTTPError as e:
                    raise EmbyConnectionError(
                        f"Cannot reach Emby server at {self.base_url}: {e}"
                    ) from e

                if response.status_code in RETRY_STATUSES and attempt < self.retries:
                    attempt += 1
                    await self._backoff(path, attempt, f"HTTP {response.status_code}")
                    continue
                break

        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                raise EmbyConnectionError(
                    f"Emby server at {self.base_url} rejected the API key (HTTP {status})"
                ) from e
            raise EmbyConnectionError(
                f"Emby request {path} failed with HTTP {status}"
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise EmbyConnectionError(f"Emby request {path} returned invalid JSON") from e

    async def _backoff(self, path: str, attempt: int, reason: str) -> None:
        delay = self.retry_backoff * 2 ** (attempt - 1)
        logger.info(
            f"Transient error on Emby request {path} ({reason}), "
            f"retry {attempt}/{self.retries} in {delay:.1f}s"
        )
        await asyncio.sleep(delay)

    async def test_connection(self) -> ServerInfo:
        """
        Fetch server identity.

        Returns:
            Server name, version, id and operating system

        Raises:
            EmbyConnectionError: If the server is unreachable or rejects the key
        """
        data = await self._get("/System/Info")
        try:
            info = ServerInfo.model_validate(data)
        except ValidationError as e:
            raise EmbyConnectionError(f"Unexpected /System/Info payload: {e}") from e

        logger.info(f"Connected to Emby server {info.server_name!r} ({info.version})")
        return info

    async def get_items(self, **filters: Any) -> list[EmbyItem]:
        """
        List catalog items.

        Args:
            **filters: Query parameters passed to ``/Items`` as-is
                (Recursive, IncludeItemTypes, Fields, SortBy, SortOrder, ...)

        Returns:
            Items in the order returned by the server
        """
        data = await self._get("/Items", params=filters)
        raw_items = (data or {}).get("Items") or []
        try:
            return [EmbyItem.model_validate(raw) for raw in raw_items]
        except ValidationError as e:
            raise EmbyConnectionError(f"Unexpected /Items payload: {e}") from e

    async def get_admin_user_id(self) -> str | None:
        """Return the id of the first administrator account, if any."""
        data = await self._get("/Users")
        users = data.get("Items", []) if isinstance(data, dict) else data or []
        for user in users:
            if (user.get("Policy") or {}).get("IsAdministrator"):
                return user.get("Id")
        return None

    def image_url(
        self,
        item_id: str,
        image_tag: str,
        image_type: str = "Primary",
        width: int = 400,
    ) -> str:
        return f"{self.base_url}/Items/{item_id}/Images/{image_type}?maxWidth={width}&tag={image_tag}"

    def backdrop_url(self, item_id: str, image_tag: str, width: int = 1280) -> str:
        return self.image_url(item_id, image_tag, image_type="Backdrop", width=width)
