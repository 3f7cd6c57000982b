"""Emby server settings: create, update, delete and activation."""

import logging
from collections.abc import Callable, Sequence

from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from embytag.exceptions import EmbyConnectionError, ServerNotFoundError
from embytag.models.remote_item import RemoteItem
from embytag.models.remote_server import RemoteServer
from embytag.schemas.emby import ServerInfo
from embytag.schemas.server import ServerCreate, ServerUpdate
from embytag.services.emby_client import EmbyClient

logger = logging.getLogger(__name__)

ClientFactory = Callable[[str, str], EmbyClient]


class ServerService:
    """
    Service for managing Emby servers.

    Keeps at most one server active: activating a server deactivates all
    others in the same transaction.
    """

    def __init__(self, db: AsyncSession, client_factory: ClientFactory = EmbyClient) -> None:
        self.db = db
        self.client_factory = client_factory

    async def list_servers(self) -> Sequence[RemoteServer]:
        result = await self.db.execute(select(RemoteServer).order_by(RemoteServer.name))
        return result.scalars().all()

    async def get_server(self, server_id: int) -> RemoteServer:
        server = await self.db.get(RemoteServer, server_id)
        if server is None:
            raise ServerNotFoundError(server_id)
        return server

    async def get_active_server(self) -> RemoteServer | None:
        result = await self.db.execute(
            select(RemoteServer).where(RemoteServer.is_active.is_(True)).order_by(RemoteServer.id)
        )
        return result.scalars().first()

    async def test_connection(self, url: str, api_key: str) -> ServerInfo:
        return await self.client_factory(url, api_key).test_connection()

    async def create_server(self, data: ServerCreate) -> RemoteServer:
        """
        Register a server after checking that it answers with the given key.

        Raises:
            EmbyConnectionError: If the server is unreachable or reports no id
        """
        info = await self.test_connection(data.url, data.api_key)
        if not info.id:
            raise EmbyConnectionError("Connected to the server but it did not report a server id")

        if data.is_active:
            await self._deactivate_all()

        server = RemoteServer(
            name=data.name,
            url=data.url,
            api_key=data.api_key,
            is_active=data.is_active,
            remote_id=info.id,
        )
        self.db.add(server)
        await self.db.flush()
        logger.info(f"Registered server {server.name!r} (remote id {info.id})")
        return server

    async def update_server(self, server_id: int, data: ServerUpdate) -> RemoteServer:
        """Apply a partial update, re-testing the connection if url or key change."""
        server = await self.get_server(server_id)
        changes = data.model_dump(exclude_unset=True, exclude_none=True)

        if "url" in changes or "api_key" in changes:
            info = await self.test_connection(
                changes.get("url", server.url),
                changes.get("api_key", server.api_key),
            )
            if info.id and not server.remote_id:
                server.remote_id = info.id

        if changes.get("is_active"):
            await self._deactivate_all(exclude_id=server_id)

        for field, value in changes.items():
            setattr(server, field, value)
        await self.db.flush()
        return server

    async def delete_server(self, server_id: int) -> None:
        """Delete a server together with its mirrored items."""
        server = await self.get_server(server_id)
        result = await self.db.execute(
            delete(RemoteItem).where(RemoteItem.server_id == server_id)
        )
        await self.db.delete(server)
        await self.db.flush()
        logger.info(f"Deleted server {server_id} and {result.rowcount or 0} mirrored items")

    async def _deactivate_all(self, exclude_id: int | None = None) -> None:
        stmt = update(RemoteServer).where(RemoteServer.is_active.is_(True))
        if exclude_id is not None:
            stmt = stmt.where(RemoteServer.id != exclude_id)
        await self.db.execute(stmt.values(is_active=False))
