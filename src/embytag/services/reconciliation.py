"""One full synchronisation pass against an Emby server."""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from embytag.models.remote_server import RemoteServer
from embytag.services.catalog_mirror import CatalogMirror
from embytag.services.emby_client import SYNC_ITEM_FILTERS, EmbyClient
from embytag.services.item_matcher import ItemMatcher, ItemSyncResult
from embytag.services.item_repository import ItemRepository
from embytag.services.multipart import collapse_multi_part

logger = logging.getLogger(__name__)


class ReconciliationSession:
    """
    Service that refreshes a server's mirror and proposes mappings.

    Steps:
    1. Fetch the whole Movie/Series catalog from Emby
    2. Collapse multi-part movies
    3. Upsert every surviving item into the mirror
    4. Prune mirror rows missing from the listing
    5. Load local items not yet mapped on this server
    6. Run the matcher and return its results

    A connection failure in step 1 raises before anything is written. Steps
    3 and 4 are committed separately; both are idempotent so a failed pass is
    repaired by the next one.
    """

    def __init__(
        self,
        db: AsyncSession,
        matcher: ItemMatcher | None = None,
        client_factory: Callable[[RemoteServer], EmbyClient] = EmbyClient.from_server,
    ) -> None:
        self.db = db
        self.matcher = matcher or ItemMatcher()
        self.client_factory = client_factory
        self.mirror = CatalogMirror(db)
        self.repository = ItemRepository(db)

    async def run(self, server: RemoteServer) -> list[ItemSyncResult]:
        """
        Synchronise one server.

        Args:
            server: Server to synchronise

        Returns:
            One result per mirrored item, in server listing order

        Raises:
            EmbyConnectionError: If the catalog cannot be fetched
        """
        server_id = server.id
        client = self.client_factory(server)

        emby_items = await client.get_items(**SYNC_ITEM_FILTERS)
        if not emby_items:
            logger.info(f"No items returned by server {server.name!r}")
            return []
        logger.info(f"Fetched {len(emby_items)} items from server {server.name!r}")

        emby_items, groups = collapse_multi_part(emby_items)
        if groups:
            logger.info(
                f"{len(emby_items)} items after collapsing {len(groups)} multi-part groups"
            )

        remote_items = [await self.mirror.upsert(server_id, item) for item in emby_items]
        await self.db.commit()

        await self.mirror.prune_missing(server_id, {item.remote_id for item in remote_items})
        await self.db.commit()

        local_items = await self.repository.unmapped_local_items(server_id)
        logger.info(f"{len(local_items)} local items are not mapped on server {server_id}")

        return self.matcher.match(local_items, remote_items)
