"""Keep the local mirror of an Emby server's catalog in step with the server."""

import logging
from collections.abc import Collection
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from embytag.models.remote_item import RemoteItem
from embytag.schemas.emby import EmbyItem

logger = logging.getLogger(__name__)

# Rows deleted per statement when pruning
PRUNE_CHUNK_SIZE = 1000


class CatalogMirror:
    """
    Upserts Emby items into remote_items and prunes rows gone upstream.

    Rows are keyed by (remote_id, server_id). The server listing is
    authoritative for existence and metadata; the local_item_id mapping is
    never written here.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def upsert(self, server_id: int, emby_item: EmbyItem) -> RemoteItem:
        """
        Create or overwrite the mirror row for one Emby item.

        Args:
            server_id: Owning server
            emby_item: Item as fetched from the server

        Returns:
            The created or refreshed RemoteItem
        """
        query = select(RemoteItem).where(
            RemoteItem.remote_id == emby_item.id,
            RemoteItem.server_id == server_id,
        )
        result = await self.db.execute(query)
        remote_item = result.scalar_one_or_none()

        data = self._mirror_data(emby_item)
        if remote_item is None:
            remote_item = RemoteItem(remote_id=emby_item.id, server_id=server_id, **data)
            self.db.add(remote_item)
        else:
            for field, value in data.items():
                setattr(remote_item, field, value)

        await self.db.flush()
        return remote_item

    async def prune_missing(self, server_id: int, surviving_remote_ids: Collection[str]) -> int:
        """
        Delete mirror rows of a server that are not in the latest listing.

        Args:
            server_id: Server whose rows are pruned
            surviving_remote_ids: Emby ids present in the latest listing

        Returns:
            Number of deleted rows
        """
        # Stale rows are deleted by primary key, PRUNE_CHUNK_SIZE per statement
        surviving = set(surviving_remote_ids)
        result = await self.db.execute(
            select(RemoteItem.id, RemoteItem.remote_id).where(RemoteItem.server_id == server_id)
        )
        stale_ids = [row_id for row_id, remote_id in result.all() if remote_id not in surviving]

        for start in range(0, len(stale_ids), PRUNE_CHUNK_SIZE):
            chunk = stale_ids[start : start + PRUNE_CHUNK_SIZE]
            await self.db.execute(delete(RemoteItem).where(RemoteItem.id.in_(chunk)))

        deleted = len(stale_ids)
        if deleted:
            logger.info(f"Pruned {deleted} items no longer on server {server_id}")
        return deleted

    def _mirror_data(self, emby_item: EmbyItem) -> dict[str, Any]:
        """Denormalise an Emby item into remote_items columns."""
        premiere_date = emby_item.premiere_date
        production_year = emby_item.production_year or (
            premiere_date.year if premiere_date else None
        )
        return {
            "title": emby_item.name or "",
            "original_title": emby_item.original_title or emby_item.name,
            "overview": emby_item.overview or None,
            "type": emby_item.type or "Unknown",
            "premiere_date": premiere_date,
            "production_year": production_year,
            "date_added": emby_item.date_created,
            "community_rating": emby_item.community_rating,
            "poster_tag": (emby_item.image_tags or {}).get("Primary"),
            "backdrop_tag": (emby_item.backdrop_image_tags or [None])[0],
            "external_ids": emby_item.provider_ids,
            "genres": emby_item.genres,
            "studios": emby_item.studio_names,
            "actors": emby_item.actors,
            "directors": emby_item.directors,
        }
