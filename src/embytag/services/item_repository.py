"""Queries over local items and their mirror rows."""

from collections.abc import Sequence

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from embytag.models.local_item import LocalItem
from embytag.models.remote_item import RemoteItem


class ItemRepository:
    """Read helpers shared by the sync pass and the API."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def unmapped_local_items(
        self,
        server_id: int,
        search: str | None = None,
        limit: int | None = None,
    ) -> Sequence[LocalItem]:
        """
        Local items with no mirror row on the given server.

        Args:
            server_id: Server to check mappings against
            search: Optional case-insensitive substring of title or original title
            limit: Maximum rows; None returns all

        Returns:
            Local items ordered by title (by id when no search/limit is given,
            so a full sync pass sees a stable order)
        """
        query = select(LocalItem).where(
            ~LocalItem.remote_items.any(RemoteItem.server_id == server_id)
        )
        if search and search.strip():
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(LocalItem.title.ilike(pattern), LocalItem.original_title.ilike(pattern))
            )
            query = query.order_by(LocalItem.title)
        elif limit is not None:
            query = query.order_by(LocalItem.title)
        else:
            query = query.order_by(LocalItem.id)

        if limit is not None:
            query = query.limit(limit)

        result = await self.db.execute(query)
        return result.scalars().all()
