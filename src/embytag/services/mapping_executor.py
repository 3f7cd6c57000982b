"""Apply queued mapping operations to the local store."""

import logging
from collections.abc import Sequence
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from embytag.exceptions import MappingError
from embytag.models.local_item import LocalItem
from embytag.models.remote_item import RemoteItem
from embytag.schemas.mapping import (
    BatchResult,
    CreateOperation,
    FailedOperation,
    ItemMapOperation,
    MapOperation,
    RefreshOperation,
    UnmapOperation,
)
from embytag.services.auto_tagger import AutoTagger

logger = logging.getLogger(__name__)


def local_data_from_remote(remote_item: RemoteItem) -> dict[str, Any]:
    """Fields copied from a mirrored item onto a local item."""
    return {
        "title": remote_item.title,
        "original_title": remote_item.original_title or remote_item.title,
        "overview": remote_item.overview,
        "type": remote_item.type,
        "premiere_date": remote_item.premiere_date,
        "external_ids": remote_item.external_ids,
    }


class MappingExecutor:
    """
    Executes a batch of mapping operations.

    Each operation is its own transaction: it is committed on success and
    rolled back on failure, and the batch always carries on with the next
    operation. Callers re-run a sync pass to see the new match state.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db
        self.tagger = AutoTagger(db)

    async def execute(self, operations: Sequence[ItemMapOperation]) -> BatchResult:
        """
        Apply operations in order.

        Args:
            operations: Queued map / unmap / create / refresh operations

        Returns:
            Remote item ids that succeeded, and the failures with their messages
        """
        result = BatchResult()

        for op in operations:
            try:
                await self._apply(op)
                await self.db.commit()
                result.success.append(op.remote_item_id)
            except Exception as e:
                await self.db.rollback()
                logger.warning(f"Mapping operation {op.type} on item {op.remote_item_id} failed: {e}")
                result.failed.append(FailedOperation(id=op.remote_item_id, error=str(e)))

        logger.info(
            f"Batch finished: {len(result.success)} succeeded, {len(result.failed)} failed"
        )
        return result

    async def _apply(self, op: ItemMapOperation) -> None:
        if isinstance(op, MapOperation):
            if op.local_item_id is None:
                raise MappingError("A map operation needs a local item id")
            await self.map_item(op.remote_item_id, op.local_item_id)
        elif isinstance(op, UnmapOperation):
            await self.unmap_item(op.remote_item_id)
        elif isinstance(op, CreateOperation):
            await self.create_local_item(op.remote_item_id)
        elif isinstance(op, RefreshOperation):
            await self.refresh_local_item(op.remote_item_id)
        else:
            raise MappingError(f"Unsupported operation type: {op.type}")

    async def map_item(self, remote_item_id: int, local_item_id: int) -> RemoteItem:
        """Link a mirrored item to an existing local item and auto-tag it."""
        remote_item = await self._get_remote_item(remote_item_id)
        local_item = await self.db.get(
            LocalItem,
            local_item_id,
            options=[selectinload(LocalItem.tags)],
            populate_existing=True,
        )
        if local_item is None:
            raise MappingError(f"Local item {local_item_id} does not exist")

        if remote_item.local_item_id == local_item_id:
            return remote_item

        remote_item.local_item_id = local_item_id
        await self.tagger.apply(local_item, remote_item)
        await self.db.flush()
        return remote_item

    async def unmap_item(self, remote_item_id: int) -> RemoteItem:
        """Remove a link. The local item and its tags are kept."""
        remote_item = await self._get_remote_item(remote_item_id)
        if remote_item.local_item_id is None:
            raise MappingError(f"Remote item {remote_item_id} is not mapped")

        remote_item.local_item_id = None
        await self.db.flush()
        return remote_item

    async def create_local_item(self, remote_item_id: int) -> LocalItem:
        """Create a local item from a mirrored item, auto-tag it and link them."""
        remote_item = await self._get_remote_item(remote_item_id)
        if remote_item.local_item_id is not None:
            raise MappingError(
                f"Remote item {remote_item_id} is already mapped to local item "
                f"{remote_item.local_item_id}"
            )
        self._require_title(remote_item)

        local_item = LocalItem(**local_data_from_remote(remote_item), tags=[])
        self.db.add(local_item)
        await self.db.flush()

        await self.tagger.apply(local_item, remote_item)
        remote_item.local_item_id = local_item.id
        await self.db.flush()
        return local_item

    async def refresh_local_item(self, remote_item_id: int) -> LocalItem:
        """Overwrite the linked local item's metadata. Tags are left alone."""
        remote_item = await self._get_remote_item(remote_item_id)
        if remote_item.local_item_id is None:
            raise MappingError(f"Remote item {remote_item_id} is not mapped")

        local_item = await self.db.get(LocalItem, remote_item.local_item_id)
        if local_item is None:
            raise MappingError(f"Local item {remote_item.local_item_id} does not exist")
        self._require_title(remote_item)

        for field, value in local_data_from_remote(remote_item).items():
            setattr(local_item, field, value)
        await self.db.flush()
        return local_item

    def _require_title(self, remote_item: RemoteItem) -> None:
        # Local items always carry a title
        if not (remote_item.title or "").strip():
            raise MappingError(f"Remote item {remote_item.id} has no title")

    async def _get_remote_item(self, remote_item_id: int) -> RemoteItem:
        remote_item = await self.db.get(RemoteItem, remote_item_id)
        if remote_item is None:
            raise MappingError(f"Remote item {remote_item_id} does not exist")
        return remote_item
