"""Attach tags to a local item from mirrored Emby metadata."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from embytag.models.local_item import LocalItem
from embytag.models.remote_item import RemoteItem
from embytag.models.tag import Tag

logger = logging.getLogger(__name__)

ACTOR_PREFIX = "演员"
DIRECTOR_PREFIX = "导演"
STUDIO_PREFIX = "片商"


def person_tag_name(prefix: str, name: str) -> str:
    return f"{prefix}: {name}"


class AutoTagger:
    """
    Tags a local item from a remote item's genres, people and studios.

    - Genres only link tags that already exist with the same name; no tag is
      created for a genre.
    - Actors, directors and studios always end up tagged as
      "演员: Name", "导演: Name" and "片商: Name", creating the tag if needed.

    The local item must be loaded with its tags. Nothing is committed here.
    """

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def apply(self, local_item: LocalItem, remote_item: RemoteItem) -> list[Tag]:
        """
        Tag a local item.

        Returns:
            Tags newly attached to the item
        """
        attached: list[Tag] = []

        for genre in remote_item.genres or []:
            tag = await self._find_tag(genre)
            if tag is not None and self._attach(local_item, tag):
                attached.append(tag)

        names = (
            [person_tag_name(ACTOR_PREFIX, n) for n in remote_item.actors or []]
            + [person_tag_name(DIRECTOR_PREFIX, n) for n in remote_item.directors or []]
            + [person_tag_name(STUDIO_PREFIX, n) for n in remote_item.studios or []]
        )
        for name in names:
            tag = await self._find_or_create_tag(name)
            if self._attach(local_item, tag):
                attached.append(tag)

        if attached:
            logger.debug(f"Tagged {local_item.title!r} with {len(attached)} tags")
        return attached

    async def _find_tag(self, name: str) -> Tag | None:
        result = await self.db.execute(select(Tag).where(Tag.name == name))
        return result.scalar_one_or_none()

    async def _find_or_create_tag(self, name: str) -> Tag:
        tag = await self._find_tag(name)
        if tag is None:
            tag = Tag(name=name)
            self.db.add(tag)
            await self.db.flush()
        return tag

    def _attach(self, local_item: LocalItem, tag: Tag) -> bool:
        if any(existing.id == tag.id for existing in local_item.tags):
            return False
        local_item.tags.append(tag)
        return True
