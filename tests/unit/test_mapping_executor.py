"""Tests for the MappingExecutor against an in-memory database."""

from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from embytag.models import LocalItem, RemoteItem, Tag
from embytag.schemas.mapping import (
    CreateOperation,
    MapOperation,
    RefreshOperation,
    UnmapOperation,
)
from embytag.services.catalog_mirror import CatalogMirror
from embytag.services.mapping_executor import MappingExecutor
from factories import add_local_item, add_remote_item, add_server, add_tag, make_emby_item


async def tag_names(db: AsyncSession, local_item_id: int) -> set[str]:
    item = await db.get(
        LocalItem,
        local_item_id,
        options=[selectinload(LocalItem.tags)],
        populate_existing=True,
    )
    return {tag.name for tag in item.tags}


async def get_remote(db: AsyncSession, remote_item_id: int) -> RemoteItem:
    return await db.get(RemoteItem, remote_item_id, populate_existing=True)


async def tag_exists(db: AsyncSession, name: str) -> bool:
    result = await db.execute(select(Tag).where(Tag.name == name))
    return result.scalar_one_or_none() is not None


class TestMap:
    async def test_links_items_and_auto_tags(self, db: AsyncSession) -> None:
        server = await add_server(db)
        await add_tag(db, "Science Fiction")
        local = await add_local_item(db, "Alien")
        remote = await add_remote_item(
            db,
            server,
            "1001",
            "Alien",
            genres=["Horror", "Science Fiction"],
            actors=["Jane Doe"],
            directors=["Ridley Scott"],
            studios=["Brandywine"],
        )
        await db.commit()

        result = await MappingExecutor(db).execute(
            [MapOperation(remote_item_id=remote.id, local_item_id=local.id)]
        )

        assert result.success == [remote.id]
        assert result.failed == []
        assert (await get_remote(db, remote.id)).local_item_id == local.id
        assert await tag_names(db, local.id) == {
            "Science Fiction",
            "演员: Jane Doe",
            "导演: Ridley Scott",
            "片商: Brandywine",
        }

    async def test_genre_without_existing_tag_creates_nothing(self, db: AsyncSession) -> None:
        server = await add_server(db)
        local = await add_local_item(db, "Alien")
        remote = await add_remote_item(
            db, server, "1001", "Alien", genres=["Horror"], actors=["Jane Doe"]
        )
        await db.commit()

        await MappingExecutor(db).execute(
            [MapOperation(remote_item_id=remote.id, local_item_id=local.id)]
        )

        assert not await tag_exists(db, "Horror")
        assert await tag_exists(db, "演员: Jane Doe")
        assert await tag_names(db, local.id) == {"演员: Jane Doe"}

    async def test_reuses_existing_person_tag(self, db: AsyncSession) -> None:
        server = await add_server(db)
        existing = await add_tag(db, "演员: Jane Doe")
        local = await add_local_item(db, "Alien")
        remote = await add_remote_item(db, server, "1001", "Alien", actors=["Jane Doe"])
        await db.commit()

        await MappingExecutor(db).execute(
            [MapOperation(remote_item_id=remote.id, local_item_id=local.id)]
        )

        result = await db.execute(select(Tag).where(Tag.name == "演员: Jane Doe"))
        assert [tag.id for tag in result.scalars().all()] == [existing.id]

    async def test_mapping_to_same_local_item_is_noop(self, db: AsyncSession) -> None:
        server = await add_server(db)
        local = await add_local_item(db, "Alien")
        remote = await add_remote_item(
            db, server, "1001", "Alien", actors=["Jane Doe"], local_item_id=local.id
        )
        await db.commit()

        result = await MappingExecutor(db).execute(
            [MapOperation(remote_item_id=remote.id, local_item_id=local.id)]
        )

        assert result.success == [remote.id]
        assert not await tag_exists(db, "演员: Jane Doe")

    async def test_missing_local_item_id_fails(self, db: AsyncSession) -> None:
        server = await add_server(db)
        remote = await add_remote_item(db, server, "1001", "Alien")
        await db.commit()
        remote_id = remote.id

        result = await MappingExecutor(db).execute([MapOperation(remote_item_id=remote_id)])

        assert result.success == []
        assert result.failed[0].id == remote_id
        assert "local item id" in result.failed[0].error

    async def test_unknown_local_item_fails(self, db: AsyncSession) -> None:
        server = await add_server(db)
        remote = await add_remote_item(db, server, "1001", "Alien")
        await db.commit()

        result = await MappingExecutor(db).execute(
            [MapOperation(remote_item_id=remote.id, local_item_id=999)]
        )

        assert result.failed[0].error == "Local item 999 does not exist"


class TestUnmap:
    async def test_clears_mapping_and_keeps_local_data(self, db: AsyncSession) -> None:
        server = await add_server(db)
        tag = await add_tag(db, "Favourite")
        local = await add_local_item(db, "Alien", tags=[tag])
        remote = await add_remote_item(db, server, "1001", "Alien", local_item_id=local.id)
        await db.commit()

        result = await MappingExecutor(db).execute([UnmapOperation(remote_item_id=remote.id)])

        assert result.success == [remote.id]
        assert (await get_remote(db, remote.id)).local_item_id is None
        assert await tag_names(db, local.id) == {"Favourite"}

    async def test_unmapping_unmapped_item_fails(self, db: AsyncSession) -> None:
        server = await add_server(db)
        remote = await add_remote_item(db, server, "1001", "Alien")
        await db.commit()
        remote_id = remote.id

        result = await MappingExecutor(db).execute([UnmapOperation(remote_item_id=remote_id)])

        assert result.failed[0].error == f"Remote item {remote_id} is not mapped"


class TestCreate:
    async def test_creates_local_item_from_mirror(self, db: AsyncSession) -> None:
        server = await add_server(db)
        await add_tag(db, "Horror")
        premiere = datetime(1979, 5, 25, tzinfo=timezone.utc)
        remote = await add_remote_item(
            db,
            server,
            "1001",
            "Alien",
            original_title=None,
            overview="Space horror.",
            premiere_date=premiere,
            external_ids={"Imdb": "tt0078748"},
            genres=["Horror"],
            directors=["Ridley Scott"],
        )
        await db.commit()

        result = await MappingExecutor(db).execute([CreateOperation(remote_item_id=remote.id)])

        assert result.success == [remote.id]
        mapped = await get_remote(db, remote.id)
        local = await db.get(LocalItem, mapped.local_item_id)
        assert local.title == "Alien"
        assert local.original_title == "Alien"
        assert local.overview == "Space horror."
        assert local.type == "Movie"
        assert local.external_ids == {"Imdb": "tt0078748"}
        assert await tag_names(db, local.id) == {"Horror", "导演: Ridley Scott"}

    async def test_already_mapped_item_fails(self, db: AsyncSession) -> None:
        server = await add_server(db)
        local = await add_local_item(db, "Alien")
        remote = await add_remote_item(db, server, "1001", "Alien", local_item_id=local.id)
        await db.commit()

        result = await MappingExecutor(db).execute([CreateOperation(remote_item_id=remote.id)])

        assert "already mapped" in result.failed[0].error
        count = await db.execute(select(LocalItem))
        assert len(count.scalars().all()) == 1

    async def test_nameless_mirror_item_fails(self, db: AsyncSession) -> None:
        server = await add_server(db)
        remote = await CatalogMirror(db).upsert(server.id, make_emby_item(id="x", name=None))
        await db.commit()
        remote_id = remote.id

        result = await MappingExecutor(db).execute([CreateOperation(remote_item_id=remote_id)])

        assert result.success == []
        assert result.failed[0].error == f"Remote item {remote_id} has no title"
        assert (await db.execute(select(LocalItem))).scalars().all() == []
        assert (await get_remote(db, remote_id)).local_item_id is None


class TestRefresh:
    async def test_overwrites_local_metadata_but_not_tags(self, db: AsyncSession) -> None:
        server = await add_server(db)
        tag = await add_tag(db, "Favourite")
        local = await add_local_item(db, "Old title", overview="old", tags=[tag])
        remote = await add_remote_item(
            db,
            server,
            "1001",
            "Alien",
            original_title="Alien",
            overview="new",
            type="Movie",
            actors=["Jane Doe"],
            local_item_id=local.id,
        )
        await db.commit()

        result = await MappingExecutor(db).execute([RefreshOperation(remote_item_id=remote.id)])

        assert result.success == [remote.id]
        refreshed = await db.get(LocalItem, local.id, populate_existing=True)
        assert refreshed.title == "Alien"
        assert refreshed.overview == "new"
        assert await tag_names(db, local.id) == {"Favourite"}

    async def test_refreshing_unmapped_item_fails(self, db: AsyncSession) -> None:
        server = await add_server(db)
        remote = await add_remote_item(db, server, "1001", "Alien")
        await db.commit()
        remote_id = remote.id

        result = await MappingExecutor(db).execute([RefreshOperation(remote_item_id=remote_id)])

        assert result.failed[0].error == f"Remote item {remote_id} is not mapped"

    async def test_blank_title_does_not_overwrite_local_item(self, db: AsyncSession) -> None:
        server = await add_server(db)
        local = await add_local_item(db, "Alien")
        remote = await add_remote_item(db, server, "1001", "  ", local_item_id=local.id)
        await db.commit()
        remote_id, local_id = remote.id, local.id

        result = await MappingExecutor(db).execute([RefreshOperation(remote_item_id=remote_id)])

        assert result.failed[0].error == f"Remote item {remote_id} has no title"
        refreshed = await db.get(LocalItem, local_id, populate_existing=True)
        assert refreshed.title == "Alien"


class TestBatchIsolation:
    async def test_failure_does_not_stop_other_operations(self, db: AsyncSession) -> None:
        server = await add_server(db)
        first_local = await add_local_item(db, "Alien")
        first = await add_remote_item(db, server, "1", "Alien", actors=["Jane Doe"])
        third = await add_remote_item(db, server, "3", "Heat", directors=["Michael Mann"])
        await db.commit()
        local_id, first_id, third_id = first_local.id, first.id, third.id

        result = await MappingExecutor(db).execute(
            [
                MapOperation(remote_item_id=first_id, local_item_id=local_id),
                UnmapOperation(remote_item_id=12345),
                CreateOperation(remote_item_id=third_id),
            ]
        )

        assert result.success == [first_id, third_id]
        assert [(f.id, f.error) for f in result.failed] == [
            (12345, "Remote item 12345 does not exist")
        ]
        assert (await get_remote(db, first_id)).local_item_id == local_id
        assert await tag_names(db, local_id) == {"演员: Jane Doe"}
        created_id = (await get_remote(db, third_id)).local_item_id
        assert created_id is not None
        assert await tag_names(db, created_id) == {"导演: Michael Mann"}

    async def test_failed_operation_leaves_no_partial_writes(self, db: AsyncSession) -> None:
        server = await add_server(db)
        remote = await add_remote_item(db, server, "1", "Alien", actors=["Jane Doe"])
        await db.commit()
        remote_id = remote.id

        result = await MappingExecutor(db).execute(
            [MapOperation(remote_item_id=remote_id, local_item_id=404)]
        )

        assert len(result.failed) == 1
        assert not await tag_exists(db, "演员: Jane Doe")
        assert (await get_remote(db, remote_id)).local_item_id is None
