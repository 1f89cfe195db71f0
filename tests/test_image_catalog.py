"""
Jojárts API — Image Catalog Tests
===================================

What we test:
    ✅ create assigns a fresh id and defaults the label to ""
    ✅ a missing or blank url is rejected and nothing is written
    ✅ list returns newest first
    ✅ update changes only the fields that were supplied
    ✅ unknown and malformed ids raise NotFoundError
    ✅ remove deletes exactly once
    ✅ SQLAlchemy failures surface as DatabaseError
"""

import asyncio
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from app.exceptions import MSG_MISSING_IMAGE_URL, DatabaseError, NotFoundError, ValidationError
from app.models.image import Image
from app.schemas.image import ImageUpdate
from app.services.image_catalog import ImageCatalog

UNKNOWN_ID = "00000000-0000-4000-8000-000000000000"


@pytest.fixture
def catalog():
    return ImageCatalog()


async def _image_count(session) -> int:
    result = await session.execute(select(func.count(Image.id)))
    return result.scalar_one()


class TestCreateImage:

    @pytest.mark.asyncio
    async def test_create_assigns_id_and_default_label(self, catalog, db_session):
        record = await catalog.create_image(db_session, url="https://cdn.example/a.jpg")

        assert record.id
        assert record.url == "https://cdn.example/a.jpg"
        assert record.label == ""

    @pytest.mark.asyncio
    async def test_create_with_label(self, catalog, db_session):
        record = await catalog.create_image(
            db_session, url="https://cdn.example/b.jpg", label="Villanyszerelés"
        )

        assert record.label == "Villanyszerelés"

    @pytest.mark.asyncio
    async def test_none_label_is_stored_empty(self, catalog, db_session):
        record = await catalog.create_image(db_session, url="https://cdn.example/c.jpg", label=None)

        assert record.label == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", [None, "", "   "])
    async def test_missing_url_rejected_and_nothing_written(self, catalog, db_session, url):
        with pytest.raises(ValidationError) as exc_info:
            await catalog.create_image(db_session, url=url, label="x")

        assert exc_info.value.message == MSG_MISSING_IMAGE_URL
        assert exc_info.value.field == "url"
        assert await _image_count(db_session) == 0

    @pytest.mark.asyncio
    async def test_concurrent_creates_get_distinct_ids(self, catalog, database):
        async def create_in_own_session(n):
            async with database.session_factory() as session:
                record = await catalog.create_image(session, url=f"https://cdn.example/{n}.jpg")
                await session.commit()
                return record.id

        ids = await asyncio.gather(*(create_in_own_session(n) for n in range(5)))

        assert len(set(ids)) == 5
        async with database.session_factory() as session:
            assert await _image_count(session) == 5

    @pytest.mark.asyncio
    async def test_flush_failure_raises_database_error(self, catalog, mock_db_session):
        mock_db_session.flush.side_effect = OperationalError("INSERT", {}, Exception("disk full"))

        with pytest.raises(DatabaseError):
            await catalog.create_image(mock_db_session, url="https://cdn.example/x.jpg")


class TestListImages:

    @pytest.mark.asyncio
    async def test_empty_catalog(self, catalog, db_session):
        assert await catalog.list_images(db_session) == []

    @pytest.mark.asyncio
    async def test_newest_first(self, catalog, db_session):
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for offset, name in [(0, "old"), (2, "newest"), (1, "middle")]:
            stamp = base + timedelta(hours=offset)
            db_session.add(
                Image(url=f"https://cdn.example/{name}.jpg", label=name,
                      created_at=stamp, updated_at=stamp)
            )
        await db_session.flush()

        records = await catalog.list_images(db_session)

        assert [r.label for r in records] == ["newest", "middle", "old"]

    @pytest.mark.asyncio
    async def test_query_failure_raises_database_error(self, catalog, mock_db_session):
        mock_db_session.execute.side_effect = OperationalError("SELECT", {}, Exception("gone"))

        with pytest.raises(DatabaseError):
            await catalog.list_images(mock_db_session)


class TestUpdateImage:

    @pytest.mark.asyncio
    async def test_label_only_keeps_url(self, catalog, db_session):
        created = await catalog.create_image(db_session, url="https://cdn.example/a.jpg", label="régi")

        updated = await catalog.update_image(db_session, created.id, ImageUpdate(label="új"))

        assert updated.id == created.id
        assert updated.url == "https://cdn.example/a.jpg"
        assert updated.label == "új"

    @pytest.mark.asyncio
    async def test_url_only_keeps_label(self, catalog, db_session):
        created = await catalog.create_image(db_session, url="https://cdn.example/a.jpg", label="konyha")

        updated = await catalog.update_image(
            db_session, created.id, ImageUpdate(url="https://cdn.example/b.jpg")
        )

        assert updated.url == "https://cdn.example/b.jpg"
        assert updated.label == "konyha"

    @pytest.mark.asyncio
    async def test_empty_update_returns_record_unchanged(self, catalog, db_session):
        created = await catalog.create_image(db_session, url="https://cdn.example/a.jpg", label="x")

        updated = await catalog.update_image(db_session, created.id, ImageUpdate())

        assert (updated.url, updated.label) == (created.url, created.label)

    @pytest.mark.asyncio
    async def test_null_label_becomes_empty(self, catalog, db_session):
        created = await catalog.create_image(db_session, url="https://cdn.example/a.jpg", label="x")

        updated = await catalog.update_image(db_session, created.id, ImageUpdate(label=None))

        assert updated.label == ""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("url", ["", None])
    async def test_supplied_empty_url_rejected(self, catalog, db_session, url):
        created = await catalog.create_image(db_session, url="https://cdn.example/a.jpg")

        with pytest.raises(ValidationError) as exc_info:
            await catalog.update_image(db_session, created.id, ImageUpdate(url=url))

        assert exc_info.value.message == MSG_MISSING_IMAGE_URL

    @pytest.mark.asyncio
    @pytest.mark.parametrize("image_id", [UNKNOWN_ID, "not-a-uuid", ""])
    async def test_unknown_id_raises_not_found(self, catalog, db_session, image_id):
        with pytest.raises(NotFoundError):
            await catalog.update_image(db_session, image_id, ImageUpdate(label="x"))

    @pytest.mark.asyncio
    async def test_unknown_id_with_empty_url_raises_not_found(self, catalog, db_session):
        with pytest.raises(NotFoundError):
            await catalog.update_image(db_session, UNKNOWN_ID, ImageUpdate(url=""))


class TestRemoveImage:

    @pytest.mark.asyncio
    async def test_remove_returns_id_and_deletes(self, catalog, db_session):
        created = await catalog.create_image(db_session, url="https://cdn.example/a.jpg")

        deleted_id = await catalog.remove_image(db_session, created.id)

        assert deleted_id == created.id
        assert await catalog.list_images(db_session) == []

    @pytest.mark.asyncio
    async def test_second_remove_raises_not_found(self, catalog, db_session):
        created = await catalog.create_image(db_session, url="https://cdn.example/a.jpg")
        await catalog.remove_image(db_session, created.id)

        with pytest.raises(NotFoundError):
            await catalog.remove_image(db_session, created.id)

    @pytest.mark.asyncio
    async def test_remove_leaves_other_images(self, catalog, db_session):
        keep = await catalog.create_image(db_session, url="https://cdn.example/keep.jpg")
        drop = await catalog.create_image(db_session, url="https://cdn.example/drop.jpg")

        await catalog.remove_image(db_session, drop.id)

        assert [r.id for r in await catalog.list_images(db_session)] == [keep.id]

    @pytest.mark.asyncio
    async def test_delete_failure_raises_database_error(self, catalog, mock_db_session):
        found = MagicMock()
        found.scalar_one_or_none.return_value = Image(url="https://cdn.example/a.jpg", label="")
        mock_db_session.execute.return_value = found
        mock_db_session.delete.side_effect = OperationalError("DELETE", {}, Exception("locked"))

        with pytest.raises(DatabaseError):
            await catalog.remove_image(mock_db_session, UNKNOWN_ID)
