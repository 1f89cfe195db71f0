"""
Jojárts API — Image Catalog
=============================

What:  CRUD over the gallery's photo records.
Why:   The only component that touches the `images` table; routes and
       other services only ever see PhotoRecord values and string ids.
How:   Stateless service; every call receives the request's AsyncSession.
       Writes are flushed here and committed by get_db_session().

Operations:
    list_images()                 newest created_at first, no pagination
    create_image(url, label="")   ValidationError on missing/empty url
    update_image(id, changes)     only supplied fields change
    remove_image(id)              returns the id it deleted

Concurrency:
    Nothing here locks. Two updates to the same row race and the last
    commit wins; each single-row write is atomic in the database.
"""

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import (
    MSG_MISSING_IMAGE_URL,
    DatabaseError,
    NotFoundError,
    ValidationError,
)
from app.models.image import Image
from app.schemas.image import ImageUpdate, PhotoRecord

logger = logging.getLogger(__name__)


def _parse_id(image_id: str) -> Optional[uuid.UUID]:
    """Ids are UUIDs; anything else cannot name an existing record."""
    try:
        return uuid.UUID(str(image_id))
    except (TypeError, ValueError):
        return None


def _require_url(url: Optional[str]) -> str:
    if url is None or not url.strip():
        raise ValidationError(message=MSG_MISSING_IMAGE_URL, field="url")
    return url


class ImageCatalog:
    """
    Business logic for photo records.

    Error Handling Strategy:
        ValidationError and NotFoundError propagate unchanged (client errors).
        SQLAlchemy errors are wrapped in DatabaseError so the client never
        sees driver details.
    """

    async def list_images(self, db: AsyncSession) -> List[PhotoRecord]:
        """
        Return every photo record, newest first.

        Read-only. id is the tie-breaker so equal timestamps still give a
        stable order.
        """
        try:
            result = await db.execute(
                select(Image).order_by(desc(Image.created_at), desc(Image.id))
            )
            images = list(result.scalars().all())
        except SQLAlchemyError as e:
            logger.error("Database error listing images: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        return [PhotoRecord.model_validate(image) for image in images]

    async def create_image(
        self, db: AsyncSession, url: Optional[str], label: Optional[str] = ""
    ) -> PhotoRecord:
        """
        Add a photo record.

        Raises:
            ValidationError: url missing or blank (nothing is written)
            DatabaseError: the insert failed
        """
        url = _require_url(url)

        image = Image(url=url, label=label or "")
        db.add(image)
        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error creating image: %s", str(e), exc_info=True)
            raise DatabaseError(context={"error_type": type(e).__name__})

        logger.info("Image %s created", image.id)
        return PhotoRecord.model_validate(image)

    async def update_image(
        self, db: AsyncSession, image_id: str, changes: ImageUpdate
    ) -> PhotoRecord:
        """
        Replace url and/or label of an existing record.

        Only fields present in the request body are applied; omitted
        fields keep their stored values. An empty body is a no-op that
        still returns the record.

        Raises:
            NotFoundError: no record with this id (or id not a UUID)
            ValidationError: url supplied but empty/null
            DatabaseError: the query or write failed
        """
        image = await self._get(db, image_id)

        fields: Dict[str, Any] = changes.model_dump(exclude_unset=True)
        if "url" in fields:
            fields["url"] = _require_url(fields["url"])
        if "label" in fields and fields["label"] is None:
            fields["label"] = ""

        for name, value in fields.items():
            setattr(image, name, value)
        if fields:
            image.updated_at = datetime.now(timezone.utc)

        try:
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error updating image %s: %s", image_id, str(e), exc_info=True)
            raise DatabaseError(context={"image_id": image_id, "error_type": type(e).__name__})

        logger.info("Image %s updated (%s)", image.id, ", ".join(sorted(fields)) or "no changes")
        return PhotoRecord.model_validate(image)

    async def remove_image(self, db: AsyncSession, image_id: str) -> str:
        """
        Delete a record and return its id.

        Raises:
            NotFoundError: no record with this id; a second delete of the
                same id always ends here
            DatabaseError: the delete failed
        """
        image = await self._get(db, image_id)
        try:
            await db.delete(image)
            await db.flush()
        except SQLAlchemyError as e:
            logger.error("Database error deleting image %s: %s", image_id, str(e), exc_info=True)
            raise DatabaseError(context={"image_id": image_id, "error_type": type(e).__name__})

        logger.info("Image %s deleted", image_id)
        return str(image.id)

    async def _get(self, db: AsyncSession, image_id: str) -> Image:
        parsed = _parse_id(image_id)
        if parsed is None:
            raise NotFoundError(resource_id=str(image_id))

        try:
            result = await db.execute(select(Image).where(Image.id == parsed))
            image = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error fetching image %s: %s", image_id, str(e))
            raise DatabaseError(context={"image_id": image_id, "error_type": type(e).__name__})

        if image is None:
            raise NotFoundError(resource_id=str(image_id))
        return image


# ── Singleton Instance ────────────────────────────────────────────────────
# ImageCatalog holds no state; one instance serves every request
image_catalog = ImageCatalog()
