"""
Jojárts API — Image SQLAlchemy Model
======================================

What:  ORM model for the `images` table: one row per gallery photo.
Who:   Owned exclusively by ImageCatalog; no other component queries it.

Table Design:
    - UUID primary key generated by the application, never reassigned
    - url: where the image host serves the picture (required, non-empty)
    - label: caption shown under the picture, "" when not given
    - created_at: gallery sort key (newest first), hence the DESC index
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Index, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Image(Base):
    """
    A photo of completed work shown in the public gallery.

    Lifecycle:
        1. Created after the admin uploads the file to the image host
        2. url and/or label replaced by updates
        3. Deleted by the admin (hard delete, no soft-delete flag)
    """

    __tablename__ = "images"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    # Text: image host URLs carry transformation segments and can be long
    url: Mapped[str] = mapped_column(Text, nullable=False)

    label: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
    )

    __table_args__ = (
        Index("idx_images_created_at", created_at.desc()),
    )

    def __repr__(self) -> str:
        return f"<Image(id={self.id}, label='{self.label}', created_at='{self.created_at}')>"
