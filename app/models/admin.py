"""
Jojárts API — Administrator SQLAlchemy Model
==============================================

What:  ORM model for the `admins` table.
Who:   Read and written only by CredentialStore.

Lifecycle:
    Created once, at startup, for the configured bootstrap username.
    No exposed operation updates or deletes an administrator.

The unique index on username is what makes bootstrap safe across racing
processes: the second insert fails instead of creating a twin.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Admin(Base):
    """An account allowed to manage the gallery."""

    __tablename__ = "admins"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
    )

    username: Mapped[str] = mapped_column(
        String(150),
        nullable=False,
        unique=True,
        index=True,
    )

    # bcrypt hash in modular crypt format ($2b$...); salt is embedded
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    role: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        default="admin",
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

    def __repr__(self) -> str:
        return f"<Admin(id={self.id}, username='{self.username}', role='{self.role}')>"
