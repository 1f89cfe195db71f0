"""
Jojárts API — Credential Store
================================

What:  Administrator lookup, password hashing and the startup bootstrap.
How:   passlib's CryptContext with bcrypt. Hashing/verification are CPU-bound,
       so they run in Starlette's threadpool instead of on the event loop.
Who:   The lifespan calls ensure_bootstrap_admin(); the login route calls
       authenticate().

Bootstrap Flow:
    ┌────────────────────┐  found   ┌──────────┐
    │ find_by_username() │────────▶│  done     │
    └─────────┬──────────┘          └──────────┘
              │ not found
              ▼
    ┌────────────────────┐  IntegrityError  ┌──────────────────────┐
    │  insert_admin()    │────────────────▶│ DuplicateKeyError →   │
    └────────────────────┘                  │ "already bootstrapped"│
                                            └──────────────────────┘

The uniqueness constraint on admins.username decides races between two
starting processes, not the lookup.
"""

import logging
from typing import Optional

from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.concurrency import run_in_threadpool

from app.config import Settings
from app.exceptions import DatabaseError, DuplicateKeyError
from app.models.admin import Admin

logger = logging.getLogger(__name__)

DEFAULT_ROLE = "admin"


class CredentialStore:
    """
    Owns administrator records.

    Constructed once per application with the bootstrap credentials from
    Settings; stateless otherwise, every method receives its session.
    """

    def __init__(
        self,
        bootstrap_username: str,
        bootstrap_password: str,
        bcrypt_rounds: int = 10,
    ):
        self.bootstrap_username = bootstrap_username
        self._bootstrap_password = bootstrap_password
        self.pwd_context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__rounds=bcrypt_rounds,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "CredentialStore":
        return cls(
            bootstrap_username=settings.admin_user,
            bootstrap_password=settings.admin_pass,
            bcrypt_rounds=settings.bcrypt_rounds,
        )

    # ── Password hashing ──────────────────────────────────────────────────

    async def hash_password(self, password: str) -> str:
        return await run_in_threadpool(self.pwd_context.hash, password)

    async def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        return await run_in_threadpool(self.pwd_context.verify, plain_password, hashed_password)

    # ── Queries ───────────────────────────────────────────────────────────

    async def find_by_username(self, db: AsyncSession, username: str) -> Optional[Admin]:
        """Pure read. Returns None when no administrator has this username."""
        try:
            result = await db.execute(select(Admin).where(Admin.username == username))
            return result.scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error("Database error looking up admin '%s': %s", username, str(e))
            raise DatabaseError(context={"error_type": type(e).__name__})

    async def authenticate(
        self, db: AsyncSession, username: str, password: str
    ) -> Optional[Admin]:
        """
        Check a username/password pair.

        Returns:
            The Admin on success, None for an unknown user or wrong password.
            Callers must not tell the two apart in their response.
        """
        admin = await self.find_by_username(db, username)
        if admin is None:
            return None
        if not await self.verify_password(password, admin.password_hash):
            return None
        return admin

    # ── Writes ────────────────────────────────────────────────────────────

    async def insert_admin(
        self,
        db: AsyncSession,
        username: str,
        password: str,
        role: str = DEFAULT_ROLE,
    ) -> Admin:
        """
        Insert a new administrator with a freshly salted hash.

        Raises:
            DuplicateKeyError: the username already exists (the session is
                rolled back before raising).
        """
        password_hash = await self.hash_password(password)
        admin = Admin(username=username, password_hash=password_hash, role=role)
        db.add(admin)
        try:
            await db.flush()
        except IntegrityError as e:
            await db.rollback()
            raise DuplicateKeyError(
                message=f"Administrator '{username}' already exists",
                key="username",
            ) from e
        return admin

    async def ensure_bootstrap_admin(self, db: AsyncSession) -> None:
        """
        Create the configured bootstrap administrator if it does not exist.

        Idempotent: safe on every startup. At most one insert; a concurrent
        insert by another process ends in DuplicateKeyError, which means the
        work is already done.
        """
        existing = await self.find_by_username(db, self.bootstrap_username)
        if existing is not None:
            logger.info("Bootstrap admin '%s' already present", self.bootstrap_username)
            return

        try:
            await self.insert_admin(db, self.bootstrap_username, self._bootstrap_password)
        except DuplicateKeyError:
            logger.info(
                "Bootstrap admin '%s' was created concurrently; skipping",
                self.bootstrap_username,
            )
            return

        logger.info("Bootstrap admin '%s' created", self.bootstrap_username)
