"""
Credential store — durable CRUD over ``users``.

Lookups by email and username return :class:`CredentialRecord` (with the
password hash, needed for verification). Lookups by id return
:class:`Principal`, which has no hash field, so session resolution can
never leak one.
"""

from __future__ import annotations

import logging

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StorageError, UniquenessViolation
from app.core.roles import Role
from app.models.user import User
from app.schemas.user import CredentialRecord, NewCredential, Principal

logger = logging.getLogger(__name__)


def _collided_column(exc: IntegrityError) -> str | None:
    text = str(exc.orig).lower()
    if "email" in text:
        return "email"
    if "username" in text:
        return "username"
    return None


class CredentialStore:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db

    async def create_user(self, candidate: NewCredential) -> Principal:
        user = User(**candidate.model_dump())
        self._db.add(user)
        try:
            await self._db.commit()
        except IntegrityError as exc:
            await self._db.rollback()
            raise UniquenessViolation(_collided_column(exc)) from exc
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to insert user %s: %s", candidate.username, exc, exc_info=True)
            raise StorageError() from exc
        await self._db.refresh(user)
        return Principal.model_validate(user)

    async def get_by_email(self, email: str) -> CredentialRecord | None:
        user = await self._one(select(User).where(User.email == email))
        return CredentialRecord.model_validate(user) if user else None

    async def get_by_username(self, username: str) -> CredentialRecord | None:
        user = await self._one(select(User).where(User.username == username))
        return CredentialRecord.model_validate(user) if user else None

    async def get_by_id(self, user_id: int) -> Principal | None:
        user = await self._one(select(User).where(User.id == user_id))
        return Principal.model_validate(user) if user else None

    async def list_by_dealer(self, dealer_id: int, role: Role) -> list[Principal]:
        try:
            result = await self._db.execute(
                select(User)
                .where(User.dealer_id == dealer_id, User.role == role)
                .order_by(User.id)
            )
        except SQLAlchemyError as exc:
            logger.error("User listing failed: %s", exc, exc_info=True)
            raise StorageError() from exc
        return [Principal.model_validate(u) for u in result.scalars().all()]

    async def delete_user(self, user_id: int) -> bool:
        """Delete one account. Returns False when no row matched."""
        try:
            result = await self._db.execute(delete(User).where(User.id == user_id))
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to delete user %s: %s", user_id, exc, exc_info=True)
            raise StorageError() from exc
        return result.rowcount > 0

    async def _one(self, stmt) -> User | None:
        try:
            result = await self._db.execute(stmt)
        except SQLAlchemyError as exc:
            logger.error("User lookup failed: %s", exc, exc_info=True)
            raise StorageError() from exc
        return result.scalar_one_or_none()
