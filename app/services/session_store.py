"""
Session store — durable key/value persistence for browser sessions.

Rows live in the ``session`` table of the main database; the table is
created on first use if the schema does not have it yet. Expired rows
read as absent.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timezone
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import StorageError
from app.models.session import SessionRecord

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32


def new_session_id() -> str:
    return secrets.token_urlsafe(SESSION_ID_BYTES)


class SessionStore:
    def __init__(self, db: AsyncSession) -> None:
        self._db = db
        self._table_ready = False

    async def _ensure_table(self) -> None:
        if self._table_ready:
            return
        await self._db.run_sync(
            lambda sync_session: SessionRecord.__table__.create(
                sync_session.connection(), checkfirst=True
            )
        )
        self._table_ready = True

    async def put(self, session_id: str, principal_ref: Any, expiry: datetime) -> None:
        try:
            await self._ensure_table()
            await self._db.merge(
                SessionRecord(sid=session_id, sess={"user_id": principal_ref}, expire=expiry)
            )
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to persist session: %s", exc, exc_info=True)
            raise StorageError() from exc

    async def get(self, session_id: str) -> Any | None:
        try:
            await self._ensure_table()
            result = await self._db.execute(
                select(SessionRecord.sess).where(
                    SessionRecord.sid == session_id,
                    SessionRecord.expire > datetime.now(timezone.utc),
                )
            )
        except SQLAlchemyError as exc:
            logger.error("Failed to load session: %s", exc, exc_info=True)
            raise StorageError() from exc
        sess = result.scalar_one_or_none()
        if not sess:
            return None
        return sess.get("user_id")

    async def delete(self, session_id: str) -> None:
        try:
            await self._ensure_table()
            await self._db.execute(delete(SessionRecord).where(SessionRecord.sid == session_id))
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to destroy session: %s", exc, exc_info=True)
            raise StorageError() from exc

    async def prune_expired(self) -> int:
        """Drop expired rows. Returns how many were removed."""
        try:
            await self._ensure_table()
            result = await self._db.execute(
                delete(SessionRecord).where(SessionRecord.expire <= datetime.now(timezone.utc))
            )
            await self._db.commit()
        except SQLAlchemyError as exc:
            await self._db.rollback()
            logger.error("Failed to prune sessions: %s", exc, exc_info=True)
            raise StorageError() from exc
        if result.rowcount:
            logger.info("Pruned %d expired sessions", result.rowcount)
        return result.rowcount
