"""
Persisted browser sessions.

``sess`` holds the serialized session payload (currently just the
principal id); ``expire`` is checked on every read.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, Column, DateTime, String

from app.db.base import Base


class SessionRecord(Base):
    __tablename__ = "session"

    sid: str = Column(String(128), primary_key=True)  # type: ignore[assignment]
    sess: dict = Column(JSON, nullable=False)  # type: ignore[assignment]
    expire: datetime = Column(DateTime(timezone=True), nullable=False, index=True)  # type: ignore[assignment]
