"""
User model — login-capable principals of the dealership portal.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, Enum, Integer, String

from app.core.roles import Role
from app.db.base import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id: int = Column(Integer, primary_key=True, index=True)  # type: ignore[assignment]
    username: str = Column(String(255), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    email: str = Column(String(255), unique=True, nullable=False, index=True)  # type: ignore[assignment]
    password_hash: str = Column(String(255), nullable=False)  # type: ignore[assignment]
    role: Role = Column(  # type: ignore[assignment]
        Enum(
            Role,
            native_enum=False,
            length=50,
            values_callable=lambda roles: [r.value for r in roles],
            validate_strings=True,
        ),
        nullable=False,
    )
    dealer_id: int | None = Column(Integer, nullable=True, index=True)  # type: ignore[assignment]
    profile_picture: str | None = Column(String(255), nullable=True)  # type: ignore[assignment]
    phone_number: str | None = Column(String(50), nullable=True)  # type: ignore[assignment]
    created_at: datetime = Column(DateTime(timezone=True), default=_utcnow, nullable=False)  # type: ignore[assignment]
    updated_at: datetime = Column(  # type: ignore[assignment]
        DateTime(timezone=True),
        default=_utcnow,
        onupdate=_utcnow,
        nullable=False,
    )
