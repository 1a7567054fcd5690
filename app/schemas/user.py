"""Pydantic schemas for registration, login and the two user record shapes."""

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.core.roles import DEALER_SCOPED_ROLES, Role

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

# Column widths in app/models/user.py
_NAME_MAX = 255
_PHONE_MAX = 50


def _require_text(v: str, field: str) -> str:
    # JSON allows lone surrogate escapes, which can be neither hashed nor stored
    try:
        v.encode("utf-8")
    except UnicodeEncodeError:
        raise ValueError(f"{field} contains invalid characters") from None
    return v


def _normalise_email(v: str) -> str:
    v = _require_text(v, "Email").strip().lower()
    if not _EMAIL_RE.match(v):
        raise ValueError("Must provide a valid email")
    return v


# ── Requests ────────────────────────────────────────────────────────
class RegisterRequest(BaseModel):
    username: str = Field(max_length=_NAME_MAX)
    email: str = Field(max_length=_NAME_MAX)
    password: str
    role: Role
    dealer_id: int | None = None
    profile_picture: str | None = Field(default=None, max_length=_NAME_MAX)
    phone_number: str | None = Field(default=None, max_length=_PHONE_MAX)

    @field_validator("username")
    @classmethod
    def _username(cls, v: str) -> str:
        v = _require_text(v, "Username").strip()
        if len(v) < 3:
            raise ValueError("Username must be at least 3 characters")
        return v

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)

    @field_validator("password")
    @classmethod
    def _password(cls, v: str) -> str:
        _require_text(v, "Password")
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

    @model_validator(mode="after")
    def _dealer_scope(self) -> "RegisterRequest":
        if self.dealer_id is not None and self.role not in DEALER_SCOPED_ROLES:
            raise ValueError("A dealer association only applies to dealer or sales accounts")
        return self


class LoginRequest(BaseModel):
    email: str = Field(max_length=_NAME_MAX)
    password: str = Field(min_length=1)
    role: Role

    @field_validator("email")
    @classmethod
    def _email(cls, v: str) -> str:
        return _normalise_email(v)


# ── Records ─────────────────────────────────────────────────────────
class Principal(BaseModel):
    """Public view of an account. Has no password field at all."""

    id: int
    username: str
    email: str
    role: Role
    dealer_id: int | None = None
    profile_picture: str | None = None
    phone_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)


class CredentialRecord(BaseModel):
    """
    Internal view used only for password verification.

    Never returned from an endpoint; call :meth:`to_principal` before
    handing the account to anything outside the auth boundary.
    """

    id: int
    username: str
    email: str
    role: Role
    password_hash: str = Field(repr=False)
    dealer_id: int | None = None
    profile_picture: str | None = None
    phone_number: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True, frozen=True)

    def to_principal(self) -> Principal:
        return Principal.model_validate(self.model_dump(exclude={"password_hash"}))


class NewCredential(BaseModel):
    """A registration candidate whose password has already been hashed."""

    username: str
    email: str
    role: Role
    password_hash: str = Field(repr=False)
    dealer_id: int | None = None
    profile_picture: str | None = None
    phone_number: str | None = None
