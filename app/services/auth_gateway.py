"""
Authentication gateway — the only code that combines the password codec,
the credential store and the session store.

Registration, login, logout and identity resolution all go through here;
endpoints only translate the results to HTTP.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from fastapi.concurrency import run_in_threadpool

from app.core.config import settings
from app.core.exceptions import (AuthenticationError, ConflictError,
                                 RoleMismatchError, UniquenessViolation)
from app.core.roles import has_role
from app.core.security import get_password_hash, verify_password
from app.schemas.user import LoginRequest, NewCredential, Principal, RegisterRequest
from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore, new_session_id

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EstablishedSession:
    principal: Principal
    session_id: str
    expires_at: datetime


class AuthGateway:
    def __init__(self, credentials: CredentialStore, sessions: SessionStore) -> None:
        self._credentials = credentials
        self._sessions = sessions

    async def register(
        self,
        payload: RegisterRequest,
        current_session_id: str | None = None,
    ) -> EstablishedSession:
        """Create an account and log it in straight away."""
        if await self._credentials.get_by_email(payload.email) is not None:
            raise ConflictError("email")
        if await self._credentials.get_by_username(payload.username) is not None:
            raise ConflictError("username")

        password_hash = await run_in_threadpool(get_password_hash, payload.password)
        candidate = NewCredential(
            **payload.model_dump(exclude={"password"}),
            password_hash=password_hash,
        )
        try:
            principal = await self._credentials.create_user(candidate)
        except UniquenessViolation as exc:
            # Lost a race with a concurrent registration.
            raise ConflictError(exc.field or "email") from exc

        logger.info("Registered %s account %s (id=%s)", principal.role.value, principal.username, principal.id)
        return await self._establish(principal, current_session_id)

    async def login(
        self,
        payload: LoginRequest,
        current_session_id: str | None = None,
    ) -> EstablishedSession:
        record = await self._credentials.get_by_email(payload.email)
        if record is None or not await run_in_threadpool(
            verify_password, payload.password, record.password_hash
        ):
            logger.info("Failed login attempt for %s", payload.email)
            raise AuthenticationError()

        principal = record.to_principal()
        if not has_role(principal, payload.role):
            logger.info("Login for user id=%s rejected: role %s claimed", principal.id, payload.role.value)
            raise RoleMismatchError()

        return await self._establish(principal, current_session_id)

    async def logout(self, session_id: str | None) -> None:
        if session_id:
            await self._sessions.delete(session_id)

    async def current_user(self, session_id: str | None) -> Principal | None:
        """Resolve a session id to its principal; ``None`` when not logged in."""
        if not session_id:
            return None
        user_id = await self._sessions.get(session_id)
        if user_id is None:
            return None
        return await self._credentials.get_by_id(int(user_id))

    async def _establish(self, principal: Principal, previous_session_id: str | None) -> EstablishedSession:
        if previous_session_id:
            await self._sessions.delete(previous_session_id)
        session_id = new_session_id()
        expires_at = datetime.now(timezone.utc) + timedelta(days=settings.SESSION_MAX_AGE_DAYS)
        await self._sessions.put(session_id, principal.id, expires_at)
        return EstablishedSession(principal=principal, session_id=session_id, expires_at=expires_at)
