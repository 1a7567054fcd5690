"""
FastAPI dependencies — database session, auth gateway and role guards.

Session resolution is an explicit dependency: handlers receive the
resolved :class:`Principal` as an argument instead of reading shared
request state.
"""

from __future__ import annotations

from collections.abc import AsyncGenerator, Awaitable, Callable

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import AccessDeniedError, NotAuthenticatedError
from app.core.roles import Role, has_role
from app.core.security import unsign_session_id
from app.db.session import async_session_factory
from app.schemas.user import Principal
from app.services.auth_gateway import AuthGateway
from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore


# ── Database session ────────────────────────────────────────────────
async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        try:
            yield session
        finally:
            await session.close()


def get_credential_store(db: AsyncSession = Depends(get_db)) -> CredentialStore:
    return CredentialStore(db)


def get_gateway(
    credentials: CredentialStore = Depends(get_credential_store),
    db: AsyncSession = Depends(get_db),
) -> AuthGateway:
    return AuthGateway(credentials, SessionStore(db))


# ── Session resolution ──────────────────────────────────────────────
def get_session_id(request: Request) -> str | None:
    """Read and verify the signed session cookie. Bad signatures count as no session."""
    cookie = request.cookies.get(settings.SESSION_COOKIE_NAME)
    if not cookie:
        return None
    return unsign_session_id(cookie)


async def get_optional_principal(
    session_id: str | None = Depends(get_session_id),
    gateway: AuthGateway = Depends(get_gateway),
) -> Principal | None:
    return await gateway.current_user(session_id)


async def get_current_principal(
    principal: Principal | None = Depends(get_optional_principal),
) -> Principal:
    if principal is None:
        raise NotAuthenticatedError()
    return principal


def require_role(role: Role) -> Callable[..., Awaitable[Principal]]:
    """Build a dependency that only lets principals holding *role* through."""

    async def _guard(principal: Principal = Depends(get_current_principal)) -> Principal:
        if not has_role(principal, role):
            raise AccessDeniedError()
        return principal

    return _guard


require_admin = require_role(Role.ADMIN)
require_dealer = require_role(Role.DEALER)
require_sales = require_role(Role.SALES)
