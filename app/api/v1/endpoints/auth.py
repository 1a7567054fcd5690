"""
Auth endpoints — register, login, logout and "who am I".

The session id travels in a signed, HttpOnly cookie; everything else is
decided by :class:`AuthGateway`.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response, status

from app.api.v1.deps import get_current_principal, get_gateway, get_session_id
from app.core.config import settings
from app.core.security import sign_session_id
from app.schemas.auth import MessageResponse
from app.schemas.user import LoginRequest, Principal, RegisterRequest
from app.services.auth_gateway import AuthGateway, EstablishedSession

router = APIRouter(tags=["auth"])


def _set_session_cookie(response: Response, established: EstablishedSession) -> None:
    response.set_cookie(
        key=settings.SESSION_COOKIE_NAME,
        value=sign_session_id(established.session_id, established.expires_at),
        httponly=True,
        secure=settings.COOKIE_SECURE,
        samesite="lax",
        max_age=settings.SESSION_MAX_AGE_DAYS * 24 * 60 * 60,
    )


@router.post("/register", response_model=Principal, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    response: Response,
    session_id: str | None = Depends(get_session_id),
    gateway: AuthGateway = Depends(get_gateway),
) -> Principal:
    """Create an account and start a session for it."""
    established = await gateway.register(body, session_id)
    _set_session_cookie(response, established)
    return established.principal


@router.post("/login", response_model=Principal)
async def login(
    body: LoginRequest,
    response: Response,
    session_id: str | None = Depends(get_session_id),
    gateway: AuthGateway = Depends(get_gateway),
) -> Principal:
    """Authenticate with email, password and the role tab the user picked."""
    established = await gateway.login(body, session_id)
    _set_session_cookie(response, established)
    return established.principal


@router.post("/logout", response_model=MessageResponse)
async def logout(
    response: Response,
    session_id: str | None = Depends(get_session_id),
    gateway: AuthGateway = Depends(get_gateway),
) -> MessageResponse:
    """End the session. Calling it without one is not an error."""
    await gateway.logout(session_id)
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return MessageResponse(message="Logged out")


@router.get("/user", response_model=Principal)
async def read_current_user(
    principal: Principal = Depends(get_current_principal),
) -> Principal:
    return principal
