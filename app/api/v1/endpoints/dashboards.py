"""
Role dashboards and dealer staff management.

Each route is gated by exactly one role guard from ``deps``.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from app.api.v1.deps import (get_credential_store, require_admin,
                             require_dealer, require_sales)
from app.core.exceptions import NotFoundError
from app.core.roles import Role, has_role
from app.schemas.auth import DashboardResponse, DeleteResponse
from app.schemas.user import Principal
from app.services.credential_store import CredentialStore

logger = logging.getLogger(__name__)

router = APIRouter(tags=["dashboards"])


@router.get("/admin/dashboard", response_model=DashboardResponse)
async def admin_dashboard(principal: Principal = Depends(require_admin)) -> DashboardResponse:
    return DashboardResponse(message="Welcome to the Admin Dashboard", user=principal)


@router.get("/dealer/dashboard", response_model=DashboardResponse)
async def dealer_dashboard(principal: Principal = Depends(require_dealer)) -> DashboardResponse:
    return DashboardResponse(message="Welcome to the Dealer Dashboard", user=principal)


@router.get("/sales/dashboard", response_model=DashboardResponse)
async def sales_dashboard(principal: Principal = Depends(require_sales)) -> DashboardResponse:
    return DashboardResponse(message="Welcome to the Sales Dashboard", user=principal)


# ── Dealer staff ────────────────────────────────────────────────────
@router.get("/dealer/staff", response_model=list[Principal])
async def list_sales_staff(
    dealer: Principal = Depends(require_dealer),
    credentials: CredentialStore = Depends(get_credential_store),
) -> list[Principal]:
    """Sales accounts that share this dealer's dealership."""
    if dealer.dealer_id is None:
        return []
    return await credentials.list_by_dealer(dealer.dealer_id, Role.SALES)


@router.delete("/dealer/staff/{user_id}", response_model=DeleteResponse)
async def remove_sales_staff(
    user_id: int,
    dealer: Principal = Depends(require_dealer),
    credentials: CredentialStore = Depends(get_credential_store),
) -> DeleteResponse:
    target = await credentials.get_by_id(user_id)
    if (
        target is None
        or not has_role(target, Role.SALES)
        or dealer.dealer_id is None
        or target.dealer_id != dealer.dealer_id
    ):
        raise NotFoundError("Sales staff member not found")

    await credentials.delete_user(user_id)
    logger.info("Dealer id=%s removed sales account id=%s", dealer.id, user_id)
    return DeleteResponse(success=True, message="Sales staff member removed")
