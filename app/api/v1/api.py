"""
API router aggregator — wires all endpoint modules together.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import auth, dashboards

api_router = APIRouter()

# Register, login, logout, current user
api_router.include_router(auth.router)

# Role dashboards, dealer staff
api_router.include_router(dashboards.router)
