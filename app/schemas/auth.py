"""Pydantic schemas for auth and dashboard responses."""

from __future__ import annotations

from pydantic import BaseModel

from app.schemas.user import Principal


class MessageResponse(BaseModel):
    message: str


class DashboardResponse(BaseModel):
    message: str
    user: Principal


class DeleteResponse(BaseModel):
    success: bool
    message: str
