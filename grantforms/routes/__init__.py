"""APIRouter registration for the grant form service."""

from __future__ import annotations

from fastapi import APIRouter

from grantforms.routes.applications import router as applications_router
from grantforms.routes.forms import router as forms_router

api_router = APIRouter()
api_router.include_router(forms_router, tags=["Forms"])
api_router.include_router(applications_router, tags=["Applications"])

__all__ = ["api_router"]
