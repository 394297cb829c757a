"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from . import auth

router = APIRouter()

# Include all route modules
router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
