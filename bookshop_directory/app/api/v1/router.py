"""
Top-level router for version 1 of the API.

Aggregates the bookshop routes, the feature tag routes and the refresh
administration routes under a unified prefix.
"""

from fastapi import APIRouter

from .endpoints import admin, bookshops, features

router = APIRouter()

router.include_router(bookshops.router, prefix="/bookshops", tags=["bookshops"])
router.include_router(features.router, prefix="/features", tags=["features"])
router.include_router(admin.router, prefix="/admin", tags=["admin"])
