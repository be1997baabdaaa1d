"""
Top‑level router for version 1 of the API.

This router aggregates the domain routers under a unified prefix.  The
health probe is mounted separately at the application root by
``main.create_app``.
"""

from fastapi import APIRouter

from .endpoints import compare, items

router = APIRouter()

router.include_router(items.router, prefix="/items", tags=["items"])
router.include_router(compare.router, prefix="/compare", tags=["compare"])
