"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.catalog import router as catalog_router
from routes.matching import router as matching_router
from routes.materials import router as materials_router
from routes.sessions import router as sessions_router

__all__ = [
    "catalog_router",
    "matching_router",
    "materials_router",
    "sessions_router",
]
