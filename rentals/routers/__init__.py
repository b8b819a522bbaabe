"""
API route handlers for the rentals API.
"""

from .admin import router as admin_router
from .auth import router as auth_router
from .favorites import router as favorites_router
from .listings import router as listings_router
from .notifications import router as notifications_router
from .reports import router as reports_router
from .upload import router as upload_router
from .users import router as users_router

__all__ = [
    "admin_router",
    "auth_router",
    "favorites_router",
    "listings_router",
    "notifications_router",
    "reports_router",
    "upload_router",
    "users_router",
]
