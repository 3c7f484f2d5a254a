"""API endpoint modules for version 1."""

from .admin import router as admin_router
from .comments import router as comments_router
from .posts import router as posts_router

__all__ = [
    "admin_router",
    "comments_router",
    "posts_router",
]
