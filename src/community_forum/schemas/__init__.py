"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import (
    CommentCreate,
    CommentDelete,
    CommentResponse,
    CommentUpdate,
    ThreadNodeResponse,
)
from .like import LikeResponse, LikeStatusResponse
from .moderation import (
    HiddenUpdate,
    PinUpdate,
    ReportCreate,
    ReportResponse,
    ReportStatusUpdate,
)
from .post import AdminPostResponse, PostCreate, PostResponse

__all__ = [
    "CommentCreate", "CommentDelete", "CommentResponse", "CommentUpdate", "ThreadNodeResponse",
    "LikeResponse", "LikeStatusResponse",
    "HiddenUpdate", "PinUpdate", "ReportCreate", "ReportResponse", "ReportStatusUpdate",
    "AdminPostResponse", "PostCreate", "PostResponse",
]
