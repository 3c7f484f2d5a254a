"""SQLAlchemy models for the community forum."""

from .comment import Comment
from .like import PostLike
from .post import POST_CATEGORIES, Post
from .report import REPORT_STATUSES, Report

__all__ = [
    "Comment",
    "PostLike",
    "POST_CATEGORIES", "Post",
    "REPORT_STATUSES", "Report",
]
