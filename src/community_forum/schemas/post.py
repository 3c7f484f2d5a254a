"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PostCreate(BaseModel):
    """Schema for creating a new anonymous post.

    Blank values pass schema validation and are rejected by the store with a
    readable message.
    """

    title: str = Field(..., description="Post title")
    content: str = Field(..., description="Post body")
    category: str = Field(..., description="One of notice/question/experience/free/info/etc")
    nickname: str | None = Field(None, description="Display name; generated when omitted")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: int
    title: str
    content: str
    category: str
    nickname: str
    like_count: int
    view_count: int
    comment_count: int
    is_pinned: bool
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class AdminPostResponse(PostResponse):
    """Post information including moderation flags."""

    is_reported: bool
    is_hidden: bool
