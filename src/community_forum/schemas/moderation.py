"""Moderation-related Pydantic schemas."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class PinUpdate(BaseModel):
    """Schema for pinning or unpinning a post."""

    is_pinned: bool


class HiddenUpdate(BaseModel):
    """Schema for hiding or restoring a post."""

    is_hidden: bool


class ReportCreate(BaseModel):
    """Schema for reporting a post or one of its comments."""

    reason: str
    description: str | None = None
    comment_id: int | None = Field(None, description="Comment on the post being reported")


class ReportStatusUpdate(BaseModel):
    """Schema for triaging a report."""

    status: Literal["pending", "resolved", "dismissed"]


class ReportResponse(BaseModel):
    """Schema for report information returned by the API."""

    id: int
    post_id: int
    comment_id: int | None
    reason: str
    description: str | None
    status: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
