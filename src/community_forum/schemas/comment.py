"""Comment-related Pydantic schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from community_forum.services.thread_tree import ThreadNode


class CommentCreate(BaseModel):
    """Schema for writing a comment or a reply."""

    nickname: str
    password: str = Field(..., description="Required later to edit or delete the comment")
    content: str
    parent_id: int | None = Field(None, alias="parentId", description="Comment being replied to")

    model_config = ConfigDict(populate_by_name=True)


class CommentUpdate(BaseModel):
    """Schema for editing a comment."""

    nickname: str
    password: str
    content: str


class CommentDelete(BaseModel):
    """Schema carrying the password needed to delete a comment."""

    password: str


class CommentResponse(BaseModel):
    """Schema for comment information returned by the API; never exposes the password."""

    id: int
    post_id: int
    parent_id: int | None
    depth: int
    nickname: str
    content: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ThreadNodeResponse(BaseModel):
    """A comment with its nested replies."""

    comment: CommentResponse
    depth: int
    can_reply: bool
    replies: list[ThreadNodeResponse] = Field(default_factory=list)

    @classmethod
    def from_node(cls, node: ThreadNode) -> ThreadNodeResponse:
        return cls(
            comment=CommentResponse.model_validate(node.comment),
            depth=node.depth,
            can_reply=node.can_reply,
            replies=[cls.from_node(child) for child in node.replies],
        )
