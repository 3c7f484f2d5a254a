"""Like-related Pydantic schemas."""

from pydantic import BaseModel


class LikeStatusResponse(BaseModel):
    """Whether the caller currently likes a post, plus the live count."""

    liked: bool
    like_count: int


class LikeResponse(LikeStatusResponse):
    """Result of a like toggle."""

    message: str
