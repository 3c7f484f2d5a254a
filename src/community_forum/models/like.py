"""Model recording which network identities currently like a post."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from community_forum.db.session import Base
from community_forum.db.time import utcnow


class PostLike(Base):
    """Active like on a post.

    The row's existence is the like; ``Post.like_count`` mirrors the row count.
    """

    __tablename__ = "post_like"
    __table_args__ = (
        UniqueConstraint("post_id", "client_key", name="uq_post_like_post_client"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Best-effort requester address; shared NAT users collide.
    client_key: Mapped[str] = mapped_column(String(64), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
