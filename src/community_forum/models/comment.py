"""SQLAlchemy model for threaded comments."""

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from community_forum.db.session import Base
from community_forum.db.time import utcnow


class Comment(Base):
    """Comment or reply on a post, owned by whoever knows its password.

    There is no account attached: ``secret_hash`` is the only credential that
    allows editing or deleting the row.
    """

    __tablename__ = "comment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # NULL for top-level comments; always a comment on the same post otherwise.
    parent_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("comment.id", ondelete="CASCADE"),
        nullable=True,
        index=True,
    )
    # Hops to the nearest top-level ancestor; fixed at creation.
    depth: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    nickname: Mapped[str] = mapped_column(String(50), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    secret_hash: Mapped[str] = mapped_column(String(64), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
