"""Thread Store: posts, comments and their structural rules.

Posts are anonymous and immutable for their authors. Comments form a tree under
each post through ``parent_id``; every comment is owned by the password given
when it was written, and nesting is capped at ``max_depth`` reply levels.

The store only flushes. Callers commit, so each public operation becomes exactly
one transaction together with the counter updates it performs.
"""
from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from datetime import datetime, timedelta

from sqlalchemy import and_, case, delete, func, or_, select, update
from sqlalchemy.orm import Session

from community_forum.core.errors import (
    AuthorizationError,
    DepthExceededError,
    NotFoundError,
    ValidationError,
)
from community_forum.core.security import hash_secret, verify_secret
from community_forum.core.settings import settings
from community_forum.db.time import utcnow
from community_forum.models import POST_CATEGORIES, Comment, Post
from community_forum.services.nickname import generate_nickname

__all__ = ["ThreadStore"]

logger = logging.getLogger(__name__)

MAX_TITLE_LENGTH = 200
MAX_NICKNAME_LENGTH = 50
MAX_CONTENT_LENGTH = 10_000
MAX_SECRET_LENGTH = 128


def _require_text(value: str | None, field: str, max_length: int) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} is required")
    if len(value) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return value


class ThreadStore:
    """Persistence and invariants for posts and their comment threads."""

    def __init__(
        self,
        session: Session,
        *,
        max_depth: int | None = None,
        rng: random.Random | None = None,
    ) -> None:
        """Bind the store to a session.

        Args:
            session: Active SQLAlchemy session; the caller owns the transaction.
            max_depth: Deepest allowed reply level. Defaults to the configured value.
            rng: Random source for generated nicknames; injectable for tests.
        """
        self.session = session
        self.max_depth = settings.max_comment_depth if max_depth is None else max_depth
        self.rng = rng or random.Random()

    # -- posts --------------------------------------------------------------

    def create_post(
        self,
        title: str,
        content: str,
        category: str,
        nickname: str | None = None,
    ) -> Post:
        """Create an anonymous post, generating a nickname when none is given."""
        title = _require_text(title, "Title", MAX_TITLE_LENGTH).strip()
        content = _require_text(content, "Content", MAX_CONTENT_LENGTH)
        if not category or not category.strip():
            raise ValidationError("Category is required")
        if category not in POST_CATEGORIES:
            raise ValidationError(
                f"Unknown category '{category}'; expected one of {sorted(POST_CATEGORIES)}"
            )

        if nickname is None or not nickname.strip():
            nickname = generate_nickname(self.rng)
        else:
            nickname = _require_text(nickname, "Nickname", MAX_NICKNAME_LENGTH).strip()

        post = Post(
            title=title,
            content=content,
            category=category,
            nickname=nickname,
            like_count=0,
            view_count=0,
            comment_count=0,
        )
        self.session.add(post)
        self.session.flush()
        logger.info("Created post %s in category %s", post.id, category)
        return post

    def get_post(self, post_id: int, *, include_hidden: bool = False) -> Post:
        """Return a post, treating hidden posts as missing unless asked otherwise."""
        post = self.session.get(Post, post_id)
        if post is None or (post.is_hidden and not include_hidden):
            raise NotFoundError("Post not found")
        return post

    def view_post(self, post_id: int) -> Post:
        """Return a visible post and count the view."""
        post = self.get_post(post_id)
        self.session.execute(
            update(Post)
            .where(Post.id == post_id)
            .values(view_count=Post.view_count + 1)
            .execution_options(synchronize_session=False)
        )
        self.session.expire(post, ["view_count"])
        return post

    def list_posts(
        self,
        *,
        search: str | None = None,
        category: str | None = None,
        limit: int = 50,
        offset: int = 0,
        include_hidden: bool = False,
        now: datetime | None = None,
    ) -> list[Post]:
        """List posts: pinned first, then recent popular posts by likes, then newest."""
        stmt = select(Post)
        if not include_hidden:
            stmt = stmt.where(Post.is_hidden.is_(False))
        if category:
            stmt = stmt.where(Post.category == category)
        if search and search.strip():
            term = search.strip()
            stmt = stmt.where(
                or_(
                    Post.title.icontains(term, autoescape=True),
                    Post.content.icontains(term, autoescape=True),
                )
            )

        cutoff = (now or utcnow()) - timedelta(days=settings.popular_window_days)
        popular = and_(
            Post.like_count >= settings.popular_like_threshold,
            Post.created_at >= cutoff,
        )
        stmt = stmt.order_by(
            Post.is_pinned.desc(),
            case((popular, 1), else_=0).desc(),
            case((popular, Post.like_count), else_=0).desc(),
            Post.created_at.desc(),
            Post.id.desc(),
        )
        return list(self.session.scalars(stmt.offset(offset).limit(limit)))

    # -- comments -----------------------------------------------------------

    def get_comment(self, comment_id: int) -> Comment:
        comment = self.session.get(Comment, comment_id)
        if comment is None:
            raise NotFoundError("Comment not found")
        return comment

    def comment_depth(self, comment: Comment) -> int:
        """Return the number of parent hops to the nearest top-level comment."""
        return comment.depth

    def create_comment(
        self,
        post_id: int,
        nickname: str,
        secret: str,
        content: str,
        parent_id: int | None = None,
    ) -> Comment:
        """Add a comment, or a reply when ``parent_id`` is given.

        Raises:
            ValidationError: nickname, secret or content is blank or too long.
            NotFoundError: the post is missing or hidden, or the parent is not a
                comment on the same post.
            DepthExceededError: the reply would nest deeper than ``max_depth``.
        """
        nickname = _require_text(nickname, "Nickname", MAX_NICKNAME_LENGTH).strip()
        secret = _require_text(secret, "Password", MAX_SECRET_LENGTH)
        content = _require_text(content, "Content", MAX_CONTENT_LENGTH)

        post = self.get_post(post_id)

        depth = 0
        if parent_id is not None:
            parent = self.session.get(Comment, parent_id)
            # A parent on another post is reported the same way as a missing one.
            if parent is None or parent.post_id != post.id:
                raise NotFoundError("Parent comment not found")
            depth = parent.depth + 1
            if depth > self.max_depth:
                raise DepthExceededError(self.max_depth)

        comment = Comment(
            post_id=post.id,
            parent_id=parent_id,
            depth=depth,
            nickname=nickname,
            content=content,
            secret_hash=hash_secret(secret),
        )
        self.session.add(comment)
        self.session.flush()
        self._refresh_comment_count(post)
        logger.info("Created comment %s on post %s (depth %d)", comment.id, post.id, depth)
        return comment

    def edit_comment(
        self,
        comment_id: int,
        secret: str,
        nickname: str,
        content: str,
    ) -> Comment:
        """Replace nickname and content after checking the comment password."""
        comment, _ = self._visible_comment(comment_id)
        self._check_secret(comment, secret)
        nickname = _require_text(nickname, "Nickname", MAX_NICKNAME_LENGTH).strip()
        content = _require_text(content, "Content", MAX_CONTENT_LENGTH)

        comment.nickname = nickname
        comment.content = content
        comment.updated_at = utcnow()
        self.session.flush()
        return comment

    def delete_comment(self, comment_id: int, secret: str) -> int:
        """Delete a comment and every reply beneath it.

        Returns:
            Number of comments removed, including the target itself.
        """
        comment, post = self._visible_comment(comment_id)
        self._check_secret(comment, secret)

        subtree = self._collect_subtree(comment.id)
        self.session.execute(delete(Comment).where(Comment.id.in_(subtree)))
        self.session.flush()
        self._refresh_comment_count(post)
        logger.info(
            "Deleted comment %s and %d replies from post %s",
            comment_id,
            len(subtree) - 1,
            post.id,
        )
        return len(subtree)

    def list_comments(self, post_id: int) -> list[Comment]:
        """Return every comment on a visible post as a flat list, oldest first."""
        self.get_post(post_id)
        stmt = (
            select(Comment)
            .where(Comment.post_id == post_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(self.session.scalars(stmt))

    def list_replies(self, comment_id: int) -> list[Comment]:
        """Return the direct children of a comment, oldest first."""
        self._visible_comment(comment_id)
        stmt = (
            select(Comment)
            .where(Comment.parent_id == comment_id)
            .order_by(Comment.created_at.asc(), Comment.id.asc())
        )
        return list(self.session.scalars(stmt))

    # -- helpers ------------------------------------------------------------

    def _visible_comment(self, comment_id: int) -> tuple[Comment, Post]:
        # Callers check the password only after this succeeds.
        comment = self.get_comment(comment_id)
        return comment, self.get_post(comment.post_id)

    def _check_secret(self, comment: Comment, secret: str | None) -> None:
        if not secret or not verify_secret(secret, comment.secret_hash):
            logger.warning("Rejected password for comment %s", comment.id)
            raise AuthorizationError("Password does not match")

    def _collect_subtree(self, root_id: int) -> Sequence[int]:
        collected = [root_id]
        frontier = [root_id]
        while frontier:
            frontier = list(
                self.session.scalars(
                    select(Comment.id).where(Comment.parent_id.in_(frontier))
                )
            )
            collected.extend(frontier)
        return collected

    def _refresh_comment_count(self, post: Post) -> None:
        total = (
            select(func.count(Comment.id))
            .where(Comment.post_id == post.id)
            .scalar_subquery()
        )
        self.session.execute(
            update(Post)
            .where(Post.id == post.id)
            .values(comment_count=total)
            .execution_options(synchronize_session=False)
        )
        self.session.expire(post, ["comment_count"])
