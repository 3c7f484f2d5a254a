"""Engagement Tracker: one like per post and network identity.

A like is a ``post_like`` row; ``Post.like_count`` is rewritten from the row
count inside the same transaction, so the counter can never drift from the
rows. Identity is the requester's address, which is a heuristic, not
authentication: clients behind one NAT share a key and headers can be forged.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from community_forum.core.errors import NotFoundError, ValidationError
from community_forum.models import Post, PostLike

__all__ = ["EngagementTracker", "LikeResult", "client_identity"]

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"
MAX_CLIENT_KEY_LENGTH = 64


@dataclass(frozen=True)
class LikeResult:
    """Outcome of a like toggle or lookup."""

    liked: bool
    like_count: int


def client_identity(
    headers: Mapping[str, str],
    peer_host: str | None,
    *,
    trust_forwarded: bool = True,
) -> str:
    """Derive the best-effort identifying key for a request.

    Uses the first address of ``X-Forwarded-For``, then ``X-Real-IP``, then the
    socket peer. Forwarded headers are ignored unless ``trust_forwarded`` is set.
    """
    if trust_forwarded:
        forwarded = headers.get("x-forwarded-for", "")
        first = forwarded.split(",")[0].strip()
        if first:
            return first[:MAX_CLIENT_KEY_LENGTH]
        real_ip = headers.get("x-real-ip", "").strip()
        if real_ip:
            return real_ip[:MAX_CLIENT_KEY_LENGTH]
    if peer_host:
        return peer_host[:MAX_CLIENT_KEY_LENGTH]
    return UNKNOWN_CLIENT


class EngagementTracker:
    """Toggle-style likes keyed by ``(post_id, client_key)``."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def toggle_like(self, post_id: int, client_key: str) -> LikeResult:
        """Like the post if this key has not yet, otherwise remove the like.

        Raises:
            NotFoundError: If the post does not exist or is hidden.
        """
        if not client_key:
            raise ValidationError("Client key is required")
        post = self._lock_post(post_id)

        if self._remove(post_id, client_key):
            liked = False
        else:
            try:
                with self.session.begin_nested():
                    self.session.add(PostLike(post_id=post_id, client_key=client_key))
                liked = True
            except IntegrityError:
                # A concurrent request from the same key liked first; this one unlikes.
                logger.info("Concurrent like on post %s; treating as unlike", post_id)
                self._remove(post_id, client_key)
                liked = False

        count = self._refresh_like_count(post)
        logger.info("Post %s %s; %d likes", post_id, "liked" if liked else "unliked", count)
        return LikeResult(liked=liked, like_count=count)

    def has_liked(self, post_id: int, client_key: str) -> bool:
        stmt = select(PostLike.id).where(
            PostLike.post_id == post_id,
            PostLike.client_key == client_key,
        )
        return self.session.scalars(stmt).first() is not None

    def like_status(self, post_id: int, client_key: str) -> LikeResult:
        """Report whether ``client_key`` currently likes a visible post."""
        post = self._visible_post(post_id)
        return LikeResult(liked=self.has_liked(post_id, client_key), like_count=post.like_count)

    def _visible_post(self, post_id: int) -> Post:
        post = self.session.get(Post, post_id)
        if post is None or post.is_hidden:
            raise NotFoundError("Post not found")
        return post

    def _lock_post(self, post_id: int) -> Post:
        # Serializes toggles on the same post where the backend supports row locks.
        post = self.session.scalars(
            select(Post).where(Post.id == post_id).with_for_update()
        ).first()
        if post is None or post.is_hidden:
            raise NotFoundError("Post not found")
        return post

    def _remove(self, post_id: int, client_key: str) -> bool:
        result = self.session.execute(
            delete(PostLike)
            .where(PostLike.post_id == post_id, PostLike.client_key == client_key)
            .execution_options(synchronize_session=False)
        )
        return bool(result.rowcount)

    def _refresh_like_count(self, post: Post) -> int:
        self.session.flush()
        total = (
            select(func.count(PostLike.id))
            .where(PostLike.post_id == post.id)
            .scalar_subquery()
        )
        self.session.execute(
            update(Post)
            .where(Post.id == post.id)
            .values(like_count=total)
            .execution_options(synchronize_session=False)
        )
        self.session.expire(post, ["like_count"])
        return post.like_count
