"""Moderation services for the forum.

These operations belong to the admin dashboard. They act on posts regardless
of visibility and never touch comment passwords.
"""
from __future__ import annotations

import logging

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

from community_forum.core.errors import NotFoundError, ValidationError
from community_forum.db.time import utcnow
from community_forum.models import REPORT_STATUSES, Comment, Post, PostLike, Report

__all__ = ["ModerationService"]

logger = logging.getLogger(__name__)

MAX_REASON_LENGTH = 200
MAX_DESCRIPTION_LENGTH = 2000


class ModerationService:
    """Service handling pinning, hiding, deletion and report triage."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def _get_post(self, post_id: int) -> Post:
        post = self.session.get(Post, post_id)
        if post is None:
            raise NotFoundError("Post not found")
        return post

    def list_all_posts(self) -> list[Post]:
        """Return every post, hidden ones included, newest first."""
        stmt = select(Post).order_by(Post.created_at.desc(), Post.id.desc())
        return list(self.session.scalars(stmt))

    def set_pinned(self, post_id: int, pinned: bool) -> Post:
        post = self._get_post(post_id)
        post.is_pinned = pinned
        post.updated_at = utcnow()
        self.session.flush()
        logger.info("Post %s pinned=%s", post_id, pinned)
        return post

    def set_hidden(self, post_id: int, hidden: bool) -> Post:
        post = self._get_post(post_id)
        post.is_hidden = hidden
        post.updated_at = utcnow()
        self.session.flush()
        logger.info("Post %s hidden=%s", post_id, hidden)
        return post

    def delete_post(self, post_id: int) -> None:
        """Remove a post together with its comments, likes and reports."""
        post = self._get_post(post_id)
        # Explicit deletes keep this independent of backend FK enforcement.
        self.session.execute(delete(Report).where(Report.post_id == post_id))
        self.session.execute(delete(PostLike).where(PostLike.post_id == post_id))
        # Children first so self-referencing FKs are never left dangling.
        self.session.execute(
            update(Comment)
            .where(Comment.post_id == post_id)
            .values(parent_id=None)
            .execution_options(synchronize_session=False)
        )
        self.session.execute(delete(Comment).where(Comment.post_id == post_id))
        self.session.delete(post)
        self.session.flush()
        logger.info("Deleted post %s", post_id)

    def report_post(
        self,
        post_id: int,
        reason: str,
        description: str | None = None,
        comment_id: int | None = None,
    ) -> Report:
        """File a report against a visible post or one of its comments."""
        if not reason or not reason.strip():
            raise ValidationError("Reason is required")
        if len(reason) > MAX_REASON_LENGTH:
            raise ValidationError(f"Reason must be at most {MAX_REASON_LENGTH} characters")
        if description is not None and len(description) > MAX_DESCRIPTION_LENGTH:
            raise ValidationError(
                f"Description must be at most {MAX_DESCRIPTION_LENGTH} characters"
            )

        post = self._get_post(post_id)
        if post.is_hidden:
            raise NotFoundError("Post not found")
        if comment_id is not None:
            comment = self.session.get(Comment, comment_id)
            if comment is None or comment.post_id != post_id:
                raise NotFoundError("Comment not found")

        report = Report(
            post_id=post_id,
            comment_id=comment_id,
            reason=reason.strip(),
            description=description,
        )
        post.is_reported = True
        self.session.add(report)
        self.session.flush()
        logger.info("Report %s filed against post %s", report.id, post_id)
        return report

    def list_reports(self, status: str | None = None) -> list[Report]:
        stmt = select(Report)
        if status is not None:
            if status not in REPORT_STATUSES:
                raise ValidationError(f"Unknown report status '{status}'")
            stmt = stmt.where(Report.status == status)
        stmt = stmt.order_by(Report.created_at.desc(), Report.id.desc())
        return list(self.session.scalars(stmt))

    def update_report_status(self, report_id: int, status: str) -> Report:
        if status not in REPORT_STATUSES:
            raise ValidationError(f"Unknown report status '{status}'")
        report = self.session.get(Report, report_id)
        if report is None:
            raise NotFoundError("Report not found")
        report.status = status
        report.updated_at = utcnow()
        self.session.flush()
        logger.info("Report %s marked %s", report_id, status)
        return report
