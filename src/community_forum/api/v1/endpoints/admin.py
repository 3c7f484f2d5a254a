"""Moderation endpoints for the admin dashboard.

Every route requires a moderator bearer token; see ``scripts/tokens.py``.
"""

from fastapi import APIRouter, Query, Response, status

from community_forum.api.v1.dependencies import ModerationServiceDep, ModeratorDep, SessionDep
from community_forum.models import Post, Report
from community_forum.schemas.moderation import (
    HiddenUpdate,
    PinUpdate,
    ReportResponse,
    ReportStatusUpdate,
)
from community_forum.schemas.post import AdminPostResponse

router = APIRouter(prefix="/admin", tags=["moderation"])


@router.get("/posts", response_model=list[AdminPostResponse])
async def list_all_posts(
    moderator: ModeratorDep,
    moderation: ModerationServiceDep,
) -> list[Post]:
    """List every post, hidden ones included."""
    return moderation.list_all_posts()


@router.put("/posts/{post_id}/pin", response_model=AdminPostResponse)
async def pin_post(
    post_id: int,
    pin_data: PinUpdate,
    moderator: ModeratorDep,
    moderation: ModerationServiceDep,
    db: SessionDep,
) -> Post:
    """Pin or unpin a post at the top of the listing."""
    post = moderation.set_pinned(post_id, pin_data.is_pinned)
    db.commit()
    db.refresh(post)
    return post


@router.put("/posts/{post_id}/hide", response_model=AdminPostResponse)
async def hide_post(
    post_id: int,
    hidden_data: HiddenUpdate,
    moderator: ModeratorDep,
    moderation: ModerationServiceDep,
    db: SessionDep,
) -> Post:
    """Hide a post from public view, or restore it."""
    post = moderation.set_hidden(post_id, hidden_data.is_hidden)
    db.commit()
    db.refresh(post)
    return post


@router.delete("/posts/{post_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_post(
    post_id: int,
    moderator: ModeratorDep,
    moderation: ModerationServiceDep,
    db: SessionDep,
) -> Response:
    """Delete a post with all of its comments, likes and reports."""
    moderation.delete_post(post_id)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/reports", response_model=list[ReportResponse])
async def list_reports(
    moderator: ModeratorDep,
    moderation: ModerationServiceDep,
    report_status: str | None = Query(None, alias="status"),
) -> list[Report]:
    """List reports, newest first, optionally filtered by status."""
    return moderation.list_reports(report_status)


@router.put("/reports/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: int,
    status_data: ReportStatusUpdate,
    moderator: ModeratorDep,
    moderation: ModerationServiceDep,
    db: SessionDep,
) -> Report:
    """Mark a report as pending, resolved or dismissed."""
    report = moderation.update_report_status(report_id, status_data.status)
    db.commit()
    db.refresh(report)
    return report
