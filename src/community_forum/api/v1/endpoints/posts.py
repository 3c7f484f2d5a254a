"""Post-related endpoints: listing, creation, likes, reports and comment threads."""

from fastapi import APIRouter, Query, status

from community_forum.api.v1.dependencies import (
    ClientKeyDep,
    EngagementTrackerDep,
    ModerationServiceDep,
    SessionDep,
    ThreadStoreDep,
)
from community_forum.models import Comment, Post, Report
from community_forum.schemas.comment import CommentCreate, CommentResponse, ThreadNodeResponse
from community_forum.schemas.like import LikeResponse, LikeStatusResponse
from community_forum.schemas.moderation import ReportCreate, ReportResponse
from community_forum.schemas.post import PostCreate, PostResponse
from community_forum.services.thread_tree import build_thread

router = APIRouter(prefix="/posts", tags=["posts"])


@router.get("", response_model=list[PostResponse])
async def list_posts(
    store: ThreadStoreDep,
    search: str | None = Query(None, description="Match against title or content"),
    category: str | None = Query(None, description="Filter by category"),
    limit: int = Query(50, ge=1, le=100, description="Maximum number of posts to return"),
    offset: int = Query(0, ge=0),
) -> list[Post]:
    """List visible posts: pinned, then recently popular, then newest."""
    return store.list_posts(search=search, category=category, limit=limit, offset=offset)


@router.post("", response_model=PostResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    store: ThreadStoreDep,
    db: SessionDep,
) -> Post:
    """Create an anonymous post.

    Raises:
        ValidationError: If title, content or category is missing or invalid
    """
    post = store.create_post(
        title=post_data.title,
        content=post_data.content,
        category=post_data.category,
        nickname=post_data.nickname,
    )
    db.commit()
    db.refresh(post)
    return post


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: int, store: ThreadStoreDep, db: SessionDep) -> Post:
    """Get a visible post and count the view."""
    post = store.view_post(post_id)
    db.commit()
    db.refresh(post)
    return post


@router.post("/{post_id}/like", response_model=LikeResponse)
async def toggle_like(
    post_id: int,
    tracker: EngagementTrackerDep,
    client_key: ClientKeyDep,
    db: SessionDep,
) -> LikeResponse:
    """Like a post, or withdraw the like when this client already likes it."""
    result = tracker.toggle_like(post_id, client_key)
    db.commit()
    return LikeResponse(
        message="Post liked" if result.liked else "Like removed",
        liked=result.liked,
        like_count=result.like_count,
    )


@router.get("/{post_id}/like", response_model=LikeStatusResponse)
async def get_like_status(
    post_id: int,
    tracker: EngagementTrackerDep,
    client_key: ClientKeyDep,
) -> LikeStatusResponse:
    """Report whether the calling client currently likes the post."""
    result = tracker.like_status(post_id, client_key)
    return LikeStatusResponse(liked=result.liked, like_count=result.like_count)


@router.post(
    "/{post_id}/report",
    response_model=ReportResponse,
    status_code=status.HTTP_201_CREATED,
)
async def report_post(
    post_id: int,
    report_data: ReportCreate,
    moderation: ModerationServiceDep,
    db: SessionDep,
) -> Report:
    """Flag a post, or one of its comments, for moderator review."""
    report = moderation.report_post(
        post_id,
        reason=report_data.reason,
        description=report_data.description,
        comment_id=report_data.comment_id,
    )
    db.commit()
    db.refresh(report)
    return report


@router.get("/{post_id}/comments", response_model=list[CommentResponse])
async def list_comments(post_id: int, store: ThreadStoreDep) -> list[Comment]:
    """Return all comments on a post as a flat list, oldest first.

    Clients rebuild the tree from ``parent_id``; see ``/comments/tree`` for a
    server-rendered version.
    """
    return store.list_comments(post_id)


@router.get("/{post_id}/comments/tree", response_model=list[ThreadNodeResponse])
async def get_comment_tree(post_id: int, store: ThreadStoreDep) -> list[ThreadNodeResponse]:
    """Return the comments of a post nested by reply."""
    comments = store.list_comments(post_id)
    return [
        ThreadNodeResponse.from_node(node)
        for node in build_thread(comments, store.max_depth)
    ]


@router.post(
    "/{post_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: int,
    comment_data: CommentCreate,
    store: ThreadStoreDep,
    db: SessionDep,
) -> Comment:
    """Write a comment, or a reply when ``parentId`` is supplied.

    Raises:
        ValidationError: If nickname, password or content is blank
        NotFoundError: If the post or parent comment does not exist
        DepthExceededError: If the reply would nest too deeply
    """
    comment = store.create_comment(
        post_id,
        nickname=comment_data.nickname,
        secret=comment_data.password,
        content=comment_data.content,
        parent_id=comment_data.parent_id,
    )
    db.commit()
    db.refresh(comment)
    return comment
