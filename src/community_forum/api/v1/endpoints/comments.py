"""Comment endpoints gated by the password set when the comment was written."""

from fastapi import APIRouter, Response, status

from community_forum.api.v1.dependencies import SessionDep, ThreadStoreDep
from community_forum.models import Comment
from community_forum.schemas.comment import CommentDelete, CommentResponse, CommentUpdate

router = APIRouter(prefix="/comments", tags=["comments"])


@router.put("/{comment_id}", response_model=CommentResponse)
async def edit_comment(
    comment_id: int,
    update_data: CommentUpdate,
    store: ThreadStoreDep,
    db: SessionDep,
) -> Comment:
    """Change a comment's nickname and content.

    Raises:
        NotFoundError: If the comment does not exist
        AuthorizationError: If the password does not match
    """
    comment = store.edit_comment(
        comment_id,
        secret=update_data.password,
        nickname=update_data.nickname,
        content=update_data.content,
    )
    db.commit()
    db.refresh(comment)
    return comment


@router.delete("/{comment_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_comment(
    comment_id: int,
    delete_data: CommentDelete,
    store: ThreadStoreDep,
    db: SessionDep,
) -> Response:
    """Delete a comment and all replies beneath it."""
    store.delete_comment(comment_id, secret=delete_data.password)
    db.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{comment_id}/replies", response_model=list[CommentResponse])
async def list_replies(comment_id: int, store: ThreadStoreDep) -> list[Comment]:
    """Return the direct replies to a comment (one level only)."""
    return store.list_replies(comment_id)
