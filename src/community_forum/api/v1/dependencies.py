"""Shared API dependencies for moderation access and requester identity."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError
from sqlalchemy.orm import Session

from community_forum.core.security import decode_moderator_token
from community_forum.core.settings import settings
from community_forum.db.session import get_db
from community_forum.services.engagement import EngagementTracker, client_identity
from community_forum.services.moderation import ModerationService
from community_forum.services.thread_store import ThreadStore

# HTTP Bearer scheme for moderator tokens
bearer_scheme = HTTPBearer()

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_current_moderator(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(bearer_scheme)],
) -> str:
    """Return the moderator subject from a bearer token.

    Raises:
        HTTPException: If the token is invalid, expired, or not a moderator token
    """
    try:
        return decode_moderator_token(credentials.credentials)
    except JWTError as err:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate moderator credentials",
        ) from err


def get_client_key(request: Request) -> str:
    """Return the best-effort network identity of the caller."""
    peer = request.client.host if request.client else None
    return client_identity(
        request.headers,
        peer,
        trust_forwarded=settings.trust_forwarded_headers,
    )


# Type aliases for the dependencies above
ModeratorDep = Annotated[str, Depends(get_current_moderator)]
ClientKeyDep = Annotated[str, Depends(get_client_key)]


def get_thread_store(db: SessionDep) -> ThreadStore:
    """Return a thread store bound to the request session."""
    return ThreadStore(db)


def get_engagement_tracker(db: SessionDep) -> EngagementTracker:
    """Return an engagement tracker bound to the request session."""
    return EngagementTracker(db)


def get_moderation_service(db: SessionDep) -> ModerationService:
    """Return a moderation service bound to the request session."""
    return ModerationService(db)


ThreadStoreDep = Annotated[ThreadStore, Depends(get_thread_store)]
EngagementTrackerDep = Annotated[EngagementTracker, Depends(get_engagement_tracker)]
ModerationServiceDep = Annotated[ModerationService, Depends(get_moderation_service)]
