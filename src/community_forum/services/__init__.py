"""Business logic services for the community forum."""

from .engagement import EngagementTracker, LikeResult, client_identity
from .moderation import ModerationService
from .nickname import generate_nickname
from .thread_store import ThreadStore
from .thread_tree import ThreadNode, build_thread

__all__ = [
    "EngagementTracker",
    "LikeResult",
    "ModerationService",
    "ThreadNode",
    "ThreadStore",
    "build_thread",
    "client_identity",
    "generate_nickname",
]
