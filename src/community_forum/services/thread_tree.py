"""Read-time reconstruction of comment trees.

The store hands out comments as a flat list; this module rebuilds the nesting
from ``parent_id`` links, bounded by the same depth used when writing.
"""
from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass, field

from community_forum.models import Comment

__all__ = ["ThreadNode", "build_thread", "flatten_thread"]


@dataclass
class ThreadNode:
    """A comment together with the replies rendered beneath it."""

    comment: Comment
    depth: int
    can_reply: bool
    replies: list[ThreadNode] = field(default_factory=list)


def build_thread(comments: Iterable[Comment], max_depth: int) -> list[ThreadNode]:
    """Group comments by parent and nest them, oldest first at every level.

    Comments below ``max_depth`` are not rendered, and neither are comments
    whose parent is missing from ``comments``.
    """
    children: dict[int | None, list[Comment]] = defaultdict(list)
    for comment in comments:
        children[comment.parent_id].append(comment)

    def _render(parent_id: int | None, depth: int) -> list[ThreadNode]:
        if depth > max_depth:
            return []
        return [
            ThreadNode(
                comment=child,
                depth=depth,
                can_reply=depth < max_depth,
                replies=_render(child.id, depth + 1),
            )
            for child in children.get(parent_id, [])
        ]

    return _render(None, 0)


def flatten_thread(nodes: Iterable[ThreadNode]) -> list[ThreadNode]:
    """Return nodes in display order (depth-first, pre-order)."""
    ordered: list[ThreadNode] = []
    stack = list(reversed(list(nodes)))
    while stack:
        node = stack.pop()
        ordered.append(node)
        stack.extend(reversed(node.replies))
    return ordered
