"""Tests for the thread store: posts, comments, depth and password rules."""

import re
from datetime import timedelta

import pytest
from sqlalchemy import select

from community_forum.core.errors import (
    AuthorizationError,
    DepthExceededError,
    NotFoundError,
    ValidationError,
)
from community_forum.core.security import verify_secret
from community_forum.db.time import utcnow
from community_forum.models import Comment
from community_forum.services.nickname import ADJECTIVES, NOUNS
from community_forum.services.thread_store import ThreadStore

NICKNAME_PATTERN = re.compile(
    rf"^({'|'.join(ADJECTIVES)})({'|'.join(NOUNS)})\d{{1,4}}$"
)


def test_create_post_generates_nickname(store) -> None:
    """A post without a nickname gets <adjective><noun><digits>."""
    post = store.create_post("T", "B", "free")

    assert NICKNAME_PATTERN.match(post.nickname)
    assert post.like_count == 0
    assert post.view_count == 0
    assert post.comment_count == 0
    assert post.is_reported is False
    assert post.is_hidden is False


def test_create_post_blank_nickname_is_generated(store) -> None:
    post = store.create_post("T", "B", "info", nickname="   ")
    assert NICKNAME_PATTERN.match(post.nickname)


def test_create_post_keeps_supplied_nickname(store) -> None:
    post = store.create_post("T", "B", "notice", nickname="관리자")
    assert post.nickname == "관리자"


@pytest.mark.parametrize(
    ("title", "content", "category"),
    [
        ("", "B", "free"),
        ("T", "   ", "free"),
        ("T", "B", ""),
        ("T", "B", "gossip"),
    ],
)
def test_create_post_validation(store, title, content, category) -> None:
    with pytest.raises(ValidationError):
        store.create_post(title, content, category)


def test_get_post_hidden_is_not_found(store, test_post) -> None:
    test_post.is_hidden = True

    with pytest.raises(NotFoundError):
        store.get_post(test_post.id)
    assert store.get_post(test_post.id, include_hidden=True) is test_post


def test_view_post_increments_view_count(store, test_post) -> None:
    store.view_post(test_post.id)
    post = store.view_post(test_post.id)
    assert post.view_count == 2


def test_nesting_up_to_max_depth(store, test_post) -> None:
    """A (0) -> B (1) -> C (2) -> D (3) succeed; E under D fails."""
    a = store.create_comment(test_post.id, "a", "pw", "top")
    b = store.create_comment(test_post.id, "b", "pw", "reply 1", parent_id=a.id)
    c = store.create_comment(test_post.id, "c", "pw", "reply 2", parent_id=b.id)
    d = store.create_comment(test_post.id, "d", "pw", "reply 3", parent_id=c.id)

    assert [store.comment_depth(x) for x in (a, b, c, d)] == [0, 1, 2, 3]

    with pytest.raises(DepthExceededError) as excinfo:
        store.create_comment(test_post.id, "e", "pw", "reply 4", parent_id=d.id)
    assert "3" in str(excinfo.value)
    assert excinfo.value.max_depth == 3


def test_depth_limit_is_configurable(db_session, test_post) -> None:
    shallow = ThreadStore(db_session, max_depth=1)
    top = shallow.create_comment(test_post.id, "a", "pw", "top")
    reply = shallow.create_comment(test_post.id, "b", "pw", "reply", parent_id=top.id)

    with pytest.raises(DepthExceededError):
        shallow.create_comment(test_post.id, "c", "pw", "too deep", parent_id=reply.id)


def test_create_comment_increments_comment_count(store, test_post) -> None:
    first = store.create_comment(test_post.id, "a", "pw", "one")
    store.create_comment(test_post.id, "b", "pw", "two", parent_id=first.id)

    assert test_post.comment_count == 2


@pytest.mark.parametrize(
    ("nickname", "secret", "content"),
    [("", "pw", "body"), ("nick", "", "body"), ("nick", "pw", " ")],
)
def test_create_comment_validation(store, test_post, nickname, secret, content) -> None:
    with pytest.raises(ValidationError):
        store.create_comment(test_post.id, nickname, secret, content)


def test_create_comment_missing_post(store) -> None:
    with pytest.raises(NotFoundError):
        store.create_comment(99999, "n", "pw", "body")


def test_create_comment_missing_parent(store, test_post) -> None:
    with pytest.raises(NotFoundError):
        store.create_comment(test_post.id, "n", "pw", "body", parent_id=99999)


def test_create_comment_cross_post_parent(store, test_post, other_post) -> None:
    """A parent from another post is rejected the same way as a missing one."""
    foreign = store.create_comment(other_post.id, "n", "pw", "elsewhere")

    with pytest.raises(NotFoundError, match="Parent comment not found"):
        store.create_comment(test_post.id, "n", "pw", "body", parent_id=foreign.id)
    assert test_post.comment_count == 0


def test_create_comment_on_hidden_post(store, test_post) -> None:
    test_post.is_hidden = True
    with pytest.raises(NotFoundError):
        store.create_comment(test_post.id, "n", "pw", "body")


def test_secret_is_not_stored_in_plain_text(store, test_comment) -> None:
    assert test_comment.secret_hash != "s1"
    assert verify_secret("s1", test_comment.secret_hash)


def test_edit_comment_round_trip(store, test_post, test_comment) -> None:
    reply = store.create_comment(test_post.id, "n2", "s2", "reply", parent_id=test_comment.id)
    original_hash = reply.secret_hash

    store.edit_comment(reply.id, "s2", "renamed", "edited body")

    listed = {c.id: c for c in store.list_comments(test_post.id)}
    edited = listed[reply.id]
    assert edited.nickname == "renamed"
    assert edited.content == "edited body"
    assert edited.post_id == test_post.id
    assert edited.parent_id == test_comment.id
    assert edited.secret_hash == original_hash
    assert verify_secret("s2", edited.secret_hash)


def test_edit_comment_updates_timestamp(store, test_comment) -> None:
    test_comment.updated_at = utcnow() - timedelta(hours=1)
    before = test_comment.updated_at

    edited = store.edit_comment(test_comment.id, "s1", "n1", "changed")
    assert edited.updated_at > before


def test_edit_comment_wrong_secret_leaves_comment_untouched(store, test_comment) -> None:
    before = (test_comment.nickname, test_comment.content, test_comment.updated_at)

    with pytest.raises(AuthorizationError):
        store.edit_comment(test_comment.id, "wrong", "hacker", "defaced")

    assert (test_comment.nickname, test_comment.content, test_comment.updated_at) == before


def test_edit_comment_empty_secret_is_rejected(store, test_comment) -> None:
    with pytest.raises(AuthorizationError):
        store.edit_comment(test_comment.id, "", "n1", "changed")


def test_edit_missing_comment(store) -> None:
    with pytest.raises(NotFoundError):
        store.edit_comment(99999, "s1", "n", "c")


def test_delete_comment_wrong_secret(store, test_post, test_comment) -> None:
    with pytest.raises(AuthorizationError):
        store.delete_comment(test_comment.id, "nope")

    assert [c.id for c in store.list_comments(test_post.id)] == [test_comment.id]


def test_delete_comment_cascades_to_replies(store, test_post, test_comment) -> None:
    """Deleting C1 with its own password also removes the reply C2."""
    c2 = store.create_comment(test_post.id, "n2", "s2", "reply", parent_id=test_comment.id)
    c3 = store.create_comment(test_post.id, "n3", "s3", "deeper", parent_id=c2.id)
    sibling = store.create_comment(test_post.id, "n4", "s4", "sibling")

    with pytest.raises(AuthorizationError):
        store.delete_comment(test_comment.id, "s2")

    removed = store.delete_comment(test_comment.id, "s1")

    assert removed == 3
    remaining = store.list_comments(test_post.id)
    assert [c.id for c in remaining] == [sibling.id]
    assert test_post.comment_count == 1
    ids = set(store.session.scalars(select(Comment.id)))
    assert c2.id not in ids
    assert c3.id not in ids


def test_delete_reply_keeps_parent(store, test_post, test_comment) -> None:
    reply = store.create_comment(test_post.id, "n2", "s2", "reply", parent_id=test_comment.id)

    assert store.delete_comment(reply.id, "s2") == 1
    assert [c.id for c in store.list_comments(test_post.id)] == [test_comment.id]


def test_list_comments_is_flat_and_oldest_first(store, test_post, test_comment) -> None:
    c2 = store.create_comment(test_post.id, "n2", "s2", "reply", parent_id=test_comment.id)
    c3 = store.create_comment(test_post.id, "n3", "s3", "second top")

    comments = store.list_comments(test_post.id)

    assert [c.id for c in comments] == [test_comment.id, c2.id, c3.id]
    assert comments[0].parent_id is None
    assert comments[1].parent_id == test_comment.id


def test_list_comments_only_for_own_post(store, test_post, other_post, test_comment) -> None:
    store.create_comment(other_post.id, "x", "pw", "elsewhere")
    assert [c.id for c in store.list_comments(test_post.id)] == [test_comment.id]


def test_list_replies_one_level(store, test_post, test_comment) -> None:
    child = store.create_comment(test_post.id, "n2", "s2", "child", parent_id=test_comment.id)
    store.create_comment(test_post.id, "n3", "s3", "grandchild", parent_id=child.id)

    assert [c.id for c in store.list_replies(test_comment.id)] == [child.id]


def test_list_posts_excludes_hidden(store, test_post, other_post) -> None:
    other_post.is_hidden = True
    store.session.flush()

    assert [p.id for p in store.list_posts()] == [test_post.id]
    assert {p.id for p in store.list_posts(include_hidden=True)} == {test_post.id, other_post.id}


def test_list_posts_filters(store, test_post, other_post) -> None:
    assert [p.id for p in store.list_posts(category="question")] == [other_post.id]
    assert [p.id for p in store.list_posts(search="hello")] == [test_post.id]
    assert [p.id for p in store.list_posts(search="SECOND")] == [other_post.id]
    assert store.list_posts(search="100%") == []


def test_list_posts_ranking(store) -> None:
    now = utcnow()
    old = store.create_post("old", "b", "free")
    old.created_at = now - timedelta(days=10)
    old_popular = store.create_post("old popular", "b", "free")
    old_popular.created_at = now - timedelta(days=9)
    old_popular.like_count = 50
    newest = store.create_post("newest", "b", "free")
    newest.created_at = now - timedelta(minutes=1)
    popular = store.create_post("popular", "b", "free")
    popular.created_at = now - timedelta(days=1)
    popular.like_count = 12
    more_popular = store.create_post("more popular", "b", "free")
    more_popular.created_at = now - timedelta(days=2)
    more_popular.like_count = 20
    pinned = store.create_post("pinned", "b", "notice")
    pinned.created_at = now - timedelta(days=30)
    pinned.is_pinned = True
    store.session.flush()

    titles = [p.title for p in store.list_posts(now=now)]

    assert titles == ["pinned", "more popular", "popular", "newest", "old popular", "old"]


def test_list_posts_pagination(store) -> None:
    for i in range(5):
        store.create_post(f"post {i}", "b", "free")

    first = store.list_posts(limit=2)
    second = store.list_posts(limit=2, offset=2)
    assert len(first) == 2
    assert len(second) == 2
    assert not {p.id for p in first} & {p.id for p in second}


def test_comments_on_hidden_post_cannot_be_changed(store, test_post, test_comment) -> None:
    """Editing or deleting under a hidden post reports the comment as not found."""
    test_post.is_hidden = True
    store.session.flush()

    with pytest.raises(NotFoundError):
        store.edit_comment(test_comment.id, "s1", "n2", "changed")
    with pytest.raises(NotFoundError):
        store.delete_comment(test_comment.id, "s1")
    with pytest.raises(NotFoundError):
        store.delete_comment(test_comment.id, "wrong")

    assert test_comment.content == "hello"
    assert store.session.get(Comment, test_comment.id) is test_comment
