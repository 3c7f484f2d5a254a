# tests/services/test_engagement.py
"""Tests for like toggling and requester identity."""

import pytest

from community_forum.core.errors import NotFoundError, ValidationError
from community_forum.models import PostLike
from community_forum.services.engagement import EngagementTracker, client_identity


def test_first_toggle_likes(tracker: EngagementTracker, test_post) -> None:
    result = tracker.toggle_like(test_post.id, "10.0.0.1")

    assert result.liked is True
    assert result.like_count == 1
    assert test_post.like_count == 1
    assert tracker.has_liked(test_post.id, "10.0.0.1")


def test_second_toggle_unlikes(tracker: EngagementTracker, test_post) -> None:
    """Toggling twice from one key restores the original count."""
    before = test_post.like_count

    tracker.toggle_like(test_post.id, "10.0.0.1")
    result = tracker.toggle_like(test_post.id, "10.0.0.1")

    assert result.liked is False
    assert result.like_count == before
    assert not tracker.has_liked(test_post.id, "10.0.0.1")


def test_distinct_keys_count_separately(tracker: EngagementTracker, test_post) -> None:
    tracker.toggle_like(test_post.id, "10.0.0.1")
    result = tracker.toggle_like(test_post.id, "10.0.0.2")

    assert result.liked is True
    assert result.like_count == 2


def test_like_count_matches_rows(tracker: EngagementTracker, test_post, db_session) -> None:
    for key in ("a", "b", "c", "a"):
        tracker.toggle_like(test_post.id, key)

    rows = db_session.query(PostLike).filter(PostLike.post_id == test_post.id).count()
    assert rows == 2
    assert test_post.like_count == rows


def test_likes_are_per_post(tracker: EngagementTracker, test_post, other_post) -> None:
    tracker.toggle_like(test_post.id, "10.0.0.1")
    result = tracker.toggle_like(other_post.id, "10.0.0.1")

    assert result.liked is True
    assert result.like_count == 1
    assert test_post.like_count == 1


def test_concurrent_duplicate_like_becomes_unlike(
    tracker: EngagementTracker, test_post, db_session, monkeypatch
) -> None:
    """A like that loses the insert race to the same key withdraws the like instead."""
    db_session.add(PostLike(post_id=test_post.id, client_key="other"))
    db_session.add(PostLike(post_id=test_post.id, client_key="10.0.0.1"))
    db_session.flush()

    real_remove = tracker._remove
    calls = []

    def remove_after_race(post_id, client_key):
        # The first lookup misses the row a concurrent request just wrote.
        calls.append(client_key)
        if len(calls) == 1:
            return False
        return real_remove(post_id, client_key)

    monkeypatch.setattr(tracker, "_remove", remove_after_race)

    result = tracker.toggle_like(test_post.id, "10.0.0.1")

    assert len(calls) == 2
    assert result.liked is False
    rows = db_session.query(PostLike).filter(PostLike.post_id == test_post.id).count()
    assert rows == 1
    assert result.like_count == rows
    assert test_post.like_count == rows
    assert not tracker.has_liked(test_post.id, "10.0.0.1")


def test_toggle_missing_post(tracker: EngagementTracker) -> None:
    with pytest.raises(NotFoundError):
        tracker.toggle_like(99999, "10.0.0.1")


def test_toggle_hidden_post(tracker: EngagementTracker, test_post, db_session) -> None:
    test_post.is_hidden = True
    db_session.flush()

    with pytest.raises(NotFoundError):
        tracker.toggle_like(test_post.id, "10.0.0.1")


def test_toggle_requires_key(tracker: EngagementTracker, test_post) -> None:
    with pytest.raises(ValidationError):
        tracker.toggle_like(test_post.id, "")


def test_like_status(tracker: EngagementTracker, test_post) -> None:
    assert tracker.like_status(test_post.id, "k").liked is False

    tracker.toggle_like(test_post.id, "k")
    status = tracker.like_status(test_post.id, "k")

    assert status.liked is True
    assert status.like_count == 1
    assert tracker.like_status(test_post.id, "other").liked is False


def test_client_identity_prefers_forwarded_for() -> None:
    headers = {"x-forwarded-for": "203.0.113.5, 10.0.0.1", "x-real-ip": "198.51.100.7"}
    assert client_identity(headers, "127.0.0.1") == "203.0.113.5"


def test_client_identity_falls_back_to_real_ip() -> None:
    assert client_identity({"x-real-ip": "198.51.100.7"}, "127.0.0.1") == "198.51.100.7"


def test_client_identity_uses_peer() -> None:
    assert client_identity({}, "127.0.0.1") == "127.0.0.1"


def test_client_identity_unknown() -> None:
    assert client_identity({}, None) == "unknown"


def test_client_identity_ignores_forwarded_when_untrusted() -> None:
    headers = {"x-forwarded-for": "203.0.113.5", "x-real-ip": "198.51.100.7"}
    assert client_identity(headers, "127.0.0.1", trust_forwarded=False) == "127.0.0.1"


def test_client_identity_truncates_long_values() -> None:
    key = client_identity({"x-forwarded-for": "x" * 200}, None)
    assert len(key) == 64
