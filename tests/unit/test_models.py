"""
Unit tests for the catalog domain models.

These tests verify the core business rules without touching
external services (no API calls, no database, no file system).
"""

import re

import pytest

from src.core.catalog.models import Comment, Principal, Video, utc_now_iso


ISO_MILLIS = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


class TestVideo:
    """Tests for the Video model."""

    def test_new_video_defaults(self):
        """A new video starts with no views, empty description, fresh id."""
        video = Video(title="Surf", user_id="u1", blob_url="mock://storage/videos/a.mp4")

        assert video.views == 0
        assert video.description == ""
        assert video.id
        assert ISO_MILLIS.match(video.created_at)

    def test_ids_are_unique(self):
        ids = {
            Video(title="t", user_id="u", blob_url="x").id
            for _ in range(100)
        }
        assert len(ids) == 100

    def test_rejects_blank_title(self):
        with pytest.raises(ValueError, match="title"):
            Video(title="  ", user_id="u1", blob_url="x")

    def test_rejects_negative_views(self):
        with pytest.raises(ValueError, match="negative"):
            Video(title="t", user_id="u1", blob_url="x", views=-1)


class TestComment:
    """Tests for the Comment model."""

    def test_user_name_defaults_to_user_id(self):
        comment = Comment(video_id="v1", user_id="alice", text="Nice")
        assert comment.user_name == "alice"

    def test_explicit_user_name_is_kept(self):
        comment = Comment(video_id="v1", user_id="alice", text="Nice", user_name="Alice A.")
        assert comment.user_name == "Alice A."

    def test_rejects_empty_text(self):
        with pytest.raises(ValueError, match="empty"):
            Comment(video_id="v1", user_id="alice", text="")

    def test_authorship(self):
        comment = Comment(video_id="v1", user_id="alice", text="Nice")

        assert comment.is_authored_by("alice")
        assert not comment.is_authored_by("bob")
        assert not comment.is_authored_by(None)


class TestPrincipal:

    def test_to_user_copies_details(self):
        principal = Principal(user_id="abc", user_details="alice@example.com", email="alice@example.com")

        user = principal.to_user()

        assert user.id == "abc"
        assert user.username == "alice@example.com"
        assert user.display_name == "alice@example.com"
        assert user.email == "alice@example.com"


def test_timestamps_sort_chronologically():
    """Fixed-width ISO strings compare the same way as the times they encode."""
    first = utc_now_iso()
    second = utc_now_iso()
    assert first <= second
