"""
Tests for the document repositories against the in-memory database.
"""

import pytest

from src.core.catalog.models import Comment, User, Video
from src.infrastructure.mongo import DocumentStoreError
from src.infrastructure.mongo.repositories import (
    CommentRepository,
    UserRepository,
    VideoRepository,
)


def make_video(created_at: str, user_id: str = "u1", **kwargs) -> Video:
    return Video(
        title=kwargs.pop("title", f"video {created_at}"),
        user_id=user_id,
        blob_url=f"mock://storage/videos/{created_at}.mp4",
        created_at=created_at,
        **kwargs,
    )


@pytest.fixture
def videos(document_store) -> VideoRepository:
    return VideoRepository(document_store.videos)


@pytest.fixture
def comments(document_store) -> CommentRepository:
    return CommentRepository(document_store.comments)


@pytest.fixture
def users(document_store) -> UserRepository:
    return UserRepository(document_store.users)


class TestVideoRepository:

    @pytest.mark.parametrize("order", [
        [0, 1, 2],
        [2, 1, 0],
        [1, 0, 2],
    ])
    def test_list_all_newest_first(self, videos, order):
        stamps = [
            "2024-01-01T00:00:00.000Z",
            "2024-06-01T00:00:00.000Z",
            "2025-01-01T00:00:00.000Z",
        ]
        for index in order:
            videos.create(make_video(stamps[index]))

        listed = [v.created_at for v in videos.list_all()]

        assert listed == sorted(stamps, reverse=True)

    def test_list_by_user_filters_and_orders(self, videos):
        videos.create(make_video("2024-01-01T00:00:00.000Z", user_id="alice"))
        videos.create(make_video("2024-02-01T00:00:00.000Z", user_id="bob"))
        videos.create(make_video("2024-03-01T00:00:00.000Z", user_id="alice"))

        listed = videos.list_by_user("alice")

        assert [v.user_id for v in listed] == ["alice", "alice"]
        assert listed[0].created_at > listed[1].created_at

    def test_round_trip_preserves_fields(self, videos):
        video = make_video("2024-01-01T00:00:00.000Z", description="waves")
        videos.create(video)

        assert videos.get_by_id(video.id) == video

    def test_get_missing_returns_none(self, videos):
        assert videos.get_by_id("missing") is None

    def test_increment_views_is_cumulative(self, videos):
        video = make_video("2024-01-01T00:00:00.000Z")
        videos.create(video)

        videos.increment_views(video.id)
        updated = videos.increment_views(video.id)

        assert updated.views == 2
        assert videos.get_by_id(video.id).views == 2

    def test_increment_missing_returns_none(self, videos):
        assert videos.increment_views("missing") is None

    def test_replace(self, videos):
        video = make_video("2024-01-01T00:00:00.000Z")
        videos.create(video)

        video.title = "renamed"
        assert videos.replace(video) is True
        assert videos.get_by_id(video.id).title == "renamed"

    def test_replace_missing_returns_false(self, videos):
        assert videos.replace(make_video("2024-01-01T00:00:00.000Z")) is False

    def test_delete(self, videos):
        video = make_video("2024-01-01T00:00:00.000Z")
        videos.create(video)

        assert videos.delete_by_id(video.id) is True
        assert videos.delete_by_id(video.id) is False
        assert videos.get_by_id(video.id) is None

    def test_duplicate_create_raises_store_error(self, videos):
        video = make_video("2024-01-01T00:00:00.000Z")
        videos.create(video)

        with pytest.raises(DocumentStoreError):
            videos.create(video)


class TestCommentRepository:

    def test_list_for_video_oldest_first(self, comments):
        comments.create(Comment(video_id="v1", user_id="a", text="second", created_at="2024-01-02T00:00:00.000Z"))
        comments.create(Comment(video_id="v1", user_id="a", text="first", created_at="2024-01-01T00:00:00.000Z"))
        comments.create(Comment(video_id="v2", user_id="a", text="other", created_at="2024-01-01T00:00:00.000Z"))

        listed = comments.list_for_video("v1")

        assert [c.text for c in listed] == ["first", "second"]

    def test_delete_for_video_only_touches_that_video(self, comments):
        comments.create(Comment(video_id="v1", user_id="a", text="x"))
        comments.create(Comment(video_id="v1", user_id="b", text="y"))
        keep = comments.create(Comment(video_id="v2", user_id="a", text="z"))

        assert comments.delete_for_video("v1") == 2
        assert comments.list_for_video("v1") == []
        assert comments.get_by_id(keep.id) is not None


class TestUserRepository:

    def test_create_if_absent_inserts_once(self, users):
        user = User(id="abc", username="alice", display_name="alice")

        assert users.create_if_absent(user) is True
        assert users.create_if_absent(User(id="abc", username="other", display_name="other")) is False

        assert users.get_by_id("abc").username == "alice"
