"""
Tests for the catalog services.

Services get in-memory adapters; a few tests wrap them to inject
failures or interleavings the real stores could produce.
"""

import asyncio

import pytest

from src.core.catalog import (
    CascadeDeleteError,
    CommentNotFoundError,
    CommentOwnershipError,
    CommentService,
    IdentityError,
    Principal,
    UserService,
    VideoNotFoundError,
    VideoService,
)
from src.core.catalog.videos import object_name_from_url
from src.infrastructure.mongo import DocumentStoreError
from src.infrastructure.mongo.repositories import (
    CommentRepository,
    UserRepository,
    VideoRepository,
)
from src.infrastructure.storage import MockStorageClient, StorageError


@pytest.fixture
def storage() -> MockStorageClient:
    return MockStorageClient()


@pytest.fixture
def videos(document_store) -> VideoRepository:
    return VideoRepository(document_store.videos)


@pytest.fixture
def comments(document_store) -> CommentRepository:
    return CommentRepository(document_store.comments)


@pytest.fixture
def video_service(storage, videos, comments) -> VideoService:
    return VideoService(storage=storage, videos=videos, comments=comments)


@pytest.fixture
def comment_service(comments, videos) -> CommentService:
    return CommentService(comments=comments, videos=videos)


def upload(service: VideoService, title: str = "Clip", user_id: str = "alice"):
    return asyncio.run(service.upload_video(
        title=title,
        user_id=user_id,
        filename="my clip.mp4",
        data=b"\x00\x01",
        content_type="video/mp4",
    ))


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------

class TestUploadVideo:

    def test_upload_stores_object_and_record(self, video_service, storage, videos):
        video = upload(video_service)

        assert video.views == 0
        assert videos.get_by_id(video.id) == video
        name = object_name_from_url(video.blob_url)
        assert name.endswith("-my_clip.mp4")
        assert asyncio.run(storage.read(name)) == b"\x00\x01"
        assert storage.container_ready

    def test_missing_content_type_defaults(self, video_service, storage):
        video = asyncio.run(video_service.upload_video(
            title="t", user_id="u", filename="a.bin", data=b"x", content_type=None,
        ))

        name = object_name_from_url(video.blob_url)
        assert storage.content_type_of(name) == "application/octet-stream"

    def test_record_failure_leaves_object(self, storage, comments):
        class BrokenVideos:
            def create(self, video):
                raise DocumentStoreError("insert failed")

        service = VideoService(storage=storage, videos=BrokenVideos(), comments=comments)

        with pytest.raises(DocumentStoreError):
            upload(service)

        assert len(storage.object_names) == 1


class TestGetVideo:

    def test_get_counts_views(self, video_service):
        video = upload(video_service)

        asyncio.run(video_service.get_video(video.id))
        again = asyncio.run(video_service.get_video(video.id))

        assert again.views == 2

    def test_get_missing(self, video_service):
        with pytest.raises(VideoNotFoundError):
            asyncio.run(video_service.get_video("missing"))

    def test_concurrent_reads_never_overcount(self, video_service, videos):
        """N concurrent reads add at most N views."""
        video = upload(video_service)
        n = 25

        async def read_many():
            await asyncio.gather(*(video_service.get_video(video.id) for _ in range(n)))

        asyncio.run(read_many())

        views = videos.get_by_id(video.id).views
        assert 0 < views <= n


class TestDeleteVideo:

    def test_delete_cascades(self, video_service, comment_service, storage, videos, comments):
        video = upload(video_service)
        other = upload(video_service, title="Other")
        asyncio.run(comment_service.add_comment(video.id, "bob", "nice"))
        asyncio.run(comment_service.add_comment(video.id, "carol", "wow"))
        asyncio.run(comment_service.add_comment(other.id, "bob", "keep me"))

        removed = asyncio.run(video_service.delete_video(video.id))

        assert removed == 2
        assert videos.get_by_id(video.id) is None
        assert comments.list_for_video(video.id) == []
        assert len(comments.list_for_video(other.id)) == 1
        assert object_name_from_url(video.blob_url) not in storage.object_names
        assert object_name_from_url(other.blob_url) in storage.object_names

    def test_delete_missing_has_no_side_effects(self, video_service, storage, videos):
        video = upload(video_service)

        with pytest.raises(VideoNotFoundError):
            asyncio.run(video_service.delete_video("missing"))

        assert videos.get_by_id(video.id) is not None
        assert len(storage.object_names) == 1

    def test_delete_with_object_already_gone(self, video_service, storage, videos):
        video = upload(video_service)
        asyncio.run(storage.delete_if_exists(object_name_from_url(video.blob_url)))

        asyncio.run(video_service.delete_video(video.id))

        assert videos.get_by_id(video.id) is None

    def test_object_failure_stops_before_document(self, videos, comments, comment_service):
        class FailingDeleteStorage(MockStorageClient):
            async def delete_if_exists(self, name):
                raise StorageError("delete refused")

        storage = FailingDeleteStorage()
        service = VideoService(storage=storage, videos=videos, comments=comments)
        video = upload(service)
        asyncio.run(comment_service.add_comment(video.id, "bob", "nice"))

        with pytest.raises(CascadeDeleteError) as exc_info:
            asyncio.run(service.delete_video(video.id))

        assert exc_info.value.completed_steps == ["comments"]
        assert exc_info.value.failed_step == "object"
        assert videos.get_by_id(video.id) is not None
        assert comments.list_for_video(video.id) == []

    def test_document_failure_reports_earlier_steps(self, storage, videos, comments):
        class UndeletableVideos(VideoRepository):
            def delete_by_id(self, item_id):
                raise DocumentStoreError("delete refused")

        service = VideoService(
            storage=storage,
            videos=UndeletableVideos(videos._collection),
            comments=comments,
        )
        video = upload(service)

        with pytest.raises(CascadeDeleteError) as exc_info:
            asyncio.run(service.delete_video(video.id))

        assert exc_info.value.completed_steps == ["comments", "object"]
        assert exc_info.value.failed_step == "document"


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

class TestComments:

    def test_add_requires_existing_video(self, comment_service):
        with pytest.raises(VideoNotFoundError):
            asyncio.run(comment_service.add_comment("missing", "bob", "hi"))

    def test_delete_by_author(self, video_service, comment_service, comments):
        video = upload(video_service)
        comment = asyncio.run(comment_service.add_comment(video.id, "bob", "hi"))

        asyncio.run(comment_service.delete_comment(video.id, comment.id, "bob"))

        assert comments.get_by_id(comment.id) is None

    def test_delete_by_other_user_is_refused(self, video_service, comment_service, comments):
        video = upload(video_service)
        comment = asyncio.run(comment_service.add_comment(video.id, "bob", "hi"))

        with pytest.raises(CommentOwnershipError):
            asyncio.run(comment_service.delete_comment(video.id, comment.id, "mallory"))

        assert comments.get_by_id(comment.id) is not None

    def test_delete_under_wrong_video_is_not_found(self, video_service, comment_service):
        video = upload(video_service)
        other = upload(video_service, title="Other")
        comment = asyncio.run(comment_service.add_comment(video.id, "bob", "hi"))

        with pytest.raises(CommentNotFoundError):
            asyncio.run(comment_service.delete_comment(other.id, comment.id, "bob"))


# ---------------------------------------------------------------------------
# Users
# ---------------------------------------------------------------------------

class StaticIdentity:
    def __init__(self, principal):
        self._principal = principal

    async def fetch_principal(self, headers):
        await asyncio.sleep(0)
        return self._principal


class TestUserService:

    @pytest.fixture
    def users(self, document_store) -> UserRepository:
        return UserRepository(document_store.users)

    def test_creates_user_on_first_visit(self, users, document_store):
        service = UserService(users, StaticIdentity(Principal("abc", "alice@example.com")))

        user = asyncio.run(service.resolve_current_user({}))

        assert user.id == "abc"
        assert user.username == "alice@example.com"
        assert document_store.users.count_documents({}) == 1

    def test_existing_user_is_returned(self, users):
        service = UserService(users, StaticIdentity(Principal("abc", "alice")))
        first = asyncio.run(service.resolve_current_user({}))
        second = asyncio.run(service.resolve_current_user({}))

        assert first == second

    def test_no_principal_raises(self, users):
        service = UserService(users, StaticIdentity(None))

        with pytest.raises(IdentityError):
            asyncio.run(service.resolve_current_user({}))

    def test_concurrent_first_visits_create_one_user(self, users, document_store):
        service = UserService(users, StaticIdentity(Principal("abc", "alice")))

        async def visit_twice():
            return await asyncio.gather(
                service.resolve_current_user({}),
                service.resolve_current_user({}),
            )

        first, second = asyncio.run(visit_twice())

        assert first.id == second.id == "abc"
        assert document_store.users.count_documents({}) == 1

    def test_lost_race_rereads_winner(self, users):
        """A stale miss followed by a duplicate insert falls back to a re-read."""
        winner = Principal("abc", "winner").to_user()
        users.create_if_absent(winner)

        class StaleFirstRead:
            def __init__(self, inner):
                self._inner = inner
                self._reads = 0

            def get_by_id(self, user_id):
                self._reads += 1
                if self._reads == 1:
                    return None
                return self._inner.get_by_id(user_id)

            def create_if_absent(self, user):
                return self._inner.create_if_absent(user)

        service = UserService(StaleFirstRead(users), StaticIdentity(Principal("abc", "loser")))

        user = asyncio.run(service.resolve_current_user({}))

        assert user.username == "winner"
