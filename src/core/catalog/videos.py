"""
Video lifecycle: upload, read, list, and cascade delete.

The service coordinates two stores that share no transaction: raw bytes
go to the object store, the record goes to the document store. It is
framework-agnostic and receives both adapters through its constructor.
"""

import logging
import re
import time
from typing import Optional, Protocol
from urllib.parse import unquote, urlparse

from .errors import CascadeDeleteError, VideoNotFoundError
from .models import Comment, Video

logger = logging.getLogger(__name__)

# Saga step names, in execution order
STEP_COMMENTS = "comments"
STEP_OBJECT = "object"
STEP_DOCUMENT = "document"
DELETE_STEPS = (STEP_COMMENTS, STEP_OBJECT, STEP_DOCUMENT)

DEFAULT_CONTENT_TYPE = "application/octet-stream"


# ---------------------------------------------------------------------------
# Protocols (interfaces)
# ---------------------------------------------------------------------------

class ObjectStore(Protocol):
    """Where the raw video bytes live."""

    async def ensure_container(self) -> None: ...

    async def store(self, name: str, data: bytes, content_type: str) -> str: ...

    async def delete_if_exists(self, name: str) -> bool: ...


class VideoStore(Protocol):
    """Where video records live."""

    def list_all(self) -> list[Video]: ...

    def list_by_user(self, user_id: str) -> list[Video]: ...

    def get_by_id(self, video_id: str) -> Optional[Video]: ...

    def create(self, video: Video) -> Video: ...

    def increment_views(self, video_id: str) -> Optional[Video]: ...

    def delete_by_id(self, video_id: str) -> bool: ...


class CommentStore(Protocol):
    """Where comment records live."""

    def list_for_video(self, video_id: str) -> list[Comment]: ...

    def get_by_id(self, comment_id: str) -> Optional[Comment]: ...

    def create(self, comment: Comment) -> Comment: ...

    def delete_by_id(self, comment_id: str) -> bool: ...

    def delete_for_video(self, video_id: str) -> int: ...


# ---------------------------------------------------------------------------
# Object naming
# ---------------------------------------------------------------------------

def build_object_name(filename: str, now_ms: Optional[int] = None) -> str:
    """
    Build a collision-resistant object name for an upload.

    Format: {epoch_millis}-{filename}, with any directory part dropped
    and each whitespace run replaced by '_'.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    base = re.split(r"[\\/]", filename)[-1] or "upload"
    safe = re.sub(r"\s+", "_", base)
    return f"{now_ms}-{safe}"


def object_name_from_url(url: str) -> str:
    """Recover the object name from the URL returned at upload time."""
    path = urlparse(url).path or url
    return unquote(path.rstrip("/").split("/")[-1])


# ---------------------------------------------------------------------------
# Service
# ---------------------------------------------------------------------------

class VideoService:
    """
    Video operations over the object store and the document store.

    Each public method is one use case behind one HTTP route.
    """

    def __init__(
        self,
        storage: ObjectStore,
        videos: VideoStore,
        comments: CommentStore,
    ) -> None:
        self._storage = storage
        self._videos = videos
        self._comments = comments

    async def list_videos(self) -> list[Video]:
        """All videos, newest first."""
        return self._videos.list_all()

    async def list_videos_by_user(self, user_id: str) -> list[Video]:
        """One owner's videos, newest first."""
        return self._videos.list_by_user(user_id)

    async def get_video(self, video_id: str) -> Video:
        """
        Read a video and count the view.

        The increment happens atomically in the document store, so
        concurrent readers never lose each other's views.
        """
        video = self._videos.increment_views(video_id)
        if video is None:
            raise VideoNotFoundError(f"Video {video_id} not found")
        return video

    async def upload_video(
        self,
        title: str,
        user_id: str,
        filename: str,
        data: bytes,
        content_type: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Video:
        """
        Store the bytes, then record the video.

        If the record can't be written the stored object stays behind;
        there is no cleanup step.
        """
        await self._storage.ensure_container()

        object_name = build_object_name(filename)
        blob_url = await self._storage.store(
            object_name,
            data,
            content_type or DEFAULT_CONTENT_TYPE,
        )

        video = Video(
            title=title,
            description=description or "",
            user_id=user_id,
            blob_url=blob_url,
        )
        self._videos.create(video)

        logger.info(
            "Video uploaded",
            extra={
                "video_id": video.id,
                "user_id": user_id,
                "object_name": object_name,
                "size_bytes": len(data),
            }
        )

        return video

    async def delete_video(self, video_id: str) -> int:
        """
        Delete a video with its comments and stored object.

        Steps run in order: comments, object, document. The first failure
        stops the sequence and raises CascadeDeleteError naming the steps
        already done. Returns the number of comments removed.
        """
        video = self._videos.get_by_id(video_id)
        if video is None:
            raise VideoNotFoundError(f"Video {video_id} not found")

        completed: list[str] = []
        step = STEP_COMMENTS
        try:
            comments_deleted = self._comments.delete_for_video(video.id)
            completed.append(step)

            step = STEP_OBJECT
            existed = await self._storage.delete_if_exists(
                object_name_from_url(video.blob_url)
            )
            if not existed:
                logger.warning(
                    "Video object already missing",
                    extra={"video_id": video.id, "blob_url": video.blob_url}
                )
            completed.append(step)

            step = STEP_DOCUMENT
            self._videos.delete_by_id(video.id)
            completed.append(step)

        except Exception as e:
            logger.error(
                "Video delete stopped partway",
                extra={
                    "video_id": video.id,
                    "completed_steps": completed,
                    "failed_step": step,
                    "error": str(e),
                }
            )
            raise CascadeDeleteError(video.id, completed, step, e) from e

        logger.info(
            "Video deleted",
            extra={"video_id": video.id, "comments_deleted": comments_deleted}
        )

        return comments_deleted
