"""
Comment operations.

Comments hang off a video. Only the author may delete one.
"""

import logging
from typing import Optional

from .errors import CommentNotFoundError, CommentOwnershipError, VideoNotFoundError
from .models import Comment
from .videos import CommentStore, VideoStore

logger = logging.getLogger(__name__)


class CommentService:
    """Comment use cases over the comment and video stores."""

    def __init__(self, comments: CommentStore, videos: VideoStore) -> None:
        self._comments = comments
        self._videos = videos

    async def list_comments(self, video_id: str) -> list[Comment]:
        """Comments on a video, oldest first."""
        return self._comments.list_for_video(video_id)

    async def add_comment(
        self,
        video_id: str,
        user_id: str,
        text: str,
        user_name: Optional[str] = None,
    ) -> Comment:
        """
        Add a comment to an existing video.

        The existence check and the insert are separate calls; a video
        deleted in between leaves an orphaned comment.
        """
        if self._videos.get_by_id(video_id) is None:
            raise VideoNotFoundError(f"Video {video_id} not found")

        comment = Comment(
            video_id=video_id,
            user_id=user_id,
            user_name=user_name or user_id,
            text=text,
        )
        self._comments.create(comment)

        logger.info(
            "Comment added",
            extra={"video_id": video_id, "comment_id": comment.id, "user_id": user_id}
        )

        return comment

    async def delete_comment(
        self,
        video_id: str,
        comment_id: str,
        caller_id: str,
    ) -> None:
        """Delete a comment if the caller wrote it."""
        comment = self._comments.get_by_id(comment_id)
        if comment is None or comment.video_id != video_id:
            raise CommentNotFoundError(f"Comment {comment_id} not found")

        if not comment.is_authored_by(caller_id):
            logger.warning(
                "Comment delete by non-author",
                extra={"comment_id": comment_id, "caller_id": caller_id}
            )
            raise CommentOwnershipError("Only the author can delete this comment")

        self._comments.delete_by_id(comment_id)

        logger.info(
            "Comment deleted",
            extra={"video_id": video_id, "comment_id": comment_id}
        )
