"""
Repository for comment documents.

Stored shape: {_id, videoId, userId, userName, text, createdAt}
"""

from src.core.catalog.models import Comment

from .base import OLDEST_FIRST, DocumentRepository, translate_errors


class CommentRepository(DocumentRepository[Comment]):
    """Comment persistence. Lists are oldest first, like a thread."""

    def list_for_video(self, video_id: str) -> list[Comment]:
        return self.list_filtered("videoId", video_id, OLDEST_FIRST)

    def delete_for_video(self, video_id: str) -> int:
        """Delete every comment on a video. Returns how many went."""
        with translate_errors("delete", collection=self._collection.name, video_id=video_id):
            result = self._collection.delete_many({"videoId": video_id})
        return result.deleted_count

    def _to_document(self, comment: Comment) -> dict:
        return {
            "_id": comment.id,
            "videoId": comment.video_id,
            "userId": comment.user_id,
            "userName": comment.user_name,
            "text": comment.text,
            "createdAt": comment.created_at,
        }

    def _from_document(self, document: dict) -> Comment:
        return Comment(
            id=str(document["_id"]),
            video_id=document.get("videoId", ""),
            user_id=document.get("userId", ""),
            user_name=document.get("userName") or "",
            text=document.get("text", ""),
            created_at=document.get("createdAt", ""),
        )
