"""
Repository for video documents.

Stored shape (camelCase, matching the JSON API):
    {_id, title, description, userId, blobUrl, createdAt, views}
"""

from typing import Optional

from pymongo import ReturnDocument

from src.core.catalog.models import Video

from .base import NEWEST_FIRST, DocumentRepository, translate_errors


class VideoRepository(DocumentRepository[Video]):
    """Video persistence. Lists are always newest first."""

    def list_all(self, order: Optional[list] = None) -> list[Video]:
        return super().list_all(order or NEWEST_FIRST)

    def list_by_user(self, user_id: str) -> list[Video]:
        return self.list_filtered("userId", user_id, NEWEST_FIRST)

    def increment_views(self, video_id: str) -> Optional[Video]:
        """
        Atomically add one view and return the updated video.

        Uses the server-side $inc, so concurrent readers can't overwrite
        each other's increments. Returns None if the video doesn't exist.
        """
        with translate_errors("increment", collection=self._collection.name, id=video_id):
            document = self._collection.find_one_and_update(
                {"_id": video_id},
                {"$inc": {"views": 1}},
                return_document=ReturnDocument.AFTER,
            )
        return self._from_document(document) if document else None

    def _to_document(self, video: Video) -> dict:
        return {
            "_id": video.id,
            "title": video.title,
            "description": video.description,
            "userId": video.user_id,
            "blobUrl": video.blob_url,
            "createdAt": video.created_at,
            "views": video.views,
        }

    def _from_document(self, document: dict) -> Video:
        return Video(
            id=str(document["_id"]),
            title=document.get("title", ""),
            description=document.get("description") or "",
            user_id=document.get("userId", ""),
            blob_url=document.get("blobUrl", ""),
            created_at=document.get("createdAt", ""),
            views=int(document.get("views", 0)),
        )
