"""
Repository for user documents.

Stored shape: {_id, username, displayName, email}
"""

import logging

from pymongo.errors import DuplicateKeyError

from src.core.catalog.models import User

from .base import DocumentRepository, translate_errors

logger = logging.getLogger(__name__)


class UserRepository(DocumentRepository[User]):
    """User persistence."""

    def create_if_absent(self, user: User) -> bool:
        """
        Insert the user unless one with the same id exists.

        Returns True if this call created it, False on a duplicate key.
        """
        with translate_errors("create", collection=self._collection.name, id=user.id):
            try:
                self._collection.insert_one(self._to_document(user))
            except DuplicateKeyError:
                logger.info("User already exists", extra={"user_id": user.id})
                return False
        return True

    def _to_document(self, user: User) -> dict:
        return {
            "_id": user.id,
            "username": user.username,
            "displayName": user.display_name,
            "email": user.email,
        }

    def _from_document(self, document: dict) -> User:
        return User(
            id=str(document["_id"]),
            username=document.get("username", ""),
            display_name=document.get("displayName", ""),
            email=document.get("email") or "",
        )
