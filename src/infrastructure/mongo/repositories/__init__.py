"""
Repository pattern implementations for the document store.

Repositories translate between domain models and stored documents.
"""

from .comments import CommentRepository
from .users import UserRepository
from .videos import VideoRepository

__all__ = ["CommentRepository", "UserRepository", "VideoRepository"]
