"""
Video catalog logic.

Contains the domain models, domain errors, and the services behind the
HTTP routes.
"""

from .comments import CommentService
from .errors import (
    CascadeDeleteError,
    CatalogError,
    CommentNotFoundError,
    CommentOwnershipError,
    IdentityError,
    VideoNotFoundError,
)
from .models import Comment, Principal, User, Video
from .users import IdentityProvider, UserService
from .videos import VideoService

__all__ = [
    "CascadeDeleteError",
    "CatalogError",
    "Comment",
    "CommentNotFoundError",
    "CommentOwnershipError",
    "CommentService",
    "IdentityError",
    "IdentityProvider",
    "Principal",
    "User",
    "UserService",
    "Video",
    "VideoNotFoundError",
    "VideoService",
]
