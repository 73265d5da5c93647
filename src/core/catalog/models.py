"""
Domain models for the video catalog.

These models represent the core business concepts. They have no dependencies
on external frameworks, databases, or APIs. Repositories translate them to
and from stored documents; routes translate them to JSON.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional
from uuid import uuid4


def generate_id() -> str:
    """New opaque record identifier."""
    return str(uuid4())


def utc_now_iso() -> str:
    """
    Current UTC time as an ISO-8601 string with millisecond precision.

    Always the same width and always 'Z'-suffixed, so lexical order
    equals chronological order.
    """
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class Video:
    """
    An uploaded video.

    The bytes live in the object store under the name at the end of
    blob_url; this record is what the document store keeps.
    """
    title: str
    user_id: str
    blob_url: str
    id: str = field(default_factory=generate_id)
    description: str = ""
    created_at: str = field(default_factory=utc_now_iso)
    views: int = 0

    def __post_init__(self) -> None:
        if not self.title.strip():
            raise ValueError("Video title cannot be empty")
        if not self.user_id.strip():
            raise ValueError("Video owner cannot be empty")
        if self.views < 0:
            raise ValueError("View count cannot be negative")


@dataclass
class Comment:
    """A comment left on a video. Never edited after creation."""
    video_id: str
    user_id: str
    text: str
    id: str = field(default_factory=generate_id)
    user_name: str = ""
    created_at: str = field(default_factory=utc_now_iso)

    def __post_init__(self) -> None:
        if not self.text.strip():
            raise ValueError("Comment text cannot be empty")
        if not self.user_name:
            self.user_name = self.user_id

    def is_authored_by(self, caller_id: Optional[str]) -> bool:
        return caller_id is not None and caller_id == self.user_id


@dataclass
class User:
    """
    A user record derived from a platform principal.

    Created lazily the first time the principal is seen.
    """
    id: str
    username: str
    display_name: str
    email: str = ""


@dataclass(frozen=True)
class Principal:
    """
    The identity the hosting platform vouches for.

    Frozen because it is a value handed to us, never edited.
    """
    user_id: str
    user_details: str
    email: str = ""

    def to_user(self) -> User:
        return User(
            id=self.user_id,
            username=self.user_details,
            display_name=self.user_details,
            email=self.email,
        )
