"""
Domain errors for the video catalog.

Routes translate these into HTTP status codes; services never know
about HTTP.
"""

from typing import Optional


class CatalogError(Exception):
    """Base class for catalog errors."""
    pass


class VideoNotFoundError(CatalogError):
    """Raised when a requested video doesn't exist."""
    pass


class CommentNotFoundError(CatalogError):
    """Raised when a comment doesn't exist or belongs to another video."""
    pass


class CommentOwnershipError(CatalogError):
    """Raised when someone other than the author tries to delete a comment."""
    pass


class IdentityError(CatalogError):
    """Raised when the caller's identity can't be resolved."""
    pass


class CascadeDeleteError(CatalogError):
    """
    Raised when a video delete stops partway.

    Carries the steps that finished before the failure so callers can
    report exactly what state was left behind.
    """

    def __init__(
        self,
        video_id: str,
        completed_steps: list[str],
        failed_step: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.video_id = video_id
        self.completed_steps = list(completed_steps)
        self.failed_step = failed_step
        self.cause = cause
        super().__init__(
            f"Delete of video {video_id} failed at step '{failed_step}' "
            f"after completing {self.completed_steps}: {cause}"
        )
