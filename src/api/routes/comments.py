"""
Comment API endpoints.

Comments live under their video:
    /api/videos/{video_id}/comments
Anyone can read and post; only the author can delete.
"""

import logging
from typing import Annotated, Any, Optional

from fastapi import APIRouter, Body, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field, field_validator

from ...core.catalog import (
    Comment,
    CommentNotFoundError,
    CommentOwnershipError,
    VideoNotFoundError,
)
from ..dependencies import CallerId, CommentServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Request/Response Models
# ---------------------------------------------------------------------------

class AddCommentRequest(BaseModel):
    """
    New comment.

    Fields are optional at the schema level so that missing values get
    a 400 from the endpoint rather than a validation 422. A value that
    isn't a string counts as missing.
    """
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId", description="Author's user id")
    text: Optional[str] = Field(None, description="Comment text")
    user_name: Optional[str] = Field(
        None,
        alias="userName",
        description="Display name; defaults to the user id",
    )

    @field_validator("user_id", "text", "user_name", mode="before")
    @classmethod
    def drop_non_strings(cls, value: Any) -> Optional[str]:
        return value if isinstance(value, str) else None


class CommentResponse(BaseModel):
    """A comment as returned to clients."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Comment identifier")
    video_id: str = Field(alias="videoId", description="Video the comment belongs to")
    user_id: str = Field(alias="userId", description="Author's user id")
    user_name: str = Field(alias="userName", description="Author's display name")
    text: str = Field(description="Comment text")
    created_at: str = Field(alias="createdAt", description="Creation time (ISO-8601)")

    @classmethod
    def from_comment(cls, comment: Comment) -> "CommentResponse":
        return cls(
            id=comment.id,
            video_id=comment.video_id,
            user_id=comment.user_id,
            user_name=comment.user_name,
            text=comment.text,
            created_at=comment.created_at,
        )


class StatusResponse(BaseModel):
    status: str


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "/{video_id}/comments",
    response_model=list[CommentResponse],
    status_code=status.HTTP_200_OK,
    summary="List comments",
    description="Comments on a video, oldest first",
)
async def list_comments(video_id: str, service: CommentServiceDep) -> list[CommentResponse]:
    try:
        comments = await service.list_comments(video_id)
    except Exception as e:
        logger.error(
            "Failed to list comments",
            extra={"video_id": video_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list comments"
        )

    return [CommentResponse.from_comment(comment) for comment in comments]


@router.post(
    "/{video_id}/comments",
    response_model=CommentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Add a comment",
)
async def add_comment(
    video_id: str,
    service: CommentServiceDep,
    request: Annotated[Optional[AddCommentRequest], Body()] = None,
) -> CommentResponse:
    if request is None:
        request = AddCommentRequest()

    if not request.user_id or not request.user_id.strip() or not request.text or not request.text.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="userId and text are required"
        )

    try:
        comment = await service.add_comment(
            video_id=video_id,
            user_id=request.user_id.strip(),
            text=request.text,
            user_name=request.user_name,
        )
    except VideoNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found"
        )
    except Exception as e:
        logger.error(
            "Error adding comment",
            extra={"video_id": video_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to add comment"
        )

    return CommentResponse.from_comment(comment)


@router.delete(
    "/{video_id}/comments/{comment_id}",
    response_model=StatusResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete own comment",
    description="Requires the X-User-Id header to match the comment's author",
)
async def delete_comment(
    video_id: str,
    comment_id: str,
    caller_id: CallerId,
    service: CommentServiceDep,
) -> StatusResponse:
    try:
        await service.delete_comment(video_id, comment_id, caller_id)
    except CommentNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Comment not found"
        )
    except CommentOwnershipError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="You can only delete your own comments"
        )
    except Exception as e:
        logger.error(
            "Error deleting comment",
            extra={"video_id": video_id, "comment_id": comment_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete comment"
        )

    return StatusResponse(status="deleted")
