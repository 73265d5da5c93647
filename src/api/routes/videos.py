"""
Video API endpoints.

Handles the video lifecycle:
1. Client uploads a file with title/owner (POST /api/videos)
2. Anyone lists or reads videos; each read counts a view
3. Deleting a video removes its comments, its stored file, and its record
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, File, Form, HTTPException, UploadFile, status
from pydantic import BaseModel, ConfigDict, Field

from ...core.catalog import CascadeDeleteError, Video, VideoNotFoundError
from ..dependencies import SettingsDep, VideoServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


# ---------------------------------------------------------------------------
# Response Models
# ---------------------------------------------------------------------------

class VideoResponse(BaseModel):
    """A video record as returned to clients."""
    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(description="Video identifier")
    title: str = Field(description="Video title")
    description: str = Field("", description="Optional description")
    user_id: str = Field(alias="userId", description="Owner's user id")
    blob_url: str = Field(alias="blobUrl", description="URL of the stored video file")
    created_at: str = Field(alias="createdAt", description="Upload time (ISO-8601)")
    views: int = Field(0, description="Number of times the video was read")

    @classmethod
    def from_video(cls, video: Video) -> "VideoResponse":
        return cls(
            id=video.id,
            title=video.title,
            description=video.description,
            user_id=video.user_id,
            blob_url=video.blob_url,
            created_at=video.created_at,
            views=video.views,
        )


class DeleteVideoResponse(BaseModel):
    """Confirmation of a completed video delete."""
    model_config = ConfigDict(populate_by_name=True)

    status: str = Field("deleted", description="Always 'deleted'")
    comments_deleted: int = Field(
        0,
        alias="commentsDeleted",
        description="Comments removed along with the video",
    )


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------

@router.get(
    "",
    response_model=list[VideoResponse],
    status_code=status.HTTP_200_OK,
    summary="List all videos",
    description="All videos, newest first",
)
async def list_videos(service: VideoServiceDep) -> list[VideoResponse]:
    try:
        videos = await service.list_videos()
    except Exception as e:
        logger.error("Failed to list videos", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list videos"
        )

    return [VideoResponse.from_video(video) for video in videos]


@router.get(
    "/{video_id}",
    response_model=VideoResponse,
    status_code=status.HTTP_200_OK,
    summary="Get a video",
    description="Read one video. Each read increments its view count.",
)
async def get_video(video_id: str, service: VideoServiceDep) -> VideoResponse:
    try:
        video = await service.get_video(video_id)
    except VideoNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found"
        )
    except Exception as e:
        logger.error(
            "Failed to get video",
            extra={"video_id": video_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get video"
        )

    return VideoResponse.from_video(video)


@router.post(
    "",
    response_model=VideoResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Upload a video",
    description="Multipart upload with title, optional description, userId, and file",
)
async def upload_video(
    service: VideoServiceDep,
    settings: SettingsDep,
    title: Annotated[Optional[str], Form()] = None,
    description: Annotated[Optional[str], Form()] = None,
    user_id: Annotated[Optional[str], Form(alias="userId")] = None,
    file: Annotated[Optional[UploadFile], File(description="Video file")] = None,
) -> VideoResponse:
    """
    Upload a video.

    The file is stored in the object store first, then the record is
    written. Nothing is touched if a required field is missing.
    """
    if not title or not title.strip() or not user_id or not user_id.strip() or file is None:
        logger.warning(
            "Upload rejected: missing fields",
            extra={
                "has_title": bool(title),
                "has_user_id": bool(user_id),
                "has_file": file is not None,
            }
        )
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="title, userId, and file are required"
        )

    data = await file.read()

    if len(data) > settings.max_upload_size_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"File too large. Maximum size: {settings.max_upload_size_mb}MB"
        )

    logger.info(
        "Video upload started",
        extra={
            "user_id": user_id,
            "video_filename": file.filename,
            "content_type": file.content_type,
            "size_bytes": len(data),
        }
    )

    try:
        video = await service.upload_video(
            title=title.strip(),
            description=description,
            user_id=user_id.strip(),
            filename=file.filename or "video",
            data=data,
            content_type=file.content_type,
        )
    except Exception as e:
        logger.error(
            "Error uploading video",
            extra={"user_id": user_id, "error": str(e)},
            exc_info=e,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Upload failed"
        )

    return VideoResponse.from_video(video)


@router.delete(
    "/{video_id}",
    response_model=DeleteVideoResponse,
    status_code=status.HTTP_200_OK,
    summary="Delete a video",
    description="Delete a video together with its comments and stored file",
)
async def delete_video(video_id: str, service: VideoServiceDep) -> DeleteVideoResponse:
    """
    Delete a video.

    If a step fails, the 500 response lists the steps that already
    completed so the leftover state is known.
    """
    try:
        comments_deleted = await service.delete_video(video_id)
    except VideoNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Video not found"
        )
    except CascadeDeleteError as e:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail={
                "message": "Delete failed",
                "completedSteps": e.completed_steps,
                "failedStep": e.failed_step,
            }
        )
    except Exception as e:
        logger.error(
            "Error deleting video",
            extra={"video_id": video_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Delete failed"
        )

    return DeleteVideoResponse(comments_deleted=comments_deleted)
