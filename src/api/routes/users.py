"""
User-specific API endpoints.

Lists the videos a user owns.
"""

import logging

from fastapi import APIRouter, HTTPException, status

from ..dependencies import VideoServiceDep
from .videos import VideoResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get(
    "/{user_id}/videos",
    response_model=list[VideoResponse],
    status_code=status.HTTP_200_OK,
    summary="List a user's videos",
    description="Videos owned by one user, newest first",
)
async def list_user_videos(user_id: str, service: VideoServiceDep) -> list[VideoResponse]:
    try:
        videos = await service.list_videos_by_user(user_id)
    except Exception as e:
        logger.error(
            "Failed to list user videos",
            extra={"user_id": user_id, "error": str(e)}
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list user videos"
        )

    return [VideoResponse.from_video(video) for video in videos]
