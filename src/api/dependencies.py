"""
FastAPI dependency injection.

Dependencies provide instances of services, clients, and configuration
to route handlers. Using dependency injection means:
- Routes don't instantiate their own dependencies (easier to test)
- Dependencies can be mocked for testing
- Configuration is centralized
- Resource lifecycle (connections, clients) is managed properly

The clients themselves are built once in the application lifespan and
kept on app.state; the dependencies here only hand them to services.
"""

import logging
from typing import Annotated, Optional

from fastapi import Depends, Header, HTTPException, Request, status

from ..config.settings import Settings
from ..core.catalog import CommentService, UserService, VideoService
from ..infrastructure.mongo import DocumentStore
from ..infrastructure.mongo.repositories import (
    CommentRepository,
    UserRepository,
    VideoRepository,
)
from ..infrastructure.storage import StorageClient

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Application State
# ---------------------------------------------------------------------------

def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_storage_client(request: Request) -> StorageClient:
    return request.app.state.storage


def get_document_store(request: Request) -> DocumentStore:
    return request.app.state.documents


# ---------------------------------------------------------------------------
# Caller Identity
# ---------------------------------------------------------------------------

async def require_caller_id(
    x_user_id: Annotated[Optional[str], Header()] = None,
) -> str:
    """
    Identity of the caller, as supplied in the X-User-Id header.

    Raises 401 if the header is missing or blank.
    """
    if not x_user_id or not x_user_id.strip():
        logger.warning("Request missing caller identity")
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Caller identity required. Provide X-User-Id header.",
        )
    return x_user_id.strip()


# ---------------------------------------------------------------------------
# Service Dependencies
# ---------------------------------------------------------------------------

def get_video_service(
    storage: Annotated[StorageClient, Depends(get_storage_client)],
    documents: Annotated[DocumentStore, Depends(get_document_store)],
) -> VideoService:
    """
    Provide VideoService wired to the shared clients.

    The service is stateless, so we create a new instance per request.
    """
    return VideoService(
        storage=storage,
        videos=VideoRepository(documents.videos),
        comments=CommentRepository(documents.comments),
    )


def get_comment_service(
    documents: Annotated[DocumentStore, Depends(get_document_store)],
) -> CommentService:
    return CommentService(
        comments=CommentRepository(documents.comments),
        videos=VideoRepository(documents.videos),
    )


def get_user_service(
    request: Request,
    documents: Annotated[DocumentStore, Depends(get_document_store)],
) -> UserService:
    return UserService(
        users=UserRepository(documents.users),
        identity=request.app.state.identity,
    )


# ---------------------------------------------------------------------------
# Convenience Type Aliases
# ---------------------------------------------------------------------------

# These type aliases make route signatures cleaner
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
DocumentStoreDep = Annotated[DocumentStore, Depends(get_document_store)]
CallerId = Annotated[str, Depends(require_caller_id)]
VideoServiceDep = Annotated[VideoService, Depends(get_video_service)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
