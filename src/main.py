"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order
- Can create multiple app instances if needed (e.g., for testing)

For local development:
    uvicorn src.main:app --reload --port 4000

For production:
    gunicorn src.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from .api.routes import auth, comments, health, users, videos
from .config.settings import Settings, get_settings
from .infrastructure.identity import IdentityConfig, create_identity_client
from .infrastructure.mongo import DocumentStoreConfig, create_document_store
from .infrastructure.storage import StorageConfig, create_storage_client

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


def build_clients(app: FastAPI, settings: Settings) -> None:
    """
    Construct the external clients once and keep them on app.state.

    Routes receive them through dependencies; nothing is module-global.
    """
    app.state.storage = create_storage_client(
        config=StorageConfig(
            access_key_id=settings.storage_access_key_id,
            secret_access_key=settings.storage_secret_access_key,
            bucket_name=settings.blob_container_name,
            endpoint_url=settings.storage_endpoint_url,
            region=settings.storage_region,
            public_base_url=settings.storage_public_base_url,
        ),
        mock_mode=settings.storage_mock_mode,
    )

    app.state.documents = create_document_store(
        config=DocumentStoreConfig(
            uri=settings.document_store_uri,
            database=settings.document_db_name,
            videos_collection=settings.videos_collection_name,
            comments_collection=settings.comments_collection_name,
            users_collection=settings.users_collection_name,
        ),
        mock_mode=settings.document_store_mock_mode,
    )

    app.state.identity = create_identity_client(
        IdentityConfig(
            endpoint_url=settings.identity_endpoint_url or "",
            timeout_seconds=settings.identity_timeout_seconds,
        )
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Clients are created on startup and closed on shutdown.
    FastAPI calls this automatically when the application starts/stops.
    """
    settings: Settings = app.state.settings

    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "Video backend API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": {
                "document_store": settings.document_store_mock_mode,
                "storage": settings.storage_mock_mode,
            }
        }
    )

    # Validate configuration
    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    build_clients(app, settings)

    await app.state.storage.ensure_container()
    try:
        app.state.documents.ensure_indexes()
    except Exception as e:
        logger.error("Could not ensure document indexes", extra={"error": str(e)})

    logger.info(f"Video backend API listening on port {settings.port}")

    yield

    # Shutdown
    app.state.storage.close()
    app.state.documents.close()
    await app.state.identity.close()
    logger.info("Video backend API shutting down")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    Tests pass their own Settings (typically with mock modes on).
    """
    settings = settings or get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=settings.api_version,
        description="""
        Video sharing backend.

        - Upload videos to object storage and record them in the document store
        - List and read videos (reads count views)
        - Comment on videos; authors can delete their own comments
        - Resolve the signed-in platform user
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=settings.cors_origins_list != ["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        videos.router,
        prefix="/api/videos",
        tags=["Videos"],
    )

    app.include_router(
        comments.router,
        prefix="/api/videos",
        tags=["Comments"],
    )

    app.include_router(
        users.router,
        prefix="/api/users",
        tags=["Users"],
    )

    app.include_router(
        auth.router,
        prefix="/api/auth",
        tags=["Auth"],
    )

    @app.get("/", include_in_schema=False, response_class=PlainTextResponse)
    async def root():
        """Liveness text for simple probes."""
        return "Video backend API is running"

    # Global exception handler
    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. We log the full
        error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": settings.api_version,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "src.main:app",
        host="0.0.0.0",
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
