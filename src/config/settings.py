"""
Application configuration using Pydantic settings.

Configuration is loaded from environment variables with sensible defaults.
Using Pydantic's BaseSettings means we get:
- Type validation at startup (fail fast if config is wrong)
- Documentation of what's required vs optional
- Easy testing with different configurations

Mock modes enable local development without the object store or the
document database.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    All settings can be overridden via environment variables.
    For lists (like cors_origins), use comma-separated values in env.
    """

    # API Configuration
    api_title: str = "Video Backend API"
    api_version: str = "v1"
    port: int = Field(
        default=4000,
        description="Port the HTTP server listens on"
    )

    # Object Storage Configuration (S3-compatible)
    storage_endpoint_url: Optional[str] = Field(
        default=None,
        description="S3-compatible endpoint URL. Leave unset for AWS S3."
    )
    storage_access_key_id: str = Field(
        default="",
        description="Object storage access key ID"
    )
    storage_secret_access_key: str = Field(
        default="",
        description="Object storage secret access key"
    )
    storage_region: str = Field(
        default="auto",
        description="Object storage region. R2 uses 'auto'."
    )
    blob_container_name: str = Field(
        default="videos",
        description="Bucket holding uploaded video files"
    )
    storage_public_base_url: Optional[str] = Field(
        default=None,
        description="Public base URL for stored objects (CDN or public bucket domain)"
    )
    storage_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of real object storage."
    )

    # Document Store Configuration
    document_store_uri: str = Field(
        default="",
        description="Document database connection URI (endpoint and key)"
    )
    document_db_name: str = Field(
        default="video-db",
        description="Document database name"
    )
    videos_collection_name: str = Field(
        default="videos",
        description="Collection holding video documents"
    )
    comments_collection_name: str = Field(
        default="comments",
        description="Collection holding comment documents"
    )
    users_collection_name: str = Field(
        default="users",
        description="Collection holding user documents"
    )
    document_store_mock_mode: bool = Field(
        default=False,
        description="Use in-memory mock instead of a real document database."
    )

    # Identity
    identity_endpoint_url: Optional[str] = Field(
        default=None,
        description="Platform identity endpoint (e.g. https://<app>/.auth/me). "
                    "When unset, principal headers injected by the platform are used."
    )
    identity_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for identity endpoint calls"
    )

    # Application Behavior
    max_upload_size_mb: int = Field(
        default=50,
        description="Maximum video upload size in MB."
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    # CORS
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins."
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        """Parse comma-separated CORS origins into a list."""
        if self.cors_origins == "*":
            return ["*"]
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def max_upload_size_bytes(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024

    def validate_required_fields(self) -> list[str]:
        """
        Validate that required fields are set based on mock mode settings.

        Returns list of missing required fields.
        This is separate from Pydantic validation because requirements
        depend on whether we're in mock mode.
        """
        missing = []

        if not self.storage_mock_mode:
            if not self.storage_access_key_id:
                missing.append("STORAGE_ACCESS_KEY_ID")
            if not self.storage_secret_access_key:
                missing.append("STORAGE_SECRET_ACCESS_KEY")

        if not self.document_store_mock_mode and not self.document_store_uri:
            missing.append("DOCUMENT_STORE_URI")

        return missing


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Using lru_cache means we only load settings once per process.
    For tests, pass a Settings instance to create_app() instead.
    """
    return Settings()
