"""
Object storage integration for uploaded videos.

Supports S3-compatible stores via boto3.
Includes mock mode for local development without credentials.
"""

from .client import (
    MockStorageClient,
    S3StorageClient,
    StorageClient,
    StorageConfig,
    StorageError,
    create_storage_client,
)

__all__ = [
    "MockStorageClient",
    "S3StorageClient",
    "StorageClient",
    "StorageConfig",
    "StorageError",
    "create_storage_client",
]
