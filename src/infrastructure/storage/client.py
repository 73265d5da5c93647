"""
Object storage client for uploaded videos.

Supports any S3-compatible store (AWS S3, Cloudflare R2, MinIO) through
boto3, with a mock mode for local development.

Mock mode keeps objects in memory, enabling API testing without
provisioning actual object storage.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol
from urllib.parse import quote

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when storage operations fail."""
    pass


@dataclass
class StorageConfig:
    """
    Configuration for S3-compatible storage.

    Using a dataclass instead of raw parameters means:
    - Configuration is explicit and documented
    - Easy to validate at construction time
    - Simple to create test configurations
    """
    access_key_id: str
    secret_access_key: str
    bucket_name: str
    endpoint_url: Optional[str] = None
    region: str = "auto"  # R2 uses 'auto' for region
    public_base_url: Optional[str] = None


class StorageClient(Protocol):
    """
    Protocol for object storage operations.

    Using a protocol means tests can provide mocks and we can
    swap storage backends without changing dependent code.
    """

    async def ensure_container(self) -> None:
        """Create the bucket if missing. Never raises."""
        ...

    async def store(self, name: str, data: bytes, content_type: str) -> str:
        """Upload bytes under name and return a retrievable URL."""
        ...

    async def delete_if_exists(self, name: str) -> bool:
        """Delete an object. Returns False if it wasn't there."""
        ...

    async def read(self, name: str) -> bytes:
        """Download object bytes by name."""
        ...

    def close(self) -> None:
        """Release client resources."""
        ...


class S3StorageClient:
    """
    S3-compatible object storage client.

    All methods are async to match the Protocol even though boto3 is
    synchronous. This keeps the interface consistent with truly async
    storage clients.
    """

    def __init__(self, config: StorageConfig) -> None:
        """
        Initialize the S3 client with boto3.

        We import boto3 here (not at module level) because mock mode
        doesn't need it.
        """
        try:
            import boto3
            from botocore.config import Config
        except ImportError:
            raise ImportError(
                "boto3 is required for object storage. Install with: pip install boto3"
            )

        self._config = config
        self._container_ready = False

        # Path-style addressing keeps URLs valid for R2 and MinIO
        boto_config = Config(
            signature_version='s3v4',
            s3={'addressing_style': 'path'},
        )

        self._s3_client = boto3.client(
            's3',
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id or None,
            aws_secret_access_key=config.secret_access_key or None,
            region_name=config.region,
            config=boto_config,
        )

        logger.info(
            "Initialized S3 storage client",
            extra={
                "bucket": config.bucket_name,
                "endpoint": config.endpoint_url,
            }
        )

    async def ensure_container(self) -> None:
        """
        Make sure the bucket exists.

        Failures are logged and swallowed: an upload attempted against a
        missing bucket will fail on its own with a clearer error.
        """
        if self._container_ready:
            return

        from botocore.exceptions import ClientError

        bucket = self._config.bucket_name
        try:
            try:
                self._s3_client.head_bucket(Bucket=bucket)
            except ClientError as e:
                code = str(e.response.get('Error', {}).get('Code', ''))
                if code not in ('404', 'NoSuchBucket', 'NotFound'):
                    raise
                self._s3_client.create_bucket(**self._create_bucket_params())
                logger.info("Created storage bucket", extra={"bucket": bucket})

            self._container_ready = True
            logger.info("Storage bucket is ready", extra={"bucket": bucket})

        except Exception as e:
            logger.error(
                "Error ensuring storage bucket",
                extra={"bucket": bucket, "error": str(e)}
            )

    def _create_bucket_params(self) -> dict:
        # us-east-1 rejects an explicit LocationConstraint; "auto" is R2's pseudo-region
        params = {"Bucket": self._config.bucket_name}
        region = self._config.region
        if region and region not in ("auto", "us-east-1"):
            params["CreateBucketConfiguration"] = {"LocationConstraint": region}
        return params

    async def store(self, name: str, data: bytes, content_type: str) -> str:
        """Upload raw bytes under name and return the object URL."""
        try:
            self._s3_client.put_object(
                Bucket=self._config.bucket_name,
                Key=name,
                Body=data,
                ContentType=content_type,
            )

            logger.debug(
                "Stored object",
                extra={"object_name": name, "size_bytes": len(data)}
            )

            return self._build_url(name)

        except Exception as e:
            logger.error(
                "Failed to store object",
                extra={"object_name": name, "error": str(e)}
            )
            raise StorageError(f"Upload failed: {e}")

    async def delete_if_exists(self, name: str) -> bool:
        """
        Delete an object if present.

        S3 deletes are silent about missing keys, so we check first to be
        able to report whether anything was removed.
        """
        from botocore.exceptions import ClientError

        bucket = self._config.bucket_name
        try:
            try:
                self._s3_client.head_object(Bucket=bucket, Key=name)
            except ClientError as e:
                code = str(e.response.get('Error', {}).get('Code', ''))
                if code in ('404', 'NoSuchKey', 'NotFound'):
                    return False
                raise

            self._s3_client.delete_object(Bucket=bucket, Key=name)
            logger.info("Deleted object", extra={"object_name": name})
            return True

        except Exception as e:
            logger.error(
                "Failed to delete object",
                extra={"object_name": name, "error": str(e)}
            )
            raise StorageError(f"Delete failed: {e}")

    async def read(self, name: str) -> bytes:
        """Download object bytes."""
        try:
            response = self._s3_client.get_object(
                Bucket=self._config.bucket_name,
                Key=name,
            )

            return response['Body'].read()

        except Exception as e:
            logger.error(
                "Failed to read object",
                extra={"object_name": name, "error": str(e)}
            )
            raise StorageError(f"Download failed: {e}")

    def close(self) -> None:
        self._s3_client.close()

    def _build_url(self, name: str) -> str:
        """
        Build the URL a client can fetch the object from.

        A configured public base URL (CDN, public bucket domain) wins;
        otherwise the path-style endpoint URL is used.
        """
        key = quote(name)
        if self._config.public_base_url:
            return f"{self._config.public_base_url.rstrip('/')}/{key}"
        endpoint = self._config.endpoint_url or self._s3_client.meta.endpoint_url
        return f"{endpoint.rstrip('/')}/{self._config.bucket_name}/{key}"


# ---------------------------------------------------------------------------
# Mock Storage for Local Development
# ---------------------------------------------------------------------------

class MockStorageClient:
    """
    In-memory storage for local development.

    This mock enables testing the full API flow without provisioning
    real object storage. Objects are stored in a dictionary and
    "URLs" are mock URIs.
    """

    def __init__(self, bucket_name: str = "videos") -> None:
        self._bucket_name = bucket_name
        self._objects: dict[str, bytes] = {}
        self._content_types: dict[str, str] = {}
        self.container_ready = False
        logger.info("Initialized mock storage client (in-memory)")

    async def ensure_container(self) -> None:
        self.container_ready = True

    async def store(self, name: str, data: bytes, content_type: str) -> str:
        """Store object in memory."""
        self._objects[name] = data
        self._content_types[name] = content_type

        logger.debug(
            "Stored object in mock storage",
            extra={"object_name": name, "size_bytes": len(data)}
        )

        return f"mock://storage/{self._bucket_name}/{quote(name)}"

    async def delete_if_exists(self, name: str) -> bool:
        """Delete object from memory."""
        if name not in self._objects:
            return False
        del self._objects[name]
        self._content_types.pop(name, None)
        return True

    async def read(self, name: str) -> bytes:
        """Retrieve object from memory."""
        if name not in self._objects:
            raise StorageError(f"Object not found: {name}")

        return self._objects[name]

    def close(self) -> None:
        pass

    # Helpers for test assertions
    def content_type_of(self, name: str) -> Optional[str]:
        return self._content_types.get(name)

    @property
    def object_names(self) -> list[str]:
        return sorted(self._objects)


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_storage_client(
    config: Optional[StorageConfig] = None,
    mock_mode: bool = False,
) -> StorageClient:
    """
    Create storage client based on configuration.

    Args:
        config: Storage configuration (required if not mock_mode)
        mock_mode: If True, return mock client for testing

    Returns:
        StorageClient implementation (S3 or Mock)
    """
    if mock_mode:
        bucket = config.bucket_name if config else "videos"
        return MockStorageClient(bucket_name=bucket)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    return S3StorageClient(config)
