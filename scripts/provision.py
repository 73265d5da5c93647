#!/usr/bin/env python3
"""
Provision the storage bucket and document indexes.

The API does this on startup too, but running it ahead of a deploy
surfaces credential or permission problems before traffic arrives.

Usage:
    python scripts/provision.py
    python scripts/provision.py --check   # ping only, change nothing

Requires:
    - .env file (or environment) with storage and document store settings
"""

import asyncio
import sys
from pathlib import Path

# Add project root to path so we can import our modules
sys.path.insert(0, str(Path(__file__).parent.parent))

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


async def provision(check_only: bool = False) -> bool:
    from src.config.settings import Settings
    from src.infrastructure.mongo import DocumentStoreConfig, create_document_store
    from src.infrastructure.storage import StorageConfig, create_storage_client

    settings = Settings()

    missing = settings.validate_required_fields()
    if missing:
        print(f"ERROR: missing configuration: {', '.join(missing)}")
        return False

    documents = create_document_store(
        config=DocumentStoreConfig(
            uri=settings.document_store_uri,
            database=settings.document_db_name,
            videos_collection=settings.videos_collection_name,
            comments_collection=settings.comments_collection_name,
            users_collection=settings.users_collection_name,
        ),
        mock_mode=settings.document_store_mock_mode,
    )
    storage = create_storage_client(
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

    try:
        documents.ping()
        print(f"Document store reachable (database: {settings.document_db_name})")

        if check_only:
            return True

        documents.ensure_indexes()
        print("Indexes ensured on videos and comments")

        await storage.ensure_container()
        print(f"Bucket '{settings.blob_container_name}' ensured")
        return True

    except Exception as e:
        print(f"ERROR: {e}")
        return False

    finally:
        storage.close()
        documents.close()


def main():
    import argparse

    parser = argparse.ArgumentParser(description='Provision bucket and document indexes')
    parser.add_argument('--check', action='store_true', help='Only check connectivity')
    args = parser.parse_args()

    success = asyncio.run(provision(check_only=args.check))

    sys.exit(0 if success else 1)


if __name__ == '__main__':
    main()
