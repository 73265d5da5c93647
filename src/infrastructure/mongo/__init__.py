"""
Document database integration (MongoDB wire protocol via pymongo).

Includes an in-memory mock database for local development.
"""

from .client import (
    DocumentStore,
    DocumentStoreConfig,
    DocumentStoreError,
    MockDatabase,
    create_document_store,
)

__all__ = [
    "DocumentStore",
    "DocumentStoreConfig",
    "DocumentStoreError",
    "MockDatabase",
    "create_document_store",
]
