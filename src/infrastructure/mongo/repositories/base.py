"""
Shared repository plumbing.

Each repository wraps one collection and translates between domain
dataclasses and stored documents. Driver errors become
DocumentStoreError so the services see a single failure type.
"""

import logging
from contextlib import contextmanager
from typing import Any, Generator, Generic, Optional, TypeVar

from pymongo import ASCENDING, DESCENDING
from pymongo.errors import PyMongoError

from ..client import DocumentStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

NEWEST_FIRST = [("createdAt", DESCENDING)]
OLDEST_FIRST = [("createdAt", ASCENDING)]


@contextmanager
def translate_errors(operation: str, **context: Any) -> Generator[None, None, None]:
    """Log driver failures and re-raise them as DocumentStoreError."""
    try:
        yield
    except PyMongoError as e:
        logger.error(
            f"Document store {operation} failed",
            extra={**context, "error": str(e)}
        )
        raise DocumentStoreError(f"{operation} failed: {e}")


class DocumentRepository(Generic[T]):
    """
    Generic CRUD over one collection, keyed by the record's own id.

    Subclasses provide _to_document and _from_document.
    """

    def __init__(self, collection) -> None:
        self._collection = collection

    def list_all(self, order: Optional[list] = None) -> list[T]:
        with translate_errors("list", collection=self._collection.name):
            documents = self._collection.find({}, sort=order)
            return [self._from_document(doc) for doc in documents]

    def list_filtered(self, field: str, value: Any, order: Optional[list] = None) -> list[T]:
        with translate_errors("query", collection=self._collection.name, field=field):
            documents = self._collection.find({field: value}, sort=order)
            return [self._from_document(doc) for doc in documents]

    def get_by_id(self, item_id: str) -> Optional[T]:
        with translate_errors("read", collection=self._collection.name, id=item_id):
            document = self._collection.find_one({"_id": item_id})
        return self._from_document(document) if document else None

    def create(self, item: T) -> T:
        with translate_errors("create", collection=self._collection.name):
            self._collection.insert_one(self._to_document(item))
        return item

    def replace(self, item: T) -> bool:
        """Replace the stored document wholesale. Returns False if absent."""
        document = self._to_document(item)
        with translate_errors("replace", collection=self._collection.name, id=document["_id"]):
            result = self._collection.replace_one({"_id": document["_id"]}, document)
        return result.matched_count > 0

    def delete_by_id(self, item_id: str) -> bool:
        with translate_errors("delete", collection=self._collection.name, id=item_id):
            result = self._collection.delete_one({"_id": item_id})
        return result.deleted_count > 0

    def _to_document(self, item: T) -> dict:
        raise NotImplementedError

    def _from_document(self, document: dict) -> T:
        raise NotImplementedError
