"""
Document database connection management.

Provides the DocumentStore handle used by the repositories, backed either
by a real MongoClient or by an in-memory mock for local development.

Using the repository pattern means most code never touches this module
directly - it goes through the repositories, which handle the translation
between domain models and stored documents.
"""

import copy
import logging
from dataclasses import dataclass
from typing import Any, Iterable, Optional

from pymongo import ASCENDING, DESCENDING, MongoClient
from pymongo.errors import DuplicateKeyError, PyMongoError
from pymongo.results import DeleteResult, InsertOneResult, UpdateResult

logger = logging.getLogger(__name__)


class DocumentStoreError(Exception):
    """Raised when document database operations fail."""
    pass


@dataclass
class DocumentStoreConfig:
    """Configuration for the document database connection."""
    uri: str
    database: str = "video-db"
    videos_collection: str = "videos"
    comments_collection: str = "comments"
    users_collection: str = "users"
    server_selection_timeout_ms: int = 5000


class DocumentStore:
    """
    A database handle plus the names of the collections we use.

    Constructed once at application start and closed at shutdown.
    """

    def __init__(self, database, config: DocumentStoreConfig, client=None) -> None:
        self._db = database
        self._config = config
        self._client = client

    @property
    def videos(self):
        return self._db[self._config.videos_collection]

    @property
    def comments(self):
        return self._db[self._config.comments_collection]

    @property
    def users(self):
        return self._db[self._config.users_collection]

    def ping(self) -> None:
        """Round-trip to the server. Raises DocumentStoreError if unreachable."""
        try:
            self._db.command("ping")
        except PyMongoError as e:
            raise DocumentStoreError(f"Ping failed: {e}")

    def ensure_indexes(self) -> None:
        """
        Create the secondary indexes the list queries sort and filter on.

        Records are keyed by their own id (_id); owner and parent lookups
        go through these indexes.
        """
        try:
            self.videos.create_index([("createdAt", DESCENDING)], name="created_at_idx")
            self.videos.create_index(
                [("userId", ASCENDING), ("createdAt", DESCENDING)],
                name="user_created_at_idx",
            )
            self.comments.create_index(
                [("videoId", ASCENDING), ("createdAt", ASCENDING)],
                name="video_created_at_idx",
            )
            logger.info("Document indexes ensured")
        except PyMongoError as e:
            logger.error("Failed to ensure indexes", extra={"error": str(e)})
            raise DocumentStoreError(f"Index creation failed: {e}")

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            logger.debug("Closed document store client")


# ---------------------------------------------------------------------------
# Mock Database for Local Development
# ---------------------------------------------------------------------------

def _matches(document: dict, query: Optional[dict]) -> bool:
    """Top-level equality matching, the only kind the repositories use."""
    if not query:
        return True
    return all(document.get(key) == value for key, value in query.items())


class MockCollection:
    """
    In-memory stand-in for a pymongo Collection.

    Implements just enough of the Collection interface to support the
    repositories: equality filters, sorting, insert with duplicate-key
    detection, replace, $inc/$set updates, and deletes. Results use
    pymongo's own result types so callers can't tell the difference.
    """

    def __init__(self, name: str) -> None:
        self.name = name
        self._documents: dict[Any, dict] = {}
        self._indexes: list[str] = []

    def find(self, filter: Optional[dict] = None, sort: Optional[list] = None) -> list[dict]:
        results = [
            copy.deepcopy(doc) for doc in self._documents.values()
            if _matches(doc, filter)
        ]
        # Apply keys last-to-first so the first key dominates (stable sort)
        for key, direction in reversed(sort or []):
            results.sort(key=lambda d: d.get(key, ""), reverse=direction == DESCENDING)
        return results

    def find_one(self, filter: Optional[dict] = None) -> Optional[dict]:
        for doc in self._documents.values():
            if _matches(doc, filter):
                return copy.deepcopy(doc)
        return None

    def insert_one(self, document: dict) -> InsertOneResult:
        doc_id = document["_id"]
        if doc_id in self._documents:
            raise DuplicateKeyError(f"E11000 duplicate key error collection: {self.name} _id: {doc_id}")
        self._documents[doc_id] = copy.deepcopy(document)
        return InsertOneResult(doc_id, True)

    def replace_one(self, filter: dict, replacement: dict) -> UpdateResult:
        for doc_id, doc in self._documents.items():
            if _matches(doc, filter):
                new_doc = copy.deepcopy(replacement)
                new_doc["_id"] = doc_id
                self._documents[doc_id] = new_doc
                return UpdateResult({"n": 1, "nModified": 1}, True)
        return UpdateResult({"n": 0, "nModified": 0}, True)

    def find_one_and_update(
        self,
        filter: dict,
        update: dict,
        return_document: bool = False,
    ) -> Optional[dict]:
        for doc in self._documents.values():
            if not _matches(doc, filter):
                continue
            before = copy.deepcopy(doc)
            for key, amount in update.get("$inc", {}).items():
                doc[key] = doc.get(key, 0) + amount
            for key, value in update.get("$set", {}).items():
                doc[key] = value
            return copy.deepcopy(doc) if return_document else before
        return None

    def delete_one(self, filter: dict) -> DeleteResult:
        for doc_id, doc in list(self._documents.items()):
            if _matches(doc, filter):
                del self._documents[doc_id]
                return DeleteResult({"n": 1}, True)
        return DeleteResult({"n": 0}, True)

    def delete_many(self, filter: dict) -> DeleteResult:
        doomed = [
            doc_id for doc_id, doc in self._documents.items()
            if _matches(doc, filter)
        ]
        for doc_id in doomed:
            del self._documents[doc_id]
        return DeleteResult({"n": len(doomed)}, True)

    def create_index(self, keys: Iterable, **kwargs) -> str:
        name = kwargs.get("name") or "_".join(f"{k}_{d}" for k, d in keys)
        if name not in self._indexes:
            self._indexes.append(name)
        return name

    def count_documents(self, filter: Optional[dict] = None) -> int:
        return sum(1 for doc in self._documents.values() if _matches(doc, filter))


class MockDatabase:
    """
    In-memory database for local development.

    Collections are created on first access, like in MongoDB.
    Not suitable for production, but perfect for:
    - Local development
    - Unit tests
    - CI/CD environments
    """

    def __init__(self, name: str = "video-db") -> None:
        self.name = name
        self._collections: dict[str, MockCollection] = {}
        logger.info("Initialized mock document database (in-memory)")

    def __getitem__(self, name: str) -> MockCollection:
        if name not in self._collections:
            self._collections[name] = MockCollection(name)
        return self._collections[name]

    def command(self, command: str) -> dict:
        return {"ok": 1.0}


# ---------------------------------------------------------------------------
# Factory Function
# ---------------------------------------------------------------------------

def create_document_store(
    config: Optional[DocumentStoreConfig] = None,
    mock_mode: bool = False,
) -> DocumentStore:
    """
    Create the document store based on configuration.

    Args:
        config: Connection configuration (required if not mock_mode)
        mock_mode: If True, back the store with an in-memory database

    Returns:
        DocumentStore wrapping a real or mock database
    """
    if mock_mode:
        config = config or DocumentStoreConfig(uri="")
        return DocumentStore(MockDatabase(config.database), config)

    if config is None:
        raise ValueError("config is required when not in mock mode")

    try:
        client = MongoClient(
            config.uri,
            serverSelectionTimeoutMS=config.server_selection_timeout_ms,
        )
    except PyMongoError as e:
        logger.error("Document store connection failed", extra={"error": str(e)})
        raise DocumentStoreError(f"Connection failed: {e}")

    logger.info(
        "Connected to document store",
        extra={"database": config.database}
    )

    return DocumentStore(client[config.database], config, client=client)
