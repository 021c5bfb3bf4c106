# ==============================================
# MongoClient
# ==============================================
#
# PURPOSE:
#   Write executor for flushed batches: bulk-inserts the documents
#   a BufferManager hands back into a (database, collection).
#
# CLASS: MongoClient
# ------------------
#   Stateful: holds the connection to MongoDB (or a Cosmos DB
#   account through its MongoDB API).
#
#   Constructor:
#   ------------
#   - __init__(uri=None, host="localhost", port=27017, user=None,
#              password=None, database="admin", timeout_ms=5000)
#   - MongoClient.from_config(MongoConfig)
#
#   Methods:
#   --------
#   - connect() -> None
#       Establish connection and ping the server.
#
#   - disconnect() -> None
#
#   - insert_documents(database, collection, documents) -> InsertManyResult
#       Unordered insert_many. Partial failures (BulkWriteError) come
#       back as inserted_count + errors; other driver errors propagate.
#
#   Context Manager:
#   ----------------
#   - __enter__ / __exit__ for `with MongoClient(...) as db:` usage.
#
# ==============================================

import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from pymongo import MongoClient as PyMongoClient
from pymongo.errors import BulkWriteError, ConnectionFailure, OperationFailure

from ..config import MongoConfig
from ..exceptions import NotConnectedError

logger = logging.getLogger(__name__)


@dataclass
class InsertManyResult:
    inserted_count: int = 0
    errors: List[str] = field(default_factory=list)


class MongoClient:
    def __init__(
        self,
        uri: Optional[str] = None,
        host: str = "localhost",
        port: int = 27017,
        user: Optional[str] = None,
        password: Optional[str] = None,
        database: str = "admin",
        timeout_ms: int = 5000,
    ):
        # Store connection params. Don't connect yet.
        self._settings = MongoConfig(
            uri=uri,
            host=host,
            port=port,
            user=user,
            password=password,
            database=database,
            timeout_ms=timeout_ms,
        )
        self.client = None

    @classmethod
    def from_config(cls, config: MongoConfig) -> "MongoClient":
        return cls(
            uri=config.uri,
            host=config.host,
            port=config.port,
            user=config.user,
            password=config.password,
            database=config.database,
            timeout_ms=config.timeout_ms,
        )

    @property
    def is_connected(self) -> bool:
        return self.client is not None

    def connect(self) -> None:
        try:
            self.client = PyMongoClient(
                self._settings.connection_uri(),
                serverSelectionTimeoutMS=self._settings.timeout_ms,
            )
            self.client.admin.command("ping")
            logger.info("Connected to MongoDB at %s:%s", self._settings.host, self._settings.port)
        except ConnectionFailure as e:
            logger.error("Could not connect to MongoDB: %s", e)
            self.client = None
            raise
        except OperationFailure as e:
            logger.error("Authentication failed: %s", e)
            self.client = None
            raise

    def disconnect(self) -> None:
        if self.client:
            self.client.close()
            self.client = None
            logger.info("Disconnected from MongoDB.")

    def insert_documents(self, database: str, collection: str, documents: List[Any]) -> InsertManyResult:
        """
        Insert a batch of documents.

        Args:
            database: Target database name.
            collection: Target collection name.
            documents: Documents in the order they should be written.

        Returns:
            InsertManyResult with the number of documents written and
            one message per rejected document.
        """
        if not documents:
            return InsertManyResult()
        if not self.client:
            raise NotConnectedError("Not connected to MongoDB.")

        target = self.client[database][collection]
        try:
            result = target.insert_many(documents, ordered=False)
            inserted = len(result.inserted_ids)
            logger.info("Inserted %d documents into %s.%s", inserted, database, collection)
            return InsertManyResult(inserted_count=inserted)
        except BulkWriteError as e:
            details = e.details or {}
            errors = [
                f"document {err.get('index')}: {err.get('errmsg', 'write error')}"
                for err in details.get("writeErrors", [])
            ]
            inserted = details.get("nInserted", 0)
            logger.warning(
                "Bulk insert into %s.%s partially failed: %d inserted, %d errors",
                database, collection, inserted, len(errors),
            )
            return InsertManyResult(inserted_count=inserted, errors=errors)

    def __enter__(self):
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
