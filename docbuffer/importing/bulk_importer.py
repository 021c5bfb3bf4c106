# ==============================================
# BulkImporter: Import Orchestrator
# ==============================================
#
# PURPOSE:
#   Drives documents from a source through a BufferManager into a
#   write executor (anything with
#   insert_documents(database, collection, documents)).
#
# FLOW PER DOCUMENT:
#
#   document ──► should_flush(db, coll, size)? ──yes──► flush + write batch
#                        │
#                        ▼
#               insert(db, coll, document)
#                        │
#         ┌──────────────┼───────────────────────┐
#      success    DOCUMENT_TOO_LARGE         BUFFER_FULL
#      (held)     write [document] alone     write returned batch,
#                                            re-submit the document
#
#   finish() drains every destination at end of stream.
#
# CLASS: BulkImporter
# -------------------
#   - __init__(writer, manager=None, config=None)
#   - import_document(database, collection, document) -> None
#   - import_documents(database, collection, documents) -> None
#   - finish() -> ImportResult
#   - get_status() -> dict
#   - Context manager: finish() on clean exit.
#
# ==============================================

import logging
from dataclasses import dataclass, field
from typing import Any, Iterable, List, Optional

from pymongo.errors import PyMongoError

from ..buffering import BufferErrorCode, BufferManager
from ..config import AppConfig, get_config

logger = logging.getLogger(__name__)


@dataclass
class ImportResult:
    inserted: int = 0
    failed: int = 0
    batches: int = 0
    errors: List[str] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return self.failed > 0 or bool(self.errors)

    def to_dict(self) -> dict:
        return {
            "inserted": self.inserted,
            "failed": self.failed,
            "batches": self.batches,
            "errors": list(self.errors),
        }


class BulkImporter:
    """
    Feeds documents into per-destination buffers and writes each batch
    the buffers hand back.
    """

    def __init__(self, writer, manager: Optional[BufferManager] = None, config: Optional[AppConfig] = None):
        """
        Args:
            writer: Write executor with insert_documents(database, collection, documents).
            manager: Buffer manager for this import session. Built from config if None.
            config: Application configuration. If None, loads from environment.
        """
        if manager is None:
            config = config or get_config()
            manager = BufferManager(config=config.buffer, provider=config.importing.provider)
        self._writer = writer
        self._manager = manager
        self._result = ImportResult()
        self._documents_seen = 0

    @property
    def manager(self) -> BufferManager:
        return self._manager

    @property
    def result(self) -> ImportResult:
        return self._result

    def import_document(self, database: str, collection: str, document: Any) -> None:
        """
        Buffer one document, writing whatever batch it forces out.

        Args:
            database: Destination database.
            collection: Destination collection.
            document: Document to import. None is ignored.
        """
        if document is None:
            return
        self._documents_seen += 1

        # Flush proactively so the reject path is only hit by oversized documents
        size = self._manager.get_size(document)
        if self._manager.should_flush(database, collection, size):
            self._write(database, collection, self._manager.flush(database, collection))

        result = self._manager.insert(database, collection, document)
        if result.success:
            return

        if result.error_code is BufferErrorCode.DOCUMENT_TOO_LARGE:
            # Written alone so it cannot fail a whole bulk insert
            logger.info("Writing oversized document (%d bytes) to %s.%s on its own", size, database, collection)
            self._write(database, collection, result.documents_to_process)
            return

        if result.error_code is BufferErrorCode.BUFFER_FULL:
            self._write(database, collection, result.documents_to_process)
            retry = self._manager.insert(database, collection, document)
            if not retry.success:
                # Cannot fit even an empty buffer (single item limit above total limit)
                self._write(database, collection, [document])

    def import_documents(self, database: str, collection: str, documents: Iterable[Any]) -> None:
        for document in documents:
            self.import_document(database, collection, document)

    def finish(self) -> ImportResult:
        """Write every partially filled buffer and return the totals."""
        for (database, collection), documents in self._manager.flush_all().items():
            self._write(database, collection, documents)
        logger.info(
            "Import finished: %d inserted, %d failed in %d batches",
            self._result.inserted, self._result.failed, self._result.batches,
        )
        return self._result

    def get_status(self) -> dict:
        buffered = self._manager.total_stats()
        return {
            "documents_seen": self._documents_seen,
            "buffered_documents": buffered.item_count,
            "buffered_bytes": buffered.total_size_bytes,
            "destinations": len(self._manager),
            **self._result.to_dict(),
        }

    def _write(self, database: str, collection: str, documents: Optional[List[Any]]) -> None:
        if not documents:
            return
        self._result.batches += 1
        try:
            response = self._writer.insert_documents(database, collection, documents)
        except PyMongoError as e:
            # The buffer no longer owns these documents; count them as failed
            logger.error("Writing %d documents to %s.%s failed: %s", len(documents), database, collection, e)
            self._result.failed += len(documents)
            self._result.errors.append(f"{database}.{collection}: {e}")
            return

        self._result.inserted += response.inserted_count
        self._result.failed += len(documents) - response.inserted_count
        self._result.errors.extend(response.errors)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            self.finish()
        return False
