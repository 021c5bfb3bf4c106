# ==============================================
# DocumentBuffer
# ==============================================
#
# PURPOSE:
#   Holds the documents waiting to be written to ONE destination
#   (database, collection). Decides whether a new document can be
#   admitted under three limits at once:
#     - max_item_count              (documents held)
#     - max_total_size_bytes        (cumulative estimated size)
#     - max_single_item_size_bytes  (one document on its own)
#
# CLASS: DocumentBuffer
# ---------------------
#   Stateful: owns the ordered list of held documents and their
#   running size total. Not thread-safe: one producer per buffer.
#
#   Methods:
#   --------
#   - try_add(document) -> InsertResult
#       1. None                       → success=False, EMPTY_DOCUMENT, []
#       2. size > single-item limit   → success=False, DOCUMENT_TOO_LARGE,
#                                       [document]; buffer untouched
#       3. count or size would exceed → success=False, BUFFER_FULL,
#                                       flush() of the EXISTING documents.
#                                       The triggering document is NOT kept;
#                                       the caller re-submits it.
#       4. otherwise                  → appended, success=True
#
#   - flush() -> list
#       Return held documents in insertion order and reset to empty.
#
#   - should_flush(candidate_size=0) -> bool
#       Pure predicate used to flush proactively before inserting.
#
#   - get_stats() -> BufferStats
#
# Limits are exclusive going over: a document exactly at the single
# item limit, or one that brings the total exactly to the size limit,
# is admitted.
#
# ==============================================

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from ..config import BufferConfig, BufferProvider
from .sizing import SizeEstimator, default_size_estimator, mongo_size_estimator

logger = logging.getLogger(__name__)


class BufferErrorCode(str, Enum):
    """Why a document was not admitted."""
    NONE = "none"
    DOCUMENT_TOO_LARGE = "document_too_large"
    BUFFER_FULL = "buffer_full"
    EMPTY_DOCUMENT = "empty_document"


@dataclass
class InsertResult:
    """
    Outcome of one admission attempt.

    documents_to_process is None when the document was buffered, and a
    list (possibly empty) of documents the caller must write now otherwise.
    """
    success: bool
    error_code: BufferErrorCode = BufferErrorCode.NONE
    documents_to_process: Optional[List[Any]] = None


@dataclass
class BufferStats:
    """Occupancy snapshot of a buffer."""
    item_count: int = 0
    total_size_bytes: int = 0

    def to_dict(self) -> dict:
        return {
            "item_count": self.item_count,
            "total_size_bytes": self.total_size_bytes,
        }


class DocumentBuffer:
    """Bounded, order-preserving document accumulator for one destination."""

    def __init__(self, config: BufferConfig, size_estimator: Optional[SizeEstimator] = None):
        """
        Args:
            config: Limits for this buffer.
            size_estimator: (document) -> bytes. Defaults to the MongoDB estimator.
        """
        self._config = config
        self._size_estimator = size_estimator or mongo_size_estimator
        self._items: List[Any] = []
        self._current_size_bytes = 0

    @property
    def config(self) -> BufferConfig:
        return self._config

    @property
    def is_empty(self) -> bool:
        return not self._items

    def get_document_size(self, document: Any) -> int:
        """Estimated size of a document; 0 when there is no document."""
        if document is None:
            return 0
        return self._size_estimator(document)

    def should_flush(self, candidate_size: int = 0) -> bool:
        """
        Check whether admitting one more document would break a limit.

        Args:
            candidate_size: Estimated size of the document about to be added.

        Returns:
            True if the buffer must be flushed before adding it.
        """
        return (
            len(self._items) + 1 > self._config.max_item_count
            or self._current_size_bytes + candidate_size > self._config.max_total_size_bytes
        )

    def try_add(self, document: Any) -> InsertResult:
        """
        Admit a document or hand back the documents that must be written now.

        Args:
            document: Document to buffer.

        Returns:
            InsertResult (see module header for the four outcomes).
        """
        if document is None:
            return InsertResult(
                success=False,
                error_code=BufferErrorCode.EMPTY_DOCUMENT,
                documents_to_process=[],
            )

        size = self.get_document_size(document)

        if size > self._config.max_single_item_size_bytes:
            logger.debug(
                "Document of %d bytes exceeds single item limit (%d), returning it alone",
                size, self._config.max_single_item_size_bytes,
            )
            return InsertResult(
                success=False,
                error_code=BufferErrorCode.DOCUMENT_TOO_LARGE,
                documents_to_process=[document],
            )

        if self.should_flush(size):
            # The triggering document is not kept; it goes back to the caller
            return InsertResult(
                success=False,
                error_code=BufferErrorCode.BUFFER_FULL,
                documents_to_process=self.flush(),
            )

        self._items.append(document)
        self._current_size_bytes += size
        return InsertResult(success=True)

    def flush(self) -> List[Any]:
        """Return all held documents in insertion order and reset occupancy."""
        flushed = list(self._items)
        self._items = []
        self._current_size_bytes = 0
        if flushed:
            logger.debug("Flushed %d documents", len(flushed))
        return flushed

    def get_stats(self) -> BufferStats:
        return BufferStats(
            item_count=len(self._items),
            total_size_bytes=self._current_size_bytes,
        )

    def __len__(self) -> int:
        return len(self._items)


def create_mongo_buffer(size_estimator: Optional[SizeEstimator] = None, **overrides: int) -> DocumentBuffer:
    """Standalone buffer with the MongoDB preset limits."""
    return DocumentBuffer(
        BufferConfig.for_provider(BufferProvider.MONGO, **overrides),
        size_estimator or default_size_estimator(BufferProvider.MONGO),
    )


def create_cosmos_buffer(size_estimator: Optional[SizeEstimator] = None, **overrides: int) -> DocumentBuffer:
    """Standalone buffer with the Cosmos DB preset limits."""
    return DocumentBuffer(
        BufferConfig.for_provider(BufferProvider.COSMOS, **overrides),
        size_estimator or default_size_estimator(BufferProvider.COSMOS),
    )
