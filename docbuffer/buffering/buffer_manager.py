# ==============================================
# BufferManager
# ==============================================
#
# PURPOSE:
#   Routes documents to the DocumentBuffer of their destination
#   (database, collection), creating buffers lazily on first use.
#   One manager = one bulk import / migration session.
#
# CLASS: BufferManager
# --------------------
#   Stateful: owns every DocumentBuffer it creates. Buffers are
#   emptied by flush() but live as long as the manager does.
#
#   Constructor:
#   ------------
#   - __init__(cluster_id=None, config=None, size_estimator=None,
#              provider=BufferProvider.MONGO, **overrides)
#       config defaults to the provider preset; overrides replace
#       any subset of the three limits.
#
#   Methods (all keyed by database, collection):
#   --------------------------------------------
#   - insert(database, collection, document) -> InsertResult
#   - flush(database, collection) -> list
#   - should_flush(database, collection, candidate_size=0) -> bool
#   - get_buffer_stats(database, collection) -> BufferStats
#   - get_size(document) -> int
#   - keys() -> list[(database, collection)]
#   - flush_all() -> dict[(database, collection), list]
#   - total_stats() -> BufferStats
#
# Keys are (database, collection) tuples, so names containing "."
# never collide (("a.b", "c") != ("a", "b.c")).
#
# ==============================================

import logging
from dataclasses import replace
from typing import Any, Dict, List, Optional, Tuple

from ..config import BufferConfig, BufferProvider
from .document_buffer import BufferStats, DocumentBuffer, InsertResult
from .sizing import SizeEstimator, default_size_estimator

logger = logging.getLogger(__name__)

BufferKey = Tuple[str, str]


class BufferManager:
    """
    Per-destination buffers for one bulk operation session.

    Example:
        manager = BufferManager(provider="cosmos", max_item_count=25)
        result = manager.insert("shop", "orders", {"_id": 1})
        if not result.success:
            writer.insert_documents("shop", "orders", result.documents_to_process)
    """

    def __init__(
        self,
        cluster_id: Optional[str] = None,
        config: Optional[BufferConfig] = None,
        size_estimator: Optional[SizeEstimator] = None,
        provider=BufferProvider.MONGO,
        **overrides: int
    ):
        """
        Args:
            cluster_id: Optional identifier of the target cluster (for logs).
            config: Explicit limits. Defaults to the provider preset.
            size_estimator: (document) -> bytes. Defaults to the provider's estimator.
            provider: BufferProvider or its string value.
            **overrides: Individual limits replacing the config/preset values.
        """
        self._provider = BufferProvider.parse(provider)
        base = config or BufferConfig.for_provider(self._provider)
        self._config = replace(base, **overrides) if overrides else base
        self._size_estimator = size_estimator or default_size_estimator(self._provider)
        self._cluster_id = cluster_id
        self._buffers: Dict[BufferKey, DocumentBuffer] = {}

    @property
    def cluster_id(self) -> Optional[str]:
        return self._cluster_id

    @property
    def config(self) -> BufferConfig:
        return self._config

    @property
    def provider(self) -> BufferProvider:
        return self._provider

    def get_size(self, document: Any) -> int:
        """Estimated size of a document with this manager's estimator (0 for None)."""
        if document is None:
            return 0
        return self._size_estimator(document)

    def _get_key(self, database: str, collection: str) -> BufferKey:
        return (database, collection)

    def _get_or_create_buffer(self, database: str, collection: str) -> DocumentBuffer:
        key = self._get_key(database, collection)
        buffer = self._buffers.get(key)
        if buffer is None:
            buffer = DocumentBuffer(self._config, self._size_estimator)
            self._buffers[key] = buffer
            logger.debug("Created buffer for %s.%s (cluster=%s)", database, collection, self._cluster_id)
        return buffer

    def insert(self, database: str, collection: str, document: Any) -> InsertResult:
        """
        Try to buffer a document for (database, collection).

        If the document is too large or the buffer is full, the result
        carries the documents that must be written now. Checking
        should_flush() first avoids the full-buffer path.
        """
        return self._get_or_create_buffer(database, collection).try_add(document)

    def flush(self, database: str, collection: str) -> List[Any]:
        """Drain the buffer of (database, collection); empty list if nothing is held."""
        documents = self._get_or_create_buffer(database, collection).flush()
        if documents:
            logger.info("Flushing %d documents for %s.%s", len(documents), database, collection)
        return documents

    def should_flush(self, database: str, collection: str, candidate_size: int = 0) -> bool:
        return self._get_or_create_buffer(database, collection).should_flush(candidate_size)

    def get_buffer_stats(self, database: str, collection: str) -> BufferStats:
        return self._get_or_create_buffer(database, collection).get_stats()

    def keys(self) -> List[BufferKey]:
        """Destinations seen so far, in first-seen order."""
        return list(self._buffers)

    def flush_all(self) -> Dict[BufferKey, List[Any]]:
        """
        Drain every buffer that holds documents.

        Returns:
            {(database, collection): documents} for non-empty buffers only.
        """
        flushed = {}
        for (database, collection), buffer in self._buffers.items():
            if buffer.is_empty:
                continue
            flushed[(database, collection)] = buffer.flush()
        return flushed

    def total_stats(self) -> BufferStats:
        total = BufferStats()
        for buffer in self._buffers.values():
            stats = buffer.get_stats()
            total.item_count += stats.item_count
            total.total_size_bytes += stats.total_size_bytes
        return total

    def __len__(self) -> int:
        return len(self._buffers)
