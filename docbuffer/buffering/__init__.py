# ==============================================
# TOPIC 1: BUFFERING
# ==============================================
#
# This package accumulates documents per destination
# (database, collection) and decides when a batch must be written.
#
# Modules:
# --------
# - sizing.py          → Pluggable document size estimators
# - document_buffer.py → Bounded buffer for one destination
# - buffer_manager.py  → Routes documents to per-destination buffers
# - session_store.py   → Explicit registry of manager sessions
#
# ==============================================

from .sizing import (
    SizeEstimator,
    bson_size_estimator,
    default_size_estimator,
    json_size_estimator,
    mongo_size_estimator,
)
from .document_buffer import (
    BufferErrorCode,
    BufferStats,
    DocumentBuffer,
    InsertResult,
    create_cosmos_buffer,
    create_mongo_buffer,
)
from .buffer_manager import BufferKey, BufferManager
from .session_store import BufferSessionStore

__all__ = [
    "SizeEstimator",
    "bson_size_estimator",
    "default_size_estimator",
    "json_size_estimator",
    "mongo_size_estimator",
    "BufferErrorCode",
    "BufferStats",
    "DocumentBuffer",
    "InsertResult",
    "create_cosmos_buffer",
    "create_mongo_buffer",
    "BufferKey",
    "BufferManager",
    "BufferSessionStore",
]
