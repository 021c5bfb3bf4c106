# ==============================================
# Size Estimators
# ==============================================
#
# PURPOSE:
#   Pluggable functions that approximate the serialized byte size
#   of a document. Buffers use them for capacity accounting, so they
#   run once per insertion attempt and must be deterministic.
#
# FUNCTIONS:
# ----------
# - json_size_estimator(document) -> int
#     UTF-8 length of the compact Extended JSON rendering.
#
# - mongo_size_estimator(document) -> int
#     Extended JSON length plus 20% for BSON type/length overhead.
#
# - bson_size_estimator(document) -> int
#     Exact encoded BSON length (slower, requires a mapping).
#
# - default_size_estimator(provider) -> SizeEstimator
#
# All estimators return 0 for None. Serialization errors are not
# caught: an unsizable document must not be accounted as size 0.
#
# ==============================================

import math
from typing import Any, Callable

import bson
from bson import json_util

from ..config import BufferProvider

SizeEstimator = Callable[[Any], int]

BSON_OVERHEAD_FACTOR = 1.2


def json_size_estimator(document: Any) -> int:
    if document is None:
        return 0
    return len(json_util.dumps(document, separators=(",", ":")).encode("utf-8"))


def mongo_size_estimator(document: Any) -> int:
    if document is None:
        return 0
    return math.ceil(json_size_estimator(document) * BSON_OVERHEAD_FACTOR)


def bson_size_estimator(document: Any) -> int:
    if document is None:
        return 0
    return len(bson.encode(document))


def default_size_estimator(provider=None) -> SizeEstimator:
    """
    Pick the estimator matching a provider's wire encoding.

    Args:
        provider: BufferProvider or its string value (default MONGO).

    Returns:
        mongo_size_estimator for MONGO, json_size_estimator for COSMOS.
    """
    provider = BufferProvider.parse(provider or BufferProvider.MONGO)
    if provider is BufferProvider.COSMOS:
        return json_size_estimator
    return mongo_size_estimator
