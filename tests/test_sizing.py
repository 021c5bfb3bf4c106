# ==============================================
# Tests for size estimators
# ==============================================

import pytest
from bson import ObjectId

from docbuffer.buffering import (
    bson_size_estimator,
    default_size_estimator,
    json_size_estimator,
    mongo_size_estimator,
)
from docbuffer.config import BufferProvider


class TestEstimators:
    def test_none_is_zero(self):
        assert json_size_estimator(None) == 0
        assert mongo_size_estimator(None) == 0
        assert bson_size_estimator(None) == 0

    def test_json_size_is_utf8_length(self):
        # '{"a":1}'
        assert json_size_estimator({"a": 1}) == 7

    def test_json_size_has_no_separator_padding(self):
        # '{"a":1,"b":[1,2]}'
        assert json_size_estimator({"a": 1, "b": [1, 2]}) == 17

    def test_mongo_adds_bson_overhead(self):
        assert mongo_size_estimator({"a": 1}) == 9  # ceil(7 * 1.2)

    def test_bson_size_is_exact(self):
        assert bson_size_estimator({"a": 1}) == 12

    def test_extended_json_types_are_sized(self):
        doc = {"_id": ObjectId("5f1d7f3e9b1e8a3a4c8b4567")}
        assert json_size_estimator(doc) > 0
        assert mongo_size_estimator(doc) >= json_size_estimator(doc)

    def test_deterministic(self):
        doc = {"x": [1, 2, 3], "y": {"z": "w"}}
        assert mongo_size_estimator(doc) == mongo_size_estimator(dict(doc))

    def test_unserializable_document_raises(self):
        with pytest.raises(TypeError):
            json_size_estimator({"a": object()})
        with pytest.raises(TypeError):
            bson_size_estimator([1, 2])


class TestDefaultEstimator:
    def test_mongo(self):
        assert default_size_estimator(BufferProvider.MONGO) is mongo_size_estimator
        assert default_size_estimator() is mongo_size_estimator

    def test_cosmos(self):
        assert default_size_estimator("cosmos") is json_size_estimator
