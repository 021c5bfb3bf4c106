# ==============================================
# Tests for BulkImporter
# ==============================================

import pytest
from pymongo.errors import AutoReconnect

from docbuffer.buffering import BufferManager
from docbuffer.config import BufferConfig
from docbuffer.importing import BulkImporter
from docbuffer.storage import InsertManyResult

from conftest import size_of, sized_doc


def written_batches(writer):
    return [
        (call.args[0], call.args[1], [d["_id"] for d in call.args[2]])
        for call in writer.insert_documents.call_args_list
    ]


@pytest.fixture
def importer(writer, manager):
    return BulkImporter(writer, manager=manager)


class TestBatching:
    def test_batches_by_count(self, importer, writer):
        importer.import_documents("db", "c", [sized_doc(i, 10) for i in range(7)])
        result = importer.finish()

        assert written_batches(writer) == [
            ("db", "c", [0, 1, 2]),
            ("db", "c", [3, 4, 5]),
            ("db", "c", [6]),
        ]
        assert result.inserted == 7
        assert result.batches == 3
        assert not result.has_errors

    def test_batches_by_size(self, importer, writer):
        importer.import_documents("db", "c", [sized_doc(i, 40) for i in range(4)])
        importer.finish()
        assert written_batches(writer) == [("db", "c", [0, 1]), ("db", "c", [2, 3])]

    def test_oversized_document_written_alone(self, importer, writer):
        importer.import_document("db", "c", sized_doc(1, 10))
        importer.import_document("db", "c", sized_doc(2, 80))
        importer.import_document("db", "c", sized_doc(3, 10))
        importer.finish()

        assert written_batches(writer) == [("db", "c", [2]), ("db", "c", [1, 3])]

    def test_destinations_are_batched_separately(self, importer, writer):
        importer.import_document("db", "a", sized_doc(1, 10))
        importer.import_document("db", "b", sized_doc(2, 10))
        importer.import_document("db", "a", sized_doc(3, 10))
        importer.finish()

        assert written_batches(writer) == [("db", "a", [1, 3]), ("db", "b", [2])]

    def test_none_is_ignored(self, importer, writer):
        importer.import_document("db", "c", None)
        assert importer.finish().batches == 0
        writer.insert_documents.assert_not_called()

    def test_every_document_written_once_in_order(self, importer, writer):
        sizes = [10, 45, 60, 5, 30, 30, 30, 1, 50, 99, 3]
        importer.import_documents("db", "c", [sized_doc(i, s) for i, s in enumerate(sizes)])
        importer.finish()

        ids = [i for _, _, batch in written_batches(writer) for i in batch]
        assert sorted(ids) == list(range(len(sizes)))
        buffered = [i for i in ids if sizes[i] <= 50]
        assert buffered == sorted(buffered)


class TestRejectPath:
    def test_full_buffer_resubmits_triggering_document(self, writer):
        """Without the pre-check, a full buffer hands back its batch and the document is re-inserted."""
        manager = BufferManager(
            config=BufferConfig(max_item_count=2, max_total_size_bytes=1000, max_single_item_size_bytes=1000),
            size_estimator=size_of,
        )
        manager.should_flush = lambda *args, **kwargs: False
        importer = BulkImporter(writer, manager=manager)

        importer.import_documents("db", "c", [sized_doc(i, 1) for i in range(3)])
        importer.finish()

        assert written_batches(writer) == [("db", "c", [0, 1]), ("db", "c", [2])]

    def test_document_larger_than_total_limit(self, writer):
        manager = BufferManager(
            config=BufferConfig(max_item_count=5, max_total_size_bytes=10, max_single_item_size_bytes=20),
            size_estimator=size_of,
        )
        importer = BulkImporter(writer, manager=manager)

        importer.import_document("db", "c", sized_doc(1, 15))
        result = importer.finish()

        assert written_batches(writer) == [("db", "c", [1])]
        assert result.inserted == 1


class TestWriteFailures:
    def test_partial_failure_counted(self, importer, writer):
        writer.insert_documents.side_effect = lambda db, coll, docs: InsertManyResult(
            inserted_count=len(docs) - 1, errors=["document 0: duplicate key"]
        )
        importer.import_documents("db", "c", [sized_doc(i, 10) for i in range(2)])
        result = importer.finish()

        assert result.inserted == 1
        assert result.failed == 1
        assert result.errors == ["document 0: duplicate key"]
        assert result.has_errors

    def test_driver_error_fails_the_batch(self, importer, writer):
        writer.insert_documents.side_effect = AutoReconnect("lost")
        importer.import_documents("db", "c", [sized_doc(i, 10) for i in range(2)])
        result = importer.finish()

        assert result.failed == 2
        assert result.inserted == 0
        assert "lost" in result.errors[0]


class TestStatusAndLifecycle:
    def test_status(self, importer):
        importer.import_document("db", "c", sized_doc(1, 10))
        status = importer.get_status()
        assert status["documents_seen"] == 1
        assert status["buffered_documents"] == 1
        assert status["buffered_bytes"] == 10
        assert status["inserted"] == 0

    def test_context_manager_finishes(self, writer, manager):
        with BulkImporter(writer, manager=manager) as importer:
            importer.import_document("db", "c", sized_doc(1, 10))
        assert written_batches(writer) == [("db", "c", [1])]

    def test_context_manager_does_not_flush_on_error(self, writer, manager):
        with pytest.raises(RuntimeError):
            with BulkImporter(writer, manager=manager) as importer:
                importer.import_document("db", "c", sized_doc(1, 10))
                raise RuntimeError("boom")
        writer.insert_documents.assert_not_called()

    def test_manager_built_from_config(self, writer):
        importer = BulkImporter(writer)
        assert importer.manager.config.max_item_count == 50
