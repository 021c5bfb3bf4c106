# ==============================================
# TOPIC 3: IMPORTING
# ==============================================
#
# This package reads documents from files or HTTP sources and
# drives them through the buffers into the write executor.
#
# Modules:
# --------
# - document_reader.py → Parse JSON / Extended JSON sources
# - bulk_importer.py   → Buffer-aware import orchestrator
#
# ==============================================

from .document_reader import ParseResult, fetch_url, parse_documents, read_file
from .bulk_importer import BulkImporter, ImportResult

__all__ = [
    "ParseResult",
    "fetch_url",
    "parse_documents",
    "read_file",
    "BulkImporter",
    "ImportResult",
]
