# ==============================================
# DocumentReader
# ==============================================
#
# PURPOSE:
#   Source side of an import: turns JSON files or HTTP responses
#   into a list of documents plus a list of human-readable errors.
#   Bad input is reported, never raised, so one broken file does
#   not abort a multi-file import.
#
# PARSING RULES:
# --------------
#   - MONGO  → Extended JSON (bson.json_util), so {"$oid": ...},
#              {"$date": ...} etc. become BSON types.
#   - COSMOS → plain JSON; each document is validated:
#        * "id", when present, must be a string without / \ ? #
#          and must not end with a space
#        * every partition key path (e.g. "/tenant/id") must resolve
#          to a truthy value (0, False and "" are rejected)
#   - top-level object → one document
#   - top-level array  → its object members; other members are
#                        skipped with an error
#   - anything else    → error
#
# FUNCTIONS:
# ----------
#   - parse_documents(text, provider, partition_key_paths=None) -> ParseResult
#   - read_file(path, provider, partition_key_paths=None) -> ParseResult
#   - fetch_url(url, provider, timeout=10.0, partition_key_paths=None) -> ParseResult
#
# ==============================================

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Sequence

import requests
from bson import json_util
from bson.errors import BSONError

from ..config import BufferProvider

logger = logging.getLogger(__name__)

ILLEGAL_ID_CHARS = ("/", "\\", "?", "#")


@dataclass
class ParseResult:
    documents: List[Any] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)

    def extend(self, other: "ParseResult") -> None:
        self.documents.extend(other.documents)
        self.errors.extend(other.errors)


def validate_document_id(document: dict) -> List[str]:
    errors = []
    doc_id = document.get("id")
    if not doc_id:
        return errors
    if not isinstance(doc_id, str):
        errors.append("Id must be a string.")
        return errors
    if any(ch in doc_id for ch in ILLEGAL_ID_CHARS):
        errors.append("Id contains illegal chars (/, \\, ?, #).")
    if doc_id.endswith(" "):
        errors.append("Id ends with a space.")
    return errors


def validate_partition_key(document: dict, paths: Optional[Sequence[str]]) -> List[str]:
    """
    Check that every partition key path resolves to a truthy value.

    0, False, "" and missing values are all rejected. When no path
    resolves at all the key is also reported as incomplete.
    """
    errors = []
    values = []
    for path in paths or ():
        parts = [p for p in path.strip("/").split("/") if p]
        value: Any = document
        for part in parts:
            value = value.get(part) if isinstance(value, dict) else None
        values.append((path, value))

    if values and all(value is None for _, value in values):
        errors.append("Partition key is incomplete.")
    for path, value in values:
        if not value:
            errors.append(f"Partition key {path.lstrip('/')} is invalid.")
    return errors


def parse_documents(
    text: str,
    provider=BufferProvider.MONGO,
    partition_key_paths: Optional[Sequence[str]] = None,
) -> ParseResult:
    """
    Parse the content of one JSON source.

    Args:
        text: Raw JSON / Extended JSON text.
        provider: Selects Extended JSON (MONGO) or plain JSON + validation (COSMOS).
        partition_key_paths: Cosmos partition key paths to validate.

    Returns:
        ParseResult with accepted documents and error messages.
    """
    provider = BufferProvider.parse(provider)
    result = ParseResult()

    try:
        if provider is BufferProvider.MONGO:
            parsed = json_util.loads(text)
        else:
            parsed = json.loads(text)
    except (ValueError, BSONError) as e:
        result.errors.append(f"Invalid JSON: {e}")
        return result

    if isinstance(parsed, list):
        candidates = parsed
    elif isinstance(parsed, dict):
        candidates = [parsed]
    else:
        result.errors.append("Document must be an object.")
        return result

    for candidate in candidates:
        # Only a top-level array is supported
        if not isinstance(candidate, dict):
            result.errors.append(
                "Document must be an object. Skipping…\n" + json_util.dumps(candidate)
            )
            continue

        if provider is BufferProvider.COSMOS:
            problems = validate_partition_key(candidate, partition_key_paths)
            problems += validate_document_id(candidate)
            if problems:
                result.errors.extend(problems)
                continue

        result.documents.append(candidate)

    return result


def read_file(
    path,
    provider=BufferProvider.MONGO,
    partition_key_paths: Optional[Sequence[str]] = None,
) -> ParseResult:
    """Read a UTF-8 JSON file and parse it; I/O errors are reported, not raised."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return ParseResult(errors=[f"{path}: {e}"])

    result = parse_documents(text, provider, partition_key_paths)
    result.errors = [f"{path}: {error}" for error in result.errors]
    logger.info("Read %d documents from %s (%d errors)", len(result.documents), path, len(result.errors))
    return result


def fetch_url(
    url: str,
    provider=BufferProvider.MONGO,
    timeout: float = 10.0,
    partition_key_paths: Optional[Sequence[str]] = None,
) -> ParseResult:
    """GET a JSON document (or array of documents) over HTTP and parse it."""
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.exceptions.RequestException as e:
        logger.warning("Failed to fetch %s: %s", url, e)
        return ParseResult(errors=[f"{url}: {e}"])

    result = parse_documents(response.text, provider, partition_key_paths)
    result.errors = [f"{url}: {error}" for error in result.errors]
    logger.info("Fetched %d documents from %s (%d errors)", len(result.documents), url, len(result.errors))
    return result
