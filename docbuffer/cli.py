# ==============================================
# CLI: Command Line Entry Point
# ==============================================
#
# COMMANDS:
# ---------
# 1. Import JSON files (and/or an HTTP source) into a collection:
#    python -m docbuffer.cli import data.json more.json --database shop --collection orders
#    python -m docbuffer.cli import --url http://127.0.0.1:8000/records --database shop --collection orders
#    python -m docbuffer.cli import data.json --provider cosmos --max-item-count 25 ...
#
# 2. Show the buffer limit presets:
#    python -m docbuffer.cli presets
#
# Connection settings come from the environment / .env (see config.py).
# Exit code is 0 on a clean import, 1 when any document failed or
# any source could not be read.
#
# ==============================================

import argparse
import logging
import sys
from typing import List, Optional

from pymongo.errors import PyMongoError

from .buffering import BufferSessionStore
from .config import PRESETS, BufferProvider, get_config
from .importing import BulkImporter, ParseResult, fetch_url, read_file
from .storage import MongoClient


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docbuffer",
        description="Bulk-import documents through size- and count-bounded buffers.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    import_parser = subparsers.add_parser("import", help="Import JSON documents")
    import_parser.add_argument("files", nargs="*", help="JSON / Extended JSON files")
    import_parser.add_argument("--url", help="HTTP endpoint returning a document or an array")
    import_parser.add_argument("--database", help="Target database (default: IMPORT_DATABASE)")
    import_parser.add_argument("--collection", help="Target collection (default: IMPORT_COLLECTION)")
    import_parser.add_argument(
        "--provider",
        choices=[p.value for p in BufferProvider],
        help="Limit preset and parsing rules (default: BUFFER_PROVIDER)",
    )
    import_parser.add_argument(
        "--partition-key",
        action="append",
        dest="partition_keys",
        help="Cosmos partition key path to validate, e.g. /tenantId (repeatable)",
    )
    import_parser.add_argument("--max-item-count", type=int)
    import_parser.add_argument("--max-total-size-bytes", type=int)
    import_parser.add_argument("--max-single-item-size-bytes", type=int)

    subparsers.add_parser("presets", help="Show buffer limit presets")
    return parser


def _limit_overrides(args: argparse.Namespace) -> dict:
    overrides = {}
    for name in ("max_item_count", "max_total_size_bytes", "max_single_item_size_bytes"):
        value = getattr(args, name)
        if value is not None:
            overrides[name] = value
    return overrides


def cmd_presets() -> int:
    for provider, preset in PRESETS.items():
        print(f"{provider.value}:")
        for name, value in preset.to_dict().items():
            print(f"   → {name}: {value}")
    return 0


def cmd_import(args: argparse.Namespace, writer=None) -> int:
    try:
        config = get_config()
    except ValueError as e:
        print(f"✗ Invalid configuration: {e}")
        return 2
    database = args.database or config.importing.database
    collection = args.collection or config.importing.collection
    url = args.url or config.importing.source_url
    if not database or not collection:
        print("✗ --database and --collection are required (or IMPORT_DATABASE / IMPORT_COLLECTION)")
        return 2
    if not args.files and not url:
        print("✗ Nothing to import: pass files and/or --url")
        return 2

    provider = BufferProvider.parse(args.provider or config.importing.provider)
    if args.provider and provider is not config.importing.provider:
        base = PRESETS[provider]
    else:
        base = config.buffer

    sources = ParseResult()
    for path in args.files:
        sources.extend(read_file(path, provider, args.partition_keys))
    if url:
        sources.extend(fetch_url(url, provider, config.importing.request_timeout_seconds, args.partition_keys))

    for error in sources.errors:
        print(f"⚠ {error}")
    if not sources.documents:
        print("✗ No valid documents to import")
        return 1

    sessions = BufferSessionStore()
    try:
        token = sessions.create(
            cluster_id=f"{config.mongo.host}:{config.mongo.port}",
            config=base,
            provider=provider,
            **_limit_overrides(args),
        )
    except ValueError as e:
        print(f"✗ Invalid buffer limits: {e}")
        return 2
    owns_writer = writer is None
    writer = writer or MongoClient.from_config(config.mongo)
    try:
        if owns_writer:
            try:
                writer.connect()
            except PyMongoError as e:
                print(f"✗ Could not connect: {e}")
                return 1
        importer = BulkImporter(writer, manager=sessions.get(token))
        print(f"📥 Importing {len(sources.documents)} documents into {database}.{collection}...")
        importer.import_documents(database, collection, sources.documents)
        result = importer.finish()
    finally:
        sessions.close()
        if owns_writer:
            writer.disconnect()

    print(f"✓ Inserted {result.inserted} document(s) in {result.batches} batch(es)")
    for error in result.errors:
        print(f"   ✗ {error}")
    if result.has_errors or sources.errors:
        print("⚠ Import finished with errors.")
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command == "presets":
        return cmd_presets()
    return cmd_import(args)


if __name__ == "__main__":
    sys.exit(main())
