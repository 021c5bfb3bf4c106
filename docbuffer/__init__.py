# ==============================================
# Document Buffering Framework
# ==============================================
#
# Package Structure (3 Topics + CLI):
#
# docbuffer/
# ├── buffering/        # Topic 1: Per-destination bounded document buffers
# ├── storage/          # Topic 2: Write executor (MongoDB bulk inserts)
# ├── importing/        # Topic 3: Document sources + import orchestrator
# ├── config.py         # Buffer presets and application configuration
# ├── exceptions.py     # Exception hierarchy
# └── cli.py            # Command line entry point
#
# ==============================================

from .config import BufferConfig, BufferProvider
from .buffering import BufferManager, DocumentBuffer, InsertResult, BufferStats

__version__ = "0.1.0"

__all__ = [
    "BufferConfig",
    "BufferProvider",
    "BufferManager",
    "DocumentBuffer",
    "InsertResult",
    "BufferStats",
]
