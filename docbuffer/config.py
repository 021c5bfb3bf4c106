# ==============================================
# Configuration Management
# ==============================================
#
# PURPOSE:
#   Buffer limit presets per storage provider, plus the typed
#   application config loaded from environment variables / .env.
#
# CLASSES:
# --------
# - BufferProvider (Enum)
#     MONGO, COSMOS. Selects the preset limits and the default
#     size estimator.
#
# - BufferConfig (frozen dataclass)
#     max_item_count: int              documents per buffer
#     max_total_size_bytes: int        cumulative estimated size per buffer
#     max_single_item_size_bytes: int  above this a document is never buffered
#
#     BufferConfig.for_provider(provider, **overrides)
#       MONGO  → 50 docs, 32 MiB total, 16 MiB per document
#       COSMOS → 100 docs, 4 MiB total, 2 MiB per document
#
# - MongoConfig (dataclass)
#     uri | host/port/user/password, database, timeout_ms
#
# - ImportConfig (dataclass)
#     provider, database, collection, source_url, request_timeout_seconds
#
# - AppConfig (dataclass)
#     mongo: MongoConfig
#     buffer: BufferConfig
#     importing: ImportConfig
#
# FUNCTION:
# ---------
# - get_config() -> AppConfig
#     Load .env using python-dotenv, construct AppConfig.
#     Returns the same instance on repeated calls until reset_config().
#
# USAGE:
# ------
#   from docbuffer.config import get_config
#   config = get_config()
#   print(config.buffer.max_item_count)
#
# ==============================================

import logging
import os
from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

logger = logging.getLogger(__name__)

MIB = 1024 * 1024


class BufferProvider(Enum):
    """Storage provider whose quotas the buffer limits model."""
    MONGO = "mongo"
    COSMOS = "cosmos"

    @classmethod
    def parse(cls, value) -> "BufferProvider":
        """Accept an enum member or its (case-insensitive) string value."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            choices = ", ".join(p.value for p in cls)
            raise ValueError(f"Unknown provider '{value}' (expected one of: {choices})")


@dataclass(frozen=True)
class BufferConfig:
    """Capacity limits shared by every buffer of one manager."""
    max_item_count: int = 50
    max_total_size_bytes: int = 32 * MIB
    max_single_item_size_bytes: int = 16 * MIB

    def __post_init__(self):
        for name in ("max_item_count", "max_total_size_bytes", "max_single_item_size_bytes"):
            value = getattr(self, name)
            if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")
        if self.max_single_item_size_bytes > self.max_total_size_bytes:
            logger.warning(
                "max_single_item_size_bytes (%d) exceeds max_total_size_bytes (%d); "
                "a single admitted document can fill the whole buffer",
                self.max_single_item_size_bytes,
                self.max_total_size_bytes,
            )

    @classmethod
    def for_provider(cls, provider=None, **overrides: int) -> "BufferConfig":
        """
        Build the preset for a provider with any subset of limits overridden.

        Args:
            provider: BufferProvider or its string value (default MONGO).
            **overrides: max_item_count / max_total_size_bytes /
                max_single_item_size_bytes. Unknown names raise TypeError.

        Returns:
            BufferConfig
        """
        preset = PRESETS[BufferProvider.parse(provider or BufferProvider.MONGO)]
        if not overrides:
            return preset
        return replace(preset, **overrides)

    def to_dict(self) -> dict:
        return {
            "max_item_count": self.max_item_count,
            "max_total_size_bytes": self.max_total_size_bytes,
            "max_single_item_size_bytes": self.max_single_item_size_bytes,
        }


PRESETS = {
    # MongoDB: 16 MiB BSON document limit, large batches are cheap
    BufferProvider.MONGO: BufferConfig(
        max_item_count=50,
        max_total_size_bytes=32 * MIB,
        max_single_item_size_bytes=16 * MIB,
    ),
    # Cosmos DB: 2 MiB item limit, smaller payloads per request
    BufferProvider.COSMOS: BufferConfig(
        max_item_count=100,
        max_total_size_bytes=4 * MIB,
        max_single_item_size_bytes=2 * MIB,
    ),
}


@dataclass
class MongoConfig:
    """MongoDB connection configuration."""
    uri: Optional[str] = None
    host: str = "localhost"
    port: int = 27017
    user: Optional[str] = None
    password: Optional[str] = None
    database: str = "admin"
    timeout_ms: int = 5000

    def connection_uri(self) -> str:
        """Explicit URI when set, otherwise one assembled from host/port/credentials."""
        if self.uri:
            return self.uri
        if self.user and self.password:
            return f"mongodb://{self.user}:{self.password}@{self.host}:{self.port}/{self.database}"
        return f"mongodb://{self.host}:{self.port}/{self.database}"


@dataclass
class ImportConfig:
    """Defaults for the import command."""
    provider: BufferProvider = BufferProvider.MONGO
    database: Optional[str] = None
    collection: Optional[str] = None
    source_url: Optional[str] = None
    request_timeout_seconds: float = 10.0


@dataclass
class AppConfig:
    """Main application configuration."""
    mongo: MongoConfig = field(default_factory=MongoConfig)
    buffer: BufferConfig = field(default_factory=BufferConfig)
    importing: ImportConfig = field(default_factory=ImportConfig)


_config_instance: Optional[AppConfig] = None


def _int_env(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    try:
        return int(value)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer, got {value!r}")


def get_config() -> AppConfig:
    """
    Load configuration from environment variables / .env file.
    Returns the same instance on repeated calls.

    Returns:
        AppConfig: Application configuration
    """
    global _config_instance

    if _config_instance is not None:
        return _config_instance

    env_path = Path(__file__).parent.parent / ".env"
    load_dotenv(dotenv_path=env_path)

    mongo_config = MongoConfig(
        uri=os.getenv("MONGO_URI") or None,
        host=os.getenv("MONGO_HOST", "localhost"),
        port=int(os.getenv("MONGO_PORT", "27017")),
        user=os.getenv("MONGO_USER") or None,
        password=os.getenv("MONGO_PASSWORD") or None,
        database=os.getenv("MONGO_DATABASE", "admin"),
        timeout_ms=int(os.getenv("MONGO_TIMEOUT_MS", "5000")),
    )

    provider = BufferProvider.parse(os.getenv("BUFFER_PROVIDER", "mongo"))

    # Only limits that are actually set override the provider preset
    overrides = {}
    for key, env_name in (
        ("max_item_count", "BUFFER_MAX_ITEM_COUNT"),
        ("max_total_size_bytes", "BUFFER_MAX_TOTAL_SIZE_BYTES"),
        ("max_single_item_size_bytes", "BUFFER_MAX_SINGLE_ITEM_SIZE_BYTES"),
    ):
        value = _int_env(env_name)
        if value is not None:
            overrides[key] = value
    buffer_config = BufferConfig.for_provider(provider, **overrides)

    import_config = ImportConfig(
        provider=provider,
        database=os.getenv("IMPORT_DATABASE") or None,
        collection=os.getenv("IMPORT_COLLECTION") or None,
        source_url=os.getenv("IMPORT_SOURCE_URL") or None,
        request_timeout_seconds=float(os.getenv("IMPORT_REQUEST_TIMEOUT", "10.0")),
    )

    _config_instance = AppConfig(
        mongo=mongo_config,
        buffer=buffer_config,
        importing=import_config,
    )

    return _config_instance


def reset_config() -> None:
    """Forget the cached config so the next get_config() re-reads the environment."""
    global _config_instance
    _config_instance = None
