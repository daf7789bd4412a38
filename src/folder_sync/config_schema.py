"""Unified configuration schema for folder_sync.

Defines Pydantic models for the YAML config file, with dedicated sections
for the sync job and for logging.

Usage:
    from folder_sync.config_schema import build_config, to_fallbacks

    raw = load_hierarchical_config()
    unified = build_config(raw)
    fallbacks = to_fallbacks(unified)
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

# ---------------------------------------------------------------------------
# Section models
# ---------------------------------------------------------------------------


class SyncSection(BaseModel):
    """Sync job settings.

    All fields are optional to support zero-config: env vars and CLI args
    can supply them at runtime instead.
    """

    source: str | None = Field(
        default=None, description="Source directory to mirror"
    )
    replica: str | None = Field(
        default=None, description="Replica directory kept in sync"
    )
    interval_seconds: int | None = Field(
        default=None, ge=1, description="Seconds between sync cycles"
    )
    retry_delay_seconds: int | None = Field(
        default=None,
        ge=1,
        description="Seconds to wait before retrying a failed cycle",
    )
    hash_algorithm: str | None = Field(
        default=None, description="hashlib algorithm for content checks"
    )

    model_config = {"frozen": True}


class LoggingConfig(BaseModel):
    """Logging configuration.

    Attributes:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        file: Log file path, or a directory for the default file name.
        format: Line format for console and file output.
    """

    level: str = Field(default="INFO", description="Log level")
    file: str | None = Field(default=None, description="Log file path")
    format: Literal["text", "json"] = Field(
        default="text", description="Log line format"
    )

    model_config = {"frozen": True}


# ---------------------------------------------------------------------------
# Top-level unified config
# ---------------------------------------------------------------------------


class UnifiedConfig(BaseModel):
    """Top-level unified configuration.

    Every section has defaults, so ``UnifiedConfig()`` (zero-config) is
    always valid.
    """

    sync: SyncSection = Field(default_factory=SyncSection)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = {"frozen": True}


def build_config(raw_data: dict) -> UnifiedConfig:
    """Construct a ``UnifiedConfig`` from the raw dict returned by
    ``load_hierarchical_config()``.

    Missing sections get defaults.

    Raises:
        pydantic.ValidationError: If a value has the wrong type or range.
    """
    if not raw_data:
        return UnifiedConfig()

    return UnifiedConfig(**raw_data)


def to_fallbacks(unified: UnifiedConfig) -> dict[str, Any]:
    """Flatten a ``UnifiedConfig`` into ``load_config()`` fallback values.

    Only values that were actually set are returned, keyed by the
    ``SyncOptions`` field they feed.
    """
    fallbacks = {
        k: v for k, v in unified.sync.model_dump().items() if v is not None
    }
    if unified.logging.file:
        fallbacks["log_file"] = unified.logging.file
    return fallbacks
