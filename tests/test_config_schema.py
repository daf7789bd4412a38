"""Tests for the unified config schema and the fallback adapter.

Tests the Pydantic models in config_schema.py (UnifiedConfig, SyncSection,
LoggingConfig), the build_config() factory, and to_fallbacks().
"""

import pytest
from pydantic import ValidationError

from folder_sync.config_schema import (
    LoggingConfig,
    SyncSection,
    UnifiedConfig,
    build_config,
    to_fallbacks,
)

# ---------------------------------------------------------------------------
# UnifiedConfig tests
# ---------------------------------------------------------------------------


class TestUnifiedConfig:
    """Tests for the top-level UnifiedConfig model."""

    def test_empty_config_produces_valid_defaults(self):
        """UnifiedConfig() is valid with every section defaulted."""
        config = UnifiedConfig()
        assert config.sync.source is None
        assert config.sync.interval_seconds is None
        assert config.logging.level == "INFO"
        assert config.logging.format == "text"

    def test_full_config_with_all_sections(self):
        config = UnifiedConfig(
            sync=SyncSection(
                source="/data",
                replica="/backup",
                interval_seconds=60,
                retry_delay_seconds=5,
                hash_algorithm="md5",
            ),
            logging=LoggingConfig(level="DEBUG", file="/tmp/sync.log"),
        )
        assert config.sync.replica == "/backup"
        assert config.sync.hash_algorithm == "md5"
        assert config.logging.file == "/tmp/sync.log"

    def test_unknown_sections_ignored(self):
        """Unknown sections are ignored (forward compatibility)."""
        config = UnifiedConfig(
            **{"sync": {"source": "/data"}, "future_section": {"key": "v"}}
        )
        assert config.sync.source == "/data"
        assert not hasattr(config, "future_section")

    def test_frozen_model_prevents_mutation(self):
        config = UnifiedConfig()
        with pytest.raises(ValidationError):
            config.sync = SyncSection(source="/changed")


# ---------------------------------------------------------------------------
# Section tests
# ---------------------------------------------------------------------------


class TestSyncSection:
    """Tests for SyncSection field validation."""

    def test_zero_interval_rejected(self):
        with pytest.raises(ValidationError):
            SyncSection(interval_seconds=0)

    def test_zero_retry_delay_rejected(self):
        with pytest.raises(ValidationError):
            SyncSection(retry_delay_seconds=0)

    def test_numeric_string_coerced(self):
        assert SyncSection(interval_seconds="30").interval_seconds == 30


class TestLoggingConfig:
    def test_invalid_format_rejected(self):
        with pytest.raises(ValidationError):
            LoggingConfig(format="xml")

    def test_json_format_accepted(self):
        assert LoggingConfig(format="json").format == "json"


# ---------------------------------------------------------------------------
# build_config / to_fallbacks
# ---------------------------------------------------------------------------


class TestBuildConfig:
    def test_empty_dict(self):
        assert build_config({}) == UnifiedConfig()

    def test_nested_dicts(self):
        config = build_config(
            {
                "sync": {"source": "/data", "interval_seconds": 10},
                "logging": {"level": "WARNING"},
            }
        )
        assert config.sync.interval_seconds == 10
        assert config.logging.level == "WARNING"

    def test_invalid_value_raises(self):
        with pytest.raises(ValidationError):
            build_config({"sync": {"interval_seconds": "often"}})


class TestToFallbacks:
    """Tests for to_fallbacks()."""

    def test_only_set_values_returned(self):
        config = build_config({"sync": {"source": "/data"}})
        assert to_fallbacks(config) == {"source": "/data"}

    def test_logging_file_becomes_log_file(self):
        config = build_config(
            {
                "sync": {"replica": "/backup", "interval_seconds": 60},
                "logging": {"file": "/var/log/sync.log"},
            }
        )
        assert to_fallbacks(config) == {
            "replica": "/backup",
            "interval_seconds": 60,
            "log_file": "/var/log/sync.log",
        }

    def test_zero_config_is_empty(self):
        assert to_fallbacks(UnifiedConfig()) == {}
