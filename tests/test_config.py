"""Tests for folder_sync.config — option loading and validation.

NOT to be confused with test_config_loader.py (hierarchical YAML config)
or test_config_schema.py (Pydantic models). This tests the runtime
option resolution path: validate_config() and load_config().
"""

import pytest

from folder_sync.config import (
    DEFAULT_HASH_ALGORITHM,
    DEFAULT_RETRY_DELAY_SECONDS,
    SyncOptions,
    load_config,
    validate_config,
)


def _options(**overrides):
    values = {
        "source": "/data",
        "replica": "/backup",
        "log_file": "/var/log/sync.log",
        "interval_seconds": 60,
    }
    values.update(overrides)
    return SyncOptions(**values)


# -------------------------------------------------------------------------
# validate_config()
# -------------------------------------------------------------------------


class TestValidateConfig:
    """Tests for validate_config() — interval and hash checks."""

    def test_valid_options(self):
        validate_config(_options())  # should not raise

    def test_zero_interval_rejected(self):
        with pytest.raises(ValueError, match="Invalid interval '0'"):
            validate_config(_options(interval_seconds=0))

    def test_negative_interval_rejected(self):
        with pytest.raises(ValueError, match="positive number of seconds"):
            validate_config(_options(interval_seconds=-5))

    def test_zero_retry_delay_rejected(self):
        with pytest.raises(ValueError, match="Invalid retry delay"):
            validate_config(_options(retry_delay_seconds=0))

    def test_retry_delay_may_exceed_interval(self):
        validate_config(_options(interval_seconds=1, retry_delay_seconds=30))

    def test_unknown_hash_rejected(self):
        with pytest.raises(ValueError, match="Invalid hash algorithm 'crc99'"):
            validate_config(_options(hash_algorithm="crc99"))

    @pytest.mark.parametrize("name", ["shake_128", "SHAKE_256"])
    def test_variable_length_hash_rejected(self, name):
        with pytest.raises(ValueError, match=f"Invalid hash algorithm '{name}'"):
            validate_config(_options(hash_algorithm=name))

    def test_rejection_lists_only_fixed_length_hashes(self):
        with pytest.raises(ValueError) as exc_info:
            validate_config(_options(hash_algorithm="crc99"))

        assert "sha256" in str(exc_info.value)
        assert "shake" not in str(exc_info.value)

    def test_hash_name_normalised(self):
        options = _options(hash_algorithm="SHA256")
        validate_config(options)
        assert options.hash_algorithm == "sha256"


# -------------------------------------------------------------------------
# load_config()
# -------------------------------------------------------------------------


class TestLoadConfig:
    """Tests for load_config() precedence and required options."""

    def test_cli_arguments(self):
        options = load_config(
            source="/data",
            replica="/backup",
            log_file="sync.log",
            interval=30,
        )

        assert options.source == "/data"
        assert options.replica == "/backup"
        assert options.log_file == "sync.log"
        assert options.interval_seconds == 30
        assert options.retry_delay_seconds == DEFAULT_RETRY_DELAY_SECONDS
        assert options.hash_algorithm == DEFAULT_HASH_ALGORITHM
        assert options.debug is False

    def test_env_vars(self, monkeypatch):
        monkeypatch.setenv("FOLDER_SYNC_SOURCE", "/env/src")
        monkeypatch.setenv("FOLDER_SYNC_REPLICA", "/env/rep")
        monkeypatch.setenv("FOLDER_SYNC_LOG_FILE", "/env/sync.log")
        monkeypatch.setenv("FOLDER_SYNC_INTERVAL", "120")
        monkeypatch.setenv("FOLDER_SYNC_RETRY_DELAY", "10")
        monkeypatch.setenv("FOLDER_SYNC_HASH", "md5")
        monkeypatch.setenv("FOLDER_SYNC_DEBUG", "yes")

        options = load_config()

        assert options.source == "/env/src"
        assert options.replica == "/env/rep"
        assert options.log_file == "/env/sync.log"
        assert options.interval_seconds == 120
        assert options.retry_delay_seconds == 10
        assert options.hash_algorithm == "md5"
        assert options.debug is True

    def test_cli_beats_env(self, monkeypatch):
        monkeypatch.setenv("FOLDER_SYNC_SOURCE", "/env/src")
        monkeypatch.setenv("FOLDER_SYNC_INTERVAL", "120")

        options = load_config(
            source="/cli/src", replica="/r", log_file="l", interval=5
        )

        assert options.source == "/cli/src"
        assert options.interval_seconds == 5

    def test_env_beats_yaml(self, monkeypatch):
        monkeypatch.setenv("FOLDER_SYNC_REPLICA", "/env/rep")

        options = load_config(
            yaml_fallbacks={
                "source": "/yaml/src",
                "replica": "/yaml/rep",
                "log_file": "/yaml/sync.log",
                "interval_seconds": 45,
                "retry_delay_seconds": 3,
                "hash_algorithm": "sha1",
            }
        )

        assert options.source == "/yaml/src"
        assert options.replica == "/env/rep"
        assert options.log_file == "/yaml/sync.log"
        assert options.interval_seconds == 45
        assert options.retry_delay_seconds == 3
        assert options.hash_algorithm == "sha1"

    def test_default_retry_delay_capped_at_interval(self):
        options = load_config(
            source="/s", replica="/r", log_file="l", interval=2
        )

        assert options.retry_delay_seconds == 2

    def test_explicit_retry_delay_not_capped(self):
        options = load_config(
            source="/s", replica="/r", log_file="l", interval=2, retry_delay=10
        )

        assert options.retry_delay_seconds == 10

    def test_values_stripped(self):
        options = load_config(
            source="  /data ", replica="/backup\n", log_file=" l ", interval=1
        )

        assert options.source == "/data"
        assert options.replica == "/backup"
        assert options.log_file == "l"

    def test_missing_source(self):
        with pytest.raises(ValueError, match="Source directory not set"):
            load_config(replica="/r", log_file="l", interval=1)

    def test_missing_replica(self):
        with pytest.raises(ValueError, match="Replica directory not set"):
            load_config(source="/s", log_file="l", interval=1)

    def test_missing_log_file(self):
        with pytest.raises(ValueError, match="Log file not set"):
            load_config(source="/s", replica="/r", interval=1)

    def test_missing_interval(self):
        with pytest.raises(ValueError, match="Sync interval not set"):
            load_config(source="/s", replica="/r", log_file="l")

    def test_non_numeric_interval_env(self, monkeypatch):
        monkeypatch.setenv("FOLDER_SYNC_INTERVAL", "soon")

        with pytest.raises(ValueError, match="Invalid interval 'soon'"):
            load_config(source="/s", replica="/r", log_file="l")

    def test_zero_interval_rejected(self):
        with pytest.raises(ValueError, match="Invalid interval"):
            load_config(source="/s", replica="/r", log_file="l", interval=0)

    @pytest.mark.parametrize("value", ["false", "0", "no", ""])
    def test_debug_env_false_values(self, monkeypatch, value):
        monkeypatch.setenv("FOLDER_SYNC_DEBUG", value)

        options = load_config(
            source="/s", replica="/r", log_file="l", interval=1
        )

        assert options.debug is False

    def test_debug_flag_beats_env(self, monkeypatch):
        monkeypatch.setenv("FOLDER_SYNC_DEBUG", "false")

        options = load_config(
            source="/s", replica="/r", log_file="l", interval=1, debug=True
        )

        assert options.debug is True
