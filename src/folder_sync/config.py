"""Runtime options for the sync process.

Reads the sync job settings from CLI args, environment variables,
.env files, and YAML config file fallbacks.

Precedence (highest to lowest):
    CLI args > Environment variables > .env file > YAML config > Built-in defaults

Environment variables:
    FOLDER_SYNC_SOURCE: Source directory (required)
    FOLDER_SYNC_REPLICA: Replica directory (required)
    FOLDER_SYNC_LOG_FILE: Log file or directory (required)
    FOLDER_SYNC_INTERVAL: Seconds between cycles (required)
    FOLDER_SYNC_RETRY_DELAY: Seconds before retrying a failed cycle (optional,
        default: 5, or the interval when that is shorter)
    FOLDER_SYNC_HASH: hashlib algorithm for content checks (optional, default: sha256)
    FOLDER_SYNC_DEBUG: Enable debug logging (optional, default: false)
"""

import hashlib
import os
from dataclasses import dataclass

DEFAULT_RETRY_DELAY_SECONDS = 5
DEFAULT_HASH_ALGORITHM = "sha256"


@dataclass
class SyncOptions:
    source: str
    replica: str
    log_file: str
    interval_seconds: int
    retry_delay_seconds: int = DEFAULT_RETRY_DELAY_SECONDS
    hash_algorithm: str = DEFAULT_HASH_ALGORITHM
    debug: bool = False


def validate_config(options: SyncOptions) -> None:
    """Validate option values and raise ValueError if invalid.

    Args:
        options: SyncOptions instance to validate.

    Raises:
        ValueError: If an interval is not positive or the hash algorithm
            is unknown or has no fixed digest size (shake_128, shake_256).
    """
    if options.interval_seconds < 1:
        raise ValueError(
            f"Invalid interval '{options.interval_seconds}': must be a positive number of seconds"
        )
    if options.retry_delay_seconds < 1:
        raise ValueError(
            f"Invalid retry delay '{options.retry_delay_seconds}': must be a positive number of seconds"
        )
    name = options.hash_algorithm.lower()
    if not _has_fixed_digest(name):
        fixed = sorted(
            a for a in hashlib.algorithms_guaranteed if _has_fixed_digest(a)
        )
        raise ValueError(
            f"Invalid hash algorithm '{options.hash_algorithm}': "
            f"choose one of {', '.join(fixed)}"
        )
    options.hash_algorithm = name


def _has_fixed_digest(name: str) -> bool:
    # shake_* construct fine but need a length for hexdigest()
    try:
        return hashlib.new(name).digest_size > 0
    except ValueError:
        return False


def _parse_seconds(raw: str | int, name: str) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(
            f"Invalid {name} '{raw}': must be a positive number of seconds"
        ) from None


def load_config(
    source: str | None = None,
    replica: str | None = None,
    log_file: str | None = None,
    interval: int | None = None,
    retry_delay: int | None = None,
    hash_algorithm: str | None = None,
    debug: bool = False,
    yaml_fallbacks: dict | None = None,
) -> SyncOptions:
    """Load options with unified precedence.

    Resolution order for each field (highest to lowest):
        CLI arg > env var / .env > yaml_fallbacks > built-in default

    The caller is responsible for calling ``load_dotenv()`` before this
    function so that .env values are available via ``os.getenv()``.

    Args:
        source: Override source directory.
        replica: Override replica directory.
        log_file: Override log file or directory.
        interval: Override cycle interval in seconds.
        retry_delay: Override retry cooldown in seconds.
        hash_algorithm: Override content hash algorithm.
        debug: Enable debug logging (CLI flag).
        yaml_fallbacks: Flattened values from the YAML config file (see
            ``config_schema.to_fallbacks``).

    Returns:
        Validated SyncOptions instance.

    Raises:
        ValueError: If a required option is missing after checking all
            sources, or a value is invalid.
    """
    fb = yaml_fallbacks or {}

    # --- Path fields: CLI > env > YAML > error ---

    final_source = source or os.getenv("FOLDER_SYNC_SOURCE") or fb.get("source")
    if not final_source:
        raise ValueError(
            "Source directory not set. Pass it as the first argument, "
            "set FOLDER_SYNC_SOURCE, or add 'sync.source' to config.yml."
        )

    final_replica = (
        replica or os.getenv("FOLDER_SYNC_REPLICA") or fb.get("replica")
    )
    if not final_replica:
        raise ValueError(
            "Replica directory not set. Pass it as the second argument, "
            "set FOLDER_SYNC_REPLICA, or add 'sync.replica' to config.yml."
        )

    final_log_file = (
        log_file or os.getenv("FOLDER_SYNC_LOG_FILE") or fb.get("log_file")
    )
    if not final_log_file:
        raise ValueError(
            "Log file not set. Pass it as the third argument, "
            "set FOLDER_SYNC_LOG_FILE, or add 'logging.file' to config.yml."
        )

    # --- Numeric fields: CLI > env > YAML > default ---

    raw_interval = (
        interval
        if interval is not None
        else os.getenv("FOLDER_SYNC_INTERVAL", fb.get("interval_seconds"))
    )
    if raw_interval is None:
        raise ValueError(
            "Sync interval not set. Pass it as the fourth argument, "
            "set FOLDER_SYNC_INTERVAL, or add 'sync.interval_seconds' to config.yml."
        )
    final_interval = _parse_seconds(raw_interval, "interval")

    raw_retry = (
        retry_delay
        if retry_delay is not None
        else os.getenv(
            "FOLDER_SYNC_RETRY_DELAY",
            fb.get("retry_delay_seconds"),
        )
    )
    if raw_retry is None:
        # The default cooldown never outlasts a short interval
        final_retry = min(DEFAULT_RETRY_DELAY_SECONDS, final_interval)
    else:
        final_retry = _parse_seconds(raw_retry, "retry delay")

    final_hash = (
        hash_algorithm
        or os.getenv("FOLDER_SYNC_HASH")
        or fb.get("hash_algorithm")
        or DEFAULT_HASH_ALGORITHM
    )

    # --- Boolean fields: CLI > env > default ---

    if debug:
        final_debug = True
    else:
        env_debug = os.getenv("FOLDER_SYNC_DEBUG", "")
        final_debug = env_debug.lower() in ("true", "1", "yes", "on")

    options = SyncOptions(
        source=final_source.strip(),
        replica=final_replica.strip(),
        log_file=final_log_file.strip(),
        interval_seconds=final_interval,
        retry_delay_seconds=final_retry,
        hash_algorithm=final_hash.strip(),
        debug=final_debug,
    )

    validate_config(options)

    return options
