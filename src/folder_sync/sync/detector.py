"""Change detection for a single source/replica file pair.

The policy is ordered from cheapest to most expensive check:

1. Replica missing  -> ``NEW_FILE``
2. Sizes differ     -> ``SIZE_DIFFERENCE`` (no file content is read)
3. Digests differ   -> ``HASH_DIFFERENCE``
4. Otherwise        -> ``IDENTICAL``

Digests are used for equality testing only, never for security, so the
algorithm is configurable.  Decisions are computed fresh on every call.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path

from folder_sync.sync.models import CopyDecision, CopyReason

logger = logging.getLogger(__name__)

DEFAULT_HASH_ALGORITHM = "sha256"
CHUNK_SIZE = 64 * 1024


def file_digest(path: Path, algorithm: str = DEFAULT_HASH_ALGORITHM) -> str:
    """Compute the hex digest of a file's full contents.

    The file is streamed in ``CHUNK_SIZE`` blocks so memory use stays
    bounded for large files.

    Args:
        path: File to hash.
        algorithm: Any name accepted by ``hashlib.new``.

    Returns:
        Hex digest string.
    """
    hasher = hashlib.new(algorithm)
    with open(path, "rb") as fh:
        for chunk in iter(lambda: fh.read(CHUNK_SIZE), b""):
            hasher.update(chunk)
    return hasher.hexdigest()


class ChangeDetector:
    """Decide whether a replica file is stale relative to its source.

    Args:
        hash_algorithm: ``hashlib`` algorithm used for the content check.

    Raises:
        ValueError: If *hash_algorithm* is not available in ``hashlib`` or
            has no fixed digest size (``shake_128``, ``shake_256``).
    """

    def __init__(self, hash_algorithm: str = DEFAULT_HASH_ALGORITHM) -> None:
        try:
            digest_size = hashlib.new(hash_algorithm).digest_size
        except ValueError:
            raise ValueError(
                f"Unsupported hash algorithm '{hash_algorithm}'"
            ) from None
        if digest_size == 0:
            raise ValueError(
                f"Unsupported hash algorithm '{hash_algorithm}': "
                "variable-length digests are not supported"
            )
        self.hash_algorithm = hash_algorithm

    def decide(self, source_file: Path, replica_file: Path) -> CopyDecision:
        """Compare *source_file* against *replica_file*.

        Raises:
            OSError: If either file cannot be stat'ed or read.
        """
        if not replica_file.exists():
            return CopyDecision(should_copy=True, reason=CopyReason.NEW_FILE)

        if source_file.stat().st_size != replica_file.stat().st_size:
            return CopyDecision(
                should_copy=True, reason=CopyReason.SIZE_DIFFERENCE
            )

        source_digest = file_digest(source_file, self.hash_algorithm)
        replica_digest = file_digest(replica_file, self.hash_algorithm)
        if source_digest != replica_digest:
            logger.debug(
                "Digest mismatch for %s (%s != %s)",
                replica_file,
                source_digest,
                replica_digest,
            )
            return CopyDecision(
                should_copy=True, reason=CopyReason.HASH_DIFFERENCE
            )

        return CopyDecision(should_copy=False, reason=CopyReason.IDENTICAL)
