"""Error types raised by the sync engine.

Filesystem failures during a cycle are not wrapped: they surface as the
``OSError`` raised by the failing call, so callers can tell a missing
source at startup (fatal) from a transient failure mid-cycle (retryable).
"""


class SourceNotFoundError(FileNotFoundError):
    """The source root does not exist or is not a directory."""

    def __init__(self, path) -> None:
        super().__init__(f"Source directory does not exist: {path}")
        self.path = path
