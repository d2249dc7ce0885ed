"""Error taxonomy for filesystem operations.

Every failure raised by the filesystem layer is a ``FilesystemError``
carrying the offending path. There are exactly two kinds:

- ``PathNotFoundError``: the target path does not exist at all.
- ``FilesystemIOError``: the path exists but is the wrong type, lacks the
  required permission, or the underlying OS call failed.
"""

from __future__ import annotations

from enum import Enum

__all__ = [
    "ErrorKind",
    "FilesystemError",
    "FilesystemIOError",
    "PathNotFoundError",
]


class ErrorKind(str, Enum):
    """Tag identifying which kind of failure occurred."""

    NOT_FOUND = "not_found"
    IO_FAILURE = "io_failure"


class FilesystemError(Exception):
    """Base class for all filesystem errors.

    Attributes:
        message: Human-readable description naming the operation and path.
        path: The path the operation failed on.
    """

    kind: ErrorKind

    def __init__(self, message: str, path: str) -> None:
        """Initialize the error.

        Args:
            message: The error message.
            path: The offending path.
        """
        self.message = message
        self.path = path
        super().__init__(message)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.message!r}, path={self.path!r})"


class PathNotFoundError(FilesystemError):
    """Raised when a path does not refer to anything on disk."""

    kind = ErrorKind.NOT_FOUND


class FilesystemIOError(FilesystemError):
    """Raised when a path exists but the requested operation cannot complete."""

    kind = ErrorKind.IO_FAILURE
