"""Filesystem operations that raise descriptive errors instead of returning False."""

__version__ = "0.1.0"

# Export protocol interfaces and the error taxonomy for type hints and dependency injection
from strictfs.errors import (
    ErrorKind,
    FilesystemError,
    FilesystemIOError,
    PathNotFoundError,
)
from strictfs.filesystem import GuardedFileSystem
from strictfs.protocols import FileSystem, IOPrimitives

__all__ = [
    "__version__",
    "ErrorKind",
    "FileSystem",
    "FilesystemError",
    "FilesystemIOError",
    "GuardedFileSystem",
    "IOPrimitives",
    "PathNotFoundError",
]
