"""Protocol definitions for core abstractions.

This module defines abstract interfaces (Protocols) for the filesystem
layer. Designing to interfaces enables:
- Substituting the guarded filesystem wherever it is consumed
- Swapping the host OS primitives for fault-injecting test doubles
- Clear contracts for implementations

All concrete implementations satisfy these protocols structurally (duck typing).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

Data = bytes | bytearray | memoryview | str


@runtime_checkable
class IOPrimitives(Protocol):
    """Protocol for the raw OS primitives the filesystem layer builds on.

    Implementations report failure by raising ``OSError``; the predicates
    never raise. No method resolves or canonicalizes its argument.
    """

    def getcwd(self) -> str:
        """Return the process's current working directory."""
        ...

    def realpath(self, path: str) -> str:
        """Canonicalize an existing path.

        Args:
            path: Path to canonicalize.

        Returns:
            Absolute path with ``.``, ``..`` and symlinks resolved.

        Raises:
            OSError: If the path does not exist.
        """
        ...

    def exists(self, path: str) -> bool:
        """Check if a path exists, following symlinks."""
        ...

    def is_link(self, path: str) -> bool:
        """Check if a path is a symbolic link, dangling or not."""
        ...

    def is_file(self, path: str) -> bool:
        """Check if a path is a regular file."""
        ...

    def is_dir(self, path: str) -> bool:
        """Check if a path is a directory."""
        ...

    def is_readable(self, path: str) -> bool:
        """Check if the process may read the path."""
        ...

    def is_writable(self, path: str) -> bool:
        """Check if the process may write the path."""
        ...

    def read_bytes(self, path: str) -> bytes:
        """Read the whole content of a file.

        Args:
            path: Path to the file.

        Returns:
            File content.
        """
        ...

    def create_temp(self, directory: str, prefix: str) -> str:
        """Create a uniquely named empty file.

        Args:
            directory: Directory the file must be created in.
            prefix: Prefix of the generated file name.

        Returns:
            Path of the created file.
        """
        ...

    def write_bytes(self, path: str, data: bytes) -> int:
        """Write data to a file, truncating it first.

        Args:
            path: Path to the file.
            data: Bytes to write.

        Returns:
            Number of bytes written.
        """
        ...

    def rename(self, source: str, destination: str) -> None:
        """Rename a path, replacing an existing destination file.

        Args:
            source: Path to rename.
            destination: New path.
        """
        ...

    def chmod(self, path: str, mode: int) -> None:
        """Change the permission bits of a path.

        Args:
            path: Path to change.
            mode: Numeric permission mode.
        """
        ...

    def file_mode(self, path: str) -> int:
        """Return the permission bits of a path."""
        ...

    def unlink(self, path: str) -> None:
        """Remove a file."""
        ...


@runtime_checkable
class FileSystem(Protocol):
    """Protocol for guarded filesystem operations.

    Every operation either succeeds with a well-defined result or raises a
    ``FilesystemError`` naming the offending path.
    """

    def resolve_path(self, path: str, relative_to: str | None = None) -> str:
        """Canonicalize a path, resolving it relative to a directory.

        Args:
            path: Path to resolve.
            relative_to: Base directory, defaults to the working directory.

        Returns:
            The resolved absolute path.
        """
        ...

    def path_exists(self, path: str) -> bool:
        """Check if a path points to anything, including a dangling symlink.

        Args:
            path: Path to check.

        Returns:
            True if the path points to something, False otherwise.
        """
        ...

    def assert_exists(self, path: str) -> None:
        """Assert that a path points to a file, a directory or a symlink.

        Raises:
            PathNotFoundError: If the path points to nothing.
        """
        ...

    def assert_is_file(self, path: str) -> None:
        """Assert that a path points to a regular file.

        Raises:
            FilesystemIOError: If the path is not a regular file.
        """
        ...

    def assert_is_directory(self, path: str) -> None:
        """Assert that a path points to a directory.

        Raises:
            FilesystemIOError: If the path is not a directory.
        """
        ...

    def assert_readable(self, path: str) -> None:
        """Assert that a path is readable.

        Raises:
            FilesystemIOError: If the path is not readable.
        """
        ...

    def assert_writable(self, path: str) -> None:
        """Assert that a path is writable.

        Raises:
            FilesystemIOError: If the path is not writable.
        """
        ...

    def assert_writable_file(self, path: str) -> None:
        """Assert that a file may be written at the given path.

        Raises:
            PathNotFoundError: If the parent directory does not exist.
            FilesystemIOError: If the parent is not a directory, or the
                file (or directory, for a new file) is not writable.
        """
        ...

    def read_file(self, path: str) -> bytes:
        """Read the file pointed to by the given path.

        Args:
            path: Path of the file to be read.

        Returns:
            The file contents.
        """
        ...

    def write_file(self, path: str, data: Data) -> int:
        """Atomically write to a file.

        Args:
            path: The file to be written to.
            data: The data to be written.

        Returns:
            The total number of bytes written.
        """
        ...

    def rename(self, source: str, destination: str) -> None:
        """Rename a file or directory.

        Args:
            source: The file or directory to be renamed.
            destination: The new name.
        """
        ...

    def chmod(self, path: str, mode: int) -> None:
        """Change the permissions of a file or directory.

        Args:
            path: Path to the file or directory.
            mode: Permission bits, e.g. ``0o755``.
        """
        ...
