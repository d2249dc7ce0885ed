"""Guarded filesystem operations.

This module provides ``GuardedFileSystem``, which replaces the silent,
boolean-returning filesystem primitives with operations that either
succeed or raise a ``FilesystemError`` naming the offending path. Each
operation follows the same shape: resolve the path, assert its
preconditions, perform the OS call, and wrap any failure.

The OS calls themselves go through an injected ``IOPrimitives`` so that
failure paths can be exercised without touching a real disk.
"""

from __future__ import annotations

import logging
import os
import re
from typing import TYPE_CHECKING

from strictfs.config import FilesystemSettings
from strictfs.errors import FilesystemError, FilesystemIOError, PathNotFoundError
from strictfs.primitives import HostPrimitives

if TYPE_CHECKING:
    from strictfs.protocols import Data, IOPrimitives

logger = logging.getLogger(__name__)

# Locators such as file:///tmp/x or s3://bucket/key are treated as absolute
URI_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")


class GuardedFileSystem:
    """Filesystem implementation that raises instead of returning False.

    Satisfies the FileSystem protocol structurally. Instances hold no
    mutable state and may be shared between threads.
    """

    def __init__(
        self,
        primitives: IOPrimitives | None = None,
        settings: FilesystemSettings | None = None,
    ) -> None:
        """Initialize the filesystem.

        Args:
            primitives: OS primitives to delegate to. Defaults to HostPrimitives.
            settings: Atomic write tunables. Defaults to FilesystemSettings().
        """
        self.settings = settings or FilesystemSettings()
        self.primitives = primitives or HostPrimitives(fsync=self.settings.fsync)

    @classmethod
    def create(cls, settings: FilesystemSettings) -> GuardedFileSystem:
        """Create a filesystem over the host primitives with the given settings."""
        return cls(primitives=HostPrimitives(fsync=settings.fsync), settings=settings)

    # =========================================================================
    # Path resolution
    # =========================================================================

    def resolve_path(self, path: str | os.PathLike[str], relative_to: str | None = None) -> str:
        """Canonicalize a path, resolving it relative to a directory.

        Relative paths are joined onto ``relative_to`` (the working directory
        by default). Existing paths come back canonicalized; missing paths
        come back as the plain join, trailing separator included.

        Args:
            path: Path to resolve.
            relative_to: Directory the path is relative to.

        Returns:
            The resolved absolute path.
        """
        path = os.fspath(path)
        is_absolute = path.startswith(os.sep) or URI_SCHEME_RE.match(path) is not None
        if not is_absolute:
            if relative_to is None:
                relative_to = self.primitives.getcwd()
            # only a single trailing separator is dropped from the base
            if relative_to.endswith(os.sep):
                relative_to = relative_to[: -len(os.sep)]
            path = f"{relative_to}{os.sep}{path}"

        try:
            return self.primitives.realpath(path)
        except OSError:
            return path

    # =========================================================================
    # Assertions
    # =========================================================================

    def path_exists(self, path: str) -> bool:
        """Check if a path points to anything, dangling symlinks included."""
        return self.primitives.exists(path) or self.primitives.is_link(path)

    def assert_exists(self, path: str) -> None:
        """Raise PathNotFoundError unless the path points to something."""
        if not self.path_exists(path):
            raise _fail(PathNotFoundError(f"Filesystem entity '{path}' does not exist", path))

    def assert_is_file(self, path: str) -> None:
        """Raise FilesystemIOError unless the path is a regular file."""
        if not self.primitives.is_file(path):
            raise _fail(FilesystemIOError(f"Requested path '{path}' is not a file.", path))

    def assert_is_directory(self, path: str) -> None:
        """Raise FilesystemIOError unless the path is a directory."""
        if not self.primitives.is_dir(path):
            raise _fail(FilesystemIOError(f"Request path '{path}' is not a directory.", path))

    def assert_readable(self, path: str) -> None:
        """Raise FilesystemIOError unless the path is readable."""
        if not self.primitives.is_readable(path):
            raise _fail(FilesystemIOError(f"Path '{path}' is not readable.", path))

    def assert_writable(self, path: str) -> None:
        """Raise FilesystemIOError unless the path is writable."""
        if not self.primitives.is_writable(path):
            raise _fail(FilesystemIOError(f"Path '{path}' is not writable", path))

    def assert_writable_file(self, path: str) -> None:
        """Assert that a file can be written at ``path``.

        The parent directory must exist and be a directory. An existing file
        must itself be writable; a new file needs a writable parent.

        Args:
            path: File path to check.

        Raises:
            PathNotFoundError: If the parent directory does not exist.
            FilesystemIOError: If the parent is not a directory or the
                relevant entry is not writable.
        """
        path = self.resolve_path(path)
        directory = _parent_dir(path)

        self.assert_exists(directory)
        self.assert_is_directory(directory)

        if self.path_exists(path):
            self.assert_writable(path)
        else:
            self.assert_writable(directory)

    # =========================================================================
    # Operations
    # =========================================================================

    def read_file(self, path: str) -> bytes:
        """Read a file, raising on any failure.

        Args:
            path: Path of the file to be read.

        Returns:
            The exact file contents.

        Raises:
            PathNotFoundError: If the file does not exist.
            FilesystemIOError: If the path is not a readable file or the
                read itself failed.
        """
        path = self.resolve_path(path)

        self.assert_exists(path)
        self.assert_is_file(path)
        self.assert_readable(path)

        try:
            return self.primitives.read_bytes(path)
        except OSError as e:
            raise _fail(FilesystemIOError(f"Failed to read file '{path}'", path), e) from e

    def write_file(self, path: str, data: Data) -> int:
        """Atomically replace a file's content.

        The data goes to a temporary file in the target's directory, which
        is then renamed onto the target. Readers see either the old or the
        new content, never a mix.

        Args:
            path: The file to be written to.
            data: Bytes to write; ``str`` is encoded with the configured encoding.

        Returns:
            The total number of bytes written.

        Raises:
            PathNotFoundError: If the target directory does not exist.
            FilesystemIOError: If the target is not writable or any step of
                the write failed.
        """
        path = self.resolve_path(path)
        self.assert_writable_file(path)

        payload = self._encode(path, data)
        directory = _parent_dir(path)

        try:
            temp_path = self.primitives.create_temp(directory, self.settings.temp_prefix)
        except OSError as e:
            msg = f"Could not create temporary file for atomic write on '{path}'"
            raise _fail(FilesystemIOError(msg, path), e) from e

        try:
            written = self.primitives.write_bytes(temp_path, payload)
            if written != len(payload):
                raise OSError(f"short write: {written} of {len(payload)} bytes")
        except OSError as e:
            self._discard_temp(temp_path)
            msg = f"Could not write to temporary file for atomic write on '{path}'"
            raise _fail(FilesystemIOError(msg, path), e) from e

        try:
            self._apply_mode(path, temp_path)
        except OSError as e:
            self._discard_temp(temp_path)
            msg = f"Could not set permissions on temporary file for atomic write on '{path}'"
            raise _fail(FilesystemIOError(msg, path), e) from e

        try:
            self.rename(temp_path, path)
        except FilesystemIOError:
            self._discard_temp(temp_path)
            raise

        logger.debug("Wrote %d bytes to %s", written, path)
        return written

    def rename(self, source: str, destination: str) -> None:
        """Rename a file or directory.

        Only the source is checked up front; the OS decides whether the
        destination can take it.

        Args:
            source: The file or directory to be renamed.
            destination: The new name.

        Raises:
            PathNotFoundError: If the source does not exist.
            FilesystemIOError: If the OS rename failed.
        """
        source = self.resolve_path(source)
        destination = self.resolve_path(destination)

        self.assert_exists(source)

        try:
            self.primitives.rename(source, destination)
        except OSError as e:
            msg = f"Could not rename file '{source}' to '{destination}'"
            raise _fail(FilesystemIOError(msg, source), e) from e

        logger.debug("Renamed %s to %s", source, destination)

    def chmod(self, path: str, mode: int) -> None:
        """Change the permissions of a file or directory.

        Args:
            path: Path to the file or directory.
            mode: Permission bits as an octal number, e.g. ``0o755``.

        Raises:
            PathNotFoundError: If the path does not exist.
            FilesystemIOError: If the OS call failed.
        """
        path = self.resolve_path(path)
        self.assert_exists(path)

        try:
            self.primitives.chmod(path, mode)
        except OSError as e:
            raise _fail(FilesystemIOError(f"Failed to chmod '{path}' to '{mode:04o}'", path), e) from e

        logger.debug("Changed mode of %s to %04o", path, mode)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _encode(self, path: str, data: Data) -> bytes:
        """Turn the payload into bytes, encoding ``str`` with the configured encoding."""
        if not isinstance(data, str):
            return bytes(data)
        try:
            return data.encode(self.settings.encoding)
        except UnicodeEncodeError as e:
            msg = f"Could not encode data for '{path}' as {self.settings.encoding}"
            raise _fail(FilesystemIOError(msg, path), e) from e

    def _apply_mode(self, path: str, temp_path: str) -> None:
        """Give the temporary file the permissions the target should end up with."""
        if self.primitives.exists(path):
            if self.settings.preserve_mode:
                self.primitives.chmod(temp_path, self.primitives.file_mode(path))
        elif self.settings.new_file_mode is not None:
            self.primitives.chmod(temp_path, self.settings.new_file_mode)

    def _discard_temp(self, temp_path: str) -> None:
        """Best-effort removal of an orphaned temporary file."""
        if not self.settings.cleanup_temp_files:
            return
        try:
            self.primitives.unlink(temp_path)
        except OSError as e:
            logger.warning("Could not remove temporary file %s: %s", temp_path, e)


def _parent_dir(path: str) -> str:
    """Return the directory containing ``path``, ignoring a trailing separator."""
    stripped = path.rstrip(os.sep) or os.sep
    return os.path.dirname(stripped) or os.sep


def _fail(error: FilesystemError, cause: Exception | None = None) -> FilesystemError:
    """Log a failure at debug level and hand the error back for raising."""
    if cause is None:
        logger.debug("%s", error.message)
    else:
        logger.debug("%s: %s", error.message, cause)
    return error
