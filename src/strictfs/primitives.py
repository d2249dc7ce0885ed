"""Host OS primitives.

``HostPrimitives`` wraps the standard library ``os``, ``os.path`` and
``tempfile`` calls the guarded filesystem is built on. It satisfies the
IOPrimitives protocol structurally.
"""

from __future__ import annotations

import os
import stat
import tempfile


class HostPrimitives:
    """Production primitives backed by the host operating system."""

    def __init__(self, fsync: bool = True) -> None:
        """Initialize the primitives.

        Args:
            fsync: Flush written files to stable storage before returning.
        """
        self.fsync = fsync

    def getcwd(self) -> str:
        """Return the current working directory."""
        return os.getcwd()

    def realpath(self, path: str) -> str:
        """Canonicalize an existing path, raising OSError when missing."""
        return os.path.realpath(path, strict=True)

    def exists(self, path: str) -> bool:
        """Check if a path exists."""
        return os.path.exists(path)

    def is_link(self, path: str) -> bool:
        """Check if a path is a symbolic link."""
        return os.path.islink(path)

    def is_file(self, path: str) -> bool:
        """Check if a path is a regular file."""
        return os.path.isfile(path)

    def is_dir(self, path: str) -> bool:
        """Check if a path is a directory."""
        return os.path.isdir(path)

    def is_readable(self, path: str) -> bool:
        """Check read permission."""
        return os.access(path, os.R_OK)

    def is_writable(self, path: str) -> bool:
        """Check write permission."""
        return os.access(path, os.W_OK)

    def read_bytes(self, path: str) -> bytes:
        """Read the whole content of a file."""
        with open(path, "rb") as handle:
            return handle.read()

    def create_temp(self, directory: str, prefix: str) -> str:
        """Create an empty, uniquely named file inside ``directory``."""
        fd, name = tempfile.mkstemp(prefix=prefix, dir=directory)
        os.close(fd)
        return name

    def write_bytes(self, path: str, data: bytes) -> int:
        """Write data to a file and return the number of bytes written."""
        with open(path, "wb") as handle:
            written = handle.write(data)
            handle.flush()
            if self.fsync:
                os.fsync(handle.fileno())
        return written

    def rename(self, source: str, destination: str) -> None:
        """Rename a path, atomically replacing an existing destination file."""
        os.replace(source, destination)

    def chmod(self, path: str, mode: int) -> None:
        """Change permission bits."""
        os.chmod(path, mode)

    def file_mode(self, path: str) -> int:
        """Return the permission bits of a path."""
        return stat.S_IMODE(os.stat(path).st_mode)

    def unlink(self, path: str) -> None:
        """Remove a file."""
        os.unlink(path)
