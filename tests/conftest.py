"""Shared test fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from strictfs.config import FilesystemSettings, SettingsManager
from strictfs.context import AppContext
from strictfs.filesystem import GuardedFileSystem
from strictfs.primitives import HostPrimitives


class FaultyPrimitives(HostPrimitives):
    """Host primitives that raise OSError for the named operations.

    Paths in ``deny_read`` and ``deny_write`` report no read or write
    permission, whoever runs the tests. Every call is recorded in ``calls``
    as ``(operation, args)``.
    """

    def __init__(
        self,
        *failing: str,
        short_write: bool = False,
        deny_read: tuple[str, ...] = (),
        deny_write: tuple[str, ...] = (),
    ) -> None:
        super().__init__(fsync=False)
        self.failing = set(failing)
        self.short_write = short_write
        self.deny_read = set(deny_read)
        self.deny_write = set(deny_write)
        self.calls: list[tuple[str, tuple]] = []

    def _maybe_fail(self, operation: str, *args: object) -> None:
        self.calls.append((operation, args))
        if operation in self.failing:
            raise OSError(f"injected {operation} failure")

    def is_readable(self, path: str) -> bool:
        return path not in self.deny_read and super().is_readable(path)

    def is_writable(self, path: str) -> bool:
        return path not in self.deny_write and super().is_writable(path)

    def read_bytes(self, path: str) -> bytes:
        self._maybe_fail("read_bytes", path)
        return super().read_bytes(path)

    def create_temp(self, directory: str, prefix: str) -> str:
        self._maybe_fail("create_temp", directory, prefix)
        return super().create_temp(directory, prefix)

    def write_bytes(self, path: str, data: bytes) -> int:
        self._maybe_fail("write_bytes", path, data)
        written = super().write_bytes(path, data)
        return written - 1 if self.short_write and written else written

    def rename(self, source: str, destination: str) -> None:
        self._maybe_fail("rename", source, destination)
        super().rename(source, destination)

    def chmod(self, path: str, mode: int) -> None:
        self._maybe_fail("chmod", path, mode)
        super().chmod(path, mode)

    def unlink(self, path: str) -> None:
        self._maybe_fail("unlink", path)
        super().unlink(path)

    def operations(self) -> list[str]:
        return [operation for operation, _ in self.calls]


@pytest.fixture
def fs() -> GuardedFileSystem:
    """Guarded filesystem over the real host primitives."""
    return GuardedFileSystem(primitives=HostPrimitives(fsync=False))


@pytest.fixture
def make_faulty_fs():
    """Factory for a guarded filesystem whose primitives fail on demand."""

    def _make(
        *failing: str,
        short_write: bool = False,
        deny_read: tuple[str, ...] = (),
        deny_write: tuple[str, ...] = (),
        **settings: object,
    ):
        primitives = FaultyPrimitives(
            *failing, short_write=short_write, deny_read=deny_read, deny_write=deny_write
        )
        filesystem = GuardedFileSystem(
            primitives=primitives, settings=FilesystemSettings(**settings)
        )
        return filesystem, primitives

    return _make


@pytest.fixture
def temp_config_dir(tmp_path: Path) -> Path:
    """Create a temporary config directory."""
    config_dir = tmp_path / ".strictfs"
    config_dir.mkdir(parents=True)
    return config_dir


@pytest.fixture
def real_context(temp_config_dir: Path, fs: GuardedFileSystem) -> AppContext:
    """AppContext backed by a real filesystem and a temporary config dir."""
    return AppContext(
        settings_manager=SettingsManager.create(temp_config_dir, filesystem=fs),
        filesystem=fs,
    )


@pytest.fixture
def mock_app_context() -> MagicMock:
    """Create a complete mock AppContext for CLI testing."""
    ctx = MagicMock(spec=AppContext)
    ctx.settings_manager = MagicMock(spec=SettingsManager)
    ctx.filesystem = MagicMock(spec=GuardedFileSystem)
    return ctx
