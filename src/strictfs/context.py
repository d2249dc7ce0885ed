"""Application context for dependency injection.

This module separates object creation from object use, enabling testability
and reducing coupling in CLI commands.

Dependencies are typed using Protocols (abstract interfaces) rather than
concrete implementations, so test doubles can be injected without
inheritance or patching module-level functions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from strictfs.config import FilesystemSettings, SettingsManager
from strictfs.errors import FilesystemError
from strictfs.protocols import FileSystem

logger = logging.getLogger(__name__)


def _default_filesystem() -> FileSystem:
    """Create the default filesystem implementation."""
    from strictfs.filesystem import GuardedFileSystem
    return GuardedFileSystem()


@dataclass
class AppContext:
    """Container for application dependencies.

    Provides a single injection point for the services used by CLI commands.
    """

    settings_manager: SettingsManager
    filesystem: FileSystem = field(default_factory=_default_filesystem)


def create_context(config_dir: Path | None = None) -> AppContext:
    """Factory for application dependencies.

    Loads the persisted settings and builds a filesystem configured with
    them. A config file that cannot be loaded is reported as a warning and
    the defaults are used, so the config commands can still repair it.
    Use this in production code. For tests, construct AppContext directly
    with test doubles.

    Args:
        config_dir: Override config directory (for testing).

    Returns:
        Configured AppContext with all dependencies.
    """
    from strictfs.filesystem import GuardedFileSystem

    config_dir = config_dir or SettingsManager.create_default().config_dir
    try:
        settings = SettingsManager.create(config_dir).load()
    except (ValueError, FilesystemError) as e:
        logger.warning("Using default settings: %s", e)
        settings = FilesystemSettings()

    filesystem = GuardedFileSystem.create(settings)
    settings_manager = SettingsManager.create(config_dir, filesystem=filesystem)

    return AppContext(settings_manager=settings_manager, filesystem=filesystem)
