"""Settings for the guarded filesystem and their on-disk storage."""

from __future__ import annotations

import codecs
import json
import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from strictfs.errors import FilesystemIOError

if TYPE_CHECKING:
    from strictfs.protocols import FileSystem

logger = logging.getLogger(__name__)

# Default configuration location
CONFIG_DIR = Path.home() / ".strictfs"

CONFIG_DIR_ENV = "STRICTFS_CONFIG_DIR"


class FilesystemSettings(BaseModel):
    """Tunables for atomic writes."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    temp_prefix: str = Field(default=".strictfs-", alias="tempPrefix", min_length=1)
    cleanup_temp_files: bool = Field(default=True, alias="cleanupTempFiles")
    fsync: bool = True
    preserve_mode: bool = Field(default=True, alias="preserveMode")
    new_file_mode: int | None = Field(default=None, alias="newFileMode", ge=0, le=0o7777)
    encoding: str = "utf-8"

    @field_validator("temp_prefix")
    @classmethod
    def validate_temp_prefix(cls, v: str) -> str:
        """Keep temporary files in the target's own directory."""
        separators = [sep for sep in (os.sep, os.altsep) if sep]
        if any(sep in v for sep in separators):
            raise ValueError(f"temp_prefix must not contain a path separator: {v!r}")
        return v

    @field_validator("encoding")
    @classmethod
    def validate_encoding(cls, v: str) -> str:
        """Validate encoding is known to the codec registry."""
        try:
            codecs.lookup(v)
        except LookupError as e:
            raise ValueError(f"unknown encoding: {v}") from e
        return v


class SettingsManager:
    """Loads and saves ``FilesystemSettings`` as JSON."""

    def __init__(
        self,
        config_dir: Path | None = None,
        filesystem: FileSystem | None = None,
    ) -> None:
        """Initialize the settings manager.

        Args:
            config_dir: Directory holding config.json. Defaults to
                $STRICTFS_CONFIG_DIR, then ~/.strictfs.
            filesystem: Filesystem used to save settings. Defaults to a
                GuardedFileSystem over the host primitives.

        Note:
            Prefer using factory methods `create()` or `create_default()` for construction.
        """
        env_dir = os.environ.get(CONFIG_DIR_ENV)
        self.config_dir = config_dir or (Path(env_dir) if env_dir else CONFIG_DIR)
        self.config_file = self.config_dir / "config.json"
        self._filesystem = filesystem

    @classmethod
    def create(cls, config_dir: Path, filesystem: FileSystem | None = None) -> SettingsManager:
        """Create a settings manager with a custom config directory.

        Args:
            config_dir: Directory for the config file.
            filesystem: Filesystem used to save settings.

        Returns:
            Configured SettingsManager instance.
        """
        return cls(config_dir=config_dir, filesystem=filesystem)

    @classmethod
    def create_default(cls) -> SettingsManager:
        """Create a settings manager with the default config directory."""
        return cls()

    @property
    def filesystem(self) -> FileSystem:
        if self._filesystem is None:
            from strictfs.filesystem import GuardedFileSystem

            self._filesystem = GuardedFileSystem()
        return self._filesystem

    def load(self) -> FilesystemSettings:
        """Load settings, falling back to defaults when no file exists.

        Returns:
            Parsed FilesystemSettings.

        Raises:
            ValueError: If the file holds invalid JSON or invalid values.
            FilesystemError: If the file exists but cannot be read.
        """
        path = self.filesystem.resolve_path(str(self.config_file))
        if not self.filesystem.path_exists(path):
            return FilesystemSettings()

        raw = self.filesystem.read_file(path)
        try:
            return FilesystemSettings.model_validate(json.loads(raw))
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as e:
            raise ValueError(f"Invalid configuration in {self.config_file}: {e}") from e

    def save(self, settings: FilesystemSettings) -> None:
        """Atomically write settings to the config file.

        Args:
            settings: Settings to persist.

        Raises:
            FilesystemError: If the config directory or file cannot be written.
        """
        try:
            self.config_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            msg = f"Could not create configuration directory '{self.config_dir}'"
            raise FilesystemIOError(msg, str(self.config_dir)) from e
        data = settings.model_dump(by_alias=True)
        self.filesystem.write_file(str(self.config_file), json.dumps(data, indent=2) + "\n")
        logger.debug("Saved settings to %s", self.config_file)

    def set_value(self, key: str, value: str) -> FilesystemSettings:
        """Update a single setting from its string form and persist it.

        An invalid config file is replaced, starting from the defaults.

        Args:
            key: Field name or alias, e.g. ``cleanup_temp_files`` or ``cleanupTempFiles``.
            value: String value; octal is accepted for ``new_file_mode``.

        Returns:
            The updated settings.

        Raises:
            ValueError: If the key is unknown or the value invalid.
            FilesystemError: If the config file cannot be read or written.
        """
        field_name = _field_name(key)
        try:
            current = self.load().model_dump()
        except ValueError as e:
            logger.warning("Replacing invalid configuration: %s", e)
            current = FilesystemSettings().model_dump()
        current[field_name] = _parse_value(field_name, value)
        try:
            updated = FilesystemSettings.model_validate(current)
        except ValidationError as e:
            raise ValueError(f"Invalid value for {key}: {value}") from e
        self.save(updated)
        return updated


def _field_name(key: str) -> str:
    """Map a CLI key (field name, alias or kebab-case) to a field name."""
    normalized = key.replace("-", "_")
    for name, info in FilesystemSettings.model_fields.items():
        if normalized == name or key == info.alias:
            return name
    raise ValueError(f"Unknown configuration key: {key}")


def _parse_value(field_name: str, value: str) -> Any:
    """Convert a string value to the type the field expects."""
    if field_name == "new_file_mode":
        if value.lower() in ("", "none", "null"):
            return None
        try:
            return int(value, 8)
        except ValueError as e:
            raise ValueError(f"Invalid octal mode: {value}") from e
    if isinstance(FilesystemSettings.model_fields[field_name].default, bool):
        lowered = value.lower()
        if lowered in ("1", "true", "yes", "on"):
            return True
        if lowered in ("0", "false", "no", "off"):
            return False
        raise ValueError(f"Invalid boolean value: {value}")
    return value
