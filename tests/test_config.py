"""Tests for settings and their storage."""

from __future__ import annotations

import json
import re
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from strictfs.config import CONFIG_DIR_ENV, FilesystemSettings, SettingsManager
from strictfs.errors import FilesystemIOError
from strictfs.filesystem import GuardedFileSystem


class TestFilesystemSettings:
    """Tests for the settings model."""

    def test_defaults(self) -> None:
        settings = FilesystemSettings()

        assert settings.temp_prefix == ".strictfs-"
        assert settings.cleanup_temp_files is True
        assert settings.fsync is True
        assert settings.preserve_mode is True
        assert settings.new_file_mode is None
        assert settings.encoding == "utf-8"

    def test_accepts_aliases_and_names(self) -> None:
        by_alias = FilesystemSettings.model_validate({"tempPrefix": ".a-", "newFileMode": 0o644})
        by_name = FilesystemSettings(temp_prefix=".a-", new_file_mode=0o644)

        assert by_alias == by_name

    def test_rejects_out_of_range_mode(self) -> None:
        with pytest.raises(ValidationError):
            FilesystemSettings(new_file_mode=0o10000)

    def test_rejects_empty_prefix(self) -> None:
        with pytest.raises(ValidationError):
            FilesystemSettings(temp_prefix="")

    @pytest.mark.parametrize("prefix", ["../escaped-", "sub/tmp-", "/abs-"])
    def test_rejects_prefix_with_separator(self, prefix: str) -> None:
        """Test a prefix cannot place temp files outside the target's directory."""
        with pytest.raises(ValidationError, match="path separator"):
            FilesystemSettings(temp_prefix=prefix)

    def test_accepts_known_encoding(self) -> None:
        assert FilesystemSettings(encoding="latin-1").encoding == "latin-1"

    def test_rejects_unknown_encoding(self) -> None:
        with pytest.raises(ValidationError, match="unknown encoding: bogus"):
            FilesystemSettings(encoding="bogus")

    def test_frozen(self) -> None:
        settings = FilesystemSettings()
        with pytest.raises(ValidationError):
            settings.fsync = False


class TestSettingsManager:
    """Tests for SettingsManager."""

    def test_load_defaults_when_missing(self, temp_config_dir: Path) -> None:
        manager = SettingsManager.create(temp_config_dir)
        assert manager.load() == FilesystemSettings()

    def test_save_and_load(self, temp_config_dir: Path, fs: GuardedFileSystem) -> None:
        manager = SettingsManager.create(temp_config_dir, filesystem=fs)
        settings = FilesystemSettings(cleanup_temp_files=False, new_file_mode=0o640)

        manager.save(settings)

        data = json.loads((temp_config_dir / "config.json").read_text())
        assert data["cleanupTempFiles"] is False
        assert data["newFileMode"] == 0o640
        assert manager.load() == settings

    def test_save_goes_through_filesystem(self, temp_config_dir: Path) -> None:
        """Test settings are written with the injected filesystem."""
        filesystem = MagicMock()
        manager = SettingsManager.create(temp_config_dir, filesystem=filesystem)

        manager.save(FilesystemSettings())

        filesystem.write_file.assert_called_once()
        path, payload = filesystem.write_file.call_args.args
        assert path == str(temp_config_dir / "config.json")
        assert json.loads(payload)["tempPrefix"] == ".strictfs-"

    def test_save_creates_config_dir(self, tmp_path: Path, fs: GuardedFileSystem) -> None:
        manager = SettingsManager.create(tmp_path / "new" / "dir", filesystem=fs)
        manager.save(FilesystemSettings())
        assert (tmp_path / "new" / "dir" / "config.json").exists()

    def test_load_invalid_json(self, temp_config_dir: Path) -> None:
        (temp_config_dir / "config.json").write_text("{not json")
        manager = SettingsManager.create(temp_config_dir)

        with pytest.raises(ValueError, match="Invalid configuration"):
            manager.load()

    def test_load_invalid_values(self, temp_config_dir: Path) -> None:
        (temp_config_dir / "config.json").write_text(json.dumps({"newFileMode": -1}))
        manager = SettingsManager.create(temp_config_dir)

        with pytest.raises(ValueError, match=re.escape(str(temp_config_dir))):
            manager.load()

    def test_load_goes_through_filesystem(self, temp_config_dir: Path) -> None:
        """Test settings are read with the injected filesystem."""
        filesystem = MagicMock(spec=GuardedFileSystem)
        filesystem.resolve_path.side_effect = lambda path: path
        filesystem.path_exists.return_value = True
        filesystem.read_file.return_value = b'{"fsync": false}'
        manager = SettingsManager.create(temp_config_dir, filesystem=filesystem)

        assert manager.load().fsync is False
        filesystem.read_file.assert_called_once_with(str(temp_config_dir / "config.json"))

    def test_load_config_file_is_directory(
        self, temp_config_dir: Path, fs: GuardedFileSystem
    ) -> None:
        """Test an unreadable config surfaces as a filesystem error, not OSError."""
        (temp_config_dir / "config.json").mkdir()
        manager = SettingsManager.create(temp_config_dir, filesystem=fs)

        with pytest.raises(FilesystemIOError, match="is not a file."):
            manager.load()

    def test_save_config_dir_is_file(self, tmp_path: Path, fs: GuardedFileSystem) -> None:
        (tmp_path / "taken").touch()
        manager = SettingsManager.create(tmp_path / "taken", filesystem=fs)

        with pytest.raises(FilesystemIOError) as exc_info:
            manager.save(FilesystemSettings())

        assert str(exc_info.value).startswith("Could not create configuration directory")

        assert exc_info.value.path == str(tmp_path / "taken")

    def test_env_var_overrides_default_dir(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(CONFIG_DIR_ENV, str(tmp_path))
        manager = SettingsManager.create_default()
        assert manager.config_file == tmp_path / "config.json"

    def test_default_filesystem_is_guarded(self, temp_config_dir: Path) -> None:
        manager = SettingsManager.create(temp_config_dir)
        assert isinstance(manager.filesystem, GuardedFileSystem)


class TestSetValue:
    """Tests for SettingsManager.set_value."""

    @pytest.fixture
    def manager(self, temp_config_dir: Path, fs: GuardedFileSystem) -> SettingsManager:
        return SettingsManager.create(temp_config_dir, filesystem=fs)

    @pytest.mark.parametrize("key", ["cleanup_temp_files", "cleanup-temp-files", "cleanupTempFiles"])
    def test_key_forms(self, manager: SettingsManager, key: str) -> None:
        updated = manager.set_value(key, "false")

        assert updated.cleanup_temp_files is False
        assert manager.load().cleanup_temp_files is False

    def test_octal_mode(self, manager: SettingsManager) -> None:
        assert manager.set_value("new-file-mode", "0644").new_file_mode == 0o644
        assert manager.set_value("new-file-mode", "0o600").new_file_mode == 0o600
        assert manager.set_value("new-file-mode", "none").new_file_mode is None

    def test_string_value(self, manager: SettingsManager) -> None:
        assert manager.set_value("temp-prefix", ".x-").temp_prefix == ".x-"

    def test_unknown_key(self, manager: SettingsManager) -> None:
        with pytest.raises(ValueError, match="Unknown configuration key: bogus"):
            manager.set_value("bogus", "1")

    def test_invalid_boolean(self, manager: SettingsManager) -> None:
        with pytest.raises(ValueError, match="Invalid boolean value"):
            manager.set_value("fsync", "maybe")

    def test_invalid_mode(self, manager: SettingsManager) -> None:
        with pytest.raises(ValueError, match="Invalid octal mode"):
            manager.set_value("new-file-mode", "999")

    def test_invalid_value_not_saved(self, manager: SettingsManager) -> None:
        with pytest.raises(ValueError, match="Invalid value for temp-prefix"):
            manager.set_value("temp-prefix", "")

        assert not manager.config_file.exists()

    def test_prefix_with_separator_not_saved(self, manager: SettingsManager) -> None:
        with pytest.raises(ValueError, match=re.escape("Invalid value for temp_prefix: ../x")):
            manager.set_value("temp_prefix", "../x")

        assert not manager.config_file.exists()

    def test_unknown_encoding_not_saved(self, manager: SettingsManager) -> None:
        with pytest.raises(ValueError, match="Invalid value for encoding: bogus"):
            manager.set_value("encoding", "bogus")

        assert not manager.config_file.exists()

    def test_invalid_file_replaced_from_defaults(
        self, manager: SettingsManager, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Test setting a value repairs a config file that no longer parses."""
        manager.config_file.write_text("{not json")

        with caplog.at_level("WARNING", logger="strictfs.config"):
            updated = manager.set_value("fsync", "false")

        assert updated == FilesystemSettings(fsync=False)
        assert manager.load() == updated
        assert "Replacing invalid configuration" in caplog.text
