"""Tests for extension manager settings."""

from pathlib import Path

import pytest
from amplifier_extensions import ExtensionManager
from amplifier_extensions import ExtensionSettings
from amplifier_extensions import ExtensionRegistry
from amplifier_extensions import Filesystem


def test_default_paths():
    settings = ExtensionSettings(extensions_dir=Path("/srv/ext"))

    assert settings.resolved_lock_path == Path("/srv/ext/.extensions.lock")
    assert settings.resolved_state_path == Path("/srv/ext/.extensions.json")
    assert settings.backup_suffix == "__backup__"
    assert settings.exception_prefix == "EXTENSION_"


def test_from_toml_resolves_relative_paths(tmp_path):
    config_path = tmp_path / "app.toml"
    config_path.write_text("""
[tool.amplifier.extensions]
extensions-dir = "ext"
lock-path = "/var/lib/app/extensions.lock"
backup-suffix = ".bak"
exception-prefix = "APP_"
""")

    settings = ExtensionSettings.from_toml(config_path)

    assert settings.extensions_dir == tmp_path / "ext"
    assert settings.resolved_lock_path == Path("/var/lib/app/extensions.lock")
    assert settings.resolved_state_path == tmp_path / "ext" / ".extensions.json"
    assert settings.backup_suffix == ".bak"
    assert settings.exception_prefix == "APP_"


def test_from_toml_missing_section(tmp_path):
    config_path = tmp_path / "app.toml"
    config_path.write_text("[tool.other]\nvalue = 1\n")

    with pytest.raises(KeyError, match="section missing"):
        ExtensionSettings.from_toml(config_path)


def test_from_toml_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        ExtensionSettings.from_toml(tmp_path / "missing.toml")


def test_manager_from_settings(tmp_path):
    settings = ExtensionSettings(extensions_dir=tmp_path / "ext", backup_suffix=".bak", exception_prefix="APP_")

    manager = ExtensionManager.from_settings(settings, source_factory=lambda name, constraint: None)

    assert isinstance(manager.registry, ExtensionRegistry)
    assert isinstance(manager.filesystem, Filesystem)
    assert manager.install_dir == tmp_path / "ext"
    assert manager.lock.lock_path == tmp_path / "ext" / ".extensions.lock"
    assert manager.registry.backup_suffix == ".bak"
    assert manager.exception_prefix == "APP_"


def test_from_toml_missing_extensions_dir(tmp_path):
    config_path = tmp_path / "app.toml"
    config_path.write_text('[tool.amplifier.extensions]\nbackup-suffix = ".bak"\n')

    with pytest.raises(KeyError, match="extensions-dir missing"):
        ExtensionSettings.from_toml(config_path)
