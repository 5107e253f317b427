"""Tests for the directory-backed extension registry."""

from pathlib import Path

import pytest
from amplifier_extensions import ExtensionNotAvailableError
from amplifier_extensions import ExtensionRegistry


def make_extension(extensions_dir: Path, name: str, version: str = "1.0.0") -> Path:
    path = extensions_dir / name
    path.mkdir(parents=True)
    (path / "pyproject.toml").write_text(f'[project]\nname = "{name}"\nversion = "{version}"\n')
    return path


@pytest.fixture
def registry(tmp_path):
    extensions_dir = tmp_path / "ext"
    extensions_dir.mkdir()
    return ExtensionRegistry(extensions_dir=extensions_dir, state_path=tmp_path / "state.json")


def test_all_available_discovers_extensions(registry):
    make_extension(registry.extensions_dir, "gallery")
    make_extension(registry.extensions_dir, "polls", "2.0.0")

    available = registry.all_available()

    assert list(available) == ["gallery", "polls"]
    assert available["polls"].version == "2.0.0"


def test_all_available_skips_backups_hidden_and_plain_dirs(registry):
    """Test only real extension directories are reported."""
    make_extension(registry.extensions_dir, "gallery")
    make_extension(registry.extensions_dir, "gallery__backup__")
    make_extension(registry.extensions_dir, ".staging-polls-1234")
    (registry.extensions_dir / "no-metadata").mkdir()

    assert list(registry.all_available()) == ["gallery"]
    assert not registry.is_available("gallery__backup__")
    assert not registry.is_available("no-metadata")


def test_all_available_missing_dir(tmp_path):
    registry = ExtensionRegistry(extensions_dir=tmp_path / "missing", state_path=tmp_path / "state.json")

    assert registry.all_available() == {}


def test_enable_and_disable(registry):
    make_extension(registry.extensions_dir, "gallery")

    assert not registry.is_enabled("gallery")

    registry.enable("gallery")
    assert registry.is_enabled("gallery")

    registry.disable("gallery")
    assert not registry.is_enabled("gallery")


def test_enabling_finishes_in_one_step(registry):
    make_extension(registry.extensions_dir, "gallery")

    assert registry.enabling("gallery") is False
    assert registry.is_enabled("gallery")


def test_enabled_state_persists(registry, tmp_path):
    make_extension(registry.extensions_dir, "gallery")
    registry.enable("gallery")

    reloaded = ExtensionRegistry(extensions_dir=registry.extensions_dir, state_path=tmp_path / "state.json")

    assert reloaded.is_enabled("gallery")


def test_enable_unavailable_extension(registry):
    with pytest.raises(ExtensionNotAvailableError) as exc_info:
        registry.enable("ghost")

    assert exc_info.value.parameters == ["ghost"]


def test_disable_unavailable_extension(registry):
    with pytest.raises(ExtensionNotAvailableError):
        registry.disable("ghost")


def test_removed_directory_is_not_enabled(registry):
    """Test enabled state follows the directory on disk."""
    path = make_extension(registry.extensions_dir, "gallery")
    registry.enable("gallery")

    path.rename(registry.extensions_dir / "gallery__backup__")

    assert not registry.is_enabled("gallery")


def test_get_extension_path(registry):
    path = make_extension(registry.extensions_dir, "gallery")

    assert registry.get_extension_path("gallery", must_exist=True) == path
    assert registry.get_extension_path("ghost") == registry.extensions_dir / "ghost"

    with pytest.raises(ExtensionNotAvailableError):
        registry.get_extension_path("ghost", must_exist=True)
