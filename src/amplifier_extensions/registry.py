"""Directory-backed extension registry.

Convention over configuration: every direct subdirectory of the extensions
directory holding a pyproject.toml is an extension, named after the directory.
Enabled state lives in a small JSON file next to the extensions.

Apps with their own notion of extensions implement ExtensionRegistryProtocol
instead.
"""

import json
import logging
from pathlib import Path

from .exceptions import ExtensionNotAvailableError
from .schema import ExtensionMetadata
from .utils import BACKUP_SUFFIX

logger = logging.getLogger(__name__)


class ExtensionRegistry:
    """
    Registry of extensions found under an injected directory.

    State format (JSON):
    {
      "version": "1.0",
      "enabled": ["gallery", "polls"]
    }
    """

    VERSION = "1.0"

    def __init__(self, extensions_dir: Path, state_path: Path, backup_suffix: str = BACKUP_SUFFIX):
        """Initialize registry with app-provided locations.

        Args:
            extensions_dir: Directory containing one subdirectory per extension
            state_path: JSON file recording enabled extensions
            backup_suffix: Directories ending with this suffix are backups, not extensions
        """
        self.extensions_dir = extensions_dir
        self.state_path = state_path
        self.backup_suffix = backup_suffix
        self._enabled: list[str] = []
        self._load_state()

    def _load_state(self) -> None:
        if not self.state_path.exists():
            self._enabled = []
            return

        try:
            with open(self.state_path) as f:
                data = json.load(f)

            if data.get("version") != self.VERSION:
                logger.warning(f"State file version mismatch: expected {self.VERSION}, got {data.get('version')}")

            self._enabled = list(data.get("enabled", []))
            logger.debug(f"Loaded {len(self._enabled)} enabled extensions from state file")

        except Exception as e:
            logger.error(f"Failed to load state file: {e}")
            self._enabled = []

    def _save_state(self) -> None:
        self.state_path.parent.mkdir(parents=True, exist_ok=True)

        data = {"version": self.VERSION, "enabled": self._enabled}

        try:
            with open(self.state_path, "w") as f:
                json.dump(data, f, indent=2)
        except Exception as e:
            logger.error(f"Failed to save state file: {e}")

    def _is_extension_dir(self, path: Path) -> bool:
        return (
            path.is_dir()
            and not path.name.startswith(".")
            and not path.name.endswith(self.backup_suffix)
            and (path / "pyproject.toml").exists()
        )

    def all_available(self) -> dict[str, ExtensionMetadata]:
        """
        Discover every extension on disk, managed or not.

        Returns:
            Mapping of extension name (directory name) to its metadata.
            Directories with unreadable metadata are skipped.
        """
        available: dict[str, ExtensionMetadata] = {}
        if not self.extensions_dir.is_dir():
            return available

        for item in sorted(self.extensions_dir.iterdir(), key=lambda p: p.name):
            if not self._is_extension_dir(item):
                continue
            try:
                available[item.name] = ExtensionMetadata.from_pyproject(item / "pyproject.toml")
            except Exception as e:
                logger.debug(f"Could not read metadata from {item / 'pyproject.toml'}: {e}")

        return available

    def is_available(self, name: str) -> bool:
        return self._is_extension_dir(self.extensions_dir / name)

    def is_enabled(self, name: str) -> bool:
        return name in self._enabled and self.is_available(name)

    def enable(self, name: str) -> None:
        """Enable an extension in one go."""
        while self.enabling(name):
            pass

    def enabling(self, name: str) -> bool:
        """
        Run one enable step.

        Directory extensions have no enable migrations, so this always finishes
        in a single step.

        Returns:
            False (no further steps)

        Raises:
            ExtensionNotAvailableError: If the extension is not on disk
        """
        if not self.is_available(name):
            raise ExtensionNotAvailableError(parameters=[name])

        if name not in self._enabled:
            self._enabled.append(name)
            self._save_state()
            logger.info(f"Enabled extension: {name}")

        return False

    def disable(self, name: str) -> None:
        """
        Disable an extension.

        Raises:
            ExtensionNotAvailableError: If the extension is not on disk
        """
        if not self.is_available(name):
            raise ExtensionNotAvailableError(parameters=[name])

        if name in self._enabled:
            self._enabled.remove(name)
            self._save_state()
            logger.info(f"Disabled extension: {name}")

    def get_extension_path(self, name: str, must_exist: bool = False) -> Path:
        """
        Resolve the on-disk directory of an extension.

        Args:
            name: Extension name
            must_exist: Raise instead of returning a path that is not there

        Raises:
            ExtensionNotAvailableError: If must_exist and the directory is missing
        """
        path = self.extensions_dir / name
        if must_exist and not path.is_dir():
            raise ExtensionNotAvailableError(parameters=[name], context={"path": str(path)})
        return path
