"""Managed extension lock file.

Tracks every extension the installer owns. An extension is "managed" exactly
when it has an entry here; anything else on disk was placed manually.

Lock path is injected by the app, never hardcoded.
"""

import json
import logging
from dataclasses import asdict
from dataclasses import dataclass
from dataclasses import fields
from datetime import UTC
from datetime import datetime
from pathlib import Path

logger = logging.getLogger(__name__)


@dataclass
class ExtensionLockEntry:
    """Entry in extensions lock file."""

    name: str
    version: str
    source: str
    commit: str | None
    path: str
    installed_at: str
    managed_since: str = ""

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict) -> "ExtensionLockEntry":
        """Create from dictionary.

        Keys this version does not know are dropped, and entries written
        before constraints were tracked default to any version.
        """
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in data.items() if key in known}
        values.setdefault("version", "*")
        return cls(**values)


class ExtensionLock:
    """
    Extensions lock file manager (with injected lock path).

    Lock format (JSON):
    {
      "version": "1.0",
      "extensions": {
        "gallery": {
          "name": "gallery",
          "version": "*",
          "source": "git+https://github.com/org/gallery@main",
          "commit": "abc123...",
          "path": "/srv/app/extensions/gallery",
          "installed_at": "2025-10-26T12:00:00Z",
          "managed_since": "2025-09-01T08:00:00Z"
        }
      }
    }
    """

    VERSION = "1.0"

    def __init__(self, lock_path: Path):
        """Initialize lock manager with app-provided lock path.

        Args:
            lock_path: Path to lock file (app determines location)
        """
        self.lock_path = lock_path
        self._data: dict[str, ExtensionLockEntry] = {}
        self._load()

    def _load(self) -> None:
        """Load lock file if it exists."""
        if not self.lock_path.exists():
            self._data = {}
            return

        try:
            with open(self.lock_path) as f:
                data = json.load(f)

            if data.get("version") != self.VERSION:
                logger.warning(f"Lock file version mismatch: expected {self.VERSION}, got {data.get('version')}")

            extensions = data.get("extensions", {})
            self._data = {name: ExtensionLockEntry.from_dict(entry) for name, entry in extensions.items()}

            logger.debug(f"Loaded {len(self._data)} extensions from lock file")

        except Exception as e:
            logger.error(f"Failed to load lock file: {e}")
            self._data = {}

    def _save(self) -> None:
        """Save lock file."""
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)

        data = {
            "version": self.VERSION,
            "extensions": {name: entry.to_dict() for name, entry in self._data.items()},
        }

        try:
            with open(self.lock_path, "w") as f:
                json.dump(data, f, indent=2)
            logger.debug(f"Saved lock file with {len(self._data)} extensions")
        except Exception as e:
            logger.error(f"Failed to save lock file: {e}")

    def add_entry(
        self,
        name: str,
        version: str,
        source: str,
        commit: str | None,
        path: Path,
    ) -> None:
        """
        Add or update extension in lock file.

        Updating an existing entry keeps its managed_since timestamp.

        Args:
            name: Extension name
            version: Requested version constraint
            source: Source URI
            commit: Git commit SHA (None if not git)
            path: Installation path
        """
        now = datetime.now(UTC).isoformat()
        previous = self._data.get(name)

        self._data[name] = ExtensionLockEntry(
            name=name,
            version=version,
            source=source,
            commit=commit,
            path=str(path),
            installed_at=now,
            managed_since=previous.managed_since if previous and previous.managed_since else now,
        )
        self._save()

        logger.debug(f"Added {name} to lock file")

    def remove_entry(self, name: str) -> None:
        """Remove extension from lock file (no-op when absent)."""
        if name in self._data:
            del self._data[name]
            self._save()
            logger.debug(f"Removed {name} from lock file")

    def get_entry(self, name: str) -> ExtensionLockEntry | None:
        return self._data.get(name)

    def list_entries(self) -> list[ExtensionLockEntry]:
        return list(self._data.values())

    def is_installed(self, name: str) -> bool:
        """
        Check if extension is in lock file.

        Args:
            name: Extension name

        Returns:
            True if extension is managed
        """
        return name in self._data
