"""Extension manager settings.

Locations are app policy: the library never guesses where extensions live.
Settings can be built directly or read from the [tool.amplifier.extensions]
table of a TOML file.
"""

import tomllib
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict

from .utils import BACKUP_SUFFIX


class ExtensionSettings(BaseModel):
    """Where extensions live and how their errors and backups are named."""

    model_config = ConfigDict(frozen=True)

    extensions_dir: Path
    lock_path: Path | None = None
    state_path: Path | None = None
    backup_suffix: str = BACKUP_SUFFIX
    exception_prefix: str = "EXTENSION_"

    @property
    def resolved_lock_path(self) -> Path:
        return self.lock_path or self.extensions_dir / ".extensions.lock"

    @property
    def resolved_state_path(self) -> Path:
        return self.state_path or self.extensions_dir / ".extensions.json"

    @classmethod
    def from_toml(cls, config_path: Path) -> "ExtensionSettings":
        """
        Load settings from a TOML file.

        Relative paths are resolved against the directory holding the file.

        Example:
            [tool.amplifier.extensions]
            extensions-dir = "ext"
            backup-suffix = "__backup__"

        Raises:
            FileNotFoundError: If the file doesn't exist
            KeyError: If the table or extensions-dir is missing
            tomllib.TOMLDecodeError: If invalid TOML
        """
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "rb") as f:
            data = tomllib.load(f)

        table = data.get("tool", {}).get("amplifier", {}).get("extensions", {})
        if not table:
            raise KeyError(f"[tool.amplifier.extensions] section missing in {config_path}")

        if "extensions-dir" not in table:
            raise KeyError(f"extensions-dir missing in [tool.amplifier.extensions] of {config_path}")

        base_dir = config_path.parent

        def _path(key: str) -> Path | None:
            value = table.get(key)
            if value is None:
                return None
            path = Path(value).expanduser()
            return path if path.is_absolute() else base_dir / path

        return cls(
            extensions_dir=_path("extensions-dir"),
            lock_path=_path("lock-path"),
            state_path=_path("state-path"),
            backup_suffix=table.get("backup-suffix", BACKUP_SUFFIX),
            exception_prefix=table.get("exception-prefix", "EXTENSION_"),
        )
