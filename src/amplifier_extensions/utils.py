"""Path and identifier helpers shared by the installer and the manager."""

import os
from collections.abc import Iterable
from pathlib import Path

BACKUP_SUFFIX = "__backup__"


def backup_path_for(extension_path: Path | str, suffix: str = BACKUP_SUFFIX) -> Path:
    """Derive the backup location for an extension directory.

    Trailing separators are trimmed before the suffix is appended, so
    ``/ext/gallery/`` and ``/ext/gallery`` both map to ``/ext/gallery__backup__``.

    Examples:
        >>> backup_path_for(Path("/srv/extensions/gallery"))
        PosixPath('/srv/extensions/gallery__backup__')
    """
    trimmed = str(extension_path).rstrip("/" + os.sep)
    return Path(trimmed + suffix)


def join_names(names: Iterable[str]) -> str:
    """Pipe-join extension identifiers for error parameters."""
    return "|".join(names)
