"""Protocols for the collaborators of the extension manager.

The manager orchestrates; it does not know HOW extensions are discovered,
fetched or moved on disk. Apps provide implementations of these interfaces
(the package ships directory-backed defaults).
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any
from typing import Protocol
from typing import runtime_checkable


class InstallSourceProtocol(Protocol):
    """Protocol for extension installation sources.

    Apps can provide any implementation (GitSource, HttpZipSource, FileSource, etc.).
    The library only requires this interface. Optional ``uri`` and
    ``commit_sha`` attributes are recorded in the lock file when present.
    """

    async def install_to(self, target_dir: Path) -> None:
        """Install extension content to target directory.

        Args:
            target_dir: Directory to install into (will be created if needed)

        Raises:
            Exception: If installation fails
        """
        ...


class InstallSourceFactory(Protocol):
    """Builds an install source for an extension name and version constraint."""

    def __call__(self, name: str, constraint: str) -> InstallSourceProtocol: ...


@runtime_checkable
class ExtensionRegistryProtocol(Protocol):
    """Reports which extensions exist on disk and controls their enabled state."""

    def all_available(self) -> dict[str, Any]:
        """Map every extension present on disk (managed or not) to its metadata."""
        ...

    def is_available(self, name: str) -> bool: ...

    def is_enabled(self, name: str) -> bool: ...

    def enable(self, name: str) -> None: ...

    def enabling(self, name: str) -> bool:
        """Run one enable step.

        Returns:
            True while further steps remain, False once the extension is enabled.
            Callers stop after a bounded number of steps, so implementations
            must finish in finitely many calls.
        """
        ...

    def disable(self, name: str) -> None: ...

    def get_extension_path(self, name: str, must_exist: bool = False) -> Path: ...


@runtime_checkable
class FilesystemProtocol(Protocol):
    """Moves and deletes directories, raising FilesystemError on failure."""

    def rename(self, src: Path, dst: Path) -> None: ...

    def remove(self, path: Path) -> None: ...


@runtime_checkable
class IOProtocol(Protocol):
    """Sink for human-readable progress notices and non-fatal errors.

    Never used for control flow.
    """

    def write_error(self, message: str, parameters: Sequence[str] = (), verbosity: int = 2) -> None: ...
