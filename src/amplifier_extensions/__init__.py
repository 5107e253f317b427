"""amplifier-extensions - Safe managed-extension lifecycle.

Public API exports matching README.md specification.

This is library mechanism; apps inject policy (paths, registries, install sources).
"""

from .config import ExtensionSettings
from .exceptions import AlreadyInstalledManuallyError
from .exceptions import AlreadyManagedError
from .exceptions import CannotManageError
from .exceptions import CannotManageFilesystemError
from .exceptions import CannotManageInstallError
from .exceptions import ExtensionError
from .exceptions import ExtensionNotAvailableError
from .exceptions import FilesystemError
from .exceptions import ManagedWithCleanError
from .exceptions import ManagedWithEnableError
from .exceptions import ManagedWithError
from .exceptions import NotInstalledError
from .exceptions import PackageInstallError
from .filesystem import Filesystem
from .installer import BracketReport
from .installer import PackageInstaller
from .io import BufferIO
from .io import LoggingIO
from .io import Verbosity
from .lock import ExtensionLock
from .lock import ExtensionLockEntry
from .manager import ExtensionManager
from .protocols import ExtensionRegistryProtocol
from .protocols import FilesystemProtocol
from .protocols import InstallSourceFactory
from .protocols import InstallSourceProtocol
from .protocols import IOProtocol
from .registry import ExtensionRegistry
from .schema import ExtensionMetadata
from .utils import backup_path_for

__all__ = [
    # Orchestration
    "ExtensionManager",
    "PackageInstaller",
    "BracketReport",
    # Collaborators
    "ExtensionRegistry",
    "Filesystem",
    "ExtensionRegistryProtocol",
    "FilesystemProtocol",
    "InstallSourceFactory",
    "InstallSourceProtocol",
    "IOProtocol",
    # Status output
    "BufferIO",
    "LoggingIO",
    "Verbosity",
    # Metadata, settings and lock file
    "ExtensionMetadata",
    "ExtensionSettings",
    "ExtensionLock",
    "ExtensionLockEntry",
    # Exceptions
    "ExtensionError",
    "AlreadyInstalledManuallyError",
    "AlreadyManagedError",
    "CannotManageError",
    "CannotManageFilesystemError",
    "CannotManageInstallError",
    "ExtensionNotAvailableError",
    "FilesystemError",
    "ManagedWithCleanError",
    "ManagedWithEnableError",
    "ManagedWithError",
    "NotInstalledError",
    "PackageInstallError",
    # Utilities
    "backup_path_for",
]

__version__ = "0.1.0"
