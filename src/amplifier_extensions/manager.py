"""Managed extension orchestrator.

Safely manages extensions through the package installer:

- Refuses to install over extensions that were placed on disk manually.
- Disables extensions before they are updated or removed, and re-enables the
  ones that were enabled once an update finishes.
- Migrates a manually-installed extension into a managed one (start_managing)
  with a directory backup that is restored if the install fails.

Per-extension failures inside the disable/enable brackets are logged and
collected in a BracketReport; they never abort the batch.
"""

import logging
from collections.abc import Iterable
from collections.abc import Mapping
from pathlib import Path

from .config import ExtensionSettings
from .exceptions import AlreadyInstalledManuallyError
from .exceptions import AlreadyManagedError
from .exceptions import CannotManageFilesystemError
from .exceptions import CannotManageInstallError
from .exceptions import ExtensionError
from .exceptions import FilesystemError
from .exceptions import ManagedWithCleanError
from .exceptions import ManagedWithEnableError
from .exceptions import NotInstalledError
from .filesystem import Filesystem
from .installer import BracketReport
from .installer import PackageInstaller
from .io import LoggingIO
from .io import Verbosity
from .lock import ExtensionLock
from .protocols import ExtensionRegistryProtocol
from .protocols import FilesystemProtocol
from .protocols import InstallSourceFactory
from .protocols import IOProtocol
from .registry import ExtensionRegistry
from .utils import BACKUP_SUFFIX
from .utils import backup_path_for
from .utils import join_names

logger = logging.getLogger(__name__)


class ExtensionManager(PackageInstaller):
    """Package installer that keeps extension directories and enabled state consistent."""

    # Upper bound for registries whose enabling() runs in several steps
    max_enable_steps = 100

    def __init__(
        self,
        registry: ExtensionRegistryProtocol,
        filesystem: FilesystemProtocol,
        source_factory: InstallSourceFactory,
        install_dir: Path,
        lock: ExtensionLock,
        exception_prefix: str = "EXTENSION_",
        backup_suffix: str = BACKUP_SUFFIX,
    ):
        """Initialize with injected collaborators.

        Args:
            registry: Knows which extensions exist and whether they are enabled
            filesystem: Performs backup renames and removals
            source_factory: Builds install sources for (name, constraint)
            install_dir: Directory managed packages are installed into
            lock: Manifest of managed extensions
            exception_prefix: Namespace for raised error messages
            backup_suffix: Appended to an extension path to name its backup
        """
        super().__init__(source_factory, install_dir, lock, exception_prefix)
        self.registry = registry
        self.filesystem = filesystem
        self.backup_suffix = backup_suffix

    @classmethod
    def from_settings(cls, settings: ExtensionSettings, source_factory: InstallSourceFactory) -> "ExtensionManager":
        """Wire the directory-backed registry, filesystem and lock from settings."""
        return cls(
            registry=ExtensionRegistry(
                extensions_dir=settings.extensions_dir,
                state_path=settings.resolved_state_path,
                backup_suffix=settings.backup_suffix,
            ),
            filesystem=Filesystem(),
            source_factory=source_factory,
            install_dir=settings.extensions_dir,
            lock=ExtensionLock(lock_path=settings.resolved_lock_path),
            exception_prefix=settings.exception_prefix,
            backup_suffix=settings.backup_suffix,
        )

    def pre_install(self, packages: dict[str, str], io: IOProtocol) -> None:
        """Refuse to clobber extensions that were installed manually."""
        available = self.registry.all_available()
        installed_manually = [name for name in packages if name in available]
        if installed_manually:
            raise AlreadyInstalledManuallyError(self.exception_prefix, [join_names(installed_manually)])

    def pre_update(self, packages: dict[str, str], io: IOProtocol) -> BracketReport:
        """Disable enabled extensions, remembering which ones were enabled."""
        io.write_error("DISABLING_EXTENSIONS", verbosity=Verbosity.QUIET)
        report = BracketReport()

        for name in packages:
            try:
                if self.registry.is_enabled(name):
                    report.enabled.append(name)
                    self.registry.disable(name)
            except Exception as e:
                self._report_failure(name, e, report, io)

        return report

    def post_update(self, packages: dict[str, str], report: BracketReport, io: IOProtocol) -> BracketReport:
        """Re-enable the extensions pre_update found enabled (not ``packages``)."""
        io.write_error("ENABLING_EXTENSIONS", verbosity=Verbosity.QUIET)
        result = BracketReport()

        for name in report.enabled:
            try:
                self.registry.enable(name)
                result.enabled.append(name)
            except Exception as e:
                self._report_failure(name, e, result, io)

        return result

    async def remove(self, packages: Mapping[str, str | None] | Iterable[str], io: IOProtocol | None = None) -> None:
        """
        Remove managed extensions.

        Raises:
            NotInstalledError: If any extension is not on disk (nothing is touched)
        """
        packages = self.normalize_version(packages)

        available = self.registry.all_available()
        not_installed = [name for name in packages if name not in available]
        if not_installed:
            raise NotInstalledError(self.exception_prefix, [join_names(not_installed)])

        await super().remove(packages, io)

    def pre_remove(self, packages: dict[str, str], io: IOProtocol) -> BracketReport:
        """Disable every enabled extension before its files disappear."""
        io.write_error("DISABLING_EXTENSIONS", verbosity=Verbosity.QUIET)
        report = BracketReport()

        for name in packages:
            try:
                if self.registry.is_enabled(name):
                    self.registry.disable(name)
            except Exception as e:
                self._report_failure(name, e, report, io)

        return report

    def _report_failure(self, name: str, error: Exception, report: BracketReport, io: IOProtocol) -> None:
        if isinstance(error, ExtensionError):
            io.write_error(error.message, error.parameters, verbosity=Verbosity.VERBOSE)
        else:
            io.write_error(str(error), verbosity=Verbosity.VERBOSE)
        logger.warning(f"Skipping extension {name}: {error}")
        report.errors.append((name, error))

    async def start_managing(self, name: str, io: IOProtocol | None = None) -> None:
        """
        Bring a manually-installed extension under management.

        Process:
        1. Check the extension is on disk and not managed yet
        2. Disable it if enabled
        3. Move its directory to the backup path
        4. Install the managed package, then delete the backup
        5. Enable it again if it was enabled

        Raises:
            NotInstalledError: Extension is not on disk (nothing changed)
            AlreadyManagedError: Extension is already managed (nothing changed)
            CannotManageFilesystemError: Backup failed (files untouched)
            CannotManageInstallError: Install failed, original directory restored
            ManagedWithCleanError: Managed, but the backup directory is still on disk
            ManagedWithEnableError: Managed, but left disabled
        """
        if io is None:
            io = LoggingIO()

        if not self.registry.is_available(name):
            raise NotInstalledError(self.exception_prefix, [name])

        if self.is_managed(name):
            raise AlreadyManagedError(self.exception_prefix, [name])

        try:
            ext_path = self.registry.get_extension_path(name, must_exist=True)
        except ExtensionError as e:
            raise NotInstalledError(self.exception_prefix, [name]) from e
        backup_path = backup_path_for(ext_path, self.backup_suffix)

        # Disable failures propagate: migrating a half-disabled extension is unsafe
        enabled = False
        if self.registry.is_enabled(name):
            enabled = True
            io.write_error("DISABLING_EXTENSION", verbosity=Verbosity.QUIET)
            self.registry.disable(name)

        try:
            self.filesystem.rename(ext_path, backup_path)
        except FilesystemError as e:
            self._restore_enabled(name, enabled, io)
            raise CannotManageFilesystemError(
                self.exception_prefix,
                [name],
                context={"path": str(ext_path), "backup_path": str(backup_path)},
            ) from e
        logger.debug(f"Backed up {ext_path} to {backup_path}")

        try:
            await self.install([name], io)
        except Exception as e:
            context = {"path": str(ext_path), "backup_path": str(backup_path)}
            try:
                self.filesystem.rename(backup_path, ext_path)
            except FilesystemError as rollback_error:
                logger.error(f"Could not restore {ext_path} from {backup_path}: {rollback_error}")
                context["rollback_error"] = str(rollback_error)
            else:
                self._restore_enabled(name, enabled, io)
            raise CannotManageInstallError(self.exception_prefix, [name], context=context) from e

        try:
            self.filesystem.remove(backup_path)
        except FilesystemError as e:
            raise ManagedWithCleanError(
                self.exception_prefix,
                [name, str(backup_path)],
                context={"backup_path": str(backup_path)},
            ) from e

        if enabled:
            try:
                io.write_error("ENABLING_EXTENSION", verbosity=Verbosity.QUIET)
                self._enable_in_steps(name)
            except Exception as e:
                raise ManagedWithEnableError(self.exception_prefix, [name]) from e

        logger.info(f"Extension {name} is now managed")

    def _enable_in_steps(self, name: str) -> None:
        """Drive registry.enabling until it reports no further steps."""
        for _ in range(self.max_enable_steps):
            if not self.registry.enabling(name):
                return
        raise ExtensionError(
            self.exception_prefix,
            [name],
            context={"reason": f"enabling did not finish within {self.max_enable_steps} steps"},
        )

    def _restore_enabled(self, name: str, enabled: bool, io: IOProtocol) -> None:
        """Best-effort re-enable after a migration that left the files untouched."""
        if not enabled:
            return
        try:
            io.write_error("ENABLING_EXTENSION", verbosity=Verbosity.QUIET)
            self.registry.enable(name)
        except Exception as e:
            logger.warning(f"Could not re-enable extension {name} after failed migration: {e}")


