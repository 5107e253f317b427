"""Package installer base (protocol-based).

The installer owns extension directories under an injected install directory
and records them in the lock file. It does not know HOW packages are fetched:
apps provide an InstallSourceFactory that returns InstallSourceProtocol
implementations.

Bulk operations run a pair of hooks around the actual work so subclasses can
bracket them (disable before, enable after):

    install: pre_install -> install each -> post_install
    update:  pre_update  -> reinstall each -> post_update (always runs)
    remove:  pre_remove  -> delete each -> post_remove
"""

import logging
import shutil
import tempfile
from collections.abc import Iterable
from collections.abc import Mapping
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .exceptions import NotInstalledError
from .exceptions import PackageInstallError
from .io import LoggingIO
from .lock import ExtensionLock
from .lock import ExtensionLockEntry
from .protocols import InstallSourceFactory
from .protocols import IOProtocol
from .utils import join_names

logger = logging.getLogger(__name__)

ANY_VERSION = "*"


@dataclass
class BracketReport:
    """Outcome of a disable/enable bracket over a batch of extensions.

    ``enabled`` lists the extensions that were enabled before a pre_update
    hook ran, in request order; post_update restores exactly these.
    ``errors`` collects the per-extension failures that were logged and skipped.
    """

    enabled: list[str] = field(default_factory=list)
    errors: list[tuple[str, Exception]] = field(default_factory=list)

    @property
    def failed(self) -> list[str]:
        return [name for name, _ in self.errors]


def _find_extension_root(target_dir: Path) -> Path | None:
    """Find extension root by locating pyproject.toml.

    Supports both structures:
    - Flat: target_dir/pyproject.toml (git clone, manual)
    - Nested: target_dir/pkg_name/pyproject.toml (pip install)

    Returns:
        Path to extension root (where pyproject.toml is), or None if not found
    """
    if (target_dir / "pyproject.toml").exists():
        return target_dir

    for item in target_dir.iterdir():
        if item.is_dir() and not item.name.startswith(".") and (item / "pyproject.toml").exists():
            return item

    return None


class PackageInstaller:
    """
    Install, update and remove extension packages (mechanism only).

    Apps provide:
    - source_factory: How to fetch a package for (name, constraint)
    - install_dir: Where extension directories live
    - lock: Which extensions are managed
    """

    def __init__(
        self,
        source_factory: InstallSourceFactory,
        install_dir: Path,
        lock: ExtensionLock,
        exception_prefix: str = "EXTENSION_",
    ):
        self.source_factory = source_factory
        self.install_dir = install_dir
        self.lock = lock
        self.exception_prefix = exception_prefix

    def normalize_version(self, packages: Mapping[str, str | None] | Iterable[str]) -> dict[str, str]:
        """
        Turn a package request into a {name: constraint} mapping.

        Accepts a mapping (None constraints become "*") or an iterable of names,
        where a name may carry its constraint as ``name@constraint``.
        Repeated names collapse into one entry, the last constraint wins.

        Examples:
            >>> installer.normalize_version(["gallery", "polls@^2.0"])
            {'gallery': '*', 'polls': '^2.0'}
        """
        if isinstance(packages, Mapping):
            return {name: constraint or ANY_VERSION for name, constraint in packages.items()}

        normalized: dict[str, str] = {}
        for package in packages:
            name, _, constraint = package.partition("@")
            normalized[name] = constraint or ANY_VERSION
        return normalized

    def is_managed(self, name: str) -> bool:
        return self.lock.is_installed(name)

    def get_managed_packages(self) -> dict[str, ExtensionLockEntry]:
        return {entry.name: entry for entry in self.lock.list_entries()}

    # Hooks, overridden by subclasses that need to bracket bulk operations

    def pre_install(self, packages: dict[str, str], io: IOProtocol) -> None:
        pass

    def post_install(self, packages: dict[str, str], io: IOProtocol) -> None:
        pass

    def pre_update(self, packages: dict[str, str], io: IOProtocol) -> BracketReport:
        return BracketReport()

    def post_update(self, packages: dict[str, str], report: BracketReport, io: IOProtocol) -> BracketReport:
        return BracketReport()

    def pre_remove(self, packages: dict[str, str], io: IOProtocol) -> BracketReport:
        return BracketReport()

    def post_remove(self, packages: dict[str, str], io: IOProtocol) -> None:
        pass

    # Bulk operations

    async def install(self, packages: Mapping[str, str | None] | Iterable[str], io: IOProtocol | None = None) -> None:
        """
        Install packages that are not on disk yet.

        Raises:
            PackageInstallError: If any package fails to install
        """
        if io is None:
            io = LoggingIO()
        packages = self.normalize_version(packages)

        self.pre_install(packages, io)
        for name, constraint in packages.items():
            await self._install_package(name, constraint)
        self.post_install(packages, io)

    async def update(self, packages: Mapping[str, str | None] | Iterable[str], io: IOProtocol | None = None) -> None:
        """
        Reinstall managed packages.

        post_update runs even when a reinstall fails, so the bracket opened by
        pre_update is always closed.

        Raises:
            NotInstalledError: If a package is not managed (nothing is touched)
            PackageInstallError: If a reinstall fails
        """
        if io is None:
            io = LoggingIO()
        packages = self.normalize_version(packages)
        self._require_managed(packages)

        report = self.pre_update(packages, io)
        try:
            for name, constraint in packages.items():
                await self._install_package(name, constraint, replace=True)
        finally:
            self.post_update(packages, report, io)

    async def remove(self, packages: Mapping[str, str | None] | Iterable[str], io: IOProtocol | None = None) -> None:
        """
        Remove managed packages from disk and from the lock file.

        Raises:
            NotInstalledError: If a package is not managed (nothing is touched)
            PackageInstallError: If a directory cannot be deleted
        """
        if io is None:
            io = LoggingIO()
        packages = self.normalize_version(packages)
        self._require_managed(packages)

        self.pre_remove(packages, io)
        for name in packages:
            self._remove_package(name)
        self.post_remove(packages, io)

    def _require_managed(self, packages: dict[str, str]) -> None:
        not_managed = [name for name in packages if not self.is_managed(name)]
        if not_managed:
            raise NotInstalledError(self.exception_prefix, [join_names(not_managed)])

    async def _install_package(self, name: str, constraint: str, replace: bool = False) -> Path:
        """
        Fetch one package into a staging directory, then move it into place.

        A failed fetch never leaves a partial directory at the target path.
        """
        target_dir = self.install_dir / name
        if target_dir.exists() and not replace:
            raise PackageInstallError(
                self.exception_prefix,
                [name],
                context={"target_dir": str(target_dir), "reason": "target directory already exists"},
            )

        staging_dir: Path | None = None
        previous_dir: Path | None = None

        try:
            source = self.source_factory(name, constraint)
            self.install_dir.mkdir(parents=True, exist_ok=True)
            staging_dir = Path(tempfile.mkdtemp(prefix=f".staging-{name}-", dir=self.install_dir))
            previous_dir = staging_dir.with_name(f"{staging_dir.name}.previous")

            logger.info(f"Installing extension {name} ({constraint}) to {target_dir}")
            await source.install_to(staging_dir)

            extension_root = _find_extension_root(staging_dir)
            if not extension_root:
                raise PackageInstallError(
                    self.exception_prefix,
                    [name],
                    context={"target_dir": str(target_dir), "reason": "no pyproject.toml found"},
                )
            logger.debug(f"Extension root: {extension_root}")

            if target_dir.exists():
                target_dir.rename(previous_dir)
            try:
                extension_root.rename(target_dir)
            except OSError:
                if previous_dir.exists():
                    previous_dir.rename(target_dir)
                raise

        except Exception as e:
            if isinstance(e, PackageInstallError):
                raise
            raise PackageInstallError(self.exception_prefix, [name], context={"reason": str(e)}) from e

        finally:
            for leftover in (staging_dir, previous_dir):
                if leftover is not None and leftover.exists():
                    try:
                        shutil.rmtree(leftover)
                    except OSError as e:
                        logger.warning(f"Could not clean up {leftover}: {e}")

        self.lock.add_entry(
            name=name,
            version=constraint,
            source=getattr(source, "uri", "unknown"),
            commit=getattr(source, "commit_sha", None),
            path=target_dir,
        )
        logger.info(f"Successfully installed extension: {name}")
        return target_dir

    def _remove_package(self, name: str) -> None:
        target_dir = self.install_dir / name

        try:
            logger.info(f"Removing extension: {name}")
            if target_dir.exists():
                shutil.rmtree(target_dir)
        except OSError as e:
            raise PackageInstallError(
                self.exception_prefix,
                [name],
                context={"target_dir": str(target_dir), "reason": str(e)},
            ) from e

        self.lock.remove_entry(name)
        logger.info(f"Successfully removed extension: {name}")
