"""Extension-specific exceptions.

Every error carries a message key plus structured parameters so callers can
branch on the error kind and present precise remediation guidance.
"""


class ExtensionError(Exception):
    """Base exception for extension operations."""

    key = "ERROR"

    def __init__(
        self,
        prefix: str = "",
        parameters: list[str] | None = None,
        context: dict | None = None,
    ):
        """Initialize with prefix, parameters and optional context.

        Args:
            prefix: Namespace prepended to the message key (e.g. "EXTENSION_")
            parameters: Values substituted into the translated message
            context: Optional dict with additional context (file paths, etc.)
        """
        self.prefix = prefix
        self.message = f"{prefix}{self.key}"
        self.parameters = [str(p) for p in parameters or []]
        self.context = context or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if not self.parameters:
            return self.message
        return f"{self.message} ({', '.join(self.parameters)})"


class AlreadyInstalledManuallyError(ExtensionError):
    """Extension already exists on disk without being managed."""

    key = "ALREADY_INSTALLED_MANUALLY"


class NotInstalledError(ExtensionError):
    """Extension is not installed."""

    key = "NOT_INSTALLED"


class AlreadyManagedError(ExtensionError):
    """Extension is already managed by the installer."""

    key = "ALREADY_MANAGED"


class ExtensionNotAvailableError(ExtensionError):
    """Registry has no extension with this name on disk."""

    key = "EXTENSION_NOT_AVAILABLE"


class FilesystemError(ExtensionError):
    """A rename or remove on disk failed."""

    key = "FILESYSTEM_ERROR"


class PackageInstallError(ExtensionError):
    """Package installation or removal failed."""

    key = "INSTALL_ERROR"


class CannotManageError(ExtensionError):
    """Extension could not be brought under management; nothing changed."""

    key = "CANNOT_MANAGE"


class CannotManageFilesystemError(CannotManageError):
    """Backing up the extension directory failed."""

    key = "CANNOT_MANAGE_FILESYSTEM_ERROR"


class CannotManageInstallError(CannotManageError):
    """Installing the managed package failed and the backup was restored."""

    key = "CANNOT_MANAGE_INSTALL_ERROR"


class ManagedWithError(ExtensionError):
    """Extension is managed now, but a follow-up step failed."""

    key = "MANAGED_WITH_ERROR"


class ManagedWithCleanError(ManagedWithError):
    """Extension is managed, but its backup directory could not be removed."""

    key = "MANAGED_WITH_CLEAN_ERROR"


class ManagedWithEnableError(ManagedWithError):
    """Extension is managed, but could not be enabled again."""

    key = "MANAGED_WITH_ENABLE_ERROR"
