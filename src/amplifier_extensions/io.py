"""Status output for extension operations.

Operations report progress as message keys plus parameters. Sinks decide how
to render them: LoggingIO forwards to the logging module, BufferIO keeps them
in memory for web responses and tests.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from enum import IntEnum


class Verbosity(IntEnum):
    """Output verbosity levels, lowest is always shown."""

    QUIET = 1
    NORMAL = 2
    VERBOSE = 4
    VERY_VERBOSE = 8
    DEBUG = 16


MESSAGES: dict[str, str] = {
    "DISABLING_EXTENSION": "Disabling extension...",
    "DISABLING_EXTENSIONS": "Disabling extensions...",
    "ENABLING_EXTENSION": "Enabling extension...",
    "ENABLING_EXTENSIONS": "Enabling extensions...",
    "EXTENSION_ALREADY_INSTALLED_MANUALLY": "These extensions are already installed manually: {}",
    "EXTENSION_NOT_INSTALLED": "These extensions are not installed: {}",
    "EXTENSION_ALREADY_MANAGED": "The extension {} is already managed.",
    "EXTENSION_NOT_AVAILABLE": "The extension {} is not available.",
    "EXTENSION_INSTALL_ERROR": "Installing {} failed.",
    "EXTENSION_CANNOT_MANAGE_FILESYSTEM_ERROR": "The extension {} could not be backed up before installing it.",
    "EXTENSION_CANNOT_MANAGE_INSTALL_ERROR": "The extension {} could not be installed. The previous version was restored.",
    "EXTENSION_MANAGED_WITH_CLEAN_ERROR": "The extension {} is now managed, but the backup at {} must be removed manually.",
    "EXTENSION_MANAGED_WITH_ENABLE_ERROR": "The extension {} is now managed, but it could not be enabled again.",
    "FILESYSTEM_ERROR": "Filesystem operation failed on {}",
}


def translate(message: str, parameters: Sequence[str] = ()) -> str:
    """
    Render a message key with its parameters.

    Unknown keys render as themselves, with parameters appended.

    Examples:
        >>> translate("EXTENSION_NOT_INSTALLED", ["gallery|polls"])
        'These extensions are not installed: gallery|polls'
        >>> translate("Something odd")
        'Something odd'
    """
    template = MESSAGES.get(message)
    if template is None:
        if parameters:
            return f"{message} ({', '.join(str(p) for p in parameters)})"
        return message

    try:
        return template.format(*parameters)
    except IndexError:
        return template


class LoggingIO:
    """Forward status output to a logger."""

    def __init__(self, logger: logging.Logger | None = None, verbosity: int = Verbosity.NORMAL):
        self.logger = logger or logging.getLogger("amplifier_extensions")
        self.verbosity = verbosity

    def write_error(self, message: str, parameters: Sequence[str] = (), verbosity: int = Verbosity.NORMAL) -> None:
        if verbosity > self.verbosity:
            return
        level = logging.INFO if verbosity <= Verbosity.NORMAL else logging.DEBUG
        self.logger.log(level, translate(message, parameters))


@dataclass
class IOMessage:
    """One recorded status line."""

    message: str
    parameters: list[str] = field(default_factory=list)
    verbosity: int = Verbosity.NORMAL

    def render(self) -> str:
        return translate(self.message, self.parameters)


class BufferIO:
    """Collect status output in memory."""

    def __init__(self, verbosity: int = Verbosity.DEBUG):
        self.verbosity = verbosity
        self.messages: list[IOMessage] = []

    def write_error(self, message: str, parameters: Sequence[str] = (), verbosity: int = Verbosity.NORMAL) -> None:
        if verbosity > self.verbosity:
            return
        self.messages.append(IOMessage(message=message, parameters=[str(p) for p in parameters], verbosity=verbosity))

    def keys(self) -> list[str]:
        """Message keys in the order they were written."""
        return [m.message for m in self.messages]

    def get_output(self) -> str:
        return "\n".join(m.render() for m in self.messages)
