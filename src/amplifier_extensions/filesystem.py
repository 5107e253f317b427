"""Filesystem operator used to back up and restore extension directories.

Every failure surfaces as FilesystemError so callers only have one error kind
to wrap.
"""

import logging
import shutil
from pathlib import Path

from .exceptions import FilesystemError

logger = logging.getLogger(__name__)


class Filesystem:
    """Rename and remove operations on local directories."""

    def rename(self, src: Path, dst: Path) -> None:
        """
        Move src to dst.

        Never overwrites: an existing destination (e.g. a stale backup left
        behind by an earlier run) is an error.

        Args:
            src: Existing file or directory
            dst: Destination path, must not exist

        Raises:
            FilesystemError: If src is missing, dst exists or the rename fails
        """
        src = Path(src)
        dst = Path(dst)

        if not src.exists():
            raise FilesystemError(parameters=[str(src)], context={"operation": "rename", "reason": "source missing"})

        if dst.exists():
            raise FilesystemError(
                parameters=[str(dst)],
                context={"operation": "rename", "reason": "destination exists", "src": str(src)},
            )

        try:
            src.rename(dst)
        except OSError as e:
            raise FilesystemError(
                parameters=[str(src), str(dst)],
                context={"operation": "rename", "reason": str(e)},
            ) from e

        logger.debug(f"Renamed {src} -> {dst}")

    def remove(self, path: Path) -> None:
        """
        Remove a file or a whole directory tree.

        Missing paths are ignored.

        Raises:
            FilesystemError: If deletion fails
        """
        path = Path(path)

        try:
            if path.is_dir() and not path.is_symlink():
                shutil.rmtree(path)
            elif path.exists() or path.is_symlink():
                path.unlink()
            else:
                return
        except OSError as e:
            raise FilesystemError(parameters=[str(path)], context={"operation": "remove", "reason": str(e)}) from e

        logger.debug(f"Removed {path}")
