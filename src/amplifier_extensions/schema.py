"""Extension metadata schema - Parse pyproject.toml files.

Minimal fields only; the directory layout decides which extensions exist,
metadata just describes them.
"""

import tomllib
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict


class ExtensionMetadata(BaseModel):
    """
    Extension metadata from pyproject.toml.

    Parses standard [project] section + custom [tool.amplifier.extension] section.
    """

    model_config = ConfigDict(frozen=True)

    # From [project] section (standard Python packaging)
    name: str
    version: str
    description: str = ""

    # From [tool.amplifier.extension] section (our convention)
    author: str = ""
    display_name: str = ""

    # Optional URLs from [project.urls]
    homepage: str | None = None
    repository: str | None = None

    @classmethod
    def from_pyproject(cls, pyproject_path: Path) -> "ExtensionMetadata":
        """
        Load extension metadata from pyproject.toml.

        Args:
            pyproject_path: Path to pyproject.toml file

        Returns:
            ExtensionMetadata instance

        Raises:
            FileNotFoundError: If pyproject.toml doesn't exist
            KeyError: If required fields missing
            tomllib.TOMLDecodeError: If invalid TOML
        """
        if not pyproject_path.exists():
            raise FileNotFoundError(f"pyproject.toml not found: {pyproject_path}")

        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)

        project = data.get("project", {})
        if not project:
            raise KeyError(f"[project] section missing in {pyproject_path}")

        extension = data.get("tool", {}).get("amplifier", {}).get("extension", {})
        urls = project.get("urls", {})

        return cls(
            name=project["name"],
            version=project["version"],
            description=project.get("description", ""),
            author=extension.get("author", ""),
            display_name=extension.get("display-name", ""),
            homepage=urls.get("homepage"),
            repository=urls.get("repository"),
        )
