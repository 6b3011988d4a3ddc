"""Filesystem access to project files by root-relative path."""

import logging
from pathlib import Path

from verdant.domain.exceptions import PersistenceError
from verdant.domain.interfaces import ProjectFilesInterface

logger = logging.getLogger(__name__)


class FilesystemProjectFiles(ProjectFilesInterface):
    """
    Reads and writes files below a project root.

    Path policy is not enforced here; callers consult a
    PathValidatorInterface first.
    """

    def __init__(self, root: Path) -> None:
        self.root = root

    def _resolve(self, rel_path: str) -> Path:
        return self.root / rel_path

    def read_text(self, rel_path: str) -> str | None:
        path = self._resolve(rel_path)
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")

    def write_text(self, rel_path: str, content: str) -> None:
        path = self._resolve(rel_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content, encoding="utf-8")
        except OSError as e:
            logger.error("Failed to write %s: %s", path, e)
            raise PersistenceError(rel_path, e) from e

    def exists(self, rel_path: str) -> bool:
        return self._resolve(rel_path).exists()


class InMemoryProjectFiles(ProjectFilesInterface):
    """In-memory implementation for testing."""

    def __init__(self, files: dict[str, str] | None = None) -> None:
        self.files: dict[str, str] = dict(files or {})

    def read_text(self, rel_path: str) -> str | None:
        return self.files.get(rel_path)

    def write_text(self, rel_path: str, content: str) -> None:
        self.files[rel_path] = content

    def exists(self, rel_path: str) -> bool:
        return rel_path in self.files
