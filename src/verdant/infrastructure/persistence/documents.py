"""JSON document stores (wiki, tone configuration)."""

import json
import logging
from pathlib import Path
from typing import Any

from verdant.domain.exceptions import PersistenceError
from verdant.domain.interfaces import DocumentStoreInterface

logger = logging.getLogger(__name__)


def write_json_atomic(path: Path, data: Any) -> None:
    """Write JSON via temp file + rename so readers never see a partial file.

    Raises:
        PersistenceError: If the write or rename fails
    """
    temp_path = path.with_suffix(path.suffix + ".tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(temp_path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        temp_path.replace(path)  # atomic on POSIX
    except OSError as e:
        logger.error("Failed to write %s: %s", path, e)
        raise PersistenceError(str(path), e) from e


def read_json(path: Path) -> Any | None:
    """Decoded JSON content, or None when missing or corrupt."""
    if not path.exists():
        return None
    try:
        with open(path, encoding="utf-8") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        return None


class InMemoryDocumentStore(DocumentStoreInterface):
    """In-memory implementation for testing."""

    def __init__(self, document: dict[str, Any] | None = None) -> None:
        self._document = json.loads(json.dumps(document)) if document is not None else None

    def load(self) -> dict[str, Any] | None:
        if self._document is None:
            return None
        result: dict[str, Any] = json.loads(json.dumps(self._document))
        return result

    def save(self, document: dict[str, Any]) -> None:
        self._document = json.loads(json.dumps(document))


class JsonDocumentStore(DocumentStoreInterface):
    """Single JSON object on disk, rewritten atomically."""

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> dict[str, Any] | None:
        data = read_json(self.path)
        return data if isinstance(data, dict) else None

    def save(self, document: dict[str, Any]) -> None:
        write_json_atomic(self.path, document)
