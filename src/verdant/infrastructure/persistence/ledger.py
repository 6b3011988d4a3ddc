"""Append-only ledger implementations."""

import json
import logging
from pathlib import Path
from typing import Any

from verdant.domain.exceptions import PersistenceError
from verdant.domain.interfaces import LedgerInterface

logger = logging.getLogger(__name__)


class InMemoryLedger(LedgerInterface):
    """In-memory implementation for testing."""

    def __init__(self, entries: list[dict[str, Any]] | None = None) -> None:
        self._entries: list[dict[str, Any]] = list(entries or [])

    def append(self, entry: dict[str, Any]) -> None:
        # round-trip through JSON so callers can't mutate stored records
        self._entries.append(json.loads(json.dumps(entry)))

    def read(self) -> list[dict[str, Any]]:
        return [dict(e) for e in self._entries]


class JsonlLedger(LedgerInterface):
    """
    Filesystem implementation storing one JSON object per line.

    Each record is serialized fully before the file is opened, then written
    with a single call, so an aborted caller never leaves a partial line.
    """

    def __init__(self, path: Path) -> None:
        self.path = path
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def append(self, entry: dict[str, Any]) -> None:
        line = json.dumps(entry) + "\n"
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(line)
        except OSError as e:
            logger.error("Failed to append to %s: %s", self.path, e)
            raise PersistenceError(str(self.path), e) from e

    def read(self) -> list[dict[str, Any]]:
        if not self.path.exists():
            return []
        entries: list[dict[str, Any]] = []
        with open(self.path, "rb") as f:
            for lineno, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    entry = json.loads(raw.decode("utf-8"))
                except (UnicodeDecodeError, json.JSONDecodeError) as e:
                    logger.warning(
                        "Skipping corrupt line %d in %s: %s", lineno, self.path, e
                    )
                    continue
                if not isinstance(entry, dict):
                    logger.warning(
                        "Skipping non-object line %d in %s", lineno, self.path
                    )
                    continue
                entries.append(entry)
        return entries
