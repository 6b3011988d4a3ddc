"""Tests for the append-only ledgers."""

from pathlib import Path

import pytest

from verdant.domain.exceptions import PersistenceError
from verdant.infrastructure import InMemoryLedger, JsonlLedger


class TestJsonlLedger:
    def test_append_then_read_preserves_order(self, tmp_path: Path) -> None:
        ledger = JsonlLedger(tmp_path / "decisions.jsonl")

        ledger.append({"id": "DEC-1", "zone": "workshop"})
        ledger.append({"id": "DEC-2", "zone": "canopy"})

        assert [e["id"] for e in ledger.read()] == ["DEC-1", "DEC-2"]

    def test_one_record_per_line(self, tmp_path: Path) -> None:
        path = tmp_path / "activity-log.jsonl"
        ledger = JsonlLedger(path)

        ledger.append({"detail": "multi\nline"})
        ledger.append({"detail": "second"})

        assert len(path.read_text(encoding="utf-8").splitlines()) == 2

    def test_missing_file_reads_empty(self, tmp_path: Path) -> None:
        assert JsonlLedger(tmp_path / "none.jsonl").read() == []

    def test_creates_parent_directory(self, tmp_path: Path) -> None:
        ledger = JsonlLedger(tmp_path / "src" / "data" / "changes.jsonl")

        ledger.append({"id": "CHG-1"})

        assert (tmp_path / "src" / "data" / "changes.jsonl").exists()

    def test_corrupt_line_is_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "decisions.jsonl"
        path.write_text(
            '{"id": "DEC-1"}\n{"id": "DEC-2", trunc\n\n{"id": "DEC-3"}\n',
            encoding="utf-8",
        )

        entries = JsonlLedger(path).read()

        assert [e["id"] for e in entries] == ["DEC-1", "DEC-3"]

    def test_undecodable_line_is_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "decisions.jsonl"
        path.write_bytes(b'{"a": 1}\n\xff\xfe garbage\n{"a": 2}\n')

        assert JsonlLedger(path).read() == [{"a": 1}, {"a": 2}]

    def test_non_object_line_is_skipped(self, tmp_path: Path) -> None:
        path = tmp_path / "decisions.jsonl"
        path.write_text('[1, 2]\n"text"\n{"id": "DEC-1"}\n', encoding="utf-8")

        assert JsonlLedger(path).read() == [{"id": "DEC-1"}]

    def test_append_failure_raises_persistence_error(self, tmp_path: Path) -> None:
        ledger = JsonlLedger(tmp_path / "decisions.jsonl")
        ledger.path.mkdir()  # a directory where the file should be

        with pytest.raises(PersistenceError):
            ledger.append({"id": "DEC-1"})


class TestInMemoryLedger:
    def test_stored_records_are_copies(self) -> None:
        ledger = InMemoryLedger()
        entry = {"id": "DEC-1", "agents": {"ts": "approved"}}

        ledger.append(entry)
        entry["agents"]["ts"] = "vetoed"
        ledger.read()[0]["id"] = "changed"

        assert ledger.read() == [{"id": "DEC-1", "agents": {"ts": "approved"}}]

    def test_seeded_entries(self) -> None:
        ledger = InMemoryLedger([{"id": "A"}])

        ledger.append({"id": "B"})

        assert [e["id"] for e in ledger.read()] == ["A", "B"]
