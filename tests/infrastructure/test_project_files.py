"""Tests for project file access adapters."""

from pathlib import Path

import pytest

from verdant.domain.exceptions import PersistenceError
from verdant.infrastructure import FilesystemProjectFiles, InMemoryProjectFiles


class TestFilesystemProjectFiles:
    def test_write_creates_directories(self, tmp_path: Path) -> None:
        files = FilesystemProjectFiles(tmp_path)

        files.write_text("src/components/toggle/toggle.css", ".t-toggle {}")

        assert (tmp_path / "src/components/toggle/toggle.css").read_text() == ".t-toggle {}"
        assert files.exists("src/components/toggle/toggle.css")

    def test_missing_file_reads_none(self, tmp_path: Path) -> None:
        files = FilesystemProjectFiles(tmp_path)

        assert files.read_text("src/components/toggle/toggle.css") is None
        assert not files.exists("src/components/toggle/toggle.css")

    def test_directory_reads_none(self, tmp_path: Path) -> None:
        (tmp_path / "src").mkdir()

        assert FilesystemProjectFiles(tmp_path).read_text("src") is None

    def test_write_failure_raises_persistence_error(self, tmp_path: Path) -> None:
        (tmp_path / "src").write_text("not a directory")

        with pytest.raises(PersistenceError):
            FilesystemProjectFiles(tmp_path).write_text("src/tokens/a.tokens.json", "{}")


class TestInMemoryProjectFiles:
    def test_read_write(self) -> None:
        files = InMemoryProjectFiles({"src/a.css": "a"})

        files.write_text("src/b.css", "b")

        assert files.read_text("src/a.css") == "a"
        assert files.read_text("src/b.css") == "b"
        assert files.read_text("src/c.css") is None
        assert files.exists("src/b.css")
