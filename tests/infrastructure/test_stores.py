"""Tests for the pipeline and JSON document stores."""

import json
from collections.abc import Callable
from pathlib import Path

from verdant.domain.models import PipelineDocument, Zone
from verdant.infrastructure import (
    FilesystemPipelineStore,
    InMemoryDocumentStore,
    InMemoryPipelineStore,
    JsonDocumentStore,
)
from verdant.infrastructure.persistence.documents import read_json, write_json_atomic


class TestWriteJsonAtomic:
    def test_writes_and_leaves_no_temp_file(self, tmp_path: Path) -> None:
        path = tmp_path / "nested" / "wiki.json"

        write_json_atomic(path, {"bem": {"term": "BEM"}})

        assert json.loads(path.read_text(encoding="utf-8")) == {"bem": {"term": "BEM"}}
        assert not (tmp_path / "nested" / "wiki.json.tmp").exists()

    def test_replaces_existing_content(self, tmp_path: Path) -> None:
        path = tmp_path / "wiki.json"
        write_json_atomic(path, {"a": 1})

        write_json_atomic(path, {"b": 2})

        assert read_json(path) == {"b": 2}


class TestReadJson:
    def test_missing_file(self, tmp_path: Path) -> None:
        assert read_json(tmp_path / "missing.json") is None

    def test_corrupt_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        assert read_json(path) is None


class TestFilesystemPipelineStore:
    def test_missing_file_is_empty_document(self, tmp_path: Path) -> None:
        store = FilesystemPipelineStore(tmp_path / "pipeline-state.json")

        assert store.load() == PipelineDocument()

    def test_corrupt_file_is_empty_document(self, tmp_path: Path) -> None:
        path = tmp_path / "pipeline-state.json"
        path.write_text("[]", encoding="utf-8")

        assert FilesystemPipelineStore(path).load() == PipelineDocument()

    def test_save_then_load(
        self,
        tmp_path: Path,
        toggle_in: Callable[[Zone], PipelineDocument],
    ) -> None:
        store = FilesystemPipelineStore(tmp_path / "pipeline-state.json")
        document = toggle_in(Zone.WORKSHOP)

        store.save(document)

        assert store.load() == document
        raw = json.loads(store.path.read_text(encoding="utf-8"))
        assert raw["nextId"] == 2
        assert raw["workshop"][0]["id"] == "COMP-001"


class TestInMemoryPipelineStore:
    def test_counts_saves(self, toggle_in: Callable[[Zone], PipelineDocument]) -> None:
        store = InMemoryPipelineStore()

        store.save(toggle_in(Zone.NURSERY))

        assert store.save_count == 1
        assert store.load().nursery[0].name == "Toggle"


class TestDocumentStores:
    def test_json_store_round_trip(self, tmp_path: Path) -> None:
        store = JsonDocumentStore(tmp_path / "gardener-config.json")
        assert store.load() is None

        store.save({"tone": "warm"})

        assert store.load() == {"tone": "warm"}

    def test_json_store_ignores_non_object(self, tmp_path: Path) -> None:
        path = tmp_path / "wiki.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        assert JsonDocumentStore(path).load() is None

    def test_in_memory_store_returns_copies(self) -> None:
        store = InMemoryDocumentStore({"agents": {"ts": "precise"}})

        loaded = store.load()
        assert loaded is not None
        loaded["agents"]["ts"] = "changed"

        assert store.load() == {"agents": {"ts": "precise"}}
