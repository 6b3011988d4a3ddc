"""Pipeline document stores."""

from pathlib import Path

from verdant.domain.interfaces import PipelineStoreInterface
from verdant.domain.models import PipelineDocument
from verdant.infrastructure.persistence.documents import read_json, write_json_atomic


class InMemoryPipelineStore(PipelineStoreInterface):
    """In-memory implementation for testing."""

    def __init__(self, document: PipelineDocument | None = None) -> None:
        self._document = document or PipelineDocument()
        self.save_count = 0

    def load(self) -> PipelineDocument:
        return self._document

    def save(self, document: PipelineDocument) -> None:
        self._document = document
        self.save_count += 1


class FilesystemPipelineStore(PipelineStoreInterface):
    """
    pipeline-state.json: per-zone arrays plus the next-id counter.

    Read and rewritten wholesale on every mutation. There is no
    cross-process locking; a single writer process is assumed.
    """

    def __init__(self, path: Path) -> None:
        self.path = path

    def load(self) -> PipelineDocument:
        data = read_json(self.path)
        if not isinstance(data, dict):
            return PipelineDocument()
        return PipelineDocument.from_dict(data)

    def save(self, document: PipelineDocument) -> None:
        write_json_atomic(self.path, document.to_dict())
