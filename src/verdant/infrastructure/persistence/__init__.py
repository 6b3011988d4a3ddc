"""Persistence adapters: ledgers, pipeline document, JSON documents."""

from verdant.infrastructure.persistence.documents import (
    InMemoryDocumentStore,
    JsonDocumentStore,
)
from verdant.infrastructure.persistence.ledger import InMemoryLedger, JsonlLedger
from verdant.infrastructure.persistence.pipeline_store import (
    FilesystemPipelineStore,
    InMemoryPipelineStore,
)

__all__ = [
    "InMemoryLedger",
    "JsonlLedger",
    "InMemoryPipelineStore",
    "FilesystemPipelineStore",
    "InMemoryDocumentStore",
    "JsonDocumentStore",
]
