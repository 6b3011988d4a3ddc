"""
Infrastructure layer: adapters for the domain ports.

Persistence (JSONL ledgers, JSON documents), completion services,
project file access and path safety.
"""

from verdant.infrastructure.file_safety import ProjectPathValidator
from verdant.infrastructure.registry import CompletionServiceRegistry
from verdant.infrastructure.llm import (
    OpenAICompletionService,
    OpenAICompletionServiceConfig,
    ScriptedCompletionService,
)
from verdant.infrastructure.persistence import (
    FilesystemPipelineStore,
    InMemoryDocumentStore,
    InMemoryLedger,
    InMemoryPipelineStore,
    JsonDocumentStore,
    JsonlLedger,
)
from verdant.infrastructure.project_files import (
    FilesystemProjectFiles,
    InMemoryProjectFiles,
)

__all__ = [
    "ProjectPathValidator",
    "CompletionServiceRegistry",
    "OpenAICompletionService",
    "OpenAICompletionServiceConfig",
    "ScriptedCompletionService",
    "FilesystemPipelineStore",
    "InMemoryDocumentStore",
    "InMemoryLedger",
    "InMemoryPipelineStore",
    "JsonDocumentStore",
    "JsonlLedger",
    "FilesystemProjectFiles",
    "InMemoryProjectFiles",
]
