"""
Domain interfaces (Ports) for component governance.

Abstract base classes the adapters in verdant.infrastructure implement.
They have no external dependencies.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from verdant.domain.chat import ChatMessage, CompletionResponse, ToolSpec
    from verdant.domain.models import (
        CheckResult,
        ComponentArtifacts,
        PathDecision,
        PipelineDocument,
    )


class CompletionServiceInterface(ABC):
    """
    Port for the external natural-language completion service.

    The service is unreliable: both calls may raise CompletionUnavailable.
    Implementations never retry on their own.
    """

    @abstractmethod
    def complete(
        self,
        system: str,
        messages: Sequence["ChatMessage"],
        tools: Sequence["ToolSpec"] = (),
        response_schema: dict[str, Any] | None = None,
        max_tokens: int | None = None,
    ) -> "CompletionResponse":
        """
        Blocking completion call.

        Args:
            system: System prompt
            messages: Conversation so far
            tools: Tool schemas the model may invoke (empty forbids tools)
            response_schema: Optional JSON Schema the reply must follow
            max_tokens: Output budget override

        Returns:
            CompletionResponse with final text and/or tool calls

        Raises:
            CompletionUnavailable: transport or authorization failure
        """
        pass

    @abstractmethod
    def stream(
        self,
        system: str,
        messages: Sequence["ChatMessage"],
        max_tokens: int | None = None,
    ) -> Iterator[str]:
        """
        Token-streaming completion call without tools.

        Yields:
            Text fragments in arrival order

        Raises:
            CompletionUnavailable: transport or authorization failure
        """
        pass


class LedgerInterface(ABC):
    """
    Port for an append-only, line-oriented record sequence.

    Records are JSON objects. Appends are whole-record and never rewrite
    earlier entries; readers skip entries that cannot be decoded.
    """

    @abstractmethod
    def append(self, entry: dict[str, Any]) -> None:
        """
        Append one record.

        Raises:
            PersistenceError: If the record could not be written
        """
        pass

    @abstractmethod
    def read(self) -> list[dict[str, Any]]:
        """Return all decodable records in append order."""
        pass


class PipelineStoreInterface(ABC):
    """Port for the pipeline document, read and rewritten wholesale."""

    @abstractmethod
    def load(self) -> "PipelineDocument":
        """Load the document; a missing or corrupt one reads as empty."""
        pass

    @abstractmethod
    def save(self, document: "PipelineDocument") -> None:
        """
        Replace the stored document.

        Raises:
            PersistenceError: If the document could not be written
        """
        pass


class DocumentStoreInterface(ABC):
    """Port for a small JSON document (wiki, tone configuration)."""

    @abstractmethod
    def load(self) -> dict[str, Any] | None:
        """Return the document, or None when it is missing or unreadable."""
        pass

    @abstractmethod
    def save(self, document: dict[str, Any]) -> None:
        """
        Raises:
            PersistenceError: If the document could not be written
        """
        pass


class ProjectFilesInterface(ABC):
    """Port for reading and writing project files by relative path."""

    @abstractmethod
    def read_text(self, rel_path: str) -> str | None:
        """Return file contents, or None if the file does not exist."""
        pass

    @abstractmethod
    def write_text(self, rel_path: str, content: str) -> None:
        """
        Create or overwrite a file, creating parent directories.

        Raises:
            PersistenceError: If the file could not be written
        """
        pass

    @abstractmethod
    def exists(self, rel_path: str) -> bool:
        pass


class PathValidatorInterface(ABC):
    """Allow/deny collaborator consulted before any file tool touches storage."""

    @abstractmethod
    def check_read(self, rel_path: str) -> "PathDecision":
        pass

    @abstractmethod
    def check_write(self, rel_path: str, mode: str = "full") -> "PathDecision":
        """
        Args:
            rel_path: Path relative to the project root
            mode: 'full' (create/overwrite) or 'patch' (find-and-replace)
        """
        pass


class GuardInterface(ABC):
    """
    Port for a fast, local, deterministic pre-check.

    Guards never call the completion service; their findings are folded
    into reviewer prompts and the decision record.
    """

    @abstractmethod
    def validate(self, artifacts: "ComponentArtifacts") -> "CheckResult":
        """
        Inspect a component's loaded artifacts.

        Returns:
            CheckResult with the issues found and the checks passed
        """
        pass
