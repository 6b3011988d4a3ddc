"""
Scripted completion service for testing without a live model.

Returns predefined responses in sequence.
"""

from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any

from verdant.domain.chat import ChatMessage, CompletionResponse, ToolSpec
from verdant.domain.interfaces import CompletionServiceInterface

Scripted = CompletionResponse | str | Exception


@dataclass(frozen=True)
class RecordedCall:
    """Arguments of one call made against the scripted service."""

    kind: str  # complete | stream
    system: str
    messages: tuple[ChatMessage, ...]
    tools: tuple[ToolSpec, ...] = ()
    response_schema: dict[str, Any] | None = None


class ScriptedCompletionService(CompletionServiceInterface):
    """Returns predefined responses for testing."""

    def __init__(
        self,
        responses: Sequence[Scripted],
        stream_responses: Sequence[Scripted] | None = None,
    ):
        """
        Args:
            responses: Replies for complete(), in order. A str is wrapped
                as final text; an Exception instance is raised.
            stream_responses: Replies for stream(); defaults to sharing
                the complete() script.
        """
        self._responses = list(responses)
        self._stream_responses = (
            list(stream_responses) if stream_responses is not None else None
        )
        self._call_count = 0
        self._stream_count = 0
        self.calls: list[RecordedCall] = []

    def _next(self, kind: str) -> Scripted:
        if kind == "stream" and self._stream_responses is not None:
            if self._stream_count >= len(self._stream_responses):
                raise RuntimeError("ScriptedCompletionService exhausted stream responses")
            item = self._stream_responses[self._stream_count]
            self._stream_count += 1
            return item
        if self._call_count >= len(self._responses):
            raise RuntimeError("ScriptedCompletionService exhausted responses")
        item = self._responses[self._call_count]
        self._call_count += 1
        return item

    def complete(
        self,
        system: str,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolSpec] = (),
        response_schema: dict[str, Any] | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResponse:
        self.calls.append(
            RecordedCall(
                "complete", system, tuple(messages), tuple(tools), response_schema
            )
        )
        item = self._next("complete")
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str):
            return CompletionResponse(text=item)
        return item

    def stream(
        self,
        system: str,
        messages: Sequence[ChatMessage],
        max_tokens: int | None = None,
    ) -> Iterator[str]:
        self.calls.append(RecordedCall("stream", system, tuple(messages)))
        item = self._next("stream")
        if isinstance(item, Exception):
            raise item
        text = item if isinstance(item, str) else item.text
        # small chunks, like a real stream
        for i in range(0, len(text), 4):
            yield text[i : i + 4]

    @property
    def call_count(self) -> int:
        """Number of calls made so far."""
        return len(self.calls)

    def reset(self) -> None:
        """Reset the counters to reuse responses."""
        self._call_count = 0
        self._stream_count = 0
        self.calls.clear()
