"""Tests for ScriptedCompletionService - predefined responses for testing."""

import pytest

from verdant.domain.chat import ChatMessage, CompletionResponse, ToolCall
from verdant.domain.exceptions import CompletionUnavailable
from verdant.infrastructure import ScriptedCompletionService

HELLO = [ChatMessage.user("Hello")]


class TestComplete:
    def test_returns_responses_in_sequence(self) -> None:
        """complete() walks the script in order."""
        service = ScriptedCompletionService(["first", "second"])

        assert service.complete("s", HELLO).text == "first"
        assert service.complete("s", HELLO).text == "second"

    def test_passes_completion_responses_through(self) -> None:
        """Scripted CompletionResponse objects are returned unchanged."""
        response = CompletionResponse(tool_calls=(ToolCall("c1", "get_pipeline"),))
        service = ScriptedCompletionService([response])

        assert service.complete("s", HELLO) is response

    def test_raises_scripted_exception(self) -> None:
        """An Exception in the script is raised, not returned."""
        service = ScriptedCompletionService([CompletionUnavailable("offline")])

        with pytest.raises(CompletionUnavailable, match="offline"):
            service.complete("s", HELLO)

    def test_exhausted_raises_runtime_error(self) -> None:
        service = ScriptedCompletionService(["only"])
        service.complete("s", HELLO)

        with pytest.raises(RuntimeError, match="exhausted"):
            service.complete("s", HELLO)

    def test_records_calls(self) -> None:
        """Each call is recorded with its arguments."""
        service = ScriptedCompletionService(["ok"])

        service.complete("system prompt", HELLO, response_schema={"type": "object"})

        assert service.call_count == 1
        call = service.calls[0]
        assert (call.kind, call.system) == ("complete", "system prompt")
        assert call.messages == tuple(HELLO)
        assert call.response_schema == {"type": "object"}


class TestStream:
    def test_yields_small_chunks(self) -> None:
        service = ScriptedCompletionService(["Hello world"])

        chunks = list(service.stream("s", HELLO))

        assert chunks == ["Hell", "o wo", "rld"]

    def test_separate_stream_script(self) -> None:
        """stream() uses its own script when one is given."""
        service = ScriptedCompletionService(["complete"], stream_responses=["streamed"])

        assert "".join(service.stream("s", HELLO)) == "streamed"
        assert service.complete("s", HELLO).text == "complete"

    def test_reset(self) -> None:
        service = ScriptedCompletionService(["again"])
        service.complete("s", HELLO)

        service.reset()

        assert service.call_count == 0
        assert service.complete("s", HELLO).text == "again"
