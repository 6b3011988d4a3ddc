"""Tests for OpenAICompletionService request/response translation."""

import json
from types import SimpleNamespace
from typing import Any

import pytest

from verdant.domain.chat import ChatMessage, ToolCall, ToolSpec
from verdant.domain.exceptions import CompletionUnavailable
from verdant.infrastructure.llm.openai_service import (
    OpenAICompletionService,
    OpenAICompletionServiceConfig,
)

openai = pytest.importorskip("openai")


class FakeCompletions:
    """Stands in for client.chat.completions; records every request."""

    def __init__(self, result: Any = None, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.requests: list[dict[str, Any]] = []

    def create(self, **request: Any) -> Any:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        return self.result


def _client(completions: FakeCompletions) -> SimpleNamespace:
    return SimpleNamespace(chat=SimpleNamespace(completions=completions))


def _response(content: str | None, tool_calls: list[Any] | None = None) -> SimpleNamespace:
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def _chunk(text: str | None) -> SimpleNamespace:
    return SimpleNamespace(choices=[SimpleNamespace(delta=SimpleNamespace(content=text))])


@pytest.fixture
def service() -> OpenAICompletionService:
    """Service with a dummy key; the client is replaced per test."""
    return OpenAICompletionService(OpenAICompletionServiceConfig(api_key="test"))


class TestConfig:
    def test_kwargs_build_config(self) -> None:
        """Keyword arguments are routed into the typed config."""
        service = OpenAICompletionService(model="gpt-4o", max_tokens=512, api_key="test")

        assert service.model == "gpt-4o"
        assert service._max_tokens == 512

    def test_unknown_field_rejected(self) -> None:
        """Unknown config fields fail at construction time."""
        with pytest.raises(TypeError):
            OpenAICompletionService(temperature=0.2)

    def test_client_is_created_lazily(self, service: OpenAICompletionService) -> None:
        """No client exists until the first request."""
        assert service._client is None


class TestComplete:
    def test_returns_text(self, service: OpenAICompletionService) -> None:
        completions = FakeCompletions(_response("Hello"))
        service._client = _client(completions)

        response = service.complete("system", [ChatMessage.user("Hi")])

        assert response.text == "Hello"
        assert response.tool_calls == ()
        request = completions.requests[0]
        assert request["messages"][0] == {"role": "system", "content": "system"}
        assert request["messages"][1] == {"role": "user", "content": "Hi"}
        assert request["max_tokens"] == 2048

    def test_tools_are_sent_as_functions(self, service: OpenAICompletionService) -> None:
        completions = FakeCompletions(_response(""))
        service._client = _client(completions)
        spec = ToolSpec("get_pipeline", "Read the pipeline", {"type": "object"})

        service.complete("system", [ChatMessage.user("Hi")], tools=[spec])

        assert completions.requests[0]["tools"] == [
            {
                "type": "function",
                "function": {
                    "name": "get_pipeline",
                    "description": "Read the pipeline",
                    "parameters": {"type": "object"},
                },
            }
        ]

    def test_response_schema_becomes_strict_json_schema(
        self, service: OpenAICompletionService
    ) -> None:
        completions = FakeCompletions(_response("{}"))
        service._client = _client(completions)
        schema = {"type": "object", "properties": {}}

        service.complete("system", [ChatMessage.user("Hi")], response_schema=schema)

        response_format = completions.requests[0]["response_format"]
        assert response_format["type"] == "json_schema"
        assert response_format["json_schema"]["schema"] == schema
        assert response_format["json_schema"]["strict"] is True

    def test_decodes_tool_calls(self, service: OpenAICompletionService) -> None:
        call = SimpleNamespace(
            id="call_1",
            function=SimpleNamespace(name="read_file", arguments='{"path": "src/a.css"}'),
        )
        broken = SimpleNamespace(
            id="call_2", function=SimpleNamespace(name="read_file", arguments="{oops")
        )
        service._client = _client(FakeCompletions(_response(None, [call, broken])))

        response = service.complete("system", [ChatMessage.user("Hi")])

        assert response.text == ""
        assert response.tool_calls == (
            ToolCall("call_1", "read_file", {"path": "src/a.css"}),
            ToolCall("call_2", "read_file", {}),
        )

    def test_history_with_tool_results(self, service: OpenAICompletionService) -> None:
        completions = FakeCompletions(_response("done"))
        service._client = _client(completions)
        history = [
            ChatMessage.user("Read it"),
            ChatMessage.assistant("", (ToolCall("call_1", "read_file", {"path": "x"}),)),
            ChatMessage.tool_result("call_1", '{"content": "x"}'),
        ]

        service.complete("system", history)

        wire = completions.requests[0]["messages"]
        assert wire[2]["tool_calls"][0]["function"]["arguments"] == json.dumps({"path": "x"})
        assert wire[3] == {"role": "tool", "tool_call_id": "call_1", "content": '{"content": "x"}'}

    def test_openai_error_becomes_unavailable(self, service: OpenAICompletionService) -> None:
        service._client = _client(FakeCompletions(error=openai.OpenAIError("connection refused")))

        with pytest.raises(CompletionUnavailable, match="connection refused"):
            service.complete("system", [ChatMessage.user("Hi")])

    def test_no_choices_is_unavailable(self, service: OpenAICompletionService) -> None:
        service._client = _client(FakeCompletions(SimpleNamespace(choices=[])))

        with pytest.raises(CompletionUnavailable):
            service.complete("system", [ChatMessage.user("Hi")])


class TestStream:
    def test_yields_non_empty_deltas(self, service: OpenAICompletionService) -> None:
        chunks = [_chunk("Hel"), _chunk(None), SimpleNamespace(choices=[]), _chunk("lo")]
        completions = FakeCompletions(iter(chunks))
        service._client = _client(completions)

        text = "".join(service.stream("system", [ChatMessage.user("Hi")], max_tokens=64))

        assert text == "Hello"
        assert completions.requests[0]["stream"] is True
        assert completions.requests[0]["max_tokens"] == 64

    def test_openai_error_becomes_unavailable(self, service: OpenAICompletionService) -> None:
        service._client = _client(FakeCompletions(error=openai.OpenAIError("timeout")))

        with pytest.raises(CompletionUnavailable):
            list(service.stream("system", [ChatMessage.user("Hi")]))
