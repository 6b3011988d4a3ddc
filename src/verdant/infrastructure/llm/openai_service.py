"""
OpenAI-compatible completion service.

Works against the OpenAI API or any server exposing the same chat
completions endpoint (set base_url).
"""

import json
import logging
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Any, cast

from verdant.domain.chat import ChatMessage, CompletionResponse, ToolCall, ToolSpec
from verdant.domain.exceptions import CompletionUnavailable
from verdant.domain.interfaces import CompletionServiceInterface

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "gpt-4o-mini"


@dataclass
class OpenAICompletionServiceConfig:
    """Configuration for OpenAICompletionService.

    This typed config ensures unknown fields are rejected at construction time.
    api_key and base_url fall back to OPENAI_API_KEY / OPENAI_BASE_URL.
    """

    model: str = DEFAULT_MODEL
    base_url: str | None = None
    api_key: str | None = None
    timeout: float = 120.0
    max_tokens: int = 2048


def _message_to_wire(message: ChatMessage) -> dict[str, Any]:
    if message.role == "tool":
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id,
            "content": message.content,
        }
    wire: dict[str, Any] = {"role": message.role, "content": message.content}
    if message.tool_calls:
        wire["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {
                    "name": call.name,
                    "arguments": json.dumps(dict(call.arguments)),
                },
            }
            for call in message.tool_calls
        ]
    return wire


def _tool_to_wire(tool: ToolSpec) -> dict[str, Any]:
    return {
        "type": "function",
        "function": {
            "name": tool.name,
            "description": tool.description,
            "parameters": dict(tool.input_schema),
        },
    }


def _decode_arguments(raw: str | None) -> dict[str, Any]:
    if not raw:
        return {}
    try:
        decoded = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Tool call arguments are not valid JSON: %.200s", raw)
        return {}
    return decoded if isinstance(decoded, dict) else {}


class OpenAICompletionService(CompletionServiceInterface):
    """Completion service backed by the openai client."""

    config_class = OpenAICompletionServiceConfig

    def __init__(
        self, config: OpenAICompletionServiceConfig | None = None, **kwargs: Any
    ):
        """
        Args:
            config: Typed configuration object (preferred)
            **kwargs: Fields of OpenAICompletionServiceConfig
        """
        if config is None:
            config = OpenAICompletionServiceConfig(**kwargs)

        try:
            from openai import OpenAI
        except ImportError as err:
            raise ImportError("openai library required: pip install openai") from err

        self._openai_class = OpenAI
        self._config = config
        self._model = config.model
        self._max_tokens = config.max_tokens
        self._client: Any = None

    @property
    def client(self) -> Any:
        """The openai client, created on first use.

        Raises:
            openai.OpenAIError: If the client cannot be configured (no API key)
        """
        if self._client is None:
            self._client = self._openai_class(
                base_url=self._config.base_url,
                api_key=self._config.api_key,
                timeout=self._config.timeout,
                max_retries=0,
            )
        return self._client

    @property
    def model(self) -> str:
        return self._model

    def _messages(
        self, system: str, messages: Sequence[ChatMessage]
    ) -> list[dict[str, Any]]:
        return [{"role": "system", "content": system}] + [
            _message_to_wire(m) for m in messages
        ]

    def complete(
        self,
        system: str,
        messages: Sequence[ChatMessage],
        tools: Sequence[ToolSpec] = (),
        response_schema: dict[str, Any] | None = None,
        max_tokens: int | None = None,
    ) -> CompletionResponse:
        import openai

        request: dict[str, Any] = {
            "model": self._model,
            "messages": self._messages(system, messages),
            "max_tokens": max_tokens or self._max_tokens,
        }
        if tools:
            request["tools"] = [_tool_to_wire(t) for t in tools]
        if response_schema is not None:
            request["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": "review_verdict",
                    "schema": response_schema,
                    "strict": True,
                },
            }

        try:
            response = self.client.chat.completions.create(**cast(Any, request))
        except openai.OpenAIError as e:
            logger.error("Completion call failed: %s", e)
            raise CompletionUnavailable(str(e)) from e

        if not response.choices:
            raise CompletionUnavailable("Completion returned no choices")
        message = response.choices[0].message
        tool_calls = tuple(
            ToolCall(
                id=call.id,
                name=call.function.name,
                arguments=_decode_arguments(call.function.arguments),
            )
            for call in message.tool_calls or ()
            if getattr(call, "function", None) is not None
        )
        return CompletionResponse(text=message.content or "", tool_calls=tool_calls)

    def stream(
        self,
        system: str,
        messages: Sequence[ChatMessage],
        max_tokens: int | None = None,
    ) -> Iterator[str]:
        import openai

        try:
            chunks = self.client.chat.completions.create(
                model=self._model,
                messages=cast(Any, self._messages(system, messages)),
                max_tokens=max_tokens or self._max_tokens,
                stream=True,
            )
            for chunk in chunks:
                if not chunk.choices:
                    continue
                text = chunk.choices[0].delta.content
                if text:
                    yield text
        except openai.OpenAIError as e:
            logger.error("Streaming completion failed: %s", e)
            raise CompletionUnavailable(str(e)) from e
