"""
Conversation and tool-loop types.

Provider-neutral: the completion adapters translate these to and from
their wire formats.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class ToolSpec:
    """Name + description + JSON input schema of one invocable tool."""

    name: str
    description: str
    input_schema: Mapping[str, Any]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": dict(self.input_schema),
        }


@dataclass(frozen=True)
class ToolCall:
    """A tool invocation requested by the model."""

    id: str
    name: str
    arguments: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ChatMessage:
    """
    One entry of a conversation history.

    role is user, assistant or tool. Assistant messages may carry tool
    calls; tool messages carry the tagged result for one call id.
    """

    role: str
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    tool_call_id: str | None = None

    @classmethod
    def user(cls, content: str) -> "ChatMessage":
        return cls(role="user", content=content)

    @classmethod
    def assistant(
        cls, content: str, tool_calls: tuple[ToolCall, ...] = ()
    ) -> "ChatMessage":
        return cls(role="assistant", content=content, tool_calls=tool_calls)

    @classmethod
    def tool_result(cls, tool_call_id: str, content: str) -> "ChatMessage":
        return cls(role="tool", content=content, tool_call_id=tool_call_id)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            data["toolCalls"] = [
                {"id": c.id, "name": c.name, "arguments": dict(c.arguments)}
                for c in self.tool_calls
            ]
        if self.tool_call_id is not None:
            data["toolCallId"] = self.tool_call_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChatMessage":
        content = data.get("content", "")
        return cls(
            role=data["role"],
            content=content if isinstance(content, str) else str(content),
            tool_calls=tuple(
                ToolCall(id=c["id"], name=c["name"], arguments=c.get("arguments") or {})
                for c in data.get("toolCalls") or ()
            ),
            tool_call_id=data.get("toolCallId"),
        )


@dataclass(frozen=True)
class CompletionResponse:
    """Blocking completion result: text, optionally with tool calls."""

    text: str = ""
    tool_calls: tuple[ToolCall, ...] = ()

    @property
    def wants_tools(self) -> bool:
        return bool(self.tool_calls)


class ChatEventType(Enum):
    TOKEN = "token"
    TOOL_START = "tool_start"
    TOOL_RESULT = "tool_result"
    DONE = "done"
    ERROR = "error"


@dataclass(frozen=True)
class ChatEvent:
    """Typed event streamed to the conversational client."""

    type: ChatEventType
    data: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type.value, **self.data}

    @classmethod
    def token(cls, text: str) -> "ChatEvent":
        return cls(ChatEventType.TOKEN, {"token": text})

    @classmethod
    def tool_start(cls, call: ToolCall) -> "ChatEvent":
        return cls(
            ChatEventType.TOOL_START,
            {
                "toolName": call.name,
                "toolInput": dict(call.arguments),
                "toolUseId": call.id,
            },
        )

    @classmethod
    def tool_result(
        cls,
        call: ToolCall,
        success: bool,
        preview: str,
        full_result: Any,
        error: str | None = None,
    ) -> "ChatEvent":
        data: dict[str, Any] = {
            "toolName": call.name,
            "toolUseId": call.id,
            "success": success,
            "preview": preview,
            "fullResult": full_result,
        }
        if error is not None:
            data["error"] = error
        return cls(ChatEventType.TOOL_RESULT, data)

    @classmethod
    def done(cls, full_text: str, session_id: str | None) -> "ChatEvent":
        return cls(ChatEventType.DONE, {"fullText": full_text, "sessionId": session_id})

    @classmethod
    def error(cls, message: str) -> "ChatEvent":
        return cls(ChatEventType.ERROR, {"message": message})


class LoopState(Enum):
    """States of the bounded tool-invocation loop."""

    AWAITING_COMPLETION = "awaiting_completion"
    EXECUTING_TOOLS = "executing_tools"
    DONE = "done"
    ABORTED = "aborted"
