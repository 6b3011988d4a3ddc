"""
Bounded tool-invocation loop.

An explicit state machine:

    AWAITING_COMPLETION --(final text)--> DONE
    AWAITING_COMPLETION --(tool calls)--> EXECUTING_TOOLS --> AWAITING_COMPLETION
    AWAITING_COMPLETION --(turn bound reached)--> forced tool-free call --> DONE
    any transport failure --> ABORTED

run() is a generator of ChatEvents; closing it stops the loop before the
next completion call.
"""

import logging
from collections.abc import Iterator, Sequence

from verdant.application.tool_registry import ToolExecutor, summarize_tool_result
from verdant.domain.chat import ChatEvent, ChatMessage, CompletionResponse, LoopState
from verdant.domain.interfaces import CompletionServiceInterface

logger = logging.getLogger(__name__)

DEFAULT_MAX_TURNS = 5
TOKEN_CHUNK = 8


class ChatLoop:
    """One conversation turn driven to completion, with tool use."""

    def __init__(
        self,
        completion: CompletionServiceInterface,
        executor: ToolExecutor,
        system_prompt: str,
        max_turns: int = DEFAULT_MAX_TURNS,
        max_tokens: int | None = None,
    ):
        """
        Args:
            completion: External completion service
            executor: Runs tool calls against the real system
            system_prompt: Chat system prompt for this conversation
            max_turns: Completion calls allowed with tools before the
                forced tool-free call
            max_tokens: Output budget per completion call
        """
        if max_turns < 1:
            raise ValueError("max_turns must be at least 1")
        self._completion = completion
        self._executor = executor
        self._system = system_prompt
        self._max_turns = max_turns
        self._max_tokens = max_tokens
        self._history: list[ChatMessage] = []
        self.state = LoopState.AWAITING_COMPLETION
        self.turns = 0

    @property
    def final_history(self) -> list[ChatMessage]:
        """History including every assistant and tool message of the run."""
        return list(self._history)

    def _tokens(self, text: str) -> Iterator[ChatEvent]:
        for i in range(0, len(text), TOKEN_CHUNK):
            yield ChatEvent.token(text[i : i + TOKEN_CHUNK])

    def run(
        self, history: Sequence[ChatMessage], session_id: str | None = None
    ) -> Iterator[ChatEvent]:
        """
        Drive the conversation until it ends in natural language or aborts.

        Args:
            history: Conversation so far, ending with the user's message
            session_id: Echoed back in the done event

        Yields:
            token, tool_start, tool_result, then done or error
        """
        self._history = list(history)
        self.state = LoopState.AWAITING_COMPLETION
        self.turns = 0
        full_text: list[str] = []
        pending: CompletionResponse | None = None

        while self.state not in (LoopState.DONE, LoopState.ABORTED):
            if self.state is LoopState.AWAITING_COMPLETION:
                if self.turns >= self._max_turns:
                    # Turn bound reached: one tool-free call ends the conversation.
                    logger.info("Tool turn bound (%d) reached; forcing final answer", self._max_turns)
                    parts: list[str] = []
                    try:
                        for fragment in self._completion.stream(
                            self._system, self._history, max_tokens=self._max_tokens
                        ):
                            parts.append(fragment)
                            yield ChatEvent.token(fragment)
                    except Exception as e:
                        logger.error("Final completion failed: %s", e)
                        self.state = LoopState.ABORTED
                        yield ChatEvent.error(str(e))
                        continue
                    text = "".join(parts)
                    full_text.append(text)
                    self._history.append(ChatMessage.assistant(text))
                    self.state = LoopState.DONE
                    continue

                try:
                    response = self._completion.complete(
                        self._system,
                        self._history,
                        tools=self._executor.specs,
                        max_tokens=self._max_tokens,
                    )
                except Exception as e:
                    logger.error("Completion failed on turn %d: %s", self.turns + 1, e)
                    self.state = LoopState.ABORTED
                    yield ChatEvent.error(str(e))
                    continue

                self.turns += 1
                if response.text:
                    full_text.append(response.text)
                    yield from self._tokens(response.text)
                self._history.append(
                    ChatMessage.assistant(response.text, response.tool_calls)
                )
                if response.wants_tools:
                    pending = response
                    self.state = LoopState.EXECUTING_TOOLS
                else:
                    self.state = LoopState.DONE

            elif self.state is LoopState.EXECUTING_TOOLS:
                assert pending is not None
                for call in pending.tool_calls:
                    yield ChatEvent.tool_start(call)
                    outcome = self._executor.execute(call.name, call.arguments)
                    yield ChatEvent.tool_result(
                        call,
                        success=outcome.success,
                        preview=summarize_tool_result(call.name, outcome.result),
                        full_result=outcome.result,
                        error=outcome.error,
                    )
                    self._history.append(ChatMessage.tool_result(call.id, outcome.content))
                pending = None
                self.state = LoopState.AWAITING_COMPLETION

        if self.state is LoopState.DONE:
            yield ChatEvent.done("".join(full_text), session_id)
