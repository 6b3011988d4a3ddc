"""Completion service adapters."""

from verdant.infrastructure.llm.mock import ScriptedCompletionService
from verdant.infrastructure.llm.openai_service import (
    OpenAICompletionService,
    OpenAICompletionServiceConfig,
)

__all__ = [
    "OpenAICompletionService",
    "OpenAICompletionServiceConfig",
    "ScriptedCompletionService",
]
