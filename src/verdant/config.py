"""Runtime configuration for the governance services."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from verdant.domain.exceptions import ValidationError

DEFAULT_REVIEW_MODEL = "gpt-4o-mini"
DEFAULT_CHAT_MODEL = "gpt-4o-mini"


def _int_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValidationError(f"{name} must be an integer, got {raw!r}") from None


@dataclass(frozen=True)
class VerdantConfig:
    """
    Where the project lives and how the services behave.

    Data files (pipeline document, ledgers, wiki, tone configuration) all
    live in data_dir; component artifacts live under src/components.
    """

    project_root: Path = field(default_factory=Path.cwd)
    data_dir: Path | None = None
    completion_backend: str = "OpenAICompletionService"
    review_model: str = DEFAULT_REVIEW_MODEL
    chat_model: str = DEFAULT_CHAT_MODEL
    review_max_tokens: int = 2048
    chat_max_tokens: int = 4096
    max_tool_turns: int = 5
    session_ttl_seconds: int = 1800
    session_sweep_seconds: int = 300
    prior_decision_window: int = 50
    prior_decision_limit: int = 5

    def __post_init__(self) -> None:
        root = Path(self.project_root).resolve()
        object.__setattr__(self, "project_root", root)
        data_dir = Path(self.data_dir) if self.data_dir else root / "src" / "data"
        object.__setattr__(self, "data_dir", data_dir)

        if self.max_tool_turns < 1:
            raise ValidationError("max_tool_turns must be at least 1")
        if self.session_ttl_seconds <= 0:
            raise ValidationError("session_ttl_seconds must be positive")
        if self.session_sweep_seconds <= 0:
            raise ValidationError("session_sweep_seconds must be positive")

    @classmethod
    def from_env(cls, **overrides: object) -> VerdantConfig:
        """
        Build a configuration from VERDANT_* environment variables.

        Args:
            **overrides: Explicit values that win over the environment

        Raises:
            ValidationError: If a numeric variable is not an integer
        """
        values: dict[str, object] = {
            "project_root": Path(os.environ.get("VERDANT_PROJECT_ROOT") or Path.cwd()),
            "review_model": os.environ.get("VERDANT_REVIEW_MODEL") or DEFAULT_REVIEW_MODEL,
            "chat_model": os.environ.get("VERDANT_CHAT_MODEL") or DEFAULT_CHAT_MODEL,
            "max_tool_turns": _int_env("VERDANT_MAX_TOOL_TURNS", 5),
            "session_ttl_seconds": _int_env("VERDANT_SESSION_TTL", 1800),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)  # type: ignore[arg-type]

    # =========================================================================
    # DATA FILES
    # =========================================================================

    def _data(self, name: str) -> Path:
        assert self.data_dir is not None
        return self.data_dir / name

    @property
    def pipeline_path(self) -> Path:
        return self._data("pipeline-state.json")

    @property
    def decisions_path(self) -> Path:
        return self._data("decisions.jsonl")

    @property
    def changes_path(self) -> Path:
        return self._data("changes.jsonl")

    @property
    def activity_path(self) -> Path:
        return self._data("activity-log.jsonl")

    @property
    def initiatives_path(self) -> Path:
        return self._data("initiatives.jsonl")

    @property
    def wiki_path(self) -> Path:
        return self._data("wiki.json")

    @property
    def tone_config_path(self) -> Path:
        return self._data("gardener-config.json")

    @property
    def spark_queue_path(self) -> Path:
        return self._data("spark-queue.jsonl")

    @property
    def gardeners_memory_path(self) -> Path:
        return self._data("gardeners-memory.json")
