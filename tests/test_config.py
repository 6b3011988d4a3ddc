"""Tests for VerdantConfig."""

from pathlib import Path

import pytest

from verdant.config import DEFAULT_REVIEW_MODEL, VerdantConfig
from verdant.domain.exceptions import ValidationError

ENV_VARS = (
    "VERDANT_PROJECT_ROOT",
    "VERDANT_REVIEW_MODEL",
    "VERDANT_CHAT_MODEL",
    "VERDANT_MAX_TOOL_TURNS",
    "VERDANT_SESSION_TTL",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


class TestVerdantConfig:
    def test_data_dir_defaults_under_project(self, tmp_path: Path) -> None:
        config = VerdantConfig(project_root=tmp_path)

        assert config.data_dir == tmp_path.resolve() / "src" / "data"
        assert config.pipeline_path.name == "pipeline-state.json"
        assert config.activity_path.name == "activity-log.jsonl"
        assert config.tone_config_path.name == "gardener-config.json"
        assert config.spark_queue_path.name == "spark-queue.jsonl"
        assert config.gardeners_memory_path.name == "gardeners-memory.json"
        assert config.decisions_path.parent == config.data_dir

    def test_explicit_data_dir(self, tmp_path: Path) -> None:
        config = VerdantConfig(project_root=tmp_path, data_dir=tmp_path / "state")

        assert config.wiki_path == tmp_path / "state" / "wiki.json"

    @pytest.mark.parametrize(
        "field, value",
        [
            ("max_tool_turns", 0),
            ("session_ttl_seconds", 0),
            ("session_sweep_seconds", -1),
        ],
    )
    def test_invalid_values(self, tmp_path: Path, field: str, value: int) -> None:
        with pytest.raises(ValidationError, match=field):
            VerdantConfig(project_root=tmp_path, **{field: value})  # type: ignore[arg-type]


class TestFromEnv:
    def test_defaults(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.chdir(tmp_path)

        config = VerdantConfig.from_env()

        assert config.project_root == tmp_path.resolve()
        assert config.review_model == DEFAULT_REVIEW_MODEL
        assert config.max_tool_turns == 5

    def test_environment_variables(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VERDANT_PROJECT_ROOT", str(tmp_path))
        monkeypatch.setenv("VERDANT_REVIEW_MODEL", "gpt-4o")
        monkeypatch.setenv("VERDANT_CHAT_MODEL", "gpt-4.1")
        monkeypatch.setenv("VERDANT_MAX_TOOL_TURNS", "8")
        monkeypatch.setenv("VERDANT_SESSION_TTL", "600")

        config = VerdantConfig.from_env()

        assert config.project_root == tmp_path.resolve()
        assert (config.review_model, config.chat_model) == ("gpt-4o", "gpt-4.1")
        assert config.max_tool_turns == 8
        assert config.session_ttl_seconds == 600

    def test_overrides_win_and_none_is_ignored(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("VERDANT_REVIEW_MODEL", "gpt-4o")

        config = VerdantConfig.from_env(project_root=tmp_path, review_model=None, max_tool_turns=2)

        assert config.review_model == "gpt-4o"
        assert config.max_tool_turns == 2

    def test_non_integer_variable(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("VERDANT_MAX_TOOL_TURNS", "many")

        with pytest.raises(ValidationError, match="VERDANT_MAX_TOOL_TURNS must be an integer"):
            VerdantConfig.from_env()
