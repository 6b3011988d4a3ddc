"""Tests for GovernanceContext wiring and caching."""

import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from verdant.application.context import GovernanceContext
from verdant.domain.models import PipelineDocument, Zone
from verdant.infrastructure import InMemoryPipelineStore


class TestToneConfig:
    def test_is_cached_until_invalidated(
        self,
        make_context: Callable[..., GovernanceContext],
    ) -> None:
        context = make_context(tone={"tone": "direct"})

        first = context.tone_config()
        context._tone_store.save({"tone": "gentle"})

        assert context.tone_config() is first
        context.invalidate()
        assert context.tone_config() == {"tone": "gentle"}

    def test_save_replaces_cached_value(
        self,
        make_context: Callable[..., GovernanceContext],
    ) -> None:
        context = make_context()
        assert context.tone_config() is None

        context.save_tone_config({"tone": "encouraging"})

        assert context.tone_config() == {"tone": "encouraging"}


class TestLifecycle:
    def test_init_creates_data_dir(
        self,
        make_context: Callable[..., GovernanceContext],
        tmp_path: Path,
    ) -> None:
        context = make_context()

        context.init()
        try:
            assert (tmp_path / "src" / "data").is_dir()
        finally:
            context.teardown()

    def test_teardown_clears_sessions(
        self,
        make_context: Callable[..., GovernanceContext],
    ) -> None:
        context = make_context()
        context.sessions.get_or_create("s-1")

        context.teardown()

        assert len(context.sessions) == 0


class TestServices:
    def test_chat_falls_back_to_review_completion(
        self,
        make_context: Callable[..., GovernanceContext],
    ) -> None:
        context = make_context()

        assert context.chat_completion is context.review_completion

    def test_chat_loop_uses_configured_bound(
        self,
        make_context: Callable[..., GovernanceContext],
    ) -> None:
        context = make_context(max_tool_turns=2, chat_max_tokens=512)

        loop = context.chat_loop("system")

        assert loop._max_turns == 2

    def test_chat_system_prompt_with_current_component(
        self,
        make_context: Callable[..., GovernanceContext],
        toggle_in: Callable[[Zone], PipelineDocument],
    ) -> None:
        context = make_context(document=toggle_in(Zone.WORKSHOP))

        prompt = context.chat_system_prompt(current_page="/pipeline", current_component="toggle")

        assert "CURRENT PAGE: /pipeline" in prompt
        assert "CURRENT COMPONENT: Toggle (workshop, candidate)" in prompt

    def test_chat_system_prompt_ignores_unknown_component(
        self,
        make_context: Callable[..., GovernanceContext],
    ) -> None:
        prompt = make_context().chat_system_prompt(current_component="Nope")

        assert "CURRENT COMPONENT" not in prompt


class SlowPipelineStore(InMemoryPipelineStore):
    """Widens the gap between load and save."""

    def load(self) -> PipelineDocument:
        document = super().load()
        time.sleep(0.005)
        return document


class TestPipelineLock:
    def test_concurrent_creates_get_distinct_ids(
        self,
        make_context: Callable[..., GovernanceContext],
    ) -> None:
        context = make_context()
        context.pipeline_store = SlowPipelineStore()

        with ThreadPoolExecutor(max_workers=8) as pool:
            created = list(
                pool.map(
                    lambda n: context.pipeline().create(f"Widget {n}", "input", "Test"),
                    range(8),
                )
            )

        assert len({c.id for c in created}) == 8
        assert len(context.pipeline().state().nursery) == 8
