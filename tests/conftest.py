"""Shared pytest fixtures for verdant tests."""

import json
from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from verdant.application.context import GovernanceContext
from verdant.application.ledgers import ActivityLog, DecisionMemory
from verdant.application.pipeline_service import PipelineStateMachine
from verdant.config import VerdantConfig
from verdant.domain.models import Component, Maturity, PipelineDocument, Zone
from verdant.infrastructure import (
    InMemoryDocumentStore,
    InMemoryLedger,
    InMemoryPipelineStore,
    InMemoryProjectFiles,
    ProjectPathValidator,
    ScriptedCompletionService,
)
from verdant.infrastructure.llm.mock import Scripted

TOGGLE_CSS = """\
.t-toggle {
  display: inline-flex;
  gap: var(--t-space-2);
  background: var(--t-color-surface);
  border-radius: var(--t-radius-full);
  font-family: var(--t-font-body);
}

.t-toggle__thumb {
  background: var(--t-color-on-surface);
}

.t-toggle--checked {
  background: var(--t-color-primary);
}
"""

TOGGLE_SPEC = {
    "name": "Toggle",
    "jtbd": "Switch a single setting on or off",
    "accessibility": {"role": "switch", "keyboard": "Space toggles"},
}


def review_json(verdict: str = "approved", score: int = 90, **extra: object) -> str:
    payload: dict[str, object] = {
        "verdict": verdict,
        "score": score,
        "orpa": {
            "observation": "Uses semantic tokens throughout",
            "reflection": "Meets the domain rules",
            "plan": "None",
            "action": f"{verdict}",
        },
        "analysis": "Looks consistent with the system.",
        "citations": ["WCAG-2.1.1"],
        "conditionalApproval": None,
    }
    payload.update(extra)
    return json.dumps(payload)


@pytest.fixture
def make_review() -> Callable[..., str]:
    """Factory for a well-formed reviewer response."""
    return review_json


def toggle(component_id: str = "COMP-001", zone: Zone = Zone.NURSERY) -> Component:
    maturity = Maturity.DRAFT if zone == Zone.NURSERY else Maturity.CANDIDATE
    return Component(
        id=component_id,
        name="Toggle",
        category="input",
        description="Switch a single setting on or off",
        zone=zone,
        maturity=maturity,
        created_at="2025-01-01T00:00:00+00:00",
        moved_at="2025-01-01T00:00:00+00:00",
    )


@pytest.fixture
def toggle_in() -> Callable[[Zone], PipelineDocument]:
    """A pipeline document holding only Toggle (COMP-001) in the given zone."""

    def build(zone: Zone) -> PipelineDocument:
        return PipelineDocument(**{zone.value: (toggle(zone=zone),)}, next_id=2)

    return build


@pytest.fixture
def project_files() -> InMemoryProjectFiles:
    return InMemoryProjectFiles(
        {
            "src/components/toggle/toggle.css": TOGGLE_CSS,
            "src/components/toggle/toggle.spec.json": json.dumps(TOGGLE_SPEC),
        }
    )


@pytest.fixture
def activity() -> ActivityLog:
    return ActivityLog(InMemoryLedger())


@pytest.fixture
def decisions() -> DecisionMemory:
    return DecisionMemory(InMemoryLedger())


@pytest.fixture
def pipeline_store() -> InMemoryPipelineStore:
    return InMemoryPipelineStore()


@pytest.fixture
def state_machine(
    pipeline_store: InMemoryPipelineStore, activity: ActivityLog
) -> PipelineStateMachine:
    return PipelineStateMachine(pipeline_store, activity)


@pytest.fixture
def make_context(
    tmp_path: Path, project_files: InMemoryProjectFiles
) -> Callable[..., GovernanceContext]:
    """Factory for an in-memory GovernanceContext around a scripted service."""

    def build(
        responses: Sequence[Scripted] = (),
        document: PipelineDocument | None = None,
        stream_responses: Sequence[Scripted] | None = None,
        tone: dict[str, object] | None = None,
        **config: object,
    ) -> GovernanceContext:
        completion = ScriptedCompletionService(responses, stream_responses)
        return GovernanceContext(
            config=VerdantConfig(project_root=tmp_path, **config),  # type: ignore[arg-type]
            pipeline_store=InMemoryPipelineStore(document),
            decision_store=InMemoryLedger(),
            change_store=InMemoryLedger(),
            activity_store=InMemoryLedger(),
            initiative_store=InMemoryLedger(),
            wiki_store=InMemoryDocumentStore(),
            tone_store=InMemoryDocumentStore(tone),
            spark_store=InMemoryLedger(),
            memory_store=InMemoryDocumentStore(),
            files=project_files,
            paths=ProjectPathValidator(),
            review_completion=completion,
        )

    return build
