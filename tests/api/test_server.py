"""Tests for the HTTP surface."""

import json
from collections.abc import Callable, Iterator

import pytest
from fastapi.testclient import TestClient

from verdant.api.server import create_app, status_for
from verdant.application.context import GovernanceContext
from verdant.domain.exceptions import (
    ComponentNotFound,
    CompletionUnavailable,
    PersistenceError,
    UnknownAgent,
    UnknownZone,
    ValidationError,
    VerdantError,
)
from verdant.domain.models import PipelineDocument, Zone


@pytest.fixture
def client_for(
    make_context: Callable[..., GovernanceContext],
) -> Iterator[Callable[..., TestClient]]:
    """Factory for a started TestClient around an in-memory context."""
    clients: list[TestClient] = []

    def build(*args: object, **kwargs: object) -> TestClient:
        context = make_context(*args, **kwargs)
        client = TestClient(create_app(context))
        client.__enter__()
        clients.append(client)
        return client

    yield build
    for client in clients:
        client.__exit__(None, None, None)


def _sse_events(body: str) -> list[dict]:
    return [
        json.loads(line[len("data: "):])
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


class TestHealth:
    def test_reports_models(self, client_for: Callable[..., TestClient]) -> None:
        response = client_for().get("/api/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "ok"
        assert body["reviewModel"] == "gpt-4o-mini"


class TestPipelineRoutes:
    def test_create_then_promote(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for()

        created = client.post(
            "/api/pipeline/create",
            json={"name": "Slider", "type": "input", "description": "Pick a value"},
        )
        component_id = created.json()["component"]["id"]
        promoted = client.post(f"/api/pipeline/promote/{component_id}")

        assert created.status_code == 200
        assert promoted.json()["to"] == "workshop"
        assert client.get("/api/pipeline").json()["workshop"][0]["name"] == "Slider"
        assert [a["action"] for a in client.get("/api/activity").json()] == [
            "submitted",
            "promoted",
        ]

    def test_create_requires_fields(self, client_for: Callable[..., TestClient]) -> None:
        response = client_for().post("/api/pipeline/create", json={"name": "Slider"})

        assert response.status_code == 422

    def test_refused_promotion_is_200(
        self,
        client_for: Callable[..., TestClient],
        toggle_in: Callable[[Zone], PipelineDocument],
    ) -> None:
        response = client_for(document=toggle_in(Zone.STABLE)).post(
            "/api/pipeline/promote/COMP-001"
        )

        assert response.status_code == 200
        assert response.json()["success"] is False

    def test_seed_vault(
        self,
        client_for: Callable[..., TestClient],
        toggle_in: Callable[[Zone], PipelineDocument],
    ) -> None:
        client = client_for(document=toggle_in(Zone.WORKSHOP))

        archived = client.post("/api/pipeline/seed-vault/COMP-001", json={"reason": "Merged"})

        assert archived.json()["success"] is True
        [entry] = client.get("/api/seed-vault").json()
        assert entry["detail"] == "Merged"


class TestDataRoutes:
    def test_empty_ledgers(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for()

        assert client.get("/api/wiki").json() == {}
        assert client.get("/api/decisions").json() == []
        assert client.get("/api/changes").json() == []

    def test_limit_must_be_positive(self, client_for: Callable[..., TestClient]) -> None:
        assert client_for().get("/api/decisions?limit=0").status_code == 422

    def test_gardener_config_round_trip(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for()

        missing = client.get("/api/gardener-config")
        saved = client.post("/api/gardener-config", json={"tone": "direct"})

        assert missing.status_code == 404
        assert missing.json() == {"error": "gardener-config.json not found"}
        assert saved.json()["config"]["tone"] == "direct"
        fetched = client.get("/api/gardener-config").json()
        assert fetched["tone"] == "direct"
        assert "lastModified" in fetched


class TestReviewRoutes:
    def test_full_review(
        self,
        client_for: Callable[..., TestClient],
        toggle_in: Callable[[Zone], PipelineDocument],
        make_review: Callable[..., str],
    ) -> None:
        client = client_for([make_review()] * 5, document=toggle_in(Zone.WORKSHOP))

        response = client.post("/api/governance-review", json={"componentId": "Toggle"})

        assert response.status_code == 200
        assert response.json()["zoneVerdict"]["passed"] is True
        assert len(client.get("/api/decisions").json()) == 1

    def test_unknown_component_is_404(self, client_for: Callable[..., TestClient]) -> None:
        response = client_for().post("/api/governance-review", json={"componentId": "Nope"})

        assert response.status_code == 404
        assert response.json() == {"error": "Component not found: Nope"}

    def test_unknown_zone_is_400(
        self,
        client_for: Callable[..., TestClient],
        toggle_in: Callable[[Zone], PipelineDocument],
    ) -> None:
        response = client_for(document=toggle_in(Zone.WORKSHOP)).post(
            "/api/governance-review", json={"componentId": "Toggle", "zone": "jungle"}
        )

        assert response.status_code == 400

    def test_unknown_agent_is_400(
        self,
        client_for: Callable[..., TestClient],
        toggle_in: Callable[[Zone], PipelineDocument],
    ) -> None:
        response = client_for(document=toggle_in(Zone.WORKSHOP)).post(
            "/api/governance-review/agent", json={"agentId": "zz", "componentId": "Toggle"}
        )

        assert response.status_code == 400
        assert "Valid: ts, ag, pl, ca, px" in response.json()["error"]

    def test_override_records_gardener_decision(
        self,
        client_for: Callable[..., TestClient],
        toggle_in: Callable[[Zone], PipelineDocument],
    ) -> None:
        client = client_for(document=toggle_in(Zone.CANOPY))

        response = client.post(
            "/api/governance-review/override",
            json={"componentId": "Toggle", "reason": "Contrast fixed upstream"},
        )

        assert response.status_code == 200
        decision = response.json()["decision"]
        assert decision["type"] == "gardener_override"
        assert decision["actor"] == "gardener"
        assert client.get("/api/decisions").json()[-1]["id"] == decision["id"]
        assert client.get("/api/activity").json()[-1]["action"] == "veto-overridden"

    def test_override_requires_reason(self, client_for: Callable[..., TestClient]) -> None:
        response = client_for().post(
            "/api/governance-review/override", json={"componentId": "Toggle"}
        )

        assert response.status_code == 422


class TestProposalRoutes:
    def test_veto_override_then_unanimous_approval(
        self, client_for: Callable[..., TestClient]
    ) -> None:
        client = client_for()

        created = client.post(
            "/api/proposals",
            json={
                "type": "token",
                "proposer": "ts",
                "targetZone": "canopy",
                "approvalsNeeded": ["ts", "ag", "ca"],
            },
        ).json()
        proposal_id = created["id"]
        vetoed = client.post(
            f"/api/proposals/{proposal_id}/veto",
            json={"agentId": "ag", "reason": "Focus ring missing"},
        ).json()
        blocked = client.post(f"/api/proposals/{proposal_id}/approve", json={"actor": "ca"})
        overridden = client.post(f"/api/proposals/{proposal_id}/override").json()
        client.post(f"/api/proposals/{proposal_id}/approve", json={"actor": "ag"})
        staged = client.post(
            f"/api/proposals/{proposal_id}/approve", json={"actor": "ca"}
        ).json()

        assert created["status"] == "pending"
        assert vetoed["status"] == "rejected"
        assert blocked.status_code == 400
        assert overridden["status"] == "pending"
        assert overridden["vetoedBy"] is None
        assert staged["status"] == "staged"
        assert client.get("/api/proposals").json() == []
        assert [d["type"] for d in client.get("/api/decisions").json()] == [
            "proposal_resolution",
            "gardener_override",
            "proposal_resolution",
        ]

    def test_open_proposals_are_listed(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for()
        client.post(
            "/api/proposals",
            json={
                "type": "spec",
                "proposer": "pl",
                "targetZone": "workshop",
                "approvalsNeeded": ["pl", "ca", "px"],
            },
        )

        listed = client.get("/api/proposals").json()

        assert [p["proposer"] for p in listed] == ["pl"]

    def test_unknown_zone_and_proposal(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for()

        bad_zone = client.post(
            "/api/proposals", json={"type": "token", "proposer": "ts", "targetZone": "jungle"}
        )
        unknown = client.post("/api/proposals/GOV-404/override")

        assert bad_zone.status_code == 400
        assert unknown.status_code == 400
        assert unknown.json() == {"error": "Unknown proposal: GOV-404"}


class TestSparkRoutes:
    def test_lists_captured_sparks(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for()
        client.app.state.context.sparks.capture("Slider", "Pick a value")

        assert [s["name"] for s in client.get("/api/sparks").json()] == ["Slider"]
        assert [s["name"] for s in client.get("/api/sparks?status=open").json()] == ["Slider"]


class TestChatRoutes:
    def test_session_chat_streams_and_remembers(
        self,
        client_for: Callable[..., TestClient],
    ) -> None:
        client = client_for(["Hello, gardener."])

        response = client.post("/api/chat", json={"sessionId": "s-1", "message": "Hi"})

        assert response.headers["content-type"].startswith("text/event-stream")
        events = _sse_events(response.text)
        assert events[-1] == {"type": "done", "fullText": "Hello, gardener.", "sessionId": "s-1"}
        session = client.app.state.context.sessions.get("s-1")
        assert [m.role for m in session.history] == ["user", "assistant"]

    def test_history_mode(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for(["Sure."])

        response = client.post("/api/chat", json={"messages": [{"role": "user", "content": "Hi"}]})

        assert _sse_events(response.text)[-1]["type"] == "done"

    def test_chat_requires_message(self, client_for: Callable[..., TestClient]) -> None:
        response = client_for().post("/api/chat", json={})

        assert response.status_code == 400

    def test_clear(self, client_for: Callable[..., TestClient]) -> None:
        client = client_for(["Hello."])
        client.post("/api/chat", json={"sessionId": "s-1", "message": "Hi"})

        first = client.post("/api/chat/clear", json={"sessionId": "s-1"})
        second = client.post("/api/chat/clear", json={"sessionId": "s-1"})

        assert first.json() == {"success": True, "cleared": True}
        assert second.json()["cleared"] is False


class TestStatusFor:
    @pytest.mark.parametrize(
        "error, status",
        [
            (ComponentNotFound("Toggle"), 404),
            (UnknownAgent("zz", ("ts",)), 400),
            (UnknownZone("jungle"), 400),
            (ValidationError("bad"), 400),
            (CompletionUnavailable("down"), 503),
            (PersistenceError("wiki.json", OSError("disk full")), 500),
            (VerdantError("other"), 500),
        ],
    )
    def test_mapping(self, error: VerdantError, status: int) -> None:
        assert status_for(error) == status
