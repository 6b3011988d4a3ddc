"""JSON and server-sent-event routes of the governance server."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from datetime import datetime, timezone
from typing import Any

from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse

from verdant.api.models import (
    AgentReviewRequest,
    ChatRequest,
    ClearChatRequest,
    CreateComponentRequest,
    GovernanceReviewRequest,
    OverrideVetoRequest,
    ProposalApprovalRequest,
    ProposalRequest,
    ProposalVetoRequest,
    SeedVaultRequest,
)
from verdant.application.context import GovernanceContext
from verdant.domain.chat import ChatMessage, LoopState
from verdant.domain.exceptions import UnknownZone, ValidationError
from verdant.domain.models import Zone

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def _context(request: Request) -> GovernanceContext:
    context: GovernanceContext = request.app.state.context
    return context


def _not_found(message: str) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": message})


# -- Health --------------------------------------------------------------------


@router.get("/health")
def health(request: Request) -> dict[str, Any]:
    config = _context(request).config
    return {
        "status": "ok",
        "completionBackend": config.completion_backend,
        "reviewModel": config.review_model,
        "chatModel": config.chat_model,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


# -- Pipeline ------------------------------------------------------------------


@router.get("/pipeline")
def get_pipeline(request: Request) -> dict[str, Any]:
    return _context(request).pipeline().state().to_dict()


@router.post("/pipeline/create")
def create_component(body: CreateComponentRequest, request: Request) -> dict[str, Any]:
    component = _context(request).pipeline().create(
        body.name, body.category, body.description
    )
    return {"success": True, "component": component.to_dict()}


@router.post("/pipeline/promote/{component_id}")
def promote_component(component_id: str, request: Request) -> dict[str, Any]:
    return _context(request).pipeline().promote(component_id).to_dict()


@router.post("/pipeline/seed-vault/{component_id}")
def seed_vault_component(
    component_id: str, request: Request, body: SeedVaultRequest | None = None
) -> dict[str, Any]:
    reason = (body.reason if body else "") or "Archived by gardener"
    return _context(request).pipeline().archive(component_id, reason).to_dict()


# -- Data ----------------------------------------------------------------------


@router.get("/wiki")
def get_wiki(request: Request) -> dict[str, Any]:
    return _context(request).wiki.entries()


@router.get("/seed-vault")
def get_seed_vault(request: Request) -> list[dict[str, Any]]:
    return [a.to_dict() for a in _context(request).activity.archived()]


@router.get("/decisions")
def get_decisions(request: Request, limit: int = Query(20, ge=1)) -> list[dict[str, Any]]:
    return [d.to_dict() for d in _context(request).decisions.tail(limit)]


@router.get("/activity")
def get_activity(request: Request, limit: int = Query(50, ge=1)) -> list[dict[str, Any]]:
    return [a.to_dict() for a in _context(request).activity.tail(limit)]


@router.get("/changes")
def get_changes(request: Request, limit: int = Query(50, ge=1)) -> list[dict[str, Any]]:
    return [c.to_dict() for c in _context(request).changes.tail(limit)]


@router.get("/sparks")
def get_sparks(request: Request, status: str | None = None) -> list[dict[str, Any]]:
    sparks = _context(request).sparks
    records = sparks.open_sparks() if status == "open" else sparks.records()
    return [s.to_dict() for s in records]


# -- Gardener tone configuration ------------------------------------------------


@router.get("/gardener-config", response_model=None)
def get_gardener_config(request: Request) -> dict[str, Any] | JSONResponse:
    config = _context(request).tone_config()
    if config is None:
        return _not_found("gardener-config.json not found")
    return config


@router.post("/gardener-config")
def save_gardener_config(body: dict[str, Any], request: Request) -> dict[str, Any]:
    config = {**body, "lastModified": datetime.now(timezone.utc).isoformat()}
    _context(request).save_tone_config(config)
    return {"success": True, "config": config}


# -- Governance reviews ----------------------------------------------------------


def _zone(value: str | None) -> Zone | None:
    if value is None:
        return None
    try:
        return Zone(value)
    except ValueError:
        raise UnknownZone(value) from None


@router.post("/governance-review")
def governance_review(body: GovernanceReviewRequest, request: Request) -> dict[str, Any]:
    result = _context(request).orchestrator().run_review(
        body.component_id, zone=_zone(body.zone)
    )
    return result.to_dict()


@router.post("/governance-review/agent")
def agent_review(body: AgentReviewRequest, request: Request) -> dict[str, Any]:
    result = _context(request).orchestrator().run_single_agent_review(
        body.agent_id, body.component_id
    )
    return result.to_dict()


@router.post("/governance-review/override")
def override_veto(body: OverrideVetoRequest, request: Request) -> dict[str, Any]:
    record = _context(request).orchestrator().override_veto(
        body.component_id, body.reason
    )
    return {"success": True, "decision": record.to_dict()}


# -- Proposals -------------------------------------------------------------------


@router.get("/proposals")
def get_proposals(request: Request) -> list[dict[str, Any]]:
    return [p.to_dict() for p in _context(request).proposals.open_proposals()]


@router.post("/proposals")
def create_proposal(body: ProposalRequest, request: Request) -> dict[str, Any]:
    target_zone = _zone(body.target_zone)
    assert target_zone is not None
    proposal = _context(request).proposals.propose(
        body.type,
        body.proposer,
        target_zone,
        rationale=body.rationale,
        target_id=body.target_id,
        approvals_needed=tuple(body.approvals_needed),
        citations=tuple(body.citations),
    )
    return proposal.to_dict()


@router.post("/proposals/{proposal_id}/approve")
def approve_proposal(
    proposal_id: str, body: ProposalApprovalRequest, request: Request
) -> dict[str, Any]:
    return _context(request).proposals.approve(proposal_id, body.actor).to_dict()


@router.post("/proposals/{proposal_id}/veto")
def veto_proposal(
    proposal_id: str, body: ProposalVetoRequest, request: Request
) -> dict[str, Any]:
    proposals = _context(request).proposals
    return proposals.veto(proposal_id, body.agent_id, body.reason).to_dict()


@router.post("/proposals/{proposal_id}/override")
def override_proposal(proposal_id: str, request: Request) -> dict[str, Any]:
    return _context(request).proposals.override(proposal_id).to_dict()


# -- Chat ------------------------------------------------------------------------


@router.post("/chat")
def chat(body: ChatRequest, request: Request) -> StreamingResponse:
    context = _context(request)

    session_id: str | None = None
    if body.session_mode:
        assert body.session_id is not None and body.message is not None
        session_id = body.session_id
        history = context.sessions.append(session_id, ChatMessage.user(body.message))
    elif body.messages is not None:
        try:
            history = [ChatMessage.from_dict(m) for m in body.messages]
        except (KeyError, TypeError) as e:
            raise ValidationError(f"Malformed message in history: {e}") from e
    else:
        raise ValidationError("Either {sessionId, message} or {messages} is required")

    page = body.context.current_page if body.context else None
    current = body.context.current_component if body.context else None
    loop = context.chat_loop(context.chat_system_prompt(page, current))

    def events() -> Iterator[str]:
        try:
            for event in loop.run(history, session_id):
                yield f"data: {json.dumps(event.to_dict())}\n\n"
        finally:
            if session_id and loop.state is LoopState.DONE:
                context.sessions.replace_history(session_id, loop.final_history)

    return StreamingResponse(
        events(), media_type="text/event-stream", headers=SSE_HEADERS
    )


@router.post("/chat/clear")
def clear_chat(body: ClearChatRequest, request: Request) -> dict[str, Any]:
    if body.session_id and _context(request).sessions.clear(body.session_id):
        return {"success": True, "cleared": True}
    return {
        "success": True,
        "cleared": False,
        "note": "Session not found or already expired",
    }
