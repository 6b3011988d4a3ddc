"""
Domain models for zone-based component governance.

Pure data structures: components, zones, reviewer verdicts and the
append-only records written to the ledgers. All models are immutable
(frozen dataclasses); transitions produce new instances.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

# =============================================================================
# ZONES AND MATURITY
# =============================================================================


class Zone(Enum):
    """Lifecycle stage of a component."""

    NURSERY = "nursery"
    WORKSHOP = "workshop"
    CANOPY = "canopy"
    STABLE = "stable"  # terminal


ZONE_ORDER: tuple[Zone, ...] = (Zone.NURSERY, Zone.WORKSHOP, Zone.CANOPY, Zone.STABLE)
ACTIVE_ZONES: tuple[Zone, ...] = (Zone.NURSERY, Zone.WORKSHOP, Zone.CANOPY)


def next_zone(zone: Zone) -> Zone | None:
    """Return the successor of a zone, or None for the terminal zone."""
    index = ZONE_ORDER.index(zone)
    if index + 1 >= len(ZONE_ORDER):
        return None
    return ZONE_ORDER[index + 1]


class Maturity(Enum):
    DRAFT = "draft"
    CANDIDATE = "candidate"
    STABLE = "stable"


def maturity_for(zone: Zone) -> Maturity:
    """Maturity a component carries after entering a zone."""
    if zone == Zone.NURSERY:
        return Maturity.DRAFT
    if zone == Zone.STABLE:
        return Maturity.STABLE
    return Maturity.CANDIDATE


# =============================================================================
# VERDICTS
# =============================================================================


class Verdict(Enum):
    """One reviewer's outcome for one component in one cycle."""

    APPROVED = "approved"
    NEEDS_WORK = "needs-work"
    VETOED = "vetoed"
    UNAVAILABLE = "unavailable"  # completion service could not be reached


@dataclass(frozen=True)
class Rationale:
    """Observation / Reflection / Plan / Action cycle of a review."""

    observation: str = ""
    reflection: str = ""
    plan: str = ""
    action: str = ""

    def to_dict(self) -> dict[str, str]:
        return {
            "observation": self.observation,
            "reflection": self.reflection,
            "plan": self.plan,
            "action": self.action,
        }


@dataclass(frozen=True)
class ReviewVerdict:
    """
    Full payload of a single reviewer's verdict.

    Write-once per (component, zone, cycle). A later cycle supersedes it
    with a new instance; nothing mutates it.
    """

    agent_id: str
    verdict: Verdict
    score: int  # clamped to [0, 100]
    rationale: Rationale
    analysis: str = ""
    citations: tuple[str, ...] = ()
    conditional_approval: str | None = None
    dimension_scores: Mapping[str, Any] = field(default_factory=dict)
    raw: str = ""  # untrusted model output, retained for audit
    parse_failed: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "agentId": self.agent_id,
            "verdict": self.verdict.value,
            "score": self.score,
            "orpa": self.rationale.to_dict(),
            "analysis": self.analysis,
            "citations": list(self.citations),
            "conditionalApproval": self.conditional_approval,
            "dimensionScores": dict(self.dimension_scores),
            "parseFailed": self.parse_failed,
            "raw": self.raw,
        }


@dataclass(frozen=True)
class ZoneVerdict:
    """Aggregated pass/fail of a zone's approval rule."""

    passed: bool
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"passed": self.passed, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ZoneVerdict":
        return cls(passed=bool(data.get("passed")), reason=str(data.get("reason", "")))


@dataclass(frozen=True)
class ZoneRuleSet:
    """Immutable approval policy of one zone."""

    zone: Zone
    label: str
    mode: str  # builder_only | builder_optimizer | optimizer
    allow_reject: bool
    majority: bool
    unanimous: bool
    veto_active: bool
    h_index: float  # weight of citation-based credibility (0-1)
    time_box: str
    exit_criteria: str


# =============================================================================
# COMPONENTS AND PIPELINE DOCUMENT
# =============================================================================


@dataclass(frozen=True)
class AgentSnapshot:
    """Compact latest-verdict summary stored on a component."""

    agent_id: str
    verdict: str
    score: int
    action: str = ""
    conditional_approval: str | None = None
    timestamp: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict,
            "score": self.score,
            "action": self.action,
            "conditionalApproval": self.conditional_approval,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, agent_id: str, data: Mapping[str, Any]) -> "AgentSnapshot":
        return cls(
            agent_id=agent_id,
            verdict=str(data.get("verdict", "")),
            score=int(data.get("score") or 0),
            action=str(data.get("action") or ""),
            conditional_approval=data.get("conditionalApproval"),
            timestamp=str(data.get("timestamp") or ""),
        )


@dataclass(frozen=True)
class Component:
    """A design artifact travelling through the zones."""

    id: str  # COMP-001
    name: str
    category: str
    description: str  # job-to-be-done statement
    zone: Zone
    maturity: Maturity
    created_at: str
    moved_at: str
    agent_reviews: tuple[AgentSnapshot, ...] = ()
    shielded: bool = False
    last_reviewed_at: str | None = None
    last_zone_verdict: ZoneVerdict | None = None

    def matches(self, id_or_name: str) -> bool:
        """Exact id or case-insensitive name match."""
        return self.id == id_or_name or self.name.lower() == id_or_name.lower()

    @property
    def slug(self) -> str:
        return "-".join(self.name.lower().split())

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "zone": self.zone.value,
            "maturity": self.maturity.value,
            "createdAt": self.created_at,
            "movedAt": self.moved_at,
            "agentReviews": {s.agent_id: s.to_dict() for s in self.agent_reviews},
            "shielded": self.shielded,
        }
        if self.last_reviewed_at is not None:
            data["lastReviewedAt"] = self.last_reviewed_at
        if self.last_zone_verdict is not None:
            data["lastZoneVerdict"] = self.last_zone_verdict.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Component":
        reviews = data.get("agentReviews") or {}
        last_verdict = data.get("lastZoneVerdict")
        return cls(
            id=data["id"],
            name=data["name"],
            # older documents store the category under "type"
            category=data.get("category", data.get("type", "")),
            description=data.get("description", ""),
            zone=Zone(data["zone"]),
            maturity=Maturity(data.get("maturity", Maturity.DRAFT.value)),
            created_at=data.get("createdAt", ""),
            moved_at=data.get("movedAt", ""),
            agent_reviews=tuple(
                AgentSnapshot.from_dict(agent_id, snap)
                for agent_id, snap in reviews.items()
            ),
            shielded=bool(data.get("shielded", False)),
            last_reviewed_at=data.get("lastReviewedAt"),
            last_zone_verdict=(
                ZoneVerdict.from_dict(last_verdict) if last_verdict else None
            ),
        )


@dataclass(frozen=True)
class PipelineDocument:
    """
    Authoritative component-to-zone assignment.

    Each component lives in exactly one zone tuple, and that tuple's zone
    equals the component's own zone field.
    """

    nursery: tuple[Component, ...] = ()
    workshop: tuple[Component, ...] = ()
    canopy: tuple[Component, ...] = ()
    stable: tuple[Component, ...] = ()
    next_id: int = 1

    def components_in(self, zone: Zone) -> tuple[Component, ...]:
        result: tuple[Component, ...] = getattr(self, zone.value)
        return result

    def all_components(self) -> tuple[Component, ...]:
        return tuple(c for zone in ZONE_ORDER for c in self.components_in(zone))

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            zone.value: [c.to_dict() for c in self.components_in(zone)]
            for zone in ZONE_ORDER
        }
        data["nextId"] = self.next_id
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "PipelineDocument":
        zones = {
            zone.value: tuple(
                Component.from_dict(c) for c in data.get(zone.value) or []
            )
            for zone in ZONE_ORDER
        }
        return cls(next_id=int(data.get("nextId", 1)), **zones)


@dataclass(frozen=True)
class PromotionResult:
    """Tagged outcome of a promotion; failure is a value, not an exception."""

    success: bool
    component: Component | None = None
    from_zone: Zone | None = None
    to_zone: Zone | None = None
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {"success": False, "reason": self.reason}
        assert self.component and self.from_zone and self.to_zone
        return {
            "success": True,
            "from": self.from_zone.value,
            "to": self.to_zone.value,
            "component": self.component.to_dict(),
        }


@dataclass(frozen=True)
class ArchiveResult:
    """Tagged outcome of moving a component to the seed vault."""

    success: bool
    component: Component | None = None
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"success": self.success}
        if self.component is not None:
            data["component"] = self.component.to_dict()
        if self.reason:
            data["reason"] = self.reason
        return data


# =============================================================================
# PRE-CHECK FINDINGS
# =============================================================================


@dataclass(frozen=True)
class ComponentArtifacts:
    """Style sheet and specification loaded for a component."""

    name: str
    css: str | None = None
    spec: Mapping[str, Any] | None = None


@dataclass(frozen=True)
class PathDecision:
    """Allow/deny answer of the path-safety collaborator."""

    allowed: bool
    reason: str = ""


@dataclass(frozen=True)
class CheckResult:
    """Issues and passes reported by one deterministic pre-check."""

    check: str
    issues: tuple[str, ...] = ()
    passes: tuple[str, ...] = ()

    @property
    def passed(self) -> bool:
        return not self.issues

    def to_dict(self) -> dict[str, Any]:
        return {"issues": list(self.issues), "passes": list(self.passes)}


@dataclass(frozen=True)
class AriaPattern:
    """Expected role, keyboard and ARIA contract of a widget family."""

    key: str
    role: str
    keyboard: str
    aria: str

    def to_dict(self) -> dict[str, str]:
        return {"key": self.key, "role": self.role, "keyboard": self.keyboard, "aria": self.aria}


@dataclass(frozen=True)
class StaticFindings:
    """Folded output of all pre-checks for one review cycle."""

    token_compliance: CheckResult | None = None
    naming: CheckResult | None = None
    aria_pattern: AriaPattern | None = None
    spec_present: bool = False
    css_present: bool = False

    @property
    def token_issues(self) -> tuple[str, ...]:
        return self.token_compliance.issues if self.token_compliance else ()

    @property
    def token_passes(self) -> tuple[str, ...]:
        return self.token_compliance.passes if self.token_compliance else ()

    @property
    def naming_issues(self) -> tuple[str, ...]:
        return self.naming.issues if self.naming else ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "tokenCompliance": (
                self.token_compliance.to_dict() if self.token_compliance else None
            ),
            "naming": self.naming.to_dict() if self.naming else None,
            "ariaPattern": self.aria_pattern.to_dict() if self.aria_pattern else None,
            "specPresent": self.spec_present,
            "cssPresent": self.css_present,
        }


# =============================================================================
# LEDGER RECORDS
# =============================================================================


@dataclass(frozen=True)
class AgentSummary:
    """Per-agent line of a decision record."""

    agent_id: str
    verdict: str
    score: int
    analysis: str = ""
    conditional_approval: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "verdict": self.verdict,
            "score": self.score,
            "analysis": self.analysis,
            "conditionalApproval": self.conditional_approval,
        }


@dataclass(frozen=True)
class DecisionRecord:
    """One governance decision; appended, never rewritten."""

    id: str
    timestamp: str
    type: str  # e.g. workshop_review, gardener_override, proposal_resolution
    zone: str
    component_id: str  # lower-case component name
    decision: str
    component_pipeline_id: str | None = None
    agents: tuple[AgentSummary, ...] = ()
    zone_verdict: ZoneVerdict | None = None
    static_analysis: Mapping[str, Any] = field(default_factory=dict)
    actor: str | None = None

    def verdict_map(self) -> dict[str, str]:
        """Stored agentId -> verdict map, enough to re-derive the zone verdict."""
        return {a.agent_id: a.verdict for a in self.agents}

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "timestamp": self.timestamp,
            "type": self.type,
            "zone": self.zone,
            "componentId": self.component_id,
            "componentPipelineId": self.component_pipeline_id,
            "decision": self.decision,
            "agents": {a.agent_id: a.to_dict() for a in self.agents},
            "zoneVerdict": self.zone_verdict.to_dict() if self.zone_verdict else None,
            "staticAnalysis": dict(self.static_analysis),
        }
        if self.actor is not None:
            data["actor"] = self.actor
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DecisionRecord":
        agents = data.get("agents") or {}
        zone_verdict = data.get("zoneVerdict")
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            type=data.get("type", ""),
            zone=data.get("zone", ""),
            component_id=data.get("componentId", ""),
            decision=data.get("decision", ""),
            component_pipeline_id=data.get("componentPipelineId"),
            agents=tuple(
                AgentSummary(
                    agent_id=agent_id,
                    verdict=str(summary.get("verdict", "")),
                    score=int(summary.get("score") or 0),
                    analysis=summary.get("analysis") or "",
                    conditional_approval=summary.get("conditionalApproval"),
                )
                for agent_id, summary in agents.items()
            ),
            zone_verdict=ZoneVerdict.from_dict(zone_verdict) if zone_verdict else None,
            static_analysis=data.get("staticAnalysis") or {},
            actor=data.get("actor"),
        )


@dataclass(frozen=True)
class ChangeRecord:
    """One file modification with its dependency chain."""

    id: str
    timestamp: str
    file: str
    change_type: str  # css-edit | spec-update | token-edit | promotion
    description: str
    breakage_risk: str = "none"  # none | low | medium | high
    decision_id: str | None = None
    upstream: tuple[str, ...] = ()
    downstream: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "source": "change-registry",
            "file": self.file,
            "changeType": self.change_type,
            "description": self.description,
            "breakageRisk": self.breakage_risk,
            "decisionId": self.decision_id,
            "dependencies": {
                "upstream": list(self.upstream),
                "downstream": list(self.downstream),
            },
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ChangeRecord":
        deps = data.get("dependencies") or {}
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            file=data["file"],
            change_type=data.get("changeType", ""),
            description=data.get("description", ""),
            breakage_risk=data.get("breakageRisk", "none"),
            decision_id=data.get("decisionId"),
            upstream=tuple(deps.get("upstream") or ()),
            downstream=tuple(deps.get("downstream") or ()),
        )


@dataclass(frozen=True)
class ActivityRecord:
    """One line of the activity log."""

    timestamp: str
    action: str  # submitted | promoted | seed-vaulted | governance-review | ...
    component_id: str | None
    component_name: str | None
    actor: str
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "action": self.action,
            "componentId": self.component_id,
            "componentName": self.component_name,
            "actor": self.actor,
            "detail": self.detail,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ActivityRecord":
        return cls(
            timestamp=data["timestamp"],
            action=data["action"],
            component_id=data.get("componentId"),
            component_name=data.get("componentName"),
            actor=data.get("actor", ""),
            detail=data.get("detail", ""),
        )


@dataclass(frozen=True)
class Spark:
    """An idea captured before it becomes a nursery component."""

    id: str
    name: str
    description: str
    source: str
    captured_at: str
    status: str = "open"  # open | planted | dismissed

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "source": self.source,
            "capturedAt": self.captured_at,
            "status": self.status,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Spark":
        return cls(
            id=data["id"],
            name=data["name"],
            description=data.get("description", ""),
            source=data.get("source") or "gardener",
            captured_at=data.get("capturedAt", ""),
            status=data.get("status") or "open",
        )


class InitiativeEventType(Enum):
    CREATED = "created"
    ACTIVATED = "activated"
    COMPLETED = "completed"
    ARCHIVED = "archived"
    UPDATED = "updated"


@dataclass(frozen=True)
class InitiativeEvent:
    """
    One status event of a non-component work item.

    Events for the same id accumulate; the current state of an initiative
    is its latest event.
    """

    id: str  # INIT-001
    timestamp: str
    event: InitiativeEventType
    title: str
    category: str  # infrastructure | component | governance | tooling | documentation
    status: str  # proposed | active | completed | archived
    description: str = ""
    origin: str = ""
    links: Mapping[str, Any] = field(default_factory=dict)
    actor: str = "system"
    notes: str = ""

    @property
    def number(self) -> int:
        return int(self.id.removeprefix("INIT-"))

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "event": self.event.value,
            "title": self.title,
            "category": self.category,
            "status": self.status,
            "description": self.description,
            "origin": self.origin,
            "links": dict(self.links),
            "actor": self.actor,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "InitiativeEvent":
        return cls(
            id=data["id"],
            timestamp=data["timestamp"],
            event=InitiativeEventType(data.get("event", "created")),
            title=data.get("title", ""),
            category=data.get("category", ""),
            status=data.get("status", ""),
            description=data.get("description", ""),
            origin=data.get("origin", ""),
            links=data.get("links") or {},
            actor=data.get("actor", "system"),
            notes=data.get("notes", ""),
        )
