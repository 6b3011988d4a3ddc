"""
Governance proposals.

Proposals are ephemeral: they live only until their resolution is written
to the decision ledger. Every operation returns a new Proposal.
"""

import math
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any

from verdant.domain.models import Zone, ZoneRuleSet, ZoneVerdict
from verdant.domain.zone_rules import VETO_AGENT_ID, ZONE_RULES, rules_for

GARDENER = "gardener"


class ProposalStatus(Enum):
    PENDING = "pending"
    AUTO_APPROVED = "auto-approved"
    STAGED = "staged"
    REJECTED = "rejected"
    ARCHIVED = "seed-vaulted"


@dataclass(frozen=True)
class Proposal:
    id: str
    timestamp: str
    type: str  # token | lifecycle | spec
    proposer: str
    target_zone: Zone
    rationale: str = ""
    target_id: str | None = None
    approvals_needed: tuple[str, ...] = ()
    approvals_received: tuple[str, ...] = ()
    vetoed_by: str | None = None
    veto_reason: str | None = None
    citations: tuple[str, ...] = ()
    status: ProposalStatus = ProposalStatus.PENDING

    @property
    def rules(self) -> ZoneRuleSet:
        return rules_for(self.target_zone) or ZONE_RULES[Zone.NURSERY]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "type": self.type,
            "proposer": self.proposer,
            "targetZone": self.target_zone.value,
            "targetId": self.target_id,
            "rationale": self.rationale,
            "approvalsNeeded": list(self.approvals_needed),
            "approvalsReceived": list(self.approvals_received),
            "vetoedBy": self.vetoed_by,
            "vetoReason": self.veto_reason,
            "citations": list(self.citations),
            "status": self.status.value,
        }


def _add(approvals: tuple[str, ...], *actors: str) -> tuple[str, ...]:
    merged = list(approvals)
    for actor in actors:
        if actor not in merged:
            merged.append(actor)
    return tuple(merged)


def create_proposal(
    proposal_id: str,
    timestamp: str,
    type: str,
    proposer: str,
    target_zone: Zone,
    rationale: str = "",
    target_id: str | None = None,
    approvals_needed: tuple[str, ...] = (),
    citations: tuple[str, ...] = (),
) -> Proposal:
    """
    Create a proposal; the proposer approves its own proposal.

    In a zone that does not allow rejection every needed approver
    approves automatically.
    """
    proposal = Proposal(
        id=proposal_id,
        timestamp=timestamp,
        type=type,
        proposer=proposer,
        target_zone=target_zone,
        rationale=rationale,
        target_id=target_id,
        approvals_needed=approvals_needed,
        approvals_received=(proposer,),
        citations=citations,
    )
    if not proposal.rules.allow_reject:
        proposal = replace(
            proposal,
            approvals_received=_add(proposal.approvals_received, *approvals_needed),
            status=ProposalStatus.AUTO_APPROVED,
        )
    return proposal


def check_compliance(proposal: Proposal) -> ZoneVerdict:
    """Evaluate a proposal against its target zone's rules."""
    rules = proposal.rules

    if rules.veto_active and proposal.vetoed_by == VETO_AGENT_ID:
        return ZoneVerdict(
            passed=False,
            reason=(
                "Accessibility Guardian has exercised absolute veto. "
                "Only the gardener can override."
            ),
        )

    if rules.unanimous:
        missing = [
            a for a in proposal.approvals_needed if a not in proposal.approvals_received
        ]
        if missing:
            return ZoneVerdict(
                passed=False,
                reason=f"Unanimous approval required. Missing: {', '.join(missing)}",
            )

    if rules.majority:
        count = len(proposal.approvals_received)
        total = len(proposal.approvals_needed)
        needed = math.ceil(total / 2)
        if count < needed:
            return ZoneVerdict(
                passed=False,
                reason=f"Majority required: {count}/{total} (need {needed})",
            )

    return ZoneVerdict(passed=True, reason="Compliance check passed.")


def approve(proposal: Proposal, actor: str) -> Proposal:
    """Record an approval; the proposal is staged once compliant."""
    proposal = replace(
        proposal, approvals_received=_add(proposal.approvals_received, actor)
    )
    if proposal.vetoed_by is None and check_compliance(proposal).passed:
        proposal = replace(proposal, status=ProposalStatus.STAGED)
    return proposal


def veto(proposal: Proposal, agent_id: str, reason: str) -> Proposal:
    """Veto: rejected where rejection is allowed, otherwise archived."""
    status = (
        ProposalStatus.REJECTED if proposal.rules.allow_reject else ProposalStatus.ARCHIVED
    )
    return replace(proposal, vetoed_by=agent_id, veto_reason=reason, status=status)


def override_veto(proposal: Proposal) -> Proposal:
    """Gardener clears a veto; the proposal returns to review."""
    cleared = replace(
        proposal,
        vetoed_by=None,
        veto_reason=None,
        approvals_received=_add(proposal.approvals_received, GARDENER),
    )
    status = (
        ProposalStatus.STAGED
        if check_compliance(cleared).passed
        else ProposalStatus.PENDING
    )
    return replace(cleared, status=status)
