"""
Proposal service.

Holds open proposals in memory and writes each resolution to the
decision ledger. Once resolved, a proposal is forgotten: the ledger
entry is its only durable trace. Rejected (vetoed) proposals are kept
until the gardener overrides the veto or the process exits.
"""

import logging
import random
import string
import time

from verdant.application.ledgers import DecisionMemory, utc_now
from verdant.domain import proposals
from verdant.domain.exceptions import ValidationError
from verdant.domain.models import AgentSummary, DecisionRecord, Zone
from verdant.domain.proposals import Proposal, ProposalStatus

logger = logging.getLogger(__name__)

_RESOLVED = {
    ProposalStatus.AUTO_APPROVED,
    ProposalStatus.STAGED,
    ProposalStatus.REJECTED,
    ProposalStatus.ARCHIVED,
}


def _proposal_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"GOV-{int(time.time() * 1000)}-{suffix}"


class ProposalService:
    def __init__(self, decisions: DecisionMemory):
        self._decisions = decisions
        self._open: dict[str, Proposal] = {}
        self._vetoed: dict[str, Proposal] = {}

    def open_proposals(self) -> list[Proposal]:
        return list(self._open.values())

    def get(self, proposal_id: str) -> Proposal:
        proposal = self._open.get(proposal_id) or self._vetoed.get(proposal_id)
        if proposal is None:
            raise ValidationError(f"Unknown proposal: {proposal_id}")
        return proposal

    def propose(
        self,
        type: str,
        proposer: str,
        target_zone: Zone,
        rationale: str = "",
        target_id: str | None = None,
        approvals_needed: tuple[str, ...] = (),
        citations: tuple[str, ...] = (),
    ) -> Proposal:
        proposal = proposals.create_proposal(
            proposal_id=_proposal_id(),
            timestamp=utc_now(),
            type=type,
            proposer=proposer,
            target_zone=target_zone,
            rationale=rationale,
            target_id=target_id,
            approvals_needed=approvals_needed,
            citations=citations,
        )
        logger.info("Proposal %s opened by %s", proposal.id, proposer)
        return self._settle(proposal)

    def _pending(self, proposal_id: str) -> Proposal:
        if proposal_id in self._vetoed:
            raise ValidationError(
                f"Proposal {proposal_id} is vetoed; only the gardener can override"
            )
        return self.get(proposal_id)

    def approve(self, proposal_id: str, actor: str) -> Proposal:
        return self._settle(proposals.approve(self._pending(proposal_id), actor))

    def veto(self, proposal_id: str, agent_id: str, reason: str) -> Proposal:
        return self._settle(proposals.veto(self._pending(proposal_id), agent_id, reason))

    def override(self, proposal_id: str) -> Proposal:
        """Gardener clears a veto; the override itself is recorded."""
        current = self.get(proposal_id)
        if current.vetoed_by is None:
            raise ValidationError(f"Proposal {proposal_id} has no veto to override")
        proposal = proposals.override_veto(current)
        self._vetoed.pop(proposal_id, None)
        self._decisions.append(
            self._record(proposal, "gardener_override", "Veto overridden by gardener.")
        )
        return self._settle(proposal)

    def _settle(self, proposal: Proposal) -> Proposal:
        if proposal.status not in _RESOLVED:
            self._open[proposal.id] = proposal
            return proposal

        verdict = proposals.check_compliance(proposal)
        self._decisions.append(
            self._record(
                proposal,
                "proposal_resolution",
                f"Proposal {proposal.id} {proposal.status.value}. {verdict.reason}",
            )
        )
        self._open.pop(proposal.id, None)
        if proposal.status is ProposalStatus.REJECTED:
            self._vetoed[proposal.id] = proposal
        logger.info("Proposal %s resolved: %s", proposal.id, proposal.status.value)
        return proposal

    def _record(self, proposal: Proposal, type: str, decision: str) -> DecisionRecord:
        agents = tuple(
            AgentSummary(agent_id=a, verdict="approved", score=0)
            for a in proposal.approvals_received
        )
        if proposal.vetoed_by:
            agents += (
                AgentSummary(
                    agent_id=proposal.vetoed_by,
                    verdict="vetoed",
                    score=0,
                    analysis=proposal.veto_reason or "",
                ),
            )
        return DecisionRecord(
            id=proposal.id,
            timestamp=utc_now(),
            type=type,
            zone=proposal.target_zone.value,
            component_id=(proposal.target_id or "").lower(),
            decision=decision,
            agents=agents,
            zone_verdict=proposals.check_compliance(proposal),
            static_analysis={"proposalType": proposal.type, "rationale": proposal.rationale},
            actor=proposal.proposer,
        )
