"""
Review Orchestrator: one full multi-agent review cycle per component.

Flow:
    1. Resolve the component and the effective zone
    2. Load its CSS and spec plus a bounded window of prior decisions
    3. Run the deterministic pre-checks
    4. Ask every reviewer, strictly one after another
    5. Parse each response defensively
    6. Aggregate the verdicts with the zone's approval rule
    7. Append one decision, update the component snapshot, log activity
    8. Return the structured result
"""

import json
import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from verdant.application.ledgers import ActivityLog, DecisionMemory, utc_now
from verdant.application.pipeline_service import GARDENER, PipelineStateMachine
from verdant.domain.agents import REVIEWER_IDS, REVIEWERS, ReviewerProfile, reviewer
from verdant.domain.chat import ChatMessage
from verdant.domain.exceptions import (
    ComponentNotFound,
    CompletionUnavailable,
    PersistenceError,
    UnknownAgent,
    UnknownZone,
)
from verdant.domain.interfaces import CompletionServiceInterface, ProjectFilesInterface
from verdant.domain.models import (
    AgentSnapshot,
    AgentSummary,
    Component,
    ComponentArtifacts,
    DecisionRecord,
    PromotionResult,
    ReviewVerdict,
    StaticFindings,
    Zone,
    ZoneVerdict,
)
from verdant.domain.parsing import ParseFailure, parse_review, to_verdict, unavailable_verdict
from verdant.domain.prompts import (
    build_review_system_prompt,
    build_review_user_prompt,
    tone_block,
)
from verdant.domain.zone_rules import check_zone_approval, rules_for
from verdant.guards import StaticAnalysis
from verdant.schemas import get_review_verdict_schema

logger = logging.getLogger(__name__)

ANALYSIS_SUMMARY_LIMIT = 300

ToneProvider = Callable[[], Mapping[str, Any] | None]


def component_paths(component: Component) -> tuple[str, str]:
    """Project-relative (css, spec) paths of a component's artifacts."""
    base = f"src/components/{component.slug}/{component.slug}"
    return f"{base}.css", f"{base}.spec.json"


def _base36(number: int) -> str:
    digits = "0123456789abcdefghijklmnopqrstuvwxyz"
    out = ""
    while number:
        number, rem = divmod(number, 36)
        out = digits[rem] + out
    return out or "0"


def decision_id(zone: Zone | str, component_name: str) -> str:
    zone_value = zone.value if isinstance(zone, Zone) else zone
    slug = "-".join(component_name.lower().split())
    return f"DEC-{zone_value}-{slug}-{_base36(int(time.time() * 1000))}"


@dataclass(frozen=True)
class ReviewSettings:
    """Tunables of a review cycle."""

    max_tokens: int = 2048
    prior_decision_window: int = 50
    prior_decision_limit: int = 5


@dataclass(frozen=True)
class ReviewResult:
    """Everything one review cycle produced."""

    component: Component
    zone: Zone
    static_analysis: StaticFindings
    agent_reviews: tuple[ReviewVerdict, ...]
    zone_verdict: ZoneVerdict
    decision_id: str
    timestamp: str

    @property
    def overall_verdict(self) -> str:
        return "approved" if self.zone_verdict.passed else "needs-work"

    @property
    def summary(self) -> str:
        return self.zone_verdict.reason

    def to_dict(self) -> dict[str, Any]:
        return {
            "component": self.component.to_dict(),
            "zone": self.zone.value,
            "staticAnalysis": self.static_analysis.to_dict(),
            "agentReviews": {r.agent_id: r.to_dict() for r in self.agent_reviews},
            "zoneVerdict": self.zone_verdict.to_dict(),
            "overallVerdict": self.overall_verdict,
            "summary": self.summary,
            "decisionId": self.decision_id,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class SingleReviewResult:
    """One reviewer's verdict outside a full cycle; nothing is recorded."""

    component: Component
    zone: Zone
    review: ReviewVerdict
    agent_title: str
    timestamp: str

    def to_dict(self) -> dict[str, Any]:
        return {
            **self.review.to_dict(),
            "agentTitle": self.agent_title,
            "component": self.component.to_dict(),
            "zone": self.zone.value,
            "timestamp": self.timestamp,
        }


@dataclass(frozen=True)
class PromoteAndReviewResult:
    promotion: PromotionResult
    review: ReviewResult | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "promotion": self.promotion.to_dict(),
            "review": self.review.to_dict() if self.review else None,
        }


class ReviewOrchestrator:
    """
    Runs review cycles against the completion service.

    Reviewers are invoked sequentially in a fixed order, so persisted
    verdict order is reproducible for identical completion outputs. A
    single reviewer's transport or parse failure degrades to an explicit
    verdict and never aborts the cycle.
    """

    def __init__(
        self,
        pipeline: PipelineStateMachine,
        decisions: DecisionMemory,
        activity: ActivityLog,
        completion: CompletionServiceInterface,
        files: ProjectFilesInterface,
        tone_provider: ToneProvider | None = None,
        static_analysis: StaticAnalysis | None = None,
        settings: ReviewSettings | None = None,
        reviewers: Sequence[ReviewerProfile] = REVIEWERS,
    ):
        """
        Args:
            pipeline: Component state machine
            decisions: Decision ledger (prior context and results)
            activity: Activity ledger
            completion: External completion service
            files: Access to component CSS and spec files
            tone_provider: Returns the current tone configuration (or None)
            static_analysis: Pre-check runner (default StaticAnalysis())
            settings: Token budget and prior-decision window
            reviewers: Reviewer profiles, in invocation order
        """
        self._pipeline = pipeline
        self._decisions = decisions
        self._activity = activity
        self._completion = completion
        self._files = files
        self._tone_provider = tone_provider or (lambda: None)
        self._static = static_analysis or StaticAnalysis()
        self._settings = settings or ReviewSettings()
        self._reviewers = tuple(reviewers)

    # -------------------------------------------------------------------------
    # Inputs
    # -------------------------------------------------------------------------

    def load_artifacts(self, component: Component) -> ComponentArtifacts:
        css_path, spec_path = component_paths(component)
        css = self._files.read_text(css_path)
        spec_text = self._files.read_text(spec_path)
        spec: dict[str, Any] | None = None
        if spec_text is not None:
            try:
                decoded = json.loads(spec_text)
            except json.JSONDecodeError as e:
                logger.warning("Ignoring unreadable spec %s: %s", spec_path, e)
            else:
                spec = decoded if isinstance(decoded, dict) else None
        return ComponentArtifacts(name=component.name, css=css, spec=spec)

    def _resolve(self, component_id: str) -> Component:
        component = self._pipeline.find(component_id)
        if component is None:
            raise ComponentNotFound(component_id)
        return component

    def _prior(self, component: Component) -> list[DecisionRecord]:
        return self._decisions.for_component(
            component.name,
            component.id,
            window=self._settings.prior_decision_window,
            limit=self._settings.prior_decision_limit,
        )

    # -------------------------------------------------------------------------
    # One reviewer
    # -------------------------------------------------------------------------

    def _ask(
        self,
        profile: ReviewerProfile,
        component: Component,
        zone: Zone,
        artifacts: ComponentArtifacts,
        findings: StaticFindings,
        prior: Sequence[DecisionRecord],
        tone_config: Mapping[str, Any] | None,
    ) -> ReviewVerdict:
        system = build_review_system_prompt(
            profile, zone, prior, tone_block(profile.id, tone_config)
        )
        user = build_review_user_prompt(component, zone, artifacts, findings, prior)
        try:
            response = self._completion.complete(
                system,
                [ChatMessage.user(user)],
                response_schema=get_review_verdict_schema(),
                max_tokens=self._settings.max_tokens,
            )
        except CompletionUnavailable as e:
            logger.error("%s review unavailable: %s", profile.title, e)
            return unavailable_verdict(profile.id, str(e))
        except Exception as e:
            # One reviewer's failure must not abort the others.
            logger.exception("%s review failed", profile.title)
            return unavailable_verdict(profile.id, str(e))

        result = parse_review(response.text, profile.id)
        if isinstance(result, ParseFailure):
            logger.warning(
                "%s returned an unparseable response: %s", profile.title, result.reason
            )
        return to_verdict(result, profile.id)

    # -------------------------------------------------------------------------
    # Full cycle
    # -------------------------------------------------------------------------

    def run_review(self, component_id: str, zone: Zone | None = None) -> ReviewResult:
        """
        Run one full review cycle.

        Args:
            component_id: Component id (COMP-001) or name
            zone: Zone to review in (default: the component's current zone)

        Returns:
            ReviewResult with every reviewer's payload and the zone verdict

        Raises:
            ComponentNotFound: If the component does not exist
            UnknownZone: If the zone has no approval rule (e.g. stable)
            PersistenceError: If the decision could not be recorded
        """
        component = self._resolve(component_id)
        effective_zone = zone or component.zone
        if rules_for(effective_zone) is None:
            raise UnknownZone(effective_zone.value)

        logger.info(
            "Starting %s review for %s (%s)",
            effective_zone.value,
            component.name,
            component.id,
        )

        artifacts = self.load_artifacts(component)
        prior = self._prior(component)
        findings = self._static.run(artifacts)
        logger.info(
            "Static analysis complete. Token issues: %d, naming issues: %d",
            len(findings.token_issues),
            len(findings.naming_issues),
        )

        tone_config = self._tone_provider()
        reviews: list[ReviewVerdict] = []
        for profile in self._reviewers:
            logger.info("Running %s review...", profile.title)
            review = self._ask(
                profile, component, effective_zone, artifacts, findings, prior, tone_config
            )
            logger.info(
                "%s: %s (score: %d)", profile.title, review.verdict.value, review.score
            )
            reviews.append(review)

        zone_verdict = check_zone_approval(
            effective_zone, {r.agent_id: r.verdict for r in reviews}
        )
        logger.info(
            "Zone verdict: %s (%s)",
            "PASSED" if zone_verdict.passed else "FAILED",
            zone_verdict.reason,
        )

        timestamp = utc_now()
        record = DecisionRecord(
            id=decision_id(effective_zone, component.name),
            timestamp=timestamp,
            type=f"{effective_zone.value}_review",
            zone=effective_zone.value,
            component_id=component.name.lower(),
            component_pipeline_id=component.id,
            decision=(
                f"{component.name} {effective_zone.value} review: "
                f"{'PASSED' if zone_verdict.passed else 'FAILED'}. {zone_verdict.reason}"
            ),
            agents=tuple(
                AgentSummary(
                    agent_id=r.agent_id,
                    verdict=r.verdict.value,
                    score=r.score,
                    analysis=r.analysis[:ANALYSIS_SUMMARY_LIMIT],
                    conditional_approval=r.conditional_approval,
                )
                for r in reviews
            ),
            zone_verdict=zone_verdict,
            static_analysis={
                "tokenIssues": list(findings.token_issues),
                "tokenPasses": list(findings.token_passes),
                "namingIssues": list(findings.naming_issues),
            },
        )
        # The cycle is complete only once its decision is on the ledger.
        self._decisions.append(record)

        snapshots = tuple(
            AgentSnapshot(
                agent_id=r.agent_id,
                verdict=r.verdict.value,
                score=r.score,
                action=r.rationale.action,
                conditional_approval=r.conditional_approval,
                timestamp=timestamp,
            )
            for r in reviews
        )
        try:
            updated = self._pipeline.record_review(component.id, snapshots, zone_verdict)
        except PersistenceError as e:
            logger.error("Failed to store review snapshot for %s: %s", component.id, e)
            updated = None

        try:
            self._activity.log(
                "governance-review",
                component.id,
                component.name,
                "orchestrator",
                f"{effective_zone.value} review complete: "
                f"{'passed' if zone_verdict.passed else 'failed'}. {zone_verdict.reason}",
            )
        except PersistenceError as e:
            logger.error("Failed to log review activity for %s: %s", component.id, e)

        return ReviewResult(
            component=updated or component,
            zone=effective_zone,
            static_analysis=findings,
            agent_reviews=tuple(reviews),
            zone_verdict=zone_verdict,
            decision_id=record.id,
            timestamp=timestamp,
        )

    # -------------------------------------------------------------------------
    # Variants
    # -------------------------------------------------------------------------

    def run_single_agent_review(
        self, agent_id: str, component_id: str
    ) -> SingleReviewResult:
        """
        Ask one reviewer about a component in its current zone.

        Nothing is written to the ledgers or the pipeline.

        Raises:
            UnknownAgent: If agent_id is not a configured reviewer
            ComponentNotFound: If the component does not exist
        """
        profile = reviewer(agent_id)
        if profile is None:
            raise UnknownAgent(agent_id, REVIEWER_IDS)
        component = self._resolve(component_id)
        zone = component.zone

        artifacts = self.load_artifacts(component)
        prior = self._prior(component)
        findings = self._static.run(artifacts)
        review = self._ask(
            profile, component, zone, artifacts, findings, prior, self._tone_provider()
        )
        return SingleReviewResult(
            component=component,
            zone=zone,
            review=review,
            agent_title=profile.title,
            timestamp=utc_now(),
        )

    def promote_with_review(self, component_id: str) -> PromoteAndReviewResult:
        """Promote, then review in the zone the component just entered."""
        promotion = self._pipeline.promote(component_id)
        if not promotion.success:
            return PromoteAndReviewResult(promotion=promotion)
        assert promotion.to_zone is not None
        if rules_for(promotion.to_zone) is None:
            # Stable has no approval rule to review against.
            return PromoteAndReviewResult(promotion=promotion)
        return PromoteAndReviewResult(
            promotion=promotion,
            review=self.run_review(component_id, zone=promotion.to_zone),
        )

    def override_veto(
        self, component_id: str, reason: str, actor: str = GARDENER
    ) -> DecisionRecord:
        """
        Record the gardener's out-of-band override of a veto.

        Raises:
            ComponentNotFound: If the component does not exist
            PersistenceError: If the decision could not be recorded
        """
        component = self._resolve(component_id)
        record = DecisionRecord(
            id=decision_id(component.zone, component.name),
            timestamp=utc_now(),
            type="gardener_override",
            zone=component.zone.value,
            component_id=component.name.lower(),
            component_pipeline_id=component.id,
            decision=f"{component.name}: veto overridden by {actor}. {reason}".strip(),
            zone_verdict=ZoneVerdict(passed=True, reason=f"Veto overridden: {reason}"),
            actor=actor,
        )
        self._decisions.append(record)
        try:
            self._activity.log(
                "veto-overridden", component.id, component.name, actor, reason
            )
        except PersistenceError as e:
            logger.error("Failed to log override for %s: %s", component.id, e)
        return record
