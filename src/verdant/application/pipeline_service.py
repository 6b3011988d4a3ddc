"""
Pipeline state machine service.

Loads the pipeline document, applies a pure transition from
verdant.domain.pipeline, saves the whole document and appends one
activity line. The save and the activity append are not atomic with each
other: a failed save raises and nothing is logged, while a failed
activity append after a successful save is logged and the transition
still stands.
"""

import logging
import threading

from verdant.application.ledgers import ActivityLog, utc_now
from verdant.domain import pipeline
from verdant.domain.exceptions import PersistenceError
from verdant.domain.interfaces import PipelineStoreInterface
from verdant.domain.models import (
    AgentSnapshot,
    ArchiveResult,
    Component,
    PipelineDocument,
    PromotionResult,
    ZoneVerdict,
)

logger = logging.getLogger(__name__)

GARDENER = "gardener"


class PipelineStateMachine:
    """Authoritative component-to-zone assignment."""

    def __init__(
        self,
        store: PipelineStoreInterface,
        activity: ActivityLog,
        lock: "threading.Lock | None" = None,
    ):
        """
        Args:
            store: Pipeline document persistence
            activity: Ledger receiving one line per transition
            lock: Held across each load-transition-save; share one lock
                between every machine writing the same store
        """
        self._store = store
        self._activity = activity
        self._lock = lock or threading.Lock()

    def state(self) -> PipelineDocument:
        return self._store.load()

    def find(self, id_or_name: str) -> Component | None:
        """Exact id or case-insensitive name; None when absent."""
        return pipeline.find(self._store.load(), id_or_name)

    def _log(
        self, action: str, component: Component, actor: str, detail: str
    ) -> None:
        try:
            self._activity.log(action, component.id, component.name, actor, detail)
        except PersistenceError as e:
            # Pipeline document already saved; the transition stands.
            logger.error(
                "Activity not recorded for %s (%s): %s", component.id, action, e
            )

    def create(
        self, name: str, category: str, description: str, actor: str = GARDENER
    ) -> Component:
        with self._lock:
            doc, component = pipeline.create(
                self._store.load(), name, category, description, utc_now()
            )
            self._store.save(doc)
        logger.info("Created %s (%s) in nursery", component.id, component.name)
        self._log(
            "submitted", component, actor, f"Entered Nursery as {category} draft"
        )
        return component

    def promote(self, component_id: str, actor: str = GARDENER) -> PromotionResult:
        """
        Advance a component to the next zone.

        Returns:
            PromotionResult; failure is a value, never an exception

        Raises:
            PersistenceError: If the pipeline document could not be saved
        """
        with self._lock:
            doc, result = pipeline.promote(self._store.load(), component_id, utc_now())
            if not result.success:
                logger.info("Promotion refused: %s", result.reason)
                return result
            self._store.save(doc)

        assert result.component and result.from_zone and result.to_zone
        logger.info(
            "Promoted %s: %s -> %s",
            component_id,
            result.from_zone.value,
            result.to_zone.value,
        )
        self._log(
            "promoted",
            result.component,
            actor,
            f"Moved from {result.from_zone.value} to {result.to_zone.value}",
        )
        return result

    def archive(
        self, component_id: str, reason: str = "", actor: str = GARDENER
    ) -> ArchiveResult:
        """Move a component to the seed vault; the rationale lives in the ledger."""
        with self._lock:
            doc, result = pipeline.archive(self._store.load(), component_id)
            if not result.success:
                return result
            self._store.save(doc)

        assert result.component is not None
        logger.info("Archived %s to seed vault", component_id)
        self._log(
            "seed-vaulted",
            result.component,
            actor,
            reason or "Moved to seed vault",
        )
        return result

    def record_review(
        self,
        component_id: str,
        snapshots: tuple[AgentSnapshot, ...],
        zone_verdict: ZoneVerdict,
    ) -> Component | None:
        """Store the latest per-agent snapshot on the component."""
        with self._lock:
            doc, updated = pipeline.record_review(
                self._store.load(), component_id, snapshots, zone_verdict, utc_now()
            )
            if updated is not None:
                self._store.save(doc)
        return updated
