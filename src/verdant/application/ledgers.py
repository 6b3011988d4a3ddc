"""
Typed views over the append-only ledgers.

RecordLedger is the one reusable write-ahead-log abstraction: ordered
immutable records plus fold-to-current-state. The decision, change,
activity and initiative ledgers are thin typed views over it.
"""

import logging
import random
import string
import time
from collections import Counter
from collections.abc import Callable, Mapping
from datetime import datetime, timezone
from typing import Any, Generic, TypeVar

from verdant.domain.exceptions import ValidationError
from verdant.domain.interfaces import DocumentStoreInterface, LedgerInterface
from verdant.domain.models import (
    ActivityRecord,
    ChangeRecord,
    DecisionRecord,
    InitiativeEvent,
    InitiativeEventType,
    Spark,
)

logger = logging.getLogger(__name__)

R = TypeVar("R")
S = TypeVar("S")


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


class RecordLedger(Generic[R]):
    """
    Ordered, immutable records over a LedgerInterface.

    Records that were stored but cannot be decoded into R are skipped with
    a warning, the same way the store skips undecodable lines.
    """

    def __init__(
        self,
        store: LedgerInterface,
        decode: Callable[[Mapping[str, Any]], R],
        encode: Callable[[R], dict[str, Any]],
    ):
        """
        Args:
            store: Line-oriented storage
            decode: Builds a record from a stored object
            encode: Serializes a record for storage
        """
        self._store = store
        self._decode = decode
        self._encode = encode

    def append(self, record: R) -> R:
        """
        Raises:
            PersistenceError: If the store could not write the record
        """
        self._store.append(self._encode(record))
        return record

    def records(self) -> list[R]:
        """All decodable records in append order."""
        result: list[R] = []
        for entry in self._store.read():
            try:
                result.append(self._decode(entry))
            except (AttributeError, KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping malformed record %r: %s", entry.get("id"), e)
        return result

    def tail(self, n: int) -> list[R]:
        if n <= 0:
            return []
        return self.records()[-n:]

    def query(self, predicate: Callable[[R], bool]) -> list[R]:
        return [r for r in self.records() if predicate(r)]

    def fold(self, reducer: Callable[[S, R], S], initial: S) -> S:
        """Reduce the records, in append order, to a current state."""
        state = initial
        for record in self.records():
            state = reducer(state, record)
        return state


# =============================================================================
# DECISION MEMORY
# =============================================================================


class DecisionMemory(RecordLedger[DecisionRecord]):
    """Every governance decision with its per-agent context."""

    def __init__(self, store: LedgerInterface):
        super().__init__(store, DecisionRecord.from_dict, DecisionRecord.to_dict)

    def query_by(
        self,
        component_id: str | None = None,
        type: str | None = None,
        zone: str | None = None,
        agent_id: str | None = None,
    ) -> list[DecisionRecord]:
        def matches(d: DecisionRecord) -> bool:
            if component_id and d.component_id != component_id:
                return False
            if type and d.type != type:
                return False
            if zone and d.zone != zone:
                return False
            return not agent_id or agent_id in d.verdict_map()

        return self.query(matches)

    def chain(self, component_id: str) -> list[DecisionRecord]:
        """All decisions for a component, oldest first."""
        return sorted(self.query_by(component_id=component_id), key=lambda d: d.timestamp)

    def latest(self, component_id: str) -> DecisionRecord | None:
        chain = self.chain(component_id)
        return chain[-1] if chain else None

    def for_component(
        self, name: str, pipeline_id: str, window: int = 50, limit: int = 5
    ) -> list[DecisionRecord]:
        """Prior decisions for a component within the most recent window."""
        key = name.lower()
        recent = self.tail(window)
        matching = [
            d
            for d in recent
            if d.component_id.lower() == key or d.component_pipeline_id == pipeline_id
        ]
        return matching[-limit:] if limit > 0 else []


# =============================================================================
# CHANGE REGISTRY
# =============================================================================


def _change_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"CHG-{int(time.time() * 1000)}-{suffix}"


class ChangeRegistry(RecordLedger[ChangeRecord]):
    """File modifications with their dependency chains."""

    def __init__(self, store: LedgerInterface):
        super().__init__(store, ChangeRecord.from_dict, ChangeRecord.to_dict)

    def record(
        self,
        file: str,
        change_type: str,
        description: str,
        breakage_risk: str = "none",
        decision_id: str | None = None,
        upstream: tuple[str, ...] = (),
        downstream: tuple[str, ...] = (),
    ) -> ChangeRecord:
        return self.append(
            ChangeRecord(
                id=_change_id(),
                timestamp=utc_now(),
                file=file,
                change_type=change_type,
                description=description,
                breakage_risk=breakage_risk,
                decision_id=decision_id,
                upstream=upstream,
                downstream=downstream,
            )
        )

    def query_by(
        self, file: str | None = None, change_type: str | None = None
    ) -> list[ChangeRecord]:
        def matches(c: ChangeRecord) -> bool:
            if file and file not in c.file:
                return False
            return not change_type or c.change_type == change_type

        return self.query(matches)

    def trace_breakage(self, file_or_token: str) -> list[ChangeRecord]:
        """Changes that name the file or token upstream, or touched it directly."""
        return self.query(
            lambda c: file_or_token in c.upstream or c.file == file_or_token
        )

    def file_history(self, file: str) -> list[ChangeRecord]:
        return sorted(self.query_by(file=file), key=lambda c: c.timestamp)


# =============================================================================
# ACTIVITY LOG
# =============================================================================


class ActivityLog(RecordLedger[ActivityRecord]):
    """Human-readable feed of everything that happened to components."""

    def __init__(self, store: LedgerInterface):
        super().__init__(store, ActivityRecord.from_dict, ActivityRecord.to_dict)

    def log(
        self,
        action: str,
        component_id: str | None,
        component_name: str | None,
        actor: str,
        detail: str,
    ) -> ActivityRecord:
        return self.append(
            ActivityRecord(
                timestamp=utc_now(),
                action=action,
                component_id=component_id,
                component_name=component_name,
                actor=actor,
                detail=detail,
            )
        )

    def archived(self) -> list[ActivityRecord]:
        """Seed-vault entries, in the order components were archived."""
        return self.query(lambda a: a.action == "seed-vaulted")


# =============================================================================
# SPARK QUEUE
# =============================================================================


def _spark_id() -> str:
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=4))
    return f"SPARK-{int(time.time() * 1000)}-{suffix}"


class SparkQueue(RecordLedger[Spark]):
    """Ideas waiting to be planted in the nursery."""

    def __init__(self, store: LedgerInterface):
        super().__init__(store, Spark.from_dict, Spark.to_dict)

    def capture(self, name: str, description: str, source: str = "gardener") -> Spark:
        return self.append(
            Spark(
                id=_spark_id(),
                name=name,
                description=description,
                source=source or "gardener",
                captured_at=utc_now(),
            )
        )

    def open_sparks(self) -> list[Spark]:
        return self.query(lambda s: s.status == "open")


# =============================================================================
# INITIATIVE REGISTRY
# =============================================================================


def _id_order(event: InitiativeEvent) -> tuple[int, int, str]:
    """INIT-NNN ids by number; any other id sorts after them by text."""
    try:
        return (0, event.number, event.id)
    except ValueError:
        return (1, 0, event.id)


def _latest_per_id(
    state: dict[str, InitiativeEvent], event: InitiativeEvent
) -> dict[str, InitiativeEvent]:
    current = state.get(event.id)
    if current is None or event.timestamp >= current.timestamp:
        state[event.id] = event
    return state


class InitiativeRegistry(RecordLedger[InitiativeEvent]):
    """
    Non-component work items as an event stream.

    Status changes append a new event with the same id; the current
    state of an initiative is its latest event.
    """

    def __init__(self, store: LedgerInterface):
        super().__init__(store, InitiativeEvent.from_dict, InitiativeEvent.to_dict)

    def _next_id(self) -> str:
        numbers = []
        for event in self.records():
            try:
                numbers.append(event.number)
            except ValueError:
                continue
        return f"INIT-{max(numbers, default=0) + 1:03d}"

    def record(
        self,
        event: InitiativeEventType,
        title: str,
        category: str,
        status: str,
        initiative_id: str | None = None,
        description: str = "",
        origin: str = "",
        links: Mapping[str, Any] | None = None,
        actor: str = "system",
        notes: str = "",
    ) -> InitiativeEvent:
        """
        Append an initiative event.

        Created events without an id get the next INIT-NNN id.

        Raises:
            ValidationError: If a non-created event has no id
        """
        if initiative_id is None:
            if event != InitiativeEventType.CREATED:
                raise ValidationError(
                    "Initiative ID is required for non-created events"
                )
            initiative_id = self._next_id()
        return self.append(
            InitiativeEvent(
                id=initiative_id,
                timestamp=utc_now(),
                event=event,
                title=title,
                category=category,
                status=status,
                description=description,
                origin=origin,
                links=links
                or {
                    "decisions": [],
                    "changes": [],
                    "wiki": [],
                    "components": [],
                    "initiatives": [],
                },
                actor=actor,
                notes=notes,
            )
        )

    def current(
        self, status: str | None = None, category: str | None = None
    ) -> list[InitiativeEvent]:
        """Current state per initiative, ordered by id number."""
        latest = self.fold(_latest_per_id, {})
        result = sorted(latest.values(), key=_id_order)
        if status:
            result = [e for e in result if e.status == status]
        if category:
            result = [e for e in result if e.category == category]
        return result

    def history(self, initiative_id: str) -> list[InitiativeEvent]:
        return sorted(
            self.query(lambda e: e.id == initiative_id), key=lambda e: e.timestamp
        )

    def summary(self) -> dict[str, Any]:
        current = self.current()
        return {
            "total": len(current),
            "byStatus": dict(Counter(e.status for e in current)),
            "byCategory": dict(Counter(e.category for e in current)),
        }


# =============================================================================
# LIVING REFERENCE
# =============================================================================


class LivingReference:
    """Wiki of terms and patterns, kept as one JSON document."""

    def __init__(self, store: DocumentStoreInterface):
        self._store = store

    def entries(self) -> dict[str, dict[str, Any]]:
        return self._store.load() or {}

    def add(
        self,
        key: str,
        term: str,
        category: str,
        definition: str,
        source: str,
        rule: str | None = None,
    ) -> dict[str, Any]:
        """Add or replace an entry; returns the stored entry."""
        wiki = self.entries()
        entry: dict[str, Any] = {
            "term": term,
            "category": category,
            "def": definition,
            "source": source,
        }
        if rule:
            entry["rule"] = rule
        entry["updatedAt"] = utc_now()
        wiki[key] = entry
        self._store.save(wiki)
        return entry

    def lookup(self, key: str) -> dict[str, Any] | None:
        return self.entries().get(key)

    def search(self, query: str) -> list[dict[str, Any]]:
        q = query.lower()
        return [
            {"key": key, **entry}
            for key, entry in self.entries().items()
            if any(
                q in str(entry.get(field) or "").lower()
                for field in ("term", "def", "category")
            )
        ]

    def by_category(self) -> dict[str, list[dict[str, Any]]]:
        grouped: dict[str, list[dict[str, Any]]] = {}
        for key, entry in self.entries().items():
            grouped.setdefault(entry.get("category") or "Uncategorized", []).append(
                {"key": key, **entry}
            )
        return grouped


# =============================================================================
# GARDENER'S MEMORY
# =============================================================================

RECENT_DECISIONS_KEPT = 20


class GardenersMemory:
    """
    What the gardener said and decided, carried across sessions.

    One JSON document: recent decision summaries, current focus areas and
    the gardener's exact words keyed by topic. Every save stamps
    lastSession and bumps sessionCount.
    """

    def __init__(self, store: DocumentStoreInterface):
        self._store = store

    def load(self) -> dict[str, Any]:
        memory: dict[str, Any] = {
            "lastSession": None,
            "recentDecisions": [],
            "openSparks": [],
            "currentFocus": [],
            "gardenersWords": {},
            "sessionCount": 0,
        }
        memory.update(self._store.load() or {})
        return memory

    def _save(self, memory: dict[str, Any]) -> None:
        memory["lastSession"] = utc_now()
        memory["sessionCount"] = int(memory.get("sessionCount") or 0) + 1
        self._store.save(memory)

    def record_words(self, topic: str, words: str) -> dict[str, Any]:
        """
        Store the gardener's exact words on a topic, replacing earlier ones.

        Raises:
            PersistenceError: If the document could not be written
        """
        memory = self.load()
        entry = {"words": words, "recordedAt": utc_now()}
        memory["gardenersWords"] = {**memory["gardenersWords"], topic: entry}
        self._save(memory)
        return entry

    def words(self) -> dict[str, dict[str, Any]]:
        words: dict[str, dict[str, Any]] = self.load()["gardenersWords"]
        return words

    def add_recent_decision(self, summary: str, decision_id: str) -> None:
        memory = self.load()
        recent = [
            {"summary": summary, "decisionId": decision_id, "timestamp": utc_now()},
            *memory["recentDecisions"],
        ]
        memory["recentDecisions"] = recent[:RECENT_DECISIONS_KEPT]
        self._save(memory)

    def set_focus(self, focus_areas: list[str]) -> None:
        memory = self.load()
        memory["currentFocus"] = list(focus_areas)
        self._save(memory)

    def session_brief(self) -> str:
        memory = self.load()
        lines: list[str] = []
        if memory["lastSession"]:
            lines.append(
                f"Last session: {memory['lastSession']} (session #{memory['sessionCount']})"
            )
        if memory["currentFocus"]:
            lines.append(f"Current focus: {', '.join(memory['currentFocus'])}")
        if memory["recentDecisions"]:
            lines.append("Recent decisions:")
            lines.extend(
                f"  - {d['summary']} [{d['decisionId']}]"
                for d in memory["recentDecisions"][:5]
            )
        if memory["gardenersWords"]:
            lines.append("Gardener's words on:")
            lines.extend(
                f'  - {topic}: "{record["words"]}"'
                for topic, record in memory["gardenersWords"].items()
            )
        return "\n".join(lines) or "No previous session data. This is the first session."
