"""
Pure pipeline transitions.

Each function takes a PipelineDocument and returns a new one alongside
the tagged outcome. Timestamps are supplied by the caller so the
transitions stay deterministic.
"""

from dataclasses import replace

from verdant.domain.models import (
    ACTIVE_ZONES,
    ZONE_ORDER,
    AgentSnapshot,
    ArchiveResult,
    Component,
    Maturity,
    PipelineDocument,
    PromotionResult,
    Zone,
    ZoneVerdict,
    maturity_for,
    next_zone,
)


def format_component_id(number: int) -> str:
    return f"COMP-{number:03d}"


def _with_zone(
    doc: PipelineDocument, zone: Zone, components: tuple[Component, ...]
) -> PipelineDocument:
    return replace(doc, **{zone.value: components})


def find(doc: PipelineDocument, id_or_name: str) -> Component | None:
    """Exact id or case-insensitive name match across zones, in zone order."""
    for zone in ZONE_ORDER:
        for component in doc.components_in(zone):
            if component.matches(id_or_name):
                return component
    return None


def create(
    doc: PipelineDocument, name: str, category: str, description: str, now: str
) -> tuple[PipelineDocument, Component]:
    """Allocate the next id and plant a draft component in the nursery."""
    component = Component(
        id=format_component_id(doc.next_id),
        name=name,
        category=category,
        description=description,
        zone=Zone.NURSERY,
        maturity=Maturity.DRAFT,
        created_at=now,
        moved_at=now,
    )
    doc = _with_zone(doc, Zone.NURSERY, doc.nursery + (component,))
    return replace(doc, next_id=doc.next_id + 1), component


def promote(
    doc: PipelineDocument, component_id: str, now: str
) -> tuple[PipelineDocument, PromotionResult]:
    """
    Move a component to the next zone.

    Only exact ids are promoted. An absent or already-stable component
    yields a failed PromotionResult and the unchanged document.
    """
    for zone in ACTIVE_ZONES:
        members = doc.components_in(zone)
        current = next((c for c in members if c.id == component_id), None)
        if current is None:
            continue

        target = next_zone(zone)
        assert target is not None  # active zones always have a successor
        moved = replace(
            current, zone=target, maturity=maturity_for(target), moved_at=now
        )
        doc = _with_zone(doc, zone, tuple(c for c in members if c.id != component_id))
        doc = _with_zone(doc, target, doc.components_in(target) + (moved,))
        return doc, PromotionResult(
            success=True, component=moved, from_zone=zone, to_zone=target
        )

    return doc, PromotionResult(
        success=False,
        reason=f"Component {component_id} not found or already stable.",
    )


def archive(
    doc: PipelineDocument, component_id: str
) -> tuple[PipelineDocument, ArchiveResult]:
    """Remove a component from whichever active zone holds it."""
    for zone in ACTIVE_ZONES:
        members = doc.components_in(zone)
        current = next((c for c in members if c.id == component_id), None)
        if current is None:
            continue
        doc = _with_zone(doc, zone, tuple(c for c in members if c.id != component_id))
        return doc, ArchiveResult(success=True, component=current)

    return doc, ArchiveResult(
        success=False,
        reason=f"Component {component_id} not found in an active zone.",
    )


def record_review(
    doc: PipelineDocument,
    component_id: str,
    snapshots: tuple[AgentSnapshot, ...],
    zone_verdict: ZoneVerdict,
    now: str,
) -> tuple[PipelineDocument, Component | None]:
    """Replace a component's per-agent snapshot with the latest cycle's."""
    for zone in ZONE_ORDER:
        members = doc.components_in(zone)
        if not any(c.id == component_id for c in members):
            continue
        updated: Component | None = None
        rebuilt = []
        for c in members:
            if c.id == component_id:
                updated = replace(
                    c,
                    agent_reviews=snapshots,
                    last_reviewed_at=now,
                    last_zone_verdict=zone_verdict,
                )
                rebuilt.append(updated)
            else:
                rebuilt.append(c)
        return _with_zone(doc, zone, tuple(rebuilt)), updated
    return doc, None


def membership_consistent(doc: PipelineDocument) -> bool:
    """True when every component's zone field matches the tuple holding it."""
    return all(c.zone == zone for zone in ZONE_ORDER for c in doc.components_in(zone))
