"""
Zone approval rules.

Pure and deterministic: the outcome depends only on the zone and the
agentId -> verdict map, so any stored decision can be re-derived at audit
time from its verdict map alone.
"""

import math
from collections.abc import Mapping

from verdant.domain.models import Verdict, Zone, ZoneRuleSet, ZoneVerdict

VETO_AGENT_ID = "ag"

ZONE_RULES: dict[Zone, ZoneRuleSet] = {
    Zone.NURSERY: ZoneRuleSet(
        zone=Zone.NURSERY,
        label="Nursery",
        mode="builder_only",
        allow_reject=False,
        majority=False,
        unanimous=False,
        veto_active=False,
        h_index=0.0,
        time_box="2 sprints",
        exit_criteria="Articulate JTBD, the pain it addresses, and one concrete path forward",
    ),
    Zone.WORKSHOP: ZoneRuleSet(
        zone=Zone.WORKSHOP,
        label="Workshop",
        mode="builder_optimizer",
        allow_reject=True,
        majority=True,
        unanimous=False,
        veto_active=False,
        h_index=0.3,
        time_box="1-3 sprints",
        exit_criteria="Formal spec completed. TS + AG + CA have reviewed.",
    ),
    Zone.CANOPY: ZoneRuleSet(
        zone=Zone.CANOPY,
        label="Canopy",
        mode="optimizer",
        allow_reject=True,
        majority=False,
        unanimous=True,
        veto_active=True,
        h_index=1.0,
        time_box="2-4 sprints",
        exit_criteria="All agents approve + gardener approval + 2+ team validations.",
    ),
}


def rules_for(zone: Zone | str) -> ZoneRuleSet | None:
    """Look up a zone's rule set; None for stable or unknown zones."""
    try:
        key = zone if isinstance(zone, Zone) else Zone(zone)
    except ValueError:
        return None
    return ZONE_RULES.get(key)


def _value(verdict: Verdict | str) -> str:
    return verdict.value if isinstance(verdict, Verdict) else verdict


def check_zone_approval(
    zone: Zone | str, verdicts: Mapping[str, Verdict | str]
) -> ZoneVerdict:
    """
    Decide whether a set of verdicts meets the zone's approval threshold.

    Evaluated in order: veto, permissive zone, unanimity, majority.
    Unavailable verdicts count as non-approval.

    Args:
        zone: Zone (or its string value) the verdicts were issued in
        verdicts: agentId -> verdict, in reviewer order

    Returns:
        ZoneVerdict with pass/fail and a human-readable reason
    """
    rules = rules_for(zone)
    if rules is None:
        name = zone.value if isinstance(zone, Zone) else zone
        return ZoneVerdict(passed=False, reason=f"Unknown zone: {name}")

    values = {agent_id: _value(v) for agent_id, v in verdicts.items()}
    approved = [a for a, v in values.items() if v == Verdict.APPROVED.value]

    if rules.veto_active and values.get(VETO_AGENT_ID) == Verdict.VETOED.value:
        return ZoneVerdict(
            passed=False,
            reason="Accessibility Guardian has exercised absolute veto.",
        )

    if not rules.allow_reject:
        return ZoneVerdict(
            passed=True, reason="Nursery: all ideas accepted for exploration."
        )

    if rules.unanimous:
        missing = [a for a, v in values.items() if v != Verdict.APPROVED.value]
        if missing:
            return ZoneVerdict(
                passed=False,
                reason=f"Unanimous required. Missing approval from: {', '.join(missing)}",
            )
        return ZoneVerdict(passed=True, reason="Unanimous approval achieved.")

    if rules.majority:
        total = len(values)
        needed = math.ceil(total / 2)
        if len(approved) >= needed:
            return ZoneVerdict(
                passed=True, reason=f"Majority achieved: {len(approved)}/{total}"
            )
        return ZoneVerdict(
            passed=False,
            reason=f"Majority required: {len(approved)}/{total} (need {needed})",
        )

    return ZoneVerdict(passed=True, reason="No approval threshold defined.")
