"""
Prompt builders for reviewer and chat completions.

Pure string assembly. Tone content comes from external configuration
and is passed through unchanged.
"""

import json
from collections.abc import Mapping, Sequence
from typing import Any

from verdant.domain.agents import REVIEWERS, ReviewerProfile
from verdant.domain.models import (
    Component,
    ComponentArtifacts,
    DecisionRecord,
    PipelineDocument,
    StaticFindings,
    Zone,
)

CSS_PROMPT_LIMIT = 3000

ZONE_POSTURES: dict[Zone, str] = {
    Zone.NURSERY: (
        "Builder mode. Explore and ask questions. No rejection. Use "
        '"yes, and..." framing. Your job is to observe and help, not block.'
    ),
    Zone.WORKSHOP: (
        "Builder/Optimizer mode. Every critique MUST pair with a constructive "
        "alternative. You may issue needs-work but must specify exactly what "
        "change earns approval."
    ),
    Zone.CANOPY: (
        "Optimizer mode. Full rigor. Unanimous approval required. No shortcuts. "
        "Every finding must be resolved before this component reaches Stable."
    ),
}

PRINCIPLES = """CONSTITUTIONAL PRINCIPLES (immutable):
1. Agentic-First: governance is the architecture, not a feature
2. Function Over Everything: Functional > Affordance > Emotional
3. Alive, Not Static: the system discovers its shape through use
4. Real, Not Theatrical: no simulations presented as real. If a service is unavailable, say so.
5. The Gardener's Authority: you advise, the Gardener decides
6. Earned, Not Granted: maturity through the pipeline, no shortcuts
7. Self-Documenting: every decision is recorded"""

VETO_NOTE = (
    "ABSOLUTE VETO AUTHORITY: You hold absolute veto power in the Canopy zone. "
    "A veto cannot be overridden by any other agent; only the Gardener (human) "
    "can override it. Exercise this power ONLY for genuine accessibility "
    "failures that would cause real harm to users with disabilities."
)

ORPA_GUIDE = """ORPA CYCLE (required for every review):
- Observation: What specific things do you see in the component spec/CSS? Be concrete.
- Reflection: What do these observations mean against YOUR domain rules? Cite specific rules.
- Plan: What specific changes are needed? Be actionable.
- Action: Your verdict and the exact condition that would earn approval (if needs-work).

SCORING GUIDE:
- 90-100: Exemplary, could be a reference implementation
- 75-89: Approved, meets all requirements with minor notes
- 60-74: Needs work, specific issues that must be resolved
- 40-59: Significant issues, multiple domain violations
- 0-39: Fundamental problems, fails core requirements"""

RESPONSE_FORMAT = """RESPONSE FORMAT (JSON only, no markdown fences, no preamble):
{
  "verdict": "approved" | "needs-work" | "vetoed",
  "score": 0-100,
  "orpa": {
    "observation": "Concrete observations about the component",
    "reflection": "What these mean against your domain rules",
    "plan": "Specific changes needed",
    "action": "Your verdict and exact approval condition"
  },
  "analysis": "Full analysis (2-4 paragraphs, domain-specific)",
  "citations": ["DEC-xxx or wiki-key or WCAG-criterion-id"],
  "conditionalApproval": "Exact change that earns approval, or null if approved/vetoed"
}"""


def tone_block(agent_id: str, tone_config: Mapping[str, Any] | None) -> str:
    """Render the opaque tone modifier for one reviewer; empty without config."""
    if not tone_config:
        return ""
    lines = []
    tone = tone_config.get("tone")
    if tone:
        lines.append(f"TONE: {tone}")
    agents = tone_config.get("agents")
    voice = agents.get(agent_id) if isinstance(agents, Mapping) else None
    if isinstance(voice, Mapping):
        voice = voice.get("voice")
    if isinstance(voice, str) and voice:
        lines.append(f"YOUR VOICE: {voice}")
    if not lines:
        return ""
    lines.append("Tone shapes HOW you say things, never WHAT you decide.")
    return "\n".join(lines)


def _prior_lines(prior: Sequence[DecisionRecord], width: int = 120) -> str:
    return "\n".join(f"- [{d.id}] {d.decision[:width]}" for d in prior)


def build_review_system_prompt(
    reviewer: ReviewerProfile,
    zone: Zone,
    prior_decisions: Sequence[DecisionRecord] = (),
    tone: str = "",
) -> str:
    """Role-specific system prompt for one reviewer in one zone."""
    parts = [
        f"You are the {reviewer.title} for a self-governing design system.",
        f"YOUR ROLE: {reviewer.title}\n"
        f"YOUR AUTHORITY: {reviewer.authority}\n"
        f"YOUR EXPERTISE: {', '.join(reviewer.expertise)}",
    ]
    if reviewer.absolute_veto:
        parts.append(VETO_NOTE)
    if tone:
        parts.append(tone)
    parts.append(PRINCIPLES)
    parts.append(
        f"CURRENT ZONE: {zone.value.upper()}\n"
        f"YOUR POSTURE: {ZONE_POSTURES.get(zone, 'Standard review mode')}"
    )
    parts.append(reviewer.domain_rules)
    if prior_decisions:
        parts.append(
            "PRIOR DECISIONS (cite these by ID when relevant):\n"
            + _prior_lines(prior_decisions)
        )
    parts.append(ORPA_GUIDE)
    parts.append(RESPONSE_FORMAT)
    return "\n\n".join(parts)


def build_review_user_prompt(
    component: Component,
    zone: Zone,
    artifacts: ComponentArtifacts,
    findings: StaticFindings,
    prior_decisions: Sequence[DecisionRecord] = (),
) -> str:
    """Component facts, artifacts and pre-check findings for a review."""
    parts = [
        f"Please review the following component for the {zone.value.upper()} zone.",
        f"## Component: {component.name}\n"
        f"- ID: {component.id}\n"
        f"- Category: {component.category}\n"
        f"- Zone: {component.zone.value}\n"
        f"- Maturity: {component.maturity.value}\n"
        f"- JTBD: {component.description}",
    ]

    if artifacts.spec is not None:
        spec_json = json.dumps(artifacts.spec, indent=2)
        parts.append(f"## Component Spec\n```json\n{spec_json}\n```")

    if artifacts.css:
        css = artifacts.css
        if len(css) > CSS_PROMPT_LIMIT:
            css = css[:CSS_PROMPT_LIMIT] + "\n/* ... truncated for review ... */"
        parts.append(f"## Component CSS\n```css\n{css}\n```")

    static_lines = []
    if findings.token_compliance is not None:
        static_lines += [f"- ISSUE: {i}" for i in findings.token_issues]
        static_lines += [f"- PASS: {p}" for p in findings.token_passes]
    static_lines += [f"- NAMING: {i}" for i in findings.naming_issues]
    if findings.aria_pattern is not None:
        p = findings.aria_pattern
        static_lines.append(
            f"- ARIA PATTERN ({p.key}): role={p.role}; keyboard: {p.keyboard}; aria: {p.aria}"
        )
    if not findings.spec_present:
        static_lines.append("- No spec file found")
    if not findings.css_present:
        static_lines.append("- No CSS file found")
    if static_lines:
        parts.append("## Static Analysis\n" + "\n".join(static_lines))

    if prior_decisions:
        lines = [
            f"- [{d.id}] {d.decision} ({d.zone}, {d.timestamp[:10]})"
            for d in prior_decisions
        ]
        parts.append("## Prior Decisions (cite by ID)\n" + "\n".join(lines))

    parts.append(
        "Respond with ONLY valid JSON matching the specified response format. "
        "No markdown fences, no preamble."
    )
    return "\n\n".join(parts)


def build_chat_system_prompt(
    pipeline: PipelineDocument | None = None,
    current_component: Component | None = None,
    wiki: Mapping[str, Mapping[str, Any]] | None = None,
    recent_decisions: Sequence[DecisionRecord] = (),
    current_page: str | None = None,
) -> str:
    """System prompt for the conversational governance assistant."""
    reviewer_lines = "\n".join(
        f"- {r.title} ({r.id}): {', '.join(r.expertise[:3])}"
        + (" - ABSOLUTE VETO in Canopy" if r.absolute_veto else "")
        for r in REVIEWERS
    )
    parts = [
        "You are the governance assistant of a self-governing design system. "
        "You help the Gardener (the human designer) understand the system, run "
        "governance reviews and make decisions about component lifecycle.",
        PRINCIPLES,
        f"THE DOMAIN AGENTS:\n{reviewer_lines}",
        "ZONES:\n"
        "- Nursery: protected incubation, no rejection\n"
        "- Workshop: majority approval\n"
        "- Canopy: unanimous approval, Accessibility Guardian veto active\n"
        "- Stable: terminal\n"
        "- Seed Vault: archive with full context, revivable as a fresh creation",
    ]

    if current_page:
        parts.append(f"CURRENT PAGE: {current_page}")

    if current_component is not None:
        block = (
            f"CURRENT COMPONENT: {current_component.name} "
            f"({current_component.zone.value}, {current_component.maturity.value})\n"
            f"JTBD: {current_component.description}"
        )
        if current_component.agent_reviews:
            summary = ", ".join(
                f"{s.agent_id}: {s.verdict} ({s.score}/100)"
                for s in current_component.agent_reviews
            )
            block += f"\nLAST REVIEW: {summary}"
        parts.append(block)

    if pipeline is not None:
        counts = ", ".join(
            f"{len(pipeline.components_in(z))} in {z.value.capitalize()}" for z in Zone
        )
        block = f"PIPELINE STATUS: {counts}"
        names = [
            f"{c.name} ({c.zone.value})"
            for c in pipeline.all_components()
            if c.zone != Zone.NURSERY
        ]
        if names:
            block += f"\nCOMPONENTS: {', '.join(names)}"
        parts.append(block)

    if wiki:
        lines = [
            f"- {entry.get('term') or key}: {str(entry.get('def') or '')[:100]}"
            for key, entry in list(wiki.items())[:10]
        ]
        parts.append("KEY WIKI ENTRIES (for reference):\n" + "\n".join(lines))

    if recent_decisions:
        lines = [
            f"- [{d.id}] {d.decision[:120]} ({d.zone}, {d.timestamp[:10]})"
            for d in list(recent_decisions)[-5:]
        ]
        parts.append("RECENT DECISIONS:\n" + "\n".join(lines))

    parts.append(
        "TOOLS:\n"
        "Use the read tools to answer with live data. Use governance tools only "
        "when the Gardener asks for an action. Read a file before modifying it; "
        "prefer patch_css for small edits. Components use semantic tokens only "
        "and BEM class names (t-{component}__{element}--{modifier}). "
        "After creating a component's CSS, add its import with "
        "update_terrarium_css. Capture passing ideas with capture_spark and "
        "record the Gardener's exact words with record_gardener_words.\n"
        "If a tool returns an error, report it honestly. Never fabricate "
        "verdicts, scores or tool results."
    )
    return "\n\n".join(parts)
