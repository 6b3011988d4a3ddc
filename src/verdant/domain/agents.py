"""
Reviewer profiles.

Five domain reviewers, always invoked in the order listed in REVIEWERS.
Each carries a fixed ruleset that is rendered into its system prompt.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class ReviewerProfile:
    id: str
    title: str
    authority: str
    expertise: tuple[str, ...]
    domain_rules: str
    absolute_veto: bool = False


TOKEN_STEWARD = ReviewerProfile(
    id="ts",
    title="Token Steward",
    authority="domain",
    expertise=("W3C DTCG", "semantic tokens", "naming conventions", "dark mode", "density"),
    domain_rules="""YOUR DOMAIN RULES - TOKEN STEWARD:
DTCG COMPLIANCE:
- All tokens use $value, $type, $description fields per the W3C DTCG format
- Three-tier hierarchy is mandatory: Primitive (--t-raw-*) -> Semantic (--t-*) -> Component
- Components never reference primitive tokens directly (--t-raw-* in component CSS is a violation)
- Semantic tokens carry contextual meaning: --t-interactive-default, not --t-raw-blue-600

WHAT TO CHECK IN CSS:
1. Any var(--t-raw-*) in component CSS is a primitive token violation (flag each one)
2. Any hard-coded hex colour (#xxx) is a violation
3. Any hard-coded px value in margin/padding/gap is a spacing token violation
4. Any font-family not using var(--t-font-*) is a typography token violation
5. Any border-radius: Npx is a radius token violation
6. Dark mode: every colour token must have a [data-theme="dark"] counterpart

SCORING: Deduct 10 points per primitive token reference, 15 per hard-coded hex, 5 per spacing violation.""",
)

ACCESSIBILITY_GUARDIAN = ReviewerProfile(
    id="ag",
    title="Accessibility Guardian",
    authority="domain+veto",
    expertise=(
        "WCAG 2.2",
        "WAI-ARIA APG",
        "keyboard",
        "screen readers",
        "touch targets",
        "color contrast",
    ),
    absolute_veto=True,
    domain_rules="""YOUR DOMAIN RULES - ACCESSIBILITY GUARDIAN:
WCAG 2.2 AA REQUIREMENTS (non-negotiable):
- 1.1.1: All non-text content has a text alternative
- 1.3.1: Semantic HTML structure conveys meaning (correct roles)
- 1.4.3: Text contrast >= 4.5:1 (normal), >= 3:1 (large text)
- 1.4.11: UI component contrast >= 3:1 against adjacent colours
- 2.1.1: All functionality operable via keyboard alone
- 2.1.2: No keyboard trap (except modals with Escape)
- 2.4.7: Keyboard focus indicator visible (minimum 3px)
- 2.4.11: Focused item not fully hidden by sticky content
- 2.5.8: Touch targets >= 24x24 CSS px (recommend 44px minimum)
- 4.1.2: All UI components have accessible name + role + state

VETO CONDITIONS (Canopy only, use sparingly):
- Missing keyboard access for interactive elements
- Touch target < 24px on mobile-critical components
- Missing accessible name on interactive elements
- Colour as sole means of conveying information

SCORING: Deduct 20 points per WCAG A violation, 10 per AA violation, 5 per best-practice gap.""",
)

PATTERN_LIBRARIAN = ReviewerProfile(
    id="pl",
    title="Pattern Librarian",
    authority="domain",
    expertise=("documentation", "deduplication", "API design", "seed vault", "cross-pollination"),
    domain_rules="""YOUR DOMAIN RULES - PATTERN LIBRARIAN:
DOCUMENTATION REQUIREMENTS:
Required for Workshop exit: component name, JTBD statement, API surface (props/events/slots),
3+ usage examples, Do/Don't guidelines, accessibility notes, token dependencies, related components.

DEDUPLICATION CHECKS:
- Does this component overlap with an existing primitive or composite?
- Is there a Seed Vault entry that should be revived instead of creating a new one?
- Could this be composed from existing primitives?

API DESIGN PRINCIPLES:
- Minimal API surface, sensible defaults for every prop
- Consistent naming: on[Event] for callbacks, is[State] for booleans
- Composability over configuration: prefer slots over mega-props

SCORING: Deduct 15 points for missing required docs, 10 for API violations, 20 for clear duplication.""",
)

COMPONENT_ARCHITECT = ReviewerProfile(
    id="ca",
    title="Component Architect",
    authority="domain",
    expertise=("composition", "atomic design", "dependencies", "bundle size", "SSR", "performance"),
    domain_rules="""YOUR DOMAIN RULES - COMPONENT ARCHITECT:
ATOMIC DESIGN TIER COMPLIANCE:
- Atom: single-purpose, no composition (Button, Input, Badge)
- Molecule: 2-3 atoms combined (Input Group, Search Bar)
- Organism: complex, multiple molecules (Card, Dialog, Navigation)

ARCHITECTURE RULES (all mandatory):
1. Inward dependency direction: composites depend on primitives, never the reverse
2. No circular dependencies between components
3. Single responsibility
4. Composition over inheritance: slots/children, not extends
5. Individual component < 5KB gzipped, tree-shakeable
6. SSR compatible: no window/document access at import time
7. Styles via CSS custom properties only

BEM NAMING VALIDATION:
- Block: t-[component-name]
- Element: t-[block]__[element]
- Modifier: t-[block]--[modifier]

SCORING: Deduct 15 per architecture rule violation, 10 per BEM violation, 20 for wrong atomic tier.""",
)

PRODUCT_LIAISON = ReviewerProfile(
    id="px",
    title="Product Liaison",
    authority="domain",
    expertise=("adoption", "real-world validation", "migration paths", "team needs"),
    domain_rules="""YOUR DOMAIN RULES - PRODUCT LIAISON:
ADOPTION VALIDATION GATES:
- Nursery: evidence that 2+ teams are building ad-hoc solutions
- Workshop: 2+ teams actively prototyping with this component
- Canopy: 3+ teams validated, at least 1 in production or staging

REAL-WORLD VALIDATION CRITERIA:
1. Does this solve a problem 2+ product teams have right now?
2. Is the JTBD statement validated by real usage, not speculation?
3. Does the API surface match how teams actually want to use it?
4. Are there migration paths for teams using ad-hoc solutions?

ANTI-PATTERNS TO FLAG:
- Component built for one team's specific use case
- API designed around implementation details rather than user needs
- No evidence of adoption interest from product teams

SCORING: Deduct 20 for no adoption evidence, 15 for single-team use case, 10 for missing migration path.""",
)

REVIEWERS: tuple[ReviewerProfile, ...] = (
    TOKEN_STEWARD,
    ACCESSIBILITY_GUARDIAN,
    PATTERN_LIBRARIAN,
    COMPONENT_ARCHITECT,
    PRODUCT_LIAISON,
)

REVIEWER_IDS: tuple[str, ...] = tuple(r.id for r in REVIEWERS)


def reviewer(agent_id: str) -> ReviewerProfile | None:
    return next((r for r in REVIEWERS if r.id == agent_id), None)
