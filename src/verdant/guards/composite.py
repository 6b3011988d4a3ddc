"""
Composition of pre-checks.

StaticAnalysis runs every guard (no short-circuit: all findings are
folded into the review) and adds the ARIA lookup and presence flags.
"""

from verdant.domain.interfaces import GuardInterface
from verdant.domain.models import ComponentArtifacts, StaticFindings
from verdant.guards.static import BemNamingGuard, TokenComplianceGuard, aria_pattern


class StaticAnalysis:
    """Runs the token and naming guards over a component's artifacts."""

    def __init__(
        self,
        token_guard: GuardInterface | None = None,
        naming_guard: GuardInterface | None = None,
    ):
        """
        Args:
            token_guard: Token compliance check (default TokenComplianceGuard)
            naming_guard: Selector naming check (default BemNamingGuard)
        """
        self.token_guard = token_guard or TokenComplianceGuard()
        self.naming_guard = naming_guard or BemNamingGuard()

    def run(self, artifacts: ComponentArtifacts) -> StaticFindings:
        css_present = bool(artifacts.css)
        return StaticFindings(
            token_compliance=self.token_guard.validate(artifacts) if css_present else None,
            naming=self.naming_guard.validate(artifacts) if css_present else None,
            aria_pattern=aria_pattern(artifacts.name),
            spec_present=artifacts.spec is not None,
            css_present=css_present,
        )
