"""Pure pre-checks over component CSS (no I/O)."""

from verdant.guards.static.aria import aria_pattern
from verdant.guards.static.naming import BemNamingGuard
from verdant.guards.static.tokens import TokenComplianceGuard

__all__ = ["TokenComplianceGuard", "BemNamingGuard", "aria_pattern"]
