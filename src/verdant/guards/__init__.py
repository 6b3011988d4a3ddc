"""
Deterministic pre-checks run before any reviewer is consulted.

- static/: pure checks over CSS and names
- composite: StaticAnalysis, folding every check into StaticFindings
"""

from verdant.guards.composite import StaticAnalysis
from verdant.guards.static import BemNamingGuard, TokenComplianceGuard, aria_pattern

__all__ = [
    "TokenComplianceGuard",
    "BemNamingGuard",
    "aria_pattern",
    "StaticAnalysis",
]
