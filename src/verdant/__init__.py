"""
verdant: zone-based multi-agent governance for design-system components.

Components travel Nursery -> Workshop -> Canopy -> Stable. In each zone a
panel of reviewer agents judges them and the zone's approval rule turns
their verdicts into a pass or fail. Every decision is recorded.
"""

from verdant.application.context import GovernanceContext
from verdant.config import VerdantConfig
from verdant.domain import (
    Component,
    DecisionRecord,
    PipelineDocument,
    ReviewVerdict,
    Verdict,
    VerdantError,
    Zone,
    ZoneVerdict,
    check_zone_approval,
    parse_review,
)
from verdant.wiring import build_context

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "build_context",
    "GovernanceContext",
    "VerdantConfig",
    "Component",
    "DecisionRecord",
    "PipelineDocument",
    "ReviewVerdict",
    "Verdict",
    "VerdantError",
    "Zone",
    "ZoneVerdict",
    "check_zone_approval",
    "parse_review",
]
