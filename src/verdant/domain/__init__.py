"""
Domain layer for component governance.

Contains the zone rules, pipeline transitions, verdict parsing and the
ports. No external dependencies.
"""

from verdant.domain.exceptions import (
    CompletionUnavailable,
    ComponentNotFound,
    PathRejected,
    PersistenceError,
    ToolInputError,
    UnknownAgent,
    UnknownZone,
    ValidationError,
    VerdantError,
)
from verdant.domain.interfaces import (
    CompletionServiceInterface,
    DocumentStoreInterface,
    GuardInterface,
    LedgerInterface,
    PathValidatorInterface,
    PipelineStoreInterface,
    ProjectFilesInterface,
)
from verdant.domain.models import (
    ActivityRecord,
    ChangeRecord,
    Component,
    DecisionRecord,
    InitiativeEvent,
    Maturity,
    PipelineDocument,
    PromotionResult,
    ReviewVerdict,
    Spark,
    Verdict,
    Zone,
    ZoneVerdict,
)
from verdant.domain.parsing import ParsedVerdict, ParseFailure, parse_review
from verdant.domain.zone_rules import ZONE_RULES, check_zone_approval

__all__ = [
    # Models
    "ActivityRecord",
    "ChangeRecord",
    "Component",
    "DecisionRecord",
    "InitiativeEvent",
    "Maturity",
    "PipelineDocument",
    "PromotionResult",
    "ReviewVerdict",
    "Spark",
    "Verdict",
    "Zone",
    "ZoneVerdict",
    # Rules and parsing
    "ZONE_RULES",
    "check_zone_approval",
    "parse_review",
    "ParsedVerdict",
    "ParseFailure",
    # Interfaces
    "CompletionServiceInterface",
    "DocumentStoreInterface",
    "GuardInterface",
    "LedgerInterface",
    "PathValidatorInterface",
    "PipelineStoreInterface",
    "ProjectFilesInterface",
    # Exceptions
    "VerdantError",
    "ComponentNotFound",
    "UnknownAgent",
    "UnknownZone",
    "CompletionUnavailable",
    "ValidationError",
    "PathRejected",
    "ToolInputError",
    "PersistenceError",
]
