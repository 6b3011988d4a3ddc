"""
Application layer: the services that orchestrate the domain.

- ledgers: typed views over the append-only ledgers
- pipeline_service: zone transitions plus activity lines
- review_orchestrator: multi-agent review cycles
- proposal_service: governance proposals and their resolutions
- tool_registry / tool_loop: the chat assistant's tools and bounded loop
- sessions: in-memory chat sessions
- context: GovernanceContext, owner of all of the above
"""

from verdant.application.context import GovernanceContext
from verdant.application.ledgers import (
    ActivityLog,
    ChangeRegistry,
    DecisionMemory,
    GardenersMemory,
    InitiativeRegistry,
    LivingReference,
    RecordLedger,
    SparkQueue,
)
from verdant.application.pipeline_service import PipelineStateMachine
from verdant.application.proposal_service import ProposalService
from verdant.application.review_orchestrator import (
    PromoteAndReviewResult,
    ReviewOrchestrator,
    ReviewResult,
    ReviewSettings,
    SingleReviewResult,
)
from verdant.application.sessions import Session, SessionStore
from verdant.application.tool_loop import ChatLoop
from verdant.application.tool_registry import TOOL_SPECS, ToolExecutor, ToolOutcome

__all__ = [
    "GovernanceContext",
    "RecordLedger",
    "ActivityLog",
    "ChangeRegistry",
    "DecisionMemory",
    "GardenersMemory",
    "SparkQueue",
    "InitiativeRegistry",
    "LivingReference",
    "PipelineStateMachine",
    "ProposalService",
    "ReviewOrchestrator",
    "ReviewResult",
    "ReviewSettings",
    "SingleReviewResult",
    "PromoteAndReviewResult",
    "Session",
    "SessionStore",
    "ChatLoop",
    "TOOL_SPECS",
    "ToolExecutor",
    "ToolOutcome",
]
