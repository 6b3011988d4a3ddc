"""Request bodies of the HTTP surface.

Field names follow the JSON the browser client sends (camelCase); the
Python attributes are snake_case aliases of them.
"""

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

# =============================================================================
# Pipeline
# =============================================================================


class CreateComponentRequest(BaseModel):
    name: str = Field(min_length=1)
    category: str = Field(min_length=1, validation_alias=AliasChoices("category", "type"))
    description: str = Field(min_length=1)


class SeedVaultRequest(BaseModel):
    reason: str = ""


# =============================================================================
# Governance reviews
# =============================================================================


class GovernanceReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    component_id: str = Field(min_length=1, alias="componentId")
    zone: str | None = None


class AgentReviewRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    agent_id: str = Field(min_length=1, alias="agentId")
    component_id: str = Field(min_length=1, alias="componentId")


class OverrideVetoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    component_id: str = Field(min_length=1, alias="componentId")
    reason: str = Field(min_length=1)


# =============================================================================
# Chat
# =============================================================================


class ChatContext(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    current_page: str | None = Field(default=None, alias="currentPage")
    current_component: str | None = Field(default=None, alias="currentComponent")


class ChatRequest(BaseModel):
    """Session mode ({sessionId, message}) or full-history mode ({messages})."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")
    message: str | None = None
    messages: list[dict[str, Any]] | None = None
    context: ChatContext | None = None

    @property
    def session_mode(self) -> bool:
        return bool(self.session_id and self.message)


class ClearChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_id: str | None = Field(default=None, alias="sessionId")


# =============================================================================
# Proposals
# =============================================================================


class ProposalRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str = Field(min_length=1)
    proposer: str = Field(min_length=1)
    target_zone: str = Field(min_length=1, alias="targetZone")
    rationale: str = ""
    target_id: str | None = Field(default=None, alias="targetId")
    approvals_needed: list[str] = Field(default_factory=list, alias="approvalsNeeded")
    citations: list[str] = Field(default_factory=list)


class ProposalApprovalRequest(BaseModel):
    actor: str = Field(min_length=1)


class ProposalVetoRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    agent_id: str = Field(min_length=1, alias="agentId")
    reason: str = Field(min_length=1)
