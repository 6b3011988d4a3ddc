"""
Governance context.

The one object that owns the long-lived pieces of a running system:
configuration, stores, completion services, tone-config cache and the
chat session table. Services are cheap and built on demand from it.
"""

import logging
import threading
from typing import Any

from verdant.application.ledgers import (
    ActivityLog,
    ChangeRegistry,
    DecisionMemory,
    GardenersMemory,
    InitiativeRegistry,
    LivingReference,
    SparkQueue,
)
from verdant.application.pipeline_service import PipelineStateMachine
from verdant.application.proposal_service import ProposalService
from verdant.application.review_orchestrator import ReviewOrchestrator, ReviewSettings
from verdant.application.sessions import SessionStore
from verdant.application.tool_loop import ChatLoop
from verdant.application.tool_registry import ToolExecutor
from verdant.config import VerdantConfig
from verdant.domain.interfaces import (
    CompletionServiceInterface,
    DocumentStoreInterface,
    LedgerInterface,
    PathValidatorInterface,
    PipelineStoreInterface,
    ProjectFilesInterface,
)
from verdant.domain.prompts import build_chat_system_prompt
from verdant.guards import StaticAnalysis

logger = logging.getLogger(__name__)

RECENT_DECISIONS_IN_CHAT = 5


class GovernanceContext:
    """
    Composition of everything a request needs.

    All collaborators are injected; see verdant.wiring.build_context for
    the filesystem-backed assembly.
    """

    def __init__(
        self,
        config: VerdantConfig,
        pipeline_store: PipelineStoreInterface,
        decision_store: LedgerInterface,
        change_store: LedgerInterface,
        activity_store: LedgerInterface,
        initiative_store: LedgerInterface,
        wiki_store: DocumentStoreInterface,
        tone_store: DocumentStoreInterface,
        spark_store: LedgerInterface,
        memory_store: DocumentStoreInterface,
        files: ProjectFilesInterface,
        paths: PathValidatorInterface,
        review_completion: CompletionServiceInterface,
        chat_completion: CompletionServiceInterface | None = None,
        sessions: SessionStore | None = None,
    ):
        """
        Args:
            config: Runtime configuration
            pipeline_store: Pipeline document persistence
            decision_store: Decision ledger storage
            change_store: Change ledger storage
            activity_store: Activity ledger storage
            initiative_store: Initiative ledger storage
            wiki_store: Living reference document
            tone_store: Gardener tone configuration document
            spark_store: Spark queue storage
            memory_store: Gardener's memory document
            files: Project file access (component CSS, specs, tokens)
            paths: Read/write policy for tool file access
            review_completion: Completion service used by reviewers
            chat_completion: Completion service used by the chat loop
                (defaults to review_completion)
            sessions: Chat session table
        """
        self.config = config
        self.pipeline_store = pipeline_store
        self.files = files
        self.paths = paths
        self.review_completion = review_completion
        self.chat_completion = chat_completion or review_completion
        self.sessions = sessions or SessionStore(
            ttl=config.session_ttl_seconds,
            sweep_interval=config.session_sweep_seconds,
        )

        self.decisions = DecisionMemory(decision_store)
        self.changes = ChangeRegistry(change_store)
        self.activity = ActivityLog(activity_store)
        self.initiatives = InitiativeRegistry(initiative_store)
        self.wiki = LivingReference(wiki_store)
        self.sparks = SparkQueue(spark_store)
        self.memory = GardenersMemory(memory_store)
        self.proposals = ProposalService(self.decisions)
        self.static_analysis = StaticAnalysis()

        self._tone_store = tone_store
        self._tone_cache: dict[str, Any] | None = None
        self._tone_loaded = False
        self._tone_lock = threading.Lock()
        self._pipeline_lock = threading.Lock()

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    def init(self) -> None:
        """Ensure the data directory exists and start the session sweeper."""
        assert self.config.data_dir is not None
        self.config.data_dir.mkdir(parents=True, exist_ok=True)
        self.sessions.start()
        logger.info("Governance context ready (data: %s)", self.config.data_dir)

    def invalidate(self) -> None:
        """Drop the cached tone configuration; the next read reloads it."""
        with self._tone_lock:
            self._tone_cache = None
            self._tone_loaded = False

    def teardown(self) -> None:
        self.sessions.stop()
        self.sessions.clear_all()
        logger.info("Governance context stopped")

    # =========================================================================
    # TONE CONFIGURATION
    # =========================================================================

    def tone_config(self) -> dict[str, Any] | None:
        with self._tone_lock:
            if not self._tone_loaded:
                self._tone_cache = self._tone_store.load()
                self._tone_loaded = True
            return self._tone_cache

    def save_tone_config(self, document: dict[str, Any]) -> None:
        """
        Raises:
            PersistenceError: If the document could not be written
        """
        self._tone_store.save(document)
        self.invalidate()

    # =========================================================================
    # SERVICES
    # =========================================================================

    def pipeline(self) -> PipelineStateMachine:
        return PipelineStateMachine(
            self.pipeline_store, self.activity, lock=self._pipeline_lock
        )

    def orchestrator(self) -> ReviewOrchestrator:
        return ReviewOrchestrator(
            pipeline=self.pipeline(),
            decisions=self.decisions,
            activity=self.activity,
            completion=self.review_completion,
            files=self.files,
            tone_provider=self.tone_config,
            static_analysis=self.static_analysis,
            settings=ReviewSettings(
                max_tokens=self.config.review_max_tokens,
                prior_decision_window=self.config.prior_decision_window,
                prior_decision_limit=self.config.prior_decision_limit,
            ),
        )

    def tool_executor(self) -> ToolExecutor:
        return ToolExecutor(
            pipeline=self.pipeline(),
            orchestrator=self.orchestrator(),
            decisions=self.decisions,
            changes=self.changes,
            activity=self.activity,
            wiki=self.wiki,
            sparks=self.sparks,
            memory=self.memory,
            files=self.files,
            paths=self.paths,
            static_analysis=self.static_analysis,
        )

    def chat_system_prompt(
        self,
        current_page: str | None = None,
        current_component: str | None = None,
    ) -> str:
        state = self.pipeline_store.load()
        component = self.pipeline().find(current_component) if current_component else None
        return build_chat_system_prompt(
            pipeline=state,
            current_component=component,
            wiki=self.wiki.entries(),
            recent_decisions=self.decisions.tail(RECENT_DECISIONS_IN_CHAT),
            current_page=current_page,
        )

    def chat_loop(self, system_prompt: str) -> ChatLoop:
        return ChatLoop(
            completion=self.chat_completion,
            executor=self.tool_executor(),
            system_prompt=system_prompt,
            max_turns=self.config.max_tool_turns,
            max_tokens=self.config.chat_max_tokens,
        )
