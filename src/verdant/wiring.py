"""
Composition root.

Assembles a GovernanceContext over the filesystem adapters for one
project root. The only module outside infrastructure that names concrete
adapters.
"""

import logging

from verdant.application.context import GovernanceContext
from verdant.config import VerdantConfig
from verdant.domain.interfaces import CompletionServiceInterface
from verdant.infrastructure import (
    CompletionServiceRegistry,
    FilesystemPipelineStore,
    FilesystemProjectFiles,
    JsonDocumentStore,
    JsonlLedger,
    ProjectPathValidator,
)

logger = logging.getLogger(__name__)


def _completion_for(
    config: VerdantConfig, model: str, max_tokens: int
) -> CompletionServiceInterface:
    if config.completion_backend == "OpenAICompletionService":
        return CompletionServiceRegistry.create(
            config.completion_backend, model=model, max_tokens=max_tokens
        )
    return CompletionServiceRegistry.create(config.completion_backend)


def build_context(
    config: VerdantConfig | None = None,
    completion: CompletionServiceInterface | None = None,
) -> GovernanceContext:
    """
    Build a context backed by the project's data directory.

    Args:
        config: Runtime configuration (default VerdantConfig.from_env())
        completion: Completion service for both reviews and chat; when
            omitted one is created per role from config.completion_backend

    Returns:
        An uninitialized GovernanceContext; call init() before serving
    """
    config = config or VerdantConfig.from_env()

    if completion is not None:
        review_completion = chat_completion = completion
    else:
        review_completion = _completion_for(
            config, config.review_model, config.review_max_tokens
        )
        chat_completion = _completion_for(
            config, config.chat_model, config.chat_max_tokens
        )

    logger.debug(
        "Building context for %s (backend %s)",
        config.project_root,
        config.completion_backend,
    )
    return GovernanceContext(
        config=config,
        pipeline_store=FilesystemPipelineStore(config.pipeline_path),
        decision_store=JsonlLedger(config.decisions_path),
        change_store=JsonlLedger(config.changes_path),
        activity_store=JsonlLedger(config.activity_path),
        initiative_store=JsonlLedger(config.initiatives_path),
        wiki_store=JsonDocumentStore(config.wiki_path),
        tone_store=JsonDocumentStore(config.tone_config_path),
        spark_store=JsonlLedger(config.spark_queue_path),
        memory_store=JsonDocumentStore(config.gardeners_memory_path),
        files=FilesystemProjectFiles(config.project_root),
        paths=ProjectPathValidator(),
        review_completion=review_completion,
        chat_completion=chat_completion,
    )
