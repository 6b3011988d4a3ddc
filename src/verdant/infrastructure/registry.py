"""
Completion Service Registry with Entry Points Discovery.

Provides dynamic completion-service loading via Python entry points
(verdant.completion_services group). External packages can register
services in their pyproject.toml:

    [project.entry-points."verdant.completion_services"]
    MyService = "mypackage.services:MyService"
"""

import logging
from importlib.metadata import entry_points
from typing import Any

from verdant.domain.interfaces import CompletionServiceInterface
from verdant.infrastructure.llm import OpenAICompletionService, ScriptedCompletionService

logger = logging.getLogger(__name__)

ENTRY_POINT_GROUP = "verdant.completion_services"

_BUILTINS: dict[str, type[CompletionServiceInterface]] = {
    "OpenAICompletionService": OpenAICompletionService,
    "ScriptedCompletionService": ScriptedCompletionService,
}


class CompletionServiceRegistry:
    """
    Registry for CompletionServiceInterface implementations.

    Built-in adapters are always available; others are discovered via
    the 'verdant.completion_services' entry point group on first access.

    Example usage:
        service = CompletionServiceRegistry.create(
            "OpenAICompletionService", model="gpt-4o-mini"
        )
    """

    _services: dict[str, type[CompletionServiceInterface]] = dict(_BUILTINS)
    _loaded: bool = False

    @classmethod
    def _load_entry_points(cls) -> None:
        """Load services from entry points (lazy, called once)."""
        if cls._loaded:
            return

        for ep in entry_points(group=ENTRY_POINT_GROUP):
            try:
                cls._services[ep.name] = ep.load()
            except Exception as e:
                logger.warning(
                    "Failed to load completion service '%s' from entry point: %s",
                    ep.name,
                    e,
                )

        cls._loaded = True

    @classmethod
    def register(
        cls, name: str, service_class: type[CompletionServiceInterface]
    ) -> None:
        """
        Manually register a completion service class.

        Args:
            name: Service identifier (e.g., "OpenAICompletionService")
            service_class: Class implementing CompletionServiceInterface
        """
        cls._services[name] = service_class

    @classmethod
    def get(cls, name: str) -> type[CompletionServiceInterface]:
        """
        Raises:
            KeyError: If the service is not registered
        """
        cls._load_entry_points()
        if name not in cls._services:
            available = ", ".join(cls._services) or "(none)"
            raise KeyError(
                f"Completion service '{name}' not found. Available: {available}"
            )
        return cls._services[name]

    @classmethod
    def create(cls, name: str, **config: Any) -> CompletionServiceInterface:
        """
        Create a service instance by name.

        Raises:
            KeyError: If the service is not registered
            TypeError: If config doesn't match the service's config class
        """
        return cls.get(name)(**config)

    @classmethod
    def available(cls) -> list[str]:
        cls._load_entry_points()
        return list(cls._services)

    @classmethod
    def clear(cls) -> None:
        """Reset to the built-in services (useful for testing)."""
        cls._services = dict(_BUILTINS)
        cls._loaded = False
