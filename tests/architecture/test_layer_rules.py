"""
Hexagonal Architecture Layer Rules.

Permanent tests enforcing dependency direction between layers:
- Domain must not access Application, Infrastructure or the API
- Application must not access Infrastructure or the API
- Infrastructure must not access Application

These rules use PyTestArch's LayerRule API for declarative enforcement.
"""

import pytest
from pytestarch import LayerRule


def _must_not_access(layers, source: str, target: str) -> LayerRule:
    return (
        LayerRule()
        .based_on(layers)
        .layers_that()
        .are_named(source)
        .should_not()
        .access_layers_that()
        .are_named(target)
    )


class TestHexagonalLayerRules:
    """Permanent architecture rules enforcing Hexagonal architecture."""

    @pytest.mark.parametrize("target", ["application", "infrastructure", "api"])
    def test_domain_is_pure(self, evaluable, layers, target):
        """Domain knows nothing about orchestration, adapters or HTTP."""
        _must_not_access(layers, "domain", target).assert_applies(evaluable)

    def test_application_does_not_access_infrastructure(self, evaluable, layers):
        """Application depends on domain ports, not concrete adapters."""
        _must_not_access(layers, "application", "infrastructure").assert_applies(
            evaluable
        )

    def test_application_does_not_access_api(self, evaluable, layers):
        _must_not_access(layers, "application", "api").assert_applies(evaluable)

    def test_infrastructure_does_not_access_application(self, evaluable, layers):
        """Adapters implement ports; they never call services."""
        _must_not_access(layers, "infrastructure", "application").assert_applies(
            evaluable
        )
