"""
BEM naming guard.

Pure guard: checks that every t- class selector belongs to the
component's own block.
"""

import re

from verdant.domain.interfaces import GuardInterface
from verdant.domain.models import CheckResult, ComponentArtifacts

_SELECTOR = re.compile(r"\.(t-[a-z][a-z0-9_-]*)")
_BEM = re.compile(r"^t-[a-z][a-z0-9-]*(__[a-z0-9-]+)?(--[a-z0-9-]+)?$")


def block_name(component_name: str) -> str:
    return "t-" + "-".join(component_name.lower().split())


class BemNamingGuard(GuardInterface):
    """Block: t-name, element: t-name__part, modifier: t-name--variant."""

    def validate(self, artifacts: ComponentArtifacts) -> CheckResult:
        if not artifacts.css:
            return CheckResult(check="bem-naming")

        block = block_name(artifacts.name)
        selectors = list(dict.fromkeys(_SELECTOR.findall(artifacts.css)))
        if not selectors:
            return CheckResult(
                check="bem-naming", passes=("No t- selectors to validate",)
            )

        foreign = [
            s
            for s in selectors
            if not (s == block or s.startswith(block + "__") or s.startswith(block + "--"))
        ]
        malformed = [s for s in selectors if s not in foreign and not _BEM.match(s)]

        issues = []
        passes = []
        if foreign:
            issues.append(f"Selectors outside block {block}: {', '.join(foreign)}")
        if malformed:
            issues.append(f"Malformed BEM selectors: {', '.join(malformed)}")
        if not issues:
            passes.append(f"All {len(selectors)} selectors follow the {block} block")
        return CheckResult(check="bem-naming", issues=tuple(issues), passes=tuple(passes))
