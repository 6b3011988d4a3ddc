"""
Token compliance guard.

Pure guard with no I/O: scans component CSS for values that bypass the
semantic token layer.
"""

import re

from verdant.domain.interfaces import GuardInterface
from verdant.domain.models import CheckResult, ComponentArtifacts

_PRIMITIVE_REF = re.compile(r"var\(--t-raw-[^)]+\)")
_HEX_COLOR = re.compile(r"#[0-9a-fA-F]{3,8}(?![0-9a-fA-F])")
_SPACING_PX = re.compile(r"(?:margin|padding|gap)[\w-]*:\s*\d+px")
_FONT_FAMILY = re.compile(r"font-family:(?!\s*var\()[^;]+")
_RADIUS_PX = re.compile(r"border-radius:\s*\d+px")


def _sample(found: list[str]) -> str:
    more = "..." if len(found) > 3 else ""
    return ", ".join(found[:3]) + more


class TokenComplianceGuard(GuardInterface):
    """
    Flags primitive token references and hard-coded literals.

    Each rule reports either an issue (with up to three samples) or a pass.
    A component without CSS yields an empty result.
    """

    def validate(self, artifacts: ComponentArtifacts) -> CheckResult:
        css = artifacts.css
        if not css:
            return CheckResult(check="token-compliance")

        issues: list[str] = []
        passes: list[str] = []

        rules = [
            (_PRIMITIVE_REF, "Primitive token references found", "No direct primitive token references"),
            (_HEX_COLOR, "Hard-coded hex colors found", "No hard-coded hex colors"),
            (_SPACING_PX, "Hard-coded spacing values found", "Spacing uses tokens"),
            (_FONT_FAMILY, "Font families not using tokens", "Font families use tokens"),
            (_RADIUS_PX, "Hard-coded border-radius values found", "Border radius uses tokens"),
        ]
        for pattern, issue, passed in rules:
            found = pattern.findall(css)
            if found:
                issues.append(f"{issue} ({len(found)}): {_sample(found)}")
            else:
                passes.append(passed)

        return CheckResult(
            check="token-compliance", issues=tuple(issues), passes=tuple(passes)
        )
