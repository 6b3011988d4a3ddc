"""
Path validation for chat-driven file operations.

Writes go through a narrow allowlist; reads are allowed anywhere under
src/ apart from secrets and vendored code. Governance sources and the
append-only ledgers are never writable.
"""

import posixpath
import re

from verdant.domain.interfaces import PathValidatorInterface
from verdant.domain.models import PathDecision

BLOCKED_PREFIXES: tuple[str, ...] = (
    "src/governance/",
    "src/server/",
    "node_modules/",
)

BLOCKED_FILES: tuple[str, ...] = (
    "src/data/decisions.jsonl",
    "src/data/activity-log.jsonl",
    "src/data/changes.jsonl",
    "src/data/initiatives.jsonl",
    "src/data/pipeline-state.json",
    "src/data/spark-queue.jsonl",
    "src/data/gardeners-memory.json",
    "src/library/storybook.js",
    "src/library/storybook.html",
    "src/library/shell.css",
    ".env",
)

PATCH_ONLY_FILES: tuple[str, ...] = ("src/library/foundation.css",)

_WRITE_ALLOWLIST: tuple[re.Pattern[str], ...] = (
    re.compile(r"^src/components/([a-z][a-z0-9-]*)/\1\.css$"),
    re.compile(r"^src/components/([a-z][a-z0-9-]*)/\1\.spec\.json$"),
    re.compile(r"^src/tokens/[a-z][a-z0-9-]*\.tokens\.json$"),
    re.compile(r"^src/data/wiki\.json$"),
    re.compile(r"^src/library/terrarium\.css$"),
)


def _normalize(rel_path: str) -> str | None:
    """Normalized posix path, or None if it escapes the project root."""
    raw = rel_path.replace("\\", "/")
    if raw.startswith("/") or ".." in raw.split("/"):
        return None
    normalized = posixpath.normpath(raw)
    if normalized.startswith("..") or normalized.startswith("/"):
        return None
    return normalized


_TRAVERSAL = PathDecision(allowed=False, reason="Path traversal is not allowed")


class ProjectPathValidator(PathValidatorInterface):
    """Default allow/deny policy for the conversational file tools."""

    def check_write(self, rel_path: str, mode: str = "full") -> PathDecision:
        normalized = _normalize(rel_path)
        if normalized is None:
            return _TRAVERSAL

        if normalized in BLOCKED_FILES:
            return PathDecision(
                False, f"{normalized} is a protected file and cannot be written"
            )
        for prefix in BLOCKED_PREFIXES:
            if normalized.startswith(prefix):
                return PathDecision(
                    False,
                    f"Files under {prefix} are protected and cannot be written "
                    "by the chat agent",
                )

        if normalized in PATCH_ONLY_FILES:
            if mode == "patch":
                return PathDecision(True)
            name = posixpath.basename(normalized)
            return PathDecision(
                False, f"{name} can only be modified via patch_css, not full overwrite"
            )

        if any(p.match(normalized) for p in _WRITE_ALLOWLIST):
            return PathDecision(True)

        return PathDecision(
            False, f"Path '{normalized}' is not in the write allowlist"
        )

    def check_read(self, rel_path: str) -> PathDecision:
        normalized = _normalize(rel_path)
        if normalized is None:
            return _TRAVERSAL
        if normalized == ".env" or normalized.endswith("/.env"):
            return PathDecision(False, ".env files cannot be read")
        if normalized.startswith("node_modules/"):
            return PathDecision(False, "node_modules cannot be read")
        if normalized.startswith("src/"):
            return PathDecision(True)
        return PathDecision(
            False, f"Path '{normalized}' is outside the readable area (src/)"
        )
