"""
Domain exceptions for component governance.

NotFound inside the pipeline is a tagged result, and malformed model
output is a ParseFailure value; the exceptions here are for the
conditions that must reach the caller.
"""


class VerdantError(Exception):
    """Base class for all governance errors."""


class ComponentNotFound(VerdantError):
    """Raised when a review precondition cannot resolve the component."""

    def __init__(self, key: str):
        """
        Args:
            key: The id or name that was looked up
        """
        super().__init__(f"Component not found: {key}")
        self.key = key


class UnknownAgent(VerdantError):
    """Raised when a single-agent review names an unconfigured reviewer."""

    def __init__(self, agent_id: str, valid: tuple[str, ...]):
        super().__init__(f"Unknown agent: {agent_id}. Valid: {', '.join(valid)}")
        self.agent_id = agent_id


class UnknownZone(VerdantError):
    """Raised when a review is requested for a zone without an approval rule."""

    def __init__(self, zone: str):
        super().__init__(f"No review rules for zone: {zone}")
        self.zone = zone


class CompletionUnavailable(VerdantError):
    """
    The completion service could not be reached or refused the request.

    Never retried automatically and never converted into a verdict other
    than an explicit unavailable one.
    """


class ValidationError(VerdantError):
    """Rejected input: a disallowed path or malformed tool arguments."""


class PathRejected(ValidationError):
    def __init__(self, path: str, reason: str):
        super().__init__(reason)
        self.path = path
        self.reason = reason


class ToolInputError(ValidationError):
    def __init__(self, tool_name: str, message: str):
        super().__init__(f"Invalid input for {tool_name}: {message}")
        self.tool_name = tool_name


class PersistenceError(VerdantError):
    """A ledger or document write failed; the operation did not complete."""

    def __init__(self, target: str, cause: Exception):
        super().__init__(f"Failed to write {target}: {cause}")
        self.target = target
        self.cause = cause
