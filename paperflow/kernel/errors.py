"""
Error taxonomy for workflow commands.

Every command either returns its payload or raises one of these. None of them
are retried by the engine; callers may retry a ConflictError.
"""

from typing import Optional


class WorkflowError(Exception):
    """Base class for all errors reported by the engine."""

    code = "workflow_error"

    def __init__(self, message: str, *, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def __str__(self) -> str:
        return self.message


class AuthorizationError(WorkflowError):
    """Caller lacks the role required by the operation."""

    code = "not_authorized"


class NotFoundError(WorkflowError):
    """A referenced paper, version, review or user does not exist."""

    code = "not_found"


class ValidationError(WorkflowError):
    """Malformed input: out-of-range score, empty required field."""

    code = "invalid_input"


class InvalidStateError(WorkflowError):
    """Operation is not valid for the entity's current state."""

    code = "invalid_state"


class ConflictError(WorkflowError):
    """A concurrent command claimed the same key first."""

    code = "conflict"


class TransactionTimeoutError(WorkflowError):
    """The transaction did not finish within the configured bound and was rolled back."""

    code = "timeout"
