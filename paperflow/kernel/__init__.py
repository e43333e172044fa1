"""
Kernel Layer

Foundational components every workflow command builds on:
- Version Store (papers, immutable versions, reviews, citations, tags)
- Audit Recorder (append-only change log, same transaction as the change)
- Identity Core (users and their roles)
- Permission Core (role predicates)

Invariants:
- Paper.current_version always names the newest PaperVersion (0 if none)
- Every tracked mutation is audited before commit; audit rows are immutable
"""

from paperflow.kernel.models import (
    User,
    UserRole,
    Role,
    Paper,
    PaperStatus,
    PaperVersion,
    Review,
    ReviewStatus,
    Citation,
    Tag,
    PaperTag,
    AuditLogEntry,
    AuditAction,
)
from paperflow.kernel.errors import (
    WorkflowError,
    AuthorizationError,
    NotFoundError,
    ValidationError,
    InvalidStateError,
    ConflictError,
    TransactionTimeoutError,
)

__all__ = [
    # User & Identity
    "User",
    "UserRole",
    "Role",
    # Papers
    "Paper",
    "PaperStatus",
    "PaperVersion",
    # Reviews
    "Review",
    "ReviewStatus",
    # Citations & tags
    "Citation",
    "Tag",
    "PaperTag",
    # Audit
    "AuditLogEntry",
    "AuditAction",
    # Errors
    "WorkflowError",
    "AuthorizationError",
    "NotFoundError",
    "ValidationError",
    "InvalidStateError",
    "ConflictError",
    "TransactionTimeoutError",
]
