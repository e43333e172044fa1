"""
Kernel Data Models

Core SQLAlchemy models for users, papers and their versions, reviews,
citations, tags and the audit log.
"""

from paperflow.kernel.models.base import Base, TimestampMixin, utcnow, today
from paperflow.kernel.models.user import User, UserRole, Role
from paperflow.kernel.models.paper import (
    Paper,
    PaperStatus,
    PaperVersion,
    TERMINAL_STATUSES,
)
from paperflow.kernel.models.review import Review, ReviewStatus, MIN_SCORE, MAX_SCORE
from paperflow.kernel.models.citation import Citation, Tag, PaperTag
from paperflow.kernel.models.audit_log import AuditLogEntry, AuditAction

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "utcnow",
    "today",
    # Identity
    "User",
    "UserRole",
    "Role",
    # Papers
    "Paper",
    "PaperStatus",
    "PaperVersion",
    "TERMINAL_STATUSES",
    # Reviews
    "Review",
    "ReviewStatus",
    "MIN_SCORE",
    "MAX_SCORE",
    # Citations & tags
    "Citation",
    "Tag",
    "PaperTag",
    # Audit
    "AuditLogEntry",
    "AuditAction",
]
