"""
Pydantic schemas for command input and result payloads.
"""

from paperflow.schemas.paper import (
    PaperVersionSubmit,
    PaperResponse,
    PaperVersionResponse,
    SubmissionResult,
    CurrentVersionRow,
)
from paperflow.schemas.review import ReviewOutcome, ReviewResponse
from paperflow.schemas.reports import SearchHit, CitationCount, ReviewerActivity
from paperflow.schemas.audit import AuditEntryResponse

__all__ = [
    # Paper
    "PaperVersionSubmit",
    "PaperResponse",
    "PaperVersionResponse",
    "SubmissionResult",
    "CurrentVersionRow",
    # Review
    "ReviewOutcome",
    "ReviewResponse",
    # Reports
    "SearchHit",
    "CitationCount",
    "ReviewerActivity",
    # Audit
    "AuditEntryResponse",
]
