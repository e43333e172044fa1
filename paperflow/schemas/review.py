"""
Review schemas.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from paperflow.kernel.models.review import MAX_SCORE, MIN_SCORE, ReviewStatus


class ReviewOutcome(BaseModel):
    """Record-review-outcome command input."""

    comments: Optional[str] = None
    score: Optional[int] = Field(None, ge=MIN_SCORE, le=MAX_SCORE, strict=True)


class ReviewResponse(BaseModel):
    """Review state."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    paper_id: int
    paper_version: int
    reviewer_id: int
    comments: Optional[str]
    score: Optional[int]
    status: ReviewStatus
    created_at: datetime
    updated_at: datetime
