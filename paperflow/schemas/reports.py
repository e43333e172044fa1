"""
Read-side payloads for search and statistics.
"""

from pydantic import BaseModel, ConfigDict

from paperflow.kernel.models.paper import PaperStatus


class SearchHit(BaseModel):
    """A paper matched by search, described by its current version."""

    paper_id: int
    title: str
    abstract: str
    status: PaperStatus


class CitationCount(BaseModel):
    """Inbound citation count of a paper."""

    paper_id: int
    title: str
    citation_count: int


class ReviewerActivity(BaseModel):
    """Completed-review count of a reviewer."""

    model_config = ConfigDict(from_attributes=True)

    user_id: int
    full_name: str
    reviews_completed: int
