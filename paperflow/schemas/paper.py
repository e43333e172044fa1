"""
Paper schemas.
"""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from paperflow.kernel.models.paper import PaperStatus


class PaperVersionSubmit(BaseModel):
    """Submit-new-version command input."""

    title: str = Field(..., min_length=1, max_length=255)
    abstract: str = Field(..., min_length=1)
    file_ref: str = Field(..., min_length=1, max_length=255)

    @field_validator("title", "abstract")
    @classmethod
    def not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value


class PaperResponse(BaseModel):
    """Paper state."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    current_version: int
    status: PaperStatus
    corresponding_author_id: int
    created_at: datetime
    updated_at: datetime


class PaperVersionResponse(BaseModel):
    """One immutable paper version."""

    model_config = ConfigDict(from_attributes=True)

    paper_id: int
    version: int
    title: str
    abstract: str
    submission_date: date
    file_ref: str
    submitted_by: int


class SubmissionResult(BaseModel):
    """Outcome of submitting a version: the new version and the paper after it."""

    paper: PaperResponse
    version: PaperVersionResponse


class CurrentVersionRow(BaseModel):
    """A paper joined with its current version."""

    paper_id: int
    title: str
    abstract: str
    status: PaperStatus
