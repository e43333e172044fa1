"""
Review model - a reviewer's evaluation pinned to one paper version.
"""

from enum import Enum
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    ForeignKey,
    ForeignKeyConstraint,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paperflow.kernel.models.base import Base, TimestampMixin
from paperflow.kernel.models.paper import PaperVersion

MIN_SCORE = 1
MAX_SCORE = 5


class ReviewStatus(str, Enum):
    """Status of a review assignment."""
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"


class Review(Base, TimestampMixin):
    """
    Review of a specific PaperVersion.

    Stays attached to its version when the paper is resubmitted.
    """

    __tablename__ = "reviews"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    paper_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
    paper_version: Mapped[int] = mapped_column(
        SmallInteger,
        nullable=False,
    )
    reviewer_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    comments: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    score: Mapped[Optional[int]] = mapped_column(
        SmallInteger,
        nullable=True,
    )
    status: Mapped[ReviewStatus] = mapped_column(
        String(20),
        default=ReviewStatus.PENDING,
        nullable=False,
    )

    target_version: Mapped["PaperVersion"] = relationship(
        "PaperVersion",
        back_populates="reviews",
    )

    __table_args__ = (
        ForeignKeyConstraint(
            ["paper_id", "paper_version"],
            ["paper_versions.paper_id", "paper_versions.version"],
            ondelete="CASCADE",
        ),
        CheckConstraint(
            f"score IS NULL OR (score BETWEEN {MIN_SCORE} AND {MAX_SCORE})",
            name="ck_reviews_score",
        ),
        Index("ix_reviews_status", "status"),
        Index("ix_reviews_paper_version", "paper_id", "paper_version"),
    )

    def __repr__(self) -> str:
        return f"<Review {self.id} {self.paper_id}-{self.paper_version} {self.status}>"
