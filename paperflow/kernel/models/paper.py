"""
Paper models - the unit of identity and its immutable versions.

A Paper points at its current version by number; every submission adds a new
PaperVersion row and never edits an existing one.
"""

from datetime import date
from enum import Enum
from typing import TYPE_CHECKING, List

from sqlalchemy import (
    CheckConstraint,
    Date,
    ForeignKey,
    Index,
    Integer,
    SmallInteger,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paperflow.kernel.models.base import Base, TimestampMixin, today

if TYPE_CHECKING:
    from paperflow.kernel.models.review import Review


class PaperStatus(str, Enum):
    """Paper lifecycle status."""
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    REVISION_REQUESTED = "REVISION_REQUESTED"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"


TERMINAL_STATUSES = frozenset({PaperStatus.ACCEPTED, PaperStatus.REJECTED})


class Paper(Base, TimestampMixin):
    """Persistent identity of a submission across its revisions."""

    __tablename__ = "papers"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    # 0 until the first version is submitted
    current_version: Mapped[int] = mapped_column(
        SmallInteger,
        default=0,
        nullable=False,
    )
    status: Mapped[PaperStatus] = mapped_column(
        String(30),
        default=PaperStatus.DRAFT,
        nullable=False,
    )
    corresponding_author_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    versions: Mapped[List["PaperVersion"]] = relationship(
        "PaperVersion",
        back_populates="paper",
        order_by="PaperVersion.version",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("current_version >= 0", name="ck_papers_current_version"),
        Index("ix_papers_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Paper {self.id} v{self.current_version} {self.status}>"


class PaperVersion(Base):
    """One immutable snapshot of a paper at a revision number."""

    __tablename__ = "paper_versions"

    paper_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("papers.id", ondelete="CASCADE"),
        primary_key=True,
    )
    version: Mapped[int] = mapped_column(
        SmallInteger,
        primary_key=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    abstract: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    submission_date: Mapped[date] = mapped_column(
        Date,
        default=today,
        nullable=False,
    )
    # Reference into file storage, stored verbatim
    file_ref: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    submitted_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
    )

    paper: Mapped["Paper"] = relationship("Paper", back_populates="versions")
    reviews: Mapped[List["Review"]] = relationship(
        "Review",
        back_populates="target_version",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint("version >= 1", name="ck_paper_versions_version"),
    )

    @property
    def record_key(self) -> str:
        return f"{self.paper_id}-{self.version}"

    def __repr__(self) -> str:
        return f"<PaperVersion {self.record_key} {self.title!r}>"
