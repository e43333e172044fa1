"""
Citation and tagging models.
"""

from typing import List

from sqlalchemy import ForeignKey, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from paperflow.kernel.models.base import Base


class Citation(Base):
    """Directed edge: citing paper -> cited paper, one per ordered pair."""

    __tablename__ = "citations"

    citing_paper_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("papers.id", ondelete="CASCADE"),
        primary_key=True,
    )
    cited_paper_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("papers.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<Citation {self.citing_paper_id}->{self.cited_paper_id}>"


class Tag(Base):
    """Controlled vocabulary term."""

    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )
    name: Mapped[str] = mapped_column(
        String(50),
        unique=True,
        nullable=False,
    )

    papers: Mapped[List["PaperTag"]] = relationship(
        "PaperTag",
        back_populates="tag",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<Tag {self.name!r}>"


class PaperTag(Base):
    """Tag applied to a paper as a whole, not to a version."""

    __tablename__ = "paper_tags"

    paper_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("papers.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("tags.id", ondelete="CASCADE"),
        primary_key=True,
    )

    tag: Mapped["Tag"] = relationship("Tag", back_populates="papers")
