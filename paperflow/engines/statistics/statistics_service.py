"""
Statistics Service - citation and reviewer aggregates.

Recomputed from base tables on every call; nothing is cached.
"""

from typing import List

from sqlalchemy import and_, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from paperflow.kernel.models.citation import Citation
from paperflow.kernel.models.paper import Paper, PaperVersion
from paperflow.kernel.models.review import Review, ReviewStatus
from paperflow.kernel.models.user import User
from paperflow.schemas.reports import CitationCount, ReviewerActivity
from paperflow.schemas.review import ReviewResponse


class StatisticsService:
    """Derived read-only views over citations and reviews."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def most_cited_papers(self) -> List[CitationCount]:
        """
        Inbound citation counts per paper, most cited first.

        Each paper is described by its current version; papers without one
        are absent. Uncited papers appear with a count of 0. Ties are
        broken by paper id ascending.
        """
        citation_count = func.count(Citation.citing_paper_id).label("citation_count")
        query = (
            select(Paper.id, PaperVersion.title, citation_count)
            .join(
                PaperVersion,
                and_(
                    PaperVersion.paper_id == Paper.id,
                    PaperVersion.version == Paper.current_version,
                ),
            )
            .outerjoin(Citation, Citation.cited_paper_id == Paper.id)
            .group_by(Paper.id, PaperVersion.title)
            .order_by(citation_count.desc(), Paper.id.asc())
        )
        result = await self.session.execute(query)
        return [
            CitationCount(paper_id=r.id, title=r.title, citation_count=r.citation_count)
            for r in result.all()
        ]

    async def active_reviewers(self) -> List[ReviewerActivity]:
        """
        Completed-review counts per user, highest first.

        Users with no completed review are excluded. Ties are broken by
        user id ascending.
        """
        reviews_completed = func.count(Review.id).label("reviews_completed")
        query = (
            select(User.id, User.full_name, reviews_completed)
            .join(Review, Review.reviewer_id == User.id)
            .where(Review.status == ReviewStatus.COMPLETED.value)
            .group_by(User.id, User.full_name)
            .order_by(reviews_completed.desc(), User.id.asc())
        )
        result = await self.session.execute(query)
        return [
            ReviewerActivity(
                user_id=r.id,
                full_name=r.full_name,
                reviews_completed=r.reviews_completed,
            )
            for r in result.all()
        ]

    async def citations_of(self, paper_id: int) -> List[int]:
        """Ids of the papers cited by paper_id."""
        query = (
            select(Citation.cited_paper_id)
            .where(Citation.citing_paper_id == paper_id)
            .order_by(Citation.cited_paper_id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def pending_reviews_for(self, reviewer_id: int) -> List[ReviewResponse]:
        """PENDING reviews assigned to a reviewer, oldest first."""
        query = (
            select(Review)
            .where(
                and_(
                    Review.reviewer_id == reviewer_id,
                    Review.status == ReviewStatus.PENDING.value,
                )
            )
            .order_by(Review.id)
        )
        result = await self.session.execute(query)
        return [ReviewResponse.model_validate(r) for r in result.scalars().all()]
