"""
Search and lookup over the current version of each paper.

Only the version a paper's current_version points at is ever matched;
superseded versions are invisible to search. Papers without any version
(current_version = 0) have nothing to match and never appear.
"""

from typing import Dict, List

from sqlalchemy import and_, select
from sqlalchemy.ext.asyncio import AsyncSession

from paperflow.engines.search.text_match import RelevanceScorer, query_tokens
from paperflow.kernel.models.citation import PaperTag, Tag
from paperflow.kernel.models.paper import Paper, PaperVersion
from paperflow.logging_config import get_logger
from paperflow.schemas.paper import CurrentVersionRow, PaperVersionResponse
from paperflow.schemas.reports import SearchHit

logger = get_logger(__name__)

_CURRENT_VERSION_JOIN = and_(
    PaperVersion.paper_id == Paper.id,
    PaperVersion.version == Paper.current_version,
)


def _current_versions():
    return select(Paper.id, PaperVersion.title, PaperVersion.abstract, Paper.status).join(
        PaperVersion, _CURRENT_VERSION_JOIN
    )


class SearchService:
    """
    Read-side facade over papers, their current versions and tags.

    Usage:
        hits = await SearchService(session).search_papers("quantum")
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def search_papers(self, term: str) -> List[SearchHit]:
        """
        Find papers whose current version or tags match term.

        Text matches come first, most relevant first. Papers matched only
        through a tag follow, by paper id. A paper appears at most once.

        Args:
            term: Free text; a blank term matches nothing
        """
        term = (term or "").strip()
        if not term:
            return []

        text_hits = await self._text_matches(term)
        seen = {hit.paper_id for hit in text_hits}
        tag_hits = [hit for hit in await self._tag_matches(term) if hit.paper_id not in seen]

        logger.debug(
            "Search finished",
            extra={"term": term, "text_hits": len(text_hits), "tag_hits": len(tag_hits)},
        )
        return text_hits + tag_hits

    async def _text_matches(self, term: str) -> List[SearchHit]:
        if not query_tokens(term):
            return []

        result = await self.session.execute(_current_versions())
        rows = {row.id: row for row in result.all()}

        scorer = RelevanceScorer().fit({pid: f"{r.title} {r.abstract}" for pid, r in rows.items()})
        return [
            SearchHit(
                paper_id=doc.doc_id,
                title=rows[doc.doc_id].title,
                abstract=rows[doc.doc_id].abstract,
                status=rows[doc.doc_id].status,
            )
            for doc in scorer.rank(term)
        ]

    async def _tag_matches(self, term: str) -> List[SearchHit]:
        needle = term.casefold()
        query = (
            _current_versions()
            .add_columns(Tag.name.label("tag_name"))
            .join(PaperTag, PaperTag.paper_id == Paper.id)
            .join(Tag, Tag.id == PaperTag.tag_id)
            .order_by(Paper.id, Tag.id)
        )
        result = await self.session.execute(query)

        hits: Dict[int, SearchHit] = {}
        for r in result.all():
            if r.id not in hits and needle in r.tag_name.casefold():
                hits[r.id] = SearchHit(
                    paper_id=r.id, title=r.title, abstract=r.abstract, status=r.status
                )
        return list(hits.values())

    async def list_current_versions(self) -> List[CurrentVersionRow]:
        """Every paper that has a version, with its current title and abstract."""
        result = await self.session.execute(_current_versions().order_by(Paper.id))
        return [
            CurrentVersionRow(paper_id=r.id, title=r.title, abstract=r.abstract, status=r.status)
            for r in result.all()
        ]

    async def papers_by_tag(self, tag_name: str) -> List[CurrentVersionRow]:
        """Papers carrying exactly tag_name, described by their current version."""
        query = (
            _current_versions()
            .join(PaperTag, PaperTag.paper_id == Paper.id)
            .join(Tag, Tag.id == PaperTag.tag_id)
            .where(Tag.name == tag_name)
            .order_by(Paper.id)
        )
        result = await self.session.execute(query)
        return [
            CurrentVersionRow(paper_id=r.id, title=r.title, abstract=r.abstract, status=r.status)
            for r in result.all()
        ]

    async def version_history(self, paper_id: int) -> List[PaperVersionResponse]:
        """All versions of a paper, oldest first."""
        query = (
            select(PaperVersion)
            .where(PaperVersion.paper_id == paper_id)
            .order_by(PaperVersion.version)
        )
        result = await self.session.execute(query)
        return [PaperVersionResponse.model_validate(v) for v in result.scalars().all()]
