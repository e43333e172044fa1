"""
Integration tests for search, listings and statistics views.

Uses the sample dataset: "AI in Healthcare" (revised to "Advanced AI in
Healthcare") citing "Quantum Computing", two completed reviews, three tags.
"""

import pytest
import pytest_asyncio

from paperflow.engines.search import SearchService
from paperflow.engines.statistics import StatisticsService


@pytest_asyncio.fixture
async def sample(workflow, author, author_reviewer, admin):
    health = await workflow.create_paper(author.id)
    quantum = await workflow.create_paper(author_reviewer.id)

    await workflow.submit_paper_version(
        health.id, "AI in Healthcare", "Exploring AI applications...",
        "/papers/ai_health_v1.pdf", author.id,
    )
    review = await workflow.assign_reviewer(health.id, 1, author_reviewer.id, admin.id)
    await workflow.record_review_outcome(review.id, "Needs more data", 3, acting_user_id=author_reviewer.id)

    await workflow.submit_paper_version(
        health.id, "Advanced AI in Healthcare", "Updated research on AI...",
        "/papers/ai_health_v2.pdf", author.id,
    )
    review = await workflow.assign_reviewer(health.id, 2, author_reviewer.id, admin.id)
    await workflow.record_review_outcome(review.id, "Improved significantly", 4, acting_user_id=author_reviewer.id)

    await workflow.submit_paper_version(
        quantum.id, "Quantum Computing", "Breakthroughs in quantum...",
        "/papers/quantum_v1.pdf", author_reviewer.id,
    )

    await workflow.add_citation(health.id, quantum.id, author.id)
    await workflow.tag_paper(health.id, "Artificial Intelligence", author.id)
    await workflow.tag_paper(health.id, "Healthcare", author.id)
    await workflow.tag_paper(quantum.id, "Quantum Physics", author_reviewer.id)

    return {"health": health.id, "quantum": quantum.id}


class TestSearchPapers:
    @pytest.mark.asyncio
    async def test_text_match_returns_paper_once(self, sample, db_session):
        hits = await SearchService(db_session).search_papers("AI")

        assert [h.paper_id for h in hits] == [sample["health"]]
        assert hits[0].title == "Advanced AI in Healthcare"
        assert hits[0].abstract == "Updated research on AI..."

    @pytest.mark.asyncio
    async def test_superseded_versions_are_invisible(self, sample, db_session):
        assert await SearchService(db_session).search_papers("Exploring") == []

    @pytest.mark.asyncio
    async def test_tag_only_match(self, sample, db_session):
        """'Physics' appears only in a tag name."""
        hits = await SearchService(db_session).search_papers("Physics")
        assert [h.paper_id for h in hits] == [sample["quantum"]]
        assert hits[0].title == "Quantum Computing"

    @pytest.mark.asyncio
    async def test_tag_substring_is_case_insensitive(self, sample, db_session):
        hits = await SearchService(db_session).search_papers("intellig")
        assert [h.paper_id for h in hits] == [sample["health"]]

    @pytest.mark.asyncio
    async def test_text_hits_before_tag_hits(self, workflow, sample, author, db_session):
        """A tag-only match is appended after the text matches."""
        await workflow.tag_paper(sample["quantum"], "Healthcare", author.id)

        hits = await SearchService(db_session).search_papers("healthcare")
        assert [h.paper_id for h in hits] == [sample["health"], sample["quantum"]]

    @pytest.mark.asyncio
    async def test_no_match(self, sample, db_session):
        assert await SearchService(db_session).search_papers("blockchain") == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["", "   ", None])
    async def test_blank_term(self, sample, db_session, term):
        assert await SearchService(db_session).search_papers(term) == []

    @pytest.mark.asyncio
    async def test_wildcard_characters_are_literal(self, sample, db_session):
        assert await SearchService(db_session).search_papers("%") == []

    @pytest.mark.asyncio
    async def test_unversioned_papers_never_match(self, workflow, sample, author, db_session):
        bare = await workflow.create_paper(author.id)
        await workflow.tag_paper(bare.id, "Quantum Physics", author.id)

        hits = await SearchService(db_session).search_papers("Quantum")
        assert bare.id not in [h.paper_id for h in hits]

    @pytest.mark.asyncio
    async def test_non_ascii_text_is_case_insensitive(self, workflow, sample, author, db_session):
        paper = await workflow.create_paper(author.id)
        await workflow.submit_paper_version(
            paper.id, "ÉTUDE quantique", "Résumé des résultats", "/papers/etude.pdf", author.id,
        )

        hits = await SearchService(db_session).search_papers("étude")
        assert [h.paper_id for h in hits] == [paper.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("term", ["économie", "ÉCONOMIE", "Économie"])
    async def test_non_ascii_tag_substring_is_case_insensitive(
        self, workflow, sample, author_reviewer, db_session, term
    ):
        await workflow.tag_paper(sample["quantum"], "Économie quantique", author_reviewer.id)

        hits = await SearchService(db_session).search_papers(term)
        assert [h.paper_id for h in hits] == [sample["quantum"]]

    @pytest.mark.asyncio
    async def test_more_relevant_text_hit_comes_first(self, workflow, sample, author, db_session):
        """The paper mentioning the term more densely ranks ahead of the older one."""
        ids = []
        for title, abstract in [
            ("Graph Theory", "Notes on planar structures"),
            ("Graph Search", "Graph traversal for graph databases"),
        ]:
            paper = await workflow.create_paper(author.id)
            await workflow.submit_paper_version(paper.id, title, abstract, "/papers/g.pdf", author.id)
            ids.append(paper.id)
        sparse, dense = ids

        hits = await SearchService(db_session).search_papers("graph")
        assert [h.paper_id for h in hits] == [dense, sparse]


class TestListings:
    @pytest.mark.asyncio
    async def test_list_current_versions(self, sample, db_session):
        rows = await SearchService(db_session).list_current_versions()
        assert [(r.paper_id, r.title) for r in rows] == [
            (sample["health"], "Advanced AI in Healthcare"),
            (sample["quantum"], "Quantum Computing"),
        ]

    @pytest.mark.asyncio
    async def test_papers_by_tag_is_exact(self, sample, db_session):
        search = SearchService(db_session)
        rows = await search.papers_by_tag("Artificial Intelligence")
        assert [r.paper_id for r in rows] == [sample["health"]]
        assert await search.papers_by_tag("Artificial") == []

    @pytest.mark.asyncio
    async def test_version_history(self, sample, db_session):
        history = await SearchService(db_session).version_history(sample["health"])
        assert [v.version for v in history] == [1, 2]
        assert history[0].file_ref == "/papers/ai_health_v1.pdf"


class TestStatistics:
    @pytest.mark.asyncio
    async def test_most_cited_papers(self, sample, db_session):
        rows = await StatisticsService(db_session).most_cited_papers()
        assert [(r.paper_id, r.title, r.citation_count) for r in rows] == [
            (sample["quantum"], "Quantum Computing", 1),
            (sample["health"], "Advanced AI in Healthcare", 0),
        ]

    @pytest.mark.asyncio
    async def test_most_cited_ties_by_id(self, workflow, author, db_session):
        ids = []
        for title in ("First", "Second"):
            paper = await workflow.create_paper(author.id)
            await workflow.submit_paper_version(paper.id, title, "abstract", "/f.pdf", author.id)
            ids.append(paper.id)

        rows = await StatisticsService(db_session).most_cited_papers()
        assert [r.paper_id for r in rows] == sorted(ids)
        assert all(r.citation_count == 0 for r in rows)

    @pytest.mark.asyncio
    async def test_active_reviewers(self, sample, author_reviewer, db_session):
        rows = await StatisticsService(db_session).active_reviewers()
        assert [(r.user_id, r.full_name, r.reviews_completed) for r in rows] == [
            (author_reviewer.id, "Rahul Kumar", 2),
        ]

    @pytest.mark.asyncio
    async def test_pending_reviews_not_counted(self, workflow, sample, author_reviewer, admin, db_session):
        await workflow.assign_reviewer(sample["quantum"], 1, author_reviewer.id, admin.id)

        rows = await StatisticsService(db_session).active_reviewers()
        assert rows[0].reviews_completed == 2

    @pytest.mark.asyncio
    async def test_citations_of(self, sample, db_session):
        stats = StatisticsService(db_session)
        assert await stats.citations_of(sample["health"]) == [sample["quantum"]]
        assert await stats.citations_of(sample["quantum"]) == []
