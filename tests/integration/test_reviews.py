"""Integration tests for reviewer assignment and review outcomes."""

import pytest

from paperflow.config import Settings
from paperflow.engines.statistics import StatisticsService
from paperflow.kernel.audit import AuditRecorder
from paperflow.kernel.errors import (
    AuthorizationError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from paperflow.kernel.models import AuditAction, Paper, PaperStatus, Review, ReviewStatus
from paperflow.orchestration import WorkflowEngine


@pytest.fixture
def submitted_paper(workflow, author, draft_paper):
    async def _make(versions=1):
        for n in range(versions):
            await workflow.submit_paper_version(
                paper_id=draft_paper.id,
                title=f"AI in Healthcare v{n + 1}",
                abstract="Exploring AI applications...",
                file_ref=f"/papers/ai_health_v{n + 1}.pdf",
                submitter_id=author.id,
            )
        return draft_paper.id

    return _make


class TestAssignReviewer:
    @pytest.mark.asyncio
    async def test_creates_pending_review(self, workflow, submitted_paper, author_reviewer, admin, db_session):
        paper_id = await submitted_paper()
        review = await workflow.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)

        assert review.status == ReviewStatus.PENDING
        assert review.paper_id == paper_id
        assert review.paper_version == 1
        assert review.reviewer_id == author_reviewer.id
        assert review.score is None
        assert review.comments is None

        entries = await AuditRecorder(db_session).entity_history("reviews", str(review.id))
        assert [e.action for e in entries] == [AuditAction.INSERT]
        assert entries[0].performed_by == admin.id

    @pytest.mark.asyncio
    async def test_paper_status_unchanged_by_default(self, workflow, submitted_paper, author_reviewer, admin, db_session):
        paper_id = await submitted_paper()
        await workflow.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)

        paper = await db_session.get(Paper, paper_id)
        assert paper.status == PaperStatus.SUBMITTED

    @pytest.mark.asyncio
    async def test_superseded_version_can_be_reviewed(self, workflow, submitted_paper, author_reviewer, admin):
        paper_id = await submitted_paper(versions=2)
        review = await workflow.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)
        assert review.paper_version == 1

    @pytest.mark.asyncio
    async def test_non_admin_cannot_assign(self, workflow, submitted_paper, author_reviewer, author, count_rows):
        paper_id = await submitted_paper()
        with pytest.raises(AuthorizationError) as exc_info:
            await workflow.assign_reviewer(paper_id, 1, author_reviewer.id, author.id)
        assert "admins" in exc_info.value.message
        assert await count_rows(Review) == 0

    @pytest.mark.asyncio
    async def test_target_must_be_reviewer(self, workflow, submitted_paper, author, admin):
        paper_id = await submitted_paper()
        with pytest.raises(AuthorizationError) as exc_info:
            await workflow.assign_reviewer(paper_id, 1, author.id, admin.id)
        assert exc_info.value.message == "User is not a reviewer"

    @pytest.mark.asyncio
    async def test_unknown_version(self, workflow, submitted_paper, author_reviewer, admin):
        paper_id = await submitted_paper()
        with pytest.raises(NotFoundError):
            await workflow.assign_reviewer(paper_id, 2, author_reviewer.id, admin.id)

    @pytest.mark.asyncio
    async def test_unversioned_paper_cannot_be_assigned(self, workflow, draft_paper, author_reviewer, admin):
        with pytest.raises(NotFoundError):
            await workflow.assign_reviewer(draft_paper.id, 1, author_reviewer.id, admin.id)

    @pytest.mark.asyncio
    async def test_duplicate_pending_allowed_by_default(self, workflow, submitted_paper, author_reviewer, admin):
        paper_id = await submitted_paper()
        first = await workflow.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)
        second = await workflow.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)
        assert first.id != second.id

    @pytest.mark.asyncio
    async def test_duplicate_pending_refused_when_unique(
        self, session_maker, submitted_paper, author_reviewer, admin, count_rows
    ):
        unique = WorkflowEngine(
            session_maker, Settings(database_url="sqlite+aiosqlite://", unique_pending_reviews=True)
        )
        paper_id = await submitted_paper()
        await unique.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)

        with pytest.raises(InvalidStateError):
            await unique.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)
        assert await count_rows(Review) == 1

    @pytest.mark.asyncio
    async def test_under_review_on_assignment_when_enabled(
        self, session_maker, submitted_paper, author_reviewer, admin, db_session
    ):
        engine = WorkflowEngine(
            session_maker,
            Settings(database_url="sqlite+aiosqlite://", mark_under_review_on_assignment=True),
        )
        paper_id = await submitted_paper()
        await engine.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)

        paper = await db_session.get(Paper, paper_id)
        assert paper.status == PaperStatus.UNDER_REVIEW


class TestRecordReviewOutcome:
    @pytest.fixture
    def pending_review(self, workflow, submitted_paper, author_reviewer, admin):
        async def _make():
            paper_id = await submitted_paper()
            return await workflow.assign_reviewer(paper_id, 1, author_reviewer.id, admin.id)

        return _make

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [1, 5, None])
    async def test_completes_review(self, workflow, pending_review, author_reviewer, score):
        review = await pending_review()
        done = await workflow.record_review_outcome(
            review.id, "Needs more data", score, acting_user_id=author_reviewer.id
        )

        assert done.status == ReviewStatus.COMPLETED
        assert done.score == score
        assert done.comments == "Needs more data"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("score", [0, 6])
    async def test_score_out_of_range(self, workflow, pending_review, author_reviewer, db_session, score):
        review = await pending_review()
        with pytest.raises(ValidationError):
            await workflow.record_review_outcome(
                review.id, "x", score, acting_user_id=author_reviewer.id
            )

        stored = await db_session.get(Review, review.id)
        assert stored.status == ReviewStatus.PENDING
        assert stored.score is None

    @pytest.mark.asyncio
    async def test_second_completion_refused(self, workflow, pending_review, author_reviewer, db_session):
        review = await pending_review()
        await workflow.record_review_outcome(review.id, "Good", 4, acting_user_id=author_reviewer.id)

        with pytest.raises(InvalidStateError):
            await workflow.record_review_outcome(review.id, "Changed", 2, acting_user_id=author_reviewer.id)

        stored = await db_session.get(Review, review.id)
        assert stored.score == 4
        assert stored.comments == "Good"

    @pytest.mark.asyncio
    async def test_only_assigned_reviewer(self, workflow, pending_review, admin):
        review = await pending_review()
        with pytest.raises(AuthorizationError):
            await workflow.record_review_outcome(review.id, "x", 3, acting_user_id=admin.id)

    @pytest.mark.asyncio
    async def test_unknown_review(self, workflow, author_reviewer):
        with pytest.raises(NotFoundError):
            await workflow.record_review_outcome(999, "x", 3, acting_user_id=author_reviewer.id)

    @pytest.mark.asyncio
    async def test_outcome_is_audited(self, workflow, pending_review, author_reviewer, db_session):
        review = await pending_review()
        await workflow.record_review_outcome(review.id, "Improved", 4, acting_user_id=author_reviewer.id)

        entries = await AuditRecorder(db_session).entity_history("reviews", str(review.id))
        update = entries[0]
        assert update.action == AuditAction.UPDATE
        assert update.old_data["status"] == "PENDING"
        assert update.new_data["status"] == "COMPLETED"
        assert update.new_data["score"] == 4

    @pytest.mark.asyncio
    async def test_revoked_reviewer_may_still_complete(
        self, workflow, pending_review, author_reviewer, admin, session_maker
    ):
        from paperflow.kernel.identity import RoleDirectory
        from paperflow.kernel.models import Role
        from paperflow.orchestration import transaction

        review = await pending_review()
        async with transaction(session_maker) as session:
            await RoleDirectory(session).revoke_role(author_reviewer.id, Role.REVIEWER, admin.id)

        done = await workflow.record_review_outcome(
            review.id, "Late but fine", 3, acting_user_id=author_reviewer.id
        )
        assert done.status == ReviewStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_pending_reviews_listing(self, workflow, pending_review, author_reviewer, admin, db_session):
        first = await pending_review()
        second = await workflow.assign_reviewer(first.paper_id, 1, author_reviewer.id, admin.id)
        await workflow.record_review_outcome(first.id, "ok", 3, acting_user_id=author_reviewer.id)

        pending = await StatisticsService(db_session).pending_reviews_for(author_reviewer.id)
        assert [r.id for r in pending] == [second.id]
        assert await StatisticsService(db_session).pending_reviews_for(admin.id) == []
