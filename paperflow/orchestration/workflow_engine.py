"""
Workflow engine - the state-changing commands of the review pipeline.

Each command is one transaction that checks authorization, validates,
mutates, and appends to the audit log. Either all of it commits or none of
it does.
"""

from typing import List, Optional, Sequence

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from paperflow.config import Settings, get_settings
from paperflow.kernel.audit import AuditRecorder, snapshot
from paperflow.kernel.errors import (
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from paperflow.kernel.identity import RoleDirectory
from paperflow.kernel.models.base import utcnow
from paperflow.kernel.models.citation import Citation, PaperTag, Tag
from paperflow.kernel.models.paper import Paper, PaperStatus, PaperVersion
from paperflow.kernel.models.review import Review, ReviewStatus
from paperflow.kernel.models.user import Role
from paperflow.kernel.permissions import require_any_role, require_role
from paperflow.logging_config import get_logger
from paperflow.orchestration.state_machine import (
    REVIEWABLE_STATUSES,
    check_editorial_transition,
    status_after_submission,
)
from paperflow.orchestration.transactions import transaction
from paperflow.schemas.paper import (
    PaperResponse,
    PaperVersionResponse,
    PaperVersionSubmit,
    SubmissionResult,
)
from paperflow.schemas.review import ReviewOutcome, ReviewResponse

logger = get_logger(__name__)

MAX_TAG_LENGTH = 50


def _invalid_input(exc: PydanticValidationError) -> ValidationError:
    """Translate the first pydantic error into the engine's ValidationError."""
    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"]) or None
    return ValidationError(f"{field}: {first['msg']}", field=field)


def parse_author_ids(raw: str) -> List[int]:
    """
    Parse a comma-separated list of author ids ("1, 2,2,3").

    Order and duplicates are preserved; blank entries are skipped.
    """
    ids = []
    for part in raw.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError as exc:
            raise ValidationError(f"Invalid author id: {part!r}", field="author_ids") from exc
    return ids


class WorkflowEngine:
    """
    Command handler for paper submission, reviewer assignment and review
    outcomes, plus the editorial and bookkeeping commands around them.

    Usage:
        engine = WorkflowEngine(async_session_maker)
        result = await engine.submit_paper_version(
            paper_id=1, title="...", abstract="...",
            file_ref="s3://papers/1/v2.pdf", submitter_id=author.id,
        )
    """

    def __init__(
        self,
        session_maker: Optional[async_sessionmaker[AsyncSession]] = None,
        settings: Optional[Settings] = None,
    ):
        if session_maker is None:
            from paperflow.database import async_session_maker as session_maker
        self.session_maker = session_maker
        self.settings = settings or get_settings()

    def _transaction(self):
        return transaction(
            self.session_maker,
            timeout=self.settings.transaction_timeout_seconds,
        )

    # Papers and versions

    async def create_paper(self, corresponding_author_id: int) -> PaperResponse:
        """
        Create an empty DRAFT paper owned by an author.

        Raises:
            AuthorizationError: If the user is not an author
        """
        async with self._transaction() as session:
            directory = RoleDirectory(session)
            await require_role(
                directory, corresponding_author_id, Role.AUTHOR,
                "Only authors can create papers",
            )

            paper = Paper(
                corresponding_author_id=corresponding_author_id,
                status=PaperStatus.DRAFT,
                current_version=0,
            )
            session.add(paper)
            await session.flush()

            await AuditRecorder(session).record_insert(
                paper, performed_by=corresponding_author_id
            )
            response = PaperResponse.model_validate(paper)

        logger.info("Paper created", extra={"paper_id": response.id})
        return response

    async def submit_paper_version(
        self,
        paper_id: int,
        title: str,
        abstract: str,
        file_ref: str,
        submitter_id: int,
    ) -> SubmissionResult:
        """
        Submit a new immutable version of a paper.

        The version number is max(existing) + 1. The paper then points at it
        and moves to SUBMITTED if it was a DRAFT, REVISION_REQUESTED
        otherwise.

        Args:
            paper_id: Paper being revised
            title: Version title
            abstract: Version abstract
            file_ref: Opaque file storage reference, stored verbatim
            submitter_id: Submitting user, must hold AUTHOR

        Returns:
            The new version and the paper after the update

        Raises:
            AuthorizationError: If the submitter is not an author
            NotFoundError: If the paper does not exist
            ValidationError: If a field is empty or too long
            InvalidStateError: In strict mode, for ACCEPTED/REJECTED papers
            ConflictError: If a concurrent submission took the version number
        """
        async with self._transaction() as session:
            directory = RoleDirectory(session)
            await require_role(
                directory, submitter_id, Role.AUTHOR, "Only authors can submit papers"
            )
            paper = await self._lock_paper(session, paper_id)

            try:
                data = PaperVersionSubmit(title=title, abstract=abstract, file_ref=file_ref)
            except PydanticValidationError as exc:
                raise _invalid_input(exc) from exc

            latest = await session.scalar(
                select(func.coalesce(func.max(PaperVersion.version), 0)).where(
                    PaperVersion.paper_id == paper_id
                )
            )
            new_version = (latest or 0) + 1

            version = PaperVersion(
                paper_id=paper_id,
                version=new_version,
                title=data.title,
                abstract=data.abstract,
                file_ref=data.file_ref,
                submitted_by=submitter_id,
            )
            session.add(version)
            try:
                await session.flush()
            except IntegrityError as exc:
                logger.warning(
                    "Version number race lost",
                    extra={"paper_id": paper_id, "version": new_version},
                )
                raise ConflictError(
                    f"Version {new_version} of paper {paper_id} was submitted concurrently; retry"
                ) from exc

            # The insert holds the write lock; reload what a concurrent commit changed
            await session.refresh(paper)
            new_status = status_after_submission(
                paper.status, strict=self.settings.strict_status_transitions
            )

            old = snapshot(paper)
            paper.current_version = new_version
            paper.status = new_status
            paper.updated_at = utcnow()
            await session.flush()

            audit = AuditRecorder(session)
            await audit.record_insert(version, performed_by=submitter_id)
            await audit.record_update(paper, old, performed_by=submitter_id)

            result = SubmissionResult(
                paper=PaperResponse.model_validate(paper),
                version=PaperVersionResponse.model_validate(version),
            )

        logger.info(
            "Paper version submitted",
            extra={
                "paper_id": paper_id,
                "version": new_version,
                "status": new_status.value,
            },
        )
        return result

    async def bulk_import_papers(self, author_ids: Sequence[int]) -> List[PaperResponse]:
        """
        Create one bare SUBMITTED paper per author id, in order.

        Duplicates produce separate papers. No role check is applied; every
        id must name an existing user or the whole batch is rolled back.

        Raises:
            NotFoundError: If an author id does not exist
        """
        created: List[PaperResponse] = []
        async with self._transaction() as session:
            directory = RoleDirectory(session)
            for author_id in dict.fromkeys(author_ids):
                if not await directory.user_exists(author_id):
                    raise NotFoundError(f"User {author_id} not found")

            audit = AuditRecorder(session)
            for author_id in author_ids:
                paper = Paper(
                    corresponding_author_id=author_id,
                    status=PaperStatus.SUBMITTED,
                    current_version=0,
                )
                session.add(paper)
                await session.flush()
                await audit.record_insert(paper, performed_by=author_id)
                created.append(PaperResponse.model_validate(paper))

        logger.info("Papers imported", extra={"count": len(created)})
        return created

    async def set_paper_status(
        self,
        paper_id: int,
        status: str,
        actor_id: int,
    ) -> PaperResponse:
        """
        Editorial status change (admin only), e.g. UNDER_REVIEW or ACCEPTED.

        Raises:
            AuthorizationError: If the actor is not an admin
            NotFoundError: If the paper does not exist
            ValidationError: If status is not a known status
            InvalidStateError: If the paper is already in that status, or
                the target is DRAFT
        """
        async with self._transaction() as session:
            directory = RoleDirectory(session)
            await require_role(
                directory, actor_id, Role.ADMIN, "Only admins can change paper status"
            )
            paper = await self._lock_paper(session, paper_id)
            target = check_editorial_transition(paper.status, status)

            old = snapshot(paper)
            paper.status = target
            paper.updated_at = utcnow()
            await session.flush()

            await AuditRecorder(session).record_update(paper, old, performed_by=actor_id)
            response = PaperResponse.model_validate(paper)

        logger.info(
            "Paper status changed",
            extra={"paper_id": paper_id, "from_status": old["status"], "to_status": target.value},
        )
        return response

    async def delete_paper(self, paper_id: int, actor_id: int) -> None:
        """
        Delete a paper (admin only).

        Versions, their reviews, citations in both directions and tags go
        with it. Audit entries about the paper are kept.
        """
        async with self._transaction() as session:
            directory = RoleDirectory(session)
            await require_role(
                directory, actor_id, Role.ADMIN, "Only admins can delete papers"
            )
            paper = await self._lock_paper(session, paper_id)

            await AuditRecorder(session).record_delete(paper, performed_by=actor_id)
            await session.execute(delete(Paper).where(Paper.id == paper_id))

        logger.info("Paper deleted", extra={"paper_id": paper_id})

    # Reviews

    async def assign_reviewer(
        self,
        paper_id: int,
        version_number: int,
        reviewer_id: int,
        assigner_id: int,
    ) -> ReviewResponse:
        """
        Assign a reviewer to one specific paper version.

        Creates a PENDING review. The paper's status is left alone unless
        mark_under_review_on_assignment is enabled.

        Raises:
            AuthorizationError: If the assigner is not an admin, or the
                target user is not a reviewer
            NotFoundError: If the paper version does not exist
            InvalidStateError: With unique_pending_reviews, if the reviewer
                already has a pending review of this version
        """
        async with self._transaction() as session:
            directory = RoleDirectory(session)
            await require_role(
                directory, assigner_id, Role.ADMIN, "Only admins can assign reviewers"
            )
            await require_role(
                directory, reviewer_id, Role.REVIEWER, "User is not a reviewer"
            )

            version = await session.get(PaperVersion, (paper_id, version_number))
            if version is None:
                raise NotFoundError(
                    f"Version {version_number} of paper {paper_id} not found"
                )

            if self.settings.unique_pending_reviews:
                existing = await session.scalar(
                    select(Review.id).where(
                        and_(
                            Review.paper_id == paper_id,
                            Review.paper_version == version_number,
                            Review.reviewer_id == reviewer_id,
                            Review.status == ReviewStatus.PENDING.value,
                        )
                    )
                )
                if existing is not None:
                    raise InvalidStateError(
                        f"Reviewer {reviewer_id} already has pending review {existing} "
                        f"for paper {paper_id} version {version_number}"
                    )

            review = Review(
                paper_id=paper_id,
                paper_version=version_number,
                reviewer_id=reviewer_id,
                status=ReviewStatus.PENDING,
            )
            session.add(review)
            await session.flush()

            audit = AuditRecorder(session)
            await audit.record_insert(review, performed_by=assigner_id)

            if self.settings.mark_under_review_on_assignment:
                paper = await self._lock_paper(session, paper_id)
                if PaperStatus(paper.status) in REVIEWABLE_STATUSES:
                    old = snapshot(paper)
                    paper.status = PaperStatus.UNDER_REVIEW
                    paper.updated_at = utcnow()
                    await session.flush()
                    await audit.record_update(paper, old, performed_by=assigner_id)

            response = ReviewResponse.model_validate(review)

        logger.info(
            "Reviewer assigned",
            extra={
                "review_id": response.id,
                "paper_id": paper_id,
                "version": version_number,
                "reviewer_id": reviewer_id,
            },
        )
        return response

    async def record_review_outcome(
        self,
        review_id: int,
        comments: Optional[str],
        score: Optional[int],
        *,
        acting_user_id: int,
    ) -> ReviewResponse:
        """
        Complete a pending review with comments and an optional 1-5 score.

        The acting user must be the assigned reviewer. The REVIEWER role is
        not re-checked: a role revoked after assignment does not void it.

        Raises:
            ValidationError: If score is not an integer in [1, 5]
            NotFoundError: If the review does not exist
            AuthorizationError: If the acting user is not the assigned reviewer
            InvalidStateError: If the review is already COMPLETED
        """
        try:
            data = ReviewOutcome(comments=comments, score=score)
        except PydanticValidationError as exc:
            raise _invalid_input(exc) from exc

        async with self._transaction() as session:
            review = await session.scalar(
                select(Review).where(Review.id == review_id).with_for_update()
            )
            if review is None:
                raise NotFoundError(f"Review {review_id} not found")
            if review.reviewer_id != acting_user_id:
                raise AuthorizationError(
                    "Only the assigned reviewer can record this review"
                )
            if review.status != ReviewStatus.PENDING:
                raise InvalidStateError(f"Review {review_id} is already completed")

            old = snapshot(review)
            review.comments = data.comments
            review.score = data.score
            review.status = ReviewStatus.COMPLETED
            review.updated_at = utcnow()
            await session.flush()

            await AuditRecorder(session).record_update(
                review, old, performed_by=acting_user_id
            )
            response = ReviewResponse.model_validate(review)

        logger.info(
            "Review completed",
            extra={"review_id": review_id, "score": data.score},
        )
        return response

    # Citations and tags

    async def add_citation(
        self,
        citing_paper_id: int,
        cited_paper_id: int,
        actor_id: int,
    ) -> None:
        """
        Record that one paper cites another.

        Raises:
            AuthorizationError: If the actor is not an author
            NotFoundError: If either paper does not exist
            ValidationError: With reject_self_citations, for a self-citation
            ConflictError: If the citation already exists
        """
        async with self._transaction() as session:
            directory = RoleDirectory(session)
            await require_role(
                directory, actor_id, Role.AUTHOR, "Only authors can add citations"
            )
            for pid in (citing_paper_id, cited_paper_id):
                if await session.get(Paper, pid) is None:
                    raise NotFoundError(f"Paper {pid} not found")

            if self.settings.reject_self_citations and citing_paper_id == cited_paper_id:
                raise ValidationError("A paper cannot cite itself", field="cited_paper_id")

            if await session.get(Citation, (citing_paper_id, cited_paper_id)) is not None:
                raise ConflictError(
                    f"Paper {citing_paper_id} already cites paper {cited_paper_id}"
                )

            citation = Citation(
                citing_paper_id=citing_paper_id,
                cited_paper_id=cited_paper_id,
            )
            session.add(citation)
            try:
                await session.flush()
            except IntegrityError as exc:
                raise ConflictError(
                    f"Paper {citing_paper_id} already cites paper {cited_paper_id}"
                ) from exc

            await AuditRecorder(session).record_insert(citation, performed_by=actor_id)

        logger.info(
            "Citation added",
            extra={"citing_paper_id": citing_paper_id, "cited_paper_id": cited_paper_id},
        )

    async def tag_paper(self, paper_id: int, tag_name: str, actor_id: int) -> bool:
        """
        Attach a tag to a paper, creating the tag on first use.

        Returns:
            True if the tag was attached, False if the paper already had it
        """
        name = (tag_name or "").strip()
        if not name:
            raise ValidationError("Tag name is required", field="tag_name")
        if len(name) > MAX_TAG_LENGTH:
            raise ValidationError(
                f"Tag name longer than {MAX_TAG_LENGTH} characters", field="tag_name"
            )

        async with self._transaction() as session:
            directory = RoleDirectory(session)
            await require_any_role(
                directory, actor_id, (Role.AUTHOR, Role.ADMIN),
                "Only authors or admins can tag papers",
            )
            if await session.get(Paper, paper_id) is None:
                raise NotFoundError(f"Paper {paper_id} not found")

            audit = AuditRecorder(session)
            tag = await session.scalar(select(Tag).where(Tag.name == name))
            if tag is None:
                tag = Tag(name=name)
                session.add(tag)
                try:
                    await session.flush()
                except IntegrityError as exc:
                    raise ConflictError(f"Tag {name!r} was created concurrently; retry") from exc
                await audit.record_insert(tag, performed_by=actor_id)

            if await session.get(PaperTag, (paper_id, tag.id)) is not None:
                return False

            link = PaperTag(paper_id=paper_id, tag_id=tag.id)
            session.add(link)
            await session.flush()
            await audit.record_insert(link, performed_by=actor_id)

        logger.info("Paper tagged", extra={"paper_id": paper_id, "tag": name})
        return True

    # Helpers

    @staticmethod
    async def _lock_paper(session: AsyncSession, paper_id: int) -> Paper:
        """Load a paper with a row lock held until the transaction ends."""
        paper = await session.scalar(
            select(Paper).where(Paper.id == paper_id).with_for_update()
        )
        if paper is None:
            raise NotFoundError(f"Paper {paper_id} not found")
        return paper
