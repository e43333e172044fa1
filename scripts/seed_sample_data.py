"""
Load the sample dataset into the configured database and print the read views.

    DATABASE_URL=sqlite+aiosqlite:///./sample.db python scripts/seed_sample_data.py
    python scripts/seed_sample_data.py --import-authors "1,2,2"
"""
import argparse
import asyncio
from typing import List

from paperflow.config import get_settings
from paperflow.database import async_session_maker, close_db, init_db
from paperflow.engines.search import SearchService
from paperflow.engines.statistics import StatisticsService
from paperflow.kernel.audit import AuditRecorder
from paperflow.kernel.identity import RoleDirectory
from paperflow.kernel.models import Role
from paperflow.logging_config import configure_logging, get_logger
from paperflow.orchestration import WorkflowEngine, parse_author_ids, transaction
from paperflow.schemas import AuditEntryResponse

logger = get_logger("seed_sample_data")

USERS = [
    ("rudra@gmail.com", "Rudra Kanwar", [Role.AUTHOR]),
    ("rk@gmail.com", "Rahul Kumar", [Role.AUTHOR, Role.REVIEWER]),
    ("srk@gmail.com", "Shahrukh Khan", [Role.ADMIN]),
]


async def ensure_users(directory: RoleDirectory) -> List[int]:
    """Ids of the sample users, registering those not already present."""
    ids = []
    for email, name, roles in USERS:
        user = await directory.get_user_by_email(email)
        if user is None:
            user = await directory.register_user(email, name, roles=roles)
        else:
            logger.info("Sample user already registered", extra={"user_id": user.id})
        ids.append(user.id)
    return ids


async def seed(import_authors: str = "") -> None:
    settings = get_settings()
    await init_db()

    async with transaction(async_session_maker) as session:
        rudra, rahul, shahrukh = await ensure_users(RoleDirectory(session))

    engine = WorkflowEngine(async_session_maker, settings)

    health = await engine.create_paper(rudra)
    quantum = await engine.create_paper(rahul)

    await engine.submit_paper_version(
        health.id, "AI in Healthcare", "Exploring AI applications...",
        "/papers/ai_health_v1.pdf", rudra,
    )
    review = await engine.assign_reviewer(health.id, 1, rahul, shahrukh)
    await engine.record_review_outcome(
        review.id, "Needs more data", 3, acting_user_id=rahul
    )

    await engine.submit_paper_version(
        health.id, "Advanced AI in Healthcare", "Updated research on AI...",
        "/papers/ai_health_v2.pdf", rudra,
    )
    review = await engine.assign_reviewer(health.id, 2, rahul, shahrukh)
    await engine.record_review_outcome(
        review.id, "Improved significantly", 4, acting_user_id=rahul
    )

    await engine.submit_paper_version(
        quantum.id, "Quantum Computing", "Breakthroughs in quantum...",
        "/papers/quantum_v1.pdf", rahul,
    )

    await engine.add_citation(health.id, quantum.id, rudra)

    await engine.tag_paper(health.id, "Artificial Intelligence", rudra)
    await engine.tag_paper(health.id, "Healthcare", rudra)
    await engine.tag_paper(quantum.id, "Quantum Physics", rahul)

    await engine.set_paper_status(health.id, "UNDER_REVIEW", shahrukh)
    await engine.set_paper_status(quantum.id, "ACCEPTED", shahrukh)

    if import_authors:
        imported = await engine.bulk_import_papers(parse_author_ids(import_authors))
        logger.info("Imported papers", extra={"paper_ids": [p.id for p in imported]})

    async with async_session_maker() as session:
        search = SearchService(session)
        stats = StatisticsService(session)

        print("=== Current versions ===")
        for row in await search.list_current_versions():
            print(f"  [{row.paper_id}] {row.title} ({row.status.value})")

        print("\n=== Search 'AI' ===")
        for hit in await search.search_papers("AI"):
            print(f"  [{hit.paper_id}] {hit.title}")

        print("\n=== Most cited ===")
        for row in await stats.most_cited_papers():
            print(f"  [{row.paper_id}] {row.title}: {row.citation_count}")

        print("\n=== Active reviewers ===")
        for row in await stats.active_reviewers():
            print(f"  {row.full_name}: {row.reviews_completed}")

        print(f"\n=== Audit trail of paper {health.id} ===")
        history = await AuditRecorder(session).entity_history("papers", str(health.id))
        for entry in map(AuditEntryResponse.model_validate, reversed(history)):
            print(f"  {entry.action.value:<6} by user {entry.performed_by}: {entry.new_data or entry.old_data}")


def main() -> None:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--import-authors",
        default="",
        help="Comma-separated author ids to bulk import as bare papers",
    )
    args = parser.parse_args()

    settings = get_settings()
    configure_logging(
        log_level=settings.log_level,
        environment=settings.environment,
        debug=settings.debug,
    )

    async def run() -> None:
        try:
            await seed(args.import_authors)
        finally:
            await close_db()

    asyncio.run(run())


if __name__ == "__main__":
    main()
