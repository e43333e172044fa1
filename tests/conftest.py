"""
Pytest fixtures for paper workflow tests.
"""

from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from paperflow.config import Settings
from paperflow.database import build_engine, build_session_maker, init_db
from paperflow.kernel.identity import RoleDirectory
from paperflow.kernel.models import AuditLogEntry, Role, User
from paperflow.orchestration import WorkflowEngine, transaction


@pytest_asyncio.fixture(scope="function")
async def db_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """File-based SQLite so concurrent sessions share one database."""
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'paperflow_test.db'}")
    await init_db(bind=engine)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_maker(db_engine) -> async_sessionmaker[AsyncSession]:
    return build_session_maker(db_engine)


@pytest_asyncio.fixture
async def db_session(session_maker) -> AsyncGenerator[AsyncSession, None]:
    """A plain session for assertions after commands have committed."""
    async with session_maker() as session:
        yield session


@pytest.fixture
def settings() -> Settings:
    return Settings(
        database_url="sqlite+aiosqlite://",
        transaction_timeout_seconds=10.0,
    )


@pytest.fixture
def workflow(session_maker, settings) -> WorkflowEngine:
    return WorkflowEngine(session_maker, settings)


async def _register(session_maker, email, full_name, roles) -> User:
    async with transaction(session_maker) as session:
        return await RoleDirectory(session).register_user(email, full_name, roles=roles)


@pytest_asyncio.fixture
async def author(session_maker) -> User:
    return await _register(session_maker, "rudra@example.com", "Rudra Kanwar", [Role.AUTHOR])


@pytest_asyncio.fixture
async def author_reviewer(session_maker) -> User:
    """Holds both AUTHOR and REVIEWER."""
    return await _register(
        session_maker, "rahul@example.com", "Rahul Kumar", [Role.AUTHOR, Role.REVIEWER]
    )


@pytest_asyncio.fixture
async def admin(session_maker) -> User:
    return await _register(session_maker, "shahrukh@example.com", "Shahrukh Khan", [Role.ADMIN])


@pytest_asyncio.fixture
async def outsider(session_maker) -> User:
    """A registered user with no roles."""
    return await _register(session_maker, "nobody@example.com", "No Roles", [])


@pytest_asyncio.fixture
async def draft_paper(workflow, author):
    return await workflow.create_paper(author.id)


@pytest.fixture
def count_rows(session_maker):
    """Committed row count of a mapped table (AuditLogEntry by default)."""

    async def _count(model=AuditLogEntry) -> int:
        async with session_maker() as session:
            return await session.scalar(select(func.count()).select_from(model)) or 0

    return _count
