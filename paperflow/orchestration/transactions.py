"""
Scoped transactions for workflow commands.

Each command opens exactly one transaction:

    async with transaction(session_maker, timeout=10) as session:
        ...

On normal exit the transaction commits; on any exception, including the
timeout, it rolls back and nothing the command wrote is visible.
"""

import asyncio
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from paperflow.kernel.errors import TransactionTimeoutError
from paperflow.logging_config import command_id_var, get_logger

logger = get_logger(__name__)


@asynccontextmanager
async def transaction(
    session_maker: async_sessionmaker[AsyncSession],
    timeout: Optional[float] = None,
) -> AsyncIterator[AsyncSession]:
    """
    Open a session and a transaction bounded by timeout seconds.

    Raises:
        TransactionTimeoutError: If the body plus commit exceed timeout
    """
    token = command_id_var.set(uuid.uuid4().hex[:12])
    try:
        async with session_maker() as session:
            try:
                async with asyncio.timeout(timeout):
                    async with session.begin():
                        yield session
            except TimeoutError as exc:
                logger.warning("Transaction timed out", extra={"timeout": timeout})
                raise TransactionTimeoutError(
                    f"Transaction exceeded {timeout} seconds and was rolled back"
                ) from exc
    finally:
        command_id_var.reset(token)
