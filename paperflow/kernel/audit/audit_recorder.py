"""
Audit recorder for append-only change logging.

Every workflow command records its mutations here inside its own
transaction. If the append fails, the command fails and rolls back with it.
"""

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from sqlalchemy import and_, desc, func, inspect, select
from sqlalchemy.ext.asyncio import AsyncSession

from paperflow.kernel.models.audit_log import AuditAction, AuditLogEntry
from paperflow.kernel.models.base import Base

KEY_DELIMITER = "-"


def record_key(*parts: Any) -> str:
    """String form of a (possibly composite) primary key."""
    return KEY_DELIMITER.join(str(p) for p in parts)


def snapshot(obj: Base) -> Dict[str, Any]:
    """Column values of a mapped object as a JSON-serializable dict."""
    state = inspect(obj)
    data = {
        attr.key: getattr(obj, attr.key)
        for attr in state.mapper.column_attrs
    }
    return serialize_payload(data)


def serialize_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Convert payload values to JSON-serializable types."""
    result = {}
    for key, value in payload.items():
        result[key] = _serialize_value(value)
    return result


def _serialize_value(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return serialize_payload(value)
    if isinstance(value, (list, tuple, set)):
        return [_serialize_value(v) for v in value]
    return value


class AuditRecorder:
    """
    Service for appending to and reading the immutable audit log.

    Usage:
        recorder = AuditRecorder(session)
        await recorder.record_insert(version, performed_by=submitter_id)
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def record(
        self,
        table_name: str,
        record_id: str,
        action: AuditAction,
        performed_by: int,
        old_data: Optional[Dict[str, Any]] = None,
        new_data: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        """
        Append one change record to the current transaction.

        The entry is flushed immediately so a failing append surfaces inside
        the command that caused it.

        Args:
            table_name: Audited table
            record_id: String form of the entity key (see record_key)
            action: INSERT, UPDATE or DELETE
            performed_by: Acting user
            old_data: State before the change (UPDATE/DELETE)
            new_data: State after the change (INSERT/UPDATE)

        Returns:
            The created AuditLogEntry
        """
        entry = AuditLogEntry(
            table_name=table_name,
            record_id=record_id,
            action=AuditAction(action),
            old_data=serialize_payload(old_data) if old_data is not None else None,
            new_data=serialize_payload(new_data) if new_data is not None else None,
            performed_by=performed_by,
        )
        self.session.add(entry)
        await self.session.flush()
        return entry

    async def record_insert(self, obj: Base, performed_by: int) -> AuditLogEntry:
        """Record the insertion of a flushed mapped object."""
        return await self.record(
            table_name=obj.__tablename__,
            record_id=_key_of(obj),
            action=AuditAction.INSERT,
            performed_by=performed_by,
            new_data=snapshot(obj),
        )

    async def record_update(
        self,
        obj: Base,
        old_data: Dict[str, Any],
        performed_by: int,
    ) -> AuditLogEntry:
        """Record an update; old_data is a snapshot taken before mutating."""
        return await self.record(
            table_name=obj.__tablename__,
            record_id=_key_of(obj),
            action=AuditAction.UPDATE,
            performed_by=performed_by,
            old_data=old_data,
            new_data=snapshot(obj),
        )

    async def record_delete(
        self,
        obj: Base,
        performed_by: int,
        old_data: Optional[Dict[str, Any]] = None,
    ) -> AuditLogEntry:
        """Record a deletion; call before the row is removed."""
        return await self.record(
            table_name=obj.__tablename__,
            record_id=_key_of(obj),
            action=AuditAction.DELETE,
            performed_by=performed_by,
            old_data=old_data if old_data is not None else snapshot(obj),
        )

    async def entity_history(
        self,
        table_name: str,
        record_id: str,
        limit: int = 100,
        offset: int = 0,
    ) -> List[AuditLogEntry]:
        """
        Get the change history of one entity, newest first.

        Args:
            table_name: Audited table
            record_id: String form of the entity key
            limit: Maximum number of entries to return
            offset: Number of entries to skip
        """
        query = (
            select(AuditLogEntry)
            .where(
                and_(
                    AuditLogEntry.table_name == table_name,
                    AuditLogEntry.record_id == record_id,
                )
            )
            .order_by(desc(AuditLogEntry.performed_at), desc(AuditLogEntry.id))
            .offset(offset)
            .limit(limit)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def user_activity(
        self,
        user_id: int,
        since: Optional[datetime] = None,
        limit: int = 100,
    ) -> List[AuditLogEntry]:
        """Get all entries performed by a user, newest first."""
        query = select(AuditLogEntry).where(AuditLogEntry.performed_by == user_id)
        if since:
            query = query.where(AuditLogEntry.performed_at >= since)
        query = query.order_by(
            desc(AuditLogEntry.performed_at), desc(AuditLogEntry.id)
        ).limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_entries(
        self,
        table_name: Optional[str] = None,
        record_id: Optional[str] = None,
        action: Optional[AuditAction] = None,
    ) -> int:
        """Count entries matching the given criteria."""
        query = select(func.count(AuditLogEntry.id))
        if table_name:
            query = query.where(AuditLogEntry.table_name == table_name)
        if record_id:
            query = query.where(AuditLogEntry.record_id == record_id)
        if action:
            query = query.where(AuditLogEntry.action == action)

        result = await self.session.execute(query)
        return result.scalar() or 0


def _key_of(obj: Base) -> str:
    identity = inspect(obj).mapper.primary_key_from_instance(obj)
    return record_key(*identity)
