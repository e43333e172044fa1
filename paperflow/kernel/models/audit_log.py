"""
Immutable audit log.

Every mutation of a tracked table is recorded here in the same transaction
as the mutation itself. Rows are append-only.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import (
    BigInteger,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    JSON,
    String,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column

from paperflow.kernel.models.base import Base, utcnow


class AuditAction(str, Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class AuditLogEntry(Base):
    """
    One change record.

    record_id holds the string form of the entity's primary key; composite
    keys are joined with "-". No foreign key to the audited table: history
    outlives the entity.
    """

    __tablename__ = "audit_logs"

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"),
        primary_key=True,
        autoincrement=True,
    )
    table_name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    record_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
    )
    action: Mapped[AuditAction] = mapped_column(
        String(10),
        nullable=False,
    )
    old_data: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )
    new_data: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )
    performed_by: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    performed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utcnow,
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_audit_logs_entity", "table_name", "record_id"),
        Index("ix_audit_logs_user_time", "performed_by", "performed_at"),
    )

    def __repr__(self) -> str:
        return f"<AuditLogEntry {self.action} {self.table_name}:{self.record_id}>"
