"""
Audit log schemas.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from paperflow.kernel.models.audit_log import AuditAction


class AuditEntryResponse(BaseModel):
    """One audit log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    table_name: str
    record_id: str
    action: AuditAction
    old_data: Optional[Dict[str, Any]]
    new_data: Optional[Dict[str, Any]]
    performed_by: int
    performed_at: datetime
