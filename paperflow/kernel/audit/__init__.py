"""
Append-only audit trail.
"""

from paperflow.kernel.audit.audit_recorder import (
    AuditRecorder,
    record_key,
    serialize_payload,
    snapshot,
)

__all__ = [
    "AuditRecorder",
    "record_key",
    "serialize_payload",
    "snapshot",
]
