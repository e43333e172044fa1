"""
Permission Core - RBAC access control.
"""

from paperflow.kernel.permissions.permission_service import (
    check_role,
    require_any_role,
    require_role,
)

__all__ = [
    "check_role",
    "require_any_role",
    "require_role",
]
