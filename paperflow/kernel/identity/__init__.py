"""
Identity Core - users and their roles.
"""

from paperflow.kernel.identity.identity_service import RoleDirectory

__all__ = [
    "RoleDirectory",
]
