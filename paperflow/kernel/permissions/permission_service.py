"""
Role-based authorization for workflow commands.

Every state-changing command calls require_role (or require_any_role) with
the role directory bound to its own transaction, so the check and the
mutation it guards commit or roll back together.
"""

from typing import Iterable, Optional

from paperflow.kernel.errors import AuthorizationError
from paperflow.kernel.identity.identity_service import RoleDirectory
from paperflow.kernel.models.user import Role


async def check_role(directory: RoleDirectory, user_id: int, role: Role) -> bool:
    """Check if user currently holds role."""
    return Role(role) in await directory.roles_of(user_id)


async def require_role(
    directory: RoleDirectory,
    user_id: int,
    role: Role,
    message: Optional[str] = None,
) -> None:
    """
    Raise AuthorizationError unless user currently holds role.

    Args:
        directory: Role directory on the command's session
        user_id: User being authorized
        role: Required role
        message: Error message override
    """
    if not await check_role(directory, user_id, role):
        raise AuthorizationError(
            message or f"User {user_id} does not hold the {Role(role).value} role"
        )


async def require_any_role(
    directory: RoleDirectory,
    user_id: int,
    roles: Iterable[Role],
    message: Optional[str] = None,
) -> None:
    """Raise AuthorizationError unless user holds at least one of roles."""
    wanted = {Role(r) for r in roles}
    if not wanted & await directory.roles_of(user_id):
        names = ", ".join(sorted(r.value for r in wanted))
        raise AuthorizationError(
            message or f"User {user_id} needs one of the roles: {names}"
        )
