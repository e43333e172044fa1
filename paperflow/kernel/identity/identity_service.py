"""
Identity/role directory.

Resolves users to the roles they currently hold. Registration and role
changes are audited like any other tracked mutation.
"""

from typing import Iterable, Optional, Set

from sqlalchemy import and_, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from paperflow.kernel.audit import AuditRecorder, record_key
from paperflow.kernel.errors import ConflictError, NotFoundError, ValidationError
from paperflow.kernel.models.base import utcnow
from paperflow.kernel.models.user import Role, User, UserRole
from paperflow.logging_config import get_logger

logger = get_logger(__name__)


class RoleDirectory:
    """
    Service for user identity and role lookups.

    Role checks are point-in-time: callers ask for the roles a user holds
    now, inside the transaction of the command being authorized.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.audit = AuditRecorder(session)

    async def roles_of(self, user_id: int) -> Set[Role]:
        """Roles currently held by a user (empty for unknown users)."""
        query = select(UserRole.role).where(UserRole.user_id == user_id)
        result = await self.session.execute(query)
        return {Role(r) for r in result.scalars().all()}

    async def user_exists(self, user_id: int) -> bool:
        query = select(User.id).where(User.id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none() is not None

    async def get_user(self, user_id: int) -> Optional[User]:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == email.lower().strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def register_user(
        self,
        email: str,
        full_name: str,
        credential_ref: str = "",
        roles: Iterable[Role] = (),
    ) -> User:
        """
        Register a new user with an initial set of roles.

        Args:
            email: User's email address (normalised to lower case)
            full_name: Display name
            credential_ref: Opaque reference owned by the auth collaborator
            roles: Roles granted at creation

        Returns:
            The created User

        Raises:
            ValidationError: If email or name is blank
            ConflictError: If email already exists
        """
        email = email.lower().strip()
        full_name = full_name.strip()
        if not email:
            raise ValidationError("Email is required", field="email")
        if not full_name:
            raise ValidationError("Full name is required", field="full_name")

        if await self.get_user_by_email(email):
            raise ConflictError("Email already registered", field="email")

        user = User(email=email, full_name=full_name, credential_ref=credential_ref)
        self.session.add(user)
        await self.session.flush()  # Get the ID

        await self.audit.record_insert(user, performed_by=user.id)

        for role in dict.fromkeys(Role(r) for r in roles):
            link = UserRole(user_id=user.id, role=role)
            self.session.add(link)
            await self.session.flush()
            await self.audit.record_insert(link, performed_by=user.id)

        logger.info("User registered", extra={"user_id": user.id})
        return user

    async def grant_role(self, user_id: int, role: Role, granted_by: int) -> bool:
        """
        Grant a role (admin only).

        Returns:
            True if the role was added, False if the user already held it
        """
        from paperflow.kernel.permissions import require_role

        await require_role(self, granted_by, Role.ADMIN, "Only admins can change roles")
        if not await self.user_exists(user_id):
            raise NotFoundError(f"User {user_id} not found")

        role = Role(role)
        if role in await self.roles_of(user_id):
            return False

        link = UserRole(user_id=user_id, role=role)
        self.session.add(link)
        await self.session.flush()
        await self.audit.record_insert(link, performed_by=granted_by)

        logger.info("Role granted", extra={"user_id": user_id, "role": role.value})
        return True

    async def revoke_role(self, user_id: int, role: Role, revoked_by: int) -> bool:
        """
        Revoke a role (admin only).

        Existing review assignments are left untouched.

        Returns:
            True if the role was removed, False if the user did not hold it
        """
        from paperflow.kernel.permissions import require_role

        await require_role(self, revoked_by, Role.ADMIN, "Only admins can change roles")

        role = Role(role)
        if role not in await self.roles_of(user_id):
            return False

        await self.audit.record(
            table_name=UserRole.__tablename__,
            record_id=record_key(user_id, role.value),
            action="DELETE",
            performed_by=revoked_by,
            old_data={"user_id": user_id, "role": role.value},
        )
        await self.session.execute(
            delete(UserRole).where(
                and_(UserRole.user_id == user_id, UserRole.role == role)
            )
        )

        logger.info("Role revoked", extra={"user_id": user_id, "role": role.value})
        return True

    async def record_login(self, user_id: int) -> User:
        """Stamp last_login for a user."""
        user = await self.get_user(user_id)
        if not user:
            raise NotFoundError(f"User {user_id} not found")
        user.last_login = utcnow()
        await self.session.flush()
        return user
