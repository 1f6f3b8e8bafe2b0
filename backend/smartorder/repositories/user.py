"""
User store for user CRUD, e-mail lookups and role filters.
"""

from typing import Optional, Union

from sqlalchemy import select

from smartorder.models.user import Role, User, parse_role
from smartorder.repositories.base import BaseStore, contains_pattern, equals_ignore_case


class UserStore(BaseStore[User]):
    """
    Store for the users table.

    E-mail lookups ignore case. The unique index on lower(email) makes the
    second of two concurrent inserts with the same address fail with an
    IntegrityError, so exists_by_email_ignore_case is advisory only.
    """

    model = User

    async def find_by_email_ignore_case(self, email: str) -> Optional[User]:
        """
        Find the user registered with `email`, ignoring case.

        Used for login lookups and duplicate checks.

        Returns:
            User if found, None otherwise
        """
        stmt = select(User).where(equals_ignore_case(User.email, email)).order_by(User.id)
        return await self._first("find_by_email_ignore_case", stmt)

    async def exists_by_email_ignore_case(self, email: str) -> bool:
        """
        Check if a user with this e-mail exists, ignoring case.

        Returns:
            True if e-mail is registered, False otherwise

        Note:
            Runs an EXISTS query instead of loading the row. The answer can
            be stale by the time the caller inserts.
        """
        return await self._exists(
            "exists_by_email_ignore_case",
            equals_ignore_case(User.email, email),
        )

    async def find_by_role(self, role: Union[Role, str]) -> list[User]:
        """
        Users with exactly the given role.

        Accepts a Role or a role name in any case, like User.role does.
        """
        stmt = select(User).where(User.role == parse_role(role)).order_by(User.id)
        return await self._scalars("find_by_role", stmt)

    async def find_by_name_containing_ignore_case(self, text: str) -> list[User]:
        """Users whose name contains `text`, ignoring case."""
        stmt = (
            select(User)
            .where(contains_pattern(User.name, text))
            .order_by(User.id)
        )
        return await self._scalars("find_by_name_containing_ignore_case", stmt)

    async def find_all_by_order_by_name_asc(self) -> list[User]:
        """All users sorted by name, ascending."""
        stmt = select(User).order_by(User.name.asc(), User.id.asc())
        return await self._scalars("find_all_by_order_by_name_asc", stmt)
