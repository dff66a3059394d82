"""User repository for persistence and credential lookups."""

from __future__ import annotations

from sqlalchemy import select

from taskmanager.models.user import User
from taskmanager.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It NEVER handles tokens or sessions; only DB-level user lookups.
    """

    model = User

    def _sortable_fields(self):
        return {
            "id": User.id,
            "email": User.email,
            "username": User.username,
            "created_at": User.created_at,
        }

    def _filterable_fields(self):
        return {
            "email": User.email,
            "username": User.username,
            "is_verified": User.is_verified,
        }

    def _updatable_fields(self):
        """Publicly allowed updatable fields (not including password)."""
        return {"email", "username", "full_name", "is_verified"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by email (case-insensitive).

        :param email: Email address to normalise and search.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        return self.find_one(email=email.lower().strip())

    def get_by_username(self, username: str) -> User | None:
        """Fetch a user by exact (trimmed) username.

        :param username: Login handle.
        :type username: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        return self.find_one(username=username.strip())

    def get_by_identifier(self, identifier: str) -> User | None:
        """Resolve an email (contains ``@``) or a username to a user."""
        if "@" in identifier:
            return self.get_by_email(identifier)
        return self.get_by_username(identifier)

    def exists_by_email(self, email: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(User.id).where(User.email == email.lower().strip())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return bool(self.session.execute(stmt).first())

    def exists_by_username(self, username: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(User.id).where(User.username == username.strip())
        if exclude_id is not None:
            stmt = stmt.where(User.id != exclude_id)
        return bool(self.session.execute(stmt).first())
