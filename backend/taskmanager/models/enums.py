"""Enumerations shared by models, policies and services (no ORM imports)."""

from __future__ import annotations

from enum import Enum


class TeamRole(str, Enum):
    """Role a user holds inside a team.

    Exactly one membership per team carries :attr:`OWNER`.
    """

    OWNER = "OWNER"
    ADMIN = "ADMIN"
    MEMBER = "MEMBER"

    def can_manage_members(self) -> bool:
        """Return ``True`` for roles allowed to add, remove or re-role members."""
        return self in (TeamRole.OWNER, TeamRole.ADMIN)

    def is_owner(self) -> bool:
        """Return ``True`` when the role is :attr:`OWNER`."""
        return self is TeamRole.OWNER


class TaskStatus(str, Enum):
    """Lifecycle state of a task."""

    TODO = "TODO"
    IN_PROGRESS = "IN_PROGRESS"
    DONE = "DONE"
