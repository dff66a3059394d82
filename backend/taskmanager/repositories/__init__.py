"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from taskmanager.repositories.base import BaseRepository, apply_sorting
from taskmanager.repositories.membership import TeamMembershipRepository
from taskmanager.repositories.refresh_token import RefreshTokenRepository
from taskmanager.repositories.task import TaskRepository
from taskmanager.repositories.team import TeamRepository
from taskmanager.repositories.user import UserRepository
from taskmanager.repositories.verification_token import VerificationTokenRepository

__all__ = [
    "BaseRepository",
    "apply_sorting",
    "RefreshTokenRepository",
    "TaskRepository",
    "TeamMembershipRepository",
    "TeamRepository",
    "UserRepository",
    "VerificationTokenRepository",
]
