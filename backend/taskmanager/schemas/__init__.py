"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    LoginSchema,
    RefreshSchema,
    RegisterSchema,
    ResendVerificationSchema,
    TokenPairSchema,
)
from .task import TaskCreateSchema, TaskQuerySchema, TaskSchema, TaskUpdateSchema
from .team import MemberAddSchema, MemberRoleSchema, MemberSchema, TeamCreateSchema, TeamSchema
from .user import PasswordChangeSchema, ProfileUpdateSchema, UserSchema

__all__ = [
    "LoginSchema",
    "RefreshSchema",
    "RegisterSchema",
    "ResendVerificationSchema",
    "TokenPairSchema",
    "TaskSchema",
    "TaskCreateSchema",
    "TaskUpdateSchema",
    "TaskQuerySchema",
    "TeamSchema",
    "TeamCreateSchema",
    "MemberAddSchema",
    "MemberRoleSchema",
    "MemberSchema",
    "UserSchema",
    "ProfileUpdateSchema",
    "PasswordChangeSchema",
]
