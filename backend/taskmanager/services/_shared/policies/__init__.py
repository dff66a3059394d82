from taskmanager.services._shared.policies.access_guard import AccessGuard
from taskmanager.services._shared.policies.team_roles import (
    can_manage_members,
    require_can_manage_members,
    require_owner,
    validate_member_removal,
    validate_new_member_role,
    validate_role_change,
)

__all__ = [
    "AccessGuard",
    "can_manage_members",
    "require_can_manage_members",
    "require_owner",
    "validate_member_removal",
    "validate_new_member_role",
    "validate_role_change",
]
