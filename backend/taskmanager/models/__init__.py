from taskmanager.models.enums import TaskStatus, TeamRole
from taskmanager.models.task import Task
from taskmanager.models.team import Team, TeamMembership
from taskmanager.models.tokens import RefreshToken, VerificationToken
from taskmanager.models.user import User

__all__ = [
    "RefreshToken",
    "Task",
    "TaskStatus",
    "Team",
    "TeamMembership",
    "TeamRole",
    "User",
    "VerificationToken",
]
