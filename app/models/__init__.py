"""SQLModel entities for the Task Manager application."""

from app.models.revoked_token import RevokedToken
from app.models.task import Task
from app.models.user import User

__all__ = [
    "User",
    "Task",
    "RevokedToken",
]
