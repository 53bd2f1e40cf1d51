"""Database models."""
from taskapp.models.task import Task
from taskapp.models.token import UserToken
from taskapp.models.user import User

__all__ = [
    "User",
    "UserToken",
    "Task",
]
