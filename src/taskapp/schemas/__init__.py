"""Pydantic schemas for request/response validation."""
from taskapp.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskapp.schemas.user import (
    AuthResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)

__all__ = [
    # User schemas
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "AuthResponse",
    # Task schemas
    "TaskCreate",
    "TaskUpdate",
    "TaskResponse",
]
