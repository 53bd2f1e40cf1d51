"""User service for registration, profile changes and account removal."""
import logging
from typing import Any

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from taskapp.config import Settings
from taskapp.core.auth import get_user_by_email, issue_token
from taskapp.core.security import hash_password
from taskapp.models import Task, User
from taskapp.schemas.user import UserCreate, UserResponse, UserUpdate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(UserUpdate.model_fields)

DUPLICATE_EMAIL = "Email is already registered"


def _email_taken(db: Session, email: str, exclude_user_id: int | None = None) -> bool:
    stmt = select(User.id).where(User.email == email)
    if exclude_user_id is not None:
        stmt = stmt.where(User.id != exclude_user_id)
    return db.execute(stmt).first() is not None


def _commit_unique(db: Session) -> None:
    """Commit, turning a unique-email violation into a 400."""
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=DUPLICATE_EMAIL,
        )


def register_user(db: Session, user_data: UserCreate, settings: Settings) -> tuple[User, str]:
    """
    Create a user and log them in.

    Args:
        db: Database session
        user_data: Validated registration data
        settings: Application settings

    Returns:
        Tuple of (created user, first session token)

    Raises:
        HTTPException: If the email is already registered
    """
    if get_user_by_email(db, user_data.email):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=DUPLICATE_EMAIL,
        )

    user = User(
        name=user_data.name,
        email=user_data.email,
        hashed_password=hash_password(user_data.password),
        age=user_data.age,
    )
    db.add(user)
    _commit_unique(db)
    db.refresh(user)
    logger.info(f"Registered user {user.id}")

    token = issue_token(db, user, settings)
    return user, token


def update_user(db: Session, user: User, updates: dict[str, Any]) -> User:
    """
    Apply an allow-listed partial update to a user.

    Any key outside ``name``, ``email``, ``password`` and ``age`` rejects the
    whole request before anything is applied.

    Args:
        db: Database session
        user: User being updated
        updates: Raw request body

    Returns:
        Updated user

    Raises:
        HTTPException: If a field is not updatable or the email is taken
        RequestValidationError: If a value fails validation
    """
    if not set(updates) <= UPDATABLE_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid request",
        )

    try:
        changes = UserUpdate.model_validate(updates).model_dump(exclude_unset=True)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False), body=updates)

    if "email" in changes and _email_taken(db, changes["email"], exclude_user_id=user.id):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=DUPLICATE_EMAIL,
        )

    password = changes.pop("password", None)
    if password is not None:
        user.hashed_password = hash_password(password)

    for field, value in changes.items():
        setattr(user, field, value)

    _commit_unique(db)
    db.refresh(user)
    return user


def delete_user(db: Session, user: User) -> UserResponse:
    """
    Delete a user together with every task they own.

    Both deletes share one transaction, so no task outlives its owner.

    Args:
        db: Database session
        user: User to delete

    Returns:
        The user's last public representation
    """
    snapshot = UserResponse.model_validate(user)

    result = db.execute(delete(Task).where(Task.owner_id == user.id))
    db.delete(user)
    db.commit()

    logger.info(f"Deleted user {snapshot.id} and {result.rowcount} tasks")
    return snapshot


def set_avatar(db: Session, user: User, avatar: bytes) -> None:
    """Store normalized avatar bytes on the user."""
    user.avatar = avatar
    db.commit()


def clear_avatar(db: Session, user: User) -> None:
    """Remove the user's avatar."""
    user.avatar = None
    db.commit()
