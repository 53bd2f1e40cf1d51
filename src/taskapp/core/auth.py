"""Authentication utilities."""
import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from taskapp.config import Settings
from taskapp.core.security import (
    InvalidTokenError,
    create_auth_token,
    decode_auth_token,
    verify_password,
)
from taskapp.models import User, UserToken

logger = logging.getLogger(__name__)


def get_user_by_id(db: Session, user_id: int) -> User | None:
    """
    Get a user by ID.

    Args:
        db: Database session
        user_id: User ID

    Returns:
        User if found, None otherwise
    """
    stmt = select(User).where(User.id == user_id)
    return db.execute(stmt).scalar_one_or_none()


def get_user_by_email(db: Session, email: str) -> User | None:
    """Get a user by email address, ignoring case and surrounding spaces.

    The column type normalizes the bound value.
    """
    stmt = select(User).where(User.email == email)
    return db.execute(stmt).scalar_one_or_none()


def authenticate_user(db: Session, email: str, password: str) -> User | None:
    """
    Authenticate a user by email and password.

    Unknown email and wrong password both return None so callers cannot
    tell the two apart.

    Args:
        db: Database session
        email: Email address
        password: Plaintext password

    Returns:
        User object if authentication successful, None otherwise
    """
    user = get_user_by_email(db, email)
    if not user:
        return None

    if not verify_password(password, user.hashed_password):
        return None

    return user


def issue_token(db: Session, user: User, settings: Settings) -> str:
    """
    Mint a token for the user and append it to their session list.

    Args:
        db: Database session
        user: User logging in
        settings: Application settings

    Returns:
        The signed token
    """
    token = create_auth_token(user.id, settings)
    user.tokens.append(UserToken(token=token))
    db.commit()
    db.refresh(user)

    logger.info(f"Issued token for user {user.id} ({len(user.tokens)} active)")
    return token


def resolve_token(db: Session, token: str, settings: Settings) -> User | None:
    """
    Resolve a bearer token to its user.

    Both checks must pass: the signature verifies, and the exact token is
    still present in the user's session list. The second check is what makes
    logout effective for tokens whose signature remains valid.

    Args:
        db: Database session
        token: Raw bearer token
        settings: Application settings

    Returns:
        User if the token is valid and live, None otherwise
    """
    try:
        user_id = decode_auth_token(token, settings)
    except InvalidTokenError as e:
        logger.debug(f"Rejected bearer token: {e}")
        return None

    stmt = (
        select(User)
        .join(UserToken, UserToken.user_id == User.id)
        .where(User.id == user_id, UserToken.token == token)
    )
    return db.execute(stmt).scalar_one_or_none()


def revoke_token(db: Session, user: User, token: str) -> None:
    """Remove a single session token, leaving the user's other sessions alive."""
    user.tokens = [t for t in user.tokens if t.token != token]
    db.commit()


def revoke_all_tokens(db: Session, user: User) -> None:
    """Remove every session token for the user."""
    user.tokens = []
    db.commit()
