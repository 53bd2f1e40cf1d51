"""FastAPI dependencies for authentication and database."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from taskapp.config import Settings, get_settings
from taskapp.core.auth import resolve_token
from taskapp.core.context import AuthContext
from taskapp.database import get_db
from taskapp.services.email_service import EmailService

# HTTP Bearer token authentication
bearer_scheme = HTTPBearer(auto_error=False)


def get_auth_context(
    token: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[Session, Depends(get_db)],
    settings: Annotated[Settings, Depends(get_settings)],
) -> AuthContext:
    """
    Resolve the bearer token to the calling user.

    Every failure (missing header, bad signature, unknown user, revoked
    token) yields the same 401 so callers learn nothing about which accounts
    or tokens exist.

    Args:
        token: Bearer token from Authorization header
        db: Database session
        settings: Application settings

    Returns:
        AuthContext with the user and the raw token

    Raises:
        HTTPException: If the token is missing or not valid
    """
    user = resolve_token(db, token.credentials, settings) if token else None
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Please authenticate",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return AuthContext(user=user, token=token.credentials)


def get_email_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> EmailService:
    """Email sender bound to the current settings."""
    return EmailService(settings)


# Type aliases for cleaner dependency injection
CurrentAuth = Annotated[AuthContext, Depends(get_auth_context)]
DatabaseSession = Annotated[Session, Depends(get_db)]
AppSettings = Annotated[Settings, Depends(get_settings)]
Mailer = Annotated[EmailService, Depends(get_email_service)]
