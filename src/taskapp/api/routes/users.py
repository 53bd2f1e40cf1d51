"""User account, session and avatar routes."""
import logging
from typing import Annotated, Any

from fastapi import APIRouter, BackgroundTasks, Body, File, HTTPException, Response, UploadFile, status
from fastapi.responses import PlainTextResponse

from taskapp.api.deps import AppSettings, CurrentAuth, DatabaseSession, Mailer
from taskapp.core.auth import authenticate_user, issue_token, revoke_all_tokens, revoke_token
from taskapp.schemas.user import AuthResponse, UserCreate, UserLogin, UserResponse
from taskapp.services.avatar_service import AvatarError, process_upload
from taskapp.services.user_service import (
    clear_avatar,
    delete_user,
    register_user,
    set_avatar,
    update_user,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])

LOGGED_OUT = "Logged out successfully"


@router.post("", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    user_data: UserCreate,
    db: DatabaseSession,
    settings: AppSettings,
    mailer: Mailer,
    background_tasks: BackgroundTasks,
):
    """
    Register a new user and start their first session.

    Args:
        user_data: Registration data
        db: Database session
        settings: Application settings
        mailer: Email sender
        background_tasks: Post-response task queue

    Returns:
        Created user and token
    """
    user, token = register_user(db, user_data, settings)
    background_tasks.add_task(mailer.send_welcome_email, user.email, user.name)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.post("/login", response_model=AuthResponse)
def login(credentials: UserLogin, db: DatabaseSession, settings: AppSettings):
    """
    Log in with email and password.

    Unknown email and wrong password produce the same 400.
    """
    user = authenticate_user(db, credentials.email, credentials.password)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid userid or password",
        )

    token = issue_token(db, user, settings)
    return AuthResponse(user=UserResponse.model_validate(user), token=token)


@router.get("/logout", response_class=PlainTextResponse)
def logout(auth: CurrentAuth, db: DatabaseSession):
    """End the session whose token made this request."""
    revoke_token(db, auth.user, auth.token)
    return LOGGED_OUT


@router.get("/logoutAll", response_class=PlainTextResponse)
def logout_all(auth: CurrentAuth, db: DatabaseSession):
    """End every session of the current user."""
    revoke_all_tokens(db, auth.user)
    return LOGGED_OUT


@router.get("", response_model=UserResponse)
def read_profile(auth: CurrentAuth):
    """Get the current user's profile."""
    return auth.user


@router.patch("", response_model=UserResponse)
def update_profile(
    updates: Annotated[dict[str, Any], Body()],
    auth: CurrentAuth,
    db: DatabaseSession,
):
    """
    Update the current user's profile.

    Args:
        updates: Fields to change (name, email, password, age)
        auth: Authenticated request context
        db: Database session

    Returns:
        Updated user
    """
    return update_user(db, auth.user, updates)


@router.delete("", response_model=UserResponse)
def delete_profile(
    auth: CurrentAuth,
    db: DatabaseSession,
    mailer: Mailer,
    background_tasks: BackgroundTasks,
):
    """Delete the current user and all of their tasks."""
    deleted = delete_user(db, auth.user)
    background_tasks.add_task(mailer.send_goodbye_email, deleted.email, deleted.name)
    return deleted


@router.post("/avatar")
def upload_avatar(
    auth: CurrentAuth,
    db: DatabaseSession,
    settings: AppSettings,
    upload: Annotated[UploadFile | None, File()] = None,
):
    """
    Upload a profile image.

    The image is stored as a 250x250 PNG. Failures return an empty 400.
    """
    if upload is None:
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    data = upload.file.read(settings.avatar_max_bytes + 1)
    try:
        avatar = process_upload(upload.filename, data, settings)
    except AvatarError as e:
        logger.info(f"Rejected avatar for user {auth.user.id}: {e}")
        return Response(status_code=status.HTTP_400_BAD_REQUEST)

    set_avatar(db, auth.user, avatar)
    return Response(status_code=status.HTTP_200_OK)


@router.get("/avatar")
def read_avatar(auth: CurrentAuth):
    """Download the current user's avatar as PNG."""
    if auth.user.avatar is None:
        return Response(status_code=status.HTTP_404_NOT_FOUND)
    return Response(content=auth.user.avatar, media_type="image/png")


@router.delete("/avatar")
def delete_avatar(auth: CurrentAuth, db: DatabaseSession):
    """Remove the current user's avatar."""
    clear_avatar(db, auth.user)
    return Response(status_code=status.HTTP_200_OK)
