"""User Pydantic schemas."""
from datetime import datetime
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    field_validator,
)

PASSWORD_MIN_LENGTH = 6
DEFAULT_AGE = 18


def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


def _reject_password_word(value: str) -> str:
    if "password" in value.lower():
        raise ValueError('Password cannot contain the string "password"')
    return value


# Value types shared by create and update schemas
Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
Email = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(str.lower)]
Password = Annotated[
    str,
    StringConstraints(strip_whitespace=True, min_length=PASSWORD_MIN_LENGTH),
    AfterValidator(_reject_password_word),
]
Age = Annotated[int, Field(ge=0, le=100, description="Age in years (0-100)")]


class UserCreate(BaseModel):
    """Schema for registering a user."""

    name: Name
    email: Email
    password: Password
    age: Age = DEFAULT_AGE


class UserLogin(BaseModel):
    """Schema for user login."""

    email: str = Field(..., min_length=1, description="Email address")
    password: str = Field(..., min_length=1, description="Password")


class UserUpdate(BaseModel):
    """Schema for a partial profile update.

    Only the declared fields may be sent; anything else is rejected.
    """

    model_config = ConfigDict(extra="forbid")

    name: Name | None = None
    email: Email | None = None
    password: Password | None = None
    age: Age | None = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        """Explicit nulls would erase required fields."""
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class UserResponse(BaseModel):
    """Public view of a user. Credentials, tokens and avatar never appear."""

    id: int
    name: str
    email: str
    age: int
    inserted_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class AuthResponse(BaseModel):
    """Schema returned on registration and login."""

    user: UserResponse
    token: str
