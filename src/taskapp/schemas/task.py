"""Task Pydantic schemas."""
from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, StringConstraints, field_validator

Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class TaskCreate(BaseModel):
    """Schema for creating a task. The owner always comes from the session."""

    description: Description
    completed: bool = False


class TaskUpdate(BaseModel):
    """Schema for a partial task update."""

    model_config = ConfigDict(extra="forbid")

    description: Description | None = None
    completed: bool | None = None

    @field_validator("*", mode="before")
    @classmethod
    def reject_null(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class TaskResponse(BaseModel):
    """Schema for task response."""

    id: int
    description: str
    completed: bool
    owner_id: int
    inserted_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
