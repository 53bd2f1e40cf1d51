"""Task routes."""
from typing import Annotated, Any

from fastapi import APIRouter, Body, Query, Response, status

from taskapp.api.deps import CurrentAuth, DatabaseSession
from taskapp.schemas.task import TaskCreate, TaskResponse
from taskapp.services.task_service import (
    create_task,
    delete_task,
    list_tasks_by_owner,
    parse_int,
    parse_sort,
    require_task,
    update_task,
)

router = APIRouter(prefix="/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_new_task(task_data: TaskCreate, auth: CurrentAuth, db: DatabaseSession):
    """
    Create a new task owned by the current user.

    Args:
        task_data: Task creation data
        auth: Authenticated request context
        db: Database session

    Returns:
        Created task
    """
    return create_task(db, auth, task_data)


@router.get("", response_model=list[TaskResponse])
def list_all_tasks(
    auth: CurrentAuth,
    db: DatabaseSession,
    completed: Annotated[str | None, Query(description="Only tasks with this status")] = None,
    limit: Annotated[str | None, Query(description="Maximum number of tasks")] = None,
    skip: Annotated[str | None, Query(description="Number of tasks to skip")] = None,
    sort_by: Annotated[
        str | None, Query(alias="sortBy", description="e.g. completed_desc,description_asc")
    ] = None,
):
    """
    List the current user's tasks.

    Returns 204 with no body when nothing matches.
    """
    tasks = list_tasks_by_owner(
        db,
        auth.user.id,
        completed=(completed == "true") if completed else None,
        limit=parse_int(limit),
        skip=parse_int(skip),
        sort=parse_sort(sort_by),
    )
    if not tasks:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return tasks


@router.get("/{task_id}", response_model=TaskResponse)
def get_task(task_id: str, auth: CurrentAuth, db: DatabaseSession):
    """Get one of the current user's tasks."""
    return require_task(db, auth, task_id)


@router.patch("/{task_id}", response_model=TaskResponse)
def update_existing_task(
    task_id: str,
    updates: Annotated[dict[str, Any], Body()],
    auth: CurrentAuth,
    db: DatabaseSession,
):
    """
    Update a task's description and/or completed flag.

    Args:
        task_id: Task ID
        updates: Fields to change
        auth: Authenticated request context
        db: Database session

    Returns:
        Updated task
    """
    return update_task(db, auth, task_id, updates)


@router.delete("/{task_id}", response_model=TaskResponse)
def delete_existing_task(task_id: str, auth: CurrentAuth, db: DatabaseSession):
    """Delete one of the current user's tasks and return it."""
    return delete_task(db, auth, task_id)
