"""Task service for owner-scoped CRUD operations."""
import logging
import re
from typing import Any

from fastapi import HTTPException, status
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from taskapp.core.context import AuthContext
from taskapp.models import Task
from taskapp.schemas.task import TaskCreate, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = frozenset(TaskUpdate.model_fields)

SORTABLE_COLUMNS = {
    "description": Task.description,
    "completed": Task.completed,
    "inserted_at": Task.inserted_at,
    "updated_at": Task.updated_at,
}

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")

# Upper bound of the INTEGER primary key column
MAX_TASK_ID = 2**31 - 1


def _not_found() -> HTTPException:
    # Same response whether the task is missing or owned by someone else
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Task not found",
    )


def parse_int(value: str | None) -> int | None:
    """
    Leniently parse a pagination value.

    Leading digits are used ("10abc" -> 10). Missing, non-numeric and
    non-positive values all mean "unset".
    """
    if value is None:
        return None
    match = _LEADING_INT.match(value)
    if not match:
        return None
    number = int(match.group(1))
    return number if number > 0 else None


def parse_task_id(value: int | str) -> int | None:
    """Path id as a key that can exist in the table, or None."""
    value = str(value)
    if not value.isascii() or not value.isdigit():
        return None
    task_id = int(value)
    return task_id if 1 <= task_id <= MAX_TASK_ID else None


def parse_sort(sort_by: str | None) -> list[tuple[str, bool]]:
    """
    Parse ``field_direction`` pairs such as ``completed_desc,description_asc``.

    The field is everything before the last underscore. ``asc`` sorts
    ascending and any other direction sorts descending. Fields that cannot
    be sorted on are dropped.

    Returns:
        List of (field, ascending) in the order given
    """
    if not sort_by:
        return []

    order = []
    for item in sort_by.split(","):
        field, _, direction = item.strip().rpartition("_")
        if not field:
            field, direction = direction, ""
        if field in SORTABLE_COLUMNS:
            order.append((field, direction == "asc"))
    return order


def require_task(db: Session, context: AuthContext, task_id: int | str) -> Task:
    """Get an owned task or raise 404.

    Ids that are not numeric or are out of the key range are treated as
    missing tasks.
    """
    parsed = parse_task_id(task_id)
    task = get_task_by_id(db, context, parsed) if parsed is not None else None
    if not task:
        raise _not_found()
    return task


def create_task(db: Session, context: AuthContext, task_data: TaskCreate) -> Task:
    """
    Create a task owned by the authenticated user.

    Args:
        db: Database session
        context: Authenticated request context
        task_data: Validated task data

    Returns:
        Created task
    """
    task = Task(
        owner_id=context.user.id,
        description=task_data.description,
        completed=task_data.completed,
    )
    db.add(task)
    db.commit()
    db.refresh(task)
    return task


def get_task_by_id(db: Session, context: AuthContext, task_id: int) -> Task | None:
    """
    Get a task by ID if the authenticated user owns it.

    Args:
        db: Database session
        context: Authenticated request context
        task_id: Task ID

    Returns:
        Task if found and owned, None otherwise
    """
    stmt = select(Task).where(Task.id == task_id, Task.owner_id == context.user.id)
    return db.execute(stmt).scalar_one_or_none()


def list_tasks_by_owner(
    db: Session,
    owner_id: int,
    completed: bool | None = None,
    limit: int | None = None,
    skip: int | None = None,
    sort: list[tuple[str, bool]] | None = None,
) -> list[Task]:
    """
    List tasks belonging to one user.

    Args:
        db: Database session
        owner_id: Owning user's id
        completed: Optional exact match on ``completed``
        limit: Maximum number of tasks to return
        skip: Number of tasks to skip
        sort: (field, ascending) pairs applied in order

    Returns:
        List of tasks; ties keep creation order
    """
    stmt = select(Task).where(Task.owner_id == owner_id)

    if completed is not None:
        stmt = stmt.where(Task.completed == completed)

    for field, ascending in sort or []:
        column = SORTABLE_COLUMNS[field]
        stmt = stmt.order_by(column.asc() if ascending else column.desc())
    stmt = stmt.order_by(Task.id.asc())

    if skip:
        stmt = stmt.offset(skip)
    if limit:
        stmt = stmt.limit(limit)

    return list(db.execute(stmt).scalars().all())


def update_task(
    db: Session,
    context: AuthContext,
    task_id: int | str,
    updates: dict[str, Any],
) -> Task:
    """
    Apply an allow-listed partial update to an owned task.

    The task is loaded, modified and committed as an object rather than via
    a bulk UPDATE, so ``updated_at`` and other ORM-side behaviour apply.

    Args:
        db: Database session
        context: Authenticated request context
        task_id: Task ID
        updates: Raw request body

    Returns:
        Updated task

    Raises:
        HTTPException: If a field is not updatable or the task is not found
        RequestValidationError: If a value fails validation
    """
    if not set(updates) <= UPDATABLE_FIELDS:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid update",
        )

    try:
        changes = TaskUpdate.model_validate(updates).model_dump(exclude_unset=True)
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False), body=updates)

    task = require_task(db, context, task_id)
    for field, value in changes.items():
        setattr(task, field, value)

    db.commit()
    db.refresh(task)
    return task


def delete_task(db: Session, context: AuthContext, task_id: int | str) -> TaskResponse:
    """
    Delete an owned task.

    Args:
        db: Database session
        context: Authenticated request context
        task_id: Task ID

    Returns:
        The deleted task's last representation

    Raises:
        HTTPException: If the task is not found
    """
    task = require_task(db, context, task_id)
    snapshot = TaskResponse.model_validate(task)
    db.delete(task)
    db.commit()

    logger.info(f"User {context.user.id} deleted task {task.id}")
    return snapshot

