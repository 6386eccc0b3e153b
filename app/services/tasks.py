"""Task service for per-user scoped CRUD operations.

Every lookup filters on both the task id and the owning user id, so a task
owned by someone else is indistinguishable from a task that does not exist.
"""

import logging
from datetime import datetime
from uuid import UUID

from sqlmodel import Session, select

from app.models.task import Task, TaskCreate, TaskResponse, TaskUpdate

logger = logging.getLogger(__name__)


class InvalidTaskIdError(Exception):
    """Raised when a task identifier is not syntactically valid."""

    def __init__(self) -> None:
        super().__init__("Invalid task ID")


class TaskNotFoundError(Exception):
    """Raised when a task does not exist or is not owned by the caller."""

    def __init__(self) -> None:
        super().__init__("Task not found")


def parse_task_id(raw_id: str) -> UUID:
    """Parse a task identifier before any store access."""
    try:
        return UUID(raw_id)
    except (TypeError, ValueError):
        raise InvalidTaskIdError()


def create_task(session: Session, user_id: UUID, task_data: TaskCreate) -> Task:
    """Create a new task owned by the specified user."""
    task = Task(
        user_id=user_id,
        title=task_data.title,
        description=task_data.description,
    )
    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info("Task created", extra={"task_id": str(task.id), "user_id": str(user_id)})
    return task


def get_user_tasks(
    session: Session,
    user_id: UUID,
    completed: bool | None = None,
) -> list[Task]:
    """Get all tasks owned by the user, newest first."""
    query = select(Task).where(Task.user_id == user_id)
    if completed is not None:
        query = query.where(Task.completed == completed)
    query = query.order_by(Task.created_at.desc())
    return list(session.exec(query).all())


def get_task_by_id(session: Session, user_id: UUID, task_id: str) -> Task:
    """
    Get a specific task owned by the user.

    Raises:
        InvalidTaskIdError: If task_id is malformed
        TaskNotFoundError: If no task with this id belongs to the user
    """
    parsed_id = parse_task_id(task_id)
    task = session.exec(
        select(Task).where(Task.id == parsed_id, Task.user_id == user_id)
    ).first()
    if task is None:
        raise TaskNotFoundError()
    return task


def update_task(
    session: Session, user_id: UUID, task_id: str, task_data: TaskUpdate
) -> Task:
    """Apply only the fields present in the request to the user's task."""
    task = get_task_by_id(session, user_id, task_id)
    update_data = task_data.model_dump(exclude_unset=True)

    for key, value in update_data.items():
        setattr(task, key, value)

    task.updated_at = datetime.utcnow()
    session.add(task)
    session.commit()
    session.refresh(task)

    logger.info(
        "Task updated",
        extra={"task_id": str(task.id), "fields": sorted(update_data)},
    )
    return task


def delete_task(session: Session, user_id: UUID, task_id: str) -> TaskResponse:
    """Delete the user's task and return a snapshot of it as it was."""
    task = get_task_by_id(session, user_id, task_id)
    snapshot = TaskResponse.model_validate(task)
    session.delete(task)
    session.commit()

    logger.info("Task deleted", extra={"task_id": str(snapshot.id), "user_id": str(user_id)})
    return snapshot
