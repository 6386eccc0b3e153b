"""Task API endpoints."""

from fastapi import APIRouter, HTTPException, Query, status

from app.api.deps import CurrentUser, DBSession
from app.models.task import TaskCreate, TaskDeleteResponse, TaskResponse, TaskUpdate
from app.services.tasks import (
    InvalidTaskIdError,
    TaskNotFoundError,
    create_task,
    delete_task,
    get_task_by_id,
    get_user_tasks,
    update_task,
)

router = APIRouter(prefix="/tasks", tags=["Tasks"])


def _lookup_error(error: Exception) -> HTTPException:
    if isinstance(error, InvalidTaskIdError):
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(error))
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(error))


@router.get("", response_model=list[TaskResponse])
def list_tasks_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    completed: bool | None = Query(default=None, description="Filter by completion status"),
) -> list[TaskResponse]:
    """List all tasks for the authenticated user, newest first."""
    tasks = get_user_tasks(session, current_user.id, completed)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
def create_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_data: TaskCreate,
) -> TaskResponse:
    """Create a new task for the authenticated user."""
    task = create_task(session, current_user.id, task_data)
    return TaskResponse.model_validate(task)


@router.get("/{task_id}", response_model=TaskResponse)
def get_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_id: str,
) -> TaskResponse:
    """Get a specific task by ID."""
    try:
        task = get_task_by_id(session, current_user.id, task_id)
    except (InvalidTaskIdError, TaskNotFoundError) as e:
        raise _lookup_error(e)
    return TaskResponse.model_validate(task)


@router.put("/{task_id}", response_model=TaskResponse)
def update_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_id: str,
    task_data: TaskUpdate,
) -> TaskResponse:
    """Update the fields present in the body."""
    try:
        task = update_task(session, current_user.id, task_id, task_data)
    except (InvalidTaskIdError, TaskNotFoundError) as e:
        raise _lookup_error(e)
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", response_model=TaskDeleteResponse)
def delete_task_endpoint(
    session: DBSession,
    current_user: CurrentUser,
    task_id: str,
) -> TaskDeleteResponse:
    """Delete a task."""
    try:
        deleted = delete_task(session, current_user.id, task_id)
    except (InvalidTaskIdError, TaskNotFoundError) as e:
        raise _lookup_error(e)
    return TaskDeleteResponse(message="Task deleted successfully", deleted_task=deleted)
