"""Task entity model."""

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from pydantic import field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.user import User

TITLE_MAX_LENGTH = 40
DESCRIPTION_MAX_LENGTH = 500

TRUE_STRINGS = {"true", "1", "yes", "on", "t", "y"}
FALSE_STRINGS = {"false", "0", "no", "off", "f", "n"}


def _strip(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip()
    return value


def _description_or_empty(value: Any) -> Any:
    if value is None:
        return ""
    return _strip(value)


class TaskBase(SQLModel):
    """Base Task schema."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)


class Task(TaskBase, table=True):
    """Task database model."""

    __tablename__ = "tasks"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(foreign_key="users.id", index=True)
    completed: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow, index=True)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    user: "User" = Relationship(back_populates="tasks")


class TaskCreate(SQLModel):
    """Schema for task creation."""

    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str = Field(default="", max_length=DESCRIPTION_MAX_LENGTH)

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, value: Any) -> Any:
        return _description_or_empty(value)


class TaskUpdate(SQLModel):
    """Schema for task update.

    Only keys present in the request body are applied; see
    ``app.services.tasks.update_task``.
    """

    title: str | None = Field(default=None, min_length=1, max_length=TITLE_MAX_LENGTH)
    description: str | None = Field(default=None, max_length=DESCRIPTION_MAX_LENGTH)
    completed: bool | None = None

    @field_validator("title", mode="before")
    @classmethod
    def strip_title(cls, value: Any) -> Any:
        return _strip(value)

    @field_validator("description", mode="before")
    @classmethod
    def clean_description(cls, value: Any) -> Any:
        return _description_or_empty(value)

    @field_validator("title")
    @classmethod
    def reject_null_title(cls, value: str | None) -> str | None:
        # Only runs when the key is present; an omitted title stays unset
        if value is None:
            raise ValueError("Title cannot be empty")
        return value

    @field_validator("completed", mode="before")
    @classmethod
    def coerce_completed(cls, value: Any) -> bool:
        """Boolean strings are parsed, anything else is read by truthiness."""
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in FALSE_STRINGS:
                return False
            if lowered in TRUE_STRINGS:
                return True
        return bool(value)


class TaskResponse(SQLModel):
    """Schema for task response. The owning user is never exposed."""

    id: UUID
    title: str
    description: str
    completed: bool
    created_at: datetime
    updated_at: datetime

    model_config = {
        "from_attributes": True,
        "alias_generator": to_camel,
        "populate_by_name": True,
    }


class TaskDeleteResponse(SQLModel):
    """Schema for task deletion response."""

    message: str
    deleted_task: TaskResponse

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
