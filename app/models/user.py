"""User entity model."""

from datetime import datetime
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from pydantic import EmailStr, field_validator
from pydantic.alias_generators import to_camel
from sqlmodel import Field, Relationship, SQLModel

if TYPE_CHECKING:
    from app.models.task import Task


def _normalize_email(value: Any) -> Any:
    if isinstance(value, str):
        return value.strip().lower()
    return value


class UserBase(SQLModel):
    """Base User schema."""

    name: str = Field(min_length=2, max_length=50)
    email: str = Field(max_length=255, unique=True, index=True)


class User(UserBase, table=True):
    """User database model."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    hashed_password: str = Field(max_length=255)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    tasks: list["Task"] = Relationship(back_populates="user")


class UserCreate(SQLModel):
    """Schema for user registration."""

    name: str = Field(min_length=2, max_length=50)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip()
        return value

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)


class UserLogin(SQLModel):
    """Schema for user login."""

    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("email", mode="before")
    @classmethod
    def normalize_email(cls, value: Any) -> Any:
        return _normalize_email(value)


class UserResponse(SQLModel):
    """Schema for user response (no password)."""

    id: UUID
    name: str
    email: str

    model_config = {"from_attributes": True}


class AuthResponse(SQLModel):
    """Schema for authentication response."""

    message: str
    token: str
    user: UserResponse
    expires_at: datetime

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class MeResponse(SQLModel):
    """Schema for the current-user endpoint."""

    user: UserResponse


class MessageResponse(SQLModel):
    """Plain message body."""

    message: str
