from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from pydantic import (
    AliasGenerator,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)
from pydantic.alias_generators import to_camel

# Requests accept camelCase or snake_case keys; unknown keys (userId, _id,
# completedAt, ...) are dropped so clients cannot set server-owned fields.
REQUEST_CONFIG = ConfigDict(
    alias_generator=to_camel, populate_by_name=True, extra="ignore"
)

# Responses are validated from ORM objects by field name and dumped in camelCase.
RESPONSE_CONFIG = ConfigDict(
    from_attributes=True,
    alias_generator=AliasGenerator(serialization_alias=to_camel),
)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; every stored timestamp is UTC
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


# --- Auth ---
class UserRegister(BaseModel):
    name: str = Field(..., max_length=100, description="Display name")
    email: str = Field(..., max_length=255, description="Login email")
    password: str = Field(..., description="Password for the new account")

    model_config = REQUEST_CONFIG


class UserLogin(BaseModel):
    email: str = Field(..., description="Email for login")
    password: str = Field(..., description="Password for login")

    model_config = REQUEST_CONFIG


class UserPublic(BaseModel):
    id: UUID = Field(..., description="User unique identifier")
    name: str
    email: str

    model_config = RESPONSE_CONFIG


class UserInfo(UserPublic):
    created_at: datetime | None = None

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)


class AuthResponse(BaseModel):
    token: str = Field(..., description="JWT bearer token")
    user: UserPublic


class UserResponse(BaseModel):
    user: UserInfo


class MessageResponse(BaseModel):
    message: str = Field(..., description="Response message")


# --- Tasks ---
class Subtask(BaseModel):
    title: str
    completed: bool = False

    model_config = ConfigDict(extra="ignore")


class TaskCreate(BaseModel):
    title: str | None = Field(None, max_length=500)
    description: str | None = None
    status: str | None = Field(None, max_length=30)
    priority: str = Field("medium", max_length=30)
    category: str | None = Field(None, max_length=100)
    due_date: datetime | None = None
    completed: bool | None = None
    tags: list[str] = Field(default_factory=list)
    subtasks: list[Subtask] = Field(default_factory=list)

    model_config = REQUEST_CONFIG


class TaskUpdate(BaseModel):
    title: str | None = Field(None, max_length=500)
    description: str | None = None
    status: str | None = Field(None, max_length=30)
    priority: str | None = Field(None, max_length=30)
    category: str | None = Field(None, max_length=100)
    due_date: datetime | None = None
    completed: bool | None = None
    tags: list[str] | None = None
    subtasks: list[Subtask] | None = None

    model_config = REQUEST_CONFIG


class TaskFilters(BaseModel):
    status: str | None = None
    priority: str | None = None
    category: str | None = None
    search: str | None = None


class TaskOut(BaseModel):
    id: UUID
    owner_id: UUID = Field(..., serialization_alias="userId")
    title: str
    description: str | None = None
    status: str
    priority: str
    category: str | None = None
    due_date: datetime | None = None
    completed: bool
    created_at: datetime
    completed_at: datetime | None = None
    tags: list[str] = Field(default_factory=list)
    subtasks: list[Subtask] = Field(default_factory=list)
    version: int

    model_config = RESPONSE_CONFIG

    @field_validator("due_date", "created_at", "completed_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        return _as_utc(v)

    @field_validator("tags", "subtasks", mode="before")
    @classmethod
    def default_empty_list(cls, v: Any) -> Any:
        return v or []


def serialize_task(task: Any) -> dict[str, Any]:
    """Wire representation of a task, shared by REST responses and events."""
    return TaskOut.model_validate(task).model_dump(mode="json", by_alias=True)


class TaskResponse(BaseModel):
    task: dict[str, Any]


class TaskListResponse(BaseModel):
    tasks: list[dict[str, Any]]


# --- Categories ---
class CategoryCreate(BaseModel):
    name: str | None = Field(None, max_length=100)
    color: str = Field("#3B82F6", max_length=32)
    icon: str | None = Field(None, max_length=32)

    model_config = REQUEST_CONFIG


class CategoryOut(BaseModel):
    id: UUID
    owner_id: UUID = Field(..., serialization_alias="userId")
    name: str
    color: str
    icon: str | None = None

    model_config = RESPONSE_CONFIG


def serialize_category(category: Any) -> dict[str, Any]:
    return CategoryOut.model_validate(category).model_dump(mode="json", by_alias=True)


class CategoryResponse(BaseModel):
    category: dict[str, Any]


class CategoryListResponse(BaseModel):
    categories: list[dict[str, Any]]


# --- Analytics ---
class PriorityBreakdown(BaseModel):
    urgent: int = 0
    high: int = 0
    medium: int = 0
    low: int = 0


class TaskAnalytics(BaseModel):
    total: int
    completed: int
    pending: int
    by_priority: PriorityBreakdown
    completion_rate: int = Field(..., description="Completed share in whole percent")
    overdue: int = Field(..., description="Incomplete tasks due before today")

    model_config = ConfigDict(
        alias_generator=AliasGenerator(serialization_alias=to_camel)
    )


class AnalyticsResponse(BaseModel):
    analytics: dict[str, Any]
