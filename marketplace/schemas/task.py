"""Task Schemas - creation and solver/buyer updates.

Invariants:
    - TaskUpdate carries a status, detail edits, or both; a body with no non-null
      field (`{}` or `{"status": null}`) is rejected
    - status is passed through as a string: the engine decides which targets the
      caller's role may reach
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TaskCreate(BaseModel):
    project_id: UUID
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10_000)
    deadline: datetime


class TaskUpdate(BaseModel):
    status: str | None = Field(None, max_length=20)
    title: str | None = Field(None, min_length=1, max_length=200)
    description: str | None = Field(None, min_length=1, max_length=10_000)
    deadline: datetime | None = None

    @model_validator(mode="after")
    def require_some_change(self) -> "TaskUpdate":
        if all(getattr(self, name) is None for name in type(self).model_fields):
            raise ValueError("provide a status or at least one task detail")
        return self

    def details(self) -> dict:
        return {
            "title": self.title,
            "description": self.description,
            "deadline": self.deadline,
        }


class TaskResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    user_id: UUID
    title: str
    description: str
    deadline: datetime
    status: str
    created_at: datetime
