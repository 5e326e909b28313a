"""Project Schemas - creation, assignment, and detail with embedded work."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from marketplace.schemas.request import RequestResponse
from marketplace.schemas.task import TaskResponse


class ProjectCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=10_000)
    budget: float | None = Field(None, ge=0)
    deadline: datetime | None = None

    @field_validator("title", "description")
    @classmethod
    def strip_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("must not be empty or whitespace")
        return v


class AssignSolver(BaseModel):
    """Buyer picks one of the solvers who requested the project."""
    solver_id: UUID


class ProjectResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    title: str
    description: str
    buyer_id: UUID
    assigned_solver_id: UUID | None = None
    status: str
    budget: float
    deadline: datetime | None = None
    created_at: datetime


class ProjectDetail(ProjectResponse):
    requests: list[RequestResponse] = []
    tasks: list[TaskResponse] = []
