"""Request Schemas - a solver's bid on a project."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class RequestCreate(BaseModel):
    project_id: UUID
    message: str | None = Field(None, max_length=2_000)


class RequestResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    project_id: UUID
    solver_id: UUID
    message: str | None = None
    status: str
    created_at: datetime
