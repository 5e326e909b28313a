"""Submission Schemas - review decision and submission metadata."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ReviewDecisionBody(BaseModel):
    """Buyer verdict: "accepted" or "rejected" (checked by the workflow engine)."""
    decision: str = Field(min_length=1, max_length=20)


class SubmissionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    task_id: UUID
    project_id: UUID
    solver_id: UUID
    file_name: str
    file_size: int
    message: str | None = None
    status: str
    reviewed_at: datetime | None = None
    created_at: datetime
