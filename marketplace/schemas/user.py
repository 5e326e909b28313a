"""User Schemas - registration, profile edits, public profile."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserCreate(BaseModel):
    """Registration - new accounts are always problem solvers."""
    name: str = Field(min_length=1, max_length=200)
    email: str = Field(pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$", max_length=320)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class ProfileUpdate(BaseModel):
    """Own-profile edit; omitted fields are left unchanged."""
    bio: str | None = Field(None, max_length=5_000)
    skills: list[str] | None = Field(None, max_length=50)
    experience: str | None = Field(None, max_length=5_000)
    portfolio: str | None = Field(None, max_length=500)


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    email: str
    role: str
    bio: str | None = None
    skills: list[str] = []
    experience: str | None = None
    portfolio: str | None = None
    created_at: datetime
