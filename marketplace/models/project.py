"""Project ORM - the aggregate root buyers post and solvers work on.

Invariants:
    - buyer_id never changes after creation
    - assigned_solver_id is set iff status != open, and is written exactly once
    - status transitions: open -> assigned -> in_progress -> completed
    - an assigned solver cannot be deleted out from under the project (RESTRICT)

Design Decisions:
    - cascade delete for requests and tasks (FK ON DELETE CASCADE + ORM delete-orphan)
    - requests/tasks loaded with selectin: project detail always embeds them
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Text, Float, Integer, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.dialects.postgresql import UUID

from marketplace.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Project(Base):
    __tablename__ = "projects"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    buyer_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    assigned_solver_id: Mapped[uuid.UUID | None] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="RESTRICT"),
        nullable=True, index=True,
    )
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default="open", index=True,
    )
    budget: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    # bumped by every accepted review (compare-and-set in review_submission)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    deadline: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now, onupdate=_now,
    )

    # Relationships
    requests: Mapped[list["ProjectRequest"]] = relationship(
        "ProjectRequest", back_populates="project",
        cascade="all, delete-orphan", lazy="selectin",
    )
    tasks: Mapped[list["Task"]] = relationship(
        "Task", back_populates="project",
        cascade="all, delete-orphan", lazy="selectin",
    )
