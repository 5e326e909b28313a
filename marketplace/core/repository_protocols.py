"""Boundary Protocols - contracts between core and shell.

Invariants:
    - Core NEVER imports from shell; dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, ORM rows satisfy the *Like
      contracts without inheriting from anything
    - Async in EntityStore: implementations do IO, but the pure functions in
      core never await; the shell loads state, calls core, then persists
"""

from contextlib import AbstractAsyncContextManager
from pathlib import Path
from typing import Any, Protocol
from uuid import UUID

from marketplace.core.domain_types import BlobHandle, EntityType
from marketplace.core.outcomes import Match


# ─── Entity shapes read by core ──────────────────────────────────

class UserLike(Protocol):
    id: UUID
    role: str


class ProjectLike(Protocol):
    id: UUID
    buyer_id: UUID
    assigned_solver_id: UUID | None
    status: str
    version: int


class RequestLike(Protocol):
    id: UUID
    project_id: UUID
    solver_id: UUID
    status: str


class TaskLike(Protocol):
    id: UUID
    project_id: UUID
    status: str


class SubmissionLike(Protocol):
    id: UUID
    task_id: UUID
    solver_id: UUID
    file_path: str
    message: str | None
    status: str


# ─── Stores ──────────────────────────────────────────────────────

class EntityStore(Protocol):
    """Generic transactional store - implemented by shell.

    find_many ORs its predicates; no predicate means every row.
    """
    async def find(self, entity: EntityType, entity_id: UUID) -> Any | None: ...
    async def find_many(
        self, entity: EntityType, *matches: Match,
    ) -> list[Any]: ...
    async def create(self, entity: EntityType, fields: dict) -> Any: ...
    async def update(
        self, entity: EntityType, entity_id: UUID, fields: dict,
        expected: dict | None = None,
    ) -> Any: ...
    async def update_many(
        self, entity: EntityType, match: Match, fields: dict,
    ) -> int: ...
    async def delete_many(self, entity: EntityType, match: Match) -> int: ...
    def transaction(self) -> AbstractAsyncContextManager[None]: ...


class BlobStore(Protocol):
    """Submission file storage - implemented by shell."""
    def save(self, data: bytes, suggested_name: str) -> BlobHandle: ...
    def delete(self, handle: BlobHandle) -> None: ...
    def read(self, handle: BlobHandle) -> bytes: ...
    def path(self, handle: BlobHandle) -> Path: ...
