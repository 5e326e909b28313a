"""Workflow Outcomes - discriminated results returned by the guard and the engine.

Invariants:
    - Core functions never raise for business conditions: they return a Rejection
    - A Plan is an ordered, immutable list of changes; the shell applies all of it
      in one transaction or none of it
    - Blob handles in Plan.released_blobs are deleted only AFTER the commit succeeds

Design Decisions:
    - Plain frozen dataclasses over ORM objects: the engine stays pure and the
      same Plan can be asserted on in tests without a database
    - Match holds equality, inequality and membership maps only: every predicate
      the workflow needs is "column == value", "column != value" or "column IN (...)"
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union

from marketplace.core.domain_types import BlobHandle, EntityType


class RejectionKind(str, Enum):
    """Why an action was refused. The API layer maps each to a status code."""
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"
    INVALID_STATE = "invalid_state"
    CONFLICT = "conflict"
    INVALID_PAYLOAD = "invalid_payload"


@dataclass(frozen=True)
class Rejection:
    """Structured deny reason."""
    kind: RejectionKind
    code: str
    message: str
    resource_type: str | None = None
    resource_id: str | None = None


@dataclass(frozen=True)
class Match:
    """Row predicate: all `equals` pairs hold, no `not_equals` pair holds,
    and each `one_of` column takes one of the listed values.
    """
    equals: dict[str, Any] = field(default_factory=dict)
    not_equals: dict[str, Any] = field(default_factory=dict)
    one_of: dict[str, tuple] = field(default_factory=dict)


# ─── Change Records ──────────────────────────────────────────────

@dataclass(frozen=True)
class Create:
    entity: EntityType
    fields: dict[str, Any]


@dataclass(frozen=True)
class Update:
    """Single-row update. `expected` column values must still hold when applied."""
    entity: EntityType
    entity_id: Any
    fields: dict[str, Any]
    expected: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class UpdateMany:
    entity: EntityType
    match: Match
    fields: dict[str, Any]


@dataclass(frozen=True)
class Delete:
    entity: EntityType
    match: Match


Change = Union[Create, Update, UpdateMany, Delete]


@dataclass(frozen=True)
class Plan:
    """Next states to persist for one accepted action."""
    changes: tuple[Change, ...]
    released_blobs: tuple[BlobHandle, ...] = ()

    def updates_for(self, entity: EntityType) -> list[Update]:
        return [
            c for c in self.changes
            if isinstance(c, Update) and c.entity == entity
        ]

    def creates_for(self, entity: EntityType) -> list[Create]:
        return [
            c for c in self.changes
            if isinstance(c, Create) and c.entity == entity
        ]


WorkflowResult = Union[Plan, Rejection]


# ─── Constructors ────────────────────────────────────────────────

def not_found(resource_type: str, resource_id: object = None) -> Rejection:
    label = f"{resource_type} '{resource_id}'" if resource_id else resource_type
    return Rejection(
        RejectionKind.NOT_FOUND,
        f"{resource_type.upper()}_NOT_FOUND",
        f"{label} not found",
        resource_type=resource_type,
        resource_id=str(resource_id) if resource_id else None,
    )


def forbidden(message: str, code: str = "FORBIDDEN") -> Rejection:
    return Rejection(RejectionKind.FORBIDDEN, code, message)


def invalid_state(message: str, code: str = "INVALID_STATE") -> Rejection:
    return Rejection(RejectionKind.INVALID_STATE, code, message)


def conflict(message: str, code: str = "CONFLICT") -> Rejection:
    return Rejection(RejectionKind.CONFLICT, code, message)


def invalid_payload(message: str, code: str = "INVALID_PAYLOAD") -> Rejection:
    return Rejection(RejectionKind.INVALID_PAYLOAD, code, message)
