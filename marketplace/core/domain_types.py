"""Domain Types - rich types that replace bare primitives across the codebase.

Invariants:
    - UserId, ProjectId, RequestId, TaskId, SubmissionId wrap UUIDs
    - All valid states encoded as Enums, no raw string matching in core logic
    - Enum values are the exact strings persisted in the DB `status` / `role` columns

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: compare equal to the raw column value and serialize to JSON as-is
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", UUID)
ProjectId = NewType("ProjectId", UUID)
RequestId = NewType("RequestId", UUID)
TaskId = NewType("TaskId", UUID)
SubmissionId = NewType("SubmissionId", UUID)

# Opaque reference returned by the blob store (relative file name on disk)
BlobHandle = NewType("BlobHandle", str)


# ─── Enums ───────────────────────────────────────────────────────

class Role(str, Enum):
    """User roles. Only problem_solver -> buyer is a legal change."""
    ADMIN = "admin"
    BUYER = "buyer"
    PROBLEM_SOLVER = "problem_solver"


class ProjectStatus(str, Enum):
    """Project lifecycle: open -> assigned -> in_progress -> completed."""
    OPEN = "open"
    ASSIGNED = "assigned"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


class RequestStatus(str, Enum):
    """A solver's bid on a project. Terminal once accepted or rejected."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class TaskStatus(str, Enum):
    """Unit of work inside an assigned project."""
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    SUBMITTED = "submitted"
    COMPLETED = "completed"
    REJECTED = "rejected"


class SubmissionStatus(str, Enum):
    """Review state of the single deliverable attached to a task."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class EntityType(str, Enum):
    """Persisted entity kinds - keys the EntityStore and change records."""
    USER = "user"
    PROJECT = "project"
    REQUEST = "request"
    TASK = "task"
    SUBMISSION = "submission"


class Action(str, Enum):
    """Every guarded action. Read actions included for visibility checks."""
    PROMOTE_TO_BUYER = "promote_to_buyer"
    UPDATE_PROFILE = "update_profile"
    LIST_USERS = "list_users"
    CREATE_PROJECT = "create_project"
    READ_PROJECT = "read_project"
    DELETE_PROJECT = "delete_project"
    ASSIGN_SOLVER = "assign_solver"
    CREATE_REQUEST = "create_request"
    READ_PROJECT_REQUESTS = "read_project_requests"
    CREATE_TASK = "create_task"
    READ_PROJECT_WORK = "read_project_work"
    UPDATE_TASK = "update_task"
    SUBMIT_WORK = "submit_work"
    REVIEW_SUBMISSION = "review_submission"
    DOWNLOAD_SUBMISSION = "download_submission"


class ReviewDecision(str, Enum):
    """Buyer's verdict on a submission."""
    ACCEPTED = "accepted"
    REJECTED = "rejected"
