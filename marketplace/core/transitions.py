"""Transition Tables - one explicit table per entity type.

Invariants:
    - Every table has an entry for EVERY member of its status enum
      (terminal states map to an empty frozenset)
    - Project never leaves `completed` and never returns to `open`
    - Request is terminal once accepted or rejected
    - Task targets depend on who drives the change: solvers move work between
      pending / in_progress / submitted, buyers settle it as completed / rejected
    - Task `rejected` has no way back through review (only a solver status edit
      or a resubmission can move it)
    - Role changes only problem_solver -> buyer

Design Decisions:
    - Tables are plain dicts so illegal transitions are an enumerable set and
      tests can assert coverage with `set(table) == set(Enum)`
"""

from enum import Enum
from typing import Mapping

from marketplace.core.domain_types import (
    ProjectStatus, RequestStatus, Role, SubmissionStatus, TaskStatus,
)
from marketplace.core.outcomes import Rejection, invalid_state

Table = Mapping[Enum, frozenset]


PROJECT_TRANSITIONS: dict[ProjectStatus, frozenset[ProjectStatus]] = {
    ProjectStatus.OPEN: frozenset({ProjectStatus.ASSIGNED}),
    ProjectStatus.ASSIGNED: frozenset({ProjectStatus.IN_PROGRESS}),
    ProjectStatus.IN_PROGRESS: frozenset({ProjectStatus.COMPLETED}),
    ProjectStatus.COMPLETED: frozenset(),
}

REQUEST_TRANSITIONS: dict[RequestStatus, frozenset[RequestStatus]] = {
    RequestStatus.PENDING: frozenset({
        RequestStatus.ACCEPTED, RequestStatus.REJECTED,
    }),
    RequestStatus.ACCEPTED: frozenset(),
    RequestStatus.REJECTED: frozenset(),
}

# Resubmission replaces the file and resets the review, whatever the prior verdict
SUBMISSION_TRANSITIONS: dict[SubmissionStatus, frozenset[SubmissionStatus]] = {
    SubmissionStatus.PENDING: frozenset({
        SubmissionStatus.PENDING,
        SubmissionStatus.ACCEPTED,
        SubmissionStatus.REJECTED,
    }),
    SubmissionStatus.ACCEPTED: frozenset({SubmissionStatus.PENDING}),
    SubmissionStatus.REJECTED: frozenset({SubmissionStatus.PENDING}),
}

SOLVER_TASK_TARGETS = frozenset({
    TaskStatus.PENDING, TaskStatus.IN_PROGRESS, TaskStatus.SUBMITTED,
})
BUYER_TASK_TARGETS = frozenset({TaskStatus.COMPLETED, TaskStatus.REJECTED})

SOLVER_TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    status: SOLVER_TASK_TARGETS for status in TaskStatus
}
BUYER_TASK_TRANSITIONS: dict[TaskStatus, frozenset[TaskStatus]] = {
    status: BUYER_TASK_TARGETS for status in TaskStatus
}

TASK_TRANSITIONS_BY_ROLE: dict[Role, dict[TaskStatus, frozenset[TaskStatus]]] = {
    Role.PROBLEM_SOLVER: SOLVER_TASK_TRANSITIONS,
    Role.BUYER: BUYER_TASK_TRANSITIONS,
    Role.ADMIN: {status: frozenset() for status in TaskStatus},
}

ROLE_TRANSITIONS: dict[Role, frozenset[Role]] = {
    Role.PROBLEM_SOLVER: frozenset({Role.BUYER}),
    Role.BUYER: frozenset(),
    Role.ADMIN: frozenset(),
}


def can_transition(table: Table, current: Enum, target: Enum) -> bool:
    """True if `current -> target` is listed in `table`."""
    return target in table[current]


def check_transition(
    table: Table, current: Enum, target: Enum, entity: str,
) -> Rejection | None:
    """Return INVALID_STATE rejection for an unlisted transition, else None."""
    if can_transition(table, current, target):
        return None
    return invalid_state(
        f"{entity} cannot move from '{current.value}' to '{target.value}'",
        code=f"ILLEGAL_{entity.upper()}_TRANSITION",
    )
