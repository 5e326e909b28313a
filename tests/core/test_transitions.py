"""Transition Tables - coverage and legality of every state machine.

Tests cover:
    - every table is keyed by every status value
    - project chain is strictly forward, completed is terminal
    - request is terminal after a verdict
    - task targets depend on the driving role
    - check_transition produces an INVALID_STATE rejection with an entity code
"""

import pytest

from marketplace.core.domain_types import (
    ProjectStatus, RequestStatus, Role, SubmissionStatus, TaskStatus,
)
from marketplace.core.outcomes import RejectionKind
from marketplace.core.transitions import (
    BUYER_TASK_TRANSITIONS, PROJECT_TRANSITIONS, REQUEST_TRANSITIONS,
    ROLE_TRANSITIONS, SOLVER_TASK_TRANSITIONS, SUBMISSION_TRANSITIONS,
    TASK_TRANSITIONS_BY_ROLE,
    can_transition, check_transition,
)


# ─── coverage ────────────────────────────────────────────────────

@pytest.mark.parametrize("table, enum", [
    (PROJECT_TRANSITIONS, ProjectStatus),
    (REQUEST_TRANSITIONS, RequestStatus),
    (SUBMISSION_TRANSITIONS, SubmissionStatus),
    (SOLVER_TASK_TRANSITIONS, TaskStatus),
    (BUYER_TASK_TRANSITIONS, TaskStatus),
    (ROLE_TRANSITIONS, Role),
])
def test_table_covers_every_status(table, enum):
    assert set(table) == set(enum)


def test_task_tables_exist_for_every_role():
    assert set(TASK_TRANSITIONS_BY_ROLE) == set(Role)
    for table in TASK_TRANSITIONS_BY_ROLE.values():
        assert set(table) == set(TaskStatus)


# ─── project ─────────────────────────────────────────────────────

def test_project_moves_forward_one_step_at_a_time():
    assert can_transition(PROJECT_TRANSITIONS, ProjectStatus.OPEN, ProjectStatus.ASSIGNED)
    assert can_transition(PROJECT_TRANSITIONS, ProjectStatus.ASSIGNED, ProjectStatus.IN_PROGRESS)
    assert can_transition(PROJECT_TRANSITIONS, ProjectStatus.IN_PROGRESS, ProjectStatus.COMPLETED)
    assert not can_transition(PROJECT_TRANSITIONS, ProjectStatus.OPEN, ProjectStatus.COMPLETED)


def test_project_never_reopens():
    for status in ProjectStatus:
        assert not can_transition(PROJECT_TRANSITIONS, status, ProjectStatus.OPEN)


def test_completed_project_is_terminal():
    assert PROJECT_TRANSITIONS[ProjectStatus.COMPLETED] == frozenset()


# ─── request / submission ───────────────────────────────────────

def test_request_verdict_is_terminal():
    assert REQUEST_TRANSITIONS[RequestStatus.ACCEPTED] == frozenset()
    assert REQUEST_TRANSITIONS[RequestStatus.REJECTED] == frozenset()


def test_reviewed_submission_only_returns_to_pending():
    for status in (SubmissionStatus.ACCEPTED, SubmissionStatus.REJECTED):
        assert SUBMISSION_TRANSITIONS[status] == frozenset({SubmissionStatus.PENDING})


# ─── task ────────────────────────────────────────────────────────

def test_solver_cannot_settle_tasks():
    table = TASK_TRANSITIONS_BY_ROLE[Role.PROBLEM_SOLVER]
    assert not can_transition(table, TaskStatus.SUBMITTED, TaskStatus.COMPLETED)
    assert not can_transition(table, TaskStatus.SUBMITTED, TaskStatus.REJECTED)
    assert can_transition(table, TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


def test_buyer_can_only_settle_tasks():
    table = TASK_TRANSITIONS_BY_ROLE[Role.BUYER]
    assert can_transition(table, TaskStatus.SUBMITTED, TaskStatus.COMPLETED)
    assert not can_transition(table, TaskStatus.PENDING, TaskStatus.IN_PROGRESS)


def test_admin_drives_no_task_transition():
    for targets in TASK_TRANSITIONS_BY_ROLE[Role.ADMIN].values():
        assert targets == frozenset()


# ─── role ────────────────────────────────────────────────────────

def test_role_changes_only_solver_to_buyer():
    assert can_transition(ROLE_TRANSITIONS, Role.PROBLEM_SOLVER, Role.BUYER)
    assert not can_transition(ROLE_TRANSITIONS, Role.BUYER, Role.PROBLEM_SOLVER)
    assert not can_transition(ROLE_TRANSITIONS, Role.PROBLEM_SOLVER, Role.ADMIN)


# ─── check_transition ───────────────────────────────────────────

def test_check_transition_allows_listed_move():
    assert check_transition(
        PROJECT_TRANSITIONS, ProjectStatus.OPEN, ProjectStatus.ASSIGNED, "project",
    ) is None


def test_check_transition_rejects_with_entity_code():
    rejection = check_transition(
        REQUEST_TRANSITIONS, RequestStatus.REJECTED, RequestStatus.ACCEPTED, "request",
    )
    assert rejection.kind == RejectionKind.INVALID_STATE
    assert rejection.code == "ILLEGAL_REQUEST_TRANSITION"
    assert "'rejected'" in rejection.message
