"""Workflow Engine - pure decisions for every status-changing action.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no clock reads
    - Each function returns a Plan (changes to persist) or a Rejection, never raises
      for business conditions
    - Authorization runs first: a forbidden actor learns nothing about entity state
    - project.assigned_solver_id is set iff project.status != open (only
      assign_solver writes either column)
    - assign_solver accepts exactly one request and rejects every other request
      of the project in the same Plan
    - A task has at most one submission; resubmission updates the existing row
    - Accepting the last incomplete task completes the project
    - Every accepted review bumps project.version with a compare-and-set, so two
      accepts on one project cannot both commit against the same task snapshot

Design Decisions:
    - Entities arrive as *Like protocols: ORM rows in production, tiny dataclasses
      in tests
    - Sibling rejection uses UpdateMany scoped by project: requests inserted after
      the state was loaded are rejected too
    - Status columns written with `.value` so the Plan holds plain strings, exactly
      what the store persists
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable
from uuid import UUID

from marketplace.core.authorization import authorize, role_of
from marketplace.core.domain_types import (
    Action, BlobHandle, EntityType, ProjectStatus, RequestStatus,
    ReviewDecision, Role, SubmissionStatus, TaskStatus,
)
from marketplace.core.outcomes import (
    Create, Delete, Match, Plan, Rejection, RejectionKind, Update, UpdateMany,
    WorkflowResult,
    conflict, forbidden, invalid_state, not_found,
)
from marketplace.core.repository_protocols import (
    ProjectLike, RequestLike, SubmissionLike, TaskLike, UserLike,
)
from marketplace.core.transitions import (
    BUYER_TASK_TRANSITIONS, PROJECT_TRANSITIONS, REQUEST_TRANSITIONS,
    ROLE_TRANSITIONS, SUBMISSION_TRANSITIONS, TASK_TRANSITIONS_BY_ROLE,
    can_transition, check_transition,
)

PROFILE_FIELDS = ("bio", "skills", "experience", "portfolio")
TASK_DETAIL_FIELDS = ("title", "description", "deadline")


@dataclass(frozen=True)
class StoredFile:
    """A submission file already written to the blob store."""
    handle: BlobHandle
    name: str
    size: int


# ─── Users ───────────────────────────────────────────────────────

def register_user(
    name: str,
    email: str,
    existing_user: UserLike | None = None,
    role: Role = Role.PROBLEM_SOLVER,
) -> WorkflowResult:
    """New accounts start as problem solvers. The unique email index backs the check."""
    if existing_user is not None:
        return conflict("Email is already registered", code="EMAIL_TAKEN")
    return Plan((
        Create(EntityType.USER, {
            "name": name,
            "email": email.strip().lower(),
            "role": role.value,
        }),
    ))


def promote_to_buyer(actor: UserLike, target: UserLike | None) -> WorkflowResult:
    denied = authorize(actor, Action.PROMOTE_TO_BUYER, target)
    if denied:
        return denied
    current = Role(target.role)
    if not can_transition(ROLE_TRANSITIONS, current, Role.BUYER):
        return invalid_state(
            f"User with role '{current.value}' cannot become a buyer",
            code="ILLEGAL_ROLE_TRANSITION",
        )
    return Plan((
        Update(
            EntityType.USER, target.id, {"role": Role.BUYER.value},
            expected={"role": current.value},
        ),
    ))


def update_profile(actor: UserLike, fields: dict) -> WorkflowResult:
    """Only profile columns are writable; unset (None) values are left alone."""
    denied = authorize(actor, Action.UPDATE_PROFILE, actor)
    if denied:
        return denied
    changes = {
        key: value for key, value in fields.items()
        if key in PROFILE_FIELDS and value is not None
    }
    if not changes:
        return Plan(())
    return Plan((Update(EntityType.USER, actor.id, changes),))


# ─── Projects ────────────────────────────────────────────────────

def create_project(
    actor: UserLike,
    title: str,
    description: str,
    budget: float | None = None,
    deadline: datetime | None = None,
) -> WorkflowResult:
    denied = authorize(actor, Action.CREATE_PROJECT)
    if denied:
        return denied
    return Plan((
        Create(EntityType.PROJECT, {
            "title": title,
            "description": description,
            "buyer_id": actor.id,
            "assigned_solver_id": None,
            "status": ProjectStatus.OPEN.value,
            "budget": budget if budget is not None else 0.0,
            "deadline": deadline,
        }),
    ))


def delete_project(actor: UserLike, project: ProjectLike | None) -> WorkflowResult:
    """Open projects only: deleting later would silently drop an assignment."""
    denied = authorize(actor, Action.DELETE_PROJECT, project)
    if denied:
        return denied
    if ProjectStatus(project.status) != ProjectStatus.OPEN:
        return invalid_state(
            "Only open projects can be deleted", code="PROJECT_NOT_OPEN",
        )
    return Plan((
        Delete(EntityType.REQUEST, Match(equals={"project_id": project.id})),
        Delete(EntityType.PROJECT, Match(equals={"id": project.id})),
    ))


# ─── Requests ────────────────────────────────────────────────────

def create_request(
    actor: UserLike,
    project: ProjectLike | None,
    existing_request: RequestLike | None,
    message: str | None = None,
) -> WorkflowResult:
    """A solver bids on an open project, at most once per project."""
    denied = authorize(actor, Action.CREATE_REQUEST, project)
    if denied:
        return denied
    if ProjectStatus(project.status) != ProjectStatus.OPEN:
        return invalid_state(
            "Project is not open for requests", code="PROJECT_NOT_OPEN",
        )
    if existing_request is not None:
        return conflict("Request already exists", code="DUPLICATE_REQUEST")
    return Plan((
        Create(EntityType.REQUEST, {
            "project_id": project.id,
            "solver_id": actor.id,
            "message": message,
            "status": RequestStatus.PENDING.value,
        }),
    ))


def assign_solver(
    actor: UserLike,
    project: ProjectLike | None,
    chosen_solver_id: UUID,
    requests: Iterable[RequestLike],
) -> WorkflowResult:
    """Accept one solver's request, reject all others, and assign the project.

    The returned Plan must be applied atomically: project update, the accepted
    request and the sibling rejections land together or not at all.
    """
    denied = authorize(actor, Action.ASSIGN_SOLVER, project)
    if denied:
        return denied
    current = ProjectStatus(project.status)
    if not can_transition(PROJECT_TRANSITIONS, current, ProjectStatus.ASSIGNED):
        return invalid_state(
            "Project is not open for assignment", code="PROJECT_NOT_OPEN",
        )

    chosen = next(
        (
            r for r in requests
            if r.project_id == project.id and r.solver_id == chosen_solver_id
        ),
        None,
    )
    if chosen is None:
        return Rejection(
            RejectionKind.NOT_FOUND, "REQUEST_NOT_FOUND",
            f"Solver '{chosen_solver_id}' has not requested this project",
            resource_type="Request",
        )
    illegal = check_transition(
        REQUEST_TRANSITIONS, RequestStatus(chosen.status),
        RequestStatus.ACCEPTED, "request",
    )
    if illegal:
        return illegal

    return Plan((
        Update(
            EntityType.PROJECT, project.id,
            {
                "status": ProjectStatus.ASSIGNED.value,
                "assigned_solver_id": chosen_solver_id,
            },
            expected={"status": ProjectStatus.OPEN.value},
        ),
        Update(
            EntityType.REQUEST, chosen.id,
            {"status": RequestStatus.ACCEPTED.value},
        ),
        UpdateMany(
            EntityType.REQUEST,
            Match(
                equals={"project_id": project.id},
                not_equals={"solver_id": chosen_solver_id},
            ),
            {"status": RequestStatus.REJECTED.value},
        ),
    ))


# ─── Tasks ───────────────────────────────────────────────────────

def create_task(
    actor: UserLike,
    project: ProjectLike | None,
    title: str,
    description: str,
    deadline: datetime,
) -> WorkflowResult:
    """The assigned solver adds a task; the first one marks the project in progress."""
    denied = authorize(actor, Action.CREATE_TASK, project)
    if denied:
        return denied
    changes: list = [
        Create(EntityType.TASK, {
            "project_id": project.id,
            "user_id": actor.id,
            "title": title,
            "description": description,
            "deadline": deadline,
            "status": TaskStatus.PENDING.value,
        }),
    ]
    if ProjectStatus(project.status) == ProjectStatus.ASSIGNED:
        # scoped by status so a concurrent first task cannot double-advance
        changes.append(UpdateMany(
            EntityType.PROJECT,
            Match(equals={
                "id": project.id, "status": ProjectStatus.ASSIGNED.value,
            }),
            {"status": ProjectStatus.IN_PROGRESS.value},
        ))
    return Plan(tuple(changes))


def update_task(
    actor: UserLike,
    task: TaskLike | None,
    project: ProjectLike | None,
    status: str | None = None,
    details: dict | None = None,
) -> WorkflowResult:
    """Solver edits details or moves work along; buyer settles it.

    Status targets outside the actor's allow-list are rejected, never ignored.
    """
    denied = authorize(actor, Action.UPDATE_TASK, task, project)
    if denied:
        return denied
    role = role_of(actor)

    fields = {
        key: value for key, value in (details or {}).items()
        if key in TASK_DETAIL_FIELDS and value is not None
    }
    if fields and role != Role.PROBLEM_SOLVER:
        return forbidden(
            "Only the assigned solver may edit task details",
            code="TASK_DETAILS_FORBIDDEN",
        )

    if status is not None:
        try:
            target = TaskStatus(status)
        except ValueError:
            return invalid_state(
                f"Unknown task status '{status}'", code="UNKNOWN_TASK_STATUS",
            )
        illegal = check_transition(
            TASK_TRANSITIONS_BY_ROLE[role], TaskStatus(task.status), target, "task",
        )
        if illegal:
            return illegal
        fields["status"] = target.value

    if not fields:
        return Plan(())
    return Plan((Update(EntityType.TASK, task.id, fields),))


# ─── Submissions ─────────────────────────────────────────────────

def submit_work(
    actor: UserLike,
    task: TaskLike | None,
    project: ProjectLike | None,
    existing_submission: SubmissionLike | None,
    file: StoredFile,
    message: str | None = None,
) -> WorkflowResult:
    """Create or replace the task's submission and force the task to `submitted`.

    The task moves to submitted from ANY prior status: a delivered file is the
    completion signal. A replaced file's handle is released after commit.
    """
    denied = authorize(actor, Action.SUBMIT_WORK, task, project)
    if denied:
        return denied

    file_fields = {
        "file_path": file.handle,
        "file_name": file.name,
        "file_size": file.size,
    }
    released: tuple[BlobHandle, ...] = ()

    if existing_submission is not None:
        illegal = check_transition(
            SUBMISSION_TRANSITIONS, SubmissionStatus(existing_submission.status),
            SubmissionStatus.PENDING, "submission",
        )
        if illegal:
            return illegal
        submission_change = Update(EntityType.SUBMISSION, existing_submission.id, {
            **file_fields,
            "message": message or existing_submission.message,
            "status": SubmissionStatus.PENDING.value,
            "reviewed_at": None,
        })
        if existing_submission.file_path and existing_submission.file_path != file.handle:
            released = (BlobHandle(existing_submission.file_path),)
    else:
        submission_change = Create(EntityType.SUBMISSION, {
            "task_id": task.id,
            "project_id": task.project_id,
            "solver_id": actor.id,
            **file_fields,
            "message": message,
            "status": SubmissionStatus.PENDING.value,
        })

    return Plan(
        (
            submission_change,
            Update(EntityType.TASK, task.id, {"status": TaskStatus.SUBMITTED.value}),
        ),
        released_blobs=released,
    )


def review_submission(
    actor: UserLike,
    submission: SubmissionLike | None,
    task: TaskLike | None,
    project: ProjectLike | None,
    project_tasks: Iterable[TaskLike],
    decision: str,
    now: datetime,
) -> WorkflowResult:
    """Buyer accepts or rejects a pending submission.

    accepted: task -> completed, and the project completes when every one of its
    tasks (at least one) is completed. The project row is always updated
    (version + 1, expecting the loaded version) so a concurrent accept that read
    the same tasks fails with CONCURRENT_MODIFICATION instead of both missing
    the completion.
    rejected: task -> rejected; the project is left as it is.
    """
    denied = authorize(actor, Action.REVIEW_SUBMISSION, submission, project)
    if denied:
        return denied
    if task is None:
        return not_found("Task", submission.task_id)
    try:
        verdict = ReviewDecision(decision)
    except ValueError:
        return invalid_state(
            "Decision must be 'accepted' or 'rejected'", code="INVALID_DECISION",
        )

    current = SubmissionStatus(submission.status)
    if current != SubmissionStatus.PENDING:
        return invalid_state(
            f"Submission was already {current.value}",
            code="SUBMISSION_ALREADY_REVIEWED",
        )
    illegal = check_transition(
        SUBMISSION_TRANSITIONS, current, SubmissionStatus(verdict.value), "submission",
    )
    if illegal:
        return illegal

    task_target = (
        TaskStatus.COMPLETED if verdict == ReviewDecision.ACCEPTED
        else TaskStatus.REJECTED
    )
    illegal = check_transition(
        BUYER_TASK_TRANSITIONS, TaskStatus(task.status), task_target, "task",
    )
    if illegal:
        return illegal

    changes: list = [
        Update(
            EntityType.SUBMISSION, submission.id,
            {"status": verdict.value, "reviewed_at": now},
            expected={"status": SubmissionStatus.PENDING.value},
        ),
        Update(EntityType.TASK, task.id, {"status": task_target.value}),
    ]

    if verdict == ReviewDecision.ACCEPTED:
        project_fields: dict = {"version": project.version + 1}
        if _completes_project(task, project, project_tasks):
            project_fields["status"] = ProjectStatus.COMPLETED.value
        changes.append(Update(
            EntityType.PROJECT, project.id, project_fields,
            expected={"status": project.status, "version": project.version},
        ))
    return Plan(tuple(changes))


def _completes_project(
    accepted_task: TaskLike, project: ProjectLike, project_tasks: Iterable[TaskLike],
) -> bool:
    """True if, with `accepted_task` completed, every task of the project is done."""
    statuses = {t.id: TaskStatus(t.status) for t in project_tasks}
    statuses[accepted_task.id] = TaskStatus.COMPLETED
    if not statuses:
        return False
    if any(s != TaskStatus.COMPLETED for s in statuses.values()):
        return False
    return can_transition(
        PROJECT_TRANSITIONS, ProjectStatus(project.status), ProjectStatus.COMPLETED,
    )
