"""Authorization Guard - role x ownership checks for every guarded action.

Invariants:
    - All functions are PURE: no IO, no async, no DB
    - authorize() returns a Rejection on deny, None on allow
    - A missing target is always NOT_FOUND, never FORBIDDEN
    - The actor is an explicit argument; there is no ambient "current user"

Design Decisions:
    - Explicit action -> check mapping: every rule visible in one dict,
      adding an action requires editing _CHECKS
    - Checks chain with `or`: first rejection wins, same shape as the
      workflow engine's prerequisite chains
"""

from typing import Callable

from marketplace.core.domain_types import Action, ProjectStatus, Role
from marketplace.core.outcomes import (
    Rejection, forbidden, invalid_state, not_found,
)
from marketplace.core.repository_protocols import (
    ProjectLike, SubmissionLike, UserLike,
)


def role_of(user: UserLike) -> Role:
    return Role(user.role)


def require_role(actor: UserLike, action: Action, *roles: Role) -> Rejection | None:
    """Actor must hold one of `roles`."""
    if role_of(actor) in roles:
        return None
    return forbidden(
        f"Role '{actor.role}' cannot perform '{action.value}'",
        code="ROLE_NOT_ALLOWED",
    )


def require_target(target: object, resource_type: str) -> Rejection | None:
    if target is None:
        return not_found(resource_type)
    return None


def is_owner(actor: UserLike, project: ProjectLike) -> bool:
    return project.buyer_id == actor.id


def is_assigned_solver(actor: UserLike, project: ProjectLike) -> bool:
    return (
        project.assigned_solver_id is not None
        and project.assigned_solver_id == actor.id
    )


def _not_owner() -> Rejection:
    return forbidden("Only the project's buyer may do this", code="NOT_PROJECT_OWNER")


def _not_assigned() -> Rejection:
    return forbidden(
        "Only the project's assigned solver may do this", code="NOT_ASSIGNED_SOLVER",
    )


# ─── User actions ────────────────────────────────────────────────

def _check_promote(actor, target, project) -> Rejection | None:
    denied = require_role(actor, Action.PROMOTE_TO_BUYER, Role.ADMIN)
    if denied:
        return denied
    if target is None:
        return not_found("User")
    if target.id == actor.id:
        return forbidden("Admins cannot change their own role", code="SELF_ROLE_CHANGE")
    return None


def _check_update_profile(actor, target, project) -> Rejection | None:
    if target is not None and target.id != actor.id:
        return forbidden("Users may only edit their own profile", code="NOT_PROFILE_OWNER")
    return None


def _check_list_users(actor, target, project) -> Rejection | None:
    return require_role(actor, Action.LIST_USERS, Role.ADMIN)


# ─── Project actions ─────────────────────────────────────────────

def _check_create_project(actor, target, project) -> Rejection | None:
    return require_role(actor, Action.CREATE_PROJECT, Role.BUYER)


def can_view_project(actor: UserLike, project: ProjectLike) -> bool:
    """Admins see everything, buyers their own, solvers open or assigned ones."""
    role = role_of(actor)
    if role == Role.ADMIN:
        return True
    if role == Role.BUYER:
        return is_owner(actor, project)
    return (
        ProjectStatus(project.status) == ProjectStatus.OPEN
        or is_assigned_solver(actor, project)
    )


def _check_read_project(actor, target, project) -> Rejection | None:
    missing = require_target(target, "Project")
    if missing:
        return missing
    if not can_view_project(actor, target):
        return forbidden("Not authorized to view this project")
    return None


def _check_delete_project(actor, target, project) -> Rejection | None:
    missing = require_target(target, "Project")
    if missing:
        return missing
    if role_of(actor) == Role.ADMIN:
        return None
    return (
        require_role(actor, Action.DELETE_PROJECT, Role.BUYER)
        or (None if is_owner(actor, target) else _not_owner())
    )


def _check_assign_solver(actor, target, project) -> Rejection | None:
    return (
        require_target(target, "Project")
        or require_role(actor, Action.ASSIGN_SOLVER, Role.BUYER)
        or (None if is_owner(actor, target) else _not_owner())
    )


def _check_create_request(actor, target, project) -> Rejection | None:
    return (
        require_target(target, "Project")
        or require_role(actor, Action.CREATE_REQUEST, Role.PROBLEM_SOLVER)
    )


# ─── Work actions (tasks, submissions) ──────────────────────────

def can_view_work(actor: UserLike, project: ProjectLike) -> bool:
    """Tasks and submissions: admin, owning buyer, assigned solver."""
    role = role_of(actor)
    if role == Role.ADMIN:
        return True
    if role == Role.BUYER:
        return is_owner(actor, project)
    return is_assigned_solver(actor, project)


def _check_read_work(actor, target, project) -> Rejection | None:
    missing = require_target(target, "Project")
    if missing:
        return missing
    if not can_view_work(actor, target):
        return forbidden("Not authorized to view this project's work")
    return None


def _check_create_task(actor, target, project) -> Rejection | None:
    denied = (
        require_target(target, "Project")
        or require_role(actor, Action.CREATE_TASK, Role.PROBLEM_SOLVER)
    )
    if denied:
        return denied
    if target.assigned_solver_id is None:
        return invalid_state("Project is not assigned yet", code="PROJECT_NOT_ASSIGNED")
    if not is_assigned_solver(actor, target):
        return _not_assigned()
    return None


def _check_update_task(actor, target, project) -> Rejection | None:
    missing = require_target(target, "Task") or require_target(project, "Project")
    if missing:
        return missing
    role = role_of(actor)
    if role == Role.PROBLEM_SOLVER:
        return None if is_assigned_solver(actor, project) else _not_assigned()
    if role == Role.BUYER:
        return None if is_owner(actor, project) else _not_owner()
    return require_role(actor, Action.UPDATE_TASK, Role.PROBLEM_SOLVER, Role.BUYER)


def _check_submit_work(actor, target, project) -> Rejection | None:
    return (
        require_target(target, "Task")
        or require_target(project, "Project")
        or require_role(actor, Action.SUBMIT_WORK, Role.PROBLEM_SOLVER)
        or (None if is_assigned_solver(actor, project) else _not_assigned())
    )


def _check_review(actor, target, project) -> Rejection | None:
    return (
        require_target(target, "Submission")
        or require_target(project, "Project")
        or require_role(actor, Action.REVIEW_SUBMISSION, Role.BUYER)
        or (None if is_owner(actor, project) else _not_owner())
    )


def _check_download(actor, target: SubmissionLike | None, project) -> Rejection | None:
    missing = require_target(target, "Submission") or require_target(project, "Project")
    if missing:
        return missing
    role = role_of(actor)
    if role == Role.ADMIN:
        return None
    if role == Role.BUYER and is_owner(actor, project):
        return None
    if role == Role.PROBLEM_SOLVER and target.solver_id == actor.id:
        return None
    return forbidden("Not authorized to download this submission")


Check = Callable[[UserLike, object, ProjectLike | None], Rejection | None]

_CHECKS: dict[Action, Check] = {
    Action.PROMOTE_TO_BUYER: _check_promote,
    Action.UPDATE_PROFILE: _check_update_profile,
    Action.LIST_USERS: _check_list_users,
    Action.CREATE_PROJECT: _check_create_project,
    Action.READ_PROJECT: _check_read_project,
    Action.DELETE_PROJECT: _check_delete_project,
    Action.ASSIGN_SOLVER: _check_assign_solver,
    Action.CREATE_REQUEST: _check_create_request,
    Action.READ_PROJECT_REQUESTS: _check_read_project,
    Action.CREATE_TASK: _check_create_task,
    Action.READ_PROJECT_WORK: _check_read_work,
    Action.UPDATE_TASK: _check_update_task,
    Action.SUBMIT_WORK: _check_submit_work,
    Action.REVIEW_SUBMISSION: _check_review,
    Action.DOWNLOAD_SUBMISSION: _check_download,
}


def authorize(
    actor: UserLike,
    action: Action,
    target: object = None,
    project: ProjectLike | None = None,
) -> Rejection | None:
    """Decide whether `actor` may perform `action` on `target`.

    `target` is the entity the action is about (a project for project-level
    actions, a task / submission / user otherwise). `project` is the parent
    project when the target is a child entity.
    """
    return _CHECKS[action](actor, target, project)
