"""Project Handlers - create, list, read, delete, assign a solver.

Invariants:
    - Project detail embeds requests filtered by role: owner and admin see all,
      a solver sees only their own
    - Tasks are embedded only for actors who may view the project's work
    - assign_solver's project update, accepted request and sibling rejections
      commit together or not at all
"""

import logging
from datetime import datetime
from uuid import UUID

from marketplace.core.authorization import authorize, can_view_work, is_owner
from marketplace.core.domain_types import Action, EntityType, Role
from marketplace.core.errors import raise_for_rejection
from marketplace.core.outcomes import Match
from marketplace.core.repository_protocols import EntityStore, UserLike
from marketplace.core.workflow import assign_solver, create_project, delete_project
from marketplace.services.apply_plan import commit_plan, require_plan
from marketplace.services.list_visible import list_visible

logger = logging.getLogger(__name__)


class ProjectHandlers:
    """Buyer-facing project lifecycle operations."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def create(
        self,
        actor: UserLike,
        title: str,
        description: str,
        budget: float | None = None,
        deadline: datetime | None = None,
    ):
        plan = require_plan(
            create_project(actor, title, description, budget, deadline),
            Action.CREATE_PROJECT, actor,
        )
        touched = await commit_plan(self.store, plan, Action.CREATE_PROJECT, actor)
        return touched[EntityType.PROJECT][0]

    async def list_projects(self, actor: UserLike) -> list:
        return await list_visible(self.store, actor, EntityType.PROJECT)

    async def get(self, actor: UserLike, project_id: UUID):
        """Return (project, visible requests, visible tasks)."""
        project = await self.store.find(EntityType.PROJECT, project_id)
        denied = authorize(actor, Action.READ_PROJECT, project)
        if denied:
            raise_for_rejection(denied)

        if actor.role == Role.ADMIN.value or is_owner(actor, project):
            requests = await self.store.find_many(
                EntityType.REQUEST, Match(equals={"project_id": project.id}),
            )
        else:
            requests = await self.store.find_many(
                EntityType.REQUEST,
                Match(equals={"project_id": project.id, "solver_id": actor.id}),
            )
        tasks = []
        if can_view_work(actor, project):
            tasks = await self.store.find_many(
                EntityType.TASK, Match(equals={"project_id": project.id}),
            )
        return project, requests, tasks

    async def delete(self, actor: UserLike, project_id: UUID) -> None:
        project = await self.store.find(EntityType.PROJECT, project_id)
        plan = require_plan(delete_project(actor, project), Action.DELETE_PROJECT, actor)
        await commit_plan(self.store, plan, Action.DELETE_PROJECT, actor)
        logger.info(
            f"Deleted project {project_id}",
            extra={"actor_id": actor.id, "project_id": project_id},
        )

    async def assign(self, actor: UserLike, project_id: UUID, solver_id: UUID):
        project = await self.store.find(EntityType.PROJECT, project_id)
        requests = []
        if project is not None:
            requests = await self.store.find_many(
                EntityType.REQUEST, Match(equals={"project_id": project.id}),
            )
        plan = require_plan(
            assign_solver(actor, project, solver_id, requests),
            Action.ASSIGN_SOLVER, actor,
        )
        touched = await commit_plan(self.store, plan, Action.ASSIGN_SOLVER, actor)
        logger.info(
            f"Assigned solver {solver_id} to project {project_id}",
            extra={"actor_id": actor.id, "project_id": project_id},
        )
        return touched[EntityType.PROJECT][0]
