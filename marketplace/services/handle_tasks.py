"""Task Handlers - the assigned solver plans work, the buyer settles it.

Invariants:
    - Creating the first task moves an assigned project to in_progress
    - Status changes are restricted per role (core/transitions.py); details are
      editable by the assigned solver only
    - Reads use the project-level rule: admin, owning buyer, assigned solver
"""

import logging
from datetime import datetime
from uuid import UUID

from marketplace.core.authorization import authorize
from marketplace.core.domain_types import Action, EntityType
from marketplace.core.errors import raise_for_rejection
from marketplace.core.outcomes import Match, not_found
from marketplace.core.repository_protocols import EntityStore, UserLike
from marketplace.core.workflow import create_task, update_task
from marketplace.services.apply_plan import commit_plan, require_plan
from marketplace.services.list_visible import list_visible

logger = logging.getLogger(__name__)


class TaskHandlers:
    """Task operations scoped by project assignment."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def _load(self, task_id: UUID):
        task = await self.store.find(EntityType.TASK, task_id)
        if task is None:
            raise_for_rejection(not_found("Task", task_id))
        project = await self.store.find(EntityType.PROJECT, task.project_id)
        return task, project

    async def create(
        self,
        actor: UserLike,
        project_id: UUID,
        title: str,
        description: str,
        deadline: datetime,
    ):
        project = await self.store.find(EntityType.PROJECT, project_id)
        plan = require_plan(
            create_task(actor, project, title, description, deadline),
            Action.CREATE_TASK, actor,
        )
        touched = await commit_plan(self.store, plan, Action.CREATE_TASK, actor)
        task = touched[EntityType.TASK][0]
        logger.info(
            f"Task {task.id} created",
            extra={"actor_id": actor.id, "project_id": project_id, "task_id": task.id},
        )
        return task

    async def list_tasks(self, actor: UserLike) -> list:
        return await list_visible(self.store, actor, EntityType.TASK)

    async def list_for_project(self, actor: UserLike, project_id: UUID) -> list:
        project = await self.store.find(EntityType.PROJECT, project_id)
        denied = authorize(actor, Action.READ_PROJECT_WORK, project)
        if denied:
            raise_for_rejection(denied)
        return await self.store.find_many(
            EntityType.TASK, Match(equals={"project_id": project.id}),
        )

    async def get(self, actor: UserLike, task_id: UUID):
        task, project = await self._load(task_id)
        denied = authorize(actor, Action.READ_PROJECT_WORK, project)
        if denied:
            raise_for_rejection(denied)
        return task

    async def update(
        self,
        actor: UserLike,
        task_id: UUID,
        status: str | None = None,
        details: dict | None = None,
    ):
        task, project = await self._load(task_id)
        plan = require_plan(
            update_task(actor, task, project, status, details),
            Action.UPDATE_TASK, actor,
        )
        if not plan.changes:
            return task
        touched = await commit_plan(self.store, plan, Action.UPDATE_TASK, actor)
        return touched[EntityType.TASK][0]
