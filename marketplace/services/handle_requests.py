"""Request Handlers - solvers bid on open projects; buyers review the bids.

Invariants:
    - At most one request per (project, solver): checked in core, backed by the
      uq_requests_project_solver constraint for concurrent inserts
    - Per-project listing: owner and admin see every request, a solver only theirs
"""

from uuid import UUID

from marketplace.core.authorization import authorize, is_owner
from marketplace.core.domain_types import Action, EntityType, Role
from marketplace.core.errors import raise_for_rejection
from marketplace.core.outcomes import Match
from marketplace.core.repository_protocols import EntityStore, UserLike
from marketplace.core.workflow import create_request
from marketplace.services.apply_plan import commit_plan, require_plan
from marketplace.services.list_visible import list_visible


class RequestHandlers:

    def __init__(self, store: EntityStore):
        self.store = store

    async def create(self, actor: UserLike, project_id: UUID, message: str | None = None):
        project = await self.store.find(EntityType.PROJECT, project_id)
        existing = await self.store.find_many(
            EntityType.REQUEST,
            Match(equals={"project_id": project_id, "solver_id": actor.id}),
        )
        plan = require_plan(
            create_request(actor, project, existing[0] if existing else None, message),
            Action.CREATE_REQUEST, actor,
        )
        touched = await commit_plan(self.store, plan, Action.CREATE_REQUEST, actor)
        return touched[EntityType.REQUEST][0]

    async def list_requests(self, actor: UserLike) -> list:
        return await list_visible(self.store, actor, EntityType.REQUEST)

    async def list_for_project(self, actor: UserLike, project_id: UUID) -> list:
        project = await self.store.find(EntityType.PROJECT, project_id)
        denied = authorize(actor, Action.READ_PROJECT_REQUESTS, project)
        if denied:
            raise_for_rejection(denied)
        match = Match(equals={"project_id": project.id})
        if actor.role != Role.ADMIN.value and not is_owner(actor, project):
            match = Match(equals={"project_id": project.id, "solver_id": actor.id})
        return await self.store.find_many(EntityType.REQUEST, match)
