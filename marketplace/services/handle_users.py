"""User Handlers - registration, profiles, role promotion, admin bootstrap.

Invariants:
    - Registration always yields a problem_solver; only ensure_admin creates admins
    - Role changes go through promote_to_buyer (admin only, never on self)
    - Any authenticated user may read a profile; only admins list users
"""

import logging
from uuid import UUID

from marketplace.core.authorization import authorize
from marketplace.core.domain_types import Action, EntityType, Role
from marketplace.core.errors import ResourceNotFoundError, raise_for_rejection
from marketplace.core.outcomes import Match, Rejection
from marketplace.core.repository_protocols import EntityStore, UserLike
from marketplace.core.workflow import promote_to_buyer, register_user, update_profile
from marketplace.services.apply_plan import apply_plan, commit_plan, require_plan

logger = logging.getLogger(__name__)


class UserHandlers:
    """User account operations."""

    def __init__(self, store: EntityStore):
        self.store = store

    async def _by_email(self, email: str):
        rows = await self.store.find_many(
            EntityType.USER, Match(equals={"email": email.strip().lower()}),
        )
        return rows[0] if rows else None

    async def register(self, name: str, email: str):
        existing = await self._by_email(email)
        result = register_user(name, email, existing)
        if isinstance(result, Rejection):
            raise_for_rejection(result)
        async with self.store.transaction():
            touched = await apply_plan(self.store, result)
        user = touched[EntityType.USER][0]
        logger.info(f"Registered user {user.id}", extra={"actor_id": user.id})
        return user

    async def ensure_admin(self, email: str, name: str):
        """Create the bootstrap admin if no account uses `email` yet."""
        existing = await self._by_email(email)
        if existing is not None:
            if existing.role != Role.ADMIN.value:
                logger.warning(f"Bootstrap email {email} belongs to a {existing.role}")
            return existing
        plan = register_user(name, email, role=Role.ADMIN)
        async with self.store.transaction():
            touched = await apply_plan(self.store, plan)
        admin = touched[EntityType.USER][0]
        logger.info(f"Bootstrapped admin {admin.id}", extra={"actor_id": admin.id})
        return admin

    async def list_users(self, actor: UserLike) -> list:
        denied = authorize(actor, Action.LIST_USERS)
        if denied:
            raise_for_rejection(denied)
        return await self.store.find_many(EntityType.USER)

    async def get_user(self, user_id: UUID):
        user = await self.store.find(EntityType.USER, user_id)
        if user is None:
            raise ResourceNotFoundError("User", str(user_id), code="USER_NOT_FOUND")
        return user

    async def update_profile(self, actor: UserLike, fields: dict):
        plan = require_plan(update_profile(actor, fields), Action.UPDATE_PROFILE, actor)
        if not plan.changes:
            return actor
        touched = await commit_plan(self.store, plan, Action.UPDATE_PROFILE, actor)
        return touched[EntityType.USER][0]

    async def promote(self, actor: UserLike, user_id: UUID):
        target = await self.store.find(EntityType.USER, user_id)
        plan = require_plan(
            promote_to_buyer(actor, target), Action.PROMOTE_TO_BUYER, actor,
        )
        touched = await commit_plan(self.store, plan, Action.PROMOTE_TO_BUYER, actor)
        return touched[EntityType.USER][0]
