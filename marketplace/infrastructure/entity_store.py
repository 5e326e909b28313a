"""SQL Entity Store - EntityStore implementation over an AsyncSession.

Invariants:
    - One store per request session; transaction() commits once or rolls back
    - update() with `expected` columns is a compare-and-set: 0 matched rows
      raises ConflictError, never a silent no-op
    - IntegrityError (unique / FK violations) surfaces as ConflictError (409);
      any other SQLAlchemyError as StoreError (503). Never retried
    - Match predicates translate to plain column comparisons; None compares with IS

Design Decisions:
    - Statement-level update/delete with synchronize_session="fetch": rows
      already loaded in the session see the new values without a refresh
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator
from uuid import UUID

from sqlalchemy import and_, delete, false, or_, select, true, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.core.domain_types import EntityType
from marketplace.core.errors import ConflictError, ResourceNotFoundError
from marketplace.core.outcomes import Match
from marketplace.infrastructure.database import store_error
from marketplace.models import ProjectRequest, Project, Submission, Task, User

logger = logging.getLogger(__name__)

MODELS = {
    EntityType.USER: User,
    EntityType.PROJECT: Project,
    EntityType.REQUEST: ProjectRequest,
    EntityType.TASK: Task,
    EntityType.SUBMISSION: Submission,
}


def _clause(model, match: Match):
    clauses = []
    for column, value in match.equals.items():
        attr = getattr(model, column)
        clauses.append(attr.is_(None) if value is None else attr == value)
    for column, value in match.not_equals.items():
        attr = getattr(model, column)
        clauses.append(attr.is_not(None) if value is None else attr != value)
    for column, values in match.one_of.items():
        clauses.append(getattr(model, column).in_(values) if values else false())
    return and_(true(), *clauses)


class SqlEntityStore:
    """Generic CRUD over the marketplace models, keyed by EntityType."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find(self, entity: EntityType, entity_id: UUID):
        return await self.db.get(MODELS[entity], entity_id)

    async def find_many(self, entity: EntityType, *matches: Match) -> list:
        model = MODELS[entity]
        query = select(model)
        if matches:
            query = query.where(or_(*(_clause(model, m) for m in matches)))
        query = query.order_by(model.created_at.desc())
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def create(self, entity: EntityType, fields: dict):
        row = MODELS[entity](**fields)
        self.db.add(row)
        await self.db.flush()
        return row

    async def update(
        self, entity: EntityType, entity_id: UUID, fields: dict,
        expected: dict | None = None,
    ):
        model = MODELS[entity]
        match = Match(equals={"id": entity_id, **(expected or {})})
        result = await self.db.execute(
            update(model)
            .where(_clause(model, match))
            .values(**fields)
            .execution_options(synchronize_session="fetch"),
        )
        if result.rowcount == 0:
            if await self.db.get(model, entity_id) is None:
                raise ResourceNotFoundError(entity.value.capitalize(), str(entity_id))
            logger.warning(
                f"Compare-and-set lost on {entity.value} {entity_id}",
                extra={"error_code": "CONCURRENT_MODIFICATION"},
            )
            raise ConflictError(
                f"{entity.value.capitalize()} was modified concurrently",
                code="CONCURRENT_MODIFICATION",
            )
        return await self.db.get(model, entity_id, populate_existing=True)

    async def update_many(self, entity: EntityType, match: Match, fields: dict) -> int:
        model = MODELS[entity]
        result = await self.db.execute(
            update(model)
            .where(_clause(model, match))
            .values(**fields)
            .execution_options(synchronize_session="fetch"),
        )
        return result.rowcount

    async def delete_many(self, entity: EntityType, match: Match) -> int:
        model = MODELS[entity]
        result = await self.db.execute(
            delete(model)
            .where(_clause(model, match))
            .execution_options(synchronize_session="fetch"),
        )
        return result.rowcount

    @asynccontextmanager
    async def transaction(self) -> AsyncGenerator[None, None]:
        """Commit everything done inside the block, or nothing."""
        try:
            yield
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            raise store_error(e, "transaction") from e
        except Exception:
            await self.db.rollback()
            raise
