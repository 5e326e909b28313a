"""Plan Application - persists a Workflow Engine Plan through the EntityStore.

Invariants:
    - A Plan is applied in order inside ONE store transaction: all or nothing
    - Released blobs are deleted only after the commit succeeded
    - A Rejection never reaches the store: require_plan() raises first
    - Every applied action is logged at INFO, every rejection at INFO with its code
"""

import logging
from collections import defaultdict

from marketplace.core.domain_types import Action, EntityType
from marketplace.core.errors import raise_for_rejection
from marketplace.core.outcomes import (
    Create, Delete, Plan, Rejection, Update, UpdateMany, WorkflowResult,
)
from marketplace.core.repository_protocols import BlobStore, EntityStore, UserLike

logger = logging.getLogger(__name__)


def require_plan(result: WorkflowResult, action: Action, actor: UserLike) -> Plan:
    """Return the Plan, or raise the error mapped from the Rejection."""
    if isinstance(result, Rejection):
        logger.info(
            f"Rejected {action.value}: {result.message}",
            extra={
                "actor_id": actor.id, "action": action.value,
                "error_code": result.code,
            },
        )
        raise_for_rejection(result)
    return result


async def apply_plan(store: EntityStore, plan: Plan) -> dict[EntityType, list]:
    """Apply every change in order; returns created / updated rows per entity."""
    touched: dict[EntityType, list] = defaultdict(list)
    for change in plan.changes:
        if isinstance(change, Create):
            row = await store.create(change.entity, change.fields)
            touched[change.entity].append(row)
        elif isinstance(change, Update):
            row = await store.update(
                change.entity, change.entity_id, change.fields, change.expected,
            )
            touched[change.entity].append(row)
        elif isinstance(change, UpdateMany):
            await store.update_many(change.entity, change.match, change.fields)
        elif isinstance(change, Delete):
            await store.delete_many(change.entity, change.match)
        else:
            raise TypeError(f"Unknown change record: {change!r}")
    return touched


async def commit_plan(
    store: EntityStore,
    plan: Plan,
    action: Action,
    actor: UserLike,
    blobs: BlobStore | None = None,
) -> dict[EntityType, list]:
    """Apply `plan` atomically, then release the blobs it replaced."""
    async with store.transaction():
        touched = await apply_plan(store, plan)
    logger.info(
        f"Applied {action.value} ({len(plan.changes)} changes)",
        extra={"actor_id": actor.id, "action": action.value},
    )
    if blobs is not None:
        for handle in plan.released_blobs:
            blobs.delete(handle)
    return touched
