"""Visible Rows - resolves a listing Scope into store queries."""

from marketplace.core.domain_types import EntityType
from marketplace.core.outcomes import Match
from marketplace.core.repository_protocols import EntityStore, UserLike
from marketplace.core.visibility import listing_scope


async def list_visible(
    store: EntityStore, actor: UserLike, entity: EntityType,
) -> list:
    """Rows of `entity` the actor may list, newest first."""
    scope = listing_scope(actor, entity)
    if scope.unrestricted:
        return await store.find_many(entity)

    matches = list(scope.direct)
    if scope.via_projects:
        projects = await store.find_many(EntityType.PROJECT, *scope.via_projects)
        matches.append(
            Match(one_of={"project_id": tuple(p.id for p in projects)}),
        )
    return await store.find_many(entity, *matches)
