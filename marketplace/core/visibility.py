"""Listing Visibility - which rows each role may list, expressed as store predicates.

Invariants:
    - Admin listings are unrestricted
    - Buyers list only rows belonging to projects they own
    - Solvers list open projects plus work on projects assigned to them,
      and only their own requests and submissions

Design Decisions:
    - Returns Match predicates instead of running queries: the shell owns IO
    - `via_projects` covers rows scoped through their parent project (two-step
      lookup: project ids first, then `project_id IN (...)`)
"""

from dataclasses import dataclass

from marketplace.core.authorization import role_of
from marketplace.core.domain_types import EntityType, ProjectStatus, Role
from marketplace.core.outcomes import Match
from marketplace.core.repository_protocols import UserLike


@dataclass(frozen=True)
class Scope:
    """OR-ed predicates describing the rows an actor may list."""
    unrestricted: bool = False
    direct: tuple[Match, ...] = ()
    via_projects: tuple[Match, ...] = ()


UNRESTRICTED = Scope(unrestricted=True)


def listing_scope(actor: UserLike, entity: EntityType) -> Scope:
    role = role_of(actor)
    if role == Role.ADMIN:
        return UNRESTRICTED

    owned = Match(equals={"buyer_id": actor.id})
    assigned = Match(equals={"assigned_solver_id": actor.id})
    own_rows = Match(equals={"solver_id": actor.id})

    if entity == EntityType.PROJECT:
        if role == Role.BUYER:
            return Scope(direct=(owned,))
        return Scope(direct=(
            Match(equals={"status": ProjectStatus.OPEN.value}), assigned,
        ))

    if entity == EntityType.TASK:
        return Scope(via_projects=(owned if role == Role.BUYER else assigned,))

    if entity in (EntityType.REQUEST, EntityType.SUBMISSION):
        if role == Role.BUYER:
            return Scope(via_projects=(owned,))
        return Scope(direct=(own_rows,))

    raise ValueError(f"No listing scope for {entity.value}")
