"""API Dependencies - caller identity and per-request handler wiring.

Invariants:
    - The caller is identified ONLY by the X-User-Id header; there is no session
      state and no ambient current user
    - Missing, malformed or unknown ids raise AuthenticationError (401)
    - Handlers share the request's AsyncSession through one SqlEntityStore
"""

from uuid import UUID

from fastapi import Depends, Header
from sqlalchemy.ext.asyncio import AsyncSession

from marketplace.config import get_settings
from marketplace.core.errors import AuthenticationError
from marketplace.infrastructure.blob_store import LocalBlobStore
from marketplace.infrastructure.database import get_db
from marketplace.infrastructure.entity_store import SqlEntityStore
from marketplace.models.user import User
from marketplace.services.handle_projects import ProjectHandlers
from marketplace.services.handle_requests import RequestHandlers
from marketplace.services.handle_submissions import SubmissionHandlers
from marketplace.services.handle_tasks import TaskHandlers
from marketplace.services.handle_users import UserHandlers


def get_store(db: AsyncSession = Depends(get_db)) -> SqlEntityStore:
    return SqlEntityStore(db)


def get_blob_store() -> LocalBlobStore:
    return LocalBlobStore(get_settings().upload_dir)


async def get_current_actor(
    x_user_id: str | None = Header(default=None),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Resolve the acting user from the X-User-Id header."""
    if not x_user_id:
        raise AuthenticationError("X-User-Id header is required")
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise AuthenticationError("X-User-Id is not a valid user id")
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Unknown user")
    return user


def get_user_handlers(store: SqlEntityStore = Depends(get_store)) -> UserHandlers:
    return UserHandlers(store)


def get_project_handlers(store: SqlEntityStore = Depends(get_store)) -> ProjectHandlers:
    return ProjectHandlers(store)


def get_request_handlers(store: SqlEntityStore = Depends(get_store)) -> RequestHandlers:
    return RequestHandlers(store)


def get_task_handlers(store: SqlEntityStore = Depends(get_store)) -> TaskHandlers:
    return TaskHandlers(store)


def get_submission_handlers(
    store: SqlEntityStore = Depends(get_store),
    blobs: LocalBlobStore = Depends(get_blob_store),
) -> SubmissionHandlers:
    return SubmissionHandlers(store, blobs, get_settings().max_upload_bytes)
