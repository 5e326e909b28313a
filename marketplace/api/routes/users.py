"""User Routes - registration, profiles, and admin role promotion.

Invariants:
    - POST /users is the only unauthenticated write
    - Role changes only via PUT /users/{id}/assign-buyer (admin)
"""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from marketplace.api.dependencies import get_current_actor, get_user_handlers
from marketplace.models.user import User
from marketplace.schemas.user import ProfileUpdate, UserCreate, UserResponse
from marketplace.services.handle_users import UserHandlers

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: UserCreate, handlers: UserHandlers = Depends(get_user_handlers),
):
    """Register a new problem solver account."""
    return await handlers.register(body.name, body.email)


@router.get("", response_model=list[UserResponse])
async def list_users(
    actor: User = Depends(get_current_actor),
    handlers: UserHandlers = Depends(get_user_handlers),
):
    return await handlers.list_users(actor)


@router.get("/me", response_model=UserResponse)
async def read_me(actor: User = Depends(get_current_actor)):
    return actor


@router.put("/me/profile", response_model=UserResponse)
async def update_my_profile(
    body: ProfileUpdate,
    actor: User = Depends(get_current_actor),
    handlers: UserHandlers = Depends(get_user_handlers),
):
    return await handlers.update_profile(actor, body.model_dump(exclude_unset=True))


@router.get("/{user_id}", response_model=UserResponse)
async def read_user(
    user_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: UserHandlers = Depends(get_user_handlers),
):
    return await handlers.get_user(user_id)


@router.put("/{user_id}/assign-buyer", response_model=UserResponse)
async def assign_buyer(
    user_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: UserHandlers = Depends(get_user_handlers),
):
    """Promote a problem solver to buyer (admin only)."""
    return await handlers.promote(actor, user_id)
