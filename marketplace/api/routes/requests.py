"""Request Routes - solvers bid on open projects."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from marketplace.api.dependencies import get_current_actor, get_request_handlers
from marketplace.models.user import User
from marketplace.schemas.request import RequestCreate, RequestResponse
from marketplace.services.handle_requests import RequestHandlers

router = APIRouter(prefix="/api/v1/requests", tags=["requests"])


@router.post("", response_model=RequestResponse, status_code=status.HTTP_201_CREATED)
async def create_request(
    body: RequestCreate,
    actor: User = Depends(get_current_actor),
    handlers: RequestHandlers = Depends(get_request_handlers),
):
    return await handlers.create(actor, body.project_id, body.message)


@router.get("", response_model=list[RequestResponse])
async def list_requests(
    actor: User = Depends(get_current_actor),
    handlers: RequestHandlers = Depends(get_request_handlers),
):
    return await handlers.list_requests(actor)


@router.get("/project/{project_id}", response_model=list[RequestResponse])
async def list_project_requests(
    project_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: RequestHandlers = Depends(get_request_handlers),
):
    return await handlers.list_for_project(actor, project_id)
