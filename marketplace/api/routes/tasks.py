"""Task Routes - the assigned solver plans work; the buyer settles it."""

from uuid import UUID

from fastapi import APIRouter, Depends, status

from marketplace.api.dependencies import get_current_actor, get_task_handlers
from marketplace.models.user import User
from marketplace.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from marketplace.services.handle_tasks import TaskHandlers

router = APIRouter(prefix="/api/v1/tasks", tags=["tasks"])


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    body: TaskCreate,
    actor: User = Depends(get_current_actor),
    handlers: TaskHandlers = Depends(get_task_handlers),
):
    return await handlers.create(
        actor, body.project_id, body.title, body.description, body.deadline,
    )


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    actor: User = Depends(get_current_actor),
    handlers: TaskHandlers = Depends(get_task_handlers),
):
    return await handlers.list_tasks(actor)


@router.get("/project/{project_id}", response_model=list[TaskResponse])
async def list_project_tasks(
    project_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: TaskHandlers = Depends(get_task_handlers),
):
    return await handlers.list_for_project(actor, project_id)


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(
    task_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: TaskHandlers = Depends(get_task_handlers),
):
    return await handlers.get(actor, task_id)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: UUID,
    body: TaskUpdate,
    actor: User = Depends(get_current_actor),
    handlers: TaskHandlers = Depends(get_task_handlers),
):
    """Change status and/or details; allowed targets depend on the caller's role."""
    return await handlers.update(actor, task_id, body.status, body.details())
