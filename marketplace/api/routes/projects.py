"""Project Routes - buyers post and manage projects, pick a solver.

Invariants:
    - Listing and detail are filtered by the caller's role
    - DELETE only succeeds while the project is open
"""

from uuid import UUID

from fastapi import APIRouter, Depends, Response, status

from marketplace.api.dependencies import get_current_actor, get_project_handlers
from marketplace.models.user import User
from marketplace.schemas.project import (
    AssignSolver, ProjectCreate, ProjectDetail, ProjectResponse,
)
from marketplace.schemas.request import RequestResponse
from marketplace.schemas.task import TaskResponse
from marketplace.services.handle_projects import ProjectHandlers

router = APIRouter(prefix="/api/v1/projects", tags=["projects"])


@router.post("", response_model=ProjectResponse, status_code=status.HTTP_201_CREATED)
async def create_project(
    body: ProjectCreate,
    actor: User = Depends(get_current_actor),
    handlers: ProjectHandlers = Depends(get_project_handlers),
):
    return await handlers.create(
        actor, body.title, body.description, body.budget, body.deadline,
    )


@router.get("", response_model=list[ProjectResponse])
async def list_projects(
    actor: User = Depends(get_current_actor),
    handlers: ProjectHandlers = Depends(get_project_handlers),
):
    return await handlers.list_projects(actor)


@router.get("/{project_id}", response_model=ProjectDetail)
async def get_project(
    project_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: ProjectHandlers = Depends(get_project_handlers),
):
    """Project with the requests and tasks the caller may see."""
    project, requests, tasks = await handlers.get(actor, project_id)
    return ProjectDetail(
        **ProjectResponse.model_validate(project).model_dump(),
        requests=[RequestResponse.model_validate(r) for r in requests],
        tasks=[TaskResponse.model_validate(t) for t in tasks],
    )


@router.delete("/{project_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_project(
    project_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: ProjectHandlers = Depends(get_project_handlers),
):
    await handlers.delete(actor, project_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.put("/{project_id}/assign", response_model=ProjectResponse)
async def assign_solver(
    project_id: UUID,
    body: AssignSolver,
    actor: User = Depends(get_current_actor),
    handlers: ProjectHandlers = Depends(get_project_handlers),
):
    """Accept one solver's request; every other request is rejected."""
    return await handlers.assign(actor, project_id, body.solver_id)
