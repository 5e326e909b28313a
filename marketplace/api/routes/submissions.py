"""Submission Routes - multipart upload, review, and download of deliverables.

Invariants:
    - Upload is multipart: `task_id`, `file` (ZIP), optional `message`
    - At most max_upload_bytes + 1 bytes of the upload are read into memory;
      validation runs before anything is stored
    - Download streams the stored archive under its original file name
"""

from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from fastapi.responses import FileResponse

from marketplace.api.dependencies import get_current_actor, get_submission_handlers
from marketplace.models.user import User
from marketplace.schemas.submission import ReviewDecisionBody, SubmissionResponse
from marketplace.services.handle_submissions import SubmissionHandlers

router = APIRouter(prefix="/api/v1/submissions", tags=["submissions"])


@router.post("", response_model=SubmissionResponse, status_code=status.HTTP_201_CREATED)
async def submit_work(
    task_id: UUID = Form(...),
    message: str | None = Form(None),
    file: UploadFile | None = File(None),
    actor: User = Depends(get_current_actor),
    handlers: SubmissionHandlers = Depends(get_submission_handlers),
):
    """Submit (or replace) the deliverable for a task."""
    # one byte past the limit is enough to reject an oversized upload
    data = (
        await file.read(handlers.max_upload_bytes + 1) if file is not None else b""
    )
    return await handlers.submit(
        actor,
        task_id,
        file.filename if file is not None else None,
        file.content_type if file is not None else None,
        data,
        message,
    )


@router.get("", response_model=list[SubmissionResponse])
async def list_submissions(
    actor: User = Depends(get_current_actor),
    handlers: SubmissionHandlers = Depends(get_submission_handlers),
):
    return await handlers.list_submissions(actor)


@router.get("/task/{task_id}", response_model=list[SubmissionResponse])
async def list_task_submissions(
    task_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: SubmissionHandlers = Depends(get_submission_handlers),
):
    return await handlers.list_for_task(actor, task_id)


@router.put("/{submission_id}/review", response_model=SubmissionResponse)
async def review_submission(
    submission_id: UUID,
    body: ReviewDecisionBody,
    actor: User = Depends(get_current_actor),
    handlers: SubmissionHandlers = Depends(get_submission_handlers),
):
    return await handlers.review(actor, submission_id, body.decision)


@router.get("/{submission_id}/download")
async def download_submission(
    submission_id: UUID,
    actor: User = Depends(get_current_actor),
    handlers: SubmissionHandlers = Depends(get_submission_handlers),
):
    path, file_name = await handlers.download(actor, submission_id)
    return FileResponse(path, media_type="application/zip", filename=file_name)
