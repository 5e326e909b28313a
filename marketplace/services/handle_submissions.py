"""Submission Handlers - upload, resubmit, review and download deliverables.

Invariants:
    - Upload validation runs before any blob or row is written
    - A blob saved for a rejected or failed submission is deleted again
    - A replaced blob is deleted only after the new row is committed
    - Accepting the last incomplete task completes the project in the same commit
    - Two accepts racing on one project: the later commit fails with
      CONCURRENT_MODIFICATION (409) and can be retried against fresh state
"""

import logging
from datetime import datetime, timezone
from pathlib import Path
from uuid import UUID

from marketplace.core.authorization import authorize
from marketplace.core.domain_types import Action, EntityType, ProjectStatus
from marketplace.core.errors import ResourceNotFoundError, raise_for_rejection
from marketplace.core.outcomes import Match, Rejection, not_found
from marketplace.core.repository_protocols import BlobStore, EntityStore, UserLike
from marketplace.core.upload_rules import DEFAULT_MAX_UPLOAD_BYTES, validate_archive_upload
from marketplace.core.workflow import StoredFile, review_submission, submit_work
from marketplace.services.apply_plan import commit_plan, require_plan
from marketplace.services.list_visible import list_visible

logger = logging.getLogger(__name__)


class SubmissionHandlers:
    """Deliverable operations; owns the blob lifecycle around each commit."""

    def __init__(
        self,
        store: EntityStore,
        blobs: BlobStore,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ):
        self.store = store
        self.blobs = blobs
        self.max_upload_bytes = max_upload_bytes

    async def _task_and_project(self, task_id: UUID):
        task = await self.store.find(EntityType.TASK, task_id)
        if task is None:
            return None, None
        return task, await self.store.find(EntityType.PROJECT, task.project_id)

    async def submit(
        self,
        actor: UserLike,
        task_id: UUID,
        filename: str | None,
        content_type: str | None,
        data: bytes,
        message: str | None = None,
    ):
        task, project = await self._task_and_project(task_id)
        denied = (
            authorize(actor, Action.SUBMIT_WORK, task, project)
            or validate_archive_upload(
                filename, content_type, len(data), self.max_upload_bytes,
            )
        )
        if denied:
            require_plan(denied, Action.SUBMIT_WORK, actor)

        existing = await self.store.find_many(
            EntityType.SUBMISSION, Match(equals={"task_id": task.id}),
        )
        handle = self.blobs.save(data, filename)
        stored = StoredFile(handle=handle, name=filename, size=len(data))
        result = submit_work(
            actor, task, project, existing[0] if existing else None, stored, message,
        )
        if isinstance(result, Rejection):
            self.blobs.delete(handle)
            require_plan(result, Action.SUBMIT_WORK, actor)

        try:
            touched = await commit_plan(
                self.store, result, Action.SUBMIT_WORK, actor, self.blobs,
            )
        except Exception:
            self.blobs.delete(handle)
            raise
        submission = touched[EntityType.SUBMISSION][0]
        logger.info(
            f"Submission {submission.id} stored ({stored.size} bytes)",
            extra={
                "actor_id": actor.id, "task_id": task.id,
                "submission_id": submission.id,
            },
        )
        return submission

    async def list_submissions(self, actor: UserLike) -> list:
        return await list_visible(self.store, actor, EntityType.SUBMISSION)

    async def list_for_task(self, actor: UserLike, task_id: UUID) -> list:
        task, project = await self._task_and_project(task_id)
        if task is None:
            raise_for_rejection(not_found("Task", task_id))
        denied = authorize(actor, Action.READ_PROJECT_WORK, project)
        if denied:
            raise_for_rejection(denied)
        return await self.store.find_many(
            EntityType.SUBMISSION, Match(equals={"task_id": task.id}),
        )

    async def review(
        self,
        actor: UserLike,
        submission_id: UUID,
        decision: str,
        now: datetime | None = None,
    ):
        submission = await self.store.find(EntityType.SUBMISSION, submission_id)
        task = project = None
        project_tasks = []
        if submission is not None:
            task, project = await self._task_and_project(submission.task_id)
        if project is not None:
            project_tasks = await self.store.find_many(
                EntityType.TASK, Match(equals={"project_id": project.id}),
            )
        plan = require_plan(
            review_submission(
                actor, submission, task, project, project_tasks, decision,
                now or datetime.now(timezone.utc),
            ),
            Action.REVIEW_SUBMISSION, actor,
        )
        touched = await commit_plan(self.store, plan, Action.REVIEW_SUBMISSION, actor)
        updated_project = touched.get(EntityType.PROJECT)
        if updated_project and updated_project[0].status == ProjectStatus.COMPLETED.value:
            logger.info(
                f"Project {project.id} completed",
                extra={"actor_id": actor.id, "project_id": project.id},
            )
        return touched[EntityType.SUBMISSION][0]

    async def download(self, actor: UserLike, submission_id: UUID) -> tuple[Path, str]:
        """Return (path on disk, original file name) of a submission archive."""
        submission = await self.store.find(EntityType.SUBMISSION, submission_id)
        project = None
        if submission is not None:
            project = await self.store.find(EntityType.PROJECT, submission.project_id)
        denied = authorize(actor, Action.DOWNLOAD_SUBMISSION, submission, project)
        if denied:
            raise_for_rejection(denied)
        path = self.blobs.path(submission.file_path)
        if not path.is_file():
            raise ResourceNotFoundError("File", submission.file_name, code="FILE_NOT_FOUND")
        return path, submission.file_name
