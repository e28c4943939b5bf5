"""Business rules for submitted works."""

from __future__ import annotations

import logging
import time
import uuid
from contextlib import suppress
from datetime import datetime, timezone
from typing import Optional

from ..integration.file_client import FileClient
from ..integration.rabbitmq_client import RabbitMQClient
from ..models import (
    CreateWorkRequest,
    CreateWorkResponse,
    UploadWorkRequest,
    Work,
    WorkCreatedEvent,
    WorksResponse,
    WorkStatus,
    WorkWithDetails,
    is_valid_work_status,
)
from ..repository.assignment_repository import AssignmentRepository
from ..repository.student_repository import StudentRepository
from ..repository.work_repository import WorkRepository
from .errors import ConflictError, InvalidStatusError, NotFoundError, ServiceError

_PENDING_FILE_ID = "pending"
_DEFAULT_LIMIT = 20
_MAX_LIMIT = 100


def _paging(page: int, limit: int) -> tuple[int, int, int]:
    page = max(page, 1)
    if limit < 1 or limit > _MAX_LIMIT:
        limit = _DEFAULT_LIMIT
    return page, limit, (page - 1) * limit


class WorkService:
    """Registers works, uploads their files and starts their analysis."""

    def __init__(
        self,
        work_repo: WorkRepository,
        student_repo: StudentRepository,
        assignment_repo: AssignmentRepository,
        file_client: FileClient,
        rabbitmq_client: Optional[RabbitMQClient],
        logger: logging.Logger,
    ) -> None:
        self._work_repo = work_repo
        self._student_repo = student_repo
        self._assignment_repo = assignment_repo
        self._file_client = file_client
        self._rabbitmq_client = rabbitmq_client
        self._logger = logger

    def create_work(self, request: CreateWorkRequest) -> CreateWorkResponse:
        """Record a work for a student and assignment; one per pair."""
        try:
            student_exists = self._student_repo.exists(request.student_id)
        except Exception as exc:
            raise ServiceError(f"failed to check student existence: {exc}") from exc
        if not student_exists:
            raise NotFoundError("student not found")

        try:
            assignment_exists = self._assignment_repo.exists(request.assignment_id)
        except Exception as exc:
            raise ServiceError(f"failed to check assignment existence: {exc}") from exc
        if not assignment_exists:
            raise NotFoundError("assignment not found")

        try:
            existing = self._work_repo.get_by_student_and_assignment(
                request.student_id, request.assignment_id
            )
        except Exception as exc:
            raise ServiceError(f"failed to check existing work: {exc}") from exc
        if existing is not None:
            raise ConflictError("work already submitted for this assignment")

        now = datetime.now(timezone.utc)
        work = Work(
            id=str(uuid.uuid4()),
            student_id=request.student_id,
            assignment_id=request.assignment_id,
            file_id=_PENDING_FILE_ID,
            status=WorkStatus.UPLOADED.value,
            created_at=now,
            updated_at=now,
        )
        try:
            self._work_repo.create(work)
        except Exception as exc:
            raise ServiceError(f"failed to create work: {exc}") from exc

        self._logger.info(
            "Work created",
            extra={
                "fields": {
                    "work_id": work.id,
                    "student_id": request.student_id,
                    "assignment_id": request.assignment_id,
                }
            },
        )
        return CreateWorkResponse(id=work.id, status=work.status, created_at=work.created_at)

    def upload_work(self, request: UploadWorkRequest) -> CreateWorkResponse:
        """Create the work, store its file and announce it for analysis."""
        response = self.create_work(
            CreateWorkRequest(student_id=request.student_id, assignment_id=request.assignment_id)
        )

        try:
            upload = self._file_client.upload_file(request.file_content, request.file_name)
        except Exception as exc:
            self._discard_work(response.id)
            raise ServiceError(f"failed to upload file: {exc}") from exc
        if upload is None or not upload.file_id:
            self._discard_work(response.id)
            raise ServiceError("file service returned empty file_id")

        try:
            self._work_repo.update_file_id(response.id, upload.file_id)
        except Exception as exc:
            self._discard_work(response.id)
            with suppress(Exception):
                self._file_client.delete_file(upload.file_id)
            raise ServiceError(f"failed to update work with file id: {exc}") from exc

        event = WorkCreatedEvent(
            work_id=response.id,
            file_id=upload.file_id,
            student_id=request.student_id,
            assignment_id=request.assignment_id,
            timestamp=int(time.time()),
        )
        self._publish(event)

        try:
            self._work_repo.update_status(response.id, WorkStatus.ANALYZING.value)
        except Exception as exc:
            self._logger.error(
                "Failed to update work status to analyzing",
                extra={"fields": {"error": str(exc)}},
            )

        self._logger.info(
            "Work uploaded and analysis started",
            extra={"fields": {"work_id": response.id, "file_id": upload.file_id}},
        )
        response.file_id = upload.file_id
        return response

    def get_work_by_id(self, work_id: str) -> WorkWithDetails:
        try:
            work = self._work_repo.get_by_id(work_id)
        except Exception as exc:
            raise ServiceError(f"failed to get work: {exc}") from exc
        if work is None:
            raise NotFoundError("work not found")

        try:
            details, _ = self._work_repo.get_all(1, 0)
        except Exception as exc:
            raise ServiceError(f"failed to get work details: {exc}") from exc

        found = next((item for item in details if item.id == work_id), None)
        if found is None:
            raise ServiceError("work details not found")
        return found

    def get_works_by_assignment(self, assignment_id: str, page: int, limit: int) -> WorksResponse:
        page, limit, offset = _paging(page, limit)
        try:
            items, total = self._work_repo.get_by_assignment_id(assignment_id, limit, offset)
        except Exception as exc:
            raise ServiceError(f"failed to get works by assignment: {exc}") from exc
        return WorksResponse(works=items, total=total, page=page, limit=limit)

    def get_works_by_student(self, student_id: str, page: int, limit: int) -> WorksResponse:
        page, limit, offset = _paging(page, limit)
        try:
            items, total = self._work_repo.get_by_student_id(student_id, limit, offset)
        except Exception as exc:
            raise ServiceError(f"failed to get works by student: {exc}") from exc
        return WorksResponse(works=items, total=total, page=page, limit=limit)

    def get_all_works(self, page: int, limit: int) -> WorksResponse:
        page, limit, offset = _paging(page, limit)
        try:
            items, total = self._work_repo.get_all(limit, offset)
        except Exception as exc:
            raise ServiceError(f"failed to get all works: {exc}") from exc
        return WorksResponse(works=items, total=total, page=page, limit=limit)

    def update_work_status(self, work_id: str, status: str) -> None:
        if not is_valid_work_status(status):
            raise InvalidStatusError("invalid work status")
        self._work_repo.update_status(work_id, status)

    def delete_work(self, work_id: str) -> None:
        """Delete the work and, if one was stored, its file."""
        try:
            work = self._work_repo.get_by_id(work_id)
        except Exception as exc:
            raise ServiceError(f"failed to get work: {exc}") from exc
        if work is None:
            raise NotFoundError("work not found")

        if work.file_id and work.file_id != _PENDING_FILE_ID:
            try:
                self._file_client.delete_file(work.file_id)
            except Exception as exc:
                self._logger.error(
                    "Failed to delete file",
                    extra={"fields": {"error": str(exc), "file_id": work.file_id}},
                )

        self._work_repo.delete(work_id)

    def get_previous_works(self, assignment_id: str, exclude_work_id: str) -> list[Work]:
        return self._work_repo.get_previous_works(assignment_id, exclude_work_id)

    def _discard_work(self, work_id: str) -> None:
        with suppress(Exception):
            self._work_repo.delete(work_id)

    def _publish(self, event: WorkCreatedEvent) -> None:
        try:
            if self._rabbitmq_client is None:
                raise ServiceError("message broker is not available")
            self._rabbitmq_client.publish_work_created(event)
        except Exception as exc:
            self._logger.error(
                "Failed to publish work created event",
                extra={"fields": {"error": str(exc)}},
            )