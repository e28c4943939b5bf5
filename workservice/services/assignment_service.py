"""Business rules for assignments."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from ..models import Assignment, AssignmentWithStats, CreateAssignmentRequest
from ..repository.assignment_repository import AssignmentRepository
from .errors import ConflictError, NotFoundError, ServiceError

_DEFAULT_LIMIT = 20
_MAX_LIMIT = 100


def _paging(page: int, limit: int) -> tuple[int, int]:
    page = max(page, 1)
    if limit < 1 or limit > _MAX_LIMIT:
        limit = _DEFAULT_LIMIT
    return limit, (page - 1) * limit


class AssignmentService:
    """Creates, reads, updates and deletes assignments."""

    def __init__(self, assignment_repo: AssignmentRepository, logger: logging.Logger) -> None:
        self._repo = assignment_repo
        self._logger = logger

    def create_assignment(self, request: CreateAssignmentRequest) -> Assignment:
        now = datetime.now(timezone.utc)
        assignment = Assignment(
            id=str(uuid.uuid4()),
            title=request.title,
            description=request.description,
            created_at=now,
            updated_at=now,
        )
        try:
            self._repo.create(assignment)
        except Exception as exc:
            raise ServiceError(f"failed to create assignment: {exc}") from exc

        self._logger.info(
            "Assignment created",
            extra={"fields": {"assignment_id": assignment.id, "title": assignment.title}},
        )
        return assignment

    def get_assignment_by_id(self, assignment_id: str) -> AssignmentWithStats:
        try:
            assignment = self._repo.get_by_id(assignment_id)
        except Exception as exc:
            raise ServiceError(f"failed to get assignment: {exc}") from exc
        if assignment is None:
            raise NotFoundError("assignment not found")
        return assignment

    def get_all_assignments(
        self, page: int, limit: int
    ) -> tuple[list[AssignmentWithStats], int]:
        """Return one page of assignments and the total count."""
        limit, offset = _paging(page, limit)
        try:
            return self._repo.get_all(limit, offset)
        except Exception as exc:
            raise ServiceError(f"failed to get all assignments: {exc}") from exc

    def update_assignment(self, assignment_id: str, request: CreateAssignmentRequest) -> None:
        assignment = self.get_assignment_by_id(assignment_id)
        assignment.title = request.title
        assignment.description = request.description
        assignment.updated_at = datetime.now(timezone.utc)
        self._repo.update(assignment)

    def delete_assignment(self, assignment_id: str) -> None:
        assignment = self.get_assignment_by_id(assignment_id)
        if assignment.total_works > 0:
            raise ConflictError("cannot delete assignment with existing works")
        self._repo.delete(assignment_id)