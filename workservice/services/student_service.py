"""Business rules for students."""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone

from ..models import CreateStudentRequest, Student, StudentWithStats
from ..repository.student_repository import StudentRepository
from .errors import ConflictError, NotFoundError, ServiceError

_DEFAULT_LIMIT = 20
_MAX_LIMIT = 100


def _paging(page: int, limit: int) -> tuple[int, int]:
    page = max(page, 1)
    if limit < 1 or limit > _MAX_LIMIT:
        limit = _DEFAULT_LIMIT
    return limit, (page - 1) * limit


class StudentService:
    """Creates, reads, updates and deletes students; e-mails stay unique."""

    def __init__(self, student_repo: StudentRepository, logger: logging.Logger) -> None:
        self._repo = student_repo
        self._logger = logger

    def create_student(self, request: CreateStudentRequest) -> Student:
        try:
            existing = self._repo.get_by_email(request.email)
        except Exception as exc:
            raise ServiceError(f"failed to check existing student: {exc}") from exc
        if existing is not None:
            raise ConflictError("student with this email already exists")

        now = datetime.now(timezone.utc)
        student = Student(
            id=str(uuid.uuid4()),
            name=request.name,
            email=request.email,
            created_at=now,
            updated_at=now,
        )
        try:
            self._repo.create(student)
        except Exception as exc:
            raise ServiceError(f"failed to create student: {exc}") from exc

        self._logger.info(
            "Student created",
            extra={"fields": {"student_id": student.id, "email": student.email}},
        )
        return student

    def get_student_by_id(self, student_id: str) -> StudentWithStats:
        try:
            student = self._repo.get_by_id(student_id)
        except Exception as exc:
            raise ServiceError(f"failed to get student: {exc}") from exc
        if student is None:
            raise NotFoundError("student not found")
        return student

    def get_student_by_email(self, email: str) -> Student:
        try:
            student = self._repo.get_by_email(email)
        except Exception as exc:
            raise ServiceError(f"failed to get student by email: {exc}") from exc
        if student is None:
            raise NotFoundError("student not found")
        return student

    def get_all_students(self, page: int, limit: int) -> tuple[list[StudentWithStats], int]:
        """Return one page of students and the total count."""
        limit, offset = _paging(page, limit)
        try:
            return self._repo.get_all(limit, offset)
        except Exception as exc:
            raise ServiceError(f"failed to get all students: {exc}") from exc

    def update_student(self, student_id: str, request: CreateStudentRequest) -> None:
        student = self.get_student_by_id(student_id)

        if request.email != student.email:
            try:
                existing = self._repo.get_by_email(request.email)
            except Exception as exc:
                raise ServiceError(f"failed to check email availability: {exc}") from exc
            if existing is not None:
                raise ConflictError("email already in use by another student")

        student.name = request.name
        student.email = request.email
        student.updated_at = datetime.now(timezone.utc)
        self._repo.update(student)

    def delete_student(self, student_id: str) -> None:
        student = self.get_student_by_id(student_id)
        if student.total_works > 0:
            raise ConflictError("cannot delete student with existing works")
        self._repo.delete(student_id)