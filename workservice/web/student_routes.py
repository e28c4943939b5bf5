"""HTTP routes for students."""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Optional

from flask import Blueprint, Response, request

from ..models import CreateStudentRequest
from ..services.errors import ConflictError, NotFoundError
from ..services.student_service import StudentService
from ..services.work_service import WorkService
from .responses import get_int_query_param, handle_service_error, write_error, write_success
from .work_routes import _BadBody, _read_json_object, _string_fields


def _handle_student_error(error: Exception, logger: logging.Logger) -> Response:
    if isinstance(error, NotFoundError):
        return write_error(HTTPStatus.NOT_FOUND, str(error))
    if isinstance(error, ConflictError):
        return write_error(HTTPStatus.CONFLICT, str(error))
    logger.error("Student service error", extra={"fields": {"error": str(error)}})
    return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")


def _read_student_request() -> CreateStudentRequest:
    return CreateStudentRequest(**_string_fields(_read_json_object(), "name", "email"))


def _validate(body: CreateStudentRequest) -> Optional[Response]:
    if not body.name:
        return write_error(HTTPStatus.BAD_REQUEST, "name is required")
    if not body.email:
        return write_error(HTTPStatus.BAD_REQUEST, "email is required")
    return None


def create_student_blueprint(
    student_service: StudentService, work_service: WorkService, logger: logging.Logger
) -> Blueprint:
    """Routes under /api/v1/students."""
    bp = Blueprint("students", __name__, url_prefix="/api/v1/students")

    @bp.route("/", methods=["POST"], strict_slashes=False)
    def create_student() -> Response:
        try:
            body = _read_student_request()
        except _BadBody:
            return write_error(HTTPStatus.BAD_REQUEST, "Invalid request body")
        invalid = _validate(body)
        if invalid is not None:
            return invalid
        try:
            student = student_service.create_student(body)
        except Exception as exc:
            return _handle_student_error(exc, logger)
        return write_success(student)

    @bp.route("/", methods=["GET"], strict_slashes=False)
    def get_all_students() -> Response:
        page = get_int_query_param(request.args, "page", 1)
        limit = get_int_query_param(request.args, "limit", 20)
        try:
            items, total = student_service.get_all_students(page, limit)
        except Exception as exc:
            logger.error("Failed to get students", extra={"fields": {"error": str(exc)}})
            return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to get students")
        return write_success({"students": items, "total": total, "page": page, "limit": limit})

    @bp.route("/email/<email>", methods=["GET"])
    def get_student_by_email(email: str) -> Response:
        try:
            student = student_service.get_student_by_email(email)
        except Exception as exc:
            return _handle_student_error(exc, logger)
        return write_success(student)

    @bp.route("/<student_id>", methods=["GET"])
    def get_student_by_id(student_id: str) -> Response:
        try:
            student = student_service.get_student_by_id(student_id)
        except Exception as exc:
            return _handle_student_error(exc, logger)
        return write_success(student)

    @bp.route("/<student_id>", methods=["PUT"])
    def update_student(student_id: str) -> Response:
        try:
            body = _read_student_request()
        except _BadBody:
            return write_error(HTTPStatus.BAD_REQUEST, "Invalid request body")
        invalid = _validate(body)
        if invalid is not None:
            return invalid
        try:
            student_service.update_student(student_id, body)
        except Exception as exc:
            return _handle_student_error(exc, logger)
        return write_success({"message": "Student updated successfully"})

    @bp.route("/<student_id>", methods=["DELETE"])
    def delete_student(student_id: str) -> Response:
        try:
            student_service.delete_student(student_id)
        except Exception as exc:
            return _handle_student_error(exc, logger)
        return write_success({"message": "Student deleted successfully"})

    @bp.route("/<student_id>/works", methods=["GET"])
    def get_works_by_student(student_id: str) -> Response:
        page = get_int_query_param(request.args, "page", 1)
        limit = get_int_query_param(request.args, "limit", 20)
        try:
            response = work_service.get_works_by_student(student_id, page, limit)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(response)

    return bp