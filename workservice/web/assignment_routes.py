"""HTTP routes for assignments."""

from __future__ import annotations

import logging
from http import HTTPStatus

from flask import Blueprint, Response, request

from ..models import CreateAssignmentRequest
from ..services.assignment_service import AssignmentService
from ..services.errors import ConflictError, NotFoundError
from ..services.work_service import WorkService
from .responses import get_int_query_param, handle_service_error, write_error, write_success
from .work_routes import _BadBody, _read_json_object, _string_fields


def _handle_assignment_error(error: Exception, logger: logging.Logger) -> Response:
    if isinstance(error, NotFoundError):
        return write_error(HTTPStatus.NOT_FOUND, str(error))
    if isinstance(error, ConflictError):
        return write_error(HTTPStatus.CONFLICT, str(error))
    logger.error("Assignment service error", extra={"fields": {"error": str(error)}})
    return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")


def _read_assignment_request() -> CreateAssignmentRequest:
    return CreateAssignmentRequest(**_string_fields(_read_json_object(), "title", "description"))


def create_assignment_blueprint(
    assignment_service: AssignmentService, work_service: WorkService, logger: logging.Logger
) -> Blueprint:
    """Routes under /api/v1/assignments."""
    bp = Blueprint("assignments", __name__, url_prefix="/api/v1/assignments")

    @bp.route("/", methods=["POST"], strict_slashes=False)
    def create_assignment() -> Response:
        try:
            body = _read_assignment_request()
        except _BadBody:
            return write_error(HTTPStatus.BAD_REQUEST, "Invalid request body")
        if not body.title:
            return write_error(HTTPStatus.BAD_REQUEST, "title is required")
        try:
            assignment = assignment_service.create_assignment(body)
        except Exception as exc:
            logger.error("Failed to create assignment", extra={"fields": {"error": str(exc)}})
            return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to create assignment")
        return write_success(assignment)

    @bp.route("/", methods=["GET"], strict_slashes=False)
    def get_all_assignments() -> Response:
        page = get_int_query_param(request.args, "page", 1)
        limit = get_int_query_param(request.args, "limit", 20)
        try:
            items, total = assignment_service.get_all_assignments(page, limit)
        except Exception as exc:
            logger.error("Failed to get assignments", extra={"fields": {"error": str(exc)}})
            return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to get assignments")
        return write_success(
            {"assignments": items, "total": total, "page": page, "limit": limit}
        )

    @bp.route("/<assignment_id>", methods=["GET"])
    def get_assignment_by_id(assignment_id: str) -> Response:
        try:
            assignment = assignment_service.get_assignment_by_id(assignment_id)
        except Exception as exc:
            return _handle_assignment_error(exc, logger)
        return write_success(assignment)

    @bp.route("/<assignment_id>", methods=["PUT"])
    def update_assignment(assignment_id: str) -> Response:
        try:
            body = _read_assignment_request()
        except _BadBody:
            return write_error(HTTPStatus.BAD_REQUEST, "Invalid request body")
        if not body.title:
            return write_error(HTTPStatus.BAD_REQUEST, "title is required")
        try:
            assignment_service.update_assignment(assignment_id, body)
        except Exception as exc:
            return _handle_assignment_error(exc, logger)
        return write_success({"message": "Assignment updated successfully"})

    @bp.route("/<assignment_id>", methods=["DELETE"])
    def delete_assignment(assignment_id: str) -> Response:
        try:
            assignment_service.delete_assignment(assignment_id)
        except Exception as exc:
            return _handle_assignment_error(exc, logger)
        return write_success({"message": "Assignment deleted successfully"})

    @bp.route("/<assignment_id>/works", methods=["GET"])
    def get_works_by_assignment(assignment_id: str) -> Response:
        page = get_int_query_param(request.args, "page", 1)
        limit = get_int_query_param(request.args, "limit", 20)
        try:
            response = work_service.get_works_by_assignment(assignment_id, page, limit)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(response)

    return bp