"""HTTP routes for works and their reports."""

from __future__ import annotations

import json
import logging
import uuid
from http import HTTPStatus
from typing import Any

from flask import Blueprint, Response, request

from ..models import CreateWorkRequest, UploadWorkRequest
from ..services.report_service import ReportService
from ..services.work_service import WorkService
from .responses import get_int_query_param, handle_service_error, write_error, write_success

_JSON_WHITESPACE = " \t\r\n"


class _BadBody(ValueError):
    """The request body is not a usable JSON object."""


def _read_json_object() -> dict[str, Any]:
    text = request.get_data(as_text=True).lstrip(_JSON_WHITESPACE)
    try:
        value, _ = json.JSONDecoder().raw_decode(text)
    except json.JSONDecodeError as exc:
        raise _BadBody(str(exc)) from exc
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise _BadBody("expected a JSON object")
    return value


def _string_fields(payload: dict[str, Any], *names: str) -> dict[str, str]:
    fields = {}
    for name in names:
        value = payload.get(name)
        if value is None:
            value = ""
        elif not isinstance(value, str):
            raise _BadBody(f"{name} must be a string")
        fields[name] = value
    return fields


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except ValueError:
        return False
    return True


def _check_ids(student_id: str, assignment_id: str) -> Response | None:
    if not student_id or not assignment_id:
        return write_error(HTTPStatus.BAD_REQUEST, "student_id and assignment_id are required")
    if not _is_uuid(student_id):
        return write_error(HTTPStatus.BAD_REQUEST, "Invalid student_id format")
    if not _is_uuid(assignment_id):
        return write_error(HTTPStatus.BAD_REQUEST, "Invalid assignment_id format")
    return None


def create_work_blueprint(
    work_service: WorkService, report_service: ReportService, logger: logging.Logger
) -> Blueprint:
    """Routes under /api/v1/works."""
    bp = Blueprint("works", __name__, url_prefix="/api/v1/works")

    def upload_work() -> Response:
        try:
            files = request.files
            form = request.form
        except Exception:
            # Malformed or oversized multipart bodies surface as HTTP or value errors.
            return write_error(HTTPStatus.BAD_REQUEST, "Failed to parse form data")

        upload = files.get("file")
        if upload is None:
            return write_error(HTTPStatus.BAD_REQUEST, "File is required")
        try:
            content = upload.read()
        except OSError:
            return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Failed to read file")

        student_id = form.get("student_id") or request.args.get("student_id", "")
        assignment_id = form.get("assignment_id") or request.args.get("assignment_id", "")
        invalid = _check_ids(student_id, assignment_id)
        if invalid is not None:
            return invalid

        work_request = UploadWorkRequest(
            student_id=student_id,
            assignment_id=assignment_id,
            file_content=content,
            file_name=upload.filename or "",
        )
        try:
            response = work_service.upload_work(work_request)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(response)

    @bp.route("/", methods=["POST"], strict_slashes=False)
    def create_work() -> Response:
        if request.headers.get("Content-Type", "").startswith("multipart/form-data"):
            return upload_work()
        try:
            fields = _string_fields(_read_json_object(), "student_id", "assignment_id")
        except _BadBody:
            return write_error(HTTPStatus.BAD_REQUEST, "Invalid request body")

        invalid = _check_ids(fields["student_id"], fields["assignment_id"])
        if invalid is not None:
            return invalid
        try:
            response = work_service.create_work(CreateWorkRequest(**fields))
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(response)

    @bp.route("/", methods=["GET"], strict_slashes=False)
    def get_all_works() -> Response:
        page = get_int_query_param(request.args, "page", 1)
        limit = get_int_query_param(request.args, "limit", 20)
        try:
            response = work_service.get_all_works(page, limit)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(response)

    @bp.route("/<work_id>", methods=["GET"])
    def get_work_by_id(work_id: str) -> Response:
        try:
            work = work_service.get_work_by_id(work_id)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(work)

    @bp.route("/<work_id>", methods=["DELETE"])
    def delete_work(work_id: str) -> Response:
        try:
            work_service.delete_work(work_id)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success({"message": "Work deleted successfully"})

    @bp.route("/<work_id>/reports", methods=["GET"])
    def get_work_report(work_id: str) -> Response:
        try:
            report = report_service.get_work_report(work_id)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(report)

    @bp.route("/<work_id>/status", methods=["PUT"])
    def update_work_status(work_id: str) -> Response:
        try:
            status = _string_fields(_read_json_object(), "status")["status"]
        except _BadBody:
            return write_error(HTTPStatus.BAD_REQUEST, "Invalid request body")
        if not status:
            return write_error(HTTPStatus.BAD_REQUEST, "status is required")
        try:
            work_service.update_work_status(work_id, status)
        except Exception as exc:
            return handle_service_error(exc, logger)
        return write_success(
            {"message": "Work status updated successfully", "id": work_id, "status": status}
        )

    return bp