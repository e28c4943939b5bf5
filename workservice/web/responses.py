"""JSON response helpers shared by the HTTP handlers."""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from flask import Response

from ..models import to_json_dict
from ..services.errors import ConflictError, InvalidStatusError, NotFoundError

_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


def _status_text(status: int) -> str:
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return ""


def write_json(status: int, data: Any) -> Response:
    """JSON response with *status*; a None body is sent empty."""
    body = "" if data is None else json.dumps(to_json_dict(data), ensure_ascii=False) + "\n"
    return Response(body, status=status, mimetype="application/json")


def write_error(status: int, message: str) -> Response:
    return write_json(status, {"error": _status_text(status), "message": message})


def write_success(data: Any) -> Response:
    return write_json(HTTPStatus.OK, {"success": True, "data": data})


def get_int_query_param(args: Mapping, key: str, default: int) -> int:
    """Integer value of a query parameter, or *default* if absent or malformed."""
    value = args.get(key) or ""
    if not _INTEGER.fullmatch(value):
        return default
    number = int(value)
    if not _INT64_MIN <= number <= _INT64_MAX:
        return default
    return number


def handle_service_error(error: Exception, logger: logging.Logger) -> Response:
    """Map a service failure onto an HTTP error response."""
    if isinstance(error, NotFoundError):
        return write_error(HTTPStatus.NOT_FOUND, str(error))
    if isinstance(error, ConflictError):
        return write_error(HTTPStatus.CONFLICT, str(error))
    if isinstance(error, InvalidStatusError):
        return write_error(HTTPStatus.BAD_REQUEST, str(error))
    logger.error("Service error", extra={"fields": {"error": str(error)}})
    return write_error(HTTPStatus.INTERNAL_SERVER_ERROR, "Internal server error")