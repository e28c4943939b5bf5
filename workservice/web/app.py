"""Flask application wiring the HTTP routes together."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from http import HTTPStatus

from flask import Flask, Response

from ..services.assignment_service import AssignmentService
from ..services.report_service import ReportService
from ..services.student_service import StudentService
from ..services.work_service import WorkService
from .assignment_routes import create_assignment_blueprint
from .responses import write_json
from .student_routes import create_student_blueprint
from .work_routes import create_work_blueprint


def create_app(
    work_service: WorkService,
    assignment_service: AssignmentService,
    student_service: StudentService,
    report_service: ReportService,
    logger: logging.Logger,
) -> Flask:
    """Build the application with the health check and all API routes."""
    app = Flask(__name__)

    @app.route("/health", methods=["GET"])
    def health_check() -> Response:
        return write_json(
            HTTPStatus.OK,
            {
                "status": "healthy",
                "service": "work-service",
                "timestamp": datetime.now(timezone.utc),
            },
        )

    app.register_blueprint(create_work_blueprint(work_service, report_service, logger))
    app.register_blueprint(
        create_assignment_blueprint(assignment_service, work_service, logger)
    )
    app.register_blueprint(create_student_blueprint(student_service, work_service, logger))
    return app