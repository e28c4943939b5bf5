"""Assembly of plagiarism reports for works."""

from __future__ import annotations

import logging

from ..integration.analysis_client import AnalysisClient, AnalysisClientError
from ..models import ReportResponse
from ..repository.assignment_repository import AssignmentRepository
from ..repository.student_repository import StudentRepository
from ..repository.work_repository import WorkRepository
from .errors import NotFoundError, ServiceError


class ReportService:
    """Combines stored work data with the analysis service's verdict."""

    def __init__(
        self,
        work_repo: WorkRepository,
        student_repo: StudentRepository,
        assignment_repo: AssignmentRepository,
        analysis_client: AnalysisClient,
        logger: logging.Logger,
    ) -> None:
        self._work_repo = work_repo
        self._student_repo = student_repo
        self._assignment_repo = assignment_repo
        self._analysis_client = analysis_client
        self._logger = logger

    def get_work_report(self, work_id: str) -> ReportResponse:
        """Return the report; without analysis data only the work's own fields are set."""
        try:
            work = self._work_repo.get_by_id(work_id)
        except Exception as exc:
            raise ServiceError(f"failed to get work: {exc}") from exc
        if work is None:
            raise NotFoundError("work not found")

        report = ReportResponse(
            work_id=work.id,
            student_id=work.student_id,
            assignment_id=work.assignment_id,
            status=work.status,
            created_at=work.created_at,
        )

        try:
            analysis = self._analysis_client.get_report(work_id)
        except AnalysisClientError as exc:
            self._logger.error(
                "Failed to get analysis report",
                extra={"fields": {"error": str(exc), "work_id": work_id}},
            )
            return report

        if analysis is not None:
            report.plagiarism_flag = analysis.plagiarism_flag
            report.original_work_id = analysis.original_work_id
            report.match_percentage = analysis.match_percentage
            report.analyzed_at = analysis.analyzed_at
        return report