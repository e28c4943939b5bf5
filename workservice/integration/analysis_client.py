"""HTTP client for fetching plagiarism reports from the analysis service."""

from __future__ import annotations

import logging
import re
import time
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional

import requests

_FRACTION = re.compile(r"\.(\d+)")


class AnalysisClientError(Exception):
    """Raised when a report cannot be obtained from the analysis service."""


def _parse_time(value: str) -> datetime:
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    text = _FRACTION.sub(lambda m: "." + m.group(1)[:6].ljust(6, "0"), text, count=1)
    return datetime.fromisoformat(text)


def _typed(data: dict, key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if not isinstance(value, kind) or (kind is int and isinstance(value, bool)):
        raise ValueError(f"field {key!r} has the wrong type")
    return value


@dataclass
class AnalysisReport:
    work_id: str = ""
    status: str = ""
    plagiarism_flag: bool = False
    original_work_id: Optional[str] = None
    match_percentage: int = 0
    analyzed_at: Optional[datetime] = None

    @classmethod
    def from_json(cls, data: Any) -> Optional["AnalysisReport"]:
        """Build a report from decoded JSON; a JSON null gives None."""
        if data is None:
            return None
        if not isinstance(data, dict):
            raise ValueError("report must be a JSON object")
        analyzed_at = _typed(data, "analyzed_at", str, None)
        return cls(
            work_id=_typed(data, "work_id", str, ""),
            status=_typed(data, "status", str, ""),
            plagiarism_flag=_typed(data, "plagiarism_flag", bool, False),
            original_work_id=_typed(data, "original_work_id", str, None),
            match_percentage=_typed(data, "match_percentage", int, 0),
            analyzed_at=_parse_time(analyzed_at) if analyzed_at is not None else None,
        )


class AnalysisClient:
    """Fetches reports with a bounded number of retries and linear back-off."""

    def __init__(
        self,
        base_url: str,
        reports_endpoint: str,
        timeout: float,
        retry_count: int,
        retry_delay: float,
        logger: logging.Logger,
    ) -> None:
        self._base_url = base_url
        self._reports_endpoint = reports_endpoint
        self._timeout = timeout if timeout and timeout > 0 else None
        self._retry_count = retry_count
        self._retry_delay = retry_delay
        self._logger = logger
        self._session = requests.Session()

    def get_report(self, work_id: str) -> Optional[AnalysisReport]:
        """Return the report for *work_id*, or None if it is not ready yet."""
        url = f"{self._base_url}{self._reports_endpoint}/{work_id}"
        attempts = self._retry_count + 1
        last_error: Optional[AnalysisClientError] = None

        for attempt in range(attempts):
            if attempt:
                self._logger.warning(
                    "Retrying analysis report fetch", extra={"fields": {"attempt": attempt}}
                )
                time.sleep(self._retry_delay * attempt)

            try:
                response = self._session.get(url, timeout=self._timeout)
            except requests.RequestException as exc:
                last_error = AnalysisClientError(f"failed to get report: {exc}")
                continue

            with response:
                if response.status_code == 200:
                    try:
                        return AnalysisReport.from_json(response.json())
                    except (ValueError, TypeError) as exc:
                        last_error = AnalysisClientError(f"failed to decode response: {exc}")
                        continue
                if response.status_code == 404:
                    return None
                last_error = AnalysisClientError(
                    f"analysis service returned status {response.status_code}: {response.text}"
                )

        raise AnalysisClientError(
            f"failed to get analysis report after {attempts} attempts: {last_error}"
        ) from last_error