"""Domain models, request and response payloads, and events."""

from __future__ import annotations

import base64
import dataclasses
import enum
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

_OMIT_EMPTY = {"omitempty": True}
_NOT_SERIALIZED = {"json": False}


class WorkStatus(str, enum.Enum):
    """Lifecycle state of a submitted work."""

    UPLOADED = "uploaded"
    ANALYZING = "analyzing"
    ANALYZED = "analyzed"
    FAILED = "failed"

    def __str__(self) -> str:
        return self.value


def is_valid_work_status(status: str) -> bool:
    """Return True if *status* names one of the known work states."""
    return status in {member.value for member in WorkStatus}


@dataclass
class Assignment:
    id: str
    title: str
    description: str
    created_at: datetime
    updated_at: datetime


@dataclass
class AssignmentWithStats(Assignment):
    total_works: int = 0
    analyzed_works: int = 0
    pending_works: int = 0


@dataclass
class Student:
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: datetime


@dataclass
class StudentWithStats(Student):
    total_works: int = 0
    analyzed_works: int = 0
    pending_works: int = 0


@dataclass
class Work:
    id: str
    student_id: str
    assignment_id: str
    file_id: str
    status: str
    created_at: datetime
    updated_at: datetime


@dataclass
class WorkWithDetails(Work):
    student_name: str = ""
    student_email: str = ""
    assignment_title: str = ""


@dataclass
class CreateWorkRequest:
    student_id: str = ""
    assignment_id: str = ""


@dataclass(kw_only=True)
class CreateWorkResponse:
    id: str
    status: str
    file_id: str = field(default="", metadata=_OMIT_EMPTY)
    created_at: datetime


@dataclass
class UploadWorkRequest:
    student_id: str = ""
    assignment_id: str = ""
    file_content: bytes = field(default=b"", repr=False, metadata=_NOT_SERIALIZED)
    file_name: str = ""


@dataclass
class UpdateWorkStatusRequest:
    status: str = ""


@dataclass
class CreateAssignmentRequest:
    title: str = ""
    description: str = ""


@dataclass
class CreateStudentRequest:
    name: str = ""
    email: str = ""


@dataclass(kw_only=True)
class ReportResponse:
    work_id: str
    student_id: str
    assignment_id: str
    status: str
    plagiarism_flag: bool = False
    original_work_id: Optional[str] = field(default=None, metadata=_OMIT_EMPTY)
    match_percentage: int = 0
    analyzed_at: Optional[datetime] = field(default=None, metadata=_OMIT_EMPTY)
    created_at: datetime


@dataclass
class WorksResponse:
    works: list[WorkWithDetails]
    total: int
    page: int
    limit: int


@dataclass
class WorkCreatedEvent:
    work_id: str
    file_id: str
    student_id: str
    assignment_id: str
    timestamp: int


@dataclass(kw_only=True)
class AnalysisCompletedEvent:
    work_id: str
    status: str
    plagiarism_flag: bool = False
    original_work_id: Optional[str] = field(default=None, metadata=_OMIT_EMPTY)
    match_percentage: int = 0


def to_json_dict(obj: Any) -> Any:
    """Convert models (and containers of them) into JSON-ready values.

    Fields marked as not serialised are dropped; optional fields are
    left out when they are None or empty.
    """
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        result: dict[str, Any] = {}
        for f in dataclasses.fields(obj):
            if f.metadata.get("json") is False:
                continue
            value = getattr(obj, f.name)
            if f.metadata.get("omitempty") and (value is None or value == ""):
                continue
            result[f.name] = to_json_dict(value)
        return result
    if isinstance(obj, enum.Enum):
        return obj.value
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, (bytes, bytearray)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    if isinstance(obj, dict):
        return {str(key): to_json_dict(value) for key, value in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [to_json_dict(item) for item in obj]
    return obj