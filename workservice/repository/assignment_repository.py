"""Storage of assignments."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import case, exists, func, select

from ..models import Assignment, AssignmentWithStats, WorkStatus
from .sql_repository import SqlRepository, assignments, works


def _with_stats():
    return (
        select(
            assignments.c.id,
            assignments.c.title,
            assignments.c.description,
            assignments.c.created_at,
            assignments.c.updated_at,
            func.count(works.c.id).label("total_works"),
            func.count(case((works.c.status == WorkStatus.ANALYZED.value, 1))).label(
                "analyzed_works"
            ),
            func.count(
                case(
                    (
                        works.c.status.in_(
                            (WorkStatus.UPLOADED.value, WorkStatus.ANALYZING.value)
                        ),
                        1,
                    )
                )
            ).label("pending_works"),
        )
        .select_from(assignments.outerjoin(works, assignments.c.id == works.c.assignment_id))
        .group_by(assignments.c.id)
    )


class AssignmentRepository(SqlRepository):
    """Assignments together with counts of their works."""

    def create(self, assignment: Assignment) -> None:
        with self.begin() as conn:
            conn.execute(
                assignments.insert().values(
                    id=assignment.id,
                    title=assignment.title,
                    description=assignment.description,
                    created_at=assignment.created_at,
                    updated_at=assignment.updated_at,
                )
            )

    def get_by_id(self, assignment_id: str) -> Optional[AssignmentWithStats]:
        with self._connect() as conn:
            row = conn.execute(
                _with_stats().where(assignments.c.id == assignment_id)
            ).first()
        return AssignmentWithStats(**dict(row._mapping)) if row is not None else None

    def get_all(self, limit: int, offset: int) -> tuple[list[AssignmentWithStats], int]:
        with self._connect() as conn:
            total = conn.execute(
                select(func.count()).select_from(assignments)
            ).scalar_one()
            rows = conn.execute(
                _with_stats()
                .order_by(assignments.c.created_at.desc())
                .limit(limit)
                .offset(offset)
            ).all()
        return [AssignmentWithStats(**dict(row._mapping)) for row in rows], total

    def update(self, assignment: Assignment) -> None:
        with self.begin() as conn:
            conn.execute(
                assignments.update()
                .where(assignments.c.id == assignment.id)
                .values(
                    title=assignment.title,
                    description=assignment.description,
                    updated_at=assignment.updated_at,
                )
            )

    def delete(self, assignment_id: str) -> None:
        with self.begin() as conn:
            conn.execute(assignments.delete().where(assignments.c.id == assignment_id))

    def exists(self, assignment_id: str) -> bool:
        with self._connect() as conn:
            found = conn.execute(
                select(exists().where(assignments.c.id == assignment_id))
            ).scalar_one()
        return bool(found)