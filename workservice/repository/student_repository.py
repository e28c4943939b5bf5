"""Storage of students."""

from __future__ import annotations

from typing import Optional

from sqlalchemy import case, exists, func, select

from ..models import Student, StudentWithStats, WorkStatus
from .sql_repository import SqlRepository, students, works


def _with_stats():
    return (
        select(
            students.c.id,
            students.c.name,
            students.c.email,
            students.c.created_at,
            students.c.updated_at,
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
        .select_from(students.outerjoin(works, students.c.id == works.c.student_id))
        .group_by(students.c.id)
    )


class StudentRepository(SqlRepository):
    """Students together with counts of their works."""

    def create(self, student: Student) -> None:
        with self.begin() as conn:
            conn.execute(
                students.insert().values(
                    id=student.id,
                    name=student.name,
                    email=student.email,
                    created_at=student.created_at,
                    updated_at=student.updated_at,
                )
            )

    def get_by_id(self, student_id: str) -> Optional[StudentWithStats]:
        with self._connect() as conn:
            row = conn.execute(_with_stats().where(students.c.id == student_id)).first()
        return StudentWithStats(**dict(row._mapping)) if row is not None else None

    def get_by_email(self, email: str) -> Optional[Student]:
        with self._connect() as conn:
            row = conn.execute(
                select(
                    students.c.id,
                    students.c.name,
                    students.c.email,
                    students.c.created_at,
                    students.c.updated_at,
                ).where(students.c.email == email)
            ).first()
        return Student(**dict(row._mapping)) if row is not None else None

    def get_all(self, limit: int, offset: int) -> tuple[list[StudentWithStats], int]:
        with self._connect() as conn:
            total = conn.execute(select(func.count()).select_from(students)).scalar_one()
            rows = conn.execute(
                _with_stats()
                .order_by(students.c.created_at.desc())
                .limit(limit)
                .offset(offset)
            ).all()
        return [StudentWithStats(**dict(row._mapping)) for row in rows], total

    def update(self, student: Student) -> None:
        with self.begin() as conn:
            conn.execute(
                students.update()
                .where(students.c.id == student.id)
                .values(
                    name=student.name,
                    email=student.email,
                    updated_at=student.updated_at,
                )
            )

    def delete(self, student_id: str) -> None:
        with self.begin() as conn:
            conn.execute(students.delete().where(students.c.id == student_id))

    def exists(self, student_id: str) -> bool:
        with self._connect() as conn:
            found = conn.execute(
                select(exists().where(students.c.id == student_id))
            ).scalar_one()
        return bool(found)