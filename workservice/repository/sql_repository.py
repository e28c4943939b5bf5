"""Table definitions and the shared base for SQL repositories."""

from __future__ import annotations

import logging

from sqlalchemy import Column, DateTime, ForeignKey, MetaData, String, Table, Text, text
from sqlalchemy.engine import Connection, Engine

METADATA = MetaData()

assignments = Table(
    "assignments",
    METADATA,
    Column("id", String(36), primary_key=True),
    Column("title", String(255), nullable=False),
    Column("description", Text, nullable=False, default=""),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

students = Table(
    "students",
    METADATA,
    Column("id", String(36), primary_key=True),
    Column("name", String(255), nullable=False),
    Column("email", String(255), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)

works = Table(
    "works",
    METADATA,
    Column("id", String(36), primary_key=True),
    Column("student_id", String(36), ForeignKey("students.id"), nullable=False),
    Column("assignment_id", String(36), ForeignKey("assignments.id"), nullable=False),
    Column("file_id", String(255), nullable=False),
    Column("status", String(20), nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


class SqlRepository:
    """Holds the engine and logger shared by the concrete repositories."""

    def __init__(self, engine: Engine, logger: logging.Logger) -> None:
        self._engine = engine
        self._logger = logger
        self._closed = False

    def begin(self):
        """Context manager yielding a connection inside a transaction."""
        self._ensure_open()
        return self._engine.begin()

    def ping(self) -> None:
        """Check that the database answers; raises on failure."""
        with self._connect() as conn:
            conn.execute(text("SELECT 1"))

    def close(self) -> None:
        """Release pooled connections; later use raises RuntimeError."""
        self._closed = True
        self._engine.dispose()

    def _ensure_open(self) -> None:
        if self._closed:
            raise RuntimeError("database is closed")

    def _connect(self) -> Connection:
        self._ensure_open()
        return self._engine.connect()