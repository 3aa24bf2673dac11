"""Application store implementations.

The engine never calls a store itself; the step flow and HTTP adapter load
an answer set, hand it to the engine and persist the sanitised value it
returns. Two stores are provided: an in-memory one for tests and local
development, and a SQLAlchemy-backed one.
"""

from __future__ import annotations

import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping, Protocol

from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy import JSON, Column, DateTime, MetaData, String, Table, insert, select, update
from sqlalchemy.engine import Engine

from grantforms.db.base import get_engine, get_sessionmaker
from grantforms.errors import ApplicationNotFoundError

logger = logging.getLogger(__name__)


class ApplicationStatus:
    PENDING = "PENDING"
    COMPLETE = "COMPLETE"
    SUBMITTED = "SUBMITTED"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class StoredApplication(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    form_id: str
    answers: dict = Field(default_factory=dict)
    status: str = ApplicationStatus.PENDING
    started_at: datetime
    updated_at: datetime


class ApplicationStore(Protocol):
    def create(self, form_id: str) -> StoredApplication:
        ...

    def load(self, application_id: str) -> StoredApplication:
        ...

    def save(self, application_id: str, value: Mapping[str, Any], status: str | None = None) -> None:
        ...

    def set_status(self, application_id: str, status: str) -> None:
        ...


class InMemoryApplicationStore:
    def __init__(self) -> None:
        self._rows: dict[str, StoredApplication] = {}

    def create(self, form_id: str) -> StoredApplication:
        now = _now()
        row = StoredApplication(id=str(uuid.uuid4()), form_id=form_id, started_at=now, updated_at=now)
        self._rows[row.id] = row
        logger.info("application_created application_id=%s form_id=%s", row.id, form_id)
        return row

    def load(self, application_id: str) -> StoredApplication:
        row = self._rows.get(application_id)
        if row is None:
            raise ApplicationNotFoundError(application_id)
        return row

    def save(self, application_id: str, value: Mapping[str, Any], status: str | None = None) -> None:
        row = self.load(application_id)
        update_fields: dict[str, Any] = {"answers": dict(value), "updated_at": _now()}
        if status is not None:
            update_fields["status"] = status
        self._rows[application_id] = row.model_copy(update=update_fields)

    def set_status(self, application_id: str, status: str) -> None:
        row = self.load(application_id)
        self._rows[application_id] = row.model_copy(update={"status": status, "updated_at": _now()})


metadata = MetaData()

applications_table = Table(
    "grant_application",
    metadata,
    Column("application_id", String, primary_key=True),
    Column("form_id", String, nullable=False),
    Column("answers", JSON, nullable=False),
    Column("status", String, nullable=False),
    Column("started_at", DateTime(timezone=True), nullable=False),
    Column("updated_at", DateTime(timezone=True), nullable=False),
)


class SqlApplicationStore:
    """Stores answer sets as JSON documents, one row per application."""

    def __init__(self, engine: Engine | None = None) -> None:
        self.engine = engine or get_engine()
        self._sessions = get_sessionmaker(self.engine)
        metadata.create_all(self.engine)

    def create(self, form_id: str) -> StoredApplication:
        now = _now()
        row = StoredApplication(id=str(uuid.uuid4()), form_id=form_id, started_at=now, updated_at=now)
        with self._sessions.begin() as session:
            session.execute(
                insert(applications_table).values(
                    application_id=row.id,
                    form_id=form_id,
                    answers={},
                    status=row.status,
                    started_at=now,
                    updated_at=now,
                )
            )
        logger.info("application_created application_id=%s form_id=%s", row.id, form_id)
        return row

    def load(self, application_id: str) -> StoredApplication:
        with self._sessions() as session:
            found = session.execute(
                select(applications_table).where(applications_table.c.application_id == application_id)
            ).mappings().first()
        if found is None:
            raise ApplicationNotFoundError(application_id)
        return StoredApplication(
            id=found["application_id"],
            form_id=found["form_id"],
            answers=dict(found["answers"] or {}),
            status=found["status"],
            started_at=found["started_at"],
            updated_at=found["updated_at"],
        )

    def _update(self, application_id: str, **values: Any) -> None:
        with self._sessions.begin() as session:
            result = session.execute(
                update(applications_table)
                .where(applications_table.c.application_id == application_id)
                .values(updated_at=_now(), **values)
            )
            if result.rowcount == 0:
                raise ApplicationNotFoundError(application_id)

    def save(self, application_id: str, value: Mapping[str, Any], status: str | None = None) -> None:
        values: dict[str, Any] = {"answers": dict(value)}
        if status is not None:
            values["status"] = status
        self._update(application_id, **values)

    def set_status(self, application_id: str, status: str) -> None:
        self._update(application_id, status=status)


__all__ = [
    "ApplicationStatus",
    "StoredApplication",
    "ApplicationStore",
    "InMemoryApplicationStore",
    "SqlApplicationStore",
    "applications_table",
]
