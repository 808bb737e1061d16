"""Generic CRUD/query adapter over the relational tables.

Services never build SQL themselves: they address tables by name and work
with plain row dicts, the way the hosted backend used to be addressed.
Every mutation is committed on its own; a failed call rolls the session back
and surfaces as `StoreError`.
"""
# db/store.py
import enum
import logging
from typing import Any, Iterable

from sqlalchemy import delete as sa_delete, func, inspect, select, update as sa_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from rsvp.app.core.errors import NotFoundError, StoreError
from rsvp.app.core.logging import get_logs_writer_logger
from rsvp.db.models import Event, EventAnswer, EventQuestion, EventResponse, User

logger = logging.getLogger(__name__)
audit = get_logs_writer_logger()

TABLES = {
    "events": Event,
    "event_questions": EventQuestion,
    "event_responses": EventResponse,
    "event_answers": EventAnswer,
    "users": User,
}


def _plain(value: Any) -> Any:
    return value.value if isinstance(value, enum.Enum) else value


def row_to_dict(obj) -> dict:
    return {attr.key: _plain(getattr(obj, attr.key)) for attr in inspect(obj).mapper.column_attrs}


def _as_list(ids: str | Iterable[str]) -> list[str]:
    if isinstance(ids, str):
        return [ids]
    return list(ids)


class Store:
    """CRUD and filtered queries against the `events`, `event_questions`,
    `event_responses`, `event_answers` and `users` tables."""

    def __init__(self, session: Session):
        self.session = session

    def _model(self, table: str):
        try:
            return TABLES[table]
        except KeyError:
            raise ValueError(f"Unknown table: {table}") from None

    def _where(self, model, filters: dict[str, Any] | None):
        clauses = []
        for column, value in (filters or {}).items():
            attr = getattr(model, column)
            if value is None:
                clauses.append(attr.is_(None))
            elif isinstance(value, (list, tuple, set, frozenset)):
                clauses.append(attr.in_(list(value)))
            else:
                clauses.append(attr == value)
        return clauses

    def _fail(self, operation: str, table: str, exc: Exception) -> StoreError:
        self.session.rollback()
        logger.error("Store %s on %s failed: %s", operation, table, exc)
        audit.error("store %s %s failed: %s", operation, table, exc)
        return StoreError(f"Could not {operation} {table}.")

    def select(
        self,
        table: str,
        filters: dict[str, Any] | None = None,
        order_by: str | None = None,
        ascending: bool = True,
    ) -> list[dict]:
        model = self._model(table)
        stmt = select(model).where(*self._where(model, filters))
        if order_by:
            column = getattr(model, order_by)
            stmt = stmt.order_by(column.asc() if ascending else column.desc())
        try:
            rows = self.session.scalars(stmt).all()
        except SQLAlchemyError as exc:
            raise self._fail("select", table, exc) from exc
        return [row_to_dict(r) for r in rows]

    def insert(self, table: str, rows: dict | list[dict]) -> list[str]:
        """Insert one or many rows in a single commit.

        Returns:
            list[str]: New row ids, in input order.
        """
        model = self._model(table)
        payload = [rows] if isinstance(rows, dict) else list(rows)
        objects = [model(**row) for row in payload]
        try:
            self.session.add_all(objects)
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("insert", table, exc) from exc
        return [obj.id for obj in objects]

    def update(self, table: str, row_id: str, values: dict[str, Any]) -> dict:
        model = self._model(table)
        try:
            res = self.session.execute(
                sa_update(model).where(model.id == row_id).values(**values).returning(model.id)
            ).first()
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("update", table, exc) from exc
        if not res:
            raise NotFoundError(f"Record not found in {table}: {row_id}")
        obj = self.session.get(model, row_id, populate_existing=True)
        return row_to_dict(obj)

    def delete(self, table: str, ids: str | Iterable[str]) -> int:
        model = self._model(table)
        id_list = _as_list(ids)
        if not id_list:
            return 0
        try:
            result = self.session.execute(sa_delete(model).where(model.id.in_(id_list)))
            self.session.commit()
        except SQLAlchemyError as exc:
            raise self._fail("delete", table, exc) from exc
        return result.rowcount or 0

    def count(self, table: str, filters: dict[str, Any] | None = None) -> int:
        model = self._model(table)
        stmt = select(func.count()).select_from(model).where(*self._where(model, filters))
        try:
            return self.session.scalar(stmt) or 0
        except SQLAlchemyError as exc:
            raise self._fail("count", table, exc) from exc

    def count_by(self, table: str, column: str, filters: dict[str, Any] | None = None) -> dict[Any, int]:
        """Row counts grouped by `column`; values with no rows are absent."""
        model = self._model(table)
        attr = getattr(model, column)
        stmt = select(attr, func.count()).where(*self._where(model, filters)).group_by(attr)
        try:
            return {_plain(key): n for key, n in self.session.execute(stmt)}
        except SQLAlchemyError as exc:
            raise self._fail("count", table, exc) from exc
