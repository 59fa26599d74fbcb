"""SQLAlchemy-backed row store."""
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type

import structlog
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from polly.core.errors import ConflictError, StoreError
from polly.db.models import Poll, User, Vote
from polly.store.base import Filters, Row, RowStore

logger = structlog.get_logger(__name__)

TABLES: Dict[str, Type] = {
    "users": User,
    "polls": Poll,
    "votes": Vote,
}


def _is_unique_violation(error: IntegrityError) -> bool:
    message = str(error.orig if error.orig is not None else error).lower()
    return "unique" in message or "duplicate" in message


class SqlRowStore(RowStore):
    """RowStore over a SQLAlchemy session.

    Each write commits on its own; there are no transactions spanning calls.
    """

    def __init__(self, db: Session):
        self.db = db

    def _model(self, table: str) -> Type:
        try:
            return TABLES[table]
        except KeyError:
            raise StoreError(f"Unknown table: {table}")

    def _check_columns(self, model: Type, names) -> None:
        known = model.__table__.columns.keys()
        unknown = [name for name in names if name not in known]
        if unknown:
            raise StoreError(f"Unknown column(s) for {model.__tablename__}: {', '.join(unknown)}")

    def _to_row(self, model: Type, obj: Any, columns: Optional[Sequence[str]] = None) -> Row:
        names = columns or model.__table__.columns.keys()
        return {name: getattr(obj, name) for name in names}

    def _query(self, model: Type, filters: Optional[Filters]):
        filters = dict(filters or {})
        self._check_columns(model, filters.keys())
        return self.db.query(model).filter_by(**filters)

    def select(
        self,
        table: str,
        filters: Optional[Filters] = None,
        *,
        columns: Optional[Sequence[str]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Row]:
        model = self._model(table)
        if columns:
            self._check_columns(model, columns)

        query = self._query(model, filters)
        if order_by:
            self._check_columns(model, [order_by])
            column = getattr(model, order_by)
            query = query.order_by(column.desc() if descending else column.asc())
        if limit is not None:
            query = query.limit(limit)

        try:
            return [self._to_row(model, obj, columns) for obj in query.all()]
        except SQLAlchemyError as e:
            logger.error("store_select_failed", table=table, error=str(e))
            raise StoreError(str(e))

    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        model = self._model(table)
        objects = []
        for row in rows:
            self._check_columns(model, row.keys())
            objects.append(model(**row))

        try:
            self.db.add_all(objects)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_unique_violation(e):
                raise ConflictError(f"Duplicate {table} row")
            logger.error("store_insert_failed", table=table, error=str(e))
            raise StoreError(str(e.orig))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("store_insert_failed", table=table, error=str(e))
            raise StoreError(str(e))

        for obj in objects:
            self.db.refresh(obj)
        return [self._to_row(model, obj) for obj in objects]

    def update(self, table: str, patch: Mapping[str, Any], filters: Filters) -> int:
        model = self._model(table)
        if not filters:
            raise StoreError("Refusing to update without a filter")
        self._check_columns(model, patch.keys())

        try:
            count = self._query(model, filters).update(dict(patch), synchronize_session=False)
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            if _is_unique_violation(e):
                raise ConflictError(f"Duplicate {table} row")
            raise StoreError(str(e.orig))
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("store_update_failed", table=table, error=str(e))
            raise StoreError(str(e))
        return count

    def delete(self, table: str, filters: Filters) -> int:
        model = self._model(table)
        if not filters:
            raise StoreError("Refusing to delete without a filter")
        try:
            count = self._query(model, filters).delete(synchronize_session=False)
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error("store_delete_failed", table=table, error=str(e))
            raise StoreError(str(e))
        return count
