"""Row store interface.

Everything the guard layer knows about persistence goes through these five
calls. Filters are equality-only: ``{"id": poll_id, "user_id": owner_id}``
means ``id = :poll_id AND user_id = :owner_id``.
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Mapping, Optional, Sequence

from polly.core.errors import NotFoundError, StoreError

Row = Dict[str, Any]
Filters = Mapping[str, Any]


class RowStore(ABC):
    @abstractmethod
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
        """Return matching rows as dicts."""

    @abstractmethod
    def insert(self, table: str, rows: Sequence[Mapping[str, Any]]) -> List[Row]:
        """Insert rows and return them with generated columns filled in.

        Raises:
            ConflictError: A uniqueness constraint rejected the write
        """

    @abstractmethod
    def update(self, table: str, patch: Mapping[str, Any], filters: Filters) -> int:
        """Apply patch to matching rows; return how many changed."""

    @abstractmethod
    def delete(self, table: str, filters: Filters) -> int:
        """Delete matching rows; return how many were removed."""

    def single(
        self,
        table: str,
        filters: Filters,
        *,
        columns: Optional[Sequence[str]] = None,
    ) -> Row:
        """Return exactly one row.

        Raises:
            NotFoundError: No row matched
            StoreError: More than one row matched
        """
        rows = self.select(table, filters, columns=columns, limit=2)
        if not rows:
            raise NotFoundError(f"No {table} row matched")
        if len(rows) > 1:
            raise StoreError(f"Expected a single {table} row, got several")
        return rows[0]
