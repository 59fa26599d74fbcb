"""Row store: table-scoped select/insert/update/delete."""
from polly.store.base import Filters, Row, RowStore
from polly.store.sql import SqlRowStore

__all__ = ["Filters", "Row", "RowStore", "SqlRowStore"]
