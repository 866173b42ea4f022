import logging
from typing import Any, Dict, List, Mapping, Protocol

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from searchbridge.errors import SaveError, SearchSourceError
from searchbridge.sql.render import CompiledQuery


class QueryExecutor(Protocol):
    def fetch_all(self, query: CompiledQuery) -> List[Dict[str, Any]]:
        ...

    def update(self, table: str, key_column: str, row_id: Any, values: Mapping[str, Any]) -> int:
        ...

    def delete(self, table: str, key_column: str, row_id: Any) -> int:
        ...


def _build_connect_args(database_uri: str) -> Dict[str, Any]:
    """Return driver-specific connect arguments."""
    connect_args: Dict[str, Any] = {}
    if database_uri.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return connect_args


class SqlAlchemyQueryExecutor:
    """Runs compiled queries and row writes on a SQLAlchemy engine."""

    def __init__(self, engine: Engine) -> None:
        self._engine = engine
        self._logger = logging.getLogger(__name__)

    @classmethod
    def from_uri(cls, uri: str) -> "SqlAlchemyQueryExecutor":
        return cls(sa.create_engine(uri, future=True, pool_pre_ping=True, connect_args=_build_connect_args(uri)))

    @property
    def engine(self) -> Engine:
        return self._engine

    def fetch_all(self, query: CompiledQuery) -> List[Dict[str, Any]]:
        self._logger.debug("Executing %s with %s", query.sql, query.params)
        try:
            with self._engine.connect() as connection:
                result = connection.execute(sa.text(query.sql), query.params)
                return [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            raise SearchSourceError(f"Query failed: {exc}") from exc

    def update(self, table: str, key_column: str, row_id: Any, values: Mapping[str, Any]) -> int:
        target = sa.table(table, sa.column(key_column), *[sa.column(name) for name in values if name != key_column])
        statement = sa.update(target).where(target.c[key_column] == row_id).values(dict(values))
        try:
            with self._engine.begin() as connection:
                return connection.execute(statement).rowcount
        except SQLAlchemyError as exc:
            self._logger.error("Update of %s row %s failed: %s", table, row_id, exc)
            raise SaveError("searchbridge_save", f"Failed to update {table}: {exc}") from exc

    def delete(self, table: str, key_column: str, row_id: Any) -> int:
        target = sa.table(table, sa.column(key_column))
        statement = sa.delete(target).where(target.c[key_column] == row_id)
        try:
            with self._engine.begin() as connection:
                return connection.execute(statement).rowcount
        except SQLAlchemyError as exc:
            self._logger.error("Delete of %s row %s failed: %s", table, row_id, exc)
            raise SaveError("searchbridge_delete", f"Failed to delete from {table}: {exc}") from exc
