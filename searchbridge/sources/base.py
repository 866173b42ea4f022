import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Type

from searchbridge.config import Settings, settings
from searchbridge.errors import SaveError, SearchSourceError
from searchbridge.executor import QueryExecutor
from searchbridge.filters import FilterItem, IntegerFilter, MemberFilter, SearchFilter
from searchbridge.schema.model import SchemaColumn, SchemaSource
from searchbridge.sql import JoinResolver, JoinTarget, Query, SelectColumn, WhereIn, join_resolver


class SourceType(str, Enum):
    core = "core"
    advanced = "advanced"
    plugin = "plugin"


@dataclass(frozen=True)
class SourceDescriptor:
    name: str
    source_class: Type["SearchSource"]
    label: str
    type: SourceType = SourceType.core
    # Set for sources whose columns come from a schema file rather than code.
    schema: Optional[SchemaSource] = None

    def to_json(self) -> Dict[str, str]:
        return {"name": self.name, "label": self.label, "type": self.type.value}


class SearchSource(ABC):
    """
    A schema-described origin of rows.

    A source owns the filters that target its columns, compiles them into one
    query and writes replacement values back through the executor.
    """

    def __init__(
        self,
        descriptor: SourceDescriptor,
        filters: Sequence[SearchFilter] = (),
        executor: Optional[QueryExecutor] = None,
        *,
        resolver: Optional[JoinResolver] = None,
        config: Optional[Settings] = None,
    ) -> None:
        self.descriptor = descriptor
        self._filters = list(filters)
        self._executor = executor
        self._resolver = resolver or join_resolver
        self._config = config or settings
        self._schema: Optional[SchemaSource] = None
        self._logger = logging.getLogger(__name__)

    @property
    def name(self) -> str:
        return self.descriptor.name

    @property
    def label(self) -> str:
        return self.descriptor.label

    @property
    def filters(self) -> List[SearchFilter]:
        return [search_filter for search_filter in self._filters if search_filter.is_valid()]

    def _table(self, name: str) -> str:
        return f"{self._config.TABLE_PREFIX}{name}"

    @abstractmethod
    def get_table_name(self) -> str:
        ...

    def get_table_id(self) -> str:
        return "ID"

    @abstractmethod
    def get_title_column(self) -> str:
        ...

    @abstractmethod
    def get_columns(self) -> List[Dict[str, Any]]:
        ...

    def get_schema(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "label": self.label,
            "table": self.get_table_name(),
            "id_column": self.get_table_id(),
            "title_column": self.get_title_column(),
            "columns": self.get_columns(),
        }

    def get_schema_source(self) -> SchemaSource:
        if self._schema is None:
            self._schema = SchemaSource.model_validate(self.get_schema())
        return self._schema

    def get_query(self, offset: int = 0, limit: Optional[int] = None) -> Query:
        table = self.get_table_name()
        id_column = SelectColumn(table, self.get_table_id())

        query = Query().add_from(table)
        query.add_select(id_column)
        query.add_select(SelectColumn(table, self.get_title_column()))
        for search_filter in self.filters:
            query.add_query(search_filter.get_query())

        query.set_order(id_column)
        if limit is not None:
            query.set_paging(offset, limit)
        return query

    def get_filter_preload(self, column: SchemaColumn, filter_item: FilterItem) -> List[Dict[str, str]]:
        if isinstance(filter_item, MemberFilter):
            values = filter_item.values or [option.value for option in column.options or []]
        elif isinstance(filter_item, IntegerFilter) and filter_item.is_valid():
            values = [str(filter_item.get_value())]
        else:
            return []

        values = values[: self._config.PRELOAD_LIMIT]
        labels: Dict[str, str] = {}
        target = self._resolver.get_target(column.joined_by)
        if target is not None and values and self._executor is not None:
            labels = self._lookup_labels(target, values)

        return [
            {"value": value, "label": labels.get(value) or column.get_option_label(value) or value}
            for value in values
        ]

    def _lookup_labels(self, target: JoinTarget, values: Sequence[str]) -> Dict[str, str]:
        key = SelectColumn(target.table, target.key)
        query = Query().add_from(target.table).add_select(key).add_select(SelectColumn(target.table, target.title))
        query.add_where(WhereIn(key, [int(value) if value.isdigit() else value for value in values]))
        rows = self._require_executor().fetch_all(query.get_as_sql(self._config.SQL_DIALECT))
        return {str(row[target.key]): str(row[target.title]) for row in rows}

    def _require_executor(self) -> QueryExecutor:
        if self._executor is None:
            raise SearchSourceError(f"Source '{self.name}' has no query executor.")
        return self._executor

    def get_columns_to_change(self, updates: Mapping[str, Any]) -> Dict[str, Any]:
        schema = self.get_schema_source()
        changes: Dict[str, Any] = {}
        for column, value in updates.items():
            if column == self.get_table_id() or schema.get_column(column) is None:
                self._logger.warning("Ignoring change to unknown column %s.%s", self.name, column)
                continue
            changes[column] = value
        return changes

    def log_save(self, kind: str, data: Any) -> None:
        self._logger.info("%s %s: %s", "Saving" if self._config.CAN_SAVE else "Dry run", kind, data)

    def save(self, row_id: Any, updates: Mapping[str, Any]) -> bool:
        changes = self.get_columns_to_change(updates)
        if not changes:
            return False

        self.log_save(self.name, {"row": row_id, **changes})
        if self._config.CAN_SAVE:
            updated = self._require_executor().update(self.get_table_name(), self.get_table_id(), row_id, changes)
            if updated == 0:
                self._logger.warning("No %s row %s to update", self.name, row_id)
        return True

    def delete_row(self, row_id: Any) -> bool:
        self.log_save(f"delete {self.name}", row_id)
        if not self._config.CAN_SAVE:
            return True

        deleted = self._require_executor().delete(self.get_table_name(), self.get_table_id(), row_id)
        if not deleted:
            raise SaveError("searchbridge_delete", f"Failed to delete {self.name} row {row_id}")
        return True
