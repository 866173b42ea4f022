from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence, TYPE_CHECKING

from searchbridge.action import Action
from searchbridge.context import Match, ValueContext
from searchbridge.schema.model import ColumnType, SchemaColumn
from searchbridge.sql import Join, JoinResolver, Query, SelectColumn, join_resolver

if TYPE_CHECKING:
    from searchbridge.sources.base import SearchSource


def normalize_logic(raw: Any, allowed: Sequence[str], default: str) -> str:
    if isinstance(raw, str) and raw.strip().lower() in allowed:
        return raw.strip().lower()
    return default


class FilterItem(ABC):
    """
    One criterion against one column.

    Items are immutable after construction. Malformed input never raises; it
    leaves the item invalid, contributing nothing to the query and never
    matching a row.
    """

    LOGIC: Sequence[str] = ()
    DEFAULT_LOGIC = ""
    join: Optional[Join] = None

    def __init__(
        self,
        item: Mapping[str, Any],
        column: SchemaColumn,
        resolver: Optional[JoinResolver] = None,
    ) -> None:
        self.column = column
        self.logic = normalize_logic(item.get("logic"), self.LOGIC, self.DEFAULT_LOGIC)
        self._resolver = resolver or join_resolver

    @staticmethod
    def create(
        item: Mapping[str, Any],
        column: SchemaColumn,
        resolver: Optional[JoinResolver] = None,
    ) -> Optional["FilterItem"]:
        from .integer import IntegerFilter
        from .member import MemberFilter
        from .string import StringFilter

        variants: Dict[ColumnType, type[FilterItem]] = {
            ColumnType.integer: IntegerFilter,
            ColumnType.string: StringFilter,
            ColumnType.member: MemberFilter,
        }
        variant = variants.get(column.type)
        if variant is None:
            return None
        return variant(item, column, resolver)

    @classmethod
    def from_json(
        cls,
        data: Mapping[str, Any],
        column: SchemaColumn,
        resolver: Optional[JoinResolver] = None,
    ) -> "FilterItem":
        return cls(data, column, resolver)

    @property
    def select(self) -> SelectColumn:
        return SelectColumn(self.column.table, self.column.column)

    def get_row_value(self, row: Mapping[str, Any]) -> Any:
        """The value this item tests in a fetched row: the joined key for join items, else its column."""
        if self.join is not None:
            return row.get(self.join.key_select.name)
        return row.get(self.column.column)

    def is_for_source(self, source_name: str) -> bool:
        return self.column.source == source_name

    @abstractmethod
    def is_valid(self) -> bool:
        ...

    @abstractmethod
    def get_query(self) -> Query:
        ...

    def modify_query(self, query: Query) -> Query:
        return query

    @abstractmethod
    def get_column_data(
        self,
        column: str,
        value: Any,
        source: Optional["SearchSource"],
        action: Action,
    ) -> ValueContext:
        ...

    @abstractmethod
    def to_json(self) -> Dict[str, Any]:
        ...

    def get_matched_context(
        self,
        value: str,
        matches: Optional[List[Match]] = None,
        replacement: Optional[str] = None,
    ) -> ValueContext:
        return ValueContext(
            column=self.column.column,
            value=value,
            matched=True,
            matches=list(matches) if matches is not None else [Match(0, len(value), value)],
            replacement=replacement,
        )

    def get_unmatched_context(self, value: str) -> ValueContext:
        return ValueContext(column=self.column.column, value=value, matched=False)

    def get_join_context(self, value: Any) -> ValueContext:
        text = "" if value is None else str(value)
        if self.join is not None and self.join.is_joined(value):
            return self.get_matched_context(text, matches=[] if value is None else None)
        return self.get_unmatched_context(text)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.to_json()!r})"
