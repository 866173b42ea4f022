from collections.abc import Mapping
from typing import Any, Dict, List, Optional, TYPE_CHECKING

from searchbridge.action import Action
from searchbridge.context import ValueContext
from searchbridge.schema.model import SchemaColumn
from searchbridge.sql import Join, JoinKind, JoinResolver, Query, WhereIn
from .base import FilterItem

if TYPE_CHECKING:
    from searchbridge.sources.base import SearchSource


def _normalize_values(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, (str, int)):
        raw = [raw]
    values: List[str] = []
    for value in raw:
        text = str(value).strip() if value is not None else ""
        if text and text not in values:
            values.append(text)
    return values


class MemberFilter(FilterItem):
    """Membership of a column value in a set, optionally tested through a join."""

    LOGIC = ("include", "exclude")
    DEFAULT_LOGIC = "include"

    def __init__(
        self,
        item: Mapping[str, Any],
        column: SchemaColumn,
        resolver: Optional[JoinResolver] = None,
    ) -> None:
        super().__init__(item, column, resolver)
        self.values = _normalize_values(item.get("values"))
        self.join: Optional[Join] = None

        target = self._resolver.get_target(column.joined_by)
        self._virtual = target is not None and target.kind == JoinKind.term
        if self._virtual and self.values:
            self.join = self._resolver.resolve(column.joined_by, column)
            self.join.set_logic("has" if self.logic == "include" else "hasnot", self.values)  # type: ignore[union-attr]

    @property
    def is_virtual(self) -> bool:
        """Term memberships have no column of their own on the source table."""
        return self._virtual

    def is_valid(self) -> bool:
        return len(self.values) > 0

    def get_query(self) -> Query:
        query = Query()
        if self.is_virtual:
            if self.is_valid():
                query.add_join(self.join)  # type: ignore[arg-type]
                query.add_select(self.join.key_select)  # type: ignore[union-attr]
            return query

        select = self.select
        if self.is_valid():
            query.add_where(WhereIn(select, self.values, negate=self.logic == "exclude"))
        query.add_select(select)
        return query

    def modify_query(self, query: Query) -> Query:
        if self.join is not None:
            query.add_where(self.join.get_where())
        return query

    def get_column_data(
        self,
        column: str,
        value: Any,
        source: Optional["SearchSource"],
        action: Action,
    ) -> ValueContext:
        text = "" if value is None else str(value)
        if not self.is_valid():
            return self.get_unmatched_context(text)
        if self.join is not None:
            return self.get_join_context(value)

        contained = text in self.values
        if contained == (self.logic == "include"):
            return self.get_matched_context(text)
        return self.get_unmatched_context(text)

    def to_json(self) -> Dict[str, Any]:
        return {
            "column": self.column.column,
            "logic": self.logic,
            "values": list(self.values),
        }
