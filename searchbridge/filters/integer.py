import re
from collections.abc import Mapping
from typing import Any, Dict, Optional, TYPE_CHECKING

from searchbridge.action import Action
from searchbridge.context import ValueContext
from searchbridge.schema.model import SchemaColumn
from searchbridge.sql import MEMBERSHIP_JOIN_KINDS, Join, JoinResolver, Query, WhereAnd, WhereInteger, WhereOr
from searchbridge.sql.where import Where
from .base import FilterItem

if TYPE_CHECKING:
    from searchbridge.sources.base import SearchSource

_LEADING_INTEGER = re.compile(r"^\s*([+-]?\d+)")


def parse_int(value: Any) -> int:
    """
    Permissive integer parse: the leading integer of the value, otherwise 0.

    "12abc" is 12, "3.9" is 3 and "abc" is 0. Existing filters rely on this,
    so malformed input is never an error.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    match = _LEADING_INTEGER.match(str(value) if value is not None else "")
    return int(match.group(1)) if match else 0


def _has_value(item: Mapping[str, Any], key: str) -> bool:
    return key in item and item[key] is not None and item[key] != ""


class IntegerFilter(FilterItem):
    LOGIC = ("equals", "notequals", "greater", "less", "range", "notrange", "has", "hasnot")
    DEFAULT_LOGIC = "equals"

    def __init__(
        self,
        item: Mapping[str, Any],
        column: SchemaColumn,
        resolver: Optional[JoinResolver] = None,
    ) -> None:
        super().__init__(item, column, resolver)
        self.start_value = 0
        self.end_value = 0
        self._has_value = False
        self.join: Optional[Join] = None

        if self.logic not in ("has", "hasnot"):
            if _has_value(item, "startValue"):
                self.start_value = parse_int(item["startValue"])
                self._has_value = True

            has_end = _has_value(item, "endValue")
            if has_end:
                self.end_value = parse_int(item["endValue"])
                self._has_value = True

            if has_end or self.logic in ("range", "notrange"):
                self.end_value = max(self.end_value, self.start_value)
        elif column.joined_by is not None:
            join = self._resolver.resolve(column.joined_by, column)
            if join is not None and join.kind in MEMBERSHIP_JOIN_KINDS:
                join.set_logic(self.logic)
                self.join = join
                self._has_value = True

    def is_valid(self) -> bool:
        return self._has_value

    def get_value(self) -> int:
        return self.start_value

    def get_query(self) -> Query:
        query = Query()
        select = self.select

        if self.is_valid():
            where: Optional[Where] = None
            if self.logic == "range":
                where = WhereAnd(
                    [
                        WhereInteger(select, ">=", self.start_value),
                        WhereInteger(select, "<=", self.end_value),
                    ]
                )
            elif self.logic == "notrange":
                where = WhereOr(
                    [
                        WhereInteger(select, "<=", self.start_value),
                        WhereInteger(select, ">=", self.end_value),
                    ]
                )
            elif self.logic not in ("has", "hasnot"):
                where = WhereInteger(select, self.logic, self.start_value)

            if self.join is not None:
                query.add_join(self.join)
                query.add_select(self.join.key_select)
            elif where is not None:
                query.add_where(where)

        query.add_select(select)
        return query

    def modify_query(self, query: Query) -> Query:
        if self.join is not None:
            query.add_where(self.join.get_where())
        return query

    def matches(self, value: int) -> bool:
        if not self._has_value:
            return False
        if self.logic == "equals":
            return value == self.start_value
        if self.logic == "notequals":
            return value != self.start_value
        if self.logic == "greater":
            return value > self.start_value
        if self.logic == "less":
            return value < self.start_value
        if self.logic == "range":
            return self.start_value <= value <= self.end_value
        if self.logic == "notrange":
            return value <= self.start_value or value >= self.end_value
        # has/hasnot is decided by the join key, see get_join_context
        return False

    def get_column_data(
        self,
        column: str,
        value: Any,
        source: Optional["SearchSource"],
        action: Action,
    ) -> ValueContext:
        if self.join is not None:
            return self.get_join_context(value)

        number = parse_int(value)
        if self.matches(number):
            return self.get_matched_context(str(number))
        return self.get_unmatched_context(str(number))

    def to_json(self) -> Dict[str, Any]:
        return {
            "column": self.column.column,
            "startValue": self.start_value,
            "endValue": self.end_value,
            "logic": self.logic,
        }
