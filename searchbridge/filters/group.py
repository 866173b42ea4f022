import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional, Sequence

from searchbridge.schema.model import SchemaSource
from searchbridge.sql import JoinResolver, Query, WhereAnd, WhereOr
from searchbridge.sql.where import Where
from .base import FilterItem

logger = logging.getLogger(__name__)


class SearchFilter:
    """
    Filter items for one source. Items are OR-ed together; separate
    SearchFilters on the same source are AND-ed by the source query.
    """

    def __init__(self, source: str, items: Sequence[FilterItem]) -> None:
        self.source = source
        self.items = list(items)

    @classmethod
    def create(
        cls,
        data: Mapping[str, Any],
        schema: SchemaSource,
        resolver: Optional[JoinResolver] = None,
    ) -> "SearchFilter":
        items: List[FilterItem] = []
        for raw in data.get("items") or []:
            if not isinstance(raw, Mapping):
                continue
            column = schema.get_column(str(raw.get("column", "")))
            if column is None:
                logger.debug("Skipping filter on unknown column %r of %s", raw.get("column"), schema.name)
                continue
            item = FilterItem.create(raw, column, resolver)
            if item is not None:
                items.append(item)
        return cls(schema.name, items)

    def is_for_source(self, source_name: str) -> bool:
        return self.source == source_name

    def is_valid(self) -> bool:
        return any(item.is_valid() for item in self.items)

    def get_valid_items(self) -> List[FilterItem]:
        return [item for item in self.items if item.is_valid()]

    def get_columns(self) -> List[str]:
        columns: List[str] = []
        for item in self.items:
            if item.column.column not in columns:
                columns.append(item.column.column)
        return columns

    def get_query(self) -> Query:
        query = Query()
        branches: List[Where] = []
        pushable = True

        for item in self.items:
            item_query = item.modify_query(item.get_query())
            for column in item_query.selects:
                query.add_select(column)
            if not item.is_valid():
                continue
            for join in item_query.joins:
                query.add_join(join)
            wheres = item_query.wheres
            if not wheres:
                # Decided per row, so the group must not narrow the rows in SQL.
                pushable = False
            elif len(wheres) == 1:
                branches.append(wheres[0])
            else:
                branches.append(WhereAnd(wheres))

        if pushable and branches:
            query.add_where(branches[0] if len(branches) == 1 else WhereOr(branches))
        return query

    def to_json(self) -> Dict[str, Any]:
        return {"type": self.source, "items": [item.to_json() for item in self.items]}
