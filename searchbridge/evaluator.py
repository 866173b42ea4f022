from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from searchbridge.action import Action
from searchbridge.context import ValueContext
from searchbridge.filters import FilterItem
from searchbridge.sources.base import SearchSource


@dataclass
class RowResult:
    source: str
    row_id: Any
    title: str
    matched: bool
    columns: List[ValueContext] = field(default_factory=list)

    def get_matched_columns(self) -> List[ValueContext]:
        return [context for context in self.columns if context.matched]

    def get_updates(self) -> Dict[str, str]:
        updates: Dict[str, str] = {}
        for context in self.get_matched_columns():
            if context.has_replacement and context.column not in updates:
                updates[context.column] = context.replacement  # type: ignore[assignment]
        return updates

    def to_json(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "row_id": self.row_id,
            "title": self.title,
            "matched": self.matched,
            "columns": [context.to_json() for context in self.columns],
        }


class RowEvaluator:
    """
    Classifies fetched rows with the same filters that built the query.

    Rows can reach the evaluator without matching, because filters that cannot
    be expressed in SQL (regex, case sensitive negation) only narrow rows here.
    """

    def evaluate(
        self,
        filter_item: FilterItem,
        source: Optional[SearchSource],
        action: Action,
        column_name: str,
        raw_value: Any,
    ) -> ValueContext:
        return filter_item.get_column_data(column_name, raw_value, source, action)

    def evaluate_row(
        self,
        source: SearchSource,
        row: Mapping[str, Any],
        action: Optional[Action] = None,
    ) -> RowResult:
        action = action or Action()
        filters = source.filters
        columns: List[ValueContext] = []
        matched = bool(filters)

        for search_filter in filters:
            group_matched = False
            for item in search_filter.items:
                column = item.column.column
                context = self.evaluate(item, source, action, column, item.get_row_value(row))
                columns.append(context)
                group_matched = group_matched or context.matched
            matched = matched and group_matched

        return RowResult(
            source=source.name,
            row_id=row.get(source.get_table_id()),
            title="" if row.get(source.get_title_column()) is None else str(row.get(source.get_title_column())),
            matched=matched,
            columns=columns,
        )
