import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from searchbridge.action import Action
from searchbridge.config import settings
from searchbridge.errors import SearchSourceError
from searchbridge.evaluator import RowEvaluator, RowResult
from searchbridge.executor import QueryExecutor
from searchbridge.sources.base import SearchSource


@dataclass
class SearchResults:
    results: List[RowResult] = field(default_factory=list)
    rows_scanned: int = 0
    next_offset: Optional[int] = None

    def to_json(self) -> Dict[str, Any]:
        return {
            "results": [result.to_json() for result in self.results],
            "rows_scanned": self.rows_scanned,
            "next_offset": self.next_offset,
        }


class Search:
    def __init__(
        self,
        sources: Sequence[SearchSource],
        executor: QueryExecutor,
        action: Optional[Action] = None,
        evaluator: Optional[RowEvaluator] = None,
        dialect: Optional[str] = None,
    ) -> None:
        self._sources = list(sources)
        self._executor = executor
        self._action = action or Action()
        self._evaluator = evaluator or RowEvaluator()
        self._dialect = dialect or settings.SQL_DIALECT
        self._logger = logging.getLogger(__name__)

    def get_search_results(self, offset: int = 0, limit: Optional[int] = None) -> SearchResults:
        """
        Fetch one page of rows per source and keep the rows the filters match.

        `next_offset` is set while any source returned a full page.
        """
        limit = limit or settings.DEFAULT_PAGE_SIZE
        output = SearchResults()
        more = False

        for source in self._sources:
            if not source.filters:
                self._logger.info("Source '%s' has no usable filters, skipping", source.name)
                continue

            compiled = source.get_query(offset, limit).get_as_sql(self._dialect)
            rows = self._executor.fetch_all(compiled)
            output.rows_scanned += len(rows)
            more = more or len(rows) >= limit

            for row in rows:
                result = self._evaluator.evaluate_row(source, row, self._action)
                if result.matched:
                    output.results.append(result)

        if more:
            output.next_offset = offset + limit
        self._logger.debug(
            "Scanned %d rows, matched %d", output.rows_scanned, len(output.results)
        )
        return output

    def save_result(self, result: RowResult) -> bool:
        """Write a result's replacements, or delete its row for a delete action."""
        source = self._get_source(result.source)
        if self._action.is_delete:
            return source.delete_row(result.row_id)
        updates = result.get_updates()
        if not updates:
            return False
        return source.save(result.row_id, updates)

    def _get_source(self, name: str) -> SearchSource:
        for source in self._sources:
            if source.name == name:
                return source
        raise SearchSourceError(f"Result belongs to unknown source '{name}'.")
