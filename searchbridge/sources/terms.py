from typing import Any, Dict, List

from .base import SearchSource


class TermsSource(SearchSource):
    def get_table_name(self) -> str:
        return self._table("terms")

    def get_table_id(self) -> str:
        return "term_id"

    def get_title_column(self) -> str:
        return "name"

    def get_columns(self) -> List[Dict[str, Any]]:
        return [
            {"column": "term_id", "type": "integer", "title": "ID"},
            {"column": "name", "type": "string", "title": "Name"},
            {"column": "slug", "type": "string", "title": "Slug"},
        ]
