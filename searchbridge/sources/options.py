from typing import Any, Dict, List

from .base import SearchSource


class OptionsSource(SearchSource):
    def get_table_name(self) -> str:
        return self._table("options")

    def get_table_id(self) -> str:
        return "option_id"

    def get_title_column(self) -> str:
        return "option_name"

    def get_columns(self) -> List[Dict[str, Any]]:
        return [
            {"column": "option_name", "type": "string", "title": "Name"},
            {"column": "option_value", "type": "string", "title": "Value", "multiline": True},
            {
                "column": "autoload",
                "type": "member",
                "title": "Autoload",
                "options": [{"value": "yes", "label": "Yes"}, {"value": "no", "label": "No"}],
            },
        ]
