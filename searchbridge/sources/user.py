from typing import Any, Dict, List

from .base import SearchSource


class UserSource(SearchSource):
    def get_table_name(self) -> str:
        return self._table("users")

    def get_title_column(self) -> str:
        return "user_login"

    def get_columns(self) -> List[Dict[str, Any]]:
        return [
            {"column": "ID", "type": "integer", "title": "ID"},
            {"column": "user_login", "type": "string", "title": "Login"},
            {"column": "user_nicename", "type": "string", "title": "Nicename"},
            {"column": "user_email", "type": "string", "title": "Email"},
            {"column": "user_url", "type": "string", "title": "URL"},
            {"column": "display_name", "type": "string", "title": "Display name"},
        ]
