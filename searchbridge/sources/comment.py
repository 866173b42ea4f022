from typing import Any, Dict, List

from .base import SearchSource

COMMENT_STATUS = [
    {"value": "1", "label": "Approved"},
    {"value": "0", "label": "Pending"},
    {"value": "spam", "label": "Spam"},
    {"value": "trash", "label": "Trash"},
]


class CommentSource(SearchSource):
    def get_table_name(self) -> str:
        return self._table("comments")

    def get_table_id(self) -> str:
        return "comment_ID"

    def get_title_column(self) -> str:
        return "comment_author"

    def get_columns(self) -> List[Dict[str, Any]]:
        return [
            {"column": "comment_ID", "type": "integer", "title": "ID"},
            {"column": "comment_post_ID", "type": "integer", "title": "Post", "joined_by": "post"},
            {"column": "comment_author", "type": "string", "title": "Author"},
            {"column": "comment_author_email", "type": "string", "title": "Email"},
            {"column": "comment_author_url", "type": "string", "title": "URL"},
            {"column": "comment_content", "type": "string", "title": "Content", "multiline": True},
            {"column": "comment_approved", "type": "member", "title": "Approval Status", "options": COMMENT_STATUS},
            {"column": "comment_parent", "type": "integer", "title": "Parent Comment", "joined_by": "comment"},
            {"column": "user_id", "type": "integer", "title": "User", "joined_by": "user"},
        ]
