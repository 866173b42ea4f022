from typing import Any, Dict, List

from .base import SearchSource

POST_STATUS = [
    {"value": "publish", "label": "Published"},
    {"value": "draft", "label": "Draft"},
    {"value": "pending", "label": "Pending"},
    {"value": "private", "label": "Private"},
    {"value": "future", "label": "Scheduled"},
    {"value": "trash", "label": "Trash"},
]

POST_TYPES = [
    {"value": "post", "label": "Post"},
    {"value": "page", "label": "Page"},
    {"value": "attachment", "label": "Media"},
]


class PostSource(SearchSource):
    def get_table_name(self) -> str:
        return self._table("posts")

    def get_title_column(self) -> str:
        return "post_title"

    def get_columns(self) -> List[Dict[str, Any]]:
        return [
            {"column": "ID", "type": "integer", "title": "ID"},
            {"column": "post_title", "type": "string", "title": "Title"},
            {"column": "post_name", "type": "string", "title": "Slug"},
            {"column": "post_content", "type": "string", "title": "Content", "multiline": True},
            {"column": "post_excerpt", "type": "string", "title": "Excerpt", "multiline": True},
            {"column": "post_author", "type": "integer", "title": "Author", "joined_by": "user"},
            {"column": "post_parent", "type": "integer", "title": "Parent", "joined_by": "post"},
            {"column": "comment_count", "type": "integer", "title": "Comment count"},
            {"column": "post_status", "type": "member", "title": "Status", "options": POST_STATUS},
            {"column": "post_type", "type": "member", "title": "Post Type", "options": POST_TYPES},
            {"column": "category", "type": "member", "title": "Categories", "joined_by": "term"},
            {"column": "post_tag", "type": "member", "title": "Tags", "joined_by": "term"},
        ]
