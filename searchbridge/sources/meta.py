from abc import abstractmethod
from typing import Any, Dict, List

from .base import SearchSource


class MetaSource(SearchSource):
    """Key/value attribute table attached to an owning object."""

    def get_table_id(self) -> str:
        return "meta_id"

    def get_title_column(self) -> str:
        return "meta_key"

    def get_table_name(self) -> str:
        return self._table(self.get_meta_table())

    @abstractmethod
    def get_meta_table(self) -> str:
        ...

    @abstractmethod
    def get_meta_object_id(self) -> str:
        ...

    def get_columns(self) -> List[Dict[str, Any]]:
        return [
            {
                "column": self.get_meta_object_id(),
                "type": "integer",
                "title": "Owner ID",
                "joined_by": self.get_meta_table(),
            },
            {"column": "meta_key", "type": "string", "title": "Meta Key"},
            {"column": "meta_value", "type": "string", "title": "Meta Value", "multiline": True},
        ]


class PostMetaSource(MetaSource):
    def get_meta_table(self) -> str:
        return "postmeta"

    def get_meta_object_id(self) -> str:
        return "post_id"


class CommentMetaSource(MetaSource):
    def get_meta_table(self) -> str:
        return "commentmeta"

    def get_meta_object_id(self) -> str:
        return "comment_id"


class UserMetaSource(MetaSource):
    def get_table_id(self) -> str:
        return "umeta_id"

    def get_meta_table(self) -> str:
        return "usermeta"

    def get_meta_object_id(self) -> str:
        return "user_id"
