from typing import Any, Dict, List

from searchbridge.errors import SearchSourceError
from searchbridge.schema.model import SchemaSource
from .base import SearchSource


class TableSource(SearchSource):
    """A source whose table and columns come from a schema definition file."""

    @property
    def table_schema(self) -> SchemaSource:
        if self.descriptor.schema is None:
            raise SearchSourceError(f"Source '{self.name}' was registered without a schema.")
        return self.descriptor.schema

    def get_table_name(self) -> str:
        return self._table(self.table_schema.table)

    def get_table_id(self) -> str:
        return self.table_schema.id_column

    def get_title_column(self) -> str:
        return self.table_schema.title_column

    def get_columns(self) -> List[Dict[str, Any]]:
        return [
            column.model_dump(exclude={"source", "table", "table_id"}, exclude_none=True)
            for column in self.table_schema.columns
        ]
