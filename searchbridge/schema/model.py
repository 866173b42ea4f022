from collections.abc import Mapping
from enum import Enum
from typing import Any, List, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ColumnType(str, Enum):
    integer = "integer"
    string = "string"
    member = "member"


class ColumnOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str

    @field_validator("value", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> str:
        return str(value)


class SchemaColumn(BaseModel):
    """A searchable column. `source`, `table` and `table_id` are bound by the owning SchemaSource."""

    model_config = ConfigDict(frozen=True)

    column: str
    type: ColumnType
    title: str = ""
    joined_by: Optional[str] = None
    options: Optional[List[ColumnOption]] = None
    multiline: bool = False
    source: str = ""
    table: str = ""
    table_id: str = "ID"

    @field_validator("type", mode="before")
    @classmethod
    def _normalize_type(cls, value: Any) -> Any:
        if isinstance(value, str):
            return value.strip().lower()
        return value

    def get_option_label(self, value: str) -> Optional[str]:
        for option in self.options or []:
            if option.value == value:
                return option.label
        return None


class SchemaSource(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    label: str = ""
    table: str
    id_column: str = "ID"
    title_column: str
    columns: List[SchemaColumn] = Field(default_factory=list)

    @model_validator(mode="before")
    @classmethod
    def _bind_columns(cls, data: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        payload = dict(data)
        bound = []
        for column in payload.get("columns") or []:
            raw = column.model_dump() if isinstance(column, SchemaColumn) else dict(column)
            raw["source"] = payload.get("name", "")
            raw["table"] = payload.get("table", "")
            raw["table_id"] = payload.get("id_column", "ID")
            bound.append(raw)
        payload["columns"] = bound
        return payload

    def get_column(self, name: str) -> Optional[SchemaColumn]:
        for column in self.columns:
            if column.column == name:
                return column
        return None

    def get_column_names(self) -> List[str]:
        return [column.column for column in self.columns]

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def yml_dump(self) -> str:
        """Dump the schema to a YAML string."""

        return yaml.safe_dump(self.to_json(), sort_keys=False)
