from .loader import load_schema_source, parse_schema_payload
from .model import ColumnOption, ColumnType, SchemaColumn, SchemaSource

__all__ = [
    "ColumnOption",
    "ColumnType",
    "SchemaColumn",
    "SchemaSource",
    "load_schema_source",
    "parse_schema_payload",
]
