from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from searchbridge.errors import SchemaError
from searchbridge.schema.model import SchemaSource


def load_schema_source(source: str | Mapping[str, Any] | Path) -> SchemaSource:
    if isinstance(source, Path):
        try:
            text = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise SchemaError(f"Unable to read schema file '{source}': {exc}") from exc
        return load_schema_source(text)
    if isinstance(source, Mapping):
        payload = dict(source)
    else:
        try:
            payload = yaml.safe_load(source)
        except yaml.YAMLError as exc:
            raise SchemaError(f"Unable to parse schema payload: {exc}") from exc

    if not isinstance(payload, Mapping):
        raise SchemaError("Schema payload must be a mapping.")

    return parse_schema_payload(payload)


def parse_schema_payload(payload: Mapping[str, Any]) -> SchemaSource:
    normalized = dict(payload)
    if "table" not in normalized and "name" in normalized:
        normalized["table"] = normalized["name"]
    # `id` is accepted as shorthand for the key column.
    if "id" in normalized and "id_column" not in normalized:
        normalized["id_column"] = normalized.pop("id")
    if "title_column" not in normalized:
        normalized["title_column"] = normalized.get("id_column", "ID")

    columns = normalized.get("columns") or []
    if isinstance(columns, Mapping):
        # Mapping form: {column_name: {type: ..., title: ...}}
        normalized["columns"] = [
            {"column": str(name), **(meta if isinstance(meta, Mapping) else {"type": meta})}
            for name, meta in columns.items()
        ]

    try:
        return SchemaSource.model_validate(normalized)
    except ValidationError as exc:
        raise SchemaError(f"Invalid schema for source '{normalized.get('name')}': {exc}") from exc


__all__ = ["load_schema_source", "parse_schema_payload"]
