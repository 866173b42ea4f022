import pytest

from searchbridge.errors import SchemaError
from searchbridge.schema import ColumnType, SchemaSource, load_schema_source, parse_schema_payload


def test_yaml_schema_binds_source_and_table_into_columns() -> None:
    schema = load_schema_source(
        """
name: redirects
label: Redirects
table: redirection_items
id: id
title_column: url
columns:
  - column: url
    type: string
    title: Source URL
  - column: status
    type: Member
    options:
      - value: 1
        label: Enabled
      - value: 0
        label: Disabled
"""
    )

    assert schema.id_column == "id"
    url = schema.get_column("url")
    assert url.source == "redirects"
    assert url.table == "redirection_items"
    assert url.table_id == "id"

    status = schema.get_column("status")
    assert status.type == ColumnType.member
    assert status.get_option_label("1") == "Enabled"
    assert status.get_option_label("2") is None


def test_mapping_form_columns_and_defaults() -> None:
    schema = parse_schema_payload({"name": "notes", "columns": {"body": "string", "rank": {"type": "integer"}}})

    assert schema.table == "notes"
    assert schema.title_column == "ID"
    assert [(column.column, column.type) for column in schema.columns] == [
        ("body", ColumnType.string),
        ("rank", ColumnType.integer),
    ]


def test_schema_dump_round_trips_through_yaml() -> None:
    schema = load_schema_source(
        {"name": "notes", "table": "notes", "title_column": "body", "columns": [{"column": "body", "type": "string"}]}
    )

    reloaded = SchemaSource.model_validate(load_schema_source(schema.yml_dump()).model_dump())

    assert reloaded == schema


@pytest.mark.parametrize(
    "payload",
    [
        "- not\n- a mapping\n",
        "name: [unterminated",
        {"name": "bad", "columns": [{"column": "x", "type": "datetime"}]},
    ],
)
def test_invalid_schemas_raise_schema_error(payload) -> None:
    with pytest.raises(SchemaError):
        load_schema_source(payload)
