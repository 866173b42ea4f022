from pathlib import Path
from typing import List

from searchbridge.config import Settings
from searchbridge.schema import load_schema_source
from searchbridge.sources import (
    PostSource,
    SchemaFileProvider,
    SourceDescriptor,
    SourceManager,
    SourceType,
    TableSource,
)

WIDGETS_SCHEMA = """
name: widgets
label: Widgets
table: widgets
id: widget_id
title_column: widget_name
columns:
  widget_name:
    type: string
    title: Name
  size:
    type: integer
    title: Size
"""


def _build_settings(**overrides) -> Settings:
    values = {"TABLE_PREFIX": "", "CAN_SAVE": True}
    values.update(overrides)
    return Settings(**values)


class _StaticProvider:
    def __init__(self, descriptors: List[SourceDescriptor]) -> None:
        self._descriptors = descriptors

    def get_sources(self) -> List[SourceDescriptor]:
        return list(self._descriptors)


def _build_widgets_descriptor(source_type: SourceType = SourceType.core) -> SourceDescriptor:
    schema = load_schema_source(WIDGETS_SCHEMA)
    return SourceDescriptor("widgets", TableSource, "Widgets", source_type, schema=schema)


def test_builtin_sources_are_listed_in_order() -> None:
    manager = SourceManager(config=_build_settings())

    assert [d.name for d in manager.list_core()] == ["posts", "comment", "user", "options"]
    assert [d.name for d in manager.list_advanced()] == ["post-meta", "comment-meta", "user-meta", "terms"]
    assert manager.list_plugin() == []


def test_duplicate_names_keep_first_registration() -> None:
    duplicate = SourceDescriptor("posts", PostSource, "Shadow posts", SourceType.advanced)
    manager = SourceManager(
        transforms={"advanced": [lambda descriptors: descriptors + [duplicate]]},
        config=_build_settings(),
    )

    names = manager.get_all_source_names()

    assert names.count("posts") == 1
    assert manager.get_descriptor("posts").label == "Posts (core & custom)"


def test_transforms_run_in_order_per_category() -> None:
    manager = SourceManager(
        transforms={
            "core": [
                lambda descriptors: [d for d in descriptors if d.name != "options"],
                lambda descriptors: list(reversed(descriptors)),
            ]
        },
        config=_build_settings(),
    )

    assert [d.name for d in manager.list_core()] == ["user", "comment", "posts"]


def test_plugin_sources_are_forced_to_plugin_type() -> None:
    manager = SourceManager(providers=[_StaticProvider([_build_widgets_descriptor()])], config=_build_settings())

    (plugin,) = manager.list_plugin()
    assert plugin.type == SourceType.plugin

    groups = manager.get_all_grouped()
    assert [group["name"] for group in groups] == ["core", "advanced", "plugin"]
    assert groups[2]["label"] == "Plugins"
    assert groups[2]["sources"] == [{"name": "widgets", "label": "Widgets", "type": "plugin"}]


def test_schema_file_provider_loads_yaml_and_skips_broken_files(tmp_path: Path) -> None:
    good = tmp_path / "widgets.yml"
    good.write_text(WIDGETS_SCHEMA, encoding="utf-8")
    broken = tmp_path / "broken.yml"
    broken.write_text("- just\n- a list\n", encoding="utf-8")

    manager = SourceManager(
        providers=[SchemaFileProvider([good, broken, tmp_path / "missing.yml"])],
        config=_build_settings(),
    )

    assert [d.name for d in manager.list_plugin()] == ["widgets"]
    schema = manager.get_source_schema("widgets")
    assert schema.id_column == "widget_id"
    assert schema.get_column_names() == ["widget_name", "size"]


def test_instantiate_unknown_source_returns_none() -> None:
    manager = SourceManager(config=_build_settings())

    assert manager.instantiate("nope") is None
    assert [source.name for source in manager.get(["posts", "nope", "user"])] == ["posts", "user"]


def test_instantiate_keeps_only_the_sources_own_filters() -> None:
    manager = SourceManager(config=_build_settings())
    filters = manager.create_filters(
        [
            {"type": "posts", "items": [{"column": "post_title", "value": "hello", "logic": "contains"}]},
            {"type": "comment", "items": [{"column": "comment_content", "value": "spam", "logic": "contains"}]},
        ]
    )

    posts = manager.instantiate("posts", filters)

    assert len(filters) == 2
    assert [search_filter.source for search_filter in posts.filters] == ["posts"]


def test_create_filters_drops_unknown_sources_and_invalid_groups() -> None:
    manager = SourceManager(config=_build_settings())

    filters = manager.create_filters(
        [
            {"type": "nope", "items": [{"column": "x", "value": "y"}]},
            {"type": "posts", "items": [{"column": "post_title", "value": ""}]},
            {"type": "posts", "items": [{"column": "not_a_column", "value": "y"}]},
            {"type": "posts", "items": [{"column": "comment_count", "startValue": 2, "logic": "greater"}]},
        ]
    )

    assert [f.to_json() for f in filters] == [
        {
            "type": "posts",
            "items": [{"column": "comment_count", "startValue": 2, "endValue": 0, "logic": "greater"}],
        }
    ]


def test_schema_for_selected_and_all_sources() -> None:
    manager = SourceManager(config=_build_settings())

    (user,) = manager.get_schema(["user"])
    assert user.name == "user"
    assert user.table == "users"
    assert len(manager.get_schema()) == 8
    assert manager.get_source_schema("nope") is None


def test_table_prefix_is_applied_to_source_tables() -> None:
    manager = SourceManager(config=_build_settings(TABLE_PREFIX="wp_"))

    assert manager.get_source_schema("posts").table == "wp_posts"
    assert manager.get_source_schema("post-meta").table == "wp_postmeta"


def test_member_preload_lists_all_options_without_values() -> None:
    manager = SourceManager(config=_build_settings())

    preload = manager.get_schema_preload("posts", {"column": "post_status"})

    assert preload
    assert {"value": "draft", "label": "Draft"} in preload


def test_member_preload_lists_only_selected_values() -> None:
    manager = SourceManager(config=_build_settings())

    preload = manager.get_schema_preload("posts", {"column": "post_status", "values": ["draft", "mystery"]})

    assert preload == [{"value": "draft", "label": "Draft"}, {"value": "mystery", "label": "mystery"}]


def test_integer_preload_uses_value_when_no_executor() -> None:
    manager = SourceManager(config=_build_settings())

    preload = manager.get_schema_preload("posts", {"column": "post_author", "logic": "equals", "startValue": 1})

    assert preload == [{"value": "1", "label": "1"}]


def test_preload_is_empty_for_ineligible_requests() -> None:
    manager = SourceManager(config=_build_settings())

    assert manager.get_schema_preload("posts", {"column": "post_author", "logic": "range", "startValue": 1}) == []
    assert manager.get_schema_preload("posts", {"column": "post_author", "logic": "equals"}) == []
    assert manager.get_schema_preload("posts", {"column": "post_title", "value": "x"}) == []
    assert manager.get_schema_preload("posts", {"column": "missing"}) == []
    assert manager.get_schema_preload("posts", {}) == []
    assert manager.get_schema_preload("nope", {"column": "post_status"}) == []
